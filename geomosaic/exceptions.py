# -*- coding: utf-8 -*-
"""
geomosaic Exception Hierarchy - Domain-specific exceptions for mosaic runs.

Provides a small exception hierarchy that lets callers (e.g., a tile
generator front end) catch mosaic errors distinctly from Python built-in
exceptions. All geomosaic exceptions subclass both ``MosaicError`` and the
appropriate built-in exception for backward compatibility.

Author
------
geoint.org contributors

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-10-18

Modified
--------
2026-10-18
"""


class MosaicError(Exception):
    """Base exception for all geomosaic errors."""


class ValidationError(MosaicError, ValueError):
    """Invalid options or output projection configuration.

    Raised before any reprojection work begins, for inconsistent option
    combinations, missing required values, and non-positive sizes.
    """


class GeometryError(MosaicError, RuntimeError):
    """Georeference math produced an empty region.

    Raised for an empty placement bbox, an empty total bbox, or an empty
    prepared canvas. Always fatal: there is no useful partial mosaic.
    """


class GeolocationError(MosaicError, RuntimeError):
    """Coordinate transformation failure.

    Raised for non-finite transforms and unsupported transform geometry
    (e.g. a rotated transform that needs the seam shift correction).
    """


class DependencyError(MosaicError, ImportError):
    """Missing optional dependency required for a specific module.

    Raised when a module requires an optional package (rasterio, pyproj)
    that is not installed.
    """
