# -*- coding: utf-8 -*-
"""
Vocabulary - Canonical enums for the geomosaic package.

Defines the single source of truth for controlled vocabularies used across
the mosaic pipeline: output modes, working channel types, blend policies,
projection overrides, and datum overrides.

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

from enum import Enum


class MosaicMode(Enum):
    """Output tile-pyramid flavors.

    Each value selects an output georeference layout and the auxiliary
    configuration handed to the tile generator.
    """

    NONE = "none"
    KML = "kml"
    TMS = "tms"
    UNIVIEW = "uniview"
    GMAP = "gmap"
    CELESTIA = "celestia"
    GIGAPAN = "gigapan"


class ChannelType(Enum):
    """Working channel type of the composited pixels.

    ``NONE`` keeps the channel type of the first input image.
    """

    NONE = "none"
    UINT8 = "uint8"
    UINT16 = "uint16"
    INT16 = "int16"
    FLOAT = "float32"


class BlendMode(Enum):
    """How overlapping insertions are combined when a canvas is prepared."""

    DRAFT = "draft"
    MULTIBAND = "multiband"


class Interpolation(Enum):
    """Resampling kernel used when warping inputs into the output grid."""

    NEAREST = "nearest"
    BILINEAR = "bilinear"
    BICUBIC = "bicubic"


class ProjectionType(Enum):
    """Projection overrides applied to input georeferences.

    ``DEFAULT`` keeps each input's own projection. ``NONE`` disables
    georeferencing entirely (single-image pass-through).
    """

    DEFAULT = "default"
    NONE = "none"
    SINUSOIDAL = "sinusoidal"
    MERCATOR = "mercator"
    TRANSVERSE_MERCATOR = "transverse_mercator"
    ORTHOGRAPHIC = "orthographic"
    STEREOGRAPHIC = "stereographic"
    LAMBERT_AZIMUTHAL = "lambert_azimuthal"
    LAMBERT_CONFORMAL_CONIC = "lambert_conformal_conic"
    UTM = "utm"
    PLATE_CARREE = "plate_carree"


class DatumOverride(Enum):
    """Datum overrides applied to input georeferences."""

    NONE = "none"
    WGS84 = "wgs84"
    LUNAR = "lunar"
    MARS = "mars"
    SPHERE = "sphere"
