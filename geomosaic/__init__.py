# -*- coding: utf-8 -*-
"""
geomosaic - Seamless virtual mosaics of georeferenced rasters.

Reprojects independently georeferenced images into a common output map
projection, composites them across the antimeridian, and hands a canvas
plus aligned bounding box to a tile-pyramid generator (KML, TMS, Uniview,
Google Maps, Celestia, Gigapan).

Dependencies
------------
numpy
scipy
rasterio
pyproj

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

__version__ = "0.1.0"

from geomosaic.exceptions import (
    MosaicError,
    ValidationError,
    GeometryError,
    GeolocationError,
    DependencyError,
)
from geomosaic.vocabulary import (
    MosaicMode,
    ChannelType,
    BlendMode,
    Interpolation,
    ProjectionType,
    DatumOverride,
)
from geomosaic.geometry import BBox
from geomosaic.mosaic import (
    MosaicOptions,
    MosaicProduct,
    build_mosaic,
)

__all__ = [
    'MosaicError',
    'ValidationError',
    'GeometryError',
    'GeolocationError',
    'DependencyError',
    'MosaicMode',
    'ChannelType',
    'BlendMode',
    'Interpolation',
    'ProjectionType',
    'DatumOverride',
    'BBox',
    'MosaicOptions',
    'MosaicProduct',
    'build_mosaic',
]
