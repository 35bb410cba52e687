# -*- coding: utf-8 -*-
"""
Georef Module - Pixel georeferences and coordinate transforms.

Wraps rasterio ``Affine`` pixel transforms and pyproj coordinate reference
systems behind the ``GeoReference`` interface, and provides ``GeoTransform``
for mapping pixels between an input georeference and the output grid.

Dependencies
------------
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

from geomosaic.georef.base import GeoReference
from geomosaic.georef.affine import AffineGeoReference, projection_terms
from geomosaic.georef.transform import GeoTransform, snap_to_grid
from geomosaic.georef.overrides import make_input_georef

__all__ = [
    'GeoReference',
    'AffineGeoReference',
    'projection_terms',
    'GeoTransform',
    'snap_to_grid',
    'make_input_georef',
]
