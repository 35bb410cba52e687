# -*- coding: utf-8 -*-
"""
IO Module - Image source adapters for mosaic inputs.

Provides the ``ImageSource`` contract plus in-memory and GeoTIFF adapters.
Encoding and tile output belong to the downstream tile generator.

Dependencies
------------
rasterio (GeoTIFFSource only)

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

from geomosaic.IO.base import ImageSource
from geomosaic.IO.array import ArraySource
from geomosaic.IO.geotiff import GeoTIFFSource

__all__ = [
    'ImageSource',
    'ArraySource',
    'GeoTIFFSource',
]
