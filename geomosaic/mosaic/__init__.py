# -*- coding: utf-8 -*-
"""
Mosaic Module - Compose georeferenced rasters into a tiling-ready canvas.

Per-image reprojection, antimeridian wraparound, compositing, output box
alignment and per-mode tile-generator configuration, orchestrated by
``build_mosaic``.

Dependencies
------------
numpy
scipy

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

from geomosaic.mosaic.options import (
    MosaicOptions,
    ProjectionSettings,
    DatumSettings,
)
from geomosaic.mosaic.normalize import NormalizeBounds, compute_normalize_bounds
from geomosaic.mosaic.projection import (
    OutputProjectionSpec,
    build_output_spec,
    compute_resolution,
    load_image_georeferences,
    output_georef,
)
from geomosaic.mosaic.reproject import (
    InputImageDescriptor,
    PlacedImage,
    ReprojectSettings,
    is_global,
    passthrough_image,
    reproject_image,
)
from geomosaic.mosaic.wraparound import insert_with_wraparound, wraparound_offsets
from geomosaic.mosaic.bbox import align_bbox, resolve_bbox, total_bbox
from geomosaic.mosaic.composite import CompositeCanvas
from geomosaic.mosaic.modes import (
    LonLatBox,
    ModeConfig,
    data_bbox,
    derive_mode_config,
    longlat_bbox,
)
from geomosaic.mosaic.pipeline import MosaicProduct, build_mosaic

__all__ = [
    'MosaicOptions',
    'ProjectionSettings',
    'DatumSettings',
    'NormalizeBounds',
    'compute_normalize_bounds',
    'OutputProjectionSpec',
    'build_output_spec',
    'compute_resolution',
    'load_image_georeferences',
    'output_georef',
    'InputImageDescriptor',
    'PlacedImage',
    'ReprojectSettings',
    'is_global',
    'passthrough_image',
    'reproject_image',
    'insert_with_wraparound',
    'wraparound_offsets',
    'align_bbox',
    'resolve_bbox',
    'total_bbox',
    'CompositeCanvas',
    'LonLatBox',
    'ModeConfig',
    'data_bbox',
    'derive_mode_config',
    'longlat_bbox',
    'MosaicProduct',
    'build_mosaic',
]
