# -*- coding: utf-8 -*-
"""
Mosaic Pipeline - Assemble georeferenced inputs into one tiling-ready canvas.

Orchestrates the whole run: option validation, the normalization pre-pass,
input georeferences and output resolution, per-image reprojection (in
parallel when ``max_workers > 1``), wraparound insertion into the composite
canvas, output box resolution, canvas preparation and the mode
configuration. The result is a ``MosaicProduct`` handed to the external
tile-pyramid generator.

A run in mode ``NONE`` or with projection ``NONE`` skips all projection work
and passes its single input straight through.

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

# Standard library
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Tuple

# Third-party
import numpy as np

# geomosaic internal
from geomosaic.geometry import BBox
from geomosaic.IO.base import ImageSource
from geomosaic.IO.geotiff import GeoTIFFSource
from geomosaic.mosaic.bbox import resolve_bbox
from geomosaic.mosaic.composite import CompositeCanvas
from geomosaic.mosaic.modes import ModeConfig, data_bbox, derive_mode_config
from geomosaic.mosaic.normalize import channel_dtype, compute_normalize_bounds
from geomosaic.mosaic.options import MosaicOptions
from geomosaic.mosaic.projection import (
    OutputProjectionSpec,
    build_output_spec,
    load_image_georeferences,
)
from geomosaic.mosaic.reproject import (
    INTERPOLATION_ORDERS,
    InputImageDescriptor,
    PlacedImage,
    ReprojectSettings,
    passthrough_image,
    reproject_image,
)
from geomosaic.mosaic.wraparound import insert_with_wraparound
from geomosaic.vocabulary import BlendMode

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

# Share of overall progress reported while reprojecting; the rest covers
# canvas preparation
_REPROJECT_SHARE = 0.5


class MosaicProduct:
    """Hand-off from the compositor to the tile-pyramid generator.

    Attributes
    ----------
    data : np.ndarray
        Prepared canvas, ``(bands, rows, cols)``, alpha last.
    bbox : BBox
        Output box the canvas covers, in output pixels.
    data_bbox : BBox
        Extent of the input data within ``data``.
    mode_config : ModeConfig
        Per-mode configuration.
    output : OutputProjectionSpec or None
        Output projection; None on the pass-through path.
    tile_size : int
        Tile edge in pixels.
    file_type : str
        Tile file type.
    output_name : str
        Name of the tile pyramid.
    """

    def __init__(
        self,
        data: np.ndarray,
        bbox: BBox,
        data_bbox: BBox,
        mode_config: ModeConfig,
        output: Optional[OutputProjectionSpec],
        tile_size: int,
        file_type: str,
        output_name: str,
    ) -> None:
        self.data = data
        self.bbox = bbox
        self.data_bbox = data_bbox
        self.mode_config = mode_config
        self.output = output
        self.tile_size = tile_size
        self.file_type = file_type
        self.output_name = output_name

    @property
    def shape(self) -> tuple:
        """Shape of the prepared canvas."""
        return self.data.shape

    def __repr__(self) -> str:
        return (
            f"MosaicProduct(name='{self.output_name}', bbox={self.bbox}, "
            f"data_bbox={self.data_bbox}, mode={self.mode_config.mode.value})"
        )


def open_sources(inputs) -> Tuple[List[ImageSource], List[ImageSource]]:
    """Open every input.

    Returns
    -------
    Tuple[List[ImageSource], List[ImageSource]]
        All sources in input order, and the subset opened here (from
        paths) that the caller must close. When any input fails to open,
        the ones already opened here are closed before the error
        propagates.
    """
    sources = []
    owned = []
    try:
        for item in inputs:
            if isinstance(item, ImageSource):
                sources.append(item)
            else:
                source = GeoTIFFSource(Path(item))
                sources.append(source)
                owned.append(source)
    except Exception:
        for source in owned:
            source.close()
        raise
    return sources, owned


def _scaled(callback: Optional[ProgressCallback], base: float, scale: float):
    if callback is None:
        return None
    return lambda f, _b=base, _s=scale: callback(_b + f * _s)


def _descriptor(source, georef, options) -> InputImageDescriptor:
    return InputImageDescriptor(
        source=source,
        georef=georef,
        nodata=options.nodata,
        pixel_scale=options.pixel_scale,
        pixel_offset=options.pixel_offset,
    )


def _build_passthrough(
    source: ImageSource,
    options: MosaicOptions,
    settings: ReprojectSettings,
    progress_callback: Optional[ProgressCallback],
) -> MosaicProduct:
    placed = passthrough_image(_descriptor(source, None, options), settings)
    canvas = CompositeCanvas(bands=placed.image.shape[0], dtype=settings.dtype)
    canvas.insert(placed.image, placed.x, placed.y)
    canvas.prepare(placed.bbox, progress_callback)

    logger.info("Generating %s overlay...", options.mode.value)
    return MosaicProduct(
        data=canvas.data,
        bbox=placed.bbox,
        data_bbox=data_bbox(canvas.bbox, placed.bbox),
        mode_config=derive_mode_config(options.mode, placed.bbox, None, options),
        output=None,
        tile_size=options.tile_size,
        file_type=options.file_type,
        output_name=options.output_name,
    )


def _reproject_all(
    descriptors: List[InputImageDescriptor],
    output: OutputProjectionSpec,
    settings: ReprojectSettings,
    canvas: CompositeCanvas,
    max_workers: int,
    progress_callback: Optional[ProgressCallback],
) -> None:
    """Reproject every input and insert it, in input order."""
    total = len(descriptors)

    def _insert(i: int, placed: PlacedImage) -> None:
        count = insert_with_wraparound(
            canvas, placed, output.total_resolution, output.xres
        )
        logger.debug("%s placed at %s (%d insertions)",
                     descriptors[i].name, placed.bbox, count)
        if progress_callback is not None:
            progress_callback((i + 1) / total)

    if max_workers > 1 and total > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            placements = pool.map(
                lambda d: reproject_image(d, output, settings), descriptors
            )
            for i, placed in enumerate(placements):
                _insert(i, placed)
    else:
        for i, descriptor in enumerate(descriptors):
            _insert(i, reproject_image(descriptor, output, settings))


def build_mosaic(
    options: MosaicOptions,
    progress_callback: Optional[ProgressCallback] = None,
) -> MosaicProduct:
    """
    Run the mosaic compositor.

    Parameters
    ----------
    options : MosaicOptions
        Run configuration; validated here.
    progress_callback : callable, optional
        Called with the overall completed fraction in ``[0, 1]``.

    Returns
    -------
    MosaicProduct

    Raises
    ------
    ValidationError
        If the options are inconsistent or the output grid is invalid.
        Raised before any reprojection work.
    GeometryError
        If an image or the total output box is empty.
    GeolocationError
        If a coordinate transform fails.

    Examples
    --------
    >>> opts = MosaicOptions(inputs=['west.tif', 'east.tif'],
    ...                      mode=MosaicMode.KML, max_workers=4)
    >>> product = build_mosaic(opts, progress_callback=print)
    >>> product.mode_config.longlat_bbox
    """
    options.validate()
    sources, owned = open_sources(options.inputs)
    try:
        dtype = channel_dtype(options.channel_type, sources[0].get_dtype())
        bounds = None
        if options.normalize:
            bounds = compute_normalize_bounds(sources, options.nodata, dtype)
        settings = ReprojectSettings(
            dtype=dtype,
            normalize=bounds,
            order=INTERPOLATION_ORDERS[options.interpolation],
        )

        if not options.georeferenced:
            return _build_passthrough(sources[0], options, settings, progress_callback)

        georefs, total_resolution = load_image_georeferences(sources, options)
        output = build_output_spec(
            options.mode, total_resolution, options.aspect_ratio, georefs[0].crs
        )
        descriptors = [
            _descriptor(source, georef, options)
            for source, georef in zip(sources, georefs)
        ]

        blend_mode = BlendMode.MULTIBAND if options.multiband else BlendMode.DRAFT
        canvas = CompositeCanvas(dtype=dtype, blend_mode=blend_mode)
        _reproject_all(
            descriptors, output, settings, canvas, options.max_workers,
            _scaled(progress_callback, 0.0, _REPROJECT_SHARE),
        )

        bbox = resolve_bbox(canvas.bbox, output, options.mode)
        canvas.set_draft_mode(not options.multiband)
        canvas.prepare(
            bbox, _scaled(progress_callback, _REPROJECT_SHARE, 1.0 - _REPROJECT_SHARE)
        )

        mode_config = derive_mode_config(options.mode, bbox, output, options)
        logger.info("Generating %s overlay...", options.mode.value)
        return MosaicProduct(
            data=canvas.data,
            bbox=bbox,
            data_bbox=data_bbox(canvas.bbox, bbox),
            mode_config=mode_config,
            output=output,
            tile_size=options.tile_size,
            file_type=options.file_type,
            output_name=options.output_name,
        )
    finally:
        for source in owned:
            source.close()
