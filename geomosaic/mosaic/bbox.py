# -*- coding: utf-8 -*-
"""
Canvas Bounding Box - Crop the composited extent and align it for tiling.

``total_bbox`` crops the accumulated canvas extent to the primary output
grid. ``align_bbox`` grows that box into a power-of-two square aligned to
its own size, which is what quadtree tile pyramids addressed from the
origin (KML regions) need. ``resolve_bbox`` applies both according to the
output mode.

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
from typing import TYPE_CHECKING

# geomosaic internal
from geomosaic.exceptions import GeometryError
from geomosaic.geometry import BBox
from geomosaic.vocabulary import MosaicMode

if TYPE_CHECKING:
    from geomosaic.mosaic.projection import OutputProjectionSpec

logger = logging.getLogger(__name__)

# Modes whose tiles are power-of-two squares addressed from the origin
ALIGNED_MODES = frozenset({MosaicMode.KML})


def next_power_of_two(value: int) -> int:
    """Smallest power of two ``>= value`` (1 for non-positive values)."""
    if value <= 1:
        return 1
    return 1 << (int(value) - 1).bit_length()


def _snapped_square(bbox: BBox, size: int) -> BBox:
    return BBox.from_size((bbox.min_x // size) * size,
                          (bbox.min_y // size) * size, size, size)


def _is_aligned(box: BBox) -> bool:
    return (box.width == box.height
            and box.min_x % box.width == 0
            and box.min_y % box.height == 0)


def total_bbox(canvas_bbox: BBox, xres: int, yres: int) -> BBox:
    """
    Crop the canvas extent to the primary output grid.

    Parameters
    ----------
    canvas_bbox : BBox
        Union of every insertion, including seam copies.
    xres, yres : int
        Primary output grid size.

    Returns
    -------
    BBox
        Extent of the input data in output pixels, within
        ``[0, xres) x [0, yres)``.

    Raises
    ------
    GeometryError
        If the cropped box is empty, which points to a wrong georeference.
    """
    box = canvas_bbox.intersect(BBox(0, 0, xres, yres))
    if box.is_empty:
        raise GeometryError(
            f"Total bbox is empty (canvas {canvas_bbox} cropped to "
            f"{xres}x{yres}). Georeference calculation is probably incorrect."
        )
    return box


def align_bbox(
    bbox: BBox,
    total_resolution: int,
    xres: int,
    yres: int,
) -> BBox:
    """
    Grow a box into an aligned power-of-two square.

    The square size ``dim`` is the smallest power of two covering the
    larger side of *bbox*, capped at *total_resolution*. The minimum corner
    snaps down to a multiple of ``dim``. When that square misses part of
    *bbox* it grows by ``dim`` on both axes, towards the left (or top)
    when its far edge already sits on ``xres`` (or ``yres``) and towards
    the right (or bottom) otherwise. A grown square that is not aligned to
    its own size is replaced by the next larger aligned square containing
    *bbox*.

    Parameters
    ----------
    bbox : BBox
        Cropped total box.
    total_resolution : int
        Output pixels spanning a full turn; upper bound on the result size.
    xres, yres : int
        Primary output grid size.

    Returns
    -------
    BBox
        Square containing *bbox*. Applying ``align_bbox`` to its own
        result returns the result unchanged.

    Examples
    --------
    >>> align_bbox(BBox.from_size(10, 10, 300, 200), 1024, 1024, 1024)
    BBox((0, 0) -> (512, 512), 512x512)
    """
    dim = min(next_power_of_two(max(bbox.width, bbox.height)), total_resolution)
    aligned = _snapped_square(bbox, dim)
    if aligned.contains(bbox):
        return aligned

    min_x, min_y, max_x, max_y = aligned
    if max_x == xres:
        min_x -= dim
    else:
        max_x += dim
    if max_y == yres:
        min_y -= dim
    else:
        max_y += dim
    grown = BBox(min_x, min_y, max_x, max_y)
    if _is_aligned(grown) and grown.contains(bbox):
        return grown

    size = 2 * dim
    while size < total_resolution:
        candidate = _snapped_square(bbox, size)
        if candidate.contains(bbox):
            return candidate
        size *= 2
    logger.debug("Alignment of %s fell back to the full resolution", bbox)
    return _snapped_square(bbox, total_resolution)


def resolve_bbox(
    canvas_bbox: BBox,
    output: 'OutputProjectionSpec',
    mode: MosaicMode,
) -> BBox:
    """Final output box: cropped, then aligned for origin-addressed modes."""
    box = total_bbox(canvas_bbox, output.xres, output.yres)
    if mode in ALIGNED_MODES:
        aligned = align_bbox(box, output.total_resolution, output.xres, output.yres)
        logger.debug("Aligned %s to %s", box, aligned)
        return aligned
    return box
