# -*- coding: utf-8 -*-
"""
Wraparound Compositor - Insert placed images across the antimeridian seam.

An image whose placement runs past the right edge of the total resolution
also belongs on the left side of the map, shifted by one full turn. An
image whose placement starts left of the primary output width belongs at
its own position. Both conditions are checked independently, so an image
straddling the seam is inserted twice and an image lying only in the
180-360 range is inserted only on the far side.

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
from typing import List, Tuple, TYPE_CHECKING

# geomosaic internal
from geomosaic.geometry import BBox

if TYPE_CHECKING:
    from geomosaic.mosaic.composite import CompositeCanvas
    from geomosaic.mosaic.reproject import PlacedImage

logger = logging.getLogger(__name__)


def wraparound_offsets(
    bbox: BBox,
    total_resolution: int,
    xres: int,
) -> List[Tuple[int, int]]:
    """
    Canvas positions at which a placed image is inserted.

    Parameters
    ----------
    bbox : BBox
        Placement box of the image in output pixel space.
    total_resolution : int
        Output pixels spanning a full turn (``R``).
    xres : int
        Primary output width.

    Returns
    -------
    List[Tuple[int, int]]
        Zero, one or two ``(x, y)`` insertion positions: the box shifted
        by ``-R`` when ``bbox.max_x > R``, then the box itself when
        ``bbox.min_x < xres``.

    Examples
    --------
    >>> wraparound_offsets(BBox(980, 0, 1080, 100), 1024, 1024)
    [(-44, 0), (980, 0)]
    >>> wraparound_offsets(BBox(10, 0, 110, 100), 1024, 1024)
    [(10, 0)]
    """
    offsets = []
    if bbox.max_x > total_resolution:
        offsets.append((bbox.min_x - total_resolution, bbox.min_y))
    if bbox.min_x < xres:
        offsets.append((bbox.min_x, bbox.min_y))
    return offsets


def insert_with_wraparound(
    canvas: 'CompositeCanvas',
    placed: 'PlacedImage',
    total_resolution: int,
    xres: int,
) -> int:
    """Insert a placed image into the canvas on each side of the seam.

    Returns
    -------
    int
        Number of insertions performed.
    """
    offsets = wraparound_offsets(placed.bbox, total_resolution, xres)
    for x, y in offsets:
        canvas.insert(placed.image, x, y)
    if len(offsets) > 1:
        logger.debug("Image at %s straddles the seam; inserted twice", placed.bbox)
    elif not offsets:
        logger.debug("Image at %s lies outside the output; not inserted", placed.bbox)
    return len(offsets)
