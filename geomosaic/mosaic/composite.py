# -*- coding: utf-8 -*-
"""
Composite Canvas - Accumulate placed images and render them into one buffer.

Images are inserted at integer offsets (thread-safe, append-only) and only
rendered when ``prepare`` is called with the final output box. Two blend
modes are supported:

- ``BlendMode.DRAFT``: every opaque pixel overwrites what lies below it, so
  the last inserted image wins.
- ``BlendMode.MULTIBAND``: colour bands are averaged with per-image weights
  equal to the distance to the nearest transparent pixel or image edge,
  which feathers seams; alpha takes the maximum over all images.

After ``prepare`` the canvas bbox is reported relative to the prepared
origin and the canvas refuses further insertions.

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

# Standard library
import logging
import threading
from typing import Callable, List, NamedTuple, Optional

# Third-party
import numpy as np

try:
    from scipy.ndimage import distance_transform_edt
    SCIPY_AVAILABLE = True
except ImportError:
    SCIPY_AVAILABLE = False
    distance_transform_edt = None

# geomosaic internal
from geomosaic.exceptions import DependencyError, GeometryError, MosaicError
from geomosaic.geometry import BBox
from geomosaic.mosaic.normalize import cast_to_channel, channel_range
from geomosaic.vocabulary import BlendMode

logger = logging.getLogger(__name__)


class Insertion(NamedTuple):
    """An image waiting on the canvas at offset ``(x, y)``."""

    image: np.ndarray
    x: int
    y: int

    @property
    def bbox(self) -> BBox:
        return BBox.from_size(self.x, self.y, self.image.shape[2], self.image.shape[1])


def _edge_distance(alpha: np.ndarray) -> np.ndarray:
    """Distance of each pixel to the nearest transparent pixel or image edge."""
    padded = np.pad(alpha > 0, 1, mode='constant', constant_values=False)
    return distance_transform_edt(padded)[1:-1, 1:-1]


class CompositeCanvas:
    """Append-only collection of placed images rendered on demand.

    Parameters
    ----------
    bands : int, optional
        Band count (alpha included) every insertion must have. Taken from
        the first insertion when None.
    dtype : np.dtype, default=np.uint8
        Working dtype of the rendered buffer.
    blend_mode : BlendMode, default=BlendMode.DRAFT
        How overlapping insertions are combined.

    Examples
    --------
    >>> canvas = CompositeCanvas(bands=2, dtype=np.uint8)
    >>> canvas.insert(image, 10, 20)
    >>> canvas.prepare(BBox(0, 0, 512, 512))
    >>> canvas.data.shape
    (2, 512, 512)
    """

    def __init__(
        self,
        bands: Optional[int] = None,
        dtype: np.dtype = np.uint8,
        blend_mode: BlendMode = BlendMode.DRAFT,
    ) -> None:
        self._bands = bands
        self._dtype = np.dtype(dtype)
        self.blend_mode = blend_mode
        self._lock = threading.Lock()
        self._insertions: List[Insertion] = []
        self._bbox = BBox.empty()
        self._data: Optional[np.ndarray] = None

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def prepared(self) -> bool:
        return self._data is not None

    @property
    def bbox(self) -> BBox:
        """Extent of all insertions; relative to the prepared origin once prepared."""
        return self._bbox

    @property
    def insertions(self) -> List[Insertion]:
        return list(self._insertions)

    @property
    def rows(self) -> int:
        return 0 if self._data is None else self._data.shape[1]

    @property
    def cols(self) -> int:
        return 0 if self._data is None else self._data.shape[2]

    @property
    def data(self) -> np.ndarray:
        """The rendered ``(bands, rows, cols)`` buffer.

        Raises
        ------
        MosaicError
            If the canvas has not been prepared.
        """
        if self._data is None:
            raise MosaicError("Composite canvas has not been prepared")
        return self._data

    def set_draft_mode(self, draft: bool) -> None:
        """Switch between draft overwriting and multiband blending."""
        self.blend_mode = BlendMode.DRAFT if draft else BlendMode.MULTIBAND

    def insert(self, image: np.ndarray, x: int, y: int) -> None:
        """
        Add an image at output offset ``(x, y)``.

        Parameters
        ----------
        image : np.ndarray
            ``(bands, rows, cols)`` pixels, alpha last.
        x, y : int
            Position of the image's top-left pixel.

        Raises
        ------
        MosaicError
            If the canvas has already been prepared.
        ValueError
            If the image is not 3D or its band count differs from the
            canvas's.
        """
        if image.ndim != 3:
            raise ValueError(f"image must be (bands, rows, cols), got {image.ndim}D")
        with self._lock:
            if self._data is not None:
                raise MosaicError("Cannot insert into a prepared composite canvas")
            if self._bands is None:
                self._bands = image.shape[0]
            elif image.shape[0] != self._bands:
                raise ValueError(
                    f"Expected {self._bands} bands, got {image.shape[0]}"
                )
            insertion = Insertion(image, int(x), int(y))
            self._insertions.append(insertion)
            self._bbox = self._bbox.union(insertion.bbox)

    def prepare(
        self,
        bbox: Optional[BBox] = None,
        progress_callback: Optional[Callable[[float], None]] = None,
    ) -> None:
        """
        Render every insertion intersecting *bbox* into a new buffer.

        Parameters
        ----------
        bbox : BBox, optional
            Output box to render; defaults to the extent of all insertions.
        progress_callback : callable, optional
            Called with the completed fraction after each insertion.

        Raises
        ------
        MosaicError
            If the canvas was already prepared.
        GeometryError
            If the rendered buffer would have zero rows or columns.
        DependencyError
            If multiband blending is requested without scipy.
        """
        with self._lock:
            if self._data is not None:
                raise MosaicError("Composite canvas is already prepared")
            if bbox is None:
                bbox = self._bbox
            if bbox.is_empty:
                raise GeometryError(
                    f"Composite image is empty ({bbox}). Georeference "
                    f"calculation is probably incorrect."
                )
            bands = self._bands if self._bands is not None else 1

            if self.blend_mode is BlendMode.MULTIBAND:
                data = self._render_multiband(bbox, bands, progress_callback)
            else:
                data = self._render_draft(bbox, bands, progress_callback)

            self._data = data
            self._bbox = self._bbox.translate(-bbox.min_x, -bbox.min_y)
            logger.debug("Prepared %d insertions into %s", len(self._insertions), bbox)

    def _regions(self, bbox: BBox, insertion: Insertion):
        """Destination and source slices of an insertion clipped to *bbox*."""
        overlap = insertion.bbox.intersect(bbox)
        if overlap.is_empty:
            return None
        dst = (slice(overlap.min_y - bbox.min_y, overlap.max_y - bbox.min_y),
               slice(overlap.min_x - bbox.min_x, overlap.max_x - bbox.min_x))
        src = (slice(overlap.min_y - insertion.y, overlap.max_y - insertion.y),
               slice(overlap.min_x - insertion.x, overlap.max_x - insertion.x))
        return dst, src

    def _render_draft(self, bbox, bands, progress_callback):
        out = np.zeros((bands, bbox.height, bbox.width), dtype=self._dtype)
        total = len(self._insertions)
        for i, insertion in enumerate(self._insertions):
            regions = self._regions(bbox, insertion)
            if regions is not None:
                dst, src = regions
                patch = insertion.image[:, src[0], src[1]]
                opaque = patch[-1] > 0
                out[:, dst[0], dst[1]][:, opaque] = patch[:, opaque]
            if progress_callback is not None:
                progress_callback((i + 1) / total)
        return out

    def _render_multiband(self, bbox, bands, progress_callback):
        if not SCIPY_AVAILABLE:
            raise DependencyError(
                "scipy is required for multiband blending. "
                "Install with: pip install scipy"
            )
        _, alpha_max = channel_range(self._dtype)
        colour = np.zeros((bands - 1, bbox.height, bbox.width), dtype=np.float64)
        weight_sum = np.zeros((bbox.height, bbox.width), dtype=np.float64)
        alpha = np.zeros((bbox.height, bbox.width), dtype=np.float64)

        total = len(self._insertions)
        for i, insertion in enumerate(self._insertions):
            regions = self._regions(bbox, insertion)
            if regions is not None:
                dst, src = regions
                image = insertion.image.astype(np.float64)
                weight = _edge_distance(image[-1]) * (image[-1] / alpha_max)
                weight = weight[src]
                colour[:, dst[0], dst[1]] += image[:-1, src[0], src[1]] * weight
                weight_sum[dst] += weight
                np.maximum(alpha[dst], image[-1][src], out=alpha[dst])
            if progress_callback is not None:
                progress_callback((i + 1) / total)

        covered = weight_sum > 0
        colour[:, covered] /= weight_sum[covered]
        return cast_to_channel(np.concatenate([colour, alpha[np.newaxis]]), self._dtype)

    def __repr__(self) -> str:
        return (
            f"CompositeCanvas(insertions={len(self._insertions)}, "
            f"bbox={self._bbox}, blend_mode={self.blend_mode.value})"
        )
