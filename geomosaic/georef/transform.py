# -*- coding: utf-8 -*-
"""
GeoTransform - Pixel-to-pixel mapping between two georeferences.

``GeoTransform(src, dst)`` maps pixel coordinates of a source georeference
into pixel coordinates of a destination georeference (``forward``) and
back (``reverse``). When both georeferences share a CRS only the affine
steps run; otherwise pyproj transforms the map coordinates in between.

The mosaic pipeline treats this as its opaque geodetic transform service:
placement boxes come from ``forward_bbox`` and warping samples every output
pixel through ``reverse_array``.

Dependencies
------------
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
from typing import Sequence, Tuple

# Third-party
import numpy as np

# geomosaic internal
from geomosaic.exceptions import GeolocationError
from geomosaic.geometry import BBox
from geomosaic.georef.base import GeoReference
from geomosaic.georef.affine import require_projection_backend

# Round-off tolerance when snapping transformed coordinates to the grid
SNAP_TOLERANCE = 1e-6


def snap_to_grid(values: np.ndarray, tol: float = SNAP_TOLERANCE) -> np.ndarray:
    """Snap values within ``tol`` of an integer onto that integer.

    Transform round trips leave ~1e-12 residue; snapping keeps integer
    pixel positions from spilling into the neighbouring pixel.
    """
    nearest = np.rint(values)
    return np.where(np.abs(values - nearest) < tol, nearest, values)


def sample_bbox_perimeter(
    bbox: BBox,
    samples_per_edge: int = 64,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Generate sample points along a pixel box's outer edges.

    Parameters
    ----------
    bbox : BBox
        Box in pixel (corner) coordinates; the maximum edges are sampled
        too, so ``BBox(0, 0, w, h)`` covers ``[0, w] x [0, h]``.
    samples_per_edge : int, default=64
        Number of sample points per edge.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        ``(xs, ys)`` arrays of sample coordinates along the perimeter.
    """
    xs_line = np.linspace(bbox.min_x, bbox.max_x, samples_per_edge)
    ys_line = np.linspace(bbox.min_y, bbox.max_y, samples_per_edge)

    # Top, right, bottom, left
    xs = np.concatenate([
        xs_line,
        np.full(samples_per_edge, float(bbox.max_x)),
        xs_line[::-1],
        np.full(samples_per_edge, float(bbox.min_x)),
    ])
    ys = np.concatenate([
        np.full(samples_per_edge, float(bbox.min_y)),
        ys_line,
        np.full(samples_per_edge, float(bbox.max_y)),
        ys_line[::-1],
    ])
    return xs, ys


def bbox_of_points(xs: np.ndarray, ys: np.ndarray) -> BBox:
    """Smallest integer box covering the finite points.

    Returns
    -------
    BBox
        ``BBox.empty()`` when no point is finite.
    """
    valid = np.isfinite(xs) & np.isfinite(ys)
    if not np.any(valid):
        return BBox.empty()
    xs = snap_to_grid(xs[valid])
    ys = snap_to_grid(ys[valid])
    return BBox(
        int(np.floor(xs.min())), int(np.floor(ys.min())),
        int(np.ceil(xs.max())), int(np.ceil(ys.max())),
    )


class GeoTransform:
    """Forward/reverse pixel mapping between two georeferences.

    Parameters
    ----------
    src : GeoReference
        Georeference of the input image.
    dst : GeoReference
        Georeference of the output grid.

    Raises
    ------
    DependencyError
        If pyproj is not installed.

    Examples
    --------
    >>> tx = GeoTransform(input_georef, output_georef)
    >>> x, y = tx.forward((0.0, 0.0))
    >>> placement = tx.forward_bbox(BBox(0, 0, cols, rows))
    """

    def __init__(self, src: GeoReference, dst: GeoReference) -> None:
        require_projection_backend('GeoTransform')
        import pyproj

        self.src = src
        self.dst = dst
        self._same_crs = src.crs == dst.crs
        self._transformer = None
        if not self._same_crs:
            self._transformer = pyproj.Transformer.from_crs(
                src.crs, dst.crs, always_xy=True
            )

    @property
    def has_rotation(self) -> bool:
        """Whether either georeference carries rotation/shear terms."""
        return bool(getattr(self.src, 'has_rotation', False)
                    or getattr(self.dst, 'has_rotation', False))

    def proj4_str(self) -> str:
        """Projection-only PROJ string of the source georeference."""
        return self.src.proj4_str()

    def forward_array(
        self, xs: np.ndarray, ys: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Source pixel arrays to destination pixel arrays."""
        px, py = self.src._pixel_to_point_array(
            np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)
        )
        if self._transformer is not None:
            px, py = self._transformer.transform(px, py)
            px = np.asarray(px, dtype=np.float64)
            py = np.asarray(py, dtype=np.float64)
        return self.dst._point_to_pixel_array(px, py)

    def reverse_array(
        self, xs: np.ndarray, ys: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Destination pixel arrays to source pixel arrays."""
        from pyproj.enums import TransformDirection

        px, py = self.dst._pixel_to_point_array(
            np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)
        )
        if self._transformer is not None:
            px, py = self._transformer.transform(
                px, py, direction=TransformDirection.INVERSE
            )
            px = np.asarray(px, dtype=np.float64)
            py = np.asarray(py, dtype=np.float64)
        return self.src._point_to_pixel_array(px, py)

    def forward(self, point: Sequence[float]) -> np.ndarray:
        """Map one source pixel ``(x, y)`` into destination pixel space."""
        xs, ys = self.forward_array(np.array([point[0]]), np.array([point[1]]))
        return np.array([xs[0], ys[0]], dtype=np.float64)

    def reverse(self, point: Sequence[float]) -> np.ndarray:
        """Map one destination pixel ``(x, y)`` back into source pixel space."""
        xs, ys = self.reverse_array(np.array([point[0]]), np.array([point[1]]))
        return np.array([xs[0], ys[0]], dtype=np.float64)

    def forward_bbox(self, bbox: BBox) -> BBox:
        """
        Destination pixel box covering a source pixel box.

        Samples the source box perimeter, maps each point forward, and
        returns the integer box enclosing the finite results.

        Parameters
        ----------
        bbox : BBox
            Source pixel box, typically ``BBox(0, 0, cols, rows)``.

        Returns
        -------
        BBox
            Destination box; empty when no sample could be transformed.
        """
        from pyproj.exceptions import ProjError

        xs, ys = sample_bbox_perimeter(bbox)
        try:
            fx, fy = self.forward_array(xs, ys)
        except ProjError as e:
            raise GeolocationError(
                f"Forward transform of {bbox} failed: {e}"
            ) from e
        return bbox_of_points(fx, fy)

    def reverse_bbox(self, bbox: BBox) -> BBox:
        """Source pixel box covering a destination pixel box."""
        from pyproj.exceptions import ProjError

        xs, ys = sample_bbox_perimeter(bbox)
        try:
            rx, ry = self.reverse_array(xs, ys)
        except ProjError as e:
            raise GeolocationError(
                f"Reverse transform of {bbox} failed: {e}"
            ) from e
        return bbox_of_points(rx, ry)

    def __repr__(self) -> str:
        return f"GeoTransform(src={self.src!r}, dst={self.dst!r})"
