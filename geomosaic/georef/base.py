# -*- coding: utf-8 -*-
"""
Georeference Base Classes - Abstract pixel <-> map <-> lon/lat mapping.

Defines the abstract interface for the mapping between an image's pixel grid
and a geographic or projected coordinate system. Concrete implementations
supply the map projection (``geomosaic.georef.affine``); the mosaic pipeline
only depends on this interface and on ``GeoTransform``.

Coordinate Conventions
----------------------
- **Pixel coordinates:** ``(x, y)`` = ``(col, row)``, with ``(0, 0)`` at the
  top-left corner of the first pixel (pixel centres sit at ``+0.5``).
- **Map coordinates:** native CRS ``(x, y)`` (easting/northing or lon/lat).
- **Geographic coordinates:** ``(lon, lat)`` in degrees on the georef's own
  datum.

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

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Tuple, Union

import numpy as np

_ArrayPair = Tuple[np.ndarray, np.ndarray]
_PointInput = Union[float, list, np.ndarray]


def _is_scalar(val: Any) -> bool:
    """Check if a value is a scalar (not array-like)."""
    if isinstance(val, np.ndarray):
        return val.ndim == 0
    return isinstance(val, (int, float, np.integer, np.floating))


def _to_array(val: Any) -> np.ndarray:
    """Convert scalar, list, or array to 1D numpy array of float64."""
    arr = np.asarray(val, dtype=np.float64)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    return arr


def _dispatch(
    func: Callable[[np.ndarray, np.ndarray], _ArrayPair],
    first: _PointInput,
    second: Optional[_PointInput],
) -> Union[Tuple[float, float], _ArrayPair, np.ndarray]:
    """Run a vectorized two-coordinate mapping over any accepted input form.

    - **Scalar:** ``(a, b)`` floats in, ``(a', b')`` floats out.
    - **Separate arrays:** arrays in, tuple of arrays out.
    - **Stacked (2, N) array:** ``second`` omitted, ``(2, N)`` array out.
    """
    if second is None:
        pts = np.asarray(first, dtype=np.float64)
        if pts.ndim != 2 or pts.shape[0] != 2:
            raise ValueError(
                f"Expected (2, N) array, got shape {pts.shape}"
            )
        a, b = func(pts[0], pts[1])
        return np.vstack([a, b])
    if _is_scalar(first) and _is_scalar(second):
        a, b = func(_to_array(first), _to_array(second))
        return (float(a[0]), float(b[0]))
    return func(_to_array(first), _to_array(second))


class GeoReference(ABC):
    """
    Abstract base class for image georeferences.

    A georeference maps pixel coordinates to the native map coordinates of
    a coordinate reference system, and map coordinates to geographic
    ``(lon, lat)`` on the same datum. Subclasses implement four vectorized
    hooks operating on 1D float64 arrays; the public methods accept the
    three input forms described in ``_dispatch``.

    Attributes
    ----------
    crs : pyproj.CRS
        Native coordinate reference system.
    """

    crs: Any

    @abstractmethod
    def _pixel_to_point_array(
        self, xs: np.ndarray, ys: np.ndarray
    ) -> _ArrayPair:
        """Pixel ``(x, y)`` arrays to native map coordinate arrays."""

    @abstractmethod
    def _point_to_pixel_array(
        self, px: np.ndarray, py: np.ndarray
    ) -> _ArrayPair:
        """Native map coordinate arrays to pixel ``(x, y)`` arrays."""

    @abstractmethod
    def _point_to_lonlat_array(
        self, px: np.ndarray, py: np.ndarray
    ) -> _ArrayPair:
        """Native map coordinate arrays to ``(lons, lats)``."""

    @abstractmethod
    def _lonlat_to_point_array(
        self, lons: np.ndarray, lats: np.ndarray
    ) -> _ArrayPair:
        """``(lons, lats)`` arrays to native map coordinate arrays."""

    @abstractmethod
    def proj4_str(self) -> str:
        """Projection-only PROJ string (no datum or ellipsoid terms).

        A plain geographic projection is reported as ``'+proj=longlat'``.
        """

    @property
    def is_geographic(self) -> bool:
        """Whether the native map coordinates are lon/lat degrees."""
        return self.proj4_str().strip() == '+proj=longlat'

    def pixel_to_point(self, x_or_points: _PointInput,
                       y: Optional[_PointInput] = None):
        """Transform pixel coordinates to native map coordinates."""
        return _dispatch(self._pixel_to_point_array, x_or_points, y)

    def point_to_pixel(self, px_or_points: _PointInput,
                       py: Optional[_PointInput] = None):
        """Transform native map coordinates to pixel coordinates."""
        return _dispatch(self._point_to_pixel_array, px_or_points, py)

    def pixel_to_lonlat(self, x_or_points: _PointInput,
                        y: Optional[_PointInput] = None):
        """
        Transform pixel coordinates to geographic coordinates.

        Parameters
        ----------
        x_or_points : float, list, np.ndarray
            Column coordinate(s) when ``y`` is provided, or a ``(2, N)``
            ndarray of stacked ``[xs; ys]`` when ``y`` is None.
        y : float, list, or np.ndarray, optional
            Row coordinate(s).

        Returns
        -------
        Tuple[float, float]
            ``(lon, lat)`` when scalar inputs are given.
        Tuple[np.ndarray, np.ndarray]
            ``(lons, lats)`` when separate array/list inputs are given.
        np.ndarray
            Shape ``(2, N)`` when a ``(2, N)`` stacked array is given.

        Examples
        --------
        >>> lon, lat = georef.pixel_to_lonlat(512, 256)
        """
        def _chain(xs: np.ndarray, ys: np.ndarray) -> _ArrayPair:
            return self._point_to_lonlat_array(
                *self._pixel_to_point_array(xs, ys)
            )
        return _dispatch(_chain, x_or_points, y)

    def lonlat_to_pixel(self, lon_or_points: _PointInput,
                        lat: Optional[_PointInput] = None):
        """
        Transform geographic coordinates to pixel coordinates.

        Parameters
        ----------
        lon_or_points : float, list, np.ndarray
            Longitude(s) when ``lat`` is provided, or a ``(2, N)`` ndarray
            of stacked ``[lons; lats]`` when ``lat`` is None.
        lat : float, list, or np.ndarray, optional
            Latitude(s) in degrees.

        Returns
        -------
        Tuple[float, float]
            ``(x, y)`` when scalar inputs are given.
        Tuple[np.ndarray, np.ndarray]
            ``(xs, ys)`` when separate array/list inputs are given.
        np.ndarray
            Shape ``(2, N)`` when a ``(2, N)`` stacked array is given.

        Examples
        --------
        >>> x, y = georef.lonlat_to_pixel(-180.0, 0.0)
        """
        def _chain(lons: np.ndarray, lats: np.ndarray) -> _ArrayPair:
            return self._point_to_pixel_array(
                *self._lonlat_to_point_array(lons, lats)
            )
        return _dispatch(_chain, lon_or_points, lat)
