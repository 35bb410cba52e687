# -*- coding: utf-8 -*-
"""
Affine Georeference - Pixel mapping for rasters with an affine transform.

Provides ``AffineGeoReference``, a concrete ``GeoReference`` for any raster
whose pixel-to-map relationship is described by a six-parameter affine
transform and a coordinate reference system. This covers GeoTIFFs, COGs and
every output grid the mosaic pipeline builds.

Coordinate flow:

    pixel (x, y)  --affine-->  native CRS (x, y)  --pyproj-->  (lon, lat)

When the native CRS is already geographic the pyproj step is skipped
entirely, so identity georeferences round-trip exactly.

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

# Standard library
import warnings
from typing import Any, Tuple, TYPE_CHECKING

# Third-party
import numpy as np

try:
    import pyproj  # noqa: F401
    from rasterio.transform import Affine as _Affine  # noqa: F401
    PROJECTION_AVAILABLE = True
except ImportError:
    PROJECTION_AVAILABLE = False

# geomosaic internal
from geomosaic.exceptions import DependencyError, ValidationError
from geomosaic.georef.base import GeoReference

if TYPE_CHECKING:
    from rasterio.transform import Affine
    from geomosaic.IO.base import ImageSource


def require_projection_backend(feature: str = 'AffineGeoReference') -> None:
    """Raise ``DependencyError`` unless rasterio and pyproj are importable."""
    if not PROJECTION_AVAILABLE:
        raise DependencyError(
            f"{feature} requires rasterio and pyproj. "
            f"Install with: pip install rasterio pyproj"
        )


# PROJ terms describing the datum rather than the projection
_DATUM_TERMS = frozenset({
    'datum', 'ellps', 'towgs84', 'nadgrids', 'R', 'a', 'b', 'rf', 'f',
    'no_defs', 'type', 'wktext',
})


def projection_terms(crs: Any) -> str:
    """Projection-only PROJ string of a pyproj CRS.

    Drops datum and ellipsoid terms, so ``EPSG:4326`` and a lunar sphere
    geographic CRS both report ``'+proj=longlat'``.

    Parameters
    ----------
    crs : pyproj.CRS
        Coordinate reference system.

    Returns
    -------
    str
        Space-separated PROJ terms, ``+proj`` first.
    """
    with warnings.catch_warnings():
        # to_proj4 warns that PROJ strings are lossy; the loss is intended
        warnings.simplefilter('ignore', UserWarning)
        proj4 = crs.to_proj4() or ''
    kept = []
    for term in proj4.split():
        key = term.lstrip('+').split('=', 1)[0]
        if key not in _DATUM_TERMS:
            kept.append(term)
    return ' '.join(kept)


class AffineGeoReference(GeoReference):
    """Georeference for any raster with an affine transform and CRS.

    The affine transform maps pixel ``(col, row)`` to map ``(x, y)`` as::

        x = c + col * a + row * b
        y = f + col * d + row * e

    where ``(a, b, c, d, e, f)`` are the six affine parameters stored by
    rasterio as ``Affine(a, b, c, d, e, f)``.

    Parameters
    ----------
    transform : rasterio.transform.Affine
        Six-parameter affine transform mapping pixel to native CRS
        coordinates.
    crs : str or pyproj.CRS
        Coordinate reference system (e.g. ``'EPSG:4326'``, a PROJ string).

    Raises
    ------
    DependencyError
        If rasterio or pyproj is not installed.
    TypeError
        If *transform* is not a ``rasterio.transform.Affine`` instance.
    ValidationError
        If *transform* is singular.

    Examples
    --------
    A global plate carree grid, 0.5 degree per pixel:

    >>> from rasterio.transform import Affine
    >>> georef = AffineGeoReference(
    ...     Affine(0.5, 0.0, -180.0, 0.0, -0.5, 90.0), 'EPSG:4326')
    >>> georef.lonlat_to_pixel(180.0, 0.0)
    (720.0, 180.0)
    """

    def __init__(self, transform: 'Affine', crs: Any) -> None:
        require_projection_backend()

        from rasterio.transform import Affine
        import pyproj

        if not isinstance(transform, Affine):
            raise TypeError(
                f"transform must be a rasterio.transform.Affine instance, "
                f"got {type(transform).__name__}"
            )
        if transform.determinant == 0:
            raise ValidationError(f"Affine transform is singular: {transform}")

        self._transform = transform
        self._a = float(transform.a)
        self._b = float(transform.b)
        self._c = float(transform.c)
        self._d = float(transform.d)
        self._e = float(transform.e)
        self._f = float(transform.f)

        inv = ~transform
        self._ia = float(inv.a)
        self._ib = float(inv.b)
        self._ic = float(inv.c)
        self._id = float(inv.d)
        self._ie = float(inv.e)
        self._if = float(inv.f)

        self.crs = pyproj.CRS.from_user_input(crs)
        self._proj4 = projection_terms(self.crs)

        # Geographic CRS: map coordinates already are lon/lat
        self._to_lonlat = None
        self._from_lonlat = None
        if not self.crs.is_geographic:
            geodetic = self.crs.geodetic_crs
            self._to_lonlat = pyproj.Transformer.from_crs(
                self.crs, geodetic, always_xy=True
            )
            self._from_lonlat = pyproj.Transformer.from_crs(
                geodetic, self.crs, always_xy=True
            )

    @property
    def transform(self) -> 'Affine':
        """The pixel-to-map affine transform."""
        return self._transform

    @property
    def has_rotation(self) -> bool:
        """Whether the affine transform carries rotation/shear terms."""
        return self._b != 0.0 or self._d != 0.0

    def proj4_str(self) -> str:
        return self._proj4

    def with_crs(self, crs: Any) -> 'AffineGeoReference':
        """Same pixel transform, different coordinate reference system."""
        return AffineGeoReference(self._transform, crs)

    def _pixel_to_point_array(
        self, xs: np.ndarray, ys: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        px = self._c + xs * self._a + ys * self._b
        py = self._f + xs * self._d + ys * self._e
        return px, py

    def _point_to_pixel_array(
        self, px: np.ndarray, py: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        xs = self._ic + px * self._ia + py * self._ib
        ys = self._if + px * self._id + py * self._ie
        return xs, ys

    def _point_to_lonlat_array(
        self, px: np.ndarray, py: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        if self._to_lonlat is None:
            return px, py
        lons, lats = self._to_lonlat.transform(px, py)
        return np.asarray(lons, dtype=np.float64), np.asarray(lats, dtype=np.float64)

    def _lonlat_to_point_array(
        self, lons: np.ndarray, lats: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        if self._from_lonlat is None:
            return lons, lats
        px, py = self._from_lonlat.transform(lons, lats)
        return np.asarray(px, dtype=np.float64), np.asarray(py, dtype=np.float64)

    @classmethod
    def from_bounds(
        cls,
        west: float,
        south: float,
        east: float,
        north: float,
        width: int,
        height: int,
        crs: Any = 'EPSG:4326',
    ) -> 'AffineGeoReference':
        """Georeference stretching a ``width x height`` grid over bounds.

        Parameters
        ----------
        west, south, east, north : float
            Outer edges of the grid in native CRS units.
        width, height : int
            Grid size in pixels.
        crs : str or pyproj.CRS, default='EPSG:4326'
            Coordinate reference system of the bounds.

        Returns
        -------
        AffineGeoReference
        """
        require_projection_backend()
        from rasterio.transform import from_bounds

        return cls(from_bounds(west, south, east, north, width, height), crs)

    @classmethod
    def from_source(cls, source: 'ImageSource') -> 'AffineGeoReference':
        """Create a georeference from an image source's geolocation.

        Parameters
        ----------
        source : ImageSource
            Source whose ``get_geolocation()`` provides ``'transform'`` and
            ``'crs'`` entries.

        Returns
        -------
        AffineGeoReference

        Raises
        ------
        ValidationError
            If the source carries no transform or CRS.
        """
        geolocation = source.get_geolocation() or {}
        transform = geolocation.get('transform')
        crs = geolocation.get('crs')
        if transform is None or crs is None:
            raise ValidationError(
                f"{source.name} has no georeference (transform and CRS are "
                f"required); supply manual bounds to mosaic it."
            )
        return cls(transform, crs)

    def __repr__(self) -> str:
        t = self._transform
        return (
            f"AffineGeoReference(proj='{self._proj4}', "
            f"transform=({t.a}, {t.b}, {t.c}, {t.d}, {t.e}, {t.f}))"
        )
