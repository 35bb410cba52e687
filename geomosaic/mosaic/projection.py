# -*- coding: utf-8 -*-
"""
Output Projection - Output grid resolution and georeference per mosaic mode.

Computes the total output resolution from the input images (the number of
output pixels spanning 360 degrees, rounded up to a power of two) and builds
the ``OutputProjectionSpec`` shared read-only by every reprojection worker.

Output grids by mode:

- KML, TMS, GIGAPAN: geographic, 360 x 360 degrees anchored at
  (-180, 180). Rows past the pole are never populated.
- UNIVIEW, CELESTIA: geographic, 360 x 180 degrees anchored at (-180, 90).
- GMAP: spherical Mercator square of half-width ``pi * R``.

Dependencies
------------
numpy
pyproj
rasterio

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
import math
from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple, TYPE_CHECKING

# Third-party
import numpy as np

# geomosaic internal
from geomosaic.exceptions import ValidationError
from geomosaic.georef.affine import AffineGeoReference
from geomosaic.georef.base import GeoReference
from geomosaic.georef.overrides import make_input_georef
from geomosaic.vocabulary import MosaicMode

if TYPE_CHECKING:
    from geomosaic.IO.base import ImageSource
    from geomosaic.mosaic.options import MosaicOptions

logger = logging.getLogger(__name__)

# Floor of the total resolution, before any image is inspected
MIN_TOTAL_RESOLUTION = 1024

_FULL_SPHERE_MODES = (MosaicMode.KML, MosaicMode.TMS, MosaicMode.GIGAPAN)
_HALF_SPHERE_MODES = (MosaicMode.UNIVIEW, MosaicMode.CELESTIA)


@dataclass(frozen=True)
class OutputProjectionSpec:
    """Output grid of a mosaic run.

    Parameters
    ----------
    georef : GeoReference
        Output pixel georeference.
    total_resolution : int
        Output pixels spanning 360 degrees vertically (``R``).
    aspect_ratio : int
        Ratio of height to width. ``xres = R // aspect_ratio``.

    Raises
    ------
    ValidationError
        If the resolution is not positive, the aspect ratio is below 1,
        or the derived width is zero.
    """

    georef: GeoReference
    total_resolution: int
    aspect_ratio: int = 1

    def __post_init__(self) -> None:
        if self.total_resolution <= 0:
            raise ValidationError(
                f"total_resolution must be positive, got {self.total_resolution}"
            )
        if self.aspect_ratio < 1:
            raise ValidationError(
                f"aspect_ratio must be >= 1, got {self.aspect_ratio}"
            )
        if self.xres <= 0:
            raise ValidationError(
                f"Output width is zero (total_resolution={self.total_resolution}, "
                f"aspect_ratio={self.aspect_ratio})"
            )

    @property
    def xres(self) -> int:
        """Output width in pixels."""
        return self.total_resolution // self.aspect_ratio

    @property
    def yres(self) -> int:
        """Output height in pixels."""
        return self.total_resolution

    width = xres
    height = yres


def _lonlat_crs(datum_crs: Any) -> Any:
    import pyproj

    if datum_crs is None:
        return pyproj.CRS.from_epsg(4326)
    crs = pyproj.CRS.from_user_input(datum_crs)
    geodetic = crs.geodetic_crs if crs.geodetic_crs is not None else crs
    if geodetic.is_geographic:
        return geodetic
    return pyproj.CRS.from_epsg(4326)


def output_georef(
    mode: MosaicMode,
    xres: int,
    yres: int,
    datum_crs: Any = None,
) -> AffineGeoReference:
    """
    Output pixel georeference of a mosaic mode.

    Parameters
    ----------
    mode : MosaicMode
        Output mode. ``NONE`` is not georeferenced and is rejected.
    xres, yres : int
        Output grid size in pixels.
    datum_crs : pyproj.CRS, optional
        CRS whose geodetic datum the output adopts, usually the first
        input's. Defaults to WGS84.

    Returns
    -------
    AffineGeoReference

    Raises
    ------
    ValidationError
        If *mode* has no output georeference.
    """
    from rasterio.transform import Affine
    import pyproj

    geographic = _lonlat_crs(datum_crs)

    if mode in _FULL_SPHERE_MODES:
        transform = Affine(360.0 / xres, 0.0, -180.0, 0.0, -360.0 / yres, 180.0)
        return AffineGeoReference(transform, geographic)

    if mode in _HALF_SPHERE_MODES:
        transform = Affine(360.0 / xres, 0.0, -180.0, 0.0, -180.0 / yres, 90.0)
        return AffineGeoReference(transform, geographic)

    if mode is MosaicMode.GMAP:
        radius = geographic.ellipsoid.semi_major_metre
        extent = math.pi * radius
        crs = pyproj.CRS.from_proj4(
            f'+proj=merc +a={radius} +b={radius} +lat_ts=0 +lon_0=0 '
            f'+x_0=0 +y_0=0 +k=1 +units=m +no_defs'
        )
        transform = Affine(2.0 * extent / xres, 0.0, -extent,
                           0.0, -2.0 * extent / yres, extent)
        return AffineGeoReference(transform, crs)

    raise ValidationError(f"Mode {mode.value!r} has no output georeference")


def _mercator_y(lat_deg: np.ndarray) -> np.ndarray:
    lat = np.radians(np.clip(lat_deg, -89.999, 89.999))
    return np.log(np.tan(np.pi / 4.0 + lat / 2.0))


def compute_resolution(
    mode: MosaicMode,
    georef: GeoReference,
    pixel: Sequence[float],
) -> int:
    """
    Output resolution matching an input's pixel spacing at one pixel.

    Measures the geographic step to the neighbouring pixel along each axis
    and returns how many such steps span the full circle, rounded up to a
    power of two. ``GMAP`` measures steps in spherical-Mercator units over
    the ``2 * pi`` circumference; other modes measure degrees over 360.

    Parameters
    ----------
    mode : MosaicMode
        Output mode.
    georef : GeoReference
        Input image georeference.
    pixel : Sequence[float]
        ``(x, y)`` pixel at which to measure, usually the image centre.

    Returns
    -------
    int
        Power-of-two resolution.

    Examples
    --------
    >>> georef = AffineGeoReference(Affine(0.1, 0, -10, 0, -0.1, 10), 'EPSG:4326')
    >>> compute_resolution(MosaicMode.KML, georef, (50, 50))
    4096
    """
    x, y = float(pixel[0]), float(pixel[1])
    lons, lats = georef.pixel_to_lonlat(
        np.array([x, x + 1.0, x]), np.array([y, y, y + 1.0])
    )
    dlon = (lons[1:] - lons[0] + 180.0) % 360.0 - 180.0

    if mode is MosaicMode.GMAP:
        ys = _mercator_y(lats)
        steps = np.hypot(np.radians(dlon), ys[1:] - ys[0])
        circle = 2.0 * math.pi
    else:
        steps = np.hypot(dlon, lats[1:] - lats[0])
        circle = 360.0

    step = float(np.min(steps))
    if not np.isfinite(step) or step <= 0.0:
        return MIN_TOTAL_RESOLUTION
    return 1 << max(0, int(math.ceil(math.log2(circle / step))))


def load_image_georeferences(
    sources: Sequence['ImageSource'],
    options: 'MosaicOptions',
) -> Tuple[List[AffineGeoReference], int]:
    """
    Build every input georeference and the total output resolution.

    Parameters
    ----------
    sources : Sequence[ImageSource]
        Opened inputs, in run order.
    options : MosaicOptions
        Validated run options.

    Returns
    -------
    Tuple[List[AffineGeoReference], int]
        Input georeferences and the total resolution: the largest
        per-image resolution (never below 1024), or
        ``options.global_resolution`` when set.
    """
    georefs = []
    total_resolution = MIN_TOTAL_RESOLUTION
    for source in sources:
        georef = make_input_georef(source, options)
        georefs.append(georef)
        rows, cols = source.get_shape()[:2]
        resolution = compute_resolution(options.mode, georef, (cols / 2.0, rows / 2.0))
        logger.debug("Resolution of %s: %d", source.name, resolution)
        total_resolution = max(total_resolution, resolution)

    if options.global_resolution is not None:
        total_resolution = int(options.global_resolution)
    logger.debug("Total resolution: %d", total_resolution)
    return georefs, total_resolution


def build_output_spec(
    mode: MosaicMode,
    total_resolution: int,
    aspect_ratio: int = 1,
    datum_crs: Any = None,
) -> OutputProjectionSpec:
    """Derive the output projection of a run once, before reprojection.

    Raises
    ------
    ValidationError
        If the resolution or aspect ratio is invalid.
    """
    if total_resolution <= 0 or aspect_ratio < 1 or total_resolution // aspect_ratio <= 0:
        raise ValidationError(
            f"Invalid output grid: total_resolution={total_resolution}, "
            f"aspect_ratio={aspect_ratio}"
        )
    xres = total_resolution // aspect_ratio
    georef = output_georef(mode, xres, total_resolution, datum_crs)
    output = OutputProjectionSpec(georef, int(total_resolution), int(aspect_ratio))
    logger.debug("Output georef: %r (%dx%d)", georef, output.xres, output.yres)
    return output
