# -*- coding: utf-8 -*-
"""
Per-Image Reprojection - Warp one input image into the output grid.

``reproject_image`` takes an input descriptor and the shared output
projection and produces a ``PlacedImage``: the warped working image plus
its placement box in output pixel space. Along the way it masks nodata
pixels to transparent, applies the optional linear rescale and
normalization stretch, and picks one of three warps:

- global inputs (plate carree spanning the whole globe) are sampled with
  cylindrical edge extension: columns wrap, rows clamp;
- inputs whose forward/reverse round trip lands far from where it started
  (longitude clamping in the projection library puts them 360 degrees off)
  are warped with a compensating horizontal source shift;
- everything else gets a standard warp.

Warping maps every output pixel centre back into the source through
``GeoTransform.reverse_array`` and resamples with
``scipy.ndimage.map_coordinates`` on premultiplied alpha, so transparent
pixels never bleed colour into their neighbours.

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
from dataclasses import dataclass
from typing import NamedTuple, Optional, TYPE_CHECKING

# Third-party
import numpy as np

try:
    from scipy.ndimage import map_coordinates
    SCIPY_AVAILABLE = True
except ImportError:
    SCIPY_AVAILABLE = False
    map_coordinates = None

# geomosaic internal
from geomosaic.exceptions import DependencyError, GeolocationError, GeometryError
from geomosaic.geometry import BBox
from geomosaic.georef.base import GeoReference
from geomosaic.georef.transform import GeoTransform, snap_to_grid
from geomosaic.IO.base import ImageSource
from geomosaic.mosaic.normalize import (
    NormalizeBounds,
    apply_pixel_scale,
    cast_to_channel,
    channel_range,
    normalize_retain_alpha,
    to_working_image,
)
from geomosaic.vocabulary import Interpolation

if TYPE_CHECKING:
    from geomosaic.mosaic.projection import OutputProjectionSpec

logger = logging.getLogger(__name__)

# Mapping from interpolation kernel to scipy order parameter
INTERPOLATION_ORDERS = {
    Interpolation.NEAREST: 0,
    Interpolation.BILINEAR: 1,
    Interpolation.BICUBIC: 3,
}

# Round-trip error, relative to the image diagonal, that triggers the
# horizontal shift correction
SHIFT_TOLERANCE = 0.01


@dataclass(frozen=True)
class InputImageDescriptor:
    """One input of a mosaic run.

    Parameters
    ----------
    source : ImageSource
        Pixel source.
    georef : GeoReference, optional
        Input georeference. None only on the pass-through path.
    nodata : float, optional
        Explicit nodata value. Falls back to ``source.nodata``.
    pixel_scale, pixel_offset : float, optional
        Linear rescale ``value * scale + offset``.
    """

    source: ImageSource
    georef: Optional[GeoReference] = None
    nodata: Optional[float] = None
    pixel_scale: Optional[float] = None
    pixel_offset: Optional[float] = None

    @property
    def name(self) -> str:
        return self.source.name


class PlacedImage(NamedTuple):
    """A warped image and its placement in output pixel space.

    Attributes
    ----------
    image : np.ndarray
        ``(bands, rows, cols)`` working-dtype pixels, alpha last.
    bbox : BBox
        Placement box; ``image`` covers it exactly.
    """

    image: np.ndarray
    bbox: BBox

    @property
    def x(self) -> int:
        return self.bbox.min_x

    @property
    def y(self) -> int:
        return self.bbox.min_y


@dataclass(frozen=True)
class ReprojectSettings:
    """Per-run settings shared by every reprojection.

    Parameters
    ----------
    dtype : np.dtype
        Working channel dtype.
    normalize : NormalizeBounds, optional
        Global value range to stretch onto the channel range.
    order : int
        Spline order used by ``map_coordinates`` (1 = bilinear).
    """

    dtype: np.dtype = np.dtype(np.uint8)
    normalize: Optional[NormalizeBounds] = None
    order: int = INTERPOLATION_ORDERS[Interpolation.BILINEAR]


def load_working_image(
    source: ImageSource,
    settings: ReprojectSettings,
    nodata: Optional[float] = None,
    pixel_scale: Optional[float] = None,
    pixel_offset: Optional[float] = None,
) -> np.ndarray:
    """
    Read a source and apply masking, rescale and normalization.

    Parameters
    ----------
    source : ImageSource
        Input image.
    settings : ReprojectSettings
        Working dtype and normalization bounds.
    nodata : float, optional
        Explicit nodata value; overrides the value stored in *source*.
    pixel_scale, pixel_offset : float, optional
        Linear rescale applied when either is set.

    Returns
    -------
    np.ndarray
        ``(bands, rows, cols)`` float64 working image, alpha last.
    """
    if nodata is None:
        nodata = source.nodata
    if nodata is not None:
        logger.debug("Using nodata value: %s", nodata)
    image = to_working_image(source.read_full(), settings.dtype, nodata)

    if pixel_scale is not None or pixel_offset is not None:
        apply_pixel_scale(image, settings.dtype, pixel_scale, pixel_offset)

    if settings.normalize is not None:
        normalize_retain_alpha(image, settings.normalize, settings.dtype)

    return image


def is_global(georef: GeoReference, cols: int, rows: int) -> bool:
    """
    Whether an input is a plate carree image covering the whole globe.

    The georeference must be plain ``+proj=longlat`` and the extreme
    longitudes and latitudes must land within one pixel of the image
    edges: lon -180/+180 (at lat 0) on columns 0/``cols``, lat +90/-90
    (at lon 0) on rows 0/``rows``.

    Parameters
    ----------
    georef : GeoReference
        Input georeference.
    cols, rows : int
        Input image size.

    Returns
    -------
    bool
    """
    if not georef.is_geographic:
        return False
    xs, ys = georef.lonlat_to_pixel(
        np.array([-180.0, 180.0, 0.0, 0.0]),
        np.array([0.0, 0.0, 90.0, -90.0]),
    )
    return bool(
        abs(xs[0]) < 1.0
        and abs(xs[1] - cols) < 1.0
        and abs(ys[2]) < 1.0
        and abs(ys[3] - rows) < 1.0
    )


def _premultiply(image: np.ndarray, alpha_max: float) -> np.ndarray:
    out = image.copy()
    out[:-1] *= image[-1] / alpha_max
    return out


def _unpremultiply(image: np.ndarray, alpha_max: float) -> np.ndarray:
    alpha = image[-1]
    opaque = alpha > 0
    scale = np.zeros_like(alpha)
    scale[opaque] = alpha_max / alpha[opaque]
    image[:-1] *= scale
    return image


def warp_image(
    image: np.ndarray,
    transform: GeoTransform,
    bbox: BBox,
    dtype: np.dtype,
    order: int = 1,
    col_shift: int = 0,
    wrap_columns: bool = False,
) -> np.ndarray:
    """
    Resample a working image onto an output pixel box.

    Parameters
    ----------
    image : np.ndarray
        ``(bands, rows, cols)`` float64 working image, alpha last.
    transform : GeoTransform
        Input-to-output pixel transform.
    bbox : BBox
        Output box to fill.
    dtype : np.dtype
        Working dtype of the result.
    order : int, default=1
        Spline order for ``map_coordinates``.
    col_shift : int, default=0
        Horizontal source shift subtracted from every sample column.
        Columns shifted outside the image read as transparent.
    wrap_columns : bool, default=False
        Cylindrical edge extension: sample columns wrap around the image
        and sample rows clamp to the first and last row.

    Returns
    -------
    np.ndarray
        ``(bands, bbox.height, bbox.width)`` array of *dtype*. Output
        pixels mapping outside the source are transparent.

    Raises
    ------
    DependencyError
        If scipy is not installed.
    GeolocationError
        If the reverse transform fails.
    """
    if not SCIPY_AVAILABLE:
        raise DependencyError(
            "scipy is required for reprojection. Install with: pip install scipy"
        )
    from pyproj.exceptions import ProjError

    bands, rows, cols = image.shape
    _, alpha_max = channel_range(dtype)

    # Output pixel centres
    out_x = np.arange(bbox.min_x, bbox.max_x, dtype=np.float64) + 0.5
    out_y = np.arange(bbox.min_y, bbox.max_y, dtype=np.float64) + 0.5
    grid_x, grid_y = np.meshgrid(out_x, out_y)
    try:
        src_x, src_y = transform.reverse_array(grid_x.ravel(), grid_y.ravel())
    except ProjError as e:
        raise GeolocationError(f"Reverse transform over {bbox} failed: {e}") from e

    # Pixel-centre index coordinates in the source
    src_x = snap_to_grid(np.asarray(src_x) - 0.5 - col_shift)
    src_y = snap_to_grid(np.asarray(src_y) - 0.5)

    valid = np.isfinite(src_x) & np.isfinite(src_y)
    premultiplied = _premultiply(image, alpha_max)

    if wrap_columns:
        # One wrapped column on each side so interpolation crosses the seam
        premultiplied = np.concatenate(
            [premultiplied[:, :, -1:], premultiplied, premultiplied[:, :, :1]],
            axis=2,
        )
        src_x = np.where(valid, np.mod(src_x, cols) + 1.0, 0.0)
    else:
        valid &= (
            (src_x >= -0.5) & (src_x <= cols - 0.5)
            & (src_y >= -0.5) & (src_y <= rows - 0.5)
        )

    coords = np.array([src_y[valid], src_x[valid]])
    out = np.zeros((bands, bbox.height * bbox.width), dtype=np.float64)
    if coords.shape[1] > 0:
        for b in range(bands):
            out[b, valid] = map_coordinates(
                premultiplied[b], coords, order=order, mode='nearest'
            )
    out = out.reshape(bands, bbox.height, bbox.width)
    return cast_to_channel(_unpremultiply(out, alpha_max), dtype)


def reproject_image(
    descriptor: InputImageDescriptor,
    output: 'OutputProjectionSpec',
    settings: ReprojectSettings,
) -> PlacedImage:
    """
    Warp one input into the output projection.

    Parameters
    ----------
    descriptor : InputImageDescriptor
        Input image, georeference and pixel-value options.
    output : OutputProjectionSpec
        Shared output projection.
    settings : ReprojectSettings
        Working dtype, normalization bounds and interpolation order.

    Returns
    -------
    PlacedImage
        Warped image covering the forward-projected placement box.

    Raises
    ------
    GeometryError
        If the placement box is empty.
    GeolocationError
        If a transform fails, or the shift correction is needed on a
        rotated transform.
    """
    image = load_working_image(
        descriptor.source, settings,
        nodata=descriptor.nodata,
        pixel_scale=descriptor.pixel_scale,
        pixel_offset=descriptor.pixel_offset,
    )
    _, rows, cols = image.shape

    transform = GeoTransform(descriptor.georef, output.georef)
    bbox = transform.forward_bbox(BBox(0, 0, cols, rows))
    if bbox.is_empty:
        raise GeometryError(
            f"Placement of {descriptor.name} in the output projection is "
            f"empty: {bbox}"
        )

    if is_global(descriptor.georef, cols, rows):
        logger.info(
            "Detected global overlay %s. Using cylindrical edge extension "
            "to hide the seam.", descriptor.name,
        )
        warped = warp_image(image, transform, bbox, settings.dtype,
                            order=settings.order, wrap_columns=True)
        return PlacedImage(warped, bbox)

    drift = transform.reverse(transform.forward((0.0, 0.0)))
    if np.hypot(*drift) > SHIFT_TOLERANCE * np.hypot(cols, rows):
        if transform.has_rotation:
            raise GeolocationError(
                f"{descriptor.name}: round trip through the output projection "
                f"is off by {tuple(drift)} pixels and the transform is rotated; "
                f"cannot correct with a horizontal shift."
            )
        shift = int(round(drift[0]))
        logger.info(
            "Round trip of %s is off by (%.1f, %.1f) pixels; shifting the "
            "source by %d columns.", descriptor.name, drift[0], drift[1], shift,
        )
        warped = warp_image(image, transform, bbox, settings.dtype,
                            order=settings.order, col_shift=shift)
        return PlacedImage(warped, bbox)

    warped = warp_image(image, transform, bbox, settings.dtype, order=settings.order)
    return PlacedImage(warped, bbox)


def passthrough_image(
    descriptor: InputImageDescriptor,
    settings: ReprojectSettings,
) -> PlacedImage:
    """Prepare a single non-georeferenced input without projecting it.

    Applies masking, rescale and normalization, then places the image at
    the origin.
    """
    image = load_working_image(
        descriptor.source, settings,
        nodata=descriptor.nodata,
        pixel_scale=descriptor.pixel_scale,
        pixel_offset=descriptor.pixel_offset,
    )
    _, rows, cols = image.shape
    return PlacedImage(cast_to_channel(image, settings.dtype), BBox(0, 0, cols, rows))
