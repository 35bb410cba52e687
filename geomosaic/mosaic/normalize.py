# -*- coding: utf-8 -*-
"""
Pixel Value Preparation - Working channel types, nodata masking, and value
normalization for mosaic inputs.

Every input is converted to a band-first float64 *working image* whose last
band is alpha, expressed in the working channel's native range (0 is
transparent, the channel maximum is opaque). Nodata masking, the optional
linear rescale and the optional normalization stretch all operate on that
representation; ``cast_to_channel`` converts the result back to the working
dtype once resampling is done.

Normalization bounds are computed once across every input by
``compute_normalize_bounds`` and handed to each reprojection explicitly.

Dependencies
------------
numpy

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
from typing import Iterable, NamedTuple, Optional, Tuple

# Third-party
import numpy as np

# geomosaic internal
from geomosaic.exceptions import ValidationError
from geomosaic.IO.base import ImageSource
from geomosaic.vocabulary import ChannelType

logger = logging.getLogger(__name__)

# Working dtypes accepted for composited pixels
_SUPPORTED_DTYPES = (np.uint8, np.uint16, np.int16, np.float32)


class NormalizeBounds(NamedTuple):
    """Global input value range stretched onto the channel range.

    Attributes
    ----------
    lo : float
        Smallest valid input value across all inputs.
    hi : float
        Largest valid input value across all inputs.
    """

    lo: float
    hi: float


def channel_dtype(
    channel_type: ChannelType,
    first_dtype: Optional[np.dtype] = None,
) -> np.dtype:
    """Resolve the working dtype of a run.

    Parameters
    ----------
    channel_type : ChannelType
        Requested channel type. ``NONE`` keeps *first_dtype*.
    first_dtype : np.dtype, optional
        Pixel dtype of the first input image.

    Returns
    -------
    np.dtype
        One of uint8, uint16, int16 or float32. Input dtypes outside that
        set fall back to float32.
    """
    if channel_type is not ChannelType.NONE:
        return np.dtype(channel_type.value)
    if first_dtype is None:
        return np.dtype(np.uint8)
    first_dtype = np.dtype(first_dtype)
    if any(first_dtype == np.dtype(t) for t in _SUPPORTED_DTYPES):
        return first_dtype
    return np.dtype(np.float32)


def channel_range(dtype: np.dtype) -> Tuple[float, float]:
    """Native ``(min, max)`` value range of a working channel.

    Integer channels span ``[0, iinfo.max]``; float channels span
    ``[0, 1]``. Alpha uses the same range.
    """
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.integer):
        return 0.0, float(np.iinfo(dtype).max)
    return 0.0, 1.0


def has_alpha(bands: int) -> bool:
    """Whether a source with ``bands`` bands carries its own alpha band.

    Grey-alpha (2 bands) and RGBA (4 bands) sources do.
    """
    return bands in (2, 4)


def _source_range(dtype: np.dtype) -> float:
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.integer):
        return float(np.iinfo(dtype).max)
    return 1.0


def channel_conversion(source_dtype: np.dtype, dtype: np.dtype) -> float:
    """Factor taking source channel values into the working channel range.

    1.0 when the dtypes match; otherwise the ratio of the channel maxima
    (float channels span ``[0, 1]``).
    """
    source_dtype = np.dtype(source_dtype)
    dtype = np.dtype(dtype)
    if source_dtype == dtype:
        return 1.0
    return channel_range(dtype)[1] / _source_range(source_dtype)


def to_working_image(
    data: np.ndarray,
    dtype: np.dtype,
    nodata: Optional[float] = None,
) -> np.ndarray:
    """Convert raw source pixels into a working image with alpha.

    Parameters
    ----------
    data : np.ndarray
        ``(rows, cols)`` or ``(bands, rows, cols)`` source pixels.
    dtype : np.dtype
        Working channel dtype.
    nodata : float, optional
        Nodata value in source units. Matching pixels become transparent
        before any channel conversion.

    Returns
    -------
    np.ndarray
        ``(bands, rows, cols)`` float64 array, alpha last. Colour and alpha
        are both converted from the source dtype's range into the working
        channel range; alpha is opaque unless the source supplies its own
        alpha band.
    """
    if data.ndim == 2:
        data = data[np.newaxis]
    _, alpha_max = channel_range(dtype)

    if has_alpha(data.shape[0]):
        colour = data[:-1].astype(np.float64)
        alpha = data[-1].astype(np.float64) * (alpha_max / _source_range(data.dtype))
    else:
        colour = data.astype(np.float64)
        alpha = np.full(data.shape[1:], alpha_max, dtype=np.float64)

    image = np.concatenate([colour, alpha[np.newaxis]], axis=0)
    if nodata is not None:
        mask_nodata(image, float(nodata))

    factor = channel_conversion(data.dtype, dtype)
    if factor != 1.0:
        logger.debug("Converting %s channels to %s (x%s)", data.dtype, np.dtype(dtype), factor)
        image[:-1] *= factor
    return image


def nodata_mask(colour: np.ndarray, nodata: float) -> np.ndarray:
    """Pixels whose every colour band equals ``nodata``.

    Parameters
    ----------
    colour : np.ndarray
        ``(bands, rows, cols)`` colour bands (alpha excluded).
    nodata : float
        Nodata value; NaN matches NaN.

    Returns
    -------
    np.ndarray
        ``(rows, cols)`` boolean mask.
    """
    if np.isnan(nodata):
        return np.all(np.isnan(colour), axis=0)
    return np.all(colour == nodata, axis=0)


def mask_nodata(image: np.ndarray, nodata: float) -> np.ndarray:
    """Make nodata pixels transparent. Operates in place and returns *image*."""
    mask = nodata_mask(image[:-1], nodata)
    image[-1][mask] = 0.0
    logger.debug("Masked %d nodata pixels (value %s)", int(mask.sum()), nodata)
    return image


def apply_pixel_scale(
    image: np.ndarray,
    dtype: np.dtype,
    scale: Optional[float] = None,
    offset: Optional[float] = None,
) -> np.ndarray:
    """Apply ``value * scale + offset`` to the colour bands.

    The linear map yields unit-range values, which are then stretched onto
    the working channel range and clipped: with a uint8 channel a scale of
    ``1/255`` leaves raw 0..255 input unchanged. Missing scale is 1 and
    missing offset is 0. Alpha is left unchanged.
    """
    scale = 1.0 if scale is None else float(scale)
    offset = 0.0 if offset is None else float(offset)
    lo, hi = channel_range(dtype)
    logger.debug("Apply input scaling: %s offset: %s", scale, offset)
    image[:-1] = np.clip((image[:-1] * scale + offset) * hi, lo, hi)
    return image


def normalize_retain_alpha(
    image: np.ndarray,
    bounds: NormalizeBounds,
    dtype: np.dtype,
) -> np.ndarray:
    """Stretch colour values from ``[lo, hi]`` onto the channel range.

    Parameters
    ----------
    image : np.ndarray
        Working image, alpha last. Modified in place.
    bounds : NormalizeBounds
        Global input range.
    dtype : np.dtype
        Working channel dtype.

    Returns
    -------
    np.ndarray
        *image*, with colour bands remapped and clipped. A degenerate range
        (``hi <= lo``) maps every value to the channel minimum.
    """
    out_lo, out_hi = channel_range(dtype)
    logger.debug("Apply normalizing: [%s, %s]", bounds.lo, bounds.hi)
    span = bounds.hi - bounds.lo
    if span <= 0:
        image[:-1] = out_lo
        return image
    scaled = (image[:-1] - bounds.lo) / span * (out_hi - out_lo) + out_lo
    image[:-1] = np.clip(scaled, out_lo, out_hi)
    return image


def cast_to_channel(image: np.ndarray, dtype: np.dtype) -> np.ndarray:
    """Clip a float working image to the channel range and cast to *dtype*.

    Integer channels are rounded to the nearest value first.
    """
    dtype = np.dtype(dtype)
    lo, hi = channel_range(dtype)
    if np.issubdtype(dtype, np.integer):
        # Signed colour channels keep their negative range
        info = np.iinfo(dtype)
        out = np.rint(image)
        out[:-1] = np.clip(out[:-1], info.min, info.max)
        out[-1] = np.clip(out[-1], lo, hi)
        return out.astype(dtype)
    return image.astype(dtype)


def compute_normalize_bounds(
    sources: Iterable[ImageSource],
    nodata: Optional[float] = None,
    dtype: Optional[np.dtype] = None,
) -> NormalizeBounds:
    """
    Global value range across all inputs.

    Parameters
    ----------
    sources : Iterable[ImageSource]
        Every input of the run.
    nodata : float, optional
        Explicit nodata value. When None, each source's stored nodata
        value is used.
    dtype : np.dtype, optional
        Working channel dtype. When given, values are converted into its
        range the same way ``to_working_image`` converts them.

    Returns
    -------
    NormalizeBounds
        Minimum and maximum colour value over all inputs, ignoring nodata
        pixels, transparent pixels and non-finite values.

    Raises
    ------
    ValidationError
        If no input has a single valid pixel.
    """
    lo = np.inf
    hi = -np.inf
    for source in sources:
        data = source.read_full()
        if data.ndim == 2:
            data = data[np.newaxis]
        colour = data.astype(np.float64)
        valid = np.ones(colour.shape[1:], dtype=bool)
        if has_alpha(colour.shape[0]):
            valid &= colour[-1] > 0
            colour = colour[:-1]
        source_nodata = nodata if nodata is not None else source.nodata
        if source_nodata is not None:
            valid &= ~nodata_mask(colour, float(source_nodata))
        values = colour[:, valid]
        values = values[np.isfinite(values)]
        if dtype is not None:
            values = values * channel_conversion(data.dtype, dtype)
        if values.size == 0:
            continue
        lo = min(lo, float(values.min()))
        hi = max(hi, float(values.max()))

    if not np.isfinite(lo):
        raise ValidationError("No valid pixels found to compute normalization range")
    logger.debug("Normalization range: [%s, %s]", lo, hi)
    return NormalizeBounds(lo, hi)
