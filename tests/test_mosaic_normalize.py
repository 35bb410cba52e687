# -*- coding: utf-8 -*-
"""
Pixel Value Preparation Tests - Channel types, nodata masking, rescaling and
normalization.

Dependencies
------------
pytest

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

import pytest
import numpy as np

from geomosaic.exceptions import ValidationError
from geomosaic.IO.array import ArraySource
from geomosaic.mosaic.normalize import (
    NormalizeBounds,
    apply_pixel_scale,
    cast_to_channel,
    channel_conversion,
    channel_dtype,
    channel_range,
    compute_normalize_bounds,
    mask_nodata,
    normalize_retain_alpha,
    to_working_image,
)
from geomosaic.vocabulary import ChannelType


# ---------------------------------------------------------------------------
# Channel types
# ---------------------------------------------------------------------------

class TestChannelTypes:

    def test_explicit_channel_type(self):
        assert channel_dtype(ChannelType.UINT16, np.uint8) == np.uint16
        assert channel_dtype(ChannelType.FLOAT) == np.float32

    def test_none_keeps_first_input(self):
        assert channel_dtype(ChannelType.NONE, np.dtype(np.int16)) == np.int16

    def test_unsupported_falls_back_to_float(self):
        assert channel_dtype(ChannelType.NONE, np.dtype(np.float64)) == np.float32
        assert channel_dtype(ChannelType.NONE, np.dtype(np.int32)) == np.float32

    def test_ranges(self):
        assert channel_range(np.uint8) == (0.0, 255.0)
        assert channel_range(np.uint16) == (0.0, 65535.0)
        assert channel_range(np.float32) == (0.0, 1.0)


# ---------------------------------------------------------------------------
# Working images
# ---------------------------------------------------------------------------

class TestWorkingImage:

    def test_single_band_gets_opaque_alpha(self):
        image = to_working_image(np.full((4, 5), 7, dtype=np.uint8), np.dtype(np.uint8))
        assert image.shape == (2, 4, 5)
        assert np.all(image[0] == 7)
        assert np.all(image[1] == 255)

    def test_rgba_alpha_is_kept(self):
        data = np.zeros((4, 3, 3), dtype=np.uint8)
        data[3, 0, 0] = 255
        image = to_working_image(data, np.dtype(np.uint8))
        assert image.shape == (4, 3, 3)
        assert image[3, 0, 0] == 255
        assert image[3, 1, 1] == 0

    def test_alpha_rescaled_to_channel(self):
        data = np.full((2, 2, 2), 255, dtype=np.uint8)
        image = to_working_image(data, np.dtype(np.uint16))
        assert np.all(image[-1] == 65535)

    def test_colour_converted_between_channels(self):
        data = np.zeros((4, 1, 2), dtype=np.uint16)
        data[:3, 0, 0] = 32768
        data[:3, 0, 1] = 65535
        data[3] = 65535
        image = to_working_image(data, np.dtype(np.uint8))
        out = cast_to_channel(image, np.dtype(np.uint8))
        np.testing.assert_array_equal(out[:3, 0, 0], [128, 128, 128])
        np.testing.assert_array_equal(out[:3, 0, 1], [255, 255, 255])
        assert np.all(out[3] == 255)

    def test_float_source_into_integer_channel(self):
        image = to_working_image(np.array([[0.0, 0.5, 1.0]], dtype=np.float32), np.dtype(np.uint8))
        np.testing.assert_allclose(image[0], [[0.0, 127.5, 255.0]])

    def test_nodata_matched_in_source_units(self):
        data = np.array([[1000, 2000]], dtype=np.uint16)
        image = to_working_image(data, np.dtype(np.uint8), nodata=1000)
        np.testing.assert_array_equal(image[-1], [[0, 255]])
        assert image[0, 0, 1] == pytest.approx(2000 * 255.0 / 65535.0)

    def test_channel_conversion_factors(self):
        assert channel_conversion(np.uint8, np.uint8) == 1.0
        assert channel_conversion(np.uint16, np.uint8) == pytest.approx(255.0 / 65535.0)
        assert channel_conversion(np.uint8, np.uint16) == pytest.approx(257.0)
        assert channel_conversion(np.uint8, np.float32) == pytest.approx(1.0 / 255.0)

    def test_mask_nodata(self):
        data = np.array([[0, 5], [0, 0]], dtype=np.uint8)
        image = mask_nodata(to_working_image(data, np.dtype(np.uint8)), 0.0)
        np.testing.assert_array_equal(image[-1], [[0, 255], [0, 0]])

    def test_mask_nodata_requires_every_band(self):
        data = np.zeros((3, 1, 2), dtype=np.uint8)
        data[1, 0, 1] = 9
        image = mask_nodata(to_working_image(data, np.dtype(np.uint8)), 0.0)
        np.testing.assert_array_equal(image[-1], [[0, 255]])

    def test_mask_nan_nodata(self):
        data = np.array([[np.nan, 0.5]], dtype=np.float32)
        image = mask_nodata(to_working_image(data, np.dtype(np.float32)), float('nan'))
        np.testing.assert_array_equal(image[-1], [[0.0, 1.0]])


# ---------------------------------------------------------------------------
# Value transforms
# ---------------------------------------------------------------------------

class TestValueTransforms:

    def test_pixel_scale_maps_unit_range_onto_channel(self):
        image = to_working_image(np.array([[0, 128, 255]], dtype=np.uint8), np.dtype(np.uint8))
        apply_pixel_scale(image, np.dtype(np.uint8), 1.0 / 255.0)
        np.testing.assert_allclose(image[0], [[0.0, 128.0, 255.0]])
        assert np.all(image[-1] == 255)

    def test_pixel_scale_clips_to_channel(self):
        image = to_working_image(np.array([[10, 200]], dtype=np.uint8), np.dtype(np.uint8))
        apply_pixel_scale(image, np.dtype(np.uint8), 2.0)
        np.testing.assert_array_equal(image[0], [[255.0, 255.0]])
        assert np.all(image[-1] == 255)

    def test_pixel_offset_only(self):
        image = to_working_image(np.array([[0]], dtype=np.uint8), np.dtype(np.uint8))
        apply_pixel_scale(image, np.dtype(np.uint8), offset=0.5)
        assert image[0, 0, 0] == pytest.approx(127.5)

    def test_pixel_scale_float_channel(self):
        image = to_working_image(np.array([[0.2]], dtype=np.float32), np.dtype(np.float32))
        apply_pixel_scale(image, np.dtype(np.float32), 2.0)
        assert image[0, 0, 0] == pytest.approx(0.4)
        assert image[-1, 0, 0] == 1.0

    def test_normalize_retain_alpha(self):
        image = to_working_image(np.array([[0, 50, 100]], dtype=np.uint8), np.dtype(np.uint8))
        image[-1, 0, 0] = 0
        normalize_retain_alpha(image, NormalizeBounds(0.0, 100.0), np.dtype(np.uint8))
        np.testing.assert_allclose(image[0], [[0.0, 127.5, 255.0]])
        np.testing.assert_array_equal(image[-1], [[0, 255, 255]])

    def test_normalize_degenerate_range(self):
        image = to_working_image(np.array([[7, 7]], dtype=np.uint8), np.dtype(np.uint8))
        normalize_retain_alpha(image, NormalizeBounds(7.0, 7.0), np.dtype(np.uint8))
        assert np.all(image[0] == 0)

    def test_cast_rounds_integers(self):
        image = np.array([[[1.4, 1.6]], [[255.0, 0.0]]])
        out = cast_to_channel(image, np.dtype(np.uint8))
        assert out.dtype == np.uint8
        np.testing.assert_array_equal(out[0], [[1, 2]])


# ---------------------------------------------------------------------------
# Normalization pre-pass
# ---------------------------------------------------------------------------

class TestNormalizeBounds:

    def test_bounds_over_all_inputs(self):
        a = ArraySource(np.array([[5, 10]], dtype=np.uint8))
        b = ArraySource(np.array([[3, 40]], dtype=np.uint8))
        assert compute_normalize_bounds([a, b]) == NormalizeBounds(3.0, 40.0)

    def test_ignores_stored_nodata(self):
        a = ArraySource(np.array([[0, 10, 20]], dtype=np.uint8), nodata=0)
        assert compute_normalize_bounds([a]) == NormalizeBounds(10.0, 20.0)

    def test_explicit_nodata_wins(self):
        a = ArraySource(np.array([[0, 10, 20]], dtype=np.uint8), nodata=0)
        assert compute_normalize_bounds([a], nodata=20) == NormalizeBounds(0.0, 10.0)

    def test_ignores_non_finite(self):
        a = ArraySource(np.array([[np.nan, -1.5, np.inf, 2.0]], dtype=np.float32))
        assert compute_normalize_bounds([a]) == NormalizeBounds(-1.5, 2.0)

    def test_no_valid_pixels(self):
        a = ArraySource(np.zeros((2, 2), dtype=np.uint8), nodata=0)
        with pytest.raises(ValidationError):
            compute_normalize_bounds([a])

    def test_bounds_in_working_channel_units(self):
        a = ArraySource(np.array([[0, 32768, 65535]], dtype=np.uint16), nodata=0)
        bounds = compute_normalize_bounds([a], dtype=np.dtype(np.uint8))
        assert bounds.lo == pytest.approx(32768 * 255.0 / 65535.0)
        assert bounds.hi == pytest.approx(255.0)
