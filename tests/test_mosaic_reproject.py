# -*- coding: utf-8 -*-
"""
Per-Image Reprojection Tests - Global detection, warping, corrective shift
and the pass-through path.

Dependencies
------------
pytest
scipy
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

import logging

import pytest
import numpy as np

from rasterio.transform import Affine

from geomosaic.exceptions import GeolocationError, GeometryError
from geomosaic.geometry import BBox
from geomosaic.georef.affine import AffineGeoReference
from geomosaic.georef.transform import GeoTransform
from geomosaic.IO.array import ArraySource
from geomosaic.mosaic.normalize import NormalizeBounds
from geomosaic.mosaic.projection import build_output_spec
from geomosaic.mosaic.reproject import (
    INTERPOLATION_ORDERS,
    InputImageDescriptor,
    ReprojectSettings,
    is_global,
    passthrough_image,
    reproject_image,
)
from geomosaic.vocabulary import Interpolation, MosaicMode


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def output():
    """KML output projection at total resolution 1024."""
    return build_output_spec(MosaicMode.KML, 1024)


@pytest.fixture
def settings():
    return ReprojectSettings(dtype=np.dtype(np.uint8))


@pytest.fixture
def rgb_image():
    rng = np.random.default_rng(1234)
    return rng.integers(1, 256, size=(3, 50, 80), dtype=np.uint8)


def _global_georef(step=1.0, west=-180.0, north=90.0):
    return AffineGeoReference(Affine(step, 0.0, west, 0.0, -step, north), 'EPSG:4326')


# ---------------------------------------------------------------------------
# Global-coverage detection
# ---------------------------------------------------------------------------

class TestIsGlobal:

    def test_whole_globe(self):
        assert is_global(_global_georef(), 360, 180)

    def test_within_one_pixel(self):
        assert is_global(_global_georef(west=-179.5), 360, 180)
        assert is_global(_global_georef(north=89.5), 360, 180)

    @pytest.mark.parametrize("west, north, cols, rows", [
        (-178.5, 90.0, 360, 180),
        (-180.0, 88.5, 360, 180),
        (-180.0, 90.0, 362, 180),
        (-180.0, 90.0, 360, 178),
    ])
    def test_edge_perturbed_beyond_one_pixel(self, west, north, cols, rows):
        assert not is_global(_global_georef(west=west, north=north), cols, rows)

    def test_regional_image(self):
        georef = AffineGeoReference(Affine(0.1, 0.0, 10.0, 0.0, -0.1, 50.0), 'EPSG:4326')
        assert not is_global(georef, 100, 100)

    def test_projected_is_never_global(self):
        georef = AffineGeoReference(
            Affine(1000.0, 0.0, -180000.0, 0.0, -1000.0, 90000.0), 'EPSG:3857'
        )
        assert not is_global(georef, 360, 180)

    def test_requires_geographic_georef(self, monkeypatch):
        monkeypatch.setattr(AffineGeoReference, 'is_geographic', property(lambda self: False))
        assert not is_global(_global_georef(), 360, 180)


# ---------------------------------------------------------------------------
# Standard warp
# ---------------------------------------------------------------------------

class TestStandardWarp:

    def test_identity_round_trip(self, output, settings, rgb_image, caplog):
        source = ArraySource(rgb_image)
        descriptor = InputImageDescriptor(source, output.georef)
        with caplog.at_level(logging.INFO, logger='geomosaic.mosaic.reproject'):
            placed = reproject_image(descriptor, output, settings)

        assert placed.bbox == BBox(0, 0, 80, 50)
        assert placed.image.shape == (4, 50, 80)
        assert placed.image.dtype == np.uint8
        np.testing.assert_array_equal(placed.image[:3], rgb_image)
        assert np.all(placed.image[3] == 255)
        assert 'shifting' not in caplog.text

    def test_translated_placement(self, output, settings, rgb_image):
        step = 360.0 / 1024
        georef = AffineGeoReference(
            Affine(step, 0.0, -180.0 + 100 * step, 0.0, -step, 180.0 - 300 * step),
            'EPSG:4326',
        )
        placed = reproject_image(
            InputImageDescriptor(ArraySource(rgb_image), georef), output, settings
        )
        assert placed.bbox == BBox(100, 300, 180, 350)
        assert (placed.x, placed.y) == (100, 300)
        np.testing.assert_array_equal(placed.image[:3], rgb_image)

    def test_upsampled_placement_is_opaque(self, output, settings):
        # Half-resolution input: every source pixel covers 2x2 output pixels
        step = 2 * 360.0 / 1024
        georef = AffineGeoReference(Affine(step, 0.0, 0.0, 0.0, -step, 45.0), 'EPSG:4326')
        data = np.full((20, 30), 100, dtype=np.uint8)
        placed = reproject_image(
            InputImageDescriptor(ArraySource(data), georef), output, settings
        )
        assert placed.bbox.width == 60
        assert placed.bbox.height == 40
        assert np.all(placed.image[0] == 100)
        assert np.all(placed.image[1] == 255)

    def test_nodata_becomes_transparent(self, output, settings):
        data = np.full((10, 10), 50, dtype=np.uint8)
        data[2:4, 5:7] = 0
        descriptor = InputImageDescriptor(ArraySource(data, nodata=0), output.georef)
        placed = reproject_image(descriptor, output, settings)
        assert np.all(placed.image[1, 2:4, 5:7] == 0)
        assert np.all(placed.image[0, 2:4, 5:7] == 0)
        assert placed.image[1, 0, 0] == 255
        assert placed.image[0, 0, 0] == 50

    def test_explicit_nodata_overrides_stored(self, output, settings):
        data = np.array([[0, 9], [9, 9]], dtype=np.uint8)
        descriptor = InputImageDescriptor(ArraySource(data, nodata=0), output.georef, nodata=9)
        placed = reproject_image(descriptor, output, settings)
        np.testing.assert_array_equal(placed.image[1], [[255, 0], [0, 0]])

    def test_pixel_scale_keeps_unit_scaled_values(self, output, settings):
        data = np.array([[0, 128, 255]], dtype=np.uint8)
        descriptor = InputImageDescriptor(ArraySource(data), output.georef,
                                          pixel_scale=1.0 / 255.0)
        placed = reproject_image(descriptor, output, settings)
        np.testing.assert_array_equal(placed.image[0], [[0, 128, 255]])

    def test_normalize_stretches_to_channel(self, output):
        data = np.array([[20, 40, 60]], dtype=np.uint8)
        settings = ReprojectSettings(dtype=np.dtype(np.uint8),
                                     normalize=NormalizeBounds(0.0, 60.0))
        descriptor = InputImageDescriptor(ArraySource(data), output.georef)
        placed = reproject_image(descriptor, output, settings)
        np.testing.assert_array_equal(placed.image[0], [[85, 170, 255]])

    def test_wider_source_converted_to_channel(self, output, settings):
        data = np.array([[0, 32768, 65535]], dtype=np.uint16)
        descriptor = InputImageDescriptor(ArraySource(data), output.georef)
        placed = reproject_image(descriptor, output, settings)
        assert placed.image.dtype == np.uint8
        np.testing.assert_array_equal(placed.image[0], [[0, 128, 255]])
        assert np.all(placed.image[1] == 255)

    def test_nearest_interpolation(self, output, rgb_image):
        settings = ReprojectSettings(dtype=np.dtype(np.uint8),
                                     order=INTERPOLATION_ORDERS[Interpolation.NEAREST])
        assert settings.order == 0
        descriptor = InputImageDescriptor(ArraySource(rgb_image), output.georef)
        placed = reproject_image(descriptor, output, settings)
        np.testing.assert_array_equal(placed.image[:3], rgb_image)

    def test_empty_placement(self, output, settings, monkeypatch):
        monkeypatch.setattr(GeoTransform, 'forward_bbox', lambda self, bbox: BBox.empty())
        descriptor = InputImageDescriptor(
            ArraySource(np.zeros((5, 5), dtype=np.uint8), name='lost.tif'), output.georef
        )
        with pytest.raises(GeometryError, match="lost.tif"):
            reproject_image(descriptor, output, settings)


# ---------------------------------------------------------------------------
# Global and corrective warps
# ---------------------------------------------------------------------------

class TestSpecialWarps:

    def test_global_overlay(self, output, settings, caplog):
        data = np.tile(np.arange(360, dtype=np.float64) % 200, (180, 1)).astype(np.uint8)
        descriptor = InputImageDescriptor(ArraySource(data, name='globe.tif'),
                                          _global_georef())
        with caplog.at_level(logging.INFO, logger='geomosaic.mosaic.reproject'):
            placed = reproject_image(descriptor, output, settings)

        assert 'Detected global overlay' in caplog.text
        assert placed.bbox == BBox(0, 256, 1024, 768)
        # Wrapped columns leave no transparent seam at either edge
        assert np.all(placed.image[1] == 255)

    def test_corrective_shift(self, output, settings, rgb_image, monkeypatch, caplog):
        monkeypatch.setattr(GeoTransform, 'reverse',
                            lambda self, point: np.array([50.0, 0.0]))
        descriptor = InputImageDescriptor(ArraySource(rgb_image), output.georef)
        with caplog.at_level(logging.INFO, logger='geomosaic.mosaic.reproject'):
            placed = reproject_image(descriptor, output, settings)

        assert 'shifting the source by 50 columns' in caplog.text
        assert placed.bbox == BBox(0, 0, 80, 50)
        assert np.all(placed.image[3, :, :50] == 0)
        np.testing.assert_array_equal(placed.image[:3, :, 50:], rgb_image[:, :, :30])

    def test_corrective_shift_with_rotation(self, output, settings, rgb_image, monkeypatch):
        monkeypatch.setattr(GeoTransform, 'reverse',
                            lambda self, point: np.array([50.0, 0.0]))
        monkeypatch.setattr(GeoTransform, 'has_rotation', property(lambda self: True))
        descriptor = InputImageDescriptor(ArraySource(rgb_image), output.georef)
        with pytest.raises(GeolocationError, match="rotated"):
            reproject_image(descriptor, output, settings)


# ---------------------------------------------------------------------------
# Pass-through
# ---------------------------------------------------------------------------

class TestPassthrough:

    def test_placed_at_origin(self, settings, rgb_image):
        placed = passthrough_image(InputImageDescriptor(ArraySource(rgb_image)), settings)
        assert placed.bbox == BBox(0, 0, 80, 50)
        np.testing.assert_array_equal(placed.image[:3], rgb_image)
        assert np.all(placed.image[3] == 255)

    def test_masks_nodata(self, settings):
        data = np.array([[0, 1]], dtype=np.uint8)
        placed = passthrough_image(
            InputImageDescriptor(ArraySource(data), nodata=0), settings
        )
        np.testing.assert_array_equal(placed.image[1], [[0, 255]])
