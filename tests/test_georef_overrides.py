# -*- coding: utf-8 -*-
"""
Input Georeference Tests - Manual bounds, datum and projection overrides.

Dependencies
------------
pytest
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

import pytest
import numpy as np

from rasterio.transform import Affine

from geomosaic.exceptions import ValidationError
from geomosaic.georef.overrides import (
    LUNAR_RADIUS,
    MARS_RADIUS,
    datum_terms,
    make_input_georef,
    projection_override_terms,
)
from geomosaic.IO.array import ArraySource
from geomosaic.mosaic.options import DatumSettings, MosaicOptions, ProjectionSettings
from geomosaic.vocabulary import DatumOverride, ProjectionType


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def plain_source():
    return ArraySource(np.zeros((180, 360), dtype=np.uint8), name='plain.png')


@pytest.fixture
def geo_source():
    return ArraySource(
        np.zeros((100, 200), dtype=np.uint8),
        geolocation={'crs': 'EPSG:4326',
                     'transform': Affine(0.1, 0.0, 10.0, 0.0, -0.1, 50.0)},
        name='geo.tif',
    )


# ---------------------------------------------------------------------------
# PROJ term builders
# ---------------------------------------------------------------------------

class TestTerms:

    def test_datum_terms(self):
        assert datum_terms(DatumSettings(DatumOverride.WGS84)) == ['+datum=WGS84']
        assert datum_terms(DatumSettings(DatumOverride.LUNAR)) == [f'+R={LUNAR_RADIUS}']
        assert datum_terms(DatumSettings(DatumOverride.MARS)) == [f'+R={MARS_RADIUS}']
        assert datum_terms(DatumSettings(DatumOverride.SPHERE, 1000.0)) == ['+R=1000.0']

    def test_datum_terms_default(self):
        assert datum_terms(DatumSettings()) == ['+datum=WGS84']

    def test_utm_south(self):
        terms = projection_override_terms(
            ProjectionSettings(ProjectionType.UTM, utm_zone=-33)
        )
        assert terms == ['+proj=utm', '+zone=33', '+south']

    def test_lcc_parallels(self):
        terms = projection_override_terms(ProjectionSettings(
            ProjectionType.LAMBERT_CONFORMAL_CONIC, lat=40.0, lon=-96.0, p1=33.0, p2=45.0
        ))
        assert terms[0] == '+proj=lcc'
        assert '+lat_1=33.0' in terms
        assert '+lat_2=45.0' in terms

    def test_default_has_no_terms(self):
        assert projection_override_terms(ProjectionSettings()) == []


# ---------------------------------------------------------------------------
# make_input_georef
# ---------------------------------------------------------------------------

class TestMakeInputGeoref:

    def test_stored_georeference(self, geo_source):
        opts = MosaicOptions(inputs=[geo_source])
        georef = make_input_georef(geo_source, opts)
        assert georef.pixel_to_lonlat(0.0, 0.0) == pytest.approx((10.0, 50.0))

    def test_missing_georeference(self, plain_source):
        opts = MosaicOptions(inputs=[plain_source])
        with pytest.raises(ValidationError):
            make_input_georef(plain_source, opts)

    def test_manual_bounds(self, plain_source):
        opts = MosaicOptions(inputs=[plain_source], north=10.0, south=-10.0,
                             east=20.0, west=-20.0)
        opts.validate()
        georef = make_input_georef(plain_source, opts)
        assert georef.is_geographic
        assert georef.pixel_to_lonlat(0.0, 0.0) == pytest.approx((-20.0, 10.0))
        assert georef.pixel_to_lonlat(360.0, 180.0) == pytest.approx((20.0, -10.0))

    def test_global_flag(self, plain_source):
        opts = MosaicOptions(inputs=[plain_source], global_=True)
        opts.validate()
        georef = make_input_georef(plain_source, opts)
        assert georef.lonlat_to_pixel(180.0, -90.0) == pytest.approx((360.0, 180.0))

    def test_lunar_datum(self, geo_source):
        opts = MosaicOptions(inputs=[geo_source], datum=DatumSettings(DatumOverride.LUNAR))
        georef = make_input_georef(geo_source, opts)
        assert georef.proj4_str() == '+proj=longlat'
        assert georef.crs.ellipsoid.semi_major_metre == pytest.approx(LUNAR_RADIUS)
        assert georef.transform == Affine(0.1, 0.0, 10.0, 0.0, -0.1, 50.0)

    def test_projection_override(self, geo_source):
        opts = MosaicOptions(
            inputs=[geo_source],
            projection=ProjectionSettings(ProjectionType.SINUSOIDAL, lon=0.0),
        )
        georef = make_input_georef(geo_source, opts)
        assert georef.proj4_str().startswith('+proj=sinu')
        assert not georef.is_geographic
