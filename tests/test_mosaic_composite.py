# -*- coding: utf-8 -*-
"""
Composite Canvas Tests - Insertion, draft rendering and multiband blending.

Dependencies
------------
pytest
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

import threading

import pytest
import numpy as np

from geomosaic.exceptions import GeometryError, MosaicError
from geomosaic.geometry import BBox
from geomosaic.mosaic.composite import CompositeCanvas
from geomosaic.vocabulary import BlendMode


def _tile(value, rows=10, cols=10, alpha=255):
    image = np.empty((2, rows, cols), dtype=np.uint8)
    image[0] = value
    image[1] = alpha
    return image


# ---------------------------------------------------------------------------
# Insertion and lifecycle
# ---------------------------------------------------------------------------

class TestCanvasLifecycle:

    def test_bbox_tracks_insertions(self):
        canvas = CompositeCanvas()
        assert canvas.bbox.is_empty
        canvas.insert(_tile(1), 0, 0)
        canvas.insert(_tile(2), 5, -3)
        assert canvas.bbox == BBox(0, -3, 15, 10)
        assert len(canvas.insertions) == 2

    def test_data_before_prepare(self):
        canvas = CompositeCanvas()
        assert not canvas.prepared
        assert canvas.rows == 0 and canvas.cols == 0
        with pytest.raises(MosaicError):
            canvas.data

    def test_prepare_translates_bbox(self):
        canvas = CompositeCanvas()
        canvas.insert(_tile(1), 20, 30)
        canvas.prepare(BBox(10, 10, 50, 50))
        assert canvas.prepared
        assert canvas.bbox == BBox(10, 20, 20, 30)
        assert canvas.data.shape == (2, 40, 40)
        assert (canvas.rows, canvas.cols) == (40, 40)

    def test_prepare_defaults_to_extent(self):
        canvas = CompositeCanvas()
        canvas.insert(_tile(1), 20, 30)
        canvas.prepare()
        assert canvas.data.shape == (2, 10, 10)
        assert canvas.bbox == BBox(0, 0, 10, 10)

    def test_insert_after_prepare(self):
        canvas = CompositeCanvas()
        canvas.insert(_tile(1), 0, 0)
        canvas.prepare()
        with pytest.raises(MosaicError):
            canvas.insert(_tile(2), 0, 0)

    def test_prepare_twice(self):
        canvas = CompositeCanvas()
        canvas.insert(_tile(1), 0, 0)
        canvas.prepare()
        with pytest.raises(MosaicError):
            canvas.prepare()

    def test_empty_canvas(self):
        with pytest.raises(GeometryError):
            CompositeCanvas().prepare()

    def test_band_mismatch(self):
        canvas = CompositeCanvas(bands=4)
        with pytest.raises(ValueError, match="Expected 4 bands"):
            canvas.insert(_tile(1), 0, 0)

    def test_non_3d_image(self):
        with pytest.raises(ValueError):
            CompositeCanvas().insert(np.zeros((4, 4), dtype=np.uint8), 0, 0)

    def test_progress_reaches_one(self):
        canvas = CompositeCanvas()
        for x in range(4):
            canvas.insert(_tile(x), 10 * x, 0)
        reported = []
        canvas.prepare(progress_callback=reported.append)
        assert reported == sorted(reported)
        assert reported[-1] == pytest.approx(1.0)

    def test_concurrent_inserts(self):
        canvas = CompositeCanvas(bands=2)

        def worker(k):
            for i in range(25):
                canvas.insert(_tile(k), 10 * i, 10 * k)

        threads = [threading.Thread(target=worker, args=(k,)) for k in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(canvas.insertions) == 100
        assert canvas.bbox == BBox(0, 0, 250, 40)

    def test_set_draft_mode(self):
        canvas = CompositeCanvas()
        canvas.set_draft_mode(False)
        assert canvas.blend_mode is BlendMode.MULTIBAND
        canvas.set_draft_mode(True)
        assert canvas.blend_mode is BlendMode.DRAFT


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

class TestDraftRender:

    def test_last_insertion_wins(self):
        canvas = CompositeCanvas()
        canvas.insert(_tile(100), 0, 0)
        canvas.insert(_tile(200), 5, 0)
        canvas.prepare()
        data = canvas.data
        assert data.shape == (2, 10, 15)
        assert np.all(data[0, :, :5] == 100)
        assert np.all(data[0, :, 5:] == 200)
        assert np.all(data[1] == 255)

    def test_transparent_pixels_do_not_overwrite(self):
        canvas = CompositeCanvas()
        canvas.insert(_tile(100), 0, 0)
        canvas.insert(_tile(200, alpha=0), 0, 0)
        canvas.prepare()
        assert np.all(canvas.data[0] == 100)

    def test_uncovered_pixels_are_transparent(self):
        canvas = CompositeCanvas()
        canvas.insert(_tile(100), 0, 0)
        canvas.prepare(BBox(0, 0, 20, 10))
        assert np.all(canvas.data[1, :, 10:] == 0)

    def test_clipped_insertion(self):
        canvas = CompositeCanvas()
        canvas.insert(_tile(100), -5, -5)
        canvas.prepare(BBox(0, 0, 10, 10))
        assert np.all(canvas.data[0, :5, :5] == 100)
        assert np.all(canvas.data[1, 5:, :] == 0)


class TestMultibandRender:

    def test_equal_edge_distance_averages(self):
        canvas = CompositeCanvas(blend_mode=BlendMode.MULTIBAND)
        canvas.insert(_tile(100), 0, 0)
        canvas.insert(_tile(200), 5, 0)
        canvas.prepare()
        data = canvas.data
        assert data[0, 5, 7] == 150
        assert data[0, 5, 2] == 100
        assert data[0, 5, 12] == 200
        assert np.all(data[1] == 255)

    def test_blend_favours_interior(self):
        canvas = CompositeCanvas(blend_mode=BlendMode.MULTIBAND)
        canvas.insert(_tile(100), 0, 0)
        canvas.insert(_tile(200), 5, 0)
        canvas.prepare()
        # Column 6 is deep inside the first tile, near the second's edge
        assert 100 < canvas.data[0, 5, 6] < 150

    def test_float_channel(self):
        image = np.zeros((2, 4, 4), dtype=np.float32)
        image[0] = 0.25
        image[1] = 1.0
        canvas = CompositeCanvas(dtype=np.float32, blend_mode=BlendMode.MULTIBAND)
        canvas.insert(image, 0, 0)
        canvas.prepare()
        assert canvas.data.dtype == np.float32
        np.testing.assert_allclose(canvas.data[0], 0.25)
