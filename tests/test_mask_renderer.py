"""Tests for day/night mask rasterization."""

import math

import numpy as np
import pytest

from daynight.mask_renderer import (
    DEFAULT_STRIDE,
    NIGHT_ALPHA,
    MaskRenderer,
    get_render_timings,
    render_mask,
)
from daynight.projection import MercatorViewport
from daynight.solar import SubsolarPoint

from .conftest import EquirectViewport, FunctionViewport, RecordingSurface

DAY = (0.0, 0.0)
NIGHT = (0.0, 180.0)


def _left_columns_night(limit):
    """Pixel function: night for x < limit, day elsewhere (sun at 0, 0)."""
    def func(x, y):
        return NIGHT if x < limit else DAY
    return func


class ScalarOnly:
    """Hides a viewport's vectorized projection."""

    def __init__(self, viewport):
        self.width = viewport.width
        self.height = viewport.height
        self._viewport = viewport

    def pixel_to_geo(self, x, y):
        return self._viewport.pixel_to_geo(x, y)


class TestMaskRendererInit:

    def test_defaults(self):
        renderer = MaskRenderer()
        assert renderer.stride == DEFAULT_STRIDE == 2
        assert renderer.night_alpha == NIGHT_ALPHA == 90

    @pytest.mark.parametrize("stride", [0, -1, 1.5])
    def test_rejects_bad_stride(self, stride):
        with pytest.raises(ValueError):
            MaskRenderer(stride=stride)

    @pytest.mark.parametrize("alpha", [-1, 256])
    def test_rejects_bad_alpha(self, alpha):
        with pytest.raises(ValueError):
            MaskRenderer(night_alpha=alpha)


class TestDegenerateViewports:

    @pytest.mark.parametrize("width, height", [(0, 10), (10, 0), (0, 0), (-3, 5)])
    def test_empty_viewport_draws_nothing(self, width, height, equator_noon, surface):
        viewport = EquirectViewport(width, height)
        assert MaskRenderer().render(viewport, equator_noon, surface) is None
        assert viewport.calls == 0
        assert surface.blits == []


class TestRender:

    def test_buffer_shape_and_colour(self, equator_noon):
        viewport = EquirectViewport(40, 20)
        buffer = render_mask(viewport, equator_noon)
        assert buffer.shape == (20, 40, 4)
        assert buffer.dtype == np.uint8
        assert not np.any(buffer[:, :, :3])
        assert set(np.unique(buffer[:, :, 3])) <= {0, NIGHT_ALPHA}

    def test_both_sides_present(self, equator_noon):
        buffer = render_mask(EquirectViewport(40, 20), equator_noon)
        alpha = buffer[:, :, 3]
        # Sun at (0, 0): the middle of a plate carree map is day, the edges night
        assert alpha[10, 20] == 0
        assert alpha[10, 0] == NIGHT_ALPHA
        assert alpha[10, 39] == NIGHT_ALPHA

    def test_custom_alpha(self, equator_noon):
        buffer = render_mask(EquirectViewport(40, 20), equator_noon, night_alpha=200)
        assert set(np.unique(buffer[:, :, 3])) == {0, 200}

    def test_samples_once_per_cell(self, equator_noon):
        for width, height, stride in [(40, 20, 1), (40, 20, 2), (41, 21, 2), (10, 7, 4)]:
            viewport = EquirectViewport(width, height)
            render_mask(viewport, equator_noon, stride=stride)
            assert viewport.calls == math.ceil(width / stride) * math.ceil(height / stride)

    def test_samples_top_left_of_each_cell(self, equator_noon):
        viewport = FunctionViewport(5, 3, lambda x, y: DAY)
        render_mask(viewport, equator_noon, stride=2)
        assert sorted(viewport.calls) == [(0, 0), (0, 2), (2, 0), (2, 2), (4, 0), (4, 2)]
        assert all(isinstance(v, int) for xy in viewport.calls for v in xy)

    def test_cells_take_the_sample_value(self, equator_noon):
        # Samples at x = 0, 2, 4, 6; the one at x = 2 is night, so its whole cell is
        viewport = FunctionViewport(7, 5, _left_columns_night(3))
        buffer = render_mask(viewport, equator_noon, stride=2)
        alpha = buffer[:, :, 3]
        assert np.all(alpha[:, :4] == NIGHT_ALPHA)
        assert np.all(alpha[:, 4:] == 0)

    def test_edge_cells_are_clamped(self, equator_noon):
        # Odd sizes leave partial cells at the right and bottom edges
        viewport = FunctionViewport(9, 5, lambda x, y: NIGHT if y >= 4 or x >= 8 else DAY)
        buffer = render_mask(viewport, equator_noon, stride=4)
        alpha = buffer[:, :, 3]
        assert buffer.shape == (5, 9, 4)
        assert np.all(alpha[4, :] == NIGHT_ALPHA)
        assert np.all(alpha[:, 8] == NIGHT_ALPHA)
        assert np.all(alpha[:4, :8] == 0)

    def test_stride_one_is_per_pixel(self, equator_noon):
        viewport = FunctionViewport(6, 2, _left_columns_night(3))
        buffer = render_mask(viewport, equator_noon, stride=1)
        assert np.all(buffer[:, :3, 3] == NIGHT_ALPHA)
        assert np.all(buffer[:, 3:, 3] == 0)

    def test_blits_exactly_once(self, equator_noon, surface):
        buffer = render_mask(EquirectViewport(16, 8), equator_noon, surface=surface)
        assert len(surface.blits) == 1
        np.testing.assert_array_equal(surface.blits[0], buffer)

    def test_scalar_and_vectorized_paths_agree(self):
        sun = SubsolarPoint(18.0, -40.0)
        viewport = MercatorViewport(120, 60, center_lat=10.0, center_lon=-30.0, zoom=1.0)
        vectorized = render_mask(viewport, sun, stride=3)
        scalar = render_mask(ScalarOnly(viewport), sun, stride=3)
        assert vectorized.shape == scalar.shape
        # Only samples sitting exactly on the terminator could round differently
        assert np.mean(vectorized[:, :, 3] != scalar[:, :, 3]) < 0.01

    def test_records_timings(self, equator_noon):
        render_mask(EquirectViewport(30, 12), equator_noon, stride=3)
        timings = get_render_timings()
        assert timings['samples'] == 10 * 4
        assert timings['width'] == 30
        assert timings['height'] == 12
        assert timings['total'] >= 0.0


class TestBufferReuse:

    def test_same_size_reuses_buffer(self, equator_noon):
        renderer = MaskRenderer()
        first = renderer.render(EquirectViewport(20, 10), equator_noon)
        second = renderer.render(EquirectViewport(20, 10), equator_noon)
        assert first is second

    def test_resize_reallocates(self, equator_noon):
        renderer = MaskRenderer()
        first = renderer.render(EquirectViewport(20, 10), equator_noon)
        second = renderer.render(EquirectViewport(30, 12), equator_noon)
        assert second is not first
        assert second.shape == (12, 30, 4)

    def test_reused_buffer_is_cleared(self, equator_noon):
        renderer = MaskRenderer(stride=1)
        all_night = FunctionViewport(8, 4, lambda x, y: NIGHT)
        all_day = FunctionViewport(8, 4, lambda x, y: DAY)
        assert np.all(renderer.render(all_night, equator_noon)[:, :, 3] == NIGHT_ALPHA)
        assert not np.any(renderer.render(all_day, equator_noon))

    def test_release_drops_buffer(self, equator_noon):
        renderer = MaskRenderer()
        first = renderer.render(EquirectViewport(20, 10), equator_noon)
        renderer.release()
        assert renderer.render(EquirectViewport(20, 10), equator_noon) is not first


class TestHostScenario:
    """Two pixels of a host map, one at the subsolar point and one at its antipode."""

    def test_day_and_night_pixels(self, equator_noon):
        viewport = FunctionViewport(2, 1, lambda x, y: DAY if x == 0 else NIGHT)
        surface = RecordingSurface()
        buffer = MaskRenderer(stride=1).render(viewport, equator_noon, surface)
        assert tuple(buffer[0, 0]) == (0, 0, 0, 0)
        assert tuple(buffer[0, 1]) == (0, 0, 0, NIGHT_ALPHA)
        assert len(surface.blits) == 1
