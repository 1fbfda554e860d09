"""
Day/night mask rasterization.

Scans the viewport on a strided grid, inverse-projects one pixel per grid cell,
classifies it as day or night, and fills the whole cell. The result is an RGBA
buffer that is pure black everywhere, transparent over daylight and partially
opaque over night. The terminator comes out as a stride-sized staircase.
"""

import logging
import time

import numpy as np

from .illumination import daylight_mask

log = logging.getLogger("daynight.mask_renderer")

DEFAULT_STRIDE = 2
NIGHT_ALPHA = 90  # 0-255, ~35% opacity

# Timings of the last render pass, for the status line and profiling
_render_timings = {
    'sample': 0.0,
    'fill': 0.0,
    'total': 0.0,
    'samples': 0,
    'width': 0,
    'height': 0,
}


def get_render_timings():
    """Return timing measurements of the last render pass."""
    return _render_timings.copy()


def _sample_coordinates(viewport, xs, ys):
    """Inverse-project the sample pixels of the grid.

    Uses the viewport's vectorized pixels_to_geo when it has one, otherwise
    one pixel_to_geo call per sample.
    """
    pixels_to_geo = getattr(viewport, 'pixels_to_geo', None)
    if pixels_to_geo is not None:
        grid_x, grid_y = np.meshgrid(xs, ys)
        lats, lons = pixels_to_geo(grid_x, grid_y)
        return np.asarray(lats, dtype=np.float64), np.asarray(lons, dtype=np.float64)

    lats = np.empty((len(ys), len(xs)), dtype=np.float64)
    lons = np.empty((len(ys), len(xs)), dtype=np.float64)
    for row, y in enumerate(ys):
        for col, x in enumerate(xs):
            lats[row, col], lons[row, col] = viewport.pixel_to_geo(int(x), int(y))
    return lats, lons


class MaskRenderer:
    """Renders day/night masks, reusing its buffer while the size is stable."""

    def __init__(self, stride=DEFAULT_STRIDE, night_alpha=NIGHT_ALPHA):
        if int(stride) != stride or stride < 1:
            raise ValueError(f"stride must be an integer >= 1, got {stride!r}")
        if not 0 <= night_alpha <= 255:
            raise ValueError(f"night_alpha must be in 0..255, got {night_alpha!r}")
        self.stride = int(stride)
        self.night_alpha = int(night_alpha)
        self._buffer = None

    def _buffer_for(self, width, height):
        if self._buffer is None or self._buffer.shape != (height, width, 4):
            log.debug("Allocating %dx%d mask buffer", width, height)
            self._buffer = np.zeros((height, width, 4), dtype=np.uint8)
        else:
            self._buffer.fill(0)
        return self._buffer

    def release(self):
        """Drop the cached buffer."""
        self._buffer = None

    def render(self, viewport, subsolar, surface=None):
        """
        Rasterize the night side of the viewport.

        Args:
            viewport: object with width, height and pixel_to_geo(x, y)
            subsolar: SubsolarPoint for the instant being drawn
            surface: optional object with blit(buffer), called once when done

        Returns:
            (height, width, 4) uint8 RGBA buffer, or None for an empty viewport
        """
        width = int(viewport.width)
        height = int(viewport.height)
        if width <= 0 or height <= 0:
            log.debug("Skipping render of degenerate %dx%d viewport", width, height)
            return None

        t_start = time.perf_counter()
        stride = self.stride
        buffer = self._buffer_for(width, height)

        xs = np.arange(0, width, stride)
        ys = np.arange(0, height, stride)
        lats, lons = _sample_coordinates(viewport, xs, ys)
        night = ~daylight_mask(lats, lons, subsolar)
        t_sampled = time.perf_counter()

        # Blow each sample up to its stride x stride cell; cropping clamps the edge cells
        night_pixels = np.repeat(np.repeat(night, stride, axis=0), stride, axis=1)
        night_pixels = night_pixels[:height, :width]
        buffer[night_pixels, 3] = self.night_alpha
        t_filled = time.perf_counter()

        if surface is not None:
            surface.blit(buffer)

        _render_timings['sample'] = (t_sampled - t_start) * 1000
        _render_timings['fill'] = (t_filled - t_sampled) * 1000
        _render_timings['total'] = (time.perf_counter() - t_start) * 1000
        _render_timings['samples'] = int(night.size)
        _render_timings['width'] = width
        _render_timings['height'] = height
        log.debug("Rendered %dx%d mask, %d samples in %.2f ms",
                  width, height, night.size, _render_timings['total'])

        return buffer


def render_mask(viewport, subsolar, stride=DEFAULT_STRIDE, surface=None,
                night_alpha=NIGHT_ALPHA):
    """One-shot render with a fresh buffer. See MaskRenderer.render."""
    return MaskRenderer(stride, night_alpha).render(viewport, subsolar, surface)
