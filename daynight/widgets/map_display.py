"""Map display widget: braille world map hosting the day/night overlay."""

import logging

from textual.reactive import reactive
from textual.widgets import Static
from rich.text import Text

from daynight.map_renderer import compose_braille, render_base_map
from daynight.overlay import ViewportEvents, attach
from daynight.projection import MercatorViewport

log = logging.getLogger("daynight.map_display")


class OverlaySurface:
    """Drawing surface handed to the overlay: forwards blits to the widget."""

    def __init__(self, display: "MapDisplay"):
        self._display = display

    def blit(self, buffer):
        self._display.show_overlay(buffer)

    def clear(self):
        self._display.show_overlay(None)


class MapDisplay(Static):
    """Display widget for the map and its day/night overlay."""

    center_lon = reactive(0.0)
    center_lat = reactive(0.0)
    zoom = reactive(1.0)

    def __init__(self, flat_data, center_lat=0.0, center_lon=0.0, zoom=1.0,
                 policy=None, renderer=None, clock=None, overlay_enabled=True):
        super().__init__()
        self.flat_data = flat_data
        self.viewport_events = ViewportEvents()
        self.surface = OverlaySurface(self)
        self.overlay_enabled = overlay_enabled
        self._policy = policy
        self._renderer = renderer
        self._clock = clock
        self._overlay = None
        self._overlay_buffer = None
        self._cached_grid = None
        self._cache_key = None
        self._batching = False
        self.center_lat = center_lat
        self.center_lon = center_lon
        self.zoom = zoom

    def on_mount(self):
        if self.overlay_enabled:
            self._overlay = attach(
                self.current_viewport, self.surface, self.viewport_events, self,
                policy=self._policy, renderer=self._renderer, clock=self._clock,
            )
        else:
            self.refresh_map()

    def on_unmount(self):
        if self._overlay is not None:
            self._overlay.detach()

    @property
    def overlay(self):
        return self._overlay

    @property
    def subsolar(self):
        """Subsolar point of the last overlay render, or None."""
        if self._overlay is None:
            return None
        return self._overlay.scheduler.last_subsolar

    def current_viewport(self) -> MercatorViewport:
        size = self.size
        return MercatorViewport(size.width * 2, size.height * 4,
                                self.center_lat, self.center_lon, self.zoom)

    def watch_center_lon(self, value):
        self._viewport_changed()

    def watch_center_lat(self, value):
        self._viewport_changed()

    def watch_zoom(self, value):
        self._viewport_changed()

    def on_resize(self, event):
        self._viewport_changed()

    def set_view(self, center_lat, center_lon, zoom):
        """Move to a new center and zoom, announcing one viewport change."""
        self._batching = True
        try:
            self.center_lat = center_lat
            self.center_lon = center_lon
            self.zoom = zoom
        finally:
            self._batching = False
        self._viewport_changed()

    def _viewport_changed(self):
        if not self.is_mounted or self._batching:
            return
        self.viewport_events.emit()
        # Without a live overlay nobody blits, so redraw the bare map here
        if self._overlay is None or not self._overlay.is_attached:
            self.refresh_map()

    def render_overlay_now(self):
        if self._overlay is not None:
            self._overlay.render_now()

    def show_overlay(self, buffer):
        """Take a finished overlay buffer (or None to remove it) and redraw."""
        self._overlay_buffer = buffer
        if self.is_mounted:
            self.refresh_map()

    def refresh_map(self):
        """Compose the cached base map with the current overlay buffer."""
        viewport = self.current_viewport()
        if viewport.width <= 0 or viewport.height <= 0:
            return

        cache_key = (viewport.width, viewport.height, viewport.center_lat,
                     viewport.center_lon, viewport.zoom)
        if self._cache_key != cache_key:
            self._cached_grid = render_base_map(self.flat_data, viewport)
            self._cache_key = cache_key

        braille_lines = compose_braille(self._cached_grid, self._overlay_buffer)

        combined = Text()
        for i, line in enumerate(braille_lines):
            combined.append_text(line)
            if i < len(braille_lines) - 1:
                combined.append("\n")
        self.update(combined)
