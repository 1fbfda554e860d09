"""Main DayNightApp Textual application."""

import time
from datetime import datetime, timezone, timedelta

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import Static

from daynight.mask_renderer import MaskRenderer, get_render_timings
from daynight.overlay import RefreshPolicy
from daynight.projection import MAX_ZOOM, MIN_ZOOM, pan
from daynight.widgets import MapDisplay


def _format_coord(value, pos, neg):
    hemi = pos if value >= 0 else neg
    return f"{abs(value):.1f}°{hemi}"


class DayNightApp(App):
    """Textual TUI application: world map with a live day/night overlay."""

    CSS = """
    Screen {
        background: $surface;
    }

    #status {
        dock: top;
        height: 1;
        width: 100%;
    }

    #map-container {
        width: 100%;
        height: 100%;
        border: solid green;
    }

    MapDisplay {
        width: 100%;
        height: 100%;
    }
    """

    TITLE = "Day/Night World Map"
    BINDINGS = [
        ("up", "navigate_up", "Up"),
        ("down", "navigate_down", "Down"),
        ("left", "navigate_left", "Left"),
        ("right", "navigate_right", "Right"),
        ("plus,equals", "zoom_in", "Zoom+"),
        ("minus", "zoom_out", "Zoom-"),
        ("r", "reset", "Reset"),
        ("n", "render_now", "Render now"),
        ("w", "save_view", "Save view"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, flat_data, config, custom_time=None, freeze=False,
                 overlay_enabled=True):
        super().__init__()
        self.flat_data = flat_data
        self.config = config
        self.overlay_enabled = overlay_enabled

        self.zoom_factor = 0.2
        self.custom_time_active = False
        self.custom_time = None
        self.custom_time_freeze = False
        self.custom_time_anchor_epoch = None
        if custom_time is not None:
            self._set_custom_time(custom_time, freeze)

    def _utc_now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _get_effective_time(self) -> datetime:
        if not self.custom_time_active or self.custom_time is None:
            return self._utc_now()
        if self.custom_time_freeze:
            return self.custom_time
        delta = time.time() - self.custom_time_anchor_epoch
        return self.custom_time + timedelta(seconds=delta)

    def _set_custom_time(self, dt: datetime, freeze: bool):
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        self.custom_time_active = True
        self.custom_time = dt.astimezone(timezone.utc)
        self.custom_time_freeze = bool(freeze)
        self.custom_time_anchor_epoch = time.time()

    def _format_time(self, dt: datetime) -> str:
        return dt.astimezone(timezone.utc).strftime("%Y %m %d %H:%M:%S UTC")

    def _build_status_line(self) -> str:
        time_str = self._format_time(self._get_effective_time())
        if self.custom_time_active:
            color = "#7ecbff" if self.custom_time_freeze else "yellow"
            time_str = f"[{color}]{time_str}[/{color}]"
        line = f"Time: {time_str}"

        subsolar = self.map_display.subsolar
        if subsolar is not None:
            lat = _format_coord(subsolar.latitude, "N", "S")
            lon = _format_coord(subsolar.longitude, "E", "W")
            line = f"{line}  [orange1]Sun:[/orange1] {lat} {lon}"

        line = f"{line}  Zoom: {self.map_display.zoom:.1f}"
        timings = get_render_timings()
        if timings['samples']:
            line = f"{line}  [dim]Mask: {timings['total']:.1f} ms / {timings['samples']} samples[/dim]"
        return line

    def _refresh_status(self):
        self.status_line.update(self._build_status_line())

    def compose(self) -> ComposeResult:
        overlay_cfg = self.config.overlay
        view = self.config.view

        self.map_display = MapDisplay(
            self.flat_data,
            center_lat=view["center_lat"],
            center_lon=view["center_lon"],
            zoom=view["zoom"],
            policy=RefreshPolicy(overlay_cfg["refresh_interval_ms"]),
            renderer=MaskRenderer(overlay_cfg["sample_stride"], overlay_cfg["night_alpha"]),
            clock=self._get_effective_time,
            overlay_enabled=self.overlay_enabled,
        )
        self.status_line = Static("", id="status")

        yield self.status_line
        with Container(id="map-container"):
            yield self.map_display

    def on_mount(self):
        self.set_interval(1.0, self._refresh_status)
        self._refresh_status()

    # ── Action handlers (BINDINGS) ──

    def _pan(self, d_east, d_north):
        md = self.map_display
        lat, lon = pan(md.center_lat, md.center_lon, md.zoom, d_east, d_north)
        md.set_view(lat, lon, md.zoom)

    def action_navigate_up(self):
        self._pan(0, 1)

    def action_navigate_down(self):
        self._pan(0, -1)

    def action_navigate_left(self):
        self._pan(-1, 0)

    def action_navigate_right(self):
        self._pan(1, 0)

    def action_zoom_in(self):
        self.map_display.zoom = min(MAX_ZOOM, self.map_display.zoom * (1 + self.zoom_factor))

    def action_zoom_out(self):
        self.map_display.zoom = max(MIN_ZOOM, self.map_display.zoom * (1 - self.zoom_factor))

    def action_reset(self):
        view = self.config.view
        self.map_display.set_view(view["center_lat"], view["center_lon"], view["zoom"])

    def action_render_now(self):
        self.map_display.render_overlay_now()
        self._refresh_status()

    def action_save_view(self):
        md = self.map_display
        self.config.set("view", "center_lat", md.center_lat, save=False)
        self.config.set("view", "center_lon", md.center_lon, save=False)
        self.config.set("view", "zoom", md.zoom, save=False)
        self.config.save()
        self.notify(f"View saved to {self.config.config_file}")
