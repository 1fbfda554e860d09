"""
Day/night overlay lifecycle.

The overlay renders once when attached, again on a fixed wall-clock interval,
and again whenever the host reports a viewport change. Every render uses the
current instant. Renders are synchronous, so at most one is ever in flight.

Host capabilities used:
    viewport provider: zero-arg callable returning the current viewport
    surface: blit(buffer) and clear()
    events: connect(callback) / disconnect(callback) for viewport changes
    timers: set_interval(seconds, callback) returning a handle with stop()
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from .mask_renderer import MaskRenderer
from .solar import compute_subsolar_point

log = logging.getLogger("daynight.overlay")

DEFAULT_INTERVAL_MS = 60_000


class OverlayError(Exception):
    """Overlay lifecycle misuse, e.g. attaching twice."""


class OverlayState(enum.Enum):
    DETACHED = "detached"
    ATTACHED = "attached"
    RENDERING = "rendering"


@dataclass(frozen=True)
class RefreshPolicy:
    periodic_interval_ms: int = DEFAULT_INTERVAL_MS

    def __post_init__(self):
        if int(self.periodic_interval_ms) != self.periodic_interval_ms or self.periodic_interval_ms <= 0:
            raise ValueError(
                f"periodic_interval_ms must be a positive integer, got {self.periodic_interval_ms!r}")

    @property
    def interval_seconds(self) -> float:
        return self.periodic_interval_ms / 1000.0


class ViewportEvents:
    """Callback registry for "viewport changed" notifications (pan, zoom, resize)."""

    def __init__(self):
        self._callbacks: list = []

    def connect(self, callback):
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def disconnect(self, callback):
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def emit(self):
        for cb in list(self._callbacks):
            cb()

    def __len__(self):
        return len(self._callbacks)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OverlayRefreshScheduler:
    """Drives the mask renderer from attach, timer and viewport-change triggers."""

    def __init__(self, policy=None, renderer=None, clock=None):
        self.policy = policy if policy is not None else RefreshPolicy()
        self.renderer = renderer if renderer is not None else MaskRenderer()
        self._clock = clock if clock is not None else _utc_now
        self._state = OverlayState.DETACHED
        self._viewport_provider = None
        self._surface = None
        self._events = None
        self._timer = None
        self.last_subsolar = None
        self.render_count = 0

    @property
    def state(self) -> OverlayState:
        return self._state

    @property
    def is_attached(self) -> bool:
        return self._state is not OverlayState.DETACHED

    def attach(self, viewport_provider, surface, events, timers):
        if self._state is not OverlayState.DETACHED:
            raise OverlayError("Overlay is already attached")

        self._viewport_provider = viewport_provider
        self._surface = surface
        self._events = events
        self._state = OverlayState.ATTACHED
        log.info("Overlay attached (refresh every %d ms, stride %d)",
                 self.policy.periodic_interval_ms, self.renderer.stride)

        events.connect(self._on_viewport_changed)
        try:
            self._render()
        except Exception:
            log.warning("First overlay render failed, detaching")
            self.detach()
            raise
        # The surface may have detached us during the first render
        if self._state is OverlayState.DETACHED:
            return
        self._timer = timers.set_interval(self.policy.interval_seconds, self._on_timer)

    def detach(self):
        """Stop the timer, unsubscribe and release the surface. Safe to repeat."""
        if self._state is OverlayState.DETACHED:
            return
        self._state = OverlayState.DETACHED

        if self._events is not None:
            self._events.disconnect(self._on_viewport_changed)
        if self._timer is not None:
            self._timer.stop()
        if self._surface is not None:
            self._surface.clear()
        self.renderer.release()

        self._viewport_provider = None
        self._surface = None
        self._events = None
        self._timer = None
        log.info("Overlay detached after %d renders", self.render_count)

    def render_now(self) -> bool:
        """Render immediately. Returns False if the render was dropped."""
        return self._trigger("on-demand")

    def _on_timer(self):
        self._trigger("timer")

    def _on_viewport_changed(self):
        self._trigger("viewport")

    def _trigger(self, reason) -> bool:
        if self._state is OverlayState.DETACHED:
            log.debug("Dropping stale %s render after detach", reason)
            return False
        if self._state is OverlayState.RENDERING:
            log.debug("Dropping re-entrant %s render", reason)
            return False
        self._render()
        return True

    def _render(self):
        self._state = OverlayState.RENDERING
        try:
            viewport = self._viewport_provider()
            subsolar = compute_subsolar_point(self._clock())
            self.renderer.render(viewport, subsolar, self._surface)
            self.last_subsolar = subsolar
            self.render_count += 1
        finally:
            # A detach from inside the render (e.g. by the surface) wins
            if self._state is OverlayState.RENDERING:
                self._state = OverlayState.ATTACHED


class OverlayHandle:
    """Disposable handle returned to the host by attach()."""

    def __init__(self, scheduler: OverlayRefreshScheduler):
        self._scheduler = scheduler

    @property
    def scheduler(self) -> OverlayRefreshScheduler:
        return self._scheduler

    @property
    def is_attached(self) -> bool:
        return self._scheduler.is_attached

    def render_now(self) -> bool:
        return self._scheduler.render_now()

    def detach(self):
        self._scheduler.detach()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.detach()
        return False


def attach(viewport, surface, events, timers, policy=None, renderer=None, clock=None):
    """
    Attach a day/night overlay to a host.

    Args:
        viewport: current-viewport callable, or a fixed viewport object
        surface: object with blit(buffer) and clear()
        events: object with connect(cb) / disconnect(cb) for viewport changes
        timers: object with set_interval(seconds, cb) -> handle with stop()
        policy: RefreshPolicy (default: every 60 s)
        renderer: MaskRenderer (default: stride 2, alpha 90)
        clock: zero-arg callable returning the current UTC datetime

    Returns:
        OverlayHandle
    """
    if callable(viewport):
        viewport_provider = viewport
    else:
        def viewport_provider():
            return viewport

    scheduler = OverlayRefreshScheduler(policy, renderer, clock)
    scheduler.attach(viewport_provider, surface, events, timers)
    return OverlayHandle(scheduler)
