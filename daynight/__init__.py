"""Real-time day/night overlay for pannable, zoomable maps."""

from .illumination import daylight_mask, is_daylight, solar_cosine
from .mask_renderer import MaskRenderer, render_mask
from .overlay import (
    OverlayError,
    OverlayHandle,
    OverlayRefreshScheduler,
    OverlayState,
    RefreshPolicy,
    ViewportEvents,
    attach,
)
from .solar import SubsolarPoint, compute_subsolar_point

__version__ = "0.1.0"

__all__ = [
    'SubsolarPoint',
    'compute_subsolar_point',
    'solar_cosine',
    'is_daylight',
    'daylight_mask',
    'MaskRenderer',
    'render_mask',
    'OverlayError',
    'OverlayHandle',
    'OverlayRefreshScheduler',
    'OverlayState',
    'RefreshPolicy',
    'ViewportEvents',
    'attach',
]
