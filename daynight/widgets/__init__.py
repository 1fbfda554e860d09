"""Widget components for the day/night map application."""

from .map_display import MapDisplay, OverlaySurface

__all__ = [
    'MapDisplay',
    'OverlaySurface',
]
