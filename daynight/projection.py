"""
Web Mercator viewport.

The whole world is `width * zoom` pixels wide at the equator, so zoom 1 fits
the full longitude range across the viewport. Pixels are braille dots, which
are close enough to square that no aspect correction is applied.
"""

import math

import numpy as np

MAX_LATITUDE = 85.05112878
MIN_ZOOM = 1.0
MAX_ZOOM = 64.0


def _lat_to_unit_y(lat):
    """Latitude in degrees to Mercator y in [0, 1] (0 = north edge)."""
    lat = np.clip(lat, -MAX_LATITUDE, MAX_LATITUDE)
    lat_rad = np.radians(lat)
    return (1.0 - np.log(np.tan(np.pi / 4 + lat_rad / 2)) / np.pi) / 2.0


def _unit_y_to_lat(unit_y):
    # sinh overflows past ~710; the latitude is 90 degrees long before that
    arg = np.clip(np.pi * (1.0 - 2.0 * unit_y), -20.0, 20.0)
    return np.degrees(np.arctan(np.sinh(arg)))


def _wrap_lon(lon):
    lon = np.mod(lon, 360.0)
    return np.where(lon > 180.0, lon - 360.0, lon)


class MercatorViewport:
    """Read-only view description: pixel size, center and zoom."""

    def __init__(self, width, height, center_lat=0.0, center_lon=0.0, zoom=1.0):
        self.width = int(width)
        self.height = int(height)
        self.center_lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, float(center_lat)))
        self.center_lon = float(center_lon)
        self.zoom = max(MIN_ZOOM, min(MAX_ZOOM, float(zoom)))

        self.world_size = max(self.width, 1) * self.zoom
        self._center_wx = (self.center_lon + 180.0) / 360.0 * self.world_size
        self._center_wy = float(_lat_to_unit_y(self.center_lat)) * self.world_size

    def __repr__(self):
        return (f"MercatorViewport({self.width}x{self.height}, "
                f"center=({self.center_lat:.2f}, {self.center_lon:.2f}), zoom={self.zoom:.2f})")

    def pixels_to_geo(self, xs, ys):
        """Inverse projection for arrays of pixel coordinates.

        Returns:
            (lats, lons) arrays in degrees, lons wrapped into (-180, 180]
        """
        wx = self._center_wx + (np.asarray(xs, dtype=np.float64) - self.width / 2.0)
        wy = self._center_wy + (np.asarray(ys, dtype=np.float64) - self.height / 2.0)
        lons = _wrap_lon(wx / self.world_size * 360.0 - 180.0)
        lats = _unit_y_to_lat(wy / self.world_size)
        return lats, lons

    def pixel_to_geo(self, x, y):
        lats, lons = self.pixels_to_geo(x, y)
        return float(lats), float(lons)

    def geo_to_pixels(self, lats, lons):
        """Forward projection. Returns float pixel arrays (px, py).

        The returned x is for the world copy nearest the view center.
        """
        lons = np.asarray(lons, dtype=np.float64)
        # Shift longitudes to within 180 degrees of the center
        delta = _wrap_lon(lons - self.center_lon)
        px = self.width / 2.0 + delta / 360.0 * self.world_size
        py = self.height / 2.0 + (_lat_to_unit_y(np.asarray(lats, dtype=np.float64)) * self.world_size
                                  - self._center_wy)
        return px, py


def pan(center_lat, center_lon, zoom, d_east, d_north, base_step=10.0):
    """New (lat, lon) after panning by whole steps, smaller steps when zoomed in."""
    step = base_step / max(1.0, zoom)
    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, center_lat + d_north * step))
    lon = center_lon + d_east * step
    lon = (lon + 180.0) % 360.0 - 180.0
    if math.isclose(lon, -180.0):
        lon = 180.0
    return lat, lon
