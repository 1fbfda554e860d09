"""Day/night classification against a subsolar point."""

import math

import numpy as np


def solar_cosine(lat, lon, subsolar):
    """Cosine of the angle between an observer and the subsolar point.

    Positive when the sun is above the observer's horizon. Spherical law of
    cosines; no refraction, no twilight.
    """
    lat_rad = math.radians(lat)
    sun_lat_rad = math.radians(subsolar.latitude)
    delta_lon = math.radians(lon - subsolar.longitude)
    return (math.sin(lat_rad) * math.sin(sun_lat_rad)
            + math.cos(lat_rad) * math.cos(sun_lat_rad) * math.cos(delta_lon))


def is_daylight(lat, lon, subsolar):
    """True if the sun is above the horizon at (lat, lon)."""
    return solar_cosine(lat, lon, subsolar) > 0


def daylight_mask(lats, lons, subsolar):
    """
    Classify arrays of coordinates as day or night (vectorized).

    Args:
        lats, lons: Arrays of observer coordinates in degrees (same shape)
        subsolar: SubsolarPoint

    Returns:
        Boolean array, True = daylight
    """
    lats_rad = np.radians(lats)
    sun_lat_rad = np.radians(subsolar.latitude)
    delta_lon = np.radians(np.asarray(lons) - subsolar.longitude)

    cos_c = (np.sin(lats_rad) * np.sin(sun_lat_rad)
             + np.cos(lats_rad) * np.cos(sun_lat_rad) * np.cos(delta_lon))
    return cos_c > 0
