"""
Subsolar point calculation.

Low-precision NOAA/USNO solar position, good to a few hundredths of a degree
over a couple of centuries around J2000. Plenty for drawing a terminator on a
map, not for pointing a telescope.
"""

import math
from datetime import datetime, timezone
from typing import NamedTuple

J2000_EPOCH = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
SECONDS_PER_DAY = 86400.0


class SubsolarPoint(NamedTuple):
    """Point on Earth with the sun directly overhead, in degrees."""
    latitude: float
    longitude: float


def normalize_longitude(lon):
    """Wrap a longitude in degrees into (-180, 180]."""
    lon = lon % 360.0
    if lon > 180.0:
        lon -= 360.0
    return lon


def days_since_j2000(dt):
    """Fractional days elapsed since 2000-01-01T12:00:00 UTC.

    Naive datetimes are taken to be UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - J2000_EPOCH).total_seconds() / SECONDS_PER_DAY


def compute_subsolar_point(dt):
    """
    Calculate the sun's subsolar point for a given datetime.

    Args:
        dt: datetime (UTC, or naive and meant as UTC)

    Returns:
        SubsolarPoint: latitude in [-90, 90], longitude in (-180, 180]
    """
    d = days_since_j2000(dt)

    # Mean longitude and mean anomaly (degrees)
    mean_lon = (280.460 + 0.9856474 * d) % 360
    mean_anomaly = (357.528 + 0.9856003 * d) % 360
    g = math.radians(mean_anomaly)

    # Ecliptic longitude and obliquity (degrees)
    ecl_lon = mean_lon + 1.915 * math.sin(g) + 0.020 * math.sin(2 * g)
    obliquity = 23.439 - 0.0000004 * d

    ecl_lon_rad = math.radians(ecl_lon)
    obliquity_rad = math.radians(obliquity)

    # Declination is the subsolar latitude
    sin_dec = math.sin(obliquity_rad) * math.sin(ecl_lon_rad)
    declination = math.degrees(math.asin(sin_dec))

    # Right ascension in [0, 360)
    y = math.cos(obliquity_rad) * math.sin(ecl_lon_rad)
    x = math.cos(ecl_lon_rad)
    right_ascension = math.degrees(math.atan2(y, x))
    if right_ascension < 0:
        right_ascension += 360.0

    gmst = (280.46061837 + 360.98564736629 * d) % 360

    return SubsolarPoint(declination, normalize_longitude(right_ascension - gmst))
