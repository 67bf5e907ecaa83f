"""Geographic utility functions, pure Python, no external deps."""

from __future__ import annotations

import math

# WGS84 equatorial radius, used for station ranking.
EARTH_RADIUS_M = 6378137.0
# Mean radius, used when reporting tower moves in the maintenance tools.
EARTH_RADIUS_KM = 6371.0

METERS_PER_MILE = 1609.344

# Empirical groundwave boost so AM and FM scores land on a comparable scale.
AM_GROUNDWAVE_BOOST = 3.0


def _round_half_up(value: float) -> float:
    return math.floor(value + 0.5)


def _clamp_acos_arg(val: float) -> float:
    if val > 1:
        return 1.0
    if val < -1:
        return -1.0
    return val


def get_distance(origin, target, accuracy: float = 1) -> float:
    """Great-circle distance in meters between two points.

    Both arguments only need ``latitude`` and ``longitude`` attributes in
    decimal degrees. Uses the spherical law of cosines and rounds the result
    to the nearest multiple of ``accuracy`` meters.
    """
    from_lat = math.radians(origin.latitude)
    from_lon = math.radians(origin.longitude)
    to_lat = math.radians(target.latitude)
    to_lon = math.radians(target.longitude)

    cos_angle = (
        math.sin(to_lat) * math.sin(from_lat)
        + math.cos(to_lat) * math.cos(from_lat) * math.cos(from_lon - to_lon)
    )
    distance = math.acos(_clamp_acos_arg(cos_angle)) * EARTH_RADIUS_M

    return _round_half_up(distance / accuracy) * accuracy


def meters_to_miles(meters: float) -> float:
    """Convert meters to miles, rounded to 2 decimals."""
    return _round_half_up(meters / METERS_PER_MILE * 100) / 100


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points on Earth in kilometers.

    Uses the Haversine formula. Inputs are WGS84 decimal degrees.
    """
    rlat1, rlon1 = math.radians(lat1), math.radians(lon1)
    rlat2, rlon2 = math.radians(lat2), math.radians(lon2)

    dlat = rlat2 - rlat1
    dlon = rlon2 - rlon1

    a = math.sin(dlat / 2) ** 2 + math.cos(rlat1) * math.cos(rlat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def dms_to_decimal(direction: str, degrees: float, minutes: float, seconds: float) -> float:
    """Convert degrees/minutes/seconds plus hemisphere letter to decimal degrees."""
    value = degrees + minutes / 60 + seconds / 3600
    if direction.strip().upper() in ("S", "W"):
        value = -value
    return value


def calculate_signal_strength(
    power_kw: float | None,
    distance_m: float | None,
    fmt: str,
) -> float:
    """Rough relative signal score for ranking, not an RF propagation model.

    AM falls off with distance^1.5 (groundwave) and gets an empirical boost;
    FM uses plain inverse-square. Distance is converted to kilometers first.
    Missing or non-positive inputs score 0.
    """
    if not power_kw or not distance_m or power_kw <= 0 or distance_m <= 0:
        return 0.0

    distance_km = distance_m / 1000.0
    if fmt == "AM":
        return power_kw * AM_GROUNDWAVE_BOOST / distance_km ** 1.5
    return power_kw / distance_km ** 2
