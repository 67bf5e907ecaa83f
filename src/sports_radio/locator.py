"""Turn a location lookup outcome into a message and a station list.

A lookup either yields a point or one of the geolocation error codes. Errors
never leave the page empty: they fall back to a sample of stations from the
larger cities.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from sports_radio.models import GeoPoint, RankedStation, Station
from sports_radio.ranking import (
    DEFAULT_FALLBACK_COUNT,
    DEFAULT_LIMIT,
    DEFAULT_THRESHOLD_MILES,
    SportFilters,
    fallback_stations,
    sort_by_location,
)

logger = logging.getLogger(__name__)

# Geolocation error codes, as reported by the browser API
UNSUPPORTED = 0
PERMISSION_DENIED = 1
POSITION_UNAVAILABLE = 2
TIMEOUT = 3

_ERROR_PREFIX = "Unable to get your location. "
_ERROR_MESSAGES = {
    UNSUPPORTED: "Location lookup is not available. Showing all stations instead.",
    PERMISSION_DENIED: (
        _ERROR_PREFIX
        + 'Showing all stations - click "Find Nearest Stations" to enable location access.'
    ),
    POSITION_UNAVAILABLE: _ERROR_PREFIX + "Showing all stations instead.",
    TIMEOUT: _ERROR_PREFIX + "Showing all stations instead.",
}


def error_message(code: int) -> str:
    """User-facing message for a geolocation error code."""
    return _ERROR_MESSAGES.get(code, _ERROR_PREFIX + "Showing all stations instead.")


@dataclass
class LocatorContext:
    """Presentation state: owned and mutated only by the caller's UI layer."""

    filters: SportFilters = field(default_factory=SportFilters)
    user_location: Optional[GeoPoint] = None
    threshold_miles: float = DEFAULT_THRESHOLD_MILES
    fallback_count: int = DEFAULT_FALLBACK_COUNT
    limit: int = DEFAULT_LIMIT
    sort_key: str = "distance"


@dataclass
class LookupResult:
    message: str
    results: list[RankedStation] = field(default_factory=list)
    fallback: list[Station] = field(default_factory=list)

    @property
    def used_fallback(self) -> bool:
        return not self.results and bool(self.fallback)


def _ranked(context: LocatorContext, stations: list[Station], point: GeoPoint) -> list[RankedStation]:
    return sort_by_location(
        point,
        stations,
        filters=context.filters,
        threshold_miles=context.threshold_miles,
        fallback_count=context.fallback_count,
        limit=context.limit,
        sort_key=context.sort_key,
    )


def lookup_by_location(
    context: LocatorContext,
    stations: list[Station],
    point: GeoPoint | None = None,
    error_code: int | None = None,
    fallback_cities: list[str] | None = None,
) -> LookupResult:
    """Resolve a lookup into the list to show.

    Pass ``point`` on success, or ``error_code`` when the lookup failed.
    Passing neither is treated as geolocation being unavailable.
    """
    if point is not None:
        context.user_location = point
        message = f"Your location: {point.latitude:.4f}, {point.longitude:.4f}"
        return LookupResult(message=message, results=_ranked(context, stations, point))

    code = UNSUPPORTED if error_code is None else error_code
    logger.info("Geolocation failed (code %s), showing fallback stations", code)
    return LookupResult(
        message=error_message(code),
        fallback=fallback_stations(stations, fallback_cities),
    )


BROWSE_MESSAGE = 'Showing all stations. Check "Find Nearest Stations" to list the ones near you.'


def browse_all(
    context: LocatorContext,
    stations: list[Station],
    fallback_cities: list[str] | None = None,
) -> LookupResult:
    """No location was asked for: clear any old one and show the sample list."""
    context.user_location = None
    return LookupResult(
        message=BROWSE_MESSAGE,
        fallback=fallback_stations(stations, fallback_cities),
    )


def update_filters(
    context: LocatorContext,
    stations: list[Station],
    filters: SportFilters,
) -> LookupResult | None:
    """Apply new sport filters; re-rank if a location is already known."""
    context.filters = filters
    if context.user_location is None:
        return None
    return lookup_by_location(context, stations, point=context.user_location)
