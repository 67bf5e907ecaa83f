"""Nearest-station ranking and the no-location fallback list."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from sports_radio.geo import calculate_signal_strength, get_distance, meters_to_miles
from sports_radio.models import RankedStation, Station

logger = logging.getLogger(__name__)

FOOTBALL = "Football"
VOLLEYBALL = "Volleyball"
MENS_BASKETBALL = "Men's Basketball"
WOMENS_BASKETBALL = "Women's Basketball"

# Priority order also decides the marker color on the map
SPORTS = [FOOTBALL, VOLLEYBALL, MENS_BASKETBALL, WOMENS_BASKETBALL]

DEFAULT_THRESHOLD_MILES = 50.0
DEFAULT_FALLBACK_COUNT = 5
DEFAULT_LIMIT = 10

SORT_KEYS = ("distance", "signal")

FALLBACK_CITIES = ["Lincoln", "Omaha", "Grand Island", "Kearney", "North Platte", "Scottsbluff"]


@dataclass
class SportFilters:
    """Which sports are shown on the list and the map."""

    football: bool = True
    volleyball: bool = True
    mens_basketball: bool = True
    womens_basketball: bool = True

    def allows(self, sport: str) -> bool:
        if sport == FOOTBALL:
            return self.football
        if sport == VOLLEYBALL:
            return self.volleyball
        if sport == MENS_BASKETBALL:
            return self.mens_basketball
        if sport == WOMENS_BASKETBALL:
            return self.womens_basketball
        return False

    @classmethod
    def only(cls, sports: Iterable[str]) -> SportFilters:
        """Filters with just the given sports enabled."""
        wanted = set(sports)
        return cls(
            football=FOOTBALL in wanted,
            volleyball=VOLLEYBALL in wanted,
            mens_basketball=MENS_BASKETBALL in wanted,
            womens_basketball=WOMENS_BASKETBALL in wanted,
        )


def _group_key(station: Station) -> tuple[str, str, str]:
    return station.call_sign, station.dial, station.city


def rank_stations(point, stations: Iterable[Station], filters: SportFilters | None = None) -> list[RankedStation]:
    """Distance and signal for every listed station, one entry per call/dial/city.

    Stations without coordinates are skipped. Order follows the station table.
    """
    filters = filters or SportFilters()
    grouped: dict[tuple[str, str, str], RankedStation] = {}

    for station in stations:
        if not filters.allows(station.sport) or not station.has_location:
            continue

        key = _group_key(station)
        entry = grouped.get(key)
        if entry is None:
            meters = get_distance(point, station)
            entry = RankedStation(
                call_sign=station.call_sign,
                frequency=station.frequency,
                format=station.format,
                city=station.city,
                state=station.state,
                latitude=station.latitude,
                longitude=station.longitude,
                distance=meters_to_miles(meters),
                signal=calculate_signal_strength(station.power, meters, station.format),
            )
            grouped[key] = entry
        entry.sports.append(station.sport)

    return list(grouped.values())


def sort_results(results: list[RankedStation], sort_key: str = "distance") -> list[RankedStation]:
    """Sort by distance (ascending) or signal (descending); ties by format, descending."""
    if sort_key not in SORT_KEYS:
        raise ValueError(f"sort_key must be one of {SORT_KEYS}, got {sort_key!r}")

    ordered = sorted(results, key=lambda r: r.format, reverse=True)
    if sort_key == "signal":
        ordered.sort(key=lambda r: r.signal, reverse=True)
    else:
        ordered.sort(key=lambda r: r.distance)
    return ordered


def sort_by_location(
    point,
    stations: Iterable[Station],
    filters: SportFilters | None = None,
    threshold_miles: float = DEFAULT_THRESHOLD_MILES,
    fallback_count: int = DEFAULT_FALLBACK_COUNT,
    limit: int | None = DEFAULT_LIMIT,
    sort_key: str = "distance",
) -> list[RankedStation]:
    """Stations near ``point``, best first.

    Keeps everything closer than ``threshold_miles``; when nothing is that
    close, the ``fallback_count`` closest stations are used instead. The
    result is sorted by ``sort_key`` and cut to ``limit`` entries.
    """
    ranked = rank_stations(point, stations, filters)

    nearby = [r for r in ranked if r.distance < threshold_miles]
    if not nearby:
        nearby = sorted(ranked, key=lambda r: r.distance)[:fallback_count]
        logger.debug(
            "No station within %.0f mi of (%s, %s), using closest %d",
            threshold_miles, point.latitude, point.longitude, len(nearby),
        )

    results = sort_results(nearby, sort_key)
    if limit is not None:
        results = results[:limit]
    return results


def fallback_stations(
    stations: Iterable[Station],
    cities: list[str] | None = None,
    limit: int = DEFAULT_LIMIT,
) -> list[Station]:
    """First station listed for each fallback city, for when no location is known."""
    cities = FALLBACK_CITIES if cities is None else cities
    by_city: dict[str, Station] = {}
    for station in stations:
        if station.city in cities and station.city not in by_city:
            by_city[station.city] = station
    return list(by_city.values())[:limit]
