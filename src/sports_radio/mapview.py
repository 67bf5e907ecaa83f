"""Map markers and zoom selection for the station map."""

from __future__ import annotations

from dataclasses import dataclass

from pydeck.data_utils import compute_view

from sports_radio.models import RankedStation, Station
from sports_radio.ranking import SPORTS, SportFilters
from sports_radio.render import DEFAULT_COLOR, render_popup

# Marker fill colors
SPORT_COLORS = {
    "Football": "#d00000",
    "Volleyball": "#333333",
    "Men's Basketball": "#D2B48C",
    "Women's Basketball": "#FFB6D9",
}
USER_COLOR = "#4285F4"

# Zoom used when focusing a single station from the list
FOCUS_ZOOM = 10


@dataclass
class Marker:
    latitude: float
    longitude: float
    stations: list[Station]
    primary_sport: str
    popup_html: str

    @property
    def color(self) -> str:
        return SPORT_COLORS.get(self.primary_sport, DEFAULT_COLOR)

    @property
    def rgb(self) -> list[int]:
        hex_color = self.color.lstrip("#")
        if len(hex_color) == 3:
            hex_color = "".join(c * 2 for c in hex_color)
        return [int(hex_color[i:i + 2], 16) for i in (0, 2, 4)]


def primary_sport(stations: list[Station]) -> str:
    sports = {s.sport for s in stations}
    for sport in SPORTS:
        if sport in sports:
            return sport
    return SPORTS[0]


def build_markers(stations: list[Station], filters: SportFilters | None = None) -> list[Marker]:
    """One marker per distinct coordinate pair, skipping fully filtered-out spots."""
    filters = filters or SportFilters()
    by_location: dict[tuple[float, float], list[Station]] = {}
    for station in stations:
        if not station.has_location:
            continue
        by_location.setdefault((station.latitude, station.longitude), []).append(station)

    markers = []
    for (lat, lon), group in by_location.items():
        if not any(filters.allows(s.sport) for s in group):
            continue
        markers.append(Marker(
            latitude=lat,
            longitude=lon,
            stations=group,
            primary_sport=primary_sport(group),
            popup_html=render_popup(group),
        ))
    return markers


def find_marker(markers: list[Marker], latitude: float, longitude: float, tolerance: float = 0.001) -> Marker | None:
    """Marker at the given point, e.g. for a list entry that was clicked."""
    for marker in markers:
        if abs(marker.latitude - latitude) < tolerance and abs(marker.longitude - longitude) < tolerance:
            return marker
    return None


def zoom_for_results(point, results: list[RankedStation]) -> int:
    """Zoom level so the nearest few stations are in view around ``point``."""
    if not results:
        return FOCUS_ZOOM

    # Results may be ranked by signal; zoom follows distance regardless
    nearest = sorted(results, key=lambda r: r.distance)
    max_distance = max(r.distance for r in nearest[:5])
    if max_distance < 25:
        return 11
    if max_distance < 50:
        return 10
    if max_distance < 100:
        return 9
    if max_distance < 200:
        return 8

    # Very far: fit the user and the closest station
    closest = nearest[0]
    view = compute_view([
        [point.longitude, point.latitude],
        [closest.longitude, closest.latitude],
    ])
    return max(4, min(8, int(view.zoom)))
