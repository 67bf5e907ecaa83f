"""HTML fragments for the station list and map popups."""

from __future__ import annotations

import re
from html import escape

from sports_radio.models import RankedStation, Station

SPORT_SHORT_FORMS = {
    "Football": "FB",
    "Volleyball": "VB",
    "Men's Basketball": "MBB",
    "Women's Basketball": "WBB",
}

# Popup text colors (darker than the marker fill for readability)
SPORT_TEXT_COLORS = {
    "Football": "#d00000",
    "Volleyball": "#333",
    "Men's Basketball": "#8B7355",
    "Women's Basketball": "#FF69B4",
}
DEFAULT_COLOR = "#666"

NEAREST_COUNT = 3

EMPTY_LIST_HTML = '<div style="text-align: center; color: #999;">No stations found</div>'


def sport_css_class(sport: str) -> str:
    """Lowercase with apostrophes and spaces turned into dashes."""
    return re.sub(r"['\s]", "-", sport.lower())


def _location(city: str, state: str | None) -> str:
    return f"{escape(city)}, {escape(state or '')}"


def _sport_badge(sport: str, short: bool) -> str:
    label = SPORT_SHORT_FORMS.get(sport, sport) if short else sport
    return f'<span class="station-sport {sport_css_class(sport)}">{escape(label)}</span>'


def render_station_list(results: list[RankedStation]) -> str:
    """The nearest-stations list; the first few entries are flagged as nearest."""
    if not results:
        return EMPTY_LIST_HTML

    items = []
    for index, station in enumerate(results):
        css = "station-item nearest" if index < NEAREST_COUNT else "station-item"
        badges = "".join(_sport_badge(s, short=True) for s in station.unique_sports)
        items.append(
            f'<div class="{css}" data-lat="{station.latitude}" data-lng="{station.longitude}">'
            f'<div class="station-info">'
            f'<span class="station-freq">{escape(station.dial)}</span>'
            f'<span class="station-call">{escape(station.call_sign)}</span>'
            f'<span class="station-location">{_location(station.city, station.state)}</span>'
            f'<span class="station-distance">'
            f'<span class="distance-long">{station.distance} miles away</span>'
            f'<span class="distance-short">{station.distance}mi</span>'
            f"</span>"
            f"</div>"
            f'<div class="station-sports">{badges}</div>'
            f"</div>"
        )
    return "".join(items)


def render_fallback_list(stations: list[Station]) -> str:
    """Station list shown when no location is available."""
    if not stations:
        return EMPTY_LIST_HTML

    return "".join(
        f'<div class="station-item">'
        f'<div class="station-info">'
        f'<span class="station-freq">{escape(s.dial)}</span>'
        f'<span class="station-call">{escape(s.call_sign)}</span>'
        f'<span class="station-location">{_location(s.city, s.state)}</span>'
        f"</div>"
        f'<div class="station-sports">{_sport_badge(s.sport, short=False)}</div>'
        f"</div>"
        for s in stations
    )


def render_popup(stations: list[Station]) -> str:
    """Popup for a map marker: city heading, then stations grouped by sport."""
    first = stations[0]
    by_sport: dict[str, list[Station]] = {}
    for s in stations:
        by_sport.setdefault(s.sport, []).append(s)

    parts = [
        '<div style="min-width: 200px;">',
        f'<h3 style="margin: 0 0 8px 0; color: #333;">{_location(first.city, first.state)}</h3>',
    ]
    for sport, members in by_sport.items():
        color = SPORT_TEXT_COLORS.get(sport, DEFAULT_COLOR)
        parts.append('<div style="margin-bottom: 8px;">')
        parts.append(f'<strong style="color: {color};">{escape(sport)}:</strong><br>')
        for s in members:
            parts.append(
                f'<span style="margin-left: 10px;">{escape(s.dial)} - {escape(s.call_sign)}</span><br>'
            )
        parts.append("</div>")
    parts.append("</div>")
    return "".join(parts)
