"""FCC data refresh: fetch tower data, merge it into the station table.

These are human-run tools. Fetching is sequential and stops at the first
failed request; merged tables are written next to the original for review.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Optional

from sports_radio.clients.fcc_client import FCCClient
from sports_radio.geo import haversine_km
from sports_radio.models import FCCRecord, Station
from sports_radio.parsers import PARSER_MAP, RadioLocatorHTMLParser
from sports_radio.sources import SOURCE_FOR_SERVICE

logger = logging.getLogger(__name__)

# Frequency tolerance when one call sign has several FCC facilities
UPDATE_FREQ_TOLERANCE = 0.1
FIX_FREQ_TOLERANCE = 0.5

# Coordinates closer than this count as unchanged
COORD_EPSILON = 0.001


# ── FCC cache ────────────────────────────────────────────────────────────


def load_cache(path: Path | str) -> list[FCCRecord]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return [FCCRecord.from_dict(d) for d in data]


def save_cache(path: Path | str, records: list[FCCRecord]) -> None:
    Path(path).write_text(
        json.dumps([r.to_dict() for r in records], indent=2),
        encoding="utf-8",
    )
    logger.info("Saved %d FCC records to %s", len(records), path)


def index_records(records: list[FCCRecord]) -> dict[tuple[str, str], list[FCCRecord]]:
    """FCC records keyed by (call sign, band); one call sign may have several."""
    index: dict[tuple[str, str], list[FCCRecord]] = {}
    for record in records:
        index.setdefault((record.call_sign, record.format), []).append(record)
    return index


# ── Fetching ─────────────────────────────────────────────────────────────


def _query_parser(client: FCCClient, service: str):
    return PARSER_MAP[client.sources[SOURCE_FOR_SERVICE[service]].format]


async def fetch_states(client: FCCClient, states: list[str]) -> list[FCCRecord]:
    """FM then AM for each state, one request at a time."""
    records: list[FCCRecord] = []
    for state in states:
        for service in ("FM", "AM"):
            raw = await client.fetch_state(service, state)
            records.extend(_query_parser(client, service).parse(raw, service))

    located = sum(1 for r in records if r.has_location)
    logger.info("Fetched %d FCC records (%d with coordinates)", len(records), located)
    return records


async def lookup_call_sign(client: FCCClient, call_sign: str, service: str) -> FCCRecord | None:
    """First FCC facility listed for a call sign, or None."""
    raw = await client.fetch_call_sign(call_sign, service)
    records = [
        r for r in _query_parser(client, service).parse(raw, service)
        if r.call_sign == call_sign.upper()
    ]
    return records[0] if records else None


async def lookup_radio_locator(
    client: FCCClient, call_sign: str, state: str, service: str = "AM",
) -> FCCRecord | None:
    raw = await client.fetch_radio_locator(call_sign, state, service)
    records = RadioLocatorHTMLParser(call_sign=call_sign).parse(raw, service)
    return records[0] if records else None


# ── Merging ──────────────────────────────────────────────────────────────


@dataclass
class MergeReport:
    matched: list[str] = field(default_factory=list)
    moved: list[str] = field(default_factory=list)       # coordinates changed
    unmatched: list[str] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"Matched: {len(self.matched)} stations, "
            f"updated coordinates: {len(self.moved)}, "
            f"not matched: {len(self.unmatched)}"
        )


def _label(station: Station) -> str:
    return f"{station.call_sign} {station.dial} ({station.city})"


def _pick_by_frequency(candidates: list[FCCRecord], frequency: float, tolerance: float) -> FCCRecord:
    for candidate in candidates:
        if abs(candidate.frequency - frequency) < tolerance:
            return candidate
    return candidates[0]


def _coords_changed(station: Station, record: FCCRecord) -> bool:
    if not record.has_location:
        return False
    if not station.has_location:
        return True
    return (
        abs(station.latitude - record.latitude) > COORD_EPSILON
        or abs(station.longitude - record.longitude) > COORD_EPSILON
    )


def apply_tower(station: Station, record: FCCRecord, **extra) -> Station:
    """Station moved to the FCC tower, keeping its old point as the city point.

    Records without tower coordinates only contribute power.
    """
    if not record.has_location:
        return replace(station, power=record.power, **extra)
    return replace(
        station,
        latitude=record.latitude,
        longitude=record.longitude,
        tower_latitude=record.latitude,
        tower_longitude=record.longitude,
        city_latitude=station.latitude,
        city_longitude=station.longitude,
        power=record.power,
        **extra,
    )


def update_stations(
    stations: list[Station], records: list[FCCRecord],
) -> tuple[list[Station], MergeReport]:
    """Replace station coordinates with FCC tower coordinates and add power."""
    index = index_records(records)
    report = MergeReport()
    updated: list[Station] = []

    for station in stations:
        candidates = index.get((station.call_sign, station.format))
        if not candidates:
            report.unmatched.append(_label(station))
            logger.debug("No match: %s", _label(station))
            updated.append(station)
            continue

        record = candidates[0]
        if len(candidates) > 1:
            record = _pick_by_frequency(candidates, station.frequency, UPDATE_FREQ_TOLERANCE)

        report.matched.append(_label(station))
        if _coords_changed(station, record):
            report.moved.append(_label(station))
            if station.has_location and record.has_location:
                logger.debug(
                    "Updating %s: tower is %.2f km from %s",
                    _label(station),
                    haversine_km(station.latitude, station.longitude, record.latitude, record.longitude),
                    station.city,
                )
        updated.append(apply_tower(station, record))

    logger.info(report.summary())
    return updated, report


@dataclass
class TranslatorFix:
    """A known station whose FCC data lives under another facility.

    ``am_call_sign``: an FM translator sited at its parent AM tower.
    ``fm_call_sign``: the station is licensed under a different FM call sign.
    """

    match: Callable[[Station], bool]
    reason: str
    am_call_sign: Optional[str] = None
    fm_call_sign: Optional[str] = None


def _fm_translator(call_sign: str) -> TranslatorFix:
    return TranslatorFix(
        match=lambda s: s.call_sign == call_sign and s.format == "FM",
        am_call_sign=call_sign,
        reason="FM translator uses AM tower location",
    )


TRANSLATOR_FIXES: list[TranslatorFix] = [
    _fm_translator("KCOW"),
    _fm_translator("KUVR"),
    _fm_translator("KGFW"),
    _fm_translator("KTNC"),
    _fm_translator("KLIN"),
    _fm_translator("KOTA"),
    TranslatorFix(
        match=lambda s: s.call_sign == "KICS/KXPN" and s.format == "FM",
        fm_call_sign="KLIQ",
        reason="Actual call sign is KLIQ",
    ),
]


@dataclass
class FixReport:
    fixed: list[str] = field(default_factory=list)
    not_fixed: list[str] = field(default_factory=list)

    def summary(self) -> str:
        return f"Fixed: {len(self.fixed)} stations, not fixed: {len(self.not_fixed)}"


def fix_unmatched(
    stations: list[Station],
    records: list[FCCRecord],
    fixes: list[TranslatorFix] | None = None,
) -> tuple[list[Station], FixReport]:
    """Borrow tower data for stations the FCC lists under another facility."""
    fixes = TRANSLATOR_FIXES if fixes is None else fixes
    index = index_records(records)
    report = FixReport()
    result: list[Station] = []

    for station in stations:
        fix = next((f for f in fixes if f.match(station)), None)
        if fix is None:
            result.append(station)
            continue

        if fix.am_call_sign:
            candidates = index.get((fix.am_call_sign, "AM"), [])
            if not candidates:
                report.not_fixed.append(_label(station))
                logger.warning("Could not fix %s: AM data not found", _label(station))
                result.append(station)
                continue
            record = candidates[0]
            fixed = apply_tower(station, record, power_source="AM", translator_of=record.call_sign)
        else:
            candidates = index.get((fix.fm_call_sign, "FM"), [])
            if not candidates:
                report.not_fixed.append(_label(station))
                logger.warning("Could not fix %s: FM data not found", _label(station))
                result.append(station)
                continue
            record = _pick_by_frequency(candidates, station.frequency, FIX_FREQ_TOLERANCE)
            fixed = apply_tower(station, record, call_sign=record.call_sign)

        logger.info("Fixed %s using %s %s: %s", _label(station), record.call_sign, record.format, fix.reason)
        report.fixed.append(_label(station))
        result.append(fixed)

    logger.info(report.summary())
    return result, report
