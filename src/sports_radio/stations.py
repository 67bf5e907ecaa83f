"""Static station table: load, validate and write the stations data file."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from sports_radio import config
from sports_radio.models import Station, StationValidationError

logger = logging.getLogger(__name__)


def parse_stations(raw: str, strict: bool = True) -> list[Station]:
    """Parse a JSON array of station objects.

    With ``strict`` any invalid record raises StationValidationError;
    otherwise invalid records are logged and skipped.
    """
    stations: list[Station] = []
    errors: list[str] = []

    for index, entry in enumerate(json.loads(raw)):
        try:
            station = Station.from_dict(entry)
        except (TypeError, ValueError) as exc:
            problems = [f"record {index}: {exc}"]
        else:
            problems = [f"record {index} ({station.call_sign}): {e}" for e in station.validate()]
            if not problems:
                stations.append(station)
                continue

        if strict:
            errors.extend(problems)
        else:
            for problem in problems:
                logger.warning("Skipping %s", problem)

    if errors:
        raise StationValidationError(errors)
    return stations


def load_stations(path: Path | str | None = None, strict: bool = True) -> list[Station]:
    """Load the station table (defaults to the bundled data file)."""
    path = Path(path) if path is not None else config.STATIONS_FILE
    stations = parse_stations(path.read_text(encoding="utf-8"), strict=strict)
    logger.debug("Loaded %d stations from %s", len(stations), path)
    return stations


def dump_stations(stations: list[Station]) -> str:
    return json.dumps([s.to_dict() for s in stations], indent=2) + "\n"


def review_path(path: Path | str, label: str) -> Path:
    """Sibling file for a regenerated table, e.g. stations.json → stations-updated.json."""
    path = Path(path)
    return path.with_name(f"{path.stem}-{label}{path.suffix}")


def write_stations(path: Path | str, stations: list[Station]) -> Path:
    path = Path(path)
    path.write_text(dump_stations(stations), encoding="utf-8")
    logger.info("Wrote %d stations to %s", len(stations), path)
    return path
