"""Parser for the FCC fmq/amq pipe-delimited text output (list=4)."""

from __future__ import annotations

import logging

from sports_radio.geo import dms_to_decimal
from sports_radio.models import FCCRecord
from sports_radio.parsers.base import RecordParser, leading_float

logger = logging.getLogger(__name__)

# FCC list=4 columns (pipe-delimited, leading empty column). Indices below
# were worked out from live responses; the FCC publishes no schema.
_COL_CALL_SIGN = 1
_COL_FREQUENCY = 2
_COL_SERVICE = 3
_COL_FM_ERP = 4          # FM: effective radiated power, kW
_COL_CITY = 10
_COL_STATE = 11
_COL_AM_POWER = 14       # AM: transmitter power, kW
_COL_LAT_DIR = 19        # N/S, then degrees, minutes, seconds
_COL_LON_DIR = 23        # E/W, then degrees, minutes, seconds

_MIN_FIELDS = 21


class FCCTextParser(RecordParser):
    """Parse an FCC query response → list of FCCRecord for one band."""

    def parse(self, raw_payload: str, service: str) -> list[FCCRecord]:
        records: list[FCCRecord] = []

        for line in raw_payload.splitlines():
            if "|" not in line:
                continue
            cols = line.split("|")
            if len(cols) < _MIN_FIELDS or cols[_COL_SERVICE].strip() != service:
                continue
            try:
                records.append(self._parse_line(line, cols, service))
            except (IndexError, ValueError) as exc:
                logger.debug("Skipping unparseable %s line (%s): %s", service, exc, line)

        logger.info("Parsed %d %s stations", len(records), service)
        return records

    @staticmethod
    def _parse_line(line: str, cols: list[str], service: str) -> FCCRecord:
        call_sign = cols[_COL_CALL_SIGN].strip()
        if call_sign.endswith("-FM"):
            call_sign = call_sign[:-3]
        if not call_sign:
            raise ValueError("empty call sign")

        frequency = leading_float(cols[_COL_FREQUENCY])
        if frequency is None:
            raise ValueError(f"bad frequency {cols[_COL_FREQUENCY]!r}")

        power_col = _COL_FM_ERP if service == "FM" else _COL_AM_POWER
        # A zero reading means "not reported"
        power = leading_float(cols[power_col]) if len(cols) > power_col else None
        power = power or None

        return FCCRecord(
            call_sign=call_sign,
            frequency=frequency,
            format=service,
            city=cols[_COL_CITY].strip(),
            state=cols[_COL_STATE].strip(),
            power=power,
            latitude=_parse_dms(cols, _COL_LAT_DIR),
            longitude=_parse_dms(cols, _COL_LON_DIR),
            raw_line=line,
        )


def _parse_dms(cols: list[str], start: int) -> float | None:
    """Decimal degrees from four columns: direction, degrees, minutes, seconds."""
    if len(cols) < start + 4:
        return None
    degrees = leading_float(cols[start + 1])
    minutes = leading_float(cols[start + 2])
    seconds = leading_float(cols[start + 3])
    if degrees is None or minutes is None or seconds is None:
        return None
    return dms_to_decimal(cols[start], degrees, minutes, seconds)
