"""Abstract base parser for FCC facility responses."""

from __future__ import annotations

import abc
import re

from sports_radio.models import FCCRecord

_LEADING_NUMBER = re.compile(r"^\s*([-+]?\d*\.?\d+)")


class RecordParser(abc.ABC):
    """Abstract parser that converts a raw response → list of FCCRecord."""

    @abc.abstractmethod
    def parse(self, raw_payload: str, service: str) -> list[FCCRecord]:
        """Parse a raw response body into FCC records.

        Args:
            raw_payload: The raw response body (text).
            service: Band the query was made for, "AM" or "FM".

        Returns:
            List of FCCRecord instances. Rows that do not parse are skipped.
        """


def leading_float(val: str | None) -> float | None:
    """Number at the start of a field such as ``"100.  kW"``; None when absent."""
    if val is None:
        return None
    match = _LEADING_NUMBER.match(val)
    if match is None:
        return None
    return float(match.group(1))
