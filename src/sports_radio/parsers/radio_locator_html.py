"""Parser for radio-locator.com station finder pages."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from sports_radio.models import FCCRecord
from sports_radio.parsers.base import RecordParser

_LATITUDE = re.compile(r"Latitude:\s*([\d.-]+)")
_LONGITUDE = re.compile(r"Longitude:\s*([\d.-]+)")
_POWER = re.compile(r"Power:\s*([\d.]+)\s*kW")
_CALL_SIGN = re.compile(r"\b([KW][A-Z]{2,3}(?:-FM)?)\b")
_FREQUENCY = re.compile(r"\b(\d{2,4}(?:\.\d)?)\s*(?:kHz|MHz|AM|FM)\b")


class RadioLocatorHTMLParser(RecordParser):
    """Pull tower coordinates and power out of a finder result page.

    The page has no stable markup, so values are matched in its visible text.
    Returns at most one record, and none when coordinates are missing.
    """

    def __init__(self, call_sign: str = ""):
        self.call_sign = call_sign

    def parse(self, raw_payload: str, service: str) -> list[FCCRecord]:
        text = BeautifulSoup(raw_payload, "html.parser").get_text(" ")

        lat_match = _LATITUDE.search(text)
        lon_match = _LONGITUDE.search(text)
        if not lat_match or not lon_match:
            return []

        try:
            latitude = float(lat_match.group(1))
            longitude = float(lon_match.group(1))
        except ValueError:
            return []

        power_match = _POWER.search(text)
        call_sign = self.call_sign
        if not call_sign:
            call_match = _CALL_SIGN.search(text)
            call_sign = call_match.group(1) if call_match else ""
        freq_match = _FREQUENCY.search(text)

        return [FCCRecord(
            call_sign=call_sign.upper().removesuffix("-FM"),
            frequency=float(freq_match.group(1)) if freq_match else 0.0,
            format=service,
            power=float(power_match.group(1)) if power_match else None,
            latitude=latitude,
            longitude=longitude,
        )]
