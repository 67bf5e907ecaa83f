"""Source registry for FCC facility queries."""

from __future__ import annotations

from dataclasses import dataclass, field

from sports_radio import config


@dataclass
class SourceConfig:
    """Configuration for a single station-data endpoint."""

    name: str
    base_url: str
    format: str                 # "fcc_text" (pipe-delimited) or "html"
    timeout_seconds: int
    request_delay_seconds: float
    params: dict[str, str] = field(default_factory=dict)


# Query parameters shared by the FCC fmq/amq endpoints. list=4 selects the
# pipe-delimited text output; status=3 restricts to licensed facilities.
_FCC_COMMON_PARAMS = {
    "call": "",
    "filenumber": "",
    "state": "",
    "city": "",
    "serv": "",
    "status": "3",
    "facid": "",
    "asrn": "",
    "class": "",
    "list": "4",
    "ThisTab": "Results to This Page/Tab",
    "dist": "",
    "dlat2": "",
    "mlat2": "",
    "slat2": "",
    "NS": "N",
    "dlon2": "",
    "mlon2": "",
    "slon2": "",
    "EW": "W",
    "size": "9",
}

SOURCES: dict[str, SourceConfig] = {
    "fcc_fm": SourceConfig(
        name="fcc_fm",
        base_url="https://transition.fcc.gov/fcc-bin/fmq",
        format="fcc_text",
        timeout_seconds=60,
        request_delay_seconds=config.FCC_REQUEST_DELAY,
        params={**_FCC_COMMON_PARAMS, "freq": "88.1", "fre2": "107.9"},
    ),
    "fcc_am": SourceConfig(
        name="fcc_am",
        base_url="https://transition.fcc.gov/fcc-bin/amq",
        format="fcc_text",
        timeout_seconds=60,
        request_delay_seconds=config.FCC_REQUEST_DELAY,
        params={**_FCC_COMMON_PARAMS, "freq": "540", "fre2": "1700"},
    ),
    "radio_locator": SourceConfig(
        name="radio_locator",
        base_url="https://radio-locator.com/cgi-bin/finder",
        format="html",
        timeout_seconds=20,
        request_delay_seconds=2.0,
        params={"status": "L"},
    ),
}

# FCC query source per band
SOURCE_FOR_SERVICE = {"FM": "fcc_fm", "AM": "fcc_am"}
