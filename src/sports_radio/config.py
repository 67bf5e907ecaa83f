"""Runtime settings, overridable from the environment."""

from __future__ import annotations

import logging
import os
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent

STATIONS_FILE = Path(os.getenv(
    "SPORTS_RADIO_STATIONS_FILE",
    str(PACKAGE_DIR / "data" / "stations.json"),
))

FCC_CACHE_FILE = Path(os.getenv("SPORTS_RADIO_FCC_CACHE", "fcc-data-cache.json"))

# Pause between FCC requests, in seconds
FCC_REQUEST_DELAY = float(os.getenv("SPORTS_RADIO_FCC_DELAY", "1.0"))

# States pulled by the bulk FCC fetch (Nebraska plus border markets)
FCC_STATES = ["NE", "SD", "KS"]

# Map default view: center of Nebraska
DEFAULT_CENTER = (41.5, -99.8)
DEFAULT_ZOOM = 7

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )
