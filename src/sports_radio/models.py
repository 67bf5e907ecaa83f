"""Data models for stations, FCC records and ranking results."""

from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Optional

FORMATS = ("AM", "FM")

# Station dataclass field → key used in the stations data file
_STATION_KEYS = {
    "call_sign": "CallSign",
    "frequency": "Frequency",
    "format": "Format",
    "city": "City",
    "state": "State",
    "sport": "Sport",
    "year": "Year",
    "latitude": "latitude",
    "longitude": "longitude",
    "tower_latitude": "towerLatitude",
    "tower_longitude": "towerLongitude",
    "city_latitude": "cityLatitude",
    "city_longitude": "cityLongitude",
    "power": "power",
    "power_source": "powerSource",
    "translator_of": "translatorOf",
}

_FCC_KEYS = {
    "call_sign": "callSign",
    "frequency": "frequency",
    "format": "format",
    "city": "city",
    "state": "state",
    "power": "power",
    "latitude": "latitude",
    "longitude": "longitude",
    "raw_line": "rawLine",
}


class StationValidationError(Exception):
    """Raised when a station record fails validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Validation failed: {'; '.join(errors)}")


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Station:
    """One sport broadcast by one station, as listed in the stations file."""

    call_sign: str
    frequency: float
    format: str                 # "AM" or "FM"
    city: str
    sport: str                  # "Football", "Volleyball", "Men's Basketball", ...
    state: Optional[str] = None
    year: Optional[int] = None

    # Effective point used for ranking (tower once merged, else city)
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    tower_latitude: Optional[float] = None
    tower_longitude: Optional[float] = None
    city_latitude: Optional[float] = None
    city_longitude: Optional[float] = None

    power: Optional[float] = None           # kW
    power_source: Optional[str] = None      # "AM" when borrowed from the parent AM
    translator_of: Optional[str] = None

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def dial(self) -> str:
        """Frequency and band as shown on the list, e.g. ``1110AM``."""
        return f"{_format_frequency(self.frequency)}{self.format}"

    def validate(self) -> list[str]:
        """Return a list of validation errors (empty = valid)."""
        errors: list[str] = []

        if not self.call_sign:
            errors.append("call_sign is empty")
        if self.format not in FORMATS:
            errors.append(f"format '{self.format}' not in (AM, FM)")
        if self.frequency <= 0:
            errors.append(f"frequency {self.frequency} must be positive")
        if not self.city:
            errors.append("city is empty")

        if (self.latitude is None) != (self.longitude is None):
            errors.append("latitude and longitude must be set together")
        if self.latitude is not None and not -90 <= self.latitude <= 90:
            errors.append(f"latitude {self.latitude} out of range [-90, 90]")
        if self.longitude is not None and not -180 <= self.longitude <= 180:
            errors.append(f"longitude {self.longitude} out of range [-180, 180]")

        if self.power is not None and self.power < 0:
            errors.append(f"power {self.power} is negative")

        return errors

    def to_dict(self) -> dict:
        d = asdict(self)
        # 1110.0 is written back as 1110
        if float(self.frequency).is_integer():
            d["frequency"] = int(self.frequency)
        return {_STATION_KEYS[k]: v for k, v in d.items() if v is not None}

    @classmethod
    def from_dict(cls, d: dict) -> Station:
        kwargs = {
            attr: d[key] for attr, key in _STATION_KEYS.items() if d.get(key) is not None
        }
        kwargs["frequency"] = float(kwargs.get("frequency", 0))
        return cls(**kwargs)


@dataclass
class FCCRecord:
    """One facility row parsed from an FCC query response."""

    call_sign: str
    frequency: float
    format: str
    city: str = ""
    state: str = ""
    power: Optional[float] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    raw_line: str = ""

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> dict:
        return {_FCC_KEYS[k]: v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, d: dict) -> FCCRecord:
        return cls(**{attr: d[key] for attr, key in _FCC_KEYS.items() if key in d})


@dataclass
class RankedStation:
    """A station entry on the nearest-stations list, with every sport it carries."""

    call_sign: str
    frequency: float
    format: str
    city: str
    state: Optional[str]
    latitude: float
    longitude: float
    distance: float             # miles
    signal: float = 0.0
    sports: list[str] = field(default_factory=list)

    @property
    def dial(self) -> str:
        return f"{_format_frequency(self.frequency)}{self.format}"

    @property
    def unique_sports(self) -> list[str]:
        return list(dict.fromkeys(self.sports))


def _format_frequency(frequency: float) -> str:
    # 1110.0 → "1110", 92.7 → "92.7"
    return f"{frequency:g}"
