"""Nebraska sports radio stations, ranked by distance from the listener."""

__version__ = "0.1.0"
