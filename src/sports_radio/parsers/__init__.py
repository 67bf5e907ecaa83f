"""Parsers for converting FCC query responses to FCCRecord."""

from sports_radio.parsers.fcc_text import FCCTextParser
from sports_radio.parsers.radio_locator_html import RadioLocatorHTMLParser

# Keyed by SourceConfig.format; the finder page parser needs a call sign per page
PARSER_MAP = {
    "fcc_text": FCCTextParser(),
}

__all__ = ["PARSER_MAP", "FCCTextParser", "RadioLocatorHTMLParser"]
