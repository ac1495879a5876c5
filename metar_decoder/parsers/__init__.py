"""Report parsers."""

from .groups import GroupParser
from .metar_parser import MetarParser, Section

__all__ = [
    'GroupParser',
    'MetarParser',
    'Section',
]
