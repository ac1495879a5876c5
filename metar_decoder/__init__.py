"""
METAR/SPECI report decoder.

Provides:
- Metar: Decoded report with typed groups, serializable to JSON
- MetarParser / decode_metar: Decode raw report text
- MetarTime: Partial report times and their resolution against an anchor
- Value, Quantity, Unit: Measured values with units
- WeatherAnalyzer: Derived values such as the ceiling
- MetarBatchDecoder: Decode report files and export them to JSON
- MetarDecodeError: Raised when a report cannot be decoded

Example:
    from datetime import datetime
    from metar_decoder import decode_metar

    metar = decode_metar(
        "METAR LFPG 211230Z 24015G25KT 9999 FEW040 BKN080 18/09 Q1015",
        anchor_time=datetime(2023, 5, 21),
    )
    print(metar.wind.wind_speed)  # Quantity(Value(EXACT, 15.0), kt)
    print(metar.ceiling)          # Quantity(Value(EXACT, 8000.0), ft)
"""

from metar_decoder.exceptions import MetarDecodeError
from metar_decoder.models import (
    Unit,
    ValueType,
    ValueInRange,
    Value,
    Quantity,
    MetarTime,
    MetarTimeType,
    Metar,
    TrendChange,
)
from metar_decoder.parsers import GroupParser, MetarParser, Section
from metar_decoder.analysis import WeatherAnalyzer
from metar_decoder.batch import MetarFileFormat, MetarBatchDecoder

__version__ = "0.1.0"

decode_metar = MetarParser.decode

__all__ = [
    'MetarDecodeError',
    'Unit',
    'ValueType',
    'ValueInRange',
    'Value',
    'Quantity',
    'MetarTime',
    'MetarTimeType',
    'Metar',
    'TrendChange',
    'GroupParser',
    'MetarParser',
    'Section',
    'decode_metar',
    'WeatherAnalyzer',
    'MetarFileFormat',
    'MetarBatchDecoder',
]
