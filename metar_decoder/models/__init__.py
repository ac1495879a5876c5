"""
Data models for decoded METAR reports.

This package contains the value/quantity model, report times and the
record types for each METAR group family.
"""

from .values import Unit, ValueType, ValueInRange, Value, Quantity
from .metar_time import MetarTime, MetarTimeType
from .metar import (
    ReportType,
    Trend,
    DirectionOctant,
    RunwayVisualRangeTrend,
    WeatherIntensity,
    WeatherDescriptor,
    WeatherPhenomenon,
    CloudCover,
    CloudType,
    SeaState,
    Header,
    Wind,
    DirectionalVisibility,
    Visibility,
    RunwayVisualRange,
    WeatherCondition,
    CloudLayer,
    Temperature,
    Pressure,
    WindShear,
    Sea,
    TrendChange,
    Metar,
)

__all__ = [
    # Values
    'Unit',
    'ValueType',
    'ValueInRange',
    'Value',
    'Quantity',
    'MetarTime',
    'MetarTimeType',
    # Enumerations
    'ReportType',
    'Trend',
    'DirectionOctant',
    'RunwayVisualRangeTrend',
    'WeatherIntensity',
    'WeatherDescriptor',
    'WeatherPhenomenon',
    'CloudCover',
    'CloudType',
    'SeaState',
    # Groups
    'Header',
    'Wind',
    'DirectionalVisibility',
    'Visibility',
    'RunwayVisualRange',
    'WeatherCondition',
    'CloudLayer',
    'Temperature',
    'Pressure',
    'WindShear',
    'Sea',
    'TrendChange',
    'Metar',
]
