"""
METAR report decoder.

Scans the sanitized report left to right. At each position the section
marker is tried first, then the group parsers that apply to the current
section in priority order. The first one that matches wins and the scan
moves past the group; if none matches, one whitespace-delimited group is
skipped and kept as unparsed.
"""

import re
import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from metar_decoder.exceptions import MetarDecodeError
from metar_decoder.analysis import WeatherAnalyzer
from metar_decoder.models.metar_time import MetarTime
from metar_decoder.models.metar import Trend, CloudCover, CloudLayer, TrendChange, Metar
from metar_decoder.parsers.groups import GroupParser

logger = logging.getLogger(__name__)

WHITESPACE_RE = re.compile(r'\s+')
END_RE = re.compile(r'[\s=]*$')

# Trend time indicator to TrendChange attribute
_TREND_TIME_FIELDS = {
    'FM': 'from_time',
    'TL': 'until_time',
    'AT': 'at_time',
}


class Section(Enum):
    """Report section being scanned."""

    MAIN = "main"
    TREND = "trend"
    REMARK = "remark"


class MetarParser:
    """
    Decode METAR and SPECI reports into Metar objects.

    Example:
        metar = MetarParser.decode(
            "KXYZ 131951Z 18010KT 10SM FEW050 22/18 A3002",
            anchor_time=datetime(2023, 5, 14),
        )
        print(metar.header.observation_time)  # 2023-05-13T19:51:00Z
        print(metar.ceiling)                  # unlimited
    """

    @staticmethod
    def sanitize(report: str) -> str:
        """
        Normalize report text.

        Removes NUL bytes, uppercases, collapses whitespace runs and strips
        the trailing "=" terminator.
        """
        text = report.replace('\x00', '').upper().strip()
        text = WHITESPACE_RE.sub(' ', text)
        return END_RE.sub('', text)

    @classmethod
    def decode(cls, report: str, anchor_time: Optional[datetime] = None) -> Metar:
        """
        Decode a single report.

        Args:
            report: Raw single-line report text
            anchor_time: Optional instant close to the report time. If given,
                the observation day and trend times are resolved to full
                datetimes; otherwise they stay partial.

        Returns:
            Decoded Metar. A report that is empty after sanitizing gives an
            empty Metar.

        Raises:
            MetarDecodeError: If a time is out of range or the observation
                day cannot be resolved
        """
        sanitized = cls.sanitize(report)
        try:
            metar = _ReportScanner(sanitized, anchor_time).scan()
        except MetarDecodeError as e:
            if e.report is None:
                e.report = sanitized
            raise

        if metar.unparsed_groups:
            logger.debug(f"Unparsed data: {' '.join(metar.unparsed_groups)}, report: {sanitized}")

        return metar


class _ReportScanner:
    """Section state machine for one decode call."""

    def __init__(self, report: str, anchor_time: Optional[datetime]):
        # trailing separator so every group ends with a space
        self.text = report + ' '
        self.anchor_time = anchor_time
        self.section = Section.MAIN
        self.trend_change: Optional[TrendChange] = None
        self.metar = Metar(report=report)

    def scan(self) -> Metar:
        pos = 0
        while pos < len(self.text):
            section = GroupParser.parse_section(self.text, pos)
            if section:
                trend, consumed = section
                self._enter_section(trend)
                pos += consumed
                continue

            if self.section == Section.MAIN:
                consumed = self._decode_main_group(pos)
            elif self.section == Section.TREND:
                consumed = self._decode_trend_group(pos)
            else:
                consumed = 0

            if consumed:
                pos += consumed
                continue

            end = self.text.index(' ', pos)
            group = self.text[pos:end]
            if self.section != Section.REMARK and group.strip('/'):
                self.metar.unparsed_groups.append(group)
            pos = end + 1

        self._close_trend_change()
        self.metar.ceiling = WeatherAnalyzer.ceiling(self.metar.clouds)
        return self.metar

    def _enter_section(self, trend: Optional[Trend]) -> None:
        self._close_trend_change()
        if trend is None:
            self.section = Section.REMARK
        else:
            self.section = Section.TREND
            self.trend_change = TrendChange(indicator=trend)

    def _close_trend_change(self) -> None:
        if self.trend_change is not None:
            self.metar.trend_changes.append(self.trend_change)
            self.trend_change = None

    def _decode_main_group(self, pos: int) -> int:
        """Try the main section groups in priority order; return characters consumed."""
        text = self.text
        metar = self.metar

        if metar.header.is_empty():
            result = GroupParser.parse_header(text, pos, self.anchor_time)
            if result:
                metar.header, consumed = result
                return consumed

        if metar.wind.is_empty():
            result = GroupParser.parse_wind(text, pos)
            if result:
                metar.wind, consumed = result
                return consumed

        if metar.visibility.is_empty():
            result = GroupParser.parse_visibility(text, pos)
            if result:
                metar.visibility, is_cavok, consumed = result
                if is_cavok:
                    metar.clouds.append(CloudLayer(cover=CloudCover.CEILING_OK))
                return consumed

        result = GroupParser.parse_present_weather(text, pos)
        if result:
            weather, consumed = result
            if not weather.is_empty():
                metar.present_weather.append(weather)
            return consumed

        result = GroupParser.parse_runway_visual_range(text, pos)
        if result:
            rvr, consumed = result
            metar.runway_visual_ranges.append(rvr)
            return consumed

        result = GroupParser.parse_cloud_layer(text, pos)
        if result:
            layer, consumed = result
            if not layer.is_empty():
                metar.clouds.append(layer)
            return consumed

        if metar.temperature.is_empty():
            result = GroupParser.parse_temperature(text, pos)
            if result:
                temperature, consumed = result
                if not temperature.is_empty():
                    metar.temperature = temperature
                return consumed

        if metar.pressure.is_empty():
            result = GroupParser.parse_pressure(text, pos)
            if result:
                metar.pressure, consumed = result
                return consumed

        result = GroupParser.parse_recent_weather(text, pos)
        if result:
            weather, consumed = result
            if not weather.is_empty():
                metar.recent_weather.append(weather)
            return consumed

        result = GroupParser.parse_wind_shear(text, pos)
        if result:
            wind_shear, consumed = result
            metar.wind_shears.append(wind_shear)
            return consumed

        if metar.sea.is_empty():
            result = GroupParser.parse_sea(text, pos)
            if result:
                metar.sea, consumed = result
                return consumed

        return GroupParser.parse_discarded(text, pos) or 0

    def _decode_trend_group(self, pos: int) -> int:
        """Try the trend section groups, writing into the open trend change."""
        text = self.text
        change = self.trend_change

        result = GroupParser.parse_trend_time(text, pos)
        if result:
            indicator, trend_time, consumed = result
            field_name = _TREND_TIME_FIELDS[indicator]
            if getattr(change, field_name) is None:
                setattr(change, field_name, self._resolve_trend_time(trend_time))
                return consumed

        if change.wind.is_empty():
            result = GroupParser.parse_wind(text, pos)
            if result:
                change.wind, consumed = result
                return consumed

        if change.visibility.is_empty():
            result = GroupParser.parse_visibility(text, pos)
            if result:
                change.visibility, is_cavok, consumed = result
                if is_cavok:
                    change.clouds.append(CloudLayer(cover=CloudCover.CEILING_OK))
                return consumed

        result = GroupParser.parse_present_weather(text, pos)
        if result:
            weather, consumed = result
            if not weather.is_empty():
                change.present_weather.append(weather)
            return consumed

        result = GroupParser.parse_cloud_layer(text, pos)
        if result:
            layer, consumed = result
            if not layer.is_empty():
                change.clouds.append(layer)
            return consumed

        return 0

    def _resolve_trend_time(self, trend_time: MetarTime) -> MetarTime:
        """Resolve against the observation time when known, else the anchor."""
        if self.anchor_time is None:
            return trend_time
        observed = self.metar.header.observation_time
        if observed is not None and observed.is_resolved:
            return trend_time.to_date_time(observed.value)
        return trend_time.to_date_time(self.anchor_time)
