"""Tests for decoding complete reports."""

import logging
import pytest
from datetime import datetime, time

from metar_decoder import decode_metar
from metar_decoder.exceptions import MetarDecodeError
from metar_decoder.models import (
    Unit,
    Value,
    Quantity,
    MetarTime,
    ReportType,
    Trend,
    WeatherIntensity,
    WeatherDescriptor,
    WeatherPhenomenon,
    CloudCover,
    CloudType,
    CloudLayer,
    SeaState,
    Metar,
)
from metar_decoder.parsers.metar_parser import MetarParser


class TestSanitize:
    """Test report text normalization."""

    def test_normalizes_case_whitespace_and_terminator(self):
        raw = "  metar  lfpg\t211230z\x00  24005kt=  "
        assert MetarParser.sanitize(raw) == "METAR LFPG 211230Z 24005KT"

    def test_repeated_terminators(self):
        assert MetarParser.sanitize("LFPG 211230Z ==") == "LFPG 211230Z"

    @pytest.mark.parametrize("raw", ["", "   ", "=", "\x00"])
    def test_empty_report(self, raw):
        metar = MetarParser.decode(raw)
        assert metar == Metar(report="")
        assert metar.unparsed_groups == []


class TestDecodeExamples:
    """Test end-to-end decoding of typical reports."""

    def test_us_report_without_anchor(self, sample_report):
        metar = MetarParser.decode(sample_report)

        assert metar.header.station_id == "KXYZ"
        assert metar.header.observation_time == MetarTime.from_day_time(13, time(19, 51))
        assert metar.wind.wind_from_direction == Quantity(Value.exact(180.0), Unit.DEGREE_TRUE)
        assert metar.wind.wind_speed == Quantity(Value.exact(10.0), Unit.KNOT)
        assert metar.visibility.prevailing_visibility == Quantity(Value.exact(10.0), Unit.STATUTE_MILE)
        assert metar.clouds == [CloudLayer(cover=CloudCover.FEW, height=Quantity(Value.exact(5000.0), Unit.FOOT))]
        assert metar.temperature.temperature == Quantity(Value.exact(22.0), Unit.DEGREE_CELSIUS)
        assert metar.temperature.dew_point == Quantity(Value.exact(18.0), Unit.DEGREE_CELSIUS)
        assert metar.pressure.pressure == Quantity(Value.exact(30.02), Unit.INCH_OF_MERCURY)
        assert metar.runway_visual_ranges == []
        assert metar.present_weather == []
        assert metar.trend_changes == []
        assert metar.ceiling == Quantity(Value.unlimited(), Unit.FOOT)
        assert metar.report == sample_report
        assert metar.unparsed_groups == []

    def test_observation_day_resolved_to_next_month(self):
        metar = MetarParser.decode("LFPG 010000Z 24005KT 9999", datetime(2023, 5, 31, 12, 0))
        assert metar.header.observation_time == MetarTime.from_datetime(datetime(2023, 6, 1, 0, 0))

    def test_full_report(self, full_report):
        metar = MetarParser.decode(full_report)

        assert metar.header.report_type == ReportType.METAR
        assert metar.header.station_id == "LFPG"
        assert metar.wind.wind_gust == Quantity(Value.exact(25.0), Unit.KNOT)
        assert metar.wind.wind_from_direction_range is not None
        assert metar.visibility.prevailing_visibility == Quantity(Value.above(10000), Unit.METRE)

        assert len(metar.runway_visual_ranges) == 1
        assert metar.runway_visual_ranges[0].runway == "27L"

        assert len(metar.present_weather) == 1
        assert metar.present_weather[0].intensity == WeatherIntensity.LIGHT
        assert metar.present_weather[0].descriptors == [WeatherDescriptor.SHOWER]

        assert [layer.cover for layer in metar.clouds] == [CloudCover.FEW, CloudCover.BROKEN]
        assert metar.clouds[1].cloud_type == CloudType.CUMULONIMBUS
        assert metar.ceiling == Quantity(Value.exact(8000.0), Unit.FOOT)

        assert metar.pressure.pressure == Quantity(Value.exact(1015.0), Unit.HECTOPASCAL)
        assert metar.recent_weather[0].descriptors == [WeatherDescriptor.THUNDERSTORM]
        assert [w.runway for w in metar.wind_shears] == ["27L"]
        assert metar.sea.sea_state == SeaState.SLIGHT
        assert metar.unparsed_groups == []

    def test_calm_wind(self):
        metar = MetarParser.decode("LFPG 211230Z 00000KT 9999 20/10 Q1015")
        assert metar.wind.wind_speed == Quantity(Value.exact(0.0), Unit.KNOT)
        assert metar.wind.wind_from_direction is None

    def test_cavok(self):
        metar = MetarParser.decode("LFPG 211230Z 24005KT CAVOK 20/10 Q1015")
        assert metar.visibility.prevailing_visibility == Quantity(Value.above(10000), Unit.METRE)
        assert metar.clouds == [CloudLayer(cover=CloudCover.CEILING_OK)]
        assert metar.ceiling == Quantity(Value.unlimited(), Unit.FOOT)

    def test_kavok(self):
        metar = MetarParser.decode("ULLI 211230Z 24005MPS KAVOK M05/M08 Q1020")
        assert metar.visibility.prevailing_visibility == Quantity(Value.above(10000.0), Unit.METRE)
        assert metar.clouds == [CloudLayer(cover=CloudCover.CEILING_OK)]
        assert metar.ceiling == Quantity(Value.unlimited(), Unit.FOOT)
        assert isinstance(metar.to_dict()["prevailing_visibility"]["value"], float)

    def test_no_clouds_no_ceiling(self):
        metar = MetarParser.decode("LFPG 211230Z 24005KT 9999 20/10 Q1015")
        assert metar.clouds == []
        assert metar.ceiling is None

    def test_from_report_matches_decode(self, sample_report):
        assert Metar.from_report(sample_report) == decode_metar(sample_report)


class TestDecodeErrors:
    """Test fatal decoding errors."""

    def test_invalid_observation_hour(self):
        with pytest.raises(MetarDecodeError) as exc_info:
            MetarParser.decode("lfpg 212430z 24005kt")
        assert exc_info.value.report == "LFPG 212430Z 24005KT"
        assert "LFPG 212430Z 24005KT" in str(exc_info.value)

    def test_impossible_observation_day(self):
        with pytest.raises(MetarDecodeError, match="Date guessing failed"):
            MetarParser.decode("LFPG 321230Z 24005KT", datetime(2023, 5, 14))

    def test_impossible_day_without_anchor_is_kept(self):
        metar = MetarParser.decode("LFPG 321230Z 24005KT")
        assert metar.header.observation_time == MetarTime.from_day_time(32, time(12, 30))

    def test_invalid_trend_time(self):
        with pytest.raises(MetarDecodeError, match="Invalid time"):
            MetarParser.decode("LFPG 211230Z 24005KT 9999 BECMG FM2575 RA")


class TestUnparsedGroups:
    """Test skipping of unrecognized groups."""

    def test_unknown_groups_are_recorded(self):
        metar = MetarParser.decode("LFPG 211230Z 24005KT 9999 FOO BAR 20/10 Q1015")
        assert metar.unparsed_groups == ["FOO", "BAR"]
        assert metar.temperature.temperature == Quantity(Value.exact(20.0), Unit.DEGREE_CELSIUS)
        assert metar.pressure.pressure == Quantity(Value.exact(1015.0), Unit.HECTOPASCAL)

    def test_duplicate_singular_group(self):
        metar = MetarParser.decode("LFPG 211230Z 24005KT 9999 20/10 Q1015 Q1016")
        assert metar.pressure.pressure == Quantity(Value.exact(1015.0), Unit.HECTOPASCAL)
        assert metar.unparsed_groups == ["Q1016"]

    def test_slash_groups_are_not_recorded(self):
        metar = MetarParser.decode("LFPG 211230Z 24005KT 9999 / 20/10 Q1015")
        assert metar.unparsed_groups == []

    def test_empty_temperature_does_not_fill_slot(self):
        metar = MetarParser.decode("LFPG 211230Z 24005KT 9999 XX/XX 18/09 Q1015")
        assert metar.temperature.temperature == Quantity(Value.exact(18.0), Unit.DEGREE_CELSIUS)
        assert metar.temperature.dew_point == Quantity(Value.exact(9.0), Unit.DEGREE_CELSIUS)
        assert metar.unparsed_groups == []

    def test_later_empty_temperature_does_not_overwrite(self):
        metar = MetarParser.decode("LFPG 211230Z 24005KT 9999 18/09 XX/XX Q1015")
        assert metar.temperature.temperature == Quantity(Value.exact(18.0), Unit.DEGREE_CELSIUS)
        assert metar.temperature.dew_point == Quantity(Value.exact(9.0), Unit.DEGREE_CELSIUS)
        assert metar.pressure.pressure == Quantity(Value.exact(1015.0), Unit.HECTOPASCAL)

    def test_remarks_are_not_recorded(self):
        metar = MetarParser.decode("KXYZ 131951Z 18010KT 10SM FEW050 22/18 A3002 RMK AO2 SLP123 T02220183")
        assert metar.unparsed_groups == []
        assert metar.trend_changes == []

    def test_unparsed_logged_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger='metar_decoder.parsers.metar_parser'):
            MetarParser.decode("LFPG 211230Z 24005KT 9999 FOO")
        assert "Unparsed data: FOO" in caplog.text


class TestTrendSections:
    """Test the trend section state machine."""

    def test_nosig(self):
        metar = MetarParser.decode("LFPG 211230Z 24005KT CAVOK 20/10 Q1015 NOSIG")
        assert len(metar.trend_changes) == 1
        assert metar.trend_changes[0].indicator == Trend.NO_SIGNIFICANT_CHANGE

    def test_becoming_and_temporary(self, full_report):
        metar = MetarParser.decode(full_report)
        assert [c.indicator for c in metar.trend_changes] == [Trend.BECOMING, Trend.TEMPORARY]

        becoming, temporary = metar.trend_changes
        assert becoming.from_time == MetarTime.from_time(time(13, 0))
        assert becoming.until_time == MetarTime.from_time(time(14, 0))
        assert becoming.at_time is None
        assert becoming.wind.wind_speed == Quantity(Value.exact(20.0), Unit.KNOT)
        assert becoming.visibility.prevailing_visibility == Quantity(Value.exact(4000.0), Unit.METRE)
        assert becoming.present_weather[0].phenomena == [WeatherPhenomenon.RAIN]
        assert becoming.clouds[0].height == Quantity(Value.exact(1200.0), Unit.FOOT)

        assert temporary.visibility.prevailing_visibility == Quantity(Value.exact(3000.0), Unit.METRE)
        assert temporary.present_weather[0].descriptors == [WeatherDescriptor.THUNDERSTORM]

    def test_trend_groups_stay_out_of_main_section(self, full_report):
        metar = MetarParser.decode(full_report)
        assert metar.wind.wind_speed == Quantity(Value.exact(15.0), Unit.KNOT)
        assert len(metar.clouds) == 2
        assert len(metar.present_weather) == 1

    def test_trend_times_resolved_from_observation(self, full_report, anchor_time):
        metar = MetarParser.decode(full_report, anchor_time)
        assert metar.header.observation_time == MetarTime.from_datetime(datetime(2023, 5, 21, 12, 30))
        becoming = metar.trend_changes[0]
        assert becoming.from_time == MetarTime.from_datetime(datetime(2023, 5, 21, 13, 0))
        assert becoming.until_time == MetarTime.from_datetime(datetime(2023, 5, 21, 14, 0))

    def test_trend_time_past_midnight(self):
        metar = MetarParser.decode(
            "LFPG 212350Z 24005KT 9999 BECMG TL0100 3000 TEMPO AT2400 BR",
            datetime(2023, 5, 21, 23, 55),
        )
        assert metar.trend_changes[0].until_time.value == datetime(2023, 5, 22, 1, 0)
        assert metar.trend_changes[1].at_time.value == datetime(2023, 5, 22, 0, 0)

    def test_cavok_in_trend(self):
        metar = MetarParser.decode("LFPG 211230Z 24005KT 4000 BR BKN008 BECMG CAVOK")
        change = metar.trend_changes[0]
        assert change.visibility.prevailing_visibility == Quantity(Value.above(10000), Unit.METRE)
        assert change.clouds == [CloudLayer(cover=CloudCover.CEILING_OK)]
        assert metar.ceiling == Quantity(Value.exact(800.0), Unit.FOOT)

    def test_unknown_trend_group(self):
        metar = MetarParser.decode("LFPG 211230Z 24005KT 9999 TEMPO FOO RA")
        assert metar.unparsed_groups == ["FOO"]
        assert metar.trend_changes[0].present_weather[0].phenomena == [WeatherPhenomenon.RAIN]

    def test_trend_marker_inside_remarks_opens_trend(self):
        metar = MetarParser.decode("LFPG 211230Z 24005KT 9999 RMK AO2 TEMPO RA")
        assert [c.indicator for c in metar.trend_changes] == [Trend.TEMPORARY]
        assert metar.trend_changes[0].present_weather[0].phenomena == [WeatherPhenomenon.RAIN]
