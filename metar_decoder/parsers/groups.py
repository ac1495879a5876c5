"""
Group-level grammar of METAR reports.

Each parse_* classmethod recognizes one group family at a position of the
sanitized report. The sanitized report always ends with a single space, so
every group is followed by a separator. A successful match returns the
decoded record and the number of characters consumed, separator included;
otherwise None.
"""

import re
import logging
from datetime import datetime, time
from typing import Optional, Tuple, List, Dict

from metar_decoder.exceptions import MetarDecodeError
from metar_decoder.models.values import Unit, Value, Quantity
from metar_decoder.models.metar_time import MetarTime
from metar_decoder.models.metar import (
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
)

logger = logging.getLogger(__name__)

# Two-letter weather codes, used by both present and recent weather
_WEATHER_CODES = (
    r'VC|MI|BC|PR|DR|BL|SH|TS|FZ'
    r'|DZ|RA|SN|SG|PL|GR|GS|UP|BR|FG|FU|VA|DU|SA|HZ|PO|SQ|FC|SS|DS|IC|PY'
    r'|//'
)


def _weather_pattern(prefix: str) -> 're.Pattern':
    return re.compile(
        prefix
        + r'(?P<intensity>[-+])?'
        + r'(?P<codes>(' + _WEATHER_CODES + r')+|NSW)'
        + r'(?P<end>\s)'
    )


def _negated(text: str) -> str:
    """Temperatures use an M prefix for minus."""
    return text.replace('M', '-')


class GroupParser:
    """
    Stateless matchers for the METAR group families.

    Patterns are compiled once at import time and only read afterwards, so
    the parser can be shared freely.

    Example:
        wind, consumed = GroupParser.parse_wind("24015G25KT ")
        # wind.wind_speed == Quantity(Value.exact(15.0), Unit.KNOT)
        # consumed == 11
    """

    SECTION_PATTERN = re.compile(r'(?P<section>NOSIG|TEMPO|BECMG|RMK)(?P<end>\s)')

    HEADER_PATTERN = re.compile(
        r'((?P<report_type>METAR|SPECI)\s)?'
        r'(?P<station_id>[A-Z][A-Z0-9]{3})\s'
        r'(?P<day>\d\d)(?P<hour>\d\d)(?P<minute>\d\d)\d?Z?'  # stray digit after minutes
        r'(\s(?P<corrected>COR|CC[A-Z]))?'
        r'(\s(?P<auto>AUTO))?'
        r'(?P<end>\s)'
    )

    WIND_PATTERN = re.compile(
        r'E?(?P<direction>\d{3}|VRB|///)'
        r'(?P<speed>P?\d{2,3}|//)'
        r'(G(?P<gust>P?\d{2,3}|//))?'
        r'(?P<units>KT|MPS)'
        r'(\s(?P<direction_range>\d{3}V\d{3}))?'
        r'(?P<end>\s)'
    )

    VISIBILITY_PATTERN = re.compile(
        r'(?P<prevailing>[MP]?(\d+\s)?\d/\d{1,2}|[MP]?\d{1,4}|////|CAVOK|KAVOK)'
        r'(NDV)?'
        r'\s?'
        r'(?P<units>SM|KM)?'
        r'(\s(?P<minimum>[MP]?\d{1,4}))?'
        r'(?P<directional>(\s[MP]?\d{1,4}(NE|NW|SE|SW|N|E|S|W))+)?'
        r'(?P<end>\s)'
    )

    DIRECTIONAL_VISIBILITY_PATTERN = re.compile(
        r'(?P<visibility>[MP]?\d{1,4})(?P<direction>NE|NW|SE|SW|N|E|S|W)$'
    )

    RUNWAY_VISUAL_RANGE_PATTERN = re.compile(
        r'R(?P<runway>\d\d[LCR]?)'
        r'/'
        r'(?P<visual_range>[MP]?\d{4}(V[MP]?\d{4})?)'
        r'(?P<units>FT)?'
        r'/?'
        r'(?P<trend>[UDN])?'
        r'(?P<end>\s)'
    )

    PRESENT_WEATHER_PATTERN = _weather_pattern('')

    RECENT_WEATHER_PATTERN = _weather_pattern('RE')

    CLOUD_PATTERN = re.compile(
        r'(?P<cover>CLR|SKC|NSC|NCD|FEW|SCT|BKN|OVC|VV|///)'
        r'(?P<height>\d{2,3}|///)?'
        r'(?P<cloud>ACC|ACSL|AC|AS|CBMAM|CB|CCSL|CC|CI|CS|CU|NS|SCSL|SC|ST|TCU|///)?'
        r'(?P<end>\s)'
    )

    TEMPERATURE_PATTERN = re.compile(
        r'(?P<temperature>M?\d\d|//|XX)'
        r'/'
        r'(?P<dew_point>M?\d\d|//|XX)?'
        r'(?P<end>\s)'
    )

    PRESSURE_PATTERN = re.compile(
        r'(?P<units>A|Q)'
        r'(?P<pressure>\d{4}|////)'
        r'(?P<end>\s)'
    )

    WIND_SHEAR_PATTERN = re.compile(
        r'WS\s'
        r'(R(WY)?(?P<runway>\d\d[LCR]?)|(?P<all>ALL\sRWY))'
        r'(?P<end>\s)'
    )

    SEA_PATTERN = re.compile(
        r'W(?P<temperature>M?\d\d|//)'
        r'/(?=[SH])'
        r'(S(?P<state>\d|/))?'
        r'(H(?P<height>\d{1,3}|///))?'
        r'(?P<end>\s)'
    )

    TREND_TIME_PATTERN = re.compile(
        r'(?P<indicator>FM|TL|AT)'
        r'(?P<hour>\d\d)(?P<minute>\d\d)'
        r'(?P<end>\s)'
    )

    # Groups that are recognized but carry nothing we keep
    COLOR_PATTERN = re.compile(r'(BLACK|BLU\+?|GRN|WHT|RED|AMB|YLO[12]?)+(?P<end>\s)')

    RAINFALL_PATTERN = re.compile(r'RF\d\d\.\d/\d{3}\.\d(?P<end>\s)')

    RUNWAY_STATE_PATTERN = re.compile(
        r'(R\d\d[LCR]?/(\d{6}|[\d/]{6}|CLRD(\d\d|//))|R/SNOCLO|SNOCLO)(?P<end>\s)'
    )

    SECTIONS: Dict[str, Optional[Trend]] = {
        'NOSIG': Trend.NO_SIGNIFICANT_CHANGE,
        'TEMPO': Trend.TEMPORARY,
        'BECMG': Trend.BECOMING,
        'RMK': None,
    }

    DIRECTION_OCTANTS: Dict[str, DirectionOctant] = {
        'N': DirectionOctant.NORTH,
        'NE': DirectionOctant.NORTH_EAST,
        'E': DirectionOctant.EAST,
        'SE': DirectionOctant.SOUTH_EAST,
        'S': DirectionOctant.SOUTH,
        'SW': DirectionOctant.SOUTH_WEST,
        'W': DirectionOctant.WEST,
        'NW': DirectionOctant.NORTH_WEST,
    }

    RVR_TRENDS: Dict[str, RunwayVisualRangeTrend] = {
        'U': RunwayVisualRangeTrend.INCREASING,
        'D': RunwayVisualRangeTrend.DECREASING,
        'N': RunwayVisualRangeTrend.NO_CHANGE,
    }

    WEATHER_INTENSITIES: Dict[str, WeatherIntensity] = {
        '-': WeatherIntensity.LIGHT,
        '+': WeatherIntensity.HEAVY,
    }

    WEATHER_DESCRIPTORS: Dict[str, WeatherDescriptor] = {
        'MI': WeatherDescriptor.SHALLOW,
        'BC': WeatherDescriptor.PATCHES,
        'PR': WeatherDescriptor.PARTIAL,
        'DR': WeatherDescriptor.LOW_DRIFTING,
        'BL': WeatherDescriptor.BLOWING,
        'SH': WeatherDescriptor.SHOWER,
        'TS': WeatherDescriptor.THUNDERSTORM,
        'FZ': WeatherDescriptor.FREEZING,
    }

    WEATHER_PHENOMENA: Dict[str, WeatherPhenomenon] = {
        'DZ': WeatherPhenomenon.DRIZZLE,
        'RA': WeatherPhenomenon.RAIN,
        'SN': WeatherPhenomenon.SNOW,
        'SG': WeatherPhenomenon.SNOW_GRAINS,
        'PL': WeatherPhenomenon.ICE_PELLETS,
        'GR': WeatherPhenomenon.HAIL,
        'GS': WeatherPhenomenon.SNOW_PELLETS,
        'UP': WeatherPhenomenon.UNKNOWN_PRECIPITATION,
        'BR': WeatherPhenomenon.MIST,
        'FG': WeatherPhenomenon.FOG,
        'FU': WeatherPhenomenon.SMOKE,
        'VA': WeatherPhenomenon.VOLCANIC_ASH,
        'DU': WeatherPhenomenon.DUST,
        'SA': WeatherPhenomenon.SAND,
        'HZ': WeatherPhenomenon.HAZE,
        'PO': WeatherPhenomenon.DUST_WHIRLS,
        'SQ': WeatherPhenomenon.SQUALLS,
        'FC': WeatherPhenomenon.FUNNEL_CLOUD,
        'SS': WeatherPhenomenon.SANDSTORM,
        'DS': WeatherPhenomenon.DUSTSTORM,
        'IC': WeatherPhenomenon.ICE_CRYSTALS,
        'PY': WeatherPhenomenon.SPRAY,
    }

    CLOUD_COVERS: Dict[str, CloudCover] = {
        'CLR': CloudCover.CLEAR,
        'SKC': CloudCover.SKY_CLEAR,
        'NSC': CloudCover.NIL_SIGNIFICANT_CLOUD,
        'NCD': CloudCover.NO_CLOUD_DETECTED,
        'FEW': CloudCover.FEW,
        'SCT': CloudCover.SCATTERED,
        'BKN': CloudCover.BROKEN,
        'OVC': CloudCover.OVERCAST,
        'VV': CloudCover.VERTICAL_VISIBILITY,
    }

    CLOUD_TYPES: Dict[str, CloudType] = {
        'AC': CloudType.ALTOCUMULUS,
        'ACC': CloudType.ALTOCUMULUS_CASTELLANUS,
        'ACSL': CloudType.ALTOCUMULUS_LENTICULARIS,
        'AS': CloudType.ALTOSTRATUS,
        'CB': CloudType.CUMULONIMBUS,
        'CBMAM': CloudType.CUMULONIMBUS_MAMMATUS,
        'CC': CloudType.CIRROCUMULUS,
        'CCSL': CloudType.CIRROCUMULUS_LENTICULARIS,
        'CI': CloudType.CIRRUS,
        'CS': CloudType.CIRROSTRATUS,
        'CU': CloudType.CUMULUS,
        'NS': CloudType.NIMBOSTRATUS,
        'SC': CloudType.STRATOCUMULUS,
        'SCSL': CloudType.STRATOCUMULUS_LENTICULARIS,
        'ST': CloudType.STRATUS,
        'TCU': CloudType.TOWERING_CUMULUS,
    }

    # WMO code table 3700, indexed by the reported digit
    SEA_STATES: List[SeaState] = list(SeaState)

    # --- Section markers ---

    @classmethod
    def parse_section(cls, text: str, pos: int = 0) -> Optional[Tuple[Optional[Trend], int]]:
        """
        Recognize a section marker.

        Returns:
            (Trend, consumed) for NOSIG/TEMPO/BECMG, (None, consumed) for RMK,
            or None if there is no marker at pos
        """
        match = cls.SECTION_PATTERN.match(text, pos)
        if not match:
            return None
        return cls.SECTIONS[match.group('section')], match.end('end') - pos

    # --- Main section groups ---

    @classmethod
    def parse_header(
        cls,
        text: str,
        pos: int = 0,
        anchor_time: Optional[datetime] = None,
    ) -> Optional[Tuple[Header, int]]:
        """
        Parse the station and observation time header, e.g. "LFPG 211230Z".

        Args:
            text: Sanitized report
            pos: Position of the group
            anchor_time: If given, the observation day is resolved to a full
                datetime nearest to it

        Raises:
            MetarDecodeError: If hour or minute is out of range, or the day
                cannot be resolved against the anchor
        """
        match = cls.HEADER_PATTERN.match(text, pos)
        if not match:
            return None

        day = int(match.group('day'))
        observation_time = MetarTime.from_day_time(
            day, cls._time_of_day(match.group('hour'), match.group('minute'))
        )
        if anchor_time is not None:
            observation_time = observation_time.to_date_time(anchor_time)

        report_type = match.group('report_type')
        header = Header(
            station_id=match.group('station_id'),
            observation_time=observation_time,
            is_corrected=match.group('corrected') is not None,
            is_automated=match.group('auto') is not None,
            report_type=ReportType(report_type.lower()) if report_type else None,
        )
        return header, match.end('end') - pos

    @classmethod
    def parse_wind(cls, text: str, pos: int = 0) -> Optional[Tuple[Wind, int]]:
        """
        Parse a wind group, e.g. "24015G25KT 200V280".

        Unknown parts ("///", "//") are left out. Calm wind ("00000KT") has no
        direction.
        """
        match = cls.WIND_PATTERN.match(text, pos)
        if not match:
            return None

        direction = cls._optional_value(match.group('direction'))
        speed = cls._optional_value(match.group('speed'))
        gust = cls._optional_value(match.group('gust'))

        if match.group('direction') == '000' and speed == Value.exact(0):
            direction = None

        direction_range = None
        if match.group('direction_range'):
            direction_range = Value.parse(match.group('direction_range'))

        units = Unit.parse(match.group('units'))

        wind = Wind(
            wind_from_direction=Quantity.optional(direction, Unit.DEGREE_TRUE),
            wind_from_direction_range=Quantity.optional(direction_range, Unit.DEGREE_TRUE),
            wind_speed=Quantity.optional(speed, units),
            wind_gust=Quantity.optional(gust, units),
        )
        return wind, match.end('end') - pos

    @classmethod
    def parse_visibility(cls, text: str, pos: int = 0) -> Optional[Tuple[Visibility, bool, int]]:
        """
        Parse a visibility group, e.g. "1 1/2SM", "9999", "4000 1500 2000NE".

        Returns:
            (Visibility, is_cavok, consumed) or None
        """
        match = cls.VISIBILITY_PATTERN.match(text, pos)
        if not match:
            return None

        units = Unit.parse(match.group('units')) if match.group('units') else Unit.METRE

        prevailing_text = match.group('prevailing')
        is_cavok = prevailing_text in ('CAVOK', 'KAVOK')
        if is_cavok:
            units = Unit.METRE
            prevailing = Value.above(10000.0)
        elif prevailing_text == '////':
            prevailing = None
        else:
            prevailing = Value.parse(prevailing_text)

        # 9999 m means 10 km or more
        if prevailing == Value.exact(9999) and units == Unit.METRE:
            prevailing = Value.above(10000.0)

        minimum = None
        if match.group('minimum'):
            minimum = Value.parse(match.group('minimum'))

        directional = []
        if match.group('directional'):
            for group in match.group('directional').split():
                group_match = cls.DIRECTIONAL_VISIBILITY_PATTERN.match(group)
                if group_match:
                    directional.append(DirectionalVisibility(
                        visibility=Quantity(Value.parse(group_match.group('visibility')), units),
                        direction=cls.DIRECTION_OCTANTS[group_match.group('direction')],
                    ))

        visibility = Visibility(
            prevailing_visibility=Quantity.optional(prevailing, units),
            minimum_visibility=Quantity.optional(minimum, units),
            directional_visibilities=directional,
        )
        return visibility, is_cavok, match.end('end') - pos

    @classmethod
    def parse_runway_visual_range(cls, text: str, pos: int = 0) -> Optional[Tuple[RunwayVisualRange, int]]:
        """Parse a runway visual range group, e.g. "R27L/M0600V1000FT/U"."""
        match = cls.RUNWAY_VISUAL_RANGE_PATTERN.match(text, pos)
        if not match:
            return None

        units = Unit.parse(match.group('units')) if match.group('units') else Unit.METRE
        trend = match.group('trend')

        rvr = RunwayVisualRange(
            runway=match.group('runway'),
            visual_range=Quantity(Value.parse(match.group('visual_range')), units),
            trend=cls.RVR_TRENDS[trend] if trend else None,
        )
        return rvr, match.end('end') - pos

    @classmethod
    def parse_present_weather(cls, text: str, pos: int = 0) -> Optional[Tuple[WeatherCondition, int]]:
        """Parse a present weather group, e.g. "-SHRA", "VCTS", "NSW"."""
        return cls._parse_weather(cls.PRESENT_WEATHER_PATTERN, text, pos)

    @classmethod
    def parse_recent_weather(cls, text: str, pos: int = 0) -> Optional[Tuple[WeatherCondition, int]]:
        """Parse a recent weather group, e.g. "RETSRA"."""
        return cls._parse_weather(cls.RECENT_WEATHER_PATTERN, text, pos)

    @classmethod
    def parse_cloud_layer(cls, text: str, pos: int = 0) -> Optional[Tuple[CloudLayer, int]]:
        """
        Parse a cloud group, e.g. "BKN035CB".

        Height is reported in hundreds of feet. The returned layer may be
        empty ("//////"); callers drop empty layers.
        """
        match = cls.CLOUD_PATTERN.match(text, pos)
        if not match:
            return None

        cover = match.group('cover')
        height = match.group('height')
        cloud_type = match.group('cloud')

        layer = CloudLayer(
            cover=cls.CLOUD_COVERS[cover] if cover != '///' else None,
            height=Quantity.optional(
                Value.parse(height) * 100 if height and height != '///' else None,
                Unit.FOOT,
            ),
            cloud_type=cls.CLOUD_TYPES[cloud_type] if cloud_type and cloud_type != '///' else None,
        )
        return layer, match.end('end') - pos

    @classmethod
    def parse_temperature(cls, text: str, pos: int = 0) -> Optional[Tuple[Temperature, int]]:
        """Parse a temperature/dew point group, e.g. "M02/M05"."""
        match = cls.TEMPERATURE_PATTERN.match(text, pos)
        if not match:
            return None

        temperature = Temperature(
            temperature=Quantity.optional(
                cls._optional_temperature(match.group('temperature')), Unit.DEGREE_CELSIUS
            ),
            dew_point=Quantity.optional(
                cls._optional_temperature(match.group('dew_point')), Unit.DEGREE_CELSIUS
            ),
        )
        return temperature, match.end('end') - pos

    @classmethod
    def parse_pressure(cls, text: str, pos: int = 0) -> Optional[Tuple[Pressure, int]]:
        """Parse a pressure group: "Q1013" (hPa) or "A2992" (inHg)."""
        match = cls.PRESSURE_PATTERN.match(text, pos)
        if not match:
            return None

        units = Unit.parse(match.group('units'))
        value = cls._optional_value(match.group('pressure'))
        if value is not None and units == Unit.INCH_OF_MERCURY:
            value = value / 100

        return Pressure(pressure=Quantity.optional(value, units)), match.end('end') - pos

    @classmethod
    def parse_wind_shear(cls, text: str, pos: int = 0) -> Optional[Tuple[WindShear, int]]:
        """Parse a wind shear group: "WS R27", "WS RWY27" or "WS ALL RWY"."""
        match = cls.WIND_SHEAR_PATTERN.match(text, pos)
        if not match:
            return None

        runway = 'all' if match.group('all') else match.group('runway')
        return WindShear(runway=runway), match.end('end') - pos

    @classmethod
    def parse_sea(cls, text: str, pos: int = 0) -> Optional[Tuple[Sea, int]]:
        """
        Parse a sea group, e.g. "W15/S3" or "W12/H75".

        Wave height is reported in decimetres.
        """
        match = cls.SEA_PATTERN.match(text, pos)
        if not match:
            return None

        state = match.group('state')
        height = cls._optional_value(match.group('height'))

        sea = Sea(
            sea_temperature=Quantity.optional(
                cls._optional_temperature(match.group('temperature')), Unit.DEGREE_CELSIUS
            ),
            sea_state=cls.SEA_STATES[int(state)] if state and state != '/' else None,
            wave_height=Quantity.optional(height / 10 if height is not None else None, Unit.METRE),
        )
        return sea, match.end('end') - pos

    @classmethod
    def parse_discarded(cls, text: str, pos: int = 0) -> Optional[int]:
        """
        Recognize colour state, rainfall and runway state groups.

        These are consumed so the scan keeps going, but nothing is decoded.

        Returns:
            Number of characters consumed, or None
        """
        for pattern in (cls.COLOR_PATTERN, cls.RAINFALL_PATTERN, cls.RUNWAY_STATE_PATTERN):
            match = pattern.match(text, pos)
            if match:
                return match.end('end') - pos
        return None

    # --- Trend section groups ---

    @classmethod
    def parse_trend_time(cls, text: str, pos: int = 0) -> Optional[Tuple[str, MetarTime, int]]:
        """
        Parse a trend time group, e.g. "FM1030", "TL2400".

        Hour 24 is read as midnight.

        Returns:
            (indicator, time, consumed) where indicator is "FM", "TL" or "AT"

        Raises:
            MetarDecodeError: If the time is out of range
        """
        match = cls.TREND_TIME_PATTERN.match(text, pos)
        if not match:
            return None

        hour = match.group('hour')
        if hour == '24':
            hour = '00'

        trend_time = MetarTime.from_time(cls._time_of_day(hour, match.group('minute')))
        return match.group('indicator'), trend_time, match.end('end') - pos

    # --- Helpers ---

    @classmethod
    def _parse_weather(cls, pattern, text: str, pos: int) -> Optional[Tuple[WeatherCondition, int]]:
        match = pattern.match(text, pos)
        if not match:
            return None

        intensity = match.group('intensity')
        codes = match.group('codes')

        weather = WeatherCondition(
            intensity=cls.WEATHER_INTENSITIES[intensity] if intensity else WeatherIntensity.MODERATE,
        )

        if codes == 'NSW':
            weather.phenomena.append(WeatherPhenomenon.NIL_SIGNIFICANT_WEATHER)
        else:
            for i in range(0, len(codes), 2):
                code = codes[i:i + 2]
                if code == 'VC':
                    weather.is_in_vicinity = True
                elif code in cls.WEATHER_DESCRIPTORS:
                    weather.descriptors.append(cls.WEATHER_DESCRIPTORS[code])
                elif code in cls.WEATHER_PHENOMENA:
                    weather.phenomena.append(cls.WEATHER_PHENOMENA[code])
                else:
                    logger.debug(f"Ignoring weather code {code}")

        return weather, match.end('end') - pos

    @staticmethod
    def _time_of_day(hour: str, minute: str) -> time:
        try:
            return time(int(hour), int(minute))
        except ValueError:
            raise MetarDecodeError(f"Invalid time, given {hour}:{minute}") from None

    @staticmethod
    def _optional_value(text: Optional[str]) -> Optional[Value]:
        """Parse a value; missing or all-slash text means not reported."""
        if not text or set(text) == {'/'}:
            return None
        return Value.parse(text)

    @staticmethod
    def _optional_temperature(text: Optional[str]) -> Optional[Value]:
        if not text or text in ('//', 'XX'):
            return None
        return Value.parse(_negated(text))
