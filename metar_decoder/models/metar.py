"""Decoded METAR report data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from metar_decoder.models.values import Quantity
from metar_decoder.models.metar_time import MetarTime


class ReportType(Enum):
    """Type prefix of the report, when present."""

    METAR = "metar"
    SPECI = "speci"


class Trend(Enum):
    """Trend forecast indicator."""

    NO_SIGNIFICANT_CHANGE = "no_significant_change"
    TEMPORARY = "temporary"
    BECOMING = "becoming"


class DirectionOctant(Enum):
    NORTH = "north"
    NORTH_EAST = "north_east"
    EAST = "east"
    SOUTH_EAST = "south_east"
    SOUTH = "south"
    SOUTH_WEST = "south_west"
    WEST = "west"
    NORTH_WEST = "north_west"


class RunwayVisualRangeTrend(Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    NO_CHANGE = "no_change"


class WeatherIntensity(Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


class WeatherDescriptor(Enum):
    SHALLOW = "shallow"
    PATCHES = "patches"
    PARTIAL = "partial"
    LOW_DRIFTING = "low_drifting"
    BLOWING = "blowing"
    SHOWER = "shower"
    THUNDERSTORM = "thunderstorm"
    FREEZING = "freezing"


class WeatherPhenomenon(Enum):
    DRIZZLE = "drizzle"
    RAIN = "rain"
    SNOW = "snow"
    SNOW_GRAINS = "snow_grains"
    ICE_PELLETS = "ice_pellets"
    HAIL = "hail"
    SNOW_PELLETS = "snow_pellets"
    UNKNOWN_PRECIPITATION = "unknown_precipitation"
    MIST = "mist"
    FOG = "fog"
    SMOKE = "smoke"
    VOLCANIC_ASH = "volcanic_ash"
    DUST = "dust"
    SAND = "sand"
    HAZE = "haze"
    DUST_WHIRLS = "dust_whirls"
    SQUALLS = "squalls"
    FUNNEL_CLOUD = "funnel_cloud"
    SANDSTORM = "sandstorm"
    DUSTSTORM = "duststorm"
    ICE_CRYSTALS = "ice_crystals"
    SPRAY = "spray"
    NIL_SIGNIFICANT_WEATHER = "nil_significant_weather"


class CloudCover(Enum):
    CLEAR = "clear"
    SKY_CLEAR = "sky_clear"
    NIL_SIGNIFICANT_CLOUD = "nil_significant_cloud"
    NO_CLOUD_DETECTED = "no_cloud_detected"
    FEW = "few"
    SCATTERED = "scattered"
    BROKEN = "broken"
    OVERCAST = "overcast"
    VERTICAL_VISIBILITY = "vertical_visibility"
    CEILING_OK = "ceiling_ok"


class CloudType(Enum):
    ALTOCUMULUS = "altocumulus"
    ALTOCUMULUS_CASTELLANUS = "altocumulus_castellanus"
    ALTOCUMULUS_LENTICULARIS = "altocumulus_lenticularis"
    ALTOSTRATUS = "altostratus"
    CUMULONIMBUS = "cumulonimbus"
    CUMULONIMBUS_MAMMATUS = "cumulonimbus_mammatus"
    CIRROCUMULUS = "cirrocumulus"
    CIRROCUMULUS_LENTICULARIS = "cirrocumulus_lenticularis"
    CIRRUS = "cirrus"
    CIRROSTRATUS = "cirrostratus"
    CUMULUS = "cumulus"
    NIMBOSTRATUS = "nimbostratus"
    STRATOCUMULUS = "stratocumulus"
    STRATOCUMULUS_LENTICULARIS = "stratocumulus_lenticularis"
    STRATUS = "stratus"
    TOWERING_CUMULUS = "towering_cumulus"


class SeaState(Enum):
    """State of the sea surface, WMO code table 3700."""

    CALM_GLASSY = "calm_glassy"
    CALM_RIPPLED = "calm_rippled"
    SMOOTH = "smooth"
    SLIGHT = "slight"
    MODERATE = "moderate"
    ROUGH = "rough"
    VERY_ROUGH = "very_rough"
    HIGH = "high"
    VERY_HIGH = "very_high"
    PHENOMENAL = "phenomenal"


def _enum_value(item: Optional[Enum]) -> Optional[str]:
    return item.value if item is not None else None


def _quantity_dict(quantity: Optional[Quantity]) -> Optional[dict]:
    return quantity.to_dict() if quantity is not None else None


def _time_dict(metar_time: Optional[MetarTime]) -> Optional[dict]:
    return metar_time.to_dict() if metar_time is not None else None


def _time_from_dict(data: Optional[dict]) -> Optional[MetarTime]:
    return MetarTime.from_dict(data) if data is not None else None


@dataclass
class Header:
    station_id: Optional[str] = None
    observation_time: Optional[MetarTime] = None
    is_corrected: Optional[bool] = None
    is_automated: Optional[bool] = None
    report_type: Optional[ReportType] = None

    def is_empty(self) -> bool:
        return self.station_id is None and self.observation_time is None

    def to_dict(self) -> dict:
        return {
            'station_id': self.station_id,
            'observation_time': _time_dict(self.observation_time),
            'is_corrected': self.is_corrected,
            'is_automated': self.is_automated,
            'report_type': _enum_value(self.report_type),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Header':
        report_type = data.get('report_type')
        return cls(
            station_id=data.get('station_id'),
            observation_time=_time_from_dict(data.get('observation_time')),
            is_corrected=data.get('is_corrected'),
            is_automated=data.get('is_automated'),
            report_type=ReportType(report_type) if report_type else None,
        )


@dataclass
class Wind:
    """Surface wind. Calm wind has a speed but no direction."""

    wind_from_direction: Optional[Quantity] = None
    wind_from_direction_range: Optional[Quantity] = None
    wind_speed: Optional[Quantity] = None
    wind_gust: Optional[Quantity] = None

    def is_empty(self) -> bool:
        return (
            self.wind_from_direction is None
            and self.wind_from_direction_range is None
            and self.wind_speed is None
            and self.wind_gust is None
        )

    def to_dict(self) -> dict:
        return {
            'wind_from_direction': _quantity_dict(self.wind_from_direction),
            'wind_from_direction_range': _quantity_dict(self.wind_from_direction_range),
            'wind_speed': _quantity_dict(self.wind_speed),
            'wind_gust': _quantity_dict(self.wind_gust),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Wind':
        return cls(
            wind_from_direction=Quantity.from_dict(data.get('wind_from_direction')),
            wind_from_direction_range=Quantity.from_dict(data.get('wind_from_direction_range')),
            wind_speed=Quantity.from_dict(data.get('wind_speed')),
            wind_gust=Quantity.from_dict(data.get('wind_gust')),
        )


@dataclass
class DirectionalVisibility:
    visibility: Quantity
    direction: DirectionOctant

    def to_dict(self) -> dict:
        return {
            'visibility': self.visibility.to_dict(),
            'direction': self.direction.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'DirectionalVisibility':
        return cls(
            visibility=Quantity.from_dict(data['visibility']),
            direction=DirectionOctant(data['direction']),
        )


@dataclass
class Visibility:
    prevailing_visibility: Optional[Quantity] = None
    minimum_visibility: Optional[Quantity] = None
    directional_visibilities: List[DirectionalVisibility] = field(default_factory=list)

    def is_empty(self) -> bool:
        return (
            self.prevailing_visibility is None
            and self.minimum_visibility is None
            and not self.directional_visibilities
        )

    def to_dict(self) -> dict:
        return {
            'prevailing_visibility': _quantity_dict(self.prevailing_visibility),
            'minimum_visibility': _quantity_dict(self.minimum_visibility),
            'directional_visibilities': [d.to_dict() for d in self.directional_visibilities],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Visibility':
        return cls(
            prevailing_visibility=Quantity.from_dict(data.get('prevailing_visibility')),
            minimum_visibility=Quantity.from_dict(data.get('minimum_visibility')),
            directional_visibilities=[
                DirectionalVisibility.from_dict(d) for d in data.get('directional_visibilities', [])
            ],
        )


@dataclass
class RunwayVisualRange:
    runway: str
    visual_range: Quantity
    trend: Optional[RunwayVisualRangeTrend] = None

    def to_dict(self) -> dict:
        return {
            'runway': self.runway,
            'visual_range': self.visual_range.to_dict(),
            'trend': _enum_value(self.trend),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'RunwayVisualRange':
        trend = data.get('trend')
        return cls(
            runway=data['runway'],
            visual_range=Quantity.from_dict(data['visual_range']),
            trend=RunwayVisualRangeTrend(trend) if trend else None,
        )


@dataclass
class WeatherCondition:
    """Present or recent weather, e.g. "-SHRA" or "VCTS"."""

    intensity: WeatherIntensity = WeatherIntensity.MODERATE
    is_in_vicinity: bool = False
    descriptors: List[WeatherDescriptor] = field(default_factory=list)
    phenomena: List[WeatherPhenomenon] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.is_in_vicinity and not self.descriptors and not self.phenomena

    def to_dict(self) -> dict:
        return {
            'intensity': self.intensity.value,
            'is_in_vicinity': self.is_in_vicinity,
            'descriptors': [d.value for d in self.descriptors],
            'phenomena': [p.value for p in self.phenomena],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WeatherCondition':
        return cls(
            intensity=WeatherIntensity(data.get('intensity', 'moderate')),
            is_in_vicinity=data.get('is_in_vicinity', False),
            descriptors=[WeatherDescriptor(d) for d in data.get('descriptors', [])],
            phenomena=[WeatherPhenomenon(p) for p in data.get('phenomena', [])],
        )


@dataclass
class CloudLayer:
    cover: Optional[CloudCover] = None
    # height above ground level
    height: Optional[Quantity] = None
    cloud_type: Optional[CloudType] = None

    def is_empty(self) -> bool:
        return self.cover is None and self.height is None and self.cloud_type is None

    def to_dict(self) -> dict:
        return {
            'cover': _enum_value(self.cover),
            'height': _quantity_dict(self.height),
            'cloud_type': _enum_value(self.cloud_type),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CloudLayer':
        cover = data.get('cover')
        cloud_type = data.get('cloud_type')
        return cls(
            cover=CloudCover(cover) if cover else None,
            height=Quantity.from_dict(data.get('height')),
            cloud_type=CloudType(cloud_type) if cloud_type else None,
        )


@dataclass
class Temperature:
    temperature: Optional[Quantity] = None
    dew_point: Optional[Quantity] = None

    def is_empty(self) -> bool:
        return self.temperature is None and self.dew_point is None

    def to_dict(self) -> dict:
        return {
            'temperature': _quantity_dict(self.temperature),
            'dew_point': _quantity_dict(self.dew_point),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Temperature':
        return cls(
            temperature=Quantity.from_dict(data.get('temperature')),
            dew_point=Quantity.from_dict(data.get('dew_point')),
        )


@dataclass
class Pressure:
    pressure: Optional[Quantity] = None

    def is_empty(self) -> bool:
        return self.pressure is None

    def to_dict(self) -> dict:
        return {'pressure': _quantity_dict(self.pressure)}

    @classmethod
    def from_dict(cls, data: dict) -> 'Pressure':
        return cls(pressure=Quantity.from_dict(data.get('pressure')))


@dataclass
class WindShear:
    """Wind shear on a runway; runway is "all" for WS ALL RWY."""

    runway: str

    def to_dict(self) -> dict:
        return {'runway': self.runway}

    @classmethod
    def from_dict(cls, data: dict) -> 'WindShear':
        return cls(runway=data['runway'])


@dataclass
class Sea:
    sea_temperature: Optional[Quantity] = None
    sea_state: Optional[SeaState] = None
    wave_height: Optional[Quantity] = None

    def is_empty(self) -> bool:
        return self.sea_temperature is None and self.sea_state is None and self.wave_height is None

    def to_dict(self) -> dict:
        return {
            'sea_temperature': _quantity_dict(self.sea_temperature),
            'sea_state': _enum_value(self.sea_state),
            'wave_height': _quantity_dict(self.wave_height),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Sea':
        sea_state = data.get('sea_state')
        return cls(
            sea_temperature=Quantity.from_dict(data.get('sea_temperature')),
            sea_state=SeaState(sea_state) if sea_state else None,
            wave_height=Quantity.from_dict(data.get('wave_height')),
        )


@dataclass
class TrendChange:
    """
    One trend forecast section (NOSIG, TEMPO or BECMG).

    Wind and visibility are flattened into the serialized form, the same way
    as in Metar.
    """

    indicator: Trend
    from_time: Optional[MetarTime] = None
    until_time: Optional[MetarTime] = None
    at_time: Optional[MetarTime] = None
    wind: Wind = field(default_factory=Wind)
    visibility: Visibility = field(default_factory=Visibility)
    present_weather: List[WeatherCondition] = field(default_factory=list)
    clouds: List[CloudLayer] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {
            'indicator': self.indicator.value,
            'from_time': _time_dict(self.from_time),
            'until_time': _time_dict(self.until_time),
            'at_time': _time_dict(self.at_time),
        }
        data.update(self.wind.to_dict())
        data.update(self.visibility.to_dict())
        data['present_weather'] = [w.to_dict() for w in self.present_weather]
        data['clouds'] = [c.to_dict() for c in self.clouds]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'TrendChange':
        return cls(
            indicator=Trend(data['indicator']),
            from_time=_time_from_dict(data.get('from_time')),
            until_time=_time_from_dict(data.get('until_time')),
            at_time=_time_from_dict(data.get('at_time')),
            wind=Wind.from_dict(data),
            visibility=Visibility.from_dict(data),
            present_weather=[WeatherCondition.from_dict(w) for w in data.get('present_weather', [])],
            clouds=[CloudLayer.from_dict(c) for c in data.get('clouds', [])],
        )


@dataclass
class Metar:
    """
    Decoded METAR or SPECI report.

    Header, wind, visibility, temperature, pressure and sea are flattened
    into the top level of the serialized form.

    Attributes:
        header: Station, observation time and report flags
        wind: Surface wind
        visibility: Prevailing, minimum and directional visibility
        runway_visual_ranges: RVR groups in report order
        present_weather: Present weather groups
        clouds: Cloud layers, including the CAVOK marker layer
        ceiling: Derived ceiling (see WeatherAnalyzer.ceiling)
        temperature: Air temperature and dew point
        pressure: Altimeter setting or QNH
        recent_weather: Recent weather (RE) groups
        wind_shears: Wind shear groups
        sea: Sea surface temperature and state
        trend_changes: Trend forecast sections
        report: Sanitized report text
        unparsed_groups: Groups that no rule recognized (diagnostic only,
            not serialized and not compared)
    """

    header: Header = field(default_factory=Header)
    wind: Wind = field(default_factory=Wind)
    visibility: Visibility = field(default_factory=Visibility)
    runway_visual_ranges: List[RunwayVisualRange] = field(default_factory=list)
    present_weather: List[WeatherCondition] = field(default_factory=list)
    clouds: List[CloudLayer] = field(default_factory=list)
    ceiling: Optional[Quantity] = None
    temperature: Temperature = field(default_factory=Temperature)
    pressure: Pressure = field(default_factory=Pressure)
    recent_weather: List[WeatherCondition] = field(default_factory=list)
    wind_shears: List[WindShear] = field(default_factory=list)
    sea: Sea = field(default_factory=Sea)
    trend_changes: List[TrendChange] = field(default_factory=list)
    report: str = ""
    unparsed_groups: List[str] = field(default_factory=list, compare=False, repr=False)

    @classmethod
    def from_report(cls, report: str, anchor_time: Optional[datetime] = None) -> 'Metar':
        """
        Decode a report into a Metar.

        Args:
            report: Raw single-line report text
            anchor_time: Optional datetime used to resolve the observation day

        Returns:
            Decoded Metar

        Raises:
            MetarDecodeError: If the report cannot be decoded
        """
        from metar_decoder.parsers.metar_parser import MetarParser
        return MetarParser.decode(report, anchor_time)

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON export."""
        data: Dict[str, Any] = {}
        data.update(self.header.to_dict())
        data.update(self.wind.to_dict())
        data.update(self.visibility.to_dict())
        data['runway_visual_ranges'] = [r.to_dict() for r in self.runway_visual_ranges]
        data['present_weather'] = [w.to_dict() for w in self.present_weather]
        data['clouds'] = [c.to_dict() for c in self.clouds]
        data['ceiling'] = _quantity_dict(self.ceiling)
        data.update(self.temperature.to_dict())
        data.update(self.pressure.to_dict())
        data['recent_weather'] = [w.to_dict() for w in self.recent_weather]
        data['wind_shears'] = [w.to_dict() for w in self.wind_shears]
        data.update(self.sea.to_dict())
        data['trend_changes'] = [t.to_dict() for t in self.trend_changes]
        data['report'] = self.report
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Metar':
        """Create Metar from dictionary."""
        return cls(
            header=Header.from_dict(data),
            wind=Wind.from_dict(data),
            visibility=Visibility.from_dict(data),
            runway_visual_ranges=[RunwayVisualRange.from_dict(r) for r in data.get('runway_visual_ranges', [])],
            present_weather=[WeatherCondition.from_dict(w) for w in data.get('present_weather', [])],
            clouds=[CloudLayer.from_dict(c) for c in data.get('clouds', [])],
            ceiling=Quantity.from_dict(data.get('ceiling')),
            temperature=Temperature.from_dict(data),
            pressure=Pressure.from_dict(data),
            recent_weather=[WeatherCondition.from_dict(w) for w in data.get('recent_weather', [])],
            wind_shears=[WindShear.from_dict(w) for w in data.get('wind_shears', [])],
            sea=Sea.from_dict(data),
            trend_changes=[TrendChange.from_dict(t) for t in data.get('trend_changes', [])],
            report=data.get('report', ''),
        )

    def __repr__(self) -> str:
        station = self.header.station_id or "?"
        return f"Metar({station} {self.report!r})"
