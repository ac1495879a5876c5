"""Physical quantities decoded from METAR groups."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union, Dict, Any

from metar_decoder.exceptions import MetarDecodeError

_NUMBER_RE = re.compile(r'^-?\d+(\.\d+)?$')


class Unit(Enum):
    """Units of measurement, valued by their serialized symbol."""

    DEGREE_TRUE = "degT"
    KNOT = "kt"
    METRE_PER_SECOND = "m/s"
    KILOMETRE = "km"
    METRE = "m"
    STATUTE_MILE = "mi"
    FOOT = "ft"
    DEGREE_CELSIUS = "degC"
    HECTOPASCAL = "hPa"
    INCH_OF_MERCURY = "inHg"

    @classmethod
    def parse(cls, token: str) -> 'Unit':
        """
        Parse a unit token as written in a report.

        Args:
            token: Report token such as "KT", "SM" or "Q"

        Returns:
            Matching Unit

        Raises:
            MetarDecodeError: If the token is not a known unit
        """
        try:
            return _UNIT_TOKENS[token]
        except KeyError:
            raise MetarDecodeError(f"Invalid units, given {token}") from None


_UNIT_TOKENS = {
    'KT': Unit.KNOT,
    'MPS': Unit.METRE_PER_SECOND,
    'KM': Unit.KILOMETRE,
    'SM': Unit.STATUTE_MILE,
    'FT': Unit.FOOT,
    'Q': Unit.HECTOPASCAL,
    'A': Unit.INCH_OF_MERCURY,
}


class ValueType(Enum):
    """Kind of a decoded value."""

    VARIABLE = "variable"
    ABOVE = "above"
    BELOW = "below"
    RANGE = "range"
    EXACT = "exact"
    UNLIMITED = "unlimited"
    INDEFINITE = "indefinite"


_BOUND_TYPES = (ValueType.ABOVE, ValueType.BELOW, ValueType.EXACT)


def parse_number(text: str) -> float:
    """
    Parse a plain, fractional ("1/2") or mixed ("1 1/2") number.

    Raises:
        MetarDecodeError: If the text is not a number
    """
    if ' ' in text and '/' in text:
        whole, fraction = text.split(' ', 1)
        return parse_number(whole) + _parse_fraction(fraction)
    if '/' in text:
        return _parse_fraction(text)
    if not _NUMBER_RE.match(text):
        raise MetarDecodeError(f"Invalid number, given {text!r}")
    return float(text)


def _parse_fraction(text: str) -> float:
    parts = text.split('/')
    if len(parts) != 2 or not all(_NUMBER_RE.match(p) for p in parts):
        raise MetarDecodeError(f"Invalid fraction, given {text!r}")
    denominator = float(parts[1])
    if denominator == 0:
        raise MetarDecodeError(f"Zero denominator, given {text!r}")
    return float(parts[0]) / denominator


@dataclass(frozen=True)
class ValueInRange:
    """
    One endpoint of a range value.

    Only the above, below and exact kinds are allowed.
    """

    value_type: ValueType
    value: float

    def __post_init__(self):
        if self.value_type not in _BOUND_TYPES:
            raise ValueError(f"Invalid range endpoint type: {self.value_type}")

    @classmethod
    def parse(cls, text: str) -> 'ValueInRange':
        """Parse "P<n>", "M<n>" or "<n>"."""
        if text.startswith('P'):
            return cls(ValueType.ABOVE, parse_number(text[1:]))
        if text.startswith('M'):
            return cls(ValueType.BELOW, parse_number(text[1:]))
        return cls(ValueType.EXACT, parse_number(text))

    def __mul__(self, factor: float) -> 'ValueInRange':
        return ValueInRange(self.value_type, self.value * factor)

    def __truediv__(self, divisor: float) -> 'ValueInRange':
        return ValueInRange(self.value_type, self.value / divisor)

    def to_dict(self) -> dict:
        return {'value_type': self.value_type.value, 'value': self.value}

    @classmethod
    def from_dict(cls, data: dict) -> 'ValueInRange':
        return cls(ValueType(data['value_type']), float(data['value']))


RangePayload = Tuple[ValueInRange, ValueInRange]


@dataclass(frozen=True)
class Value:
    """
    A measured value.

    The payload depends on the kind:
        variable, unlimited, indefinite: None
        above, below, exact: float
        range: pair of ValueInRange

    Example:
        Value.parse("P6")        # Value(ABOVE, 6.0)
        Value.parse("200V280")   # Value(RANGE, (EXACT 200.0, EXACT 280.0))
        Value.parse("1 1/2")     # Value(EXACT, 1.5)
    """

    value_type: ValueType
    value: Union[None, float, RangePayload] = None

    @classmethod
    def exact(cls, value: float) -> 'Value':
        return cls(ValueType.EXACT, value)

    @classmethod
    def above(cls, value: float) -> 'Value':
        return cls(ValueType.ABOVE, value)

    @classmethod
    def below(cls, value: float) -> 'Value':
        return cls(ValueType.BELOW, value)

    @classmethod
    def between(cls, lower: ValueInRange, upper: ValueInRange) -> 'Value':
        return cls(ValueType.RANGE, (lower, upper))

    @classmethod
    def variable(cls) -> 'Value':
        return cls(ValueType.VARIABLE)

    @classmethod
    def unlimited(cls) -> 'Value':
        return cls(ValueType.UNLIMITED)

    @classmethod
    def indefinite(cls) -> 'Value':
        return cls(ValueType.INDEFINITE)

    @classmethod
    def parse(cls, text: str) -> 'Value':
        """
        Parse a value token.

        Accepts "VRB", "P<n>", "M<n>", "<a>V<b>" and plain, fractional or
        mixed numbers.

        Args:
            text: Value token

        Returns:
            Parsed Value

        Raises:
            MetarDecodeError: If a numeric part is malformed
        """
        if text == 'VRB':
            return cls.variable()
        if 'V' in text:
            lower, _, upper = text.partition('V')
            return cls.between(ValueInRange.parse(lower), ValueInRange.parse(upper))
        if text.startswith('P'):
            return cls.above(parse_number(text[1:]))
        if text.startswith('M'):
            return cls.below(parse_number(text[1:]))
        return cls.exact(parse_number(text))

    @property
    def has_number(self) -> bool:
        return self.value_type in _BOUND_TYPES

    def _scale(self, func) -> 'Value':
        if self.value_type == ValueType.RANGE:
            lower, upper = self.value
            return Value(self.value_type, (func(lower), func(upper)))
        if self.has_number:
            return Value(self.value_type, func(self.value))
        return self

    def __mul__(self, factor: float) -> 'Value':
        return self._scale(lambda x: x * factor)

    def __truediv__(self, divisor: float) -> 'Value':
        return self._scale(lambda x: x / divisor)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'value_type': self.value_type.value}
        if self.value_type == ValueType.RANGE:
            data['value'] = [endpoint.to_dict() for endpoint in self.value]
        elif self.value is not None:
            data['value'] = self.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Value':
        value_type = ValueType(data['value_type'])
        if value_type == ValueType.RANGE:
            lower, upper = data['value']
            return cls.between(ValueInRange.from_dict(lower), ValueInRange.from_dict(upper))
        if value_type in _BOUND_TYPES:
            return cls(value_type, float(data['value']))
        return cls(value_type)


@dataclass(frozen=True)
class Quantity:
    """A value with its units."""

    value: Value
    units: Unit

    @classmethod
    def optional(cls, value: Optional[Value], units: Unit) -> Optional['Quantity']:
        """Wrap value in a Quantity, or return None when value is None."""
        if value is None:
            return None
        return cls(value, units)

    def to_dict(self) -> dict:
        data = self.value.to_dict()
        data['units'] = self.units.value
        return data

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional['Quantity']:
        if data is None:
            return None
        return cls(Value.from_dict(data), Unit(data['units']))
