"""
Report times and their disambiguation.

Reports only carry the day of month and time of day (or just the time of
day in trend groups). Given an anchor instant close to the collection time,
partial times are resolved to the nearest full UTC datetime.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from enum import Enum
from typing import Union, Tuple, List

from dateutil.relativedelta import relativedelta

from metar_decoder.exceptions import MetarDecodeError

UTC_DATE_TIME_FORMAT = '%Y-%m-%dT%H:%M:%SZ'
UTC_TIME_FORMAT = '%H:%M:%SZ'


class MetarTimeType(Enum):
    """How much of the date is known."""

    DATE_TIME = "date_time"
    DAY_TIME = "day_time"
    TIME = "time"


DayTime = Tuple[int, time]


@dataclass(frozen=True)
class MetarTime:
    """
    A report time with increasing levels of ambiguity.

    The payload depends on the kind:
        date_time: datetime (naive, UTC)
        day_time: (day of month, time)
        time: time

    Example:
        observed = MetarTime.from_day_time(1, time(0, 0))
        observed.to_date_time(datetime(2023, 5, 31, 12))
        # MetarTime(DATE_TIME, datetime(2023, 6, 1, 0, 0))
    """

    time_type: MetarTimeType
    value: Union[datetime, DayTime, time]

    @classmethod
    def from_datetime(cls, value: datetime) -> 'MetarTime':
        return cls(MetarTimeType.DATE_TIME, value)

    @classmethod
    def from_day_time(cls, day: int, value: time) -> 'MetarTime':
        return cls(MetarTimeType.DAY_TIME, (day, value))

    @classmethod
    def from_time(cls, value: time) -> 'MetarTime':
        return cls(MetarTimeType.TIME, value)

    @property
    def is_resolved(self) -> bool:
        return self.time_type == MetarTimeType.DATE_TIME

    def to_date_time(self, anchor_time: datetime) -> 'MetarTime':
        """
        Resolve to a full datetime nearest to the anchor.

        For day_time, the day is tried in the anchor's month, the month
        before and the month after. For time, the anchor's date, the day
        before and the day after are tried. The candidate with the smallest
        absolute difference to the anchor wins; on ties the first one in
        that order is kept.

        Args:
            anchor_time: Instant close to the report time

        Returns:
            MetarTime of kind date_time

        Raises:
            MetarDecodeError: If the day does not exist in any candidate month
        """
        if self.time_type == MetarTimeType.DATE_TIME:
            return self

        if anchor_time.tzinfo is not None:
            anchor_time = anchor_time.astimezone(timezone.utc).replace(tzinfo=None)

        if self.time_type == MetarTimeType.DAY_TIME:
            day, time_of_day = self.value
            candidates = _day_time_candidates(anchor_time, day, time_of_day)
        else:
            base = datetime.combine(anchor_time.date(), self.value)
            candidates = [base, base - timedelta(days=1), base + timedelta(days=1)]

        if not candidates:
            raise MetarDecodeError(
                f"Date guessing failed, given time {self} and anchor time {anchor_time}"
            )

        best = min(candidates, key=lambda c: abs((c - anchor_time).total_seconds()))
        return MetarTime.from_datetime(best)

    def to_dict(self) -> dict:
        if self.time_type == MetarTimeType.DATE_TIME:
            value = self.value.strftime(UTC_DATE_TIME_FORMAT)
        elif self.time_type == MetarTimeType.DAY_TIME:
            day, time_of_day = self.value
            value = [day, time_of_day.strftime(UTC_TIME_FORMAT)]
        else:
            value = self.value.strftime(UTC_TIME_FORMAT)
        return {'value_type': self.time_type.value, 'value': value}

    @classmethod
    def from_dict(cls, data: dict) -> 'MetarTime':
        time_type = MetarTimeType(data['value_type'])
        value = data['value']
        if time_type == MetarTimeType.DATE_TIME:
            return cls.from_datetime(datetime.strptime(value, UTC_DATE_TIME_FORMAT))
        if time_type == MetarTimeType.DAY_TIME:
            day, time_str = value
            return cls.from_day_time(int(day), datetime.strptime(time_str, UTC_TIME_FORMAT).time())
        return cls.from_time(datetime.strptime(value, UTC_TIME_FORMAT).time())

    def __str__(self) -> str:
        if self.time_type == MetarTimeType.DAY_TIME:
            day, time_of_day = self.value
            return f"day {day} {time_of_day.strftime(UTC_TIME_FORMAT)}"
        if self.time_type == MetarTimeType.DATE_TIME:
            return self.value.strftime(UTC_DATE_TIME_FORMAT)
        return self.value.strftime(UTC_TIME_FORMAT)


def _day_time_candidates(anchor_time: datetime, day: int, time_of_day: time) -> List[datetime]:
    candidates = []
    for months in (0, -1, 1):
        month_date = (anchor_time + relativedelta(months=months)).date()
        try:
            candidate_date = month_date.replace(day=day)
        except ValueError:
            # day does not exist in this month
            continue
        candidates.append(datetime.combine(candidate_date, time_of_day))
    return candidates
