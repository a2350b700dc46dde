"""
Common Value Objects

- TimeWindow: a half-open interval of time used for every overlap test
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from shared.domain.base import ValueObject
from shared.domain.exceptions import InvalidWindow


@dataclass(frozen=True)
class TimeWindow(ValueObject):
    """
    Time window value object

    Represents the interval from `start` (inclusive) to `end` (exclusive).
    Bookings, occupancy queries and policy checks all use it, so that
    back-to-back bookings compare the same way everywhere.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start is None or self.end is None:
            raise InvalidWindow("Both start and end are required")
        if self.start >= self.end:
            raise InvalidWindow(
                f"Start ({self.start.isoformat()}) must be before end ({self.end.isoformat()})"
            )

    @classmethod
    def coerce(cls, value) -> 'TimeWindow':
        """Accept a TimeWindow or a (start, end) pair"""
        if isinstance(value, cls):
            return value
        try:
            start, end = value
        except (TypeError, ValueError):
            raise InvalidWindow(f"Cannot build a time window from {value!r}")
        return cls(start, end)

    def overlaps_with(self, other: 'TimeWindow') -> bool:
        """
        Check if this window overlaps with another

        Note: end is exclusive, so a window ending exactly when the
        other one starts does not overlap it.

        Examples:
            - [09:00, 12:00) overlaps with [11:00, 13:00) -> True
            - [09:00, 12:00) overlaps with [12:00, 13:00) -> False (touching)
        """
        if not isinstance(other, TimeWindow):
            raise TypeError("Can only check overlap with another TimeWindow")

        # Overlap formula: start1 < end2 AND start2 < end1
        return self.start < other.end and other.start < self.end

    def contains(self, instant: datetime) -> bool:
        """Start is inclusive, end is exclusive"""
        return self.start <= instant < self.end

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def to_dict(self) -> dict:
        return {'start': self.start.isoformat(), 'end': self.end.isoformat()}

    def __str__(self):
        return f"[{self.start.isoformat()}, {self.end.isoformat()})"

    def __repr__(self):
        return f"TimeWindow({self.start!r}, {self.end!r})"
