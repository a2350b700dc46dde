"""
Booking policy thresholds

Every threshold is optional: None (or an empty collection) disables it.
Concrete values belong to the organization running the system and come
from configuration, see `apps.bookings.conf`.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime, timedelta
from typing import Any, FrozenSet, Mapping, Optional

from shared.domain.value_objects import TimeWindow

# camelCase spellings used by the web front end's configuration
KEY_ALIASES = {
    'maxDurationDays': 'max_duration_days',
    'minAdvanceHours': 'min_advance_hours',
    'maxAdvanceDays': 'max_advance_days',
    'closedWeekdays': 'closed_weekdays',
    'closedDates': 'closed_dates',
    'maxActiveItems': 'max_active_items',
    'typeLimits': 'type_limits',
    'acceptingBookings': 'accepting_bookings',
}


@dataclass(frozen=True)
class PolicyBreach:
    """Which threshold a request breached, and by how much"""
    threshold: str
    message: str
    limit: Any = None
    actual: Any = None

    def to_detail(self) -> dict:
        return {'threshold': self.threshold, 'limit': self.limit, 'actual': self.actual}


@dataclass(frozen=True)
class BookingPolicy:
    max_duration_days: Optional[float] = None
    min_advance_hours: Optional[float] = None
    max_advance_days: Optional[float] = None
    # ISO weekdays, 1 = Monday ... 7 = Sunday
    closed_weekdays: FrozenSet[int] = frozenset()
    closed_dates: FrozenSet[date] = frozenset()
    max_active_items: Optional[int] = None
    # equipment type id -> max occupying bookings per requester
    type_limits: Mapping[Any, int] = field(default_factory=dict)
    accepting_bookings: bool = True

    def __post_init__(self):
        for name in ('max_duration_days', 'min_advance_hours', 'max_advance_days', 'max_active_items'):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} cannot be negative")
        for day in self.closed_weekdays:
            if not 1 <= day <= 7:
                raise ValueError(f"closed_weekdays must be ISO weekdays (1-7), got {day}")
        for type_id, limit in self.type_limits.items():
            if limit < 0:
                raise ValueError(f"type limit for {type_id} cannot be negative")

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> 'BookingPolicy':
        """
        Build a policy from configuration

        Accepts both `maxDurationDays` and `max_duration_days` spellings.
        Unknown keys raise ValueError so that typos do not silently
        disable a threshold.
        """
        return cls().merged(mapping)

    def merged(self, overrides: Optional[Mapping[str, Any]]) -> 'BookingPolicy':
        """Return a copy with `overrides` applied on top of this policy"""
        if not overrides:
            return self

        known = {f.name for f in fields(self)}
        changes = {}
        for key, value in overrides.items():
            name = KEY_ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown booking policy option: {key}")
            changes[name] = _parse_option(name, value)
        return replace(self, **changes)

    @property
    def has_quotas(self) -> bool:
        return self.max_active_items is not None or bool(self.type_limits)

    def limit_for_type(self, type_id: Any) -> Optional[int]:
        if type_id is None:
            return None
        if type_id in self.type_limits:
            return self.type_limits[type_id]
        return self.type_limits.get(str(type_id))

    def check_window(self, window: TimeWindow, now: Optional[datetime] = None) -> Optional[PolicyBreach]:
        """
        Return the first breached threshold, or None

        The start-in-past rule and the advance-notice thresholds need
        `now`; without it they are skipped so that the check never reads
        the system clock.
        """
        if not self.accepting_bookings:
            return PolicyBreach('accepting_bookings', "Bookings are temporarily closed")

        if self.max_duration_days is not None:
            days = window.duration / timedelta(days=1)
            if days > self.max_duration_days:
                return PolicyBreach(
                    'max_duration_days',
                    f"Booking may last at most {self.max_duration_days:g} days",
                    limit=self.max_duration_days,
                    actual=round(days, 2),
                )

        for label, instant in (('start', window.start), ('end', window.end)):
            if instant.isoweekday() in self.closed_weekdays:
                return PolicyBreach(
                    'closed_weekdays',
                    f"The {label} falls on a closed weekday",
                    limit=sorted(self.closed_weekdays),
                    actual=instant.isoweekday(),
                )
            if instant.date() in self.closed_dates:
                return PolicyBreach(
                    'closed_dates',
                    f"The {label} falls on a closed date",
                    actual=instant.date().isoformat(),
                )

        if now is None:
            return None

        # Always on, whatever the configured thresholds
        if window.start < now:
            return PolicyBreach(
                'start_in_past',
                "A booking cannot start in the past",
                limit=now.isoformat(),
                actual=window.start.isoformat(),
            )

        if self.min_advance_hours is not None:
            hours = (window.start - now) / timedelta(hours=1)
            if hours < self.min_advance_hours:
                return PolicyBreach(
                    'min_advance_hours',
                    f"Bookings must be made at least {self.min_advance_hours:g} hours in advance",
                    limit=self.min_advance_hours,
                    actual=round(hours, 2),
                )

        if self.max_advance_days is not None:
            days = (window.start - now) / timedelta(days=1)
            if days > self.max_advance_days:
                return PolicyBreach(
                    'max_advance_days',
                    f"Bookings can be made at most {self.max_advance_days:g} days ahead",
                    limit=self.max_advance_days,
                    actual=round(days, 2),
                )

        return None

    def check_quota(self, active_count: int, type_id: Any = None, type_count: int = 0) -> Optional[PolicyBreach]:
        """Return a breach when one more booking would exceed a requester quota"""
        if self.max_active_items is not None and active_count >= self.max_active_items:
            return PolicyBreach(
                'max_active_items',
                f"At most {self.max_active_items} active bookings are allowed",
                limit=self.max_active_items,
                actual=active_count,
            )

        type_limit = self.limit_for_type(type_id)
        if type_limit is not None and type_count >= type_limit:
            return PolicyBreach(
                'type_limit',
                f"At most {type_limit} active bookings of this equipment type are allowed",
                limit=type_limit,
                actual=type_count,
            )
        return None


def _parse_option(name: str, value: Any) -> Any:
    if name == 'closed_weekdays':
        return frozenset(int(day) for day in value or ())
    if name == 'closed_dates':
        return frozenset(_as_date(day) for day in value or ())
    if name == 'type_limits':
        return {key: int(limit) for key, limit in (value or {}).items()}
    if name == 'accepting_bookings':
        return bool(value)
    if name == 'max_active_items':
        return None if value is None else int(value)
    return None if value is None else float(value)


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))
