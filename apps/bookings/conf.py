"""Booking settings read from ``settings.EQUIPMENT_BOOKING``.

Example::

    EQUIPMENT_BOOKING = {
        "POLICY": {"maxDurationDays": 14, "minAdvanceHours": 2},
        "POLICY_BY_REQUESTER_TYPE": {
            "lecturer": {"maxDurationDays": 60, "maxActiveItems": 10},
        },
        "LOOKUP_TIMEOUT_SECONDS": 2,
        "PENDING_EXPIRY_HOURS": 48,
    }
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from django.conf import settings  # type: ignore
from django.core.exceptions import ImproperlyConfigured  # type: ignore

from apps.bookings.domain.policy import BookingPolicy

DEFAULTS: Dict[str, Any] = {
    "POLICY": {},
    "POLICY_BY_REQUESTER_TYPE": {},
    "LOOKUP_TIMEOUT_SECONDS": None,
    "PENDING_EXPIRY_HOURS": 48,
}


def booking_settings() -> Dict[str, Any]:
    """Return the configured values with defaults filled in."""

    configured = getattr(settings, "EQUIPMENT_BOOKING", None) or {}
    unknown = set(configured) - set(DEFAULTS)
    if unknown:
        raise ImproperlyConfigured(f"Unknown EQUIPMENT_BOOKING keys: {sorted(unknown)}")
    return {**DEFAULTS, **configured}


def policy_for_requester(requester_type: Optional[str] = None) -> BookingPolicy:
    """Default policy merged with the overrides for ``requester_type``."""

    values = booking_settings()
    try:
        policy = BookingPolicy.from_mapping(values["POLICY"])
        overrides = values["POLICY_BY_REQUESTER_TYPE"].get(requester_type) if requester_type else None
        return policy.merged(overrides)
    except ValueError as exc:
        raise ImproperlyConfigured(f"Invalid EQUIPMENT_BOOKING policy: {exc}") from exc


def lookup_timeout() -> Optional[float]:
    value = booking_settings()["LOOKUP_TIMEOUT_SECONDS"]
    return None if value is None else float(value)


def pending_expiry_hours() -> float:
    return float(booking_settings()["PENDING_EXPIRY_HOURS"])
