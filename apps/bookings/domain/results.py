"""
Admission decisions

The validator answers every request with exactly one of these values.
Expected problems (ineligible requester, bad dates, conflicts, a store
outage) are rejections, never exceptions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from shared.domain.value_objects import TimeWindow


class RejectionReason(Enum):
    NOT_ELIGIBLE = 'not_eligible'
    INVALID_WINDOW = 'invalid_window'
    POLICY_VIOLATION = 'policy_violation'
    RESOURCE_UNAVAILABLE = 'resource_unavailable'
    SCHEDULING_CONFLICT = 'scheduling_conflict'


@dataclass(frozen=True)
class Accepted:
    window: Optional[TimeWindow] = None

    @property
    def accepted(self) -> bool:
        return True

    def to_dict(self) -> dict:
        return {'accepted': True}


@dataclass(frozen=True)
class Rejected:
    """
    A rejection with a machine-readable reason

    `detail` carries what the user needs to fix the request: the breached
    threshold for POLICY_VIOLATION, the conflicting windows for
    SCHEDULING_CONFLICT.
    """
    reason: RejectionReason
    message: str = ''
    detail: dict = field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return False

    @property
    def lookup_failed(self) -> bool:
        return bool(self.detail.get('lookup_failed'))

    def to_dict(self) -> dict:
        return {
            'accepted': False,
            'reason': self.reason.value,
            'message': self.message,
            'detail': self.detail,
        }


Decision = Union[Accepted, Rejected]
