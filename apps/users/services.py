"""Helpers that turn Django users into booking requesters."""

from __future__ import annotations

from apps.bookings.domain.entities import Requester, RequesterStatus


def requester_for_user(user) -> Requester:
    """
    Build the requester for `user`.

    Users without a profile have never been reviewed, so they are
    treated as pending. Django superusers act as approved admins, and
    Django staff users keep at least the staff role.
    """
    profile = getattr(user, "profile", None)
    if profile is not None:
        requester = profile.to_requester()
    else:
        requester = Requester(id=user.pk, status=RequesterStatus.PENDING)

    if getattr(user, "is_superuser", False):
        return Requester(
            id=user.pk,
            status=RequesterStatus.APPROVED,
            role="admin",
            requester_type=requester.requester_type,
        )
    if getattr(user, "is_staff", False) and not requester.is_staff:
        return Requester(
            id=user.pk,
            status=requester.status,
            role="staff",
            requester_type=requester.requester_type,
        )
    return requester


def is_staff_member(user) -> bool:
    """Staff members see and manage every booking."""
    if not getattr(user, "is_authenticated", False):
        return False
    return requester_for_user(user).is_staff
