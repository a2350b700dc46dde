"""Borrowing profiles for platform users."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.entities import Requester, RequesterStatus


class Profile(models.Model):
    """Borrowing profile: approval status, role and requester type."""

    class Status(models.TextChoices):
        APPROVED = "approved", _("Approved")
        PENDING = "pending", _("Waiting for approval")
        SUSPENDED = "suspended", _("Suspended")

    class Role(models.TextChoices):
        USER = "user", _("User")
        STAFF = "staff", _("Staff")
        ADMIN = "admin", _("Administrator")

    class RequesterType(models.TextChoices):
        STUDENT = "student", _("Student")
        LECTURER = "lecturer", _("Lecturer")
        STAFF = "staff", _("Staff")

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.USER)
    requester_type = models.CharField(
        max_length=20,
        choices=RequesterType.choices,
        default=RequesterType.STUDENT,
        help_text=_("Selects the loan limits that apply to this user."),
    )
    department = models.CharField(max_length=150, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Profile")
        verbose_name_plural = _("Profiles")
        indexes = [models.Index(fields=["status"], name="users_profile_status_idx")]

    def __str__(self) -> str:
        return f"{self.user} ({self.status})"

    @property
    def is_staff_member(self) -> bool:
        return self.role in (self.Role.STAFF, self.Role.ADMIN)

    def to_requester(self) -> Requester:
        return Requester(
            id=self.user_id,
            status=RequesterStatus(self.status),
            role=self.role,
            requester_type=self.requester_type,
        )
