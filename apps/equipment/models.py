"""Equipment catalog models."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.entities import EquipmentStatus, Resource


class EquipmentType(models.Model):
    """Category of equipment (laptop, projector, camera, ...)."""

    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=50, unique=True)
    description = models.TextField(blank=True)
    is_exclusive_pool = models.BooleanField(
        default=False,
        help_text=_("All units of this type are booked as one pool: one booking blocks every unit."),
    )

    class Meta:
        verbose_name = _("Equipment type")
        verbose_name_plural = _("Equipment types")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Equipment(models.Model):
    """A physical unit that can be borrowed or reserved."""

    class Status(models.TextChoices):
        READY = "ready", _("Ready")
        BORROWED = "borrowed", _("Borrowed")
        MAINTENANCE = "maintenance", _("Under maintenance")
        RETIRED = "retired", _("Retired")

    name = models.CharField(max_length=255)
    equipment_number = models.CharField(max_length=50, unique=True)
    equipment_type = models.ForeignKey(
        EquipmentType,
        on_delete=models.PROTECT,
        related_name="units",
    )
    is_active = models.BooleanField(default=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.READY)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Equipment")
        verbose_name_plural = _("Equipment")
        ordering = ["equipment_number"]
        indexes = [
            models.Index(fields=["equipment_type", "is_active"], name="equipment_type_active_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} (#{self.equipment_number})"

    @property
    def is_bookable(self) -> bool:
        return self.is_active and self.status != self.Status.RETIRED

    def to_resource(self) -> Resource:
        return Resource(
            id=self.pk,
            type_id=self.equipment_type_id,
            is_active=self.is_active,
            status=EquipmentStatus(self.status),
            type_is_exclusive_pool=self.equipment_type.is_exclusive_pool,
        )
