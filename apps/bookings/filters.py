"""FilterSet definitions for booking listings."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """Filters for the booking list: unit, lifecycle state, kind and period."""

    equipment = django_filters.NumberFilter(field_name="equipment_id", lookup_expr="exact")
    equipment_type = django_filters.NumberFilter(field_name="equipment__equipment_type_id", lookup_expr="exact")
    status = django_filters.MultipleChoiceFilter(choices=Booking.Status.choices)
    kind = django_filters.ChoiceFilter(choices=Booking.Kind.choices)
    starts_after = django_filters.IsoDateTimeFilter(field_name="start_at", lookup_expr="gte")
    ends_before = django_filters.IsoDateTimeFilter(field_name="end_at", lookup_expr="lte")
    occupying = django_filters.BooleanFilter(method="filter_occupying")

    class Meta:
        model = Booking
        fields = ["equipment", "equipment_type", "status", "kind"]

    def filter_occupying(self, queryset, name, value):  # type: ignore
        if value is None:
            return queryset
        if value:
            return queryset.occupying()
        return queryset.exclude(status__in=Booking.OCCUPYING_STATUSES)
