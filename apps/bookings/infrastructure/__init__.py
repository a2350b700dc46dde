"""Adapters that connect the booking core to Django."""
