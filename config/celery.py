import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("equipment_lending")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Cancel pending requests that were never approved, every 15 minutes
    "expire-stale-pending-bookings": {
        "task": "bookings.expire_stale_pending_bookings",
        "schedule": crontab(minute="*/15"),
        "options": {"expires": 600},
    },
    # Report loans past their end, every hour
    "flag-overdue-loans": {
        "task": "bookings.flag_overdue_loans",
        "schedule": crontab(minute=5),
    },
}
