from datetime import datetime, timedelta, timezone

DAY = datetime(2025, 3, 10, tzinfo=timezone.utc)


def at(hour, minute=0, day=0):
    """Aware datetime on the test day (a Monday), `day` days later"""
    return DAY + timedelta(days=day, hours=hour, minutes=minute)
