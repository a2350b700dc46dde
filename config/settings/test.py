"""Test settings: in-memory SQLite, eager Celery, no lookup timeout."""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

EQUIPMENT_BOOKING = {
    'POLICY': {},
    'POLICY_BY_REQUESTER_TYPE': {},
    'LOOKUP_TIMEOUT_SECONDS': None,
    'PENDING_EXPIRY_HOURS': 48,
}

# Let pytest's caplog see application records
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "loggers": {
        "apps": {"level": "DEBUG", "propagate": True},
        "shared": {"level": "DEBUG", "propagate": True},
    },
}
