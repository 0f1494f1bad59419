"""
Test settings: in-memory SQLite, fast hashing, no file logging.

Used by pytest-django (see pyproject.toml) and by
``python manage.py test --settings=medpoc_backend.settings.test``.
"""

from __future__ import annotations

from .base import *  # noqa: F403,F405

DEBUG = False
ALLOWED_HOSTS = ["localhost", "testserver", "127.0.0.1"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

TIME_ZONE = "UTC"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "null": {"class": "logging.NullHandler"},
    },
    "root": {
        "handlers": ["null"],
        "level": "WARNING",
    },
}
