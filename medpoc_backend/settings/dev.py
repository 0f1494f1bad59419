"""
Development settings for the MedPoc backend (SQLite unless DATABASE_URL is set).

Usage:
    export DJANGO_SETTINGS_MODULE=medpoc_backend.settings.dev
    python manage.py runserver
"""

from __future__ import annotations

from .base import *  # noqa: F403,F405

# ------------------------------------------------------------
# Development overrides
# ------------------------------------------------------------

DEBUG = True
ALLOWED_HOSTS = ["localhost", "127.0.0.1", "[::1]", "*"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework_simplejwt.authentication.JWTAuthentication",
        "rest_framework.authentication.SessionAuthentication",  # browsable API
    ),
    "DEFAULT_RENDERER_CLASSES": (
        "rest_framework.renderers.JSONRenderer",
        "rest_framework.renderers.BrowsableAPIRenderer",
    ),
}

SIMPLE_JWT = {
    **SIMPLE_JWT,
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=2),  # longer for dev
}

CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_CREDENTIALS = True

SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

# Verbose logging in dev
LOGGING["root"]["level"] = "INFO"
LOGGING["loggers"]["medpoc_backend"]["level"] = "DEBUG"
