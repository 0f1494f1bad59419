"""
Production settings for the MedPoc backend.

Usage:
    export DJANGO_SETTINGS_MODULE=medpoc_backend.settings.prod
    gunicorn medpoc_backend.wsgi:application

All secrets come from the environment.
"""

from __future__ import annotations

import os

from .base import *  # noqa: F403,F405
from .base import _env, _env_bool, _env_int

# ---------------------------------------------------------
# PRODUCTION CORE SETTINGS
# ---------------------------------------------------------

DEBUG = _env_bool("DJANGO_DEBUG", default=False)

# Secret Key MUSS aus Umgebung kommen
SECRET_KEY = os.environ["DJANGO_SECRET_KEY"]

ALLOWED_HOSTS = [
    host.strip()
    for host in _env("DJANGO_ALLOWED_HOSTS", "").split(",")
    if host.strip()
]

# ---------------------------------------------------------
# DATABASES: PostgreSQL only
# ---------------------------------------------------------

if not _env("DATABASE_URL"):
    raise RuntimeError("DATABASE_URL is required and must point to PostgreSQL.")

db_cfg = dj_database_url.config(
    env="DATABASE_URL",
    conn_max_age=_env_int("DB_CONN_MAX_AGE", 60),
    ssl_require=_env_bool("DB_SSL_REQUIRE", default=False),
)

if db_cfg.get("ENGINE") != "django.db.backends.postgresql":
    raise RuntimeError("Only PostgreSQL is allowed; other engines are blocked.")

db_cfg.setdefault("OPTIONS", {})
db_cfg["OPTIONS"].setdefault("connect_timeout", _env_int("DB_CONNECT_TIMEOUT", 10))

DATABASES = {"default": db_cfg}

# ---------------------------------------------------------
# SECURITY SETTINGS
# ---------------------------------------------------------

SECURE_SSL_REDIRECT = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SESSION_COOKIE_HTTPONLY = True
CSRF_COOKIE_HTTPONLY = True

SECURE_HSTS_SECONDS = 31536000  # 1 Jahr
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True

SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"

# ---------------------------------------------------------
# CORS (Nur spezifische Origins!)
# ---------------------------------------------------------

CORS_ALLOW_ALL_ORIGINS = False

# ---------------------------------------------------------
# STATIC FILES: WhiteNoise
# ---------------------------------------------------------

MIDDLEWARE.insert(1, "whitenoise.middleware.WhiteNoiseMiddleware")

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

# ---------------------------------------------------------
# REST FRAMEWORK: Nur JSON in Produktion
# ---------------------------------------------------------

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_PARSER_CLASSES": (
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.MultiPartParser",
    ),
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "anon": "100/hour",
        "user": "1000/hour",
    },
}

# ---------------------------------------------------------
# JWT: Kürzere Token-Lifetime in Produktion
# ---------------------------------------------------------

SIMPLE_JWT = {
    **SIMPLE_JWT,
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=15),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=1),
}

# ---------------------------------------------------------
# LOGGING
# ---------------------------------------------------------

LOGGING["loggers"]["django"]["level"] = "WARNING"
LOGGING["loggers"]["django.security"] = {
    "handlers": ["console", "file"],
    "level": "WARNING",
    "propagate": False,
}

# ---------------------------------------------------------
# SENTRY (Optional)
# ---------------------------------------------------------

SENTRY_DSN = _env("SENTRY_DSN", "")
if SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.django import DjangoIntegration

    sentry_sdk.init(
        dsn=SENTRY_DSN,
        integrations=[DjangoIntegration()],
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
