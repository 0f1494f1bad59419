from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path

import dj_database_url
from dotenv import load_dotenv

# ------------------------------------------------------------
# Paths / Env
# ------------------------------------------------------------

# base.py lives in: <BASE_DIR>/medpoc_backend/settings/base.py
BASE_DIR = Path(__file__).resolve().parents[2]

# Load .env from repo root if present.
# - No exception if missing
# - Does not override real environment variables by default
load_dotenv(dotenv_path=BASE_DIR / ".env", override=False)


def _env(key: str, default: str | None = None) -> str | None:
    return os.getenv(key, default)


def _env_bool(key: str, default: bool = False) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# ------------------------------------------------------------
# Core
# ------------------------------------------------------------

SECRET_KEY = _env(
    "DJANGO_SECRET_KEY",
    "django-insecure-m3dp0c-8u!x7r_q2s#kz0w4v9+t1e6y5h%c3n(a@l)j*f&d2b",
)

DEBUG = _env_bool("DJANGO_DEBUG", default=False)

ALLOWED_HOSTS = [
    host.strip()
    for host in _env("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,[::1]").split(",")
    if host.strip()
]


# ------------------------------------------------------------
# Apps / Middleware
# ------------------------------------------------------------

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third-party
    "rest_framework",
    "corsheaders",
    # MedPoc
    "medpoc_backend.core",
    "medpoc_backend.patients",
    "medpoc_backend.appointments",
    "medpoc_backend.prescriptions",
    "medpoc_backend.labs",
]

MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",  # must be before CommonMiddleware
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "medpoc_backend.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

WSGI_APPLICATION = "medpoc_backend.wsgi.application"


# ------------------------------------------------------------
# Database
# ------------------------------------------------------------

# DATABASE_URL points to PostgreSQL in every real deployment (see prod.py).
# Without it, local runs fall back to a SQLite file next to manage.py.
DATABASES = {
    "default": dj_database_url.config(
        env="DATABASE_URL",
        default=f"sqlite:///{BASE_DIR / 'dev.sqlite3'}",
        conn_max_age=_env_int("DB_CONN_MAX_AGE", 60),
    )
}


# ------------------------------------------------------------
# Auth
# ------------------------------------------------------------

AUTH_USER_MODEL = "core.User"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]


# ------------------------------------------------------------
# REST / JWT
# ------------------------------------------------------------

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.IsAuthenticated",
    ),
    "DEFAULT_RENDERER_CLASSES": (
        "rest_framework.renderers.JSONRenderer",
    ),
    "DEFAULT_PARSER_CLASSES": (
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.FormParser",
        "rest_framework.parsers.MultiPartParser",
    ),
    "EXCEPTION_HANDLER": "medpoc_backend.core.exceptions.practice_exception_handler",
}

JWT_SIGNING_KEY = _env("JWT_SIGNING_KEY", SECRET_KEY)

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=_env_int("JWT_ACCESS_MINUTES", 30)),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=_env_int("JWT_REFRESH_DAYS", 7)),
    "ALGORITHM": _env("JWT_ALGORITHM", "HS256"),
    "SIGNING_KEY": JWT_SIGNING_KEY,
}


# ------------------------------------------------------------
# I18N / TZ
# ------------------------------------------------------------

LANGUAGE_CODE = _env("DJANGO_LANGUAGE_CODE", "en-us")
# Clinic timezone: day bounds for availability and the "HH:mm" slot strings
# are computed in this zone.
TIME_ZONE = _env("DJANGO_TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True


# ------------------------------------------------------------
# Static / Media
# ------------------------------------------------------------

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

MEDIA_URL = "/media/"
MEDIA_ROOT = Path(_env("DJANGO_MEDIA_ROOT", str(BASE_DIR / "media")))

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# ------------------------------------------------------------
# Clinic
# ------------------------------------------------------------

CLINIC_NAME = _env("CLINIC_NAME", "MedPoc Clinic")
CLINIC_ADDRESS = _env("CLINIC_ADDRESS", "123 Medical Street, Healthcare City, HC 12345")
CLINIC_PHONE = _env("CLINIC_PHONE", "(555) 123-4567")
CLINIC_EMAIL = _env("CLINIC_EMAIL", "info@medpoc.com")

# Maximum upload size for lab result files (bytes).
LAB_UPLOAD_MAX_BYTES = _env_int("LAB_UPLOAD_MAX_BYTES", 10 * 1024 * 1024)


# ------------------------------------------------------------
# CORS / CSRF
# ------------------------------------------------------------

CORS_ALLOW_ALL_ORIGINS = _env_bool("CORS_ALLOW_ALL_ORIGINS", default=DEBUG)
CORS_ALLOW_CREDENTIALS = _env_bool("CORS_ALLOW_CREDENTIALS", default=True)

CORS_ALLOWED_ORIGINS = [
    origin.strip() for origin in _env("CORS_ALLOWED_ORIGINS", "").split(",") if origin.strip()
]

CSRF_TRUSTED_ORIGINS = [
    origin.strip()
    for origin in _env(
        "CSRF_TRUSTED_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:8000,http://127.0.0.1:8000",
    ).split(",")
    if origin.strip()
]


# ------------------------------------------------------------
# Logging
# ------------------------------------------------------------

LOG_LEVEL = _env("LOG_LEVEL", "INFO")
LOG_DIR = Path(_env("DJANGO_LOG_DIR", str(BASE_DIR / "logs")))

# Only create log directory if filesystem is writable
try:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
except (OSError, PermissionError):
    LOG_DIR = Path("/tmp")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "kv": {
            "format": "%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "kv",
            "level": LOG_LEVEL,
            "stream": "ext://sys.stdout",
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "kv",
            "level": LOG_LEVEL,
            "filename": str(LOG_DIR / "medpoc.log"),
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
        },
    },
    "root": {
        "handlers": ["console", "file"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console", "file"],
            "level": _env("DJANGO_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "django.db.backends": {
            "handlers": ["console"],
            "level": _env("DJANGO_DB_LOG_LEVEL", "WARNING"),
            "propagate": False,
        },
        "medpoc_backend": {
            "handlers": ["console", "file"],
            "level": _env("MEDPOC_LOG_LEVEL", LOG_LEVEL),
            "propagate": False,
        },
    },
}
