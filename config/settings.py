"""
Django settings for the RiderApp console.

Every value can be overridden from the environment or a ``.env`` file at
the project root.
"""

import os
from pathlib import Path

from celery.schedules import crontab
from dotenv import load_dotenv


# Base directory (project root)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load environment variables from .env (if present)
load_dotenv(BASE_DIR / ".env")


def _getenv(name, default=None):
    val = os.getenv(name)
    if val is None:
        return "" if default is None else default
    return str(val)


def _getenv_bool(name, default=False):
    raw = os.getenv(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "y", "on"}


def _getenv_int(name, default=0):
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = _getenv("SECRET_KEY", "django-insecure-CHANGE_ME")
DEBUG = _getenv_bool("DEBUG", False)

ALLOWED_HOSTS = [h.strip() for h in _getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]
CSRF_TRUSTED_ORIGINS = [o.strip() for o in _getenv("CSRF_TRUSTED_ORIGINS", "").split(",") if o.strip()]


# Application definition
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",

    # Third-party
    "rest_framework",

    # Project apps
    "riderapp",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
            ],
        },
    },
]


# Database (sessions only; all business data lives in the RiderApp backend)
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": _getenv("DATABASE_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

SESSION_ENGINE = "django.contrib.sessions.backends.db"
SESSION_COOKIE_AGE = _getenv_int("SESSION_COOKIE_AGE", 60 * 60 * 8)
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SECURE = _getenv_bool("SESSION_COOKIE_SECURE", not DEBUG)
CSRF_COOKIE_SECURE = _getenv_bool("CSRF_COOKIE_SECURE", not DEBUG)

LANGUAGE_CODE = "en-us"
TIME_ZONE = _getenv("TIME_ZONE", "Asia/Dubai")
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# Django REST framework
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "riderapp.authentication.ConsoleSessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "riderapp.permissions.IsConsoleStaff",
    ],
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    # The salary report export reads ?format=pdf|excel itself
    "URL_FORMAT_OVERRIDE": None,
}


# RiderApp backend
RIDERAPP_API_URL = _getenv("RIDERAPP_API_URL", "http://localhost:8000")
RIDERAPP_API_TIMEOUT = _getenv_int("RIDERAPP_API_TIMEOUT", 30)
RIDERAPP_FANOUT_WORKERS = _getenv_int("RIDERAPP_FANOUT_WORKERS", 7)

# Service account used by background tasks
RIDERAPP_SERVICE_EMAIL = _getenv("RIDERAPP_SERVICE_EMAIL", "")
RIDERAPP_SERVICE_PASSWORD = _getenv("RIDERAPP_SERVICE_PASSWORD", "")


# Celery
CELERY_BROKER_URL = _getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = _getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")
CELERY_TASK_ALWAYS_EAGER = _getenv_bool("CELERY_TASK_ALWAYS_EAGER", False)
CELERY_TASK_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE
CELERY_BEAT_SCHEDULE = {
    "auto-generate-salary-reports": {
        "task": "riderapp.tasks.auto_generate_salary_reports",
        # First day of every month at 02:00
        "schedule": crontab(minute=0, hour=2, day_of_month=1),
    },
}


# Cache holding the per-month report generation locks; shared by the web
# process, beat and all Celery workers
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": _getenv("CACHE_URL", CELERY_BROKER_URL),
        "KEY_PREFIX": "riderapp",
    }
}


# Logging
LOG_LEVEL = _getenv("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "riderapp": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}
