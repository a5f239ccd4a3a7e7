"""
Django settings for the rental ledger.

This is the single settings file for all environments. Configuration is driven
by environment variables using django-environ, following the 12-factor app
methodology.

Environment files:
    - .env.development: Development settings (DEBUG=True, SQLite)
    - .env.production: Production settings (DEBUG=False, PostgreSQL)

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/topics/settings/

For the full list of settings and their values, see:
https://docs.djangoproject.com/en/5.2/ref/settings/
"""

import os
from datetime import timedelta
from pathlib import Path

import environ

# =============================================================================
# Path Configuration
# =============================================================================
# Build paths inside the project: BASE_DIR / 'subdir'
BASE_DIR = Path(__file__).resolve().parent.parent

# =============================================================================
# Environment Configuration
# =============================================================================
env = environ.Env(
    DEBUG=(bool, False),  # Default to False for safety
    ALLOWED_HOSTS=(list, []),
    LOG_LEVEL=(str, "INFO"),
)

# Note: In Docker, env vars are passed directly; .env files are for local dev
env_file = os.environ.get("ENV_FILE", BASE_DIR.parent / ".env.development")
if Path(env_file).exists():
    environ.Env.read_env(env_file)

# =============================================================================
# Core Settings
# =============================================================================
# SECURITY WARNING: set a real key in production
SECRET_KEY = env("SECRET_KEY", default="insecure-dev-key-change-me")

DEBUG = env("DEBUG")

ALLOWED_HOSTS = env("ALLOWED_HOSTS")

# =============================================================================
# Application Definition
# =============================================================================
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # Local apps
    "core",
    "bookings",
    "payments",
]

# =============================================================================
# Database Configuration
# =============================================================================
# SQLite for local runs and tests; PostgreSQL in deployment via DATABASE_URL.
# Row locks (select_for_update) are only enforced on PostgreSQL.
DATABASES = {
    "default": env.db(
        "DATABASE_URL",
        default=f"sqlite:///{BASE_DIR.parent / 'db.sqlite3'}",
    ),
}

if DATABASES["default"]["ENGINE"] == "django.db.backends.sqlite3":
    # SQLite has no row locks. IMMEDIATE transactions take the write lock at
    # BEGIN, so concurrent ledger-applies queue up instead of failing.
    DATABASES["default"].setdefault("OPTIONS", {}).update(
        {"transaction_mode": "IMMEDIATE", "timeout": 20}
    )
    # In-memory test databases cannot be shared between threads
    DATABASES["default"].setdefault("TEST", {})["NAME"] = str(
        BASE_DIR.parent / "test_db.sqlite3"
    )

# =============================================================================
# Cache Configuration
# =============================================================================
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

# =============================================================================
# Celery Configuration
# =============================================================================
CELERY_BROKER_URL = env("CELERY_BROKER_URL", default="redis://redis:6379/1")
CELERY_RESULT_BACKEND = env("CELERY_RESULT_BACKEND", default="redis://redis:6379/1")
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = "UTC"
CELERY_TASK_TRACK_STARTED = True
CELERY_TASK_TIME_LIMIT = 30 * 60  # 30 minutes

# How often room ledgers are checked against their transaction lines
ROOM_RECONCILIATION_SCHEDULE_MINUTES = env.int(
    "ROOM_RECONCILIATION_SCHEDULE_MINUTES",
    default=60,
)

CELERY_BEAT_SCHEDULE = {
    "reconcile-room-balances": {
        "task": "bookings.tasks.reconcile_room_balances",
        "schedule": timedelta(minutes=ROOM_RECONCILIATION_SCHEDULE_MINUTES),
    },
    "fail-stale-pending-payments": {
        "task": "payments.tasks.fail_stale_pending_payments",
        "schedule": timedelta(minutes=15),
    },
}

# =============================================================================
# UPP (Universal Payment Protocol) Configuration
# =============================================================================
# Device payment service used for UPP_DEVICE payments
UPP_API_BASE_URL = env("UPP_API_BASE_URL", default="http://localhost:3000")

# Device used when a payment does not name one
UPP_DEFAULT_DEVICE_ID = env("UPP_DEFAULT_DEVICE_ID", default="property_management_system")
UPP_DEFAULT_DEVICE_TYPE = env("UPP_DEFAULT_DEVICE_TYPE", default="smartphone")

# API timeout in seconds (default: 10)
# A timed-out device payment is recorded as FAILED
UPP_API_TIMEOUT_SECONDS = env.int("UPP_API_TIMEOUT_SECONDS", default=10)

# =============================================================================
# Payment Configuration
# =============================================================================
PAYMENT_DEFAULT_CURRENCY = env("PAYMENT_DEFAULT_CURRENCY", default="USD")

# Number of recent payments included in payment statistics
PAYMENT_RECENT_LIMIT = env.int("PAYMENT_RECENT_LIMIT", default=10)

# Payments still PENDING after this long are failed by the stale-payment sweep
PAYMENT_PENDING_TIMEOUT_MINUTES = env.int("PAYMENT_PENDING_TIMEOUT_MINUTES", default=30)

# =============================================================================
# Internationalization
# =============================================================================
# https://docs.djangoproject.com/en/5.2/topics/i18n/
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# =============================================================================
# Default Primary Key Field Type
# =============================================================================
# https://docs.djangoproject.com/en/5.2/ref/settings/#default-auto-field
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# =============================================================================
# Logging Configuration
# =============================================================================
LOG_LEVEL = env("LOG_LEVEL")

# Log file name determined by service (worker, beat, shell)
LOG_FILE_NAME = env("LOG_FILE_NAME", default="ledger.log")
LOG_DIR = BASE_DIR / "logs"

# Ensure log directory exists (handles local development without Docker)
LOG_DIR.mkdir(parents=True, exist_ok=True)

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {process:d} {thread:d} {message}",
            "style": "{",
        },
        "file": {
            "format": "[{asctime}] {levelname} {name} {module}:{lineno} - {message}",
            "style": "{",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
        "file": {
            # Max 10MB per file, keeps 5 backups
            "level": "DEBUG",
            "class": "logging.handlers.RotatingFileHandler",
            "filename": LOG_DIR / LOG_FILE_NAME,
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "formatter": "file",
            "encoding": "utf-8",
        },
    },
    "root": {
        "handlers": ["console", "file"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console", "file"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "celery": {
            "handlers": ["console", "file"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}
