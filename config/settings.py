"""
BillingCore – Django Settings (Infrastructure Only)
=====================================================
Django serves as the HTTP container for the dashboard adapter.
The core (engines/, core/) never imports Django; only
adapters/django_api reads these settings.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get(
    "BILLINGCORE_SECRET_KEY", "billingcore-dev-key-replace-before-deployment"
)

DEBUG = os.environ.get("BILLINGCORE_DEBUG", "1") == "1"

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# ── Installed Apps ────────────────────────────────────────────
# No models: the Entity Store is in-memory.
INSTALLED_APPS = [
    "django.contrib.contenttypes",
]

# ── Middleware ────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL & WSGI ────────────────────────────────────────────────
ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

# ── Database ──────────────────────────────────────────────────
# Unused by the core; Django wants one configured.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── BillingCore Store Rules ───────────────────────────────────
# Amounts are integer minor units of CURRENCY.
# ROUNDING is a decimal module rounding mode; ROUND_HALF_EVEN
# is bankers' rounding.
BILLINGCORE_STORE = {
    "CURRENCY": os.environ.get("BILLINGCORE_CURRENCY", "BDT"),
    "ROUNDING": os.environ.get("BILLINGCORE_ROUNDING", "ROUND_HALF_EVEN"),
    "SALE_AMOUNT_TOLERANCE": int(os.environ.get("BILLINGCORE_AMOUNT_TOLERANCE", "0")),
    "RECENT_ACTIVITY_LIMIT": int(os.environ.get("BILLINGCORE_ACTIVITY_LIMIT", "5")),
}

BILLINGCORE_SEED_DEMO_DATA = os.environ.get("BILLINGCORE_SEED_DEMO_DATA", "1") == "1"

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "billingcore": {
            "handlers": ["console"],
            "level": os.environ.get("BILLINGCORE_LOG_LEVEL", "INFO"),
            "propagate": True,
        },
    },
}
