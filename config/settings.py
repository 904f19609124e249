"""
Front Office – Django Settings (Infrastructure Only)
====================================================
Django serves as the framework container: settings and database
transactions. The domain (core/, engines/) never imports Django;
only engines/front_office/config.py and adapters/ read from here.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("FRONT_OFFICE_SECRET_KEY", "front-office-dev-key")

DEBUG = os.environ.get("FRONT_OFFICE_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
# No models: the front office ships no schema of its own.
INSTALLED_APPS = [
    "django.contrib.contenttypes",
]

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("FRONT_OFFICE_DB_PATH", BASE_DIR / "db.sqlite3"),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "pt-br"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Front Office ──────────────────────────────────────────────
# Read by engines.front_office.config.load_front_office_settings().
# Omitted keys fall back to the engine defaults.
FRONT_OFFICE = {
    "CURRENCY": "BRL",
    "DEFAULT_LABOR_RATE": "150",
    "QUOTE_VALIDITY_DAYS": 30,
    "LABOR_RATES": {
        "Standard": "120",
        "Diagnostic": "150",
        "Specialist": "180",
        "Emergency": "220",
    },
    "MARKUP_RATES": {
        "Standard": "1.25",
        "OEM": "1.15",
        "Aftermarket": "1.35",
    },
    "LOYALTY_THRESHOLDS": {
        "Platinum": (10, "10000"),
        "Gold": (5, "5000"),
        "Silver": (3, "2000"),
    },
    "SERVICE_INTERVAL_DAYS": 180,
    "SERVICE_INTERVAL_MILES": 5000,
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "front_office": {
            "handlers": ["console"],
            "level": os.environ.get("FRONT_OFFICE_LOG_LEVEL", "INFO"),
        },
    },
}
