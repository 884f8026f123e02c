"""
Django settings for medserv_project.

Everything deployment-specific is read from the environment
(a local `.env` file is loaded first if present).
"""
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

# Pull variables from .env into os.environ (real env vars win)
load_dotenv(BASE_DIR / ".env")


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.environ.get("SECRET_KEY", "dev-insecure-secret-key")
DEBUG = env_bool("DEBUG", True)
ALLOWED_HOSTS = [h for h in os.environ.get("ALLOWED_HOSTS", "*").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "records_core",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "medserv_project.urls"
WSGI_APPLICATION = "medserv_project.wsgi.application"

# ---------- Database ----------
# Every store call carries a bounded timeout (seconds)
DB_TIMEOUT = int(os.environ.get("DB_TIMEOUT", "10"))
DB_ENGINE = os.environ.get("DB_ENGINE", "django.db.backends.sqlite3")

if DB_ENGINE == "django.db.backends.sqlite3":
    DATABASES = {
        "default": {
            "ENGINE": DB_ENGINE,
            "NAME": os.environ.get("DB_NAME", str(BASE_DIR / "db.sqlite3")),
            # busy timeout while waiting on a locked database
            "OPTIONS": {"timeout": DB_TIMEOUT},
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": DB_ENGINE,
            "NAME": os.environ.get("DB_NAME", "medserv"),
            "USER": os.environ.get("DB_USER", ""),
            "PASSWORD": os.environ.get("DB_PASSWORD", ""),
            "HOST": os.environ.get("DB_HOST", "localhost"),
            "PORT": os.environ.get("DB_PORT", "5432"),
            "OPTIONS": {
                "connect_timeout": DB_TIMEOUT,
                "options": f"-c statement_timeout={DB_TIMEOUT * 1000}",
            },
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Agent passwords go through Django's salted hashers
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.PBKDF2PasswordHasher",
    "django.contrib.auth.hashers.PBKDF2SHA1PasswordHasher",
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.environ.get("TIME_ZONE", "Asia/Karachi")
USE_I18N = True
USE_TZ = True

# ---------- Celery ----------
CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND", CELERY_BROKER_URL)
CELERY_TASK_ALWAYS_EAGER = env_bool("CELERY_TASK_ALWAYS_EAGER", False)
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]
# Periodic recompute of the derived balances (seconds; 0 disables)
BALANCE_RECOMPUTE_INTERVAL = int(os.environ.get("BALANCE_RECOMPUTE_INTERVAL", "0"))
CELERY_BEAT_SCHEDULE = {}
if BALANCE_RECOMPUTE_INTERVAL > 0:
    CELERY_BEAT_SCHEDULE["recompute-balances"] = {
        "task": "records_core.tasks.recompute_all_balances",
        "schedule": BALANCE_RECOMPUTE_INTERVAL,
    }

# ---------- Logging ----------
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "django": {"handlers": ["console"], "level": "WARNING"},
        "records_core": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}

# ---------- Business constants ----------
# Printed on quotations / invoices when the caller gives no email
DEFAULT_DOCUMENT_EMAIL = os.environ.get(
    "DEFAULT_DOCUMENT_EMAIL", "duamedicalservice@gmail.com"
)
# valid_until = quotation date + N days
QUOTATION_VALIDITY_DAYS = int(os.environ.get("QUOTATION_VALIDITY_DAYS", "45"))
QUOTATION_DEFAULT_TERMS = [
    "PAYMENT: 30% IN ADVANCE",
    f"VALIDITY: {QUOTATION_VALIDITY_DAYS} DAYS",
]
# Keep a nonzero totalAmount sent with the request instead of recomputing it
QUOTATION_TRUST_CLIENT_TOTAL = env_bool("QUOTATION_TRUST_CLIENT_TOTAL", True)

# Sequential codes: CUST001, QUO001, ...
SEQUENCE_MIN_DIGITS = 3
SEQUENCE_RETRY_ATTEMPTS = int(os.environ.get("SEQUENCE_RETRY_ATTEMPTS", "3"))

# Bearer tokens issued on agent login
AGENT_TOKEN_MAX_AGE = int(os.environ.get("AGENT_TOKEN_MAX_AGE", str(7 * 24 * 3600)))
AGENT_TOKEN_SALT = "records_core.agent-token"
