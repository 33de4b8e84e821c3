import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name, default):
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


# ============================================================
# CORE
# ============================================================
SECRET_KEY = os.environ.get(
    "DJANGO_SECRET_KEY",
    "django-insecure-development-key-change-me",
)

DEBUG = env_bool("DJANGO_DEBUG", False)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")
    if host.strip()
]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    "machines",
    "warranty",
    "notifications",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "warranty_project.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "warranty_project.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("DATABASE_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

STATIC_URL = "static/"

# ============================================================
# TIME
# Warranty days and cron ticks are evaluated in this zone
# ============================================================
LANGUAGE_CODE = "en-us"
TIME_ZONE = os.environ.get("TIME_ZONE", "Asia/Kolkata")
USE_I18N = True
USE_TZ = True

# ============================================================
# EMAIL
# ============================================================
EMAIL_BACKEND = os.environ.get(
    "EMAIL_BACKEND",
    "django.core.mail.backends.smtp.EmailBackend",
)
EMAIL_HOST = os.environ.get("EMAIL_HOST", "localhost")
EMAIL_PORT = env_int("EMAIL_PORT", 587)
EMAIL_HOST_USER = os.environ.get("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = os.environ.get("EMAIL_HOST_PASSWORD", "")
EMAIL_USE_TLS = env_bool("EMAIL_USE_TLS", True)

# Bounded per-send timeout so one stuck SMTP call cannot stall a sweep
EMAIL_TIMEOUT = env_int("EMAIL_TIMEOUT", 30)

DEFAULT_FROM_EMAIL = os.environ.get(
    "DEFAULT_FROM_EMAIL",
    "Service Team <noreply@example.com>",
)

SITE_URL = os.environ.get("SITE_URL", "http://localhost:8000").rstrip("/")

# ============================================================
# WARRANTY & REMINDER ENGINE
# Read once into warranty.config.EngineConfig
# ============================================================
SERVICE_INTERVAL_MONTHS = env_int("SERVICE_INTERVAL_MONTHS", 3)
REMINDER_TRIGGER_DAYS = (15, 7, 3, 0, -3)
AVG_PREVENTIVE_COST = env_int("AVG_PREVENTIVE_COST", 15000)
AVG_BREAKDOWN_COST = env_int("AVG_BREAKDOWN_COST", 200000)
SCHEDULE_LINK_MAX_AGE_DAYS = env_int("SCHEDULE_LINK_MAX_AGE_DAYS", 7)

# ============================================================
# SCHEDULER
# ============================================================
ENABLE_SCHEDULER = env_bool("ENABLE_SCHEDULER", False)
SCHEDULER_TIMEZONE = os.environ.get("SCHEDULER_TIMEZONE", TIME_ZONE)

# Required by the externally triggered sweep / trigger endpoints
CRON_SECRET = os.environ.get("CRON_SECRET", "")

# ============================================================
# LOGGING
# ============================================================
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        "machines": {"handlers": ["console"], "level": LOG_LEVEL},
        "warranty": {"handlers": ["console"], "level": LOG_LEVEL},
        "notifications": {"handlers": ["console"], "level": LOG_LEVEL},
        "apscheduler": {"handlers": ["console"], "level": "WARNING"},
    },
}
