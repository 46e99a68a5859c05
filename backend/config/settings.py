"""
Django settings for the video pipeline project.

Values come from the environment so the same module serves local runs,
workers and tests.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    return os.environ.get(name, str(default)).lower() in ("1", "true", "yes")


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-insecure-key")
DEBUG = env_bool("DJANGO_DEBUG", True)
ALLOWED_HOSTS = os.environ.get("DJANGO_ALLOWED_HOSTS", "*").split(",")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "channels",
    "videojobs.apps.VideoJobsConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
]

ROOT_URLCONF = "config.urls"
ASGI_APPLICATION = "config.asgi.application"

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

DATABASES = {
    "default": {
        "ENGINE": os.environ.get("DB_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.environ.get("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": os.environ.get("DB_USER", ""),
        "PASSWORD": os.environ.get("DB_PASSWORD", ""),
        "HOST": os.environ.get("DB_HOST", ""),
        "PORT": os.environ.get("DB_PORT", ""),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
USE_TZ = True
TIME_ZONE = "UTC"

STATIC_URL = "static/"
MEDIA_URL = "/media/"
MEDIA_ROOT = os.environ.get("MEDIA_ROOT", str(BASE_DIR / "media"))

REST_FRAMEWORK = {
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.LimitOffsetPagination",
    "PAGE_SIZE": 20,
}

CHANNEL_LAYERS = {
    "default": {"BACKEND": "channels.layers.InMemoryChannelLayer"},
}

# === Celery ===
CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND", CELERY_BROKER_URL)
CELERY_TASK_ALWAYS_EAGER = env_bool("CELERY_TASK_ALWAYS_EAGER", False)
CELERY_TASK_ACKS_LATE = True
CELERY_BEAT_SCHEDULE = {
    "cleanup-stuck-video-jobs": {
        "task": "videojobs.tasks.cleanup_stuck_jobs_task",
        "schedule": 15 * 60,
    },
}

# === External services ===
APIFY_API_TOKEN = os.environ.get("APIFY_API_TOKEN", "")
APIFY_ACTOR_ID = os.environ.get("APIFY_ACTOR_ID", "ceeA8aQjRcp3E6cNx")
APIFY_BASE_URL = os.environ.get("APIFY_BASE_URL", "https://api.apify.com/v2")

COCONUT_API_KEY = os.environ.get("COCONUT_API_KEY", "")
COCONUT_BASE_URL = os.environ.get("COCONUT_BASE_URL", "https://api.coconut.co")

SITE_URL = os.environ.get("SITE_URL", "http://localhost:8000")
TRANSCODE_WEBHOOK_URL = os.environ.get(
    "TRANSCODE_WEBHOOK_URL", f"{SITE_URL}/api/video/transcode-webhook/"
)
MEDIA_PUBLIC_BASE_URL = os.environ.get("MEDIA_PUBLIC_BASE_URL", SITE_URL)
MEDIA_BUCKET_NAME = os.environ.get("MEDIA_BUCKET_NAME", "")

TWITTER_CONSUMER_KEY = os.environ.get("TWITTER_CONSUMER_KEY", "")
TWITTER_CONSUMER_SECRET = os.environ.get("TWITTER_CONSUMER_SECRET", "")

HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", "60"))

VIDEO_PIPELINE = {
    "MAX_POLL_ATTEMPTS": 90,
    "POLL_BASE_DELAY": 10,
    "POLL_DELAY_STEP": 2,
    "POLL_MAX_DELAY": 30,
    "QUEUE_DELIVERY_RETRIES": 3,
    "DOWNLOAD_QUALITY": "high",
    "STORAGE_CATEGORY": "tweet-media",
    "TRANSCODE_CATEGORY": "transcoded-videos",
    "TRANSCODE_MAX_FILE_SIZE_MB": 100,
    "TRANSCODE_MAX_DURATION_MINUTES": 10,
    "TRANSCODE_MAX_MONTHLY": 100,
    "TRANSCODE_COST_PER_MINUTE": 0.05,
    "TRANSCODE_SECONDS_PER_MB": 10,
    "STUCK_JOB_MINUTES": 60,
}

# === Logging ===
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        },
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "verbose"},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "videojobs": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "mediapipeline": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "celery": {"handlers": ["console"], "level": "INFO", "propagate": False},
    },
}
