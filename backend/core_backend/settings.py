"""
Django settings for the storefront backend.

All deploy-specific values come from the environment (optionally loaded
from a .env file next to manage.py).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def env_list(name, default=""):
    raw = os.environ.get(name, default)
    return [part.strip() for part in raw.split(",") if part.strip()]


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "django-insecure-storefront-dev-key")
DEBUG = env_bool("DJANGO_DEBUG", True)
ALLOWED_HOSTS = env_list("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "core_backend",
    "availability",
    "menu",
    "cart",
    "woocommerce",
    "checkout",
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

ROOT_URLCONF = "core_backend.urls"

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

WSGI_APPLICATION = "core_backend.wsgi.application"
ASGI_APPLICATION = "core_backend.asgi.application"

# Database
if os.environ.get("DB_ENGINE", "sqlite") == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ.get("DB_NAME", "storefront"),
            "USER": os.environ.get("DB_USER", "postgres"),
            "PASSWORD": os.environ.get("DB_PASSWORD", ""),
            "HOST": os.environ.get("DB_HOST", "localhost"),
            "PORT": os.environ.get("DB_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": os.environ.get("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "storefront-default",
    }
}

SESSION_ENGINE = "django.contrib.sessions.backends.db"
SESSION_COOKIE_AGE = 60 * 60 * 24 * 14

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Django REST Framework
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "EXCEPTION_HANDLER": "core_backend.exceptions.storefront_exception_handler",
    "UNAUTHENTICATED_USER": None,
}

# Celery
CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND", CELERY_BROKER_URL)
CELERY_TASK_ALWAYS_EAGER = env_bool("CELERY_TASK_ALWAYS_EAGER", DEBUG)
CELERY_TASK_EAGER_PROPAGATES = False
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE
CELERY_BEAT_SCHEDULE = {
    "cleanup-abandoned-carts": {
        "task": "cart.tasks.cleanup_abandoned_carts",
        "schedule": 60 * 60 * 6,
    },
}

# Order window (availability engine)
ORDER_WINDOW = {
    "TIMEZONE": os.environ.get("ORDER_WINDOW_TIMEZONE", "America/New_York"),
    "CUTOFF_HOUR": int(os.environ.get("ORDER_WINDOW_CUTOFF_HOUR", "10")),
    "SERVICE_WEEKDAYS": [int(d) for d in env_list("ORDER_WINDOW_SERVICE_WEEKDAYS", "0,1,2,3,4")],
    "CALENDAR_HORIZON_DAYS": int(os.environ.get("ORDER_WINDOW_CALENDAR_HORIZON_DAYS", "30")),
    "PREVIEW_ORDERABLE": env_bool("ORDER_WINDOW_PREVIEW_ORDERABLE", False),
}

# Cart
CART_NOTICE_SECONDS = float(os.environ.get("CART_NOTICE_SECONDS", "3.5"))
CART_SYNC_STALE_SECONDS = int(os.environ.get("CART_SYNC_STALE_SECONDS", "60"))
CART_ABANDONED_AFTER_HOURS = int(os.environ.get("CART_ABANDONED_AFTER_HOURS", "48"))

# WooCommerce
WOOCOMMERCE_STORE_URL = os.environ.get("WOOCOMMERCE_STORE_URL", "").rstrip("/")
WOOCOMMERCE_NONCE_URL = os.environ.get("WOOCOMMERCE_NONCE_URL", "")
WOOCOMMERCE_URL = os.environ.get("WOOCOMMERCE_URL", "").rstrip("/")
WOOCOMMERCE_CONSUMER_KEY = os.environ.get("WOOCOMMERCE_CONSUMER_KEY", "")
WOOCOMMERCE_CONSUMER_SECRET = os.environ.get("WOOCOMMERCE_CONSUMER_SECRET", "")
WOOCOMMERCE_CHECKOUT_URL = os.environ.get("WOOCOMMERCE_CHECKOUT_URL", "")
WOOCOMMERCE_TIMEOUT = float(os.environ.get("WOOCOMMERCE_TIMEOUT", "10"))

# Stripe
STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY", "")
STRIPE_CURRENCY = os.environ.get("STRIPE_CURRENCY", "usd")

# Storefront checkout
STOREFRONT_TAX_RATE = os.environ.get("STOREFRONT_TAX_RATE", "0.02")
STOREFRONT_TIP_OPTIONS = env_list("STOREFRONT_TIP_OPTIONS", "0,0.08,0.10,0.15")
STOREFRONT_DEFAULT_TIP = os.environ.get("STOREFRONT_DEFAULT_TIP", "0.10")
STOREFRONT_FREE_COUPON_CODES = [code.upper() for code in env_list("STOREFRONT_FREE_COUPON_CODES", "REALFOOD113")]
STOREFRONT_ORDER_PREFIX = os.environ.get("STOREFRONT_ORDER_PREFIX", "KNWN")
STOREFRONT_DEFAULT_CITY = os.environ.get("STOREFRONT_DEFAULT_CITY", "Miami")
STOREFRONT_DEFAULT_STATE = os.environ.get("STOREFRONT_DEFAULT_STATE", "FL")
STOREFRONT_DEFAULT_COUNTRY = os.environ.get("STOREFRONT_DEFAULT_COUNTRY", "US")

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        },
        "simple": {
            "format": "{levelname} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": os.environ.get("DJANGO_LOG_LEVEL", "WARNING"),
            "propagate": False,
        },
        "celery": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}
