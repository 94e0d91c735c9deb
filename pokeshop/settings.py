"""
Django settings for the pokeshop project.

Everything environment-specific is read from os.environ so the same file
serves local development, tests and production.
"""
import os
from pathlib import Path
from urllib.parse import unquote, urlparse

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name, default=""):
    return [item.strip() for item in os.environ.get(name, default).split(",") if item.strip()]


DB_TIMEOUT = int(os.environ.get("DB_TIMEOUT", "10"))


def _database_from_url(url):
    if not url:
        return None
    parsed = urlparse(url)
    if parsed.scheme in {"postgres", "postgresql"}:
        return {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": (parsed.path or "/").lstrip("/"),
            "USER": unquote(parsed.username or ""),
            "PASSWORD": unquote(parsed.password or ""),
            "HOST": parsed.hostname or "",
            "PORT": str(parsed.port or ""),
            "OPTIONS": {"connect_timeout": DB_TIMEOUT},
        }
    if parsed.scheme == "sqlite" and parsed.path:
        return {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": parsed.path,
            "OPTIONS": {"timeout": DB_TIMEOUT},
        }
    return None


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "django-insecure-dev-only-key")
DEBUG = _env_bool("DJANGO_DEBUG", False)
ALLOWED_HOSTS = _env_list("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")


INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "django.contrib.humanize",

    "shop",
    "browse",
    "cart",
    "orders",
    "userprofile",
    "accounts",
    "backoffice",
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

ROOT_URLCONF = "pokeshop.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
                "cart.context_processors.cart_summary",
                "shop.context_processors.shop_settings",
            ],
        },
    },
]

WSGI_APPLICATION = "pokeshop.wsgi.application"


DATABASES = {
    "default": _database_from_url(os.environ.get("DATABASE_URL")) or {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
        "OPTIONS": {"timeout": DB_TIMEOUT},
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "pokeshop",
    }
}

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LOGIN_URL = "accounts:login"
LOGIN_REDIRECT_URL = "shop:home"
LOGOUT_REDIRECT_URL = "shop:home"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

EMAIL_BACKEND = os.environ.get("EMAIL_BACKEND", "django.core.mail.backends.console.EmailBackend")
DEFAULT_FROM_EMAIL = os.environ.get("DEFAULT_FROM_EMAIL", "shop@localhost")


# ----- Shop -----
CURRENCY = os.environ.get("CURRENCY", "usd")
CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "$")

# read cache for card listings (seconds); 0 disables caching
QUERY_CACHE_TTL = int(os.environ.get("QUERY_CACHE_TTL", "300"))
QUERY_RETRY_BASE_DELAY = float(os.environ.get("QUERY_RETRY_BASE_DELAY", "0.3"))

# ----- Pokémon TCG catalog (pokemontcg.io) -----
POKEMONTCG_IO_API_KEY = os.environ.get("POKEMONTCG_IO_API_KEY", "").strip()
CATALOG_IMPORT_BATCH_SIZE = int(os.environ.get("CATALOG_IMPORT_BATCH_SIZE", "10"))
CATALOG_IMPORT_BATCH_DELAY = float(os.environ.get("CATALOG_IMPORT_BATCH_DELAY", "0.5"))

# ----- Payments -----
STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY", "")
STRIPE_WEBHOOK_SECRET = os.environ.get("STRIPE_WEBHOOK_SECRET", "")

# bootstrap secret for POST /api/admin/set-admin; empty disables the secret path
ADMIN_SETUP_SECRET = os.environ.get("ADMIN_SETUP_SECRET", "")


LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "[{asctime}] {levelname} {name}: {message}", "style": "{"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {"handlers": ["console"], "level": os.environ.get("LOG_LEVEL", "INFO")},
    "loggers": {
        "django": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}
