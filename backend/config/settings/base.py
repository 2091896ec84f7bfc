import os
from pathlib import Path

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent.parent


def get_env(name, default=None, required=False, cast=None):
    """
    Read a setting from the environment. `cast` converts non-default values.
    """
    value = os.environ.get(name)
    if value is None or value == "":
        if required:
            raise ImproperlyConfigured(f"Environment variable {name} is required.")
        return default
    if cast is bool:
        return value.strip().lower() in {"1", "true", "yes", "on"}
    if cast is not None:
        return cast(value)
    return value


DEBUG = False

SECRET_KEY = get_env("SECRET_KEY", "")

ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "django_htmx",
    "pagos",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "django_htmx.middleware.HtmxMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
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

WSGI_APPLICATION = "config.wsgi.application"

# The local payment store. One writer per store; see PAGOS_SYNC below.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": get_env("DATABASE_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "es-pe"
TIME_ZONE = get_env("TIME_ZONE", "America/Lima")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

PAGOS_SYNC = {
    "REMOTE_GATEWAY": get_env("PAGOS_REMOTE_GATEWAY", "pagos.sync.remote.RestRemoteGateway"),
    "SESSION_GATE": get_env("PAGOS_SESSION_GATE", "pagos.sync.session.RestSessionGate"),
    "MIRROR_SERVICE": get_env("PAGOS_MIRROR_SERVICE", "pagos.sync.mirror.NullMirrorService"),
    "REMOTE_URL": get_env("PAGOS_REMOTE_URL", ""),
    "REMOTE_API_KEY": get_env("PAGOS_REMOTE_API_KEY", ""),
    "REMOTE_TABLE": get_env("PAGOS_REMOTE_TABLE", "payments"),
    "REMOTE_TIMEOUT": get_env("PAGOS_REMOTE_TIMEOUT", 15.0, cast=float),
    "AUTH_URL": get_env("PAGOS_AUTH_URL", ""),
    "ACCESS_TOKEN": get_env("PAGOS_ACCESS_TOKEN", ""),
    "REFRESH_TOKEN": get_env("PAGOS_REFRESH_TOKEN", ""),
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {"handlers": ["console"], "level": get_env("LOG_LEVEL", "INFO")},
    "loggers": {
        "pagos": {"handlers": ["console"], "level": get_env("PAGOS_LOG_LEVEL", "INFO"), "propagate": False},
    },
}
