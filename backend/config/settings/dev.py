from .base import *

# Development defaults keep fast feedback loops and verbose sync logs.
DEBUG = True

SECRET_KEY = get_env("SECRET_KEY", "local-dev-secret-key")

INSTALLED_APPS += ["django_extensions"] if "django_extensions" not in INSTALLED_APPS else []  # type: ignore

INTERNAL_IPS = ["127.0.0.1"]

LOGGING["loggers"]["pagos"]["level"] = "DEBUG"  # type: ignore
