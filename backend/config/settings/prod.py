from .base import *

# Production settings focus on safety and observability.
DEBUG = False

SECRET_KEY = get_env("SECRET_KEY", required=True)

ALLOWED_HOSTS = [host for host in get_env("ALLOWED_HOSTS", "").split(",") if host] or ["localhost"]

SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_HSTS_SECONDS = int(get_env("SECURE_HSTS_SECONDS", 31536000, cast=int))
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_CONTENT_TYPE_NOSNIFF = True

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

PAGOS_SYNC["REMOTE_URL"] = get_env("PAGOS_REMOTE_URL", required=True)  # type: ignore
PAGOS_SYNC["AUTH_URL"] = get_env("PAGOS_AUTH_URL", required=True)  # type: ignore

LOGGING["root"]["level"] = "WARNING"  # type: ignore
