from .base import *

SECRET_KEY = "test-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

PAGOS_SYNC = {
    **PAGOS_SYNC,
    "REMOTE_GATEWAY": "pagos.tests.fakes.InMemoryRemoteGateway",
    "SESSION_GATE": "pagos.tests.fakes.StaticSessionGate",
    "MIRROR_SERVICE": "pagos.tests.fakes.RecordingMirrorService",
    "REMOTE_URL": "https://remote.example.test",
    "AUTH_URL": "https://remote.example.test/auth/v1",
}

# Owner returned by the in-memory session gate.
PAGOS_TEST_OWNER_ID = "8f14e45f-ceea-467e-a5d4-3f1b0d2c9a11"

LOGGING["root"]["level"] = "CRITICAL"  # type: ignore
LOGGING["loggers"]["pagos"]["level"] = "CRITICAL"  # type: ignore
