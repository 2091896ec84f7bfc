from django.conf import settings

DEFAULTS = {
    "REMOTE_GATEWAY": "pagos.sync.remote.RestRemoteGateway",
    "SESSION_GATE": "pagos.sync.session.RestSessionGate",
    "MIRROR_SERVICE": "pagos.sync.mirror.NullMirrorService",
    "REMOTE_URL": "",
    "REMOTE_API_KEY": "",
    "REMOTE_TABLE": "payments",
    "REMOTE_TIMEOUT": 15.0,
    "AUTH_URL": "",
    "ACCESS_TOKEN": "",
    "REFRESH_TOKEN": "",
}


def sync_setting(key):
    configured = getattr(settings, "PAGOS_SYNC", {}) or {}
    if key in configured:
        return configured[key]
    return DEFAULTS[key]
