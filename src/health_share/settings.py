from django.conf import settings

DEFAULTS = {
    "TOKEN_BYTES": 24,  # never fewer than models.MIN_TOKEN_BYTES
    "DEFAULT_EXPIRES_IN_HOURS": 24,
    "MAX_EXPIRES_IN_HOURS": 24 * 30,
    "SNAPSHOT_RECORD_LIMIT": 10,
    "DOCTOR_RECORD_LIMIT": 20,
    "DOCUMENT_URL_MAX_AGE": 300,  # 5 minutes
    "NOTIFY_ON_ACCESS": True,
    "NOTIFICATION_FROM_EMAIL": None,
}


def get_setting(name):
    user_settings = getattr(settings, "HEALTH_SHARE", {})
    if name in user_settings:
        return user_settings[name]
    return DEFAULTS[name]
