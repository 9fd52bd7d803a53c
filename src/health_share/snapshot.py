from django.db.models import F

from health_share.models import HealthData, HealthRecord, UserProfile
from health_share.settings import get_setting

PROFILE_FIELDS = (
    "display_name",
    "date_of_birth",
    "gender",
    "location",
    "phone",
    "avatar_url",
)

HEALTH_DATA_FIELDS = (
    "blood_group",
    "height",
    "health_allergies",
    "chronic_diseases",
    "previous_diseases",
    "current_medications",
    "bad_habits",
    "birth_defects",
    "emergency_contact_name",
    "emergency_contact_phone",
    "updated_at",
)

RECORD_FIELDS = ("id", "title", "category", "record_date", "provider_name")


def _jsonable(row):
    if row is None:
        return None
    return {
        key: (value.isoformat() if hasattr(value, "isoformat") else value)
        for key, value in row.items()
    }


def owner_profile(owner_id):
    return _jsonable(
        UserProfile.objects.filter(user_id=owner_id).values(*PROFILE_FIELDS).first()
    )


def owner_health_data(owner_id):
    return _jsonable(
        HealthData.objects.filter(user_id=owner_id).values(*HEALTH_DATA_FIELDS).first()
    )


def owner_records(owner_id, limit, fields=RECORD_FIELDS):
    rows = (
        HealthRecord.objects.filter(user_id=owner_id)
        .order_by(F("record_date").desc(nulls_last=True), "-uploaded_at")
        .values(*fields)[:limit]
    )
    records = []
    for row in rows:
        row = _jsonable(row)
        row["id"] = str(row["id"])
        records.append(row)
    return records


def assemble_snapshot(owner_id, record_limit=None, record_fields=RECORD_FIELDS):
    """Read-only snapshot of an account's profile, health summary and records.

    Missing profile or health data is returned as ``None`` and an account
    without records gets an empty list.
    """
    if record_limit is None:
        record_limit = get_setting("SNAPSHOT_RECORD_LIMIT")
    return {
        "profile": owner_profile(owner_id),
        "healthData": owner_health_data(owner_id),
        "records": owner_records(owner_id, record_limit, record_fields),
    }
