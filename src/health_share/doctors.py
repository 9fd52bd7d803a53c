import logging
from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.utils import timezone

from health_share.documents import get_record, signed_record_url
from health_share.exceptions import BadRequest, DoctorNotFound, Forbidden
from health_share.models import DoctorPatientAccess, DoctorProfile
from health_share.settings import get_setting
from health_share.snapshot import assemble_snapshot
from health_share.tokens import require_user

logger = logging.getLogger(__name__)

DOCTOR_RECORD_FIELDS = (
    "id",
    "title",
    "category",
    "record_date",
    "provider_name",
    "file_type",
)


@dataclass
class ConnectionResult:
    """Outcome of a patient connecting to a doctor.

    ``status`` is one of CONNECTED, REACTIVATED or ALREADY_CONNECTED; the
    doctor's public details are attached in every case.
    """

    CONNECTED = "connected"
    REACTIVATED = "reactivated"
    ALREADY_CONNECTED = "already_connected"

    status: str
    doctor: DoctorProfile

    def as_dict(self):
        return {
            "status": self.status,
            "doctor": {
                "code": self.doctor.code,
                "full_name": self.doctor.full_name,
                "specialty": self.doctor.specialty,
                "avatar_url": self.doctor.avatar_url,
            },
        }


def connect_to_doctor(patient, doctor_code):
    patient = require_user(patient)
    if not doctor_code or not isinstance(doctor_code, str):
        raise BadRequest("Doctor code is required")

    code = doctor_code.strip().upper()
    doctor = DoctorProfile.objects.filter(code=code).select_related("user").first()
    if doctor is None:
        logger.info(f"No doctor found with code {code}")
        raise DoctorNotFound()

    if doctor.user_id == patient.pk:
        raise BadRequest("You cannot connect to yourself")

    access = DoctorPatientAccess.objects.filter(
        doctor_id=doctor.user_id, patient=patient
    ).first()

    if access is None:
        DoctorPatientAccess.objects.create(doctor_id=doctor.user_id, patient=patient)
        logger.info(f"Created access for patient {patient.pk} to doctor {doctor.user_id}")
        return ConnectionResult(ConnectionResult.CONNECTED, doctor)

    if access.is_active:
        return ConnectionResult(ConnectionResult.ALREADY_CONNECTED, doctor)

    access.is_active = True
    access.granted_at = timezone.now()
    access.save(update_fields=["is_active", "granted_at"])
    logger.info(f"Reactivated access for patient {patient.pk} to doctor {doctor.user_id}")
    return ConnectionResult(ConnectionResult.REACTIVATED, doctor)


def patient_snapshot_for_doctor(doctor, patient_id):
    doctor = require_user(doctor)
    if not patient_id:
        raise BadRequest("Missing patient_id")

    try:
        patient_pk = get_user_model()._meta.pk.to_python(patient_id)
    except ValidationError:
        raise BadRequest("Malformed patient_id") from None

    access = DoctorPatientAccess.objects.filter(
        doctor=doctor, patient_id=patient_pk, is_active=True
    )
    if not access.exists():
        raise Forbidden("No access to this patient")

    snapshot = assemble_snapshot(
        patient_pk,
        record_limit=get_setting("DOCTOR_RECORD_LIMIT"),
        record_fields=DOCTOR_RECORD_FIELDS,
    )
    access.update(last_accessed_at=timezone.now())
    return snapshot


def generate_doctor_document_url(doctor, record_id, request=None):
    """Short-lived URL for a record of a patient the doctor is connected to."""
    doctor = require_user(doctor)
    if not record_id:
        raise BadRequest("Missing record_id")

    record = get_record(record_id)
    access = DoctorPatientAccess.objects.filter(
        doctor=doctor, patient_id=record.user_id, is_active=True
    )
    if not access.exists():
        logger.warning(f"Doctor {doctor.pk} has no access to record {record.pk}")
        raise Forbidden("No access to this patient")

    url = signed_record_url(record, request)
    access.update(last_accessed_at=timezone.now())
    logger.info(f"Generated document URL for doctor {doctor.pk}, record {record.pk}")
    return {
        "url": url,
        "expires_in": get_setting("DOCUMENT_URL_MAX_AGE"),
        "title": record.title,
        "file_type": record.file_type,
    }
