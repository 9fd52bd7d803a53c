import logging

from django.core import signing
from django.core.exceptions import ValidationError
from django.urls import reverse

from health_share.exceptions import RecordNotFound, RecordNotOwned, StorageError
from health_share.models import HealthRecord
from health_share.settings import get_setting
from health_share.tokens import validate_token

logger = logging.getLogger(__name__)

SIGNING_SALT = "health_share.documents"


def _signer():
    return signing.TimestampSigner(salt=SIGNING_SALT)


def get_record(record_id):
    try:
        return HealthRecord.objects.get(pk=record_id)
    except (HealthRecord.DoesNotExist, ValidationError):
        raise RecordNotFound() from None


def signed_record_url(record, request=None):
    """Return a URL serving ``record``'s file for DOCUMENT_URL_MAX_AGE seconds."""
    if not record.file:
        raise StorageError("Record has no stored document")
    try:
        exists = record.file.storage.exists(record.file.name)
    except OSError:
        logger.exception(f"Storage lookup failed for record {record.pk}")
        raise StorageError() from None
    if not exists:
        logger.error(f"Stored document missing for record {record.pk}")
        raise StorageError()

    signed = _signer().sign(str(record.pk))
    url = reverse("health_share:document", args=[signed])
    if request is not None:
        url = request.build_absolute_uri(url)
    return url


def generate_document_url(secret, record_id, request=None):
    token = validate_token(secret)

    record = get_record(record_id)
    if record.user_id != token.owner_id:
        logger.warning(
            f"Token {token.pk} asked for record {record.pk} owned by another user"
        )
        raise RecordNotOwned()

    url = signed_record_url(record, request)
    logger.info(f"Generated document URL for record {record.pk}")
    return {
        "url": url,
        "expires_in": get_setting("DOCUMENT_URL_MAX_AGE"),
        "title": record.title,
    }


def resolve_signed_record(signed):
    """Return the record behind a signed document URL.

    Raises RecordNotFound for tampered, expired or dangling signatures.
    """
    try:
        record_id = _signer().unsign(signed, max_age=get_setting("DOCUMENT_URL_MAX_AGE"))
    except signing.SignatureExpired:
        logger.info("Expired document URL presented")
        raise RecordNotFound("Document link has expired") from None
    except signing.BadSignature:
        logger.info("Tampered document URL presented")
        raise RecordNotFound() from None
    return get_record(record_id)
