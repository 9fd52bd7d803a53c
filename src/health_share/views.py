import functools
import json
import logging

from django.db import DatabaseError
from django.http import FileResponse, Http404, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from health_share import doctors, documents, snapshot, tokens
from health_share.exceptions import (
    BadRequest,
    InternalError,
    RecordNotFound,
    ShareError,
    StorageError,
)

logger = logging.getLogger(__name__)


def _error_response(error):
    return JsonResponse(error.as_dict(), status=error.status)


def json_endpoint(view):
    """Turn ShareError and database failures raised by ``view`` into JSON."""

    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except ShareError as e:
            return _error_response(e)
        except DatabaseError:
            logger.exception(f"Database failure while serving {request.path}")
            return _error_response(InternalError())

    return wrapper


def _json_body(request):
    if not request.body:
        return {}
    try:
        body = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise BadRequest("Request body must be JSON") from None
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object")
    return body


@csrf_exempt
@require_http_methods(["POST"])
@json_endpoint
def validate_shared_token(request):
    body = _json_body(request)
    token = tokens.validate_token(body.get("token"))
    payload = {"expires_at": token.expires_at.isoformat()}
    payload.update(snapshot.assemble_snapshot(token.owner_id))
    return JsonResponse(payload)


@csrf_exempt
@require_http_methods(["POST"])
@json_endpoint
def shared_document_url(request):
    body = _json_body(request)
    if not body.get("token") or not body.get("record_id"):
        raise BadRequest("Token and record_id are required")
    return JsonResponse(
        documents.generate_document_url(body["token"], body["record_id"], request)
    )


@require_http_methods(["GET"])
def download_document(request, signed):
    try:
        record = documents.resolve_signed_record(signed)
    except RecordNotFound as e:
        raise Http404(e.message)
    try:
        handle = record.file.open("rb")
    except OSError:
        logger.exception(f"Could not open stored document for record {record.pk}")
        return _error_response(StorageError())
    return FileResponse(handle, filename=record.file.name.rsplit("/", 1)[-1])


@require_http_methods(["GET", "POST"])
@json_endpoint
def token_collection(request):
    if request.method == "GET":
        return JsonResponse(
            {"tokens": [tokens.serialize_token(t) for t in tokens.tokens_for(request.user)]}
        )

    body = _json_body(request)
    token = tokens.issue_token(
        request.user,
        expires_in_hours=body.get("expires_in_hours"),
        label=body.get("label"),
    )
    return JsonResponse(tokens.serialize_token(token), status=201)


@require_http_methods(["POST"])
@json_endpoint
def revoke_token(request, token_id):
    token = tokens.revoke_token(token_id, request.user)
    if token is None:
        return HttpResponse(status=204)
    return JsonResponse(tokens.serialize_token(token))


@require_http_methods(["DELETE"])
@json_endpoint
def delete_token(request, token_id):
    tokens.delete_token(token_id, request.user)
    return HttpResponse(status=204)


@require_http_methods(["POST"])
@json_endpoint
def connect_to_doctor(request):
    body = _json_body(request)
    result = doctors.connect_to_doctor(request.user, body.get("doctor_code"))
    status = 409 if result.status == result.ALREADY_CONNECTED else 200
    return JsonResponse(result.as_dict(), status=status)


@require_http_methods(["POST"])
@json_endpoint
def patient_data_for_doctor(request):
    body = _json_body(request)
    return JsonResponse(
        doctors.patient_snapshot_for_doctor(request.user, body.get("patient_id"))
    )


@require_http_methods(["POST"])
@json_endpoint
def doctor_document_url(request):
    body = _json_body(request)
    return JsonResponse(
        doctors.generate_doctor_document_url(
            request.user, body.get("record_id"), request
        )
    )
