class ShareError(Exception):
    """Base class for every failure surfaced to a caller of the sharing API.

    Each subclass carries a machine-readable ``kind`` and the HTTP status the
    views answer with. ``message`` defaults to a human-readable description
    of the kind but can be overridden per raise.
    """

    kind = "internal"
    status = 500
    default_message = "Internal server error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_dict(self):
        return {"error": self.kind, "message": self.message}


class BadRequest(ShareError):
    kind = "bad_request"
    status = 400
    default_message = "Malformed request"


class Unauthenticated(ShareError):
    kind = "unauthenticated"
    status = 401
    default_message = "Authentication required"


class TokenNotFound(ShareError):
    kind = "invalid"
    status = 404
    default_message = "Token not found"


class TokenRevoked(ShareError):
    kind = "revoked"
    status = 403
    default_message = "Access has been revoked"


class TokenExpired(ShareError):
    kind = "expired"
    status = 403
    default_message = "Token has expired"

    def __init__(self, message=None, expires_at=None):
        super().__init__(message)
        self.expires_at = expires_at

    def as_dict(self):
        payload = super().as_dict()
        if self.expires_at is not None:
            payload["expires_at"] = self.expires_at.isoformat()
        return payload


class Forbidden(ShareError):
    kind = "forbidden"
    status = 403
    default_message = "Not allowed to act on this resource"


class RecordNotOwned(Forbidden):
    kind = "unauthorized"
    default_message = "Not authorized to access this record"


class RecordNotFound(ShareError):
    kind = "not_found"
    status = 404
    default_message = "Record not found"


class DoctorNotFound(ShareError):
    kind = "not_found"
    status = 404
    default_message = "No doctor found with this ID"


class StorageError(ShareError):
    kind = "storage_error"
    status = 500
    default_message = "Failed to generate document URL"


class InternalError(ShareError):
    pass
