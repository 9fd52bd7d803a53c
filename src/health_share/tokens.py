import logging
import math
from datetime import timedelta

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from health_share.exceptions import (
    BadRequest,
    Forbidden,
    TokenExpired,
    TokenNotFound,
    TokenRevoked,
    Unauthenticated,
)
from health_share.models import AccessToken
from health_share.settings import get_setting
from health_share.signals import access_denied, access_granted

logger = logging.getLogger(__name__)


def _secret_prefix(secret):
    return secret[:10] + "..."


def require_user(user):
    if user is None or not getattr(user, "is_authenticated", False):
        raise Unauthenticated()
    return user


def issue_token(owner, expires_in_hours=None, label=None):
    """Create a shareable link for ``owner`` valid for ``expires_in_hours``.

    A zero-hour token is accepted and is expired from the moment it exists.
    """
    owner = require_user(owner)

    if expires_in_hours is None:
        expires_in_hours = get_setting("DEFAULT_EXPIRES_IN_HOURS")
    try:
        hours = float(expires_in_hours)
    except (TypeError, ValueError):
        raise BadRequest("expires_in_hours must be a number") from None
    if (
        not math.isfinite(hours)
        or hours < 0
        or hours > get_setting("MAX_EXPIRES_IN_HOURS")
    ):
        raise BadRequest(
            f"expires_in_hours must be between 0 and {get_setting('MAX_EXPIRES_IN_HOURS')}"
        )

    now = timezone.now()
    token = AccessToken.objects.create(
        owner=owner,
        label=label or None,
        created_at=now,
        expires_at=now + timedelta(hours=hours),
    )
    logger.info(f"Issued shared token {token.pk} for user {owner.pk}")
    return token


def _record_access(token):
    """Bump the access telemetry of ``token``.

    Failures are logged and swallowed: the caller has already been told the
    token is valid.
    """
    now = timezone.now()
    try:
        with transaction.atomic():
            AccessToken.objects.filter(pk=token.pk).update(
                last_accessed_at=now, access_count=F("access_count") + 1
            )
    except DatabaseError:
        logger.exception(f"Failed to record access telemetry for token {token.pk}")
        return
    token.last_accessed_at = now
    token.access_count += 1


def _denied(secret, error):
    logger.info(f"Access denied for token {_secret_prefix(secret)}: {error.kind}")
    access_denied.send(sender=None, token=_secret_prefix(secret), reason=error.kind)
    return error


def validate_token(secret):
    """Return the usable AccessToken matching ``secret``.

    Raises TokenNotFound, TokenRevoked or TokenExpired, checked in that
    order. Access telemetry is recorded on success.
    """
    if not secret or not isinstance(secret, str):
        raise BadRequest("Token is required")

    try:
        token = AccessToken.objects.get(token=secret)
    except AccessToken.DoesNotExist:
        raise _denied(secret, TokenNotFound()) from None

    if token.is_revoked:
        raise _denied(secret, TokenRevoked())

    if token.is_expired():
        raise _denied(secret, TokenExpired(expires_at=token.expires_at))

    _record_access(token)

    for receiver, response in access_granted.send_robust(
        sender=AccessToken, token=token
    ):
        if isinstance(response, Exception):
            logger.error(
                f"access_granted receiver {receiver!r} failed for token {token.pk}: {response}"
            )

    logger.debug(f"Access granted for token {token.pk} (user {token.owner_id})")
    return token


def _owned_token(token_id, requester):
    """Fetch ``token_id`` for its owner, or None when it does not exist."""
    requester = require_user(requester)
    try:
        token = AccessToken.objects.get(pk=token_id)
    except (AccessToken.DoesNotExist, ValidationError):
        return None
    if token.owner_id != requester.pk:
        raise Forbidden("Only the owner can manage this token")
    return token


def revoke_token(token_id, requester):
    token = _owned_token(token_id, requester)
    if token is None or token.is_revoked:
        return token

    AccessToken.objects.filter(pk=token.pk).update(is_revoked=True)
    token.is_revoked = True
    logger.info(f"Revoked shared token {token.pk}")
    return token


def delete_token(token_id, requester):
    token = _owned_token(token_id, requester)
    if token is None:
        return False

    token.delete()
    logger.info(f"Deleted shared token {token_id}")
    return True


def tokens_for(owner):
    owner = require_user(owner)
    return list(AccessToken.objects.filter(owner=owner).order_by("-created_at"))


def serialize_token(token, now=None):
    now = now or timezone.now()
    return {
        "id": str(token.pk),
        "token": token.token,
        "label": token.label,
        "created_at": token.created_at.isoformat(),
        "expires_at": token.expires_at.isoformat(),
        "last_accessed_at": (
            token.last_accessed_at.isoformat() if token.last_accessed_at else None
        ),
        "access_count": token.access_count,
        "is_revoked": token.is_revoked,
        "is_expired": token.is_expired(now),
        "is_active": token.is_active(now),
    }
