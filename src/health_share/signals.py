from django.dispatch import Signal

# Sent after a shared token was validated and its telemetry recorded.
# sender=AccessToken, token=AccessToken instance
access_granted = Signal()

# Sent when a presented token is refused.
# sender=None, token=first characters of the secret,
# reason="invalid"|"revoked"|"expired"
access_denied = Signal()
