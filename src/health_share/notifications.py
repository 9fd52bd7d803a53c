import logging

from django.conf import settings
from django.core.mail import send_mail

from health_share.models import AccessNotification, UserProfile
from health_share.settings import get_setting

logger = logging.getLogger(__name__)


def notify_owner_of_access(sender, token, **kwargs):
    """Tell a token's owner that their shared link has just been opened.

    Connected to ``access_granted``. The notification is always recorded;
    the email only goes out when the owner has an address on file.
    """
    if not get_setting("NOTIFY_ON_ACCESS"):
        return None

    profile = UserProfile.objects.filter(user_id=token.owner_id).first()
    if profile is None:
        logger.debug(f"No profile for user {token.owner_id}, skipping notification")
        return None
    if not profile.notification_email_enabled:
        logger.debug(f"Notifications disabled for user {token.owner_id}")
        return None

    owner = token.owner
    notification = AccessNotification.objects.create(
        user=owner,
        token=token,
        notification_type=AccessNotification.LINK_ACCESSED,
        email_sent_to=owner.email or "",
        access_count_at_notification=token.access_count,
    )

    if not owner.email:
        logger.info(f"User {owner.pk} has no email, notification recorded only")
        return notification

    name = profile.display_name or "there"
    label = token.label or "your shared health data link"
    send_mail(
        subject="Your shared health data was accessed",
        message=(
            f"Hi {name},\n\n"
            f"Someone just opened {label}. It has now been viewed "
            f"{token.access_count} time(s).\n\n"
            "If you did not expect this, revoke the link from your dashboard."
        ),
        from_email=get_setting("NOTIFICATION_FROM_EMAIL") or settings.DEFAULT_FROM_EMAIL,
        recipient_list=[owner.email],
    )
    logger.info(f"Sent access notification for token {token.pk} to user {owner.pk}")
    return notification
