from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, override_settings
from health_share.models import AccessNotification, UserProfile
from health_share.tokens import issue_token, validate_token


class AccessNotificationTests(TestCase):
    """Test owners being told when their shared links are opened."""

    def setUp(self):
        self.owner = get_user_model().objects.create_user("owner", "owner@example.com")
        self.token = issue_token(self.owner, expires_in_hours=1, label="Cardiology")

    def test_notification_recorded_and_mailed(self):
        UserProfile.objects.create(user=self.owner, display_name="Ada")

        validate_token(self.token.token)

        notification = AccessNotification.objects.get()
        self.assertEqual(notification.token_id, self.token.pk)
        self.assertEqual(notification.email_sent_to, "owner@example.com")
        self.assertEqual(notification.access_count_at_notification, 1)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["owner@example.com"])
        self.assertIn("Cardiology", mail.outbox[0].body)
        self.assertIn("Hi Ada", mail.outbox[0].body)

    def test_no_profile_skips_notification(self):
        validate_token(self.token.token)

        self.assertFalse(AccessNotification.objects.exists())
        self.assertEqual(len(mail.outbox), 0)

    def test_disabled_notifications_skip(self):
        UserProfile.objects.create(user=self.owner, notification_email_enabled=False)

        validate_token(self.token.token)

        self.assertFalse(AccessNotification.objects.exists())
        self.assertEqual(len(mail.outbox), 0)

    def test_owner_without_email_records_only(self):
        self.owner.email = ""
        self.owner.save()
        UserProfile.objects.create(user=self.owner)

        validate_token(self.token.token)

        self.assertEqual(AccessNotification.objects.get().email_sent_to, "")
        self.assertEqual(len(mail.outbox), 0)

    @override_settings(HEALTH_SHARE={"NOTIFY_ON_ACCESS": False})
    def test_setting_disables_notifications(self):
        UserProfile.objects.create(user=self.owner)

        validate_token(self.token.token)

        self.assertFalse(AccessNotification.objects.exists())

    @override_settings(HEALTH_SHARE={"NOTIFICATION_FROM_EMAIL": "alerts@example.com"})
    def test_custom_sender(self):
        UserProfile.objects.create(user=self.owner)

        validate_token(self.token.token)

        self.assertEqual(mail.outbox[0].from_email, "alerts@example.com")
