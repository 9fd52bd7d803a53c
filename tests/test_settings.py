from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from django.utils import timezone
from health_share.models import HealthRecord
from health_share.settings import get_setting
from health_share.snapshot import assemble_snapshot
from health_share.tokens import issue_token


class SettingsTests(TestCase):
    """Test HEALTH_SHARE settings integration."""

    def setUp(self):
        self.owner = get_user_model().objects.create_user("owner")

    def test_no_health_share_setting_uses_defaults(self):
        """Defaults should apply when HEALTH_SHARE is not set."""
        self.assertEqual(get_setting("TOKEN_BYTES"), 24)
        self.assertEqual(get_setting("DEFAULT_EXPIRES_IN_HOURS"), 24)
        self.assertEqual(get_setting("SNAPSHOT_RECORD_LIMIT"), 10)
        self.assertEqual(get_setting("DOCUMENT_URL_MAX_AGE"), 300)
        self.assertTrue(get_setting("NOTIFY_ON_ACCESS"))

    @override_settings(HEALTH_SHARE={"TOKEN_BYTES": 32})
    def test_custom_token_bytes(self):
        """TOKEN_BYTES should control the secret length."""
        token = issue_token(self.owner, expires_in_hours=1)
        self.assertEqual(len(token.token), 64)

    @override_settings(HEALTH_SHARE={"DEFAULT_EXPIRES_IN_HOURS": 2})
    def test_custom_default_duration(self):
        before = timezone.now()
        token = issue_token(self.owner)
        self.assertLess(
            abs((token.expires_at - (before + timedelta(hours=2))).total_seconds()), 1
        )

    @override_settings(HEALTH_SHARE={"SNAPSHOT_RECORD_LIMIT": 2})
    def test_custom_record_limit(self):
        for i in range(4):
            HealthRecord.objects.create(user=self.owner, title=f"R{i}")
        self.assertEqual(len(assemble_snapshot(self.owner.pk)["records"]), 2)

    @override_settings(HEALTH_SHARE={"MAX_EXPIRES_IN_HOURS": 1000})
    def test_partial_override_keeps_other_defaults(self):
        self.assertEqual(get_setting("MAX_EXPIRES_IN_HOURS"), 1000)
        self.assertEqual(get_setting("TOKEN_BYTES"), 24)

    @override_settings(HEALTH_SHARE={"TOKEN_BYTES": 8})
    def test_token_bytes_never_below_192_bits(self):
        """A too small TOKEN_BYTES should be raised to 24 bytes."""
        token = issue_token(self.owner, expires_in_hours=1)
        self.assertEqual(len(token.token), 48)
