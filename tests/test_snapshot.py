from datetime import date

from django.contrib.auth import get_user_model
from django.test import TestCase
from health_share.models import HealthData, HealthRecord, UserProfile
from health_share.snapshot import assemble_snapshot


class SnapshotTests(TestCase):
    """Test the read-only snapshot of an owner's data."""

    def setUp(self):
        User = get_user_model()
        self.owner = User.objects.create_user("owner")
        self.other = User.objects.create_user("other")

    def test_empty_account_yields_explicit_absence(self):
        """Missing profile, health data and records should not be errors."""
        snapshot = assemble_snapshot(self.owner.pk)
        self.assertEqual(
            snapshot, {"profile": None, "healthData": None, "records": []}
        )

    def test_profile_and_health_data_included(self):
        UserProfile.objects.create(
            user=self.owner, display_name="Ada", date_of_birth=date(1990, 5, 1)
        )
        HealthData.objects.create(user=self.owner, blood_group="O+")

        snapshot = assemble_snapshot(self.owner.pk)

        self.assertEqual(snapshot["profile"]["display_name"], "Ada")
        self.assertEqual(snapshot["profile"]["date_of_birth"], "1990-05-01")
        self.assertNotIn("notification_email_enabled", snapshot["profile"])
        self.assertEqual(snapshot["healthData"]["blood_group"], "O+")

    def test_records_limited_and_newest_first(self):
        """Only the ten most recent records by record_date should be returned."""
        for day in range(1, 13):
            HealthRecord.objects.create(
                user=self.owner, title=f"Visit {day}", record_date=date(2024, 1, day)
            )

        records = assemble_snapshot(self.owner.pk)["records"]

        self.assertEqual(len(records), 10)
        self.assertEqual(records[0]["title"], "Visit 12")
        self.assertEqual(records[-1]["title"], "Visit 3")
        self.assertEqual(
            set(records[0]), {"id", "title", "category", "record_date", "provider_name"}
        )

    def test_undated_records_sort_last(self):
        HealthRecord.objects.create(user=self.owner, title="Undated")
        HealthRecord.objects.create(
            user=self.owner, title="Dated", record_date=date(2023, 3, 3)
        )

        records = assemble_snapshot(self.owner.pk)["records"]

        self.assertEqual([r["title"] for r in records], ["Dated", "Undated"])

    def test_other_accounts_data_excluded(self):
        UserProfile.objects.create(user=self.other, display_name="Bob")
        HealthRecord.objects.create(user=self.other, title="Not yours")

        snapshot = assemble_snapshot(self.owner.pk)

        self.assertIsNone(snapshot["profile"])
        self.assertEqual(snapshot["records"], [])

    def test_snapshot_does_not_mutate(self):
        record = HealthRecord.objects.create(user=self.owner, title="X")
        assemble_snapshot(self.owner.pk)
        self.assertEqual(HealthRecord.objects.get(pk=record.pk).title, "X")
        self.assertEqual(HealthRecord.objects.count(), 1)

    def test_record_ids_are_strings(self):
        record = HealthRecord.objects.create(user=self.owner, title="X")
        records = assemble_snapshot(self.owner.pk)["records"]
        self.assertEqual(records[0]["id"], str(record.pk))
