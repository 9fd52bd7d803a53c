import secrets
import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

from health_share.settings import get_setting


MIN_TOKEN_BYTES = 24  # 192 bits


def _gen_token():
    return secrets.token_hex(max(get_setting("TOKEN_BYTES"), MIN_TOKEN_BYTES))


def _gen_doctor_code():
    return secrets.token_hex(4).upper()


class AccessToken(models.Model):
    """A shareable link granting read access to one account's health data.

    The secret is generated with ``secrets.token_hex`` and is unusable once
    ``expires_at`` has passed or ``is_revoked`` has been set. Every successful
    validation bumps ``access_count`` and ``last_accessed_at``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="share_tokens",
    )
    token = models.CharField(max_length=128, default=_gen_token, unique=True)
    label = models.CharField(max_length=255, null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField()
    is_revoked = models.BooleanField(default=False)

    last_accessed_at = models.DateTimeField(null=True, blank=True)
    access_count = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-created_at"]

    def is_expired(self, now=None):
        return self.expires_at <= (now or timezone.now())

    def is_active(self, now=None):
        return not self.is_revoked and not self.is_expired(now)

    def __str__(self):
        return f"{self.label or 'Shared link'} ({self.owner_id})"

    def __repr__(self):
        return f"<AccessToken: {self.label or 'Shared link'} ({self.owner_id})>"


class UserProfile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile"
    )
    display_name = models.CharField(max_length=255, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=32, blank=True)
    location = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    avatar_url = models.URLField(blank=True)
    notification_email_enabled = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.display_name or str(self.user)


class HealthData(models.Model):
    """Summary health facts, one row per account."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="health_data"
    )
    blood_group = models.CharField(max_length=8, blank=True)
    height = models.CharField(max_length=16, blank=True)
    health_allergies = models.TextField(blank=True)
    chronic_diseases = models.TextField(blank=True)
    previous_diseases = models.TextField(blank=True)
    current_medications = models.TextField(blank=True)
    bad_habits = models.TextField(blank=True)
    birth_defects = models.TextField(blank=True)
    emergency_contact_name = models.CharField(max_length=255, blank=True)
    emergency_contact_phone = models.CharField(max_length=32, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "health data"

    def __str__(self):
        return f"Health data of {self.user}"


class HealthRecord(models.Model):
    class Category(models.TextChoices):
        PRESCRIPTION = "prescription"
        LAB_REPORT = "lab_report"
        IMAGING = "imaging"
        DISCHARGE_SUMMARY = "discharge_summary"
        VACCINATION = "vaccination"
        OTHER = "other"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="health_records"
    )
    title = models.CharField(max_length=255)
    category = models.CharField(
        max_length=32, choices=Category.choices, default=Category.OTHER
    )
    description = models.TextField(blank=True)
    provider_name = models.CharField(max_length=255, blank=True)
    record_date = models.DateField(null=True, blank=True)
    file = models.FileField(upload_to="health-records/", blank=True)
    file_type = models.CharField(max_length=100, blank=True)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.title


class AccessNotification(models.Model):
    """Log of owners being told that one of their shared links was opened."""

    LINK_ACCESSED = "link_accessed"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="+"
    )
    token = models.ForeignKey(
        AccessToken,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    notification_type = models.CharField(max_length=32, default=LINK_ACCESSED)
    email_sent_to = models.EmailField(blank=True)
    access_count_at_notification = models.PositiveIntegerField(null=True, blank=True)
    sent_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return f"{self.notification_type} for {self.user}"


class DoctorProfile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="doctor_profile",
    )
    code = models.CharField(max_length=8, default=_gen_doctor_code, unique=True)
    full_name = models.CharField(max_length=255)
    specialty = models.CharField(max_length=255, blank=True)
    avatar_url = models.URLField(blank=True)
    is_verified = models.BooleanField(default=False)

    def __str__(self):
        return self.full_name


class DoctorPatientAccess(models.Model):
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="patient_access"
    )
    patient = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="doctor_access"
    )
    is_active = models.BooleanField(default=True)
    granted_at = models.DateTimeField(default=timezone.now)
    last_accessed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["doctor", "patient"], name="unique_doctor_patient_access"
            )
        ]
        verbose_name_plural = "doctor patient access"

    def __str__(self):
        return f"{self.doctor} -> {self.patient}"
