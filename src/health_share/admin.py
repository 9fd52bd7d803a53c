from django.contrib import admin
from django.urls import NoReverseMatch, reverse

from health_share.models import (
    AccessNotification,
    AccessToken,
    DoctorPatientAccess,
    DoctorProfile,
    HealthData,
    HealthRecord,
    UserProfile,
)


@admin.register(AccessToken)
class AccessTokenAdmin(admin.ModelAdmin):
    date_hierarchy = "created_at"
    list_display = (
        "label",
        "owner",
        "status",
        "validation_request",
        "created_at",
        "expires_at",
        "last_accessed_at",
        "access_count",
    )
    list_filter = ("is_revoked",)
    readonly_fields = (
        "created_at",
        "last_accessed_at",
        "access_count",
        "token",
        "validation_request",
    )
    actions = ["revoke_selected"]

    @admin.display(description="Status")
    def status(self, obj):
        if obj.is_revoked:
            return "revoked"
        if obj.is_expired():
            return "expired"
        return "active"

    @admin.display(description="Validation request")
    def validation_request(self, obj):
        try:
            endpoint = reverse("health_share:validate")
        except NoReverseMatch:
            endpoint = "shared/validate/"
        return f'POST {endpoint} {{"token": "{obj.token}"}}'

    @admin.action(description="Revoke selected tokens")
    def revoke_selected(self, request, queryset):
        count = queryset.filter(is_revoked=False).update(is_revoked=True)
        self.message_user(request, f"Revoked {count} token(s).")


@admin.register(HealthRecord)
class HealthRecordAdmin(admin.ModelAdmin):
    list_display = ("title", "user", "category", "record_date", "provider_name")
    list_filter = ("category",)


@admin.register(DoctorPatientAccess)
class DoctorPatientAccessAdmin(admin.ModelAdmin):
    list_display = ("doctor", "patient", "is_active", "granted_at", "last_accessed_at")


admin.site.register(UserProfile)
admin.site.register(HealthData)
admin.site.register(AccessNotification)
admin.site.register(DoctorProfile)
