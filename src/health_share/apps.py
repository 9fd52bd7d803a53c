from django.apps import AppConfig


class HealthShareConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "health_share"
    verbose_name = "Health data sharing"

    def ready(self):
        # tell owners when one of their shared links gets opened
        from health_share.models import AccessToken
        from health_share.notifications import notify_owner_of_access
        from health_share.signals import access_granted

        access_granted.connect(
            notify_owner_of_access,
            sender=AccessToken,
            dispatch_uid="health_share.notify_owner_of_access",
        )
