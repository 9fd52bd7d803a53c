from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from health_share.exceptions import ShareError
from health_share.tokens import issue_token


class Command(BaseCommand):
    help = "Issue a shareable health data link for a user"

    def add_arguments(self, parser):
        parser.add_argument("username")
        parser.add_argument("--hours", type=float, default=None)
        parser.add_argument("--label", default=None)

    def handle(self, *args, **options):
        User = get_user_model()
        try:
            owner = User.objects.get(**{User.USERNAME_FIELD: options["username"]})
        except User.DoesNotExist:
            raise CommandError(f"No user named {options['username']!r}")

        try:
            token = issue_token(owner, options["hours"], options["label"])
        except ShareError as e:
            raise CommandError(e.message)

        self.stdout.write(f"{token.token} (expires {token.expires_at.isoformat()})")
