"""Mint JWT tokens for a user, for local testing of the attendance and checkout endpoints."""

import typing as t

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from ninja_jwt.tokens import RefreshToken


class Command(BaseCommand):
    help = "Print JWT access and refresh tokens for a user, looked up by username or email."

    def add_arguments(self, parser: t.Any) -> None:
        """Add command arguments."""
        parser.add_argument("identifier", type=str, help="Username or email of the user")
        parser.add_argument("--access-only", action="store_true", help="Print only the raw access token")

    def handle(self, *args: t.Any, **options: t.Any) -> None:
        """Generate the tokens."""
        identifier = options["identifier"]
        User = get_user_model()

        lookup = {"email__iexact": identifier} if "@" in identifier else {"username": identifier}
        user = User.objects.filter(**lookup).first()
        if user is None:
            raise CommandError(f'User "{identifier}" does not exist')

        refresh = RefreshToken.for_user(user)
        access = str(refresh.access_token)  # type: ignore[attr-defined]

        if options["access_only"]:
            self.stdout.write(access)
            return

        self.stdout.write(self.style.SUCCESS(f"JWT tokens for {user.username} ({user.pk})"))
        self.stdout.write(self.style.SUCCESS("Access Token:"))
        self.stdout.write(access)
        self.stdout.write(self.style.SUCCESS("Refresh Token:"))
        self.stdout.write(str(refresh))
