from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from ninja_jwt.tokens import AccessToken

from accounts.models import RoleHubUser

pytestmark = pytest.mark.django_db


def test_access_token_belongs_to_user(user: RoleHubUser) -> None:
    out = StringIO()

    call_command("get_jwt", user.username, "--access-only", stdout=out)

    token = AccessToken(out.getvalue().strip())  # type: ignore[arg-type]
    assert token["user_id"] == str(user.pk)


def test_lookup_by_email_is_case_insensitive(user: RoleHubUser) -> None:
    out = StringIO()

    call_command("get_jwt", user.email.upper(), stdout=out)

    assert "Refresh Token:" in out.getvalue()


def test_unknown_user() -> None:
    with pytest.raises(CommandError):
        call_command("get_jwt", "nobody")
