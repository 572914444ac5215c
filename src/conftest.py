import secrets
import string
import typing as t
from datetime import datetime, time, timedelta

import faker
import pytest
from django.core.cache import cache
from django.test.client import Client
from django.utils import timezone
from ninja_jwt.tokens import RefreshToken
from pytest import MonkeyPatch

from accounts.models import RoleHubUser


@pytest.fixture(autouse=True)
def increase_rate_limit(monkeypatch: MonkeyPatch) -> None:
    """Increase the rate limits for write and payment throttles to allow testing."""
    monkeypatch.setattr("common.throttling.WriteThrottle.rate", "1000/min")
    monkeypatch.setattr("common.throttling.PaymentThrottle.rate", "1000/min")


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously.

    This ensures that Celery tasks run immediately in the same process,
    allowing tests to verify their side effects without async complications.
    """
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


@pytest.fixture(autouse=True)
def clear_cache() -> None:
    """Clear the cache before each test, throttle history lives there."""
    cache.clear()


@pytest.fixture(autouse=True)
def payment_settings(settings: t.Any) -> None:
    """Deterministic payment settings."""
    settings.MERCADOPAGO_ACCESS_TOKEN = "TEST-access-token"
    settings.MERCADOPAGO_WEBHOOK_SECRET = ""
    settings.MERCADOPAGO_NOTIFICATION_URL = ""
    settings.MERCADOPAGO_SANDBOX = True
    settings.FRONTEND_BASE_URL = "https://rolehub.test"


class RoleHubUserFactory:
    """Factory for creating RoleHubUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> RoleHubUser:
        username = kwargs.pop(
            "username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)) + "@user.test"
        )
        email = kwargs.pop("email", username + ("@test.com" if "@" not in username else ""))
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        preferred_name = kwargs.pop("preferred_name", f"{first_name} {last_name}")
        return RoleHubUser.objects.create_user(
            username=username,
            email=email,
            password=password,
            preferred_name=preferred_name,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> RoleHubUser:
        return self.create_user(**kwargs)


@pytest.fixture
def rolehub_user_factory() -> RoleHubUserFactory:
    return RoleHubUserFactory()


@pytest.fixture
def user(rolehub_user_factory: RoleHubUserFactory) -> RoleHubUser:
    return rolehub_user_factory(username="attendee@user.test")


@pytest.fixture
def other_user(rolehub_user_factory: RoleHubUserFactory) -> RoleHubUser:
    return rolehub_user_factory(username="other@user.test")


@pytest.fixture
def organizer(rolehub_user_factory: RoleHubUserFactory) -> RoleHubUser:
    return rolehub_user_factory(username="organizer@user.test")


def auth_client(user: RoleHubUser) -> Client:
    """API client authenticated with a JWT for the given user."""
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


@pytest.fixture
def user_client(user: RoleHubUser) -> Client:
    return auth_client(user)


@pytest.fixture
def other_user_client(other_user: RoleHubUser) -> Client:
    return auth_client(other_user)


@pytest.fixture
def organizer_client(organizer: RoleHubUser) -> Client:
    return auth_client(organizer)


@pytest.fixture
def next_week() -> datetime:
    today = timezone.now()
    same_time_next_week = today + timedelta(days=7)
    noon = time(hour=12, minute=0)
    return timezone.make_aware(
        datetime.combine(same_time_next_week.date(), noon),
        timezone.get_current_timezone(),
    )
