from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.services.rate_limiter import RateLimitDecision
from src.app.settings import PinResetSettings
from tests.fixtures.clock import NOW_TS


@pytest.fixture
def reset_settings():
    return PinResetSettings(
        institution_domain="curaj.ac.in",
        app_url="https://blind.curaj.test",
        token_secret="unit-test-signing-secret-0123456789",
        bcrypt_rounds=4,
    )


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock()
    uow.users.get_by_id = AsyncMock()
    uow.users.store_reset_token = AsyncMock(return_value=True)
    uow.users.complete_pin_reset = AsyncMock(return_value=True)
    return uow


@pytest.fixture
def mock_rate_limiter():
    limiter = MagicMock()
    limiter.check = AsyncMock(return_value=RateLimitDecision(allowed=True, reset_at=NOW_TS + 3600))
    limiter.record = AsyncMock()
    return limiter


@pytest.fixture
def mock_mail_notifier():
    notifier = MagicMock()
    notifier.send = AsyncMock(return_value=True)
    return notifier
