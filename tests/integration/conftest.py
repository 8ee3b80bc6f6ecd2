import bcrypt
import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from limits.aio.storage import MemoryStorage
from src.adapter.services.limits_rate_limiter import LimitsRateLimiter
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.settings import PinResetSettings
from src.depends import (
    get_mail_notifier,
    get_rate_limiter,
    get_reset_settings,
    get_unit_of_work,
)
from src.domain.entities import User
from tests.fixtures.json_loader import TestDataLoader
from tests.fixtures.mail import RecordingMailNotifier


@pytest.fixture
def test_data():
    return TestDataLoader()


@pytest.fixture
def reset_settings():
    return PinResetSettings(
        institution_domain="curaj.ac.in",
        app_url="http://test",
        token_secret="integration-test-signing-secret-0123",
        rate_limit_max_attempts=3,
        rate_limit_window_seconds=3600,
        bcrypt_rounds=4,
    )


@pytest.fixture
def rate_limiter(reset_settings):
    return LimitsRateLimiter(
        MemoryStorage(),
        reset_settings.rate_limit_max_attempts,
        reset_settings.rate_limit_window_seconds,
    )


@pytest.fixture
def mail_notifier():
    return RecordingMailNotifier()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest.fixture
def create_user(db_session):
    """Insert a user from test data; returns (user_id, email)"""

    async def _create(data: dict):
        user = User(
            email=data["email"],
            enrollment_id=data["enrollment_id"],
            pin_hash=bcrypt.hashpw(data["pin"].encode(), bcrypt.gensalt(4)).decode(),
            is_verified=data["is_verified"],
        )
        async with SqlAlchemyUnitOfWork(db_session) as uow:
            user = await uow.users.create(user)
            user_id, email = user.id, user.email
            await uow.commit()
        return user_id, email

    return _create


@pytest_asyncio.fixture
async def client(db_session, reset_settings, rate_limiter, mail_notifier):
    from httpx import ASGITransport
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_reset_settings] = lambda: reset_settings
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_mail_notifier] = lambda: mail_notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
