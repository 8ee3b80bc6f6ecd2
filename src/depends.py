from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from limits.storage import storage_from_string
from config import ApplicationConfig
from src.adapter.services.limits_rate_limiter import LimitsRateLimiter
from src.adapter.services.smtp_mail_notifier import SmtpMailNotifier
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.mail_notifier import IMailNotifier
from src.app.services.rate_limiter import IRateLimiter
from src.app.settings import MailSettings, PinResetSettings

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


@lru_cache
def get_reset_settings() -> PinResetSettings:
    """
    Raises pydantic.ValidationError on first use if APP_URL or
    RESET_TOKEN_SECRET is not configured.
    """
    return PinResetSettings(
        institution_domain=ApplicationConfig.INSTITUTION_DOMAIN,
        app_name=ApplicationConfig.MAIL_FROM_NAME,
        app_url=ApplicationConfig.APP_URL,
        token_secret=ApplicationConfig.RESET_TOKEN_SECRET,
        token_ttl_minutes=ApplicationConfig.RESET_TOKEN_TTL_MINUTES,
        rate_limit_max_attempts=ApplicationConfig.RATE_LIMIT_MAX_ATTEMPTS,
        rate_limit_window_seconds=ApplicationConfig.RATE_LIMIT_WINDOW_SECONDS,
        pin_min_length=ApplicationConfig.PIN_MIN_LENGTH,
        pin_max_length=ApplicationConfig.PIN_MAX_LENGTH,
        bcrypt_rounds=ApplicationConfig.BCRYPT_ROUNDS,
    )


@lru_cache
def get_mail_settings() -> MailSettings:
    return MailSettings(
        host=ApplicationConfig.MAIL_HOST,
        port=ApplicationConfig.MAIL_PORT,
        user=ApplicationConfig.MAIL_USER,
        password=ApplicationConfig.MAIL_PASSWORD,
        from_name=ApplicationConfig.MAIL_FROM_NAME,
        timeout_seconds=ApplicationConfig.MAIL_TIMEOUT_SECONDS,
    )


@lru_cache
def _build_rate_limiter() -> IRateLimiter:
    settings = get_reset_settings()
    if ApplicationConfig.CACHE_BACKEND == "memory":
        storage_uri = "async+memory://"
    else:
        storage_uri = f"async+{ApplicationConfig.REDIS_URL}"
    return LimitsRateLimiter(
        storage_from_string(storage_uri, wrap_exceptions=True),
        settings.rate_limit_max_attempts,
        settings.rate_limit_window_seconds,
    )


def get_rate_limiter() -> IRateLimiter:
    return _build_rate_limiter()


def get_mail_notifier(
    settings: MailSettings = Depends(get_mail_settings),
) -> IMailNotifier:
    return SmtpMailNotifier(settings)
