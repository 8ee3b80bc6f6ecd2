"""
Request PIN Reset Use Case

Phase 1 of the PIN reset workflow: issue a reset token and mail it.
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from urllib.parse import urlencode

from libs.result import Error, Result, Return
from src.app.services.identity_validator import IdentityValidator
from src.app.services.mail_notifier import IMailNotifier
from src.app.services.rate_limiter import IRateLimiter
from src.app.services.reset_tokens import ResetTokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.app.settings import PinResetSettings
from src.domain.base import utcnow
from .dtos import RequestPinResetResponse
from .email_templates import RESET_PIN_SUBJECT, render_reset_pin_email
from .errors import NEUTRAL_REQUEST_MESSAGE
from .guards import check_rate_limit, record_attempt

logger = logging.getLogger(__name__)


class RequestPinResetUseCase:
    """
    Use case for requesting a PIN reset.

    Business Rules:
    - Email must be an institutional address with a valid enrollment id
    - Rate limit is checked before any lookup or token work
    - No account enumeration: unknown emails get the same response as a
      successfully processed one
    - Unverified accounts are rejected explicitly
    - A new token supersedes any previous one; only its SHA-256 digest and
      expiry (30 minutes by default) are stored, in one compare-and-update
    - The attempt is recorded only after the mail transport accepted the
      message; on delivery failure the stored token is left in place
    """

    def __init__(
        self,
        uow: UnitOfWork,
        rate_limiter: IRateLimiter,
        mail_notifier: IMailNotifier,
        settings: PinResetSettings,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.rate_limiter = rate_limiter
        self.mail_notifier = mail_notifier
        self.settings = settings
        self.clock = clock
        self.identity_validator = IdentityValidator(settings.institution_domain)
        self.token_issuer = ResetTokenIssuer(settings, clock=clock)

    def _neutral_response(self) -> RequestPinResetResponse:
        return RequestPinResetResponse(status="sent", message=NEUTRAL_REQUEST_MESSAGE)

    def _reset_url(self, token: str) -> str:
        return f"{self.settings.app_url.rstrip('/')}/reset-pin?{urlencode({'token': token})}"

    async def execute(self, email: Optional[str]) -> Result[RequestPinResetResponse]:
        """
        Execute request PIN reset use case.

        Args:
            email: Institutional email address

        Returns:
            Result with the neutral response, or Error

        Errors:
            - EMAIL_REQUIRED, INVALID_EMAIL_DOMAIN, INVALID_ENROLLMENT_ID
            - RATE_LIMITED: too many completed requests in the window
            - EMAIL_NOT_VERIFIED: account exists but email not verified
            - EMAIL_DELIVERY_FAILED: mail transport rejected or timed out
            - RATE_LIMITER_UNAVAILABLE: limiter store unreachable
        """
        validation = self.identity_validator.validate(email)
        if validation.is_err():
            return Return.err(validation.error)
        email = validation.value.email

        rate_limit = await check_rate_limit(self.rate_limiter, email, self.clock())
        if rate_limit.is_err():
            return Return.err(rate_limit.error)

        async with self.uow:
            user = await self.uow.users.get_by_email(email)

            if user is None:
                logger.info("PIN reset requested for an unknown account")
                return Return.ok(self._neutral_response())

            if not user.is_verified:
                return Return.err(
                    Error("EMAIL_NOT_VERIFIED", "Please verify your email first")
                )

            user_id = user.id
            issued = self.token_issuer.issue(user_id)

            stored = await self.uow.users.store_reset_token(
                user_id, user.reset_token_hash, issued.token_hash, issued.expires_at
            )
            if not stored:
                # A concurrent request replaced the token first; its mail wins
                logger.info(f"Concurrent PIN reset for user {user_id}, keeping the newer token")
                return Return.ok(self._neutral_response())

            await self.uow.commit()

        html, text = render_reset_pin_email(
            self._reset_url(issued.token),
            self.settings.token_ttl_minutes,
            self.settings.app_name,
        )
        sent = await self.mail_notifier.send(email, RESET_PIN_SUBJECT, html, text)
        if not sent:
            logger.error(f"Reset email for user {user_id} was not delivered")
            return Return.err(
                Error("EMAIL_DELIVERY_FAILED", "Failed to send reset email")
            )

        await record_attempt(self.rate_limiter, email)

        return Return.ok(self._neutral_response())
