"""
Confirm PIN Reset Use Case

Phase 2 of the PIN reset workflow: exchange a reset token for a new PIN.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from libs.result import Error, Result, Return
from src.app.services.pin_hasher import PinHasher
from src.app.services.rate_limiter import IRateLimiter
from src.app.services.reset_tokens import INVALID_TOKEN_ERROR, ResetTokenVerifier
from src.app.services.unit_of_work import UnitOfWork
from src.app.settings import PinResetSettings
from src.domain.base import utcnow
from .dtos import ConfirmPinResetResponse
from .guards import check_rate_limit, record_attempt

logger = logging.getLogger(__name__)


class ConfirmPinResetUseCase:
    """
    Use case for confirming a PIN reset.

    Business Rules:
    - Token and new PIN are both required
    - PIN is digits only, within the configured length bounds
    - Token must decode, match the digest stored on its owner and expire
      strictly after now; all failures share one generic error
    - Rate limit is keyed on the token owner's email
    - New PIN hash is written and both token fields cleared in one
      guarded update, so a token can be used once
    """

    def __init__(
        self,
        uow: UnitOfWork,
        rate_limiter: IRateLimiter,
        settings: PinResetSettings,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.rate_limiter = rate_limiter
        self.settings = settings
        self.clock = clock
        self.token_verifier = ResetTokenVerifier(settings, clock=clock)
        self.pin_hasher = PinHasher(settings.bcrypt_rounds)

    def _validate_pin(self, pin: str) -> Result[None]:
        min_length = self.settings.pin_min_length
        max_length = self.settings.pin_max_length
        if not pin.isascii() or not pin.isdigit() or not min_length <= len(pin) <= max_length:
            return Return.err(
                Error(
                    "INVALID_PIN",
                    f"PIN must be {min_length} to {max_length} digits",
                )
            )
        return Return.ok(None)

    async def execute(
        self, token: Optional[str], new_pin: Optional[str]
    ) -> Result[ConfirmPinResetResponse]:
        """
        Execute confirm PIN reset use case.

        Args:
            token: Reset token from the emailed link
            new_pin: New numeric PIN

        Returns:
            Result with confirmation status, or Error

        Errors:
            - MISSING_FIELDS: token or new PIN missing
            - INVALID_PIN: PIN format rejected
            - INVALID_TOKEN: token invalid, superseded, used or expired
            - RATE_LIMITED: owner exceeded the reset window
            - PIN_HASH_FAILED: hashing the new PIN failed
            - RATE_LIMITER_UNAVAILABLE: limiter store unreachable
        """
        if not token or not new_pin:
            return Return.err(
                Error("MISSING_FIELDS", "Token and new PIN are required")
            )

        pin_validation = self._validate_pin(new_pin)
        if pin_validation.is_err():
            return Return.err(pin_validation.error)

        async with self.uow:
            verification = await self.token_verifier.verify(token, self.uow.users)
            if verification.is_err():
                return Return.err(verification.error)

            user = verification.value
            user_id = user.id
            email = user.email
            token_hash = user.reset_token_hash

            rate_limit = await check_rate_limit(self.rate_limiter, email, self.clock())
            if rate_limit.is_err():
                return Return.err(rate_limit.error)

            hashed = self.pin_hasher.hash(new_pin)
            if hashed.is_err():
                return Return.err(hashed.error)

            completed = await self.uow.users.complete_pin_reset(
                user_id, token_hash, hashed.value, self.clock()
            )
            if not completed:
                # Used or superseded between verification and update
                return Return.err(INVALID_TOKEN_ERROR)

            await self.uow.commit()

        await record_attempt(self.rate_limiter, email)
        logger.info(f"PIN reset completed for user {user_id}")

        return Return.ok(
            ConfirmPinResetResponse(status="success", message="PIN successfully reset")
        )
