"""
Reset token issuance and verification.

A reset token is an HS256 JWT carrying the owning user id (sub) and a
random jti, so two tokens for the same user never collide and the owner
is recoverable without a lookup table. The expiry lives on the user
record (reset_token_expiry) and is the only expiry that is checked.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Callable
from uuid import UUID

from jose import JWTError, jwt
from pydantic import BaseModel

from libs.result import Error, Result, Return
from src.app.repositories.user_repository import IUserRepository
from src.app.settings import PinResetSettings
from src.domain.base import utcnow
from src.domain.entities import User

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"
TOKEN_PURPOSE = "pin_reset"

INVALID_TOKEN_ERROR = Error("INVALID_TOKEN", "Invalid or expired reset token")


def hash_reset_token(token: str) -> str:
    """SHA-256 hex digest stored in place of the token itself"""
    return hashlib.sha256(token.encode()).hexdigest()


class IssuedResetToken(BaseModel):
    token: str
    token_hash: str
    expires_at: datetime


class ResetTokenIssuer:
    def __init__(self, settings: PinResetSettings, clock: Callable[[], datetime] = utcnow):
        self.secret = settings.token_secret
        self.ttl = timedelta(minutes=settings.token_ttl_minutes)
        self.clock = clock

    def issue(self, user_id: UUID) -> IssuedResetToken:
        """
        Create a new reset token for user_id.

        The caller is responsible for persisting token_hash and expires_at
        onto the user record in a single update.
        """
        issued_at = self.clock()
        payload = {
            "sub": str(user_id),
            "purpose": TOKEN_PURPOSE,
            "jti": secrets.token_urlsafe(16),
            "iat": int(issued_at.replace(tzinfo=UTC).timestamp()),
        }
        token = jwt.encode(payload, self.secret, algorithm=TOKEN_ALGORITHM)
        return IssuedResetToken(
            token=token,
            token_hash=hash_reset_token(token),
            expires_at=issued_at + self.ttl,
        )


class ResetTokenVerifier:
    def __init__(self, settings: PinResetSettings, clock: Callable[[], datetime] = utcnow):
        self.secret = settings.token_secret
        self.clock = clock

    def decode_user_id(self, token: str) -> Result[UUID]:
        try:
            # exp is not part of the token; the stored expiry is authoritative
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[TOKEN_ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as e:
            logger.info(f"Rejected reset token: {e}")
            return Return.err(INVALID_TOKEN_ERROR)

        if payload.get("purpose") != TOKEN_PURPOSE:
            return Return.err(INVALID_TOKEN_ERROR)

        try:
            return Return.ok(UUID(str(payload.get("sub"))))
        except ValueError:
            return Return.err(INVALID_TOKEN_ERROR)

    async def verify(self, token: str, users: IUserRepository) -> Result[User]:
        """
        Resolve token to its owning user.

        Errors:
            - INVALID_TOKEN: malformed or unsigned token, unknown user,
              superseded token, or stored expiry not strictly in the future.
              Every case shares one message so callers learn nothing about
              which check failed.
        """
        decoded = self.decode_user_id(token)
        if decoded.is_err():
            return Return.err(decoded.error)

        user = await users.get_by_id(decoded.value)
        if user is None or user.reset_token_hash is None or user.reset_token_expiry is None:
            return Return.err(INVALID_TOKEN_ERROR)

        if not hmac.compare_digest(user.reset_token_hash, hash_reset_token(token)):
            return Return.err(INVALID_TOKEN_ERROR)

        if user.reset_token_expiry <= self.clock():
            return Return.err(INVALID_TOKEN_ERROR)

        return Return.ok(user)
