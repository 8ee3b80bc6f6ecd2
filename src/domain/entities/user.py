"""
User Entity

An institutional account that logs in with a short numeric PIN.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import CheckConstraint, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class User(SQLModel, table=True):
    """
    User entity - an account identified by its institutional email.

    Business Rules:
    - Email is unique and embeds the enrollment id (e.g. 2021CSB042@curaj.ac.in)
    - PIN stored as bcrypt hash
    - Only the SHA-256 digest of the current reset token is stored
    - reset_token_hash and reset_token_expiry are both set or both NULL
    - Token fields are cleared when a reset completes
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    enrollment_id: str = Field(index=True, max_length=32)
    pin_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    is_verified: bool = Field(default=False)

    # PIN reset
    reset_token_hash: Optional[str] = Field(
        default=None, unique=True, max_length=64
    )
    reset_token_expiry: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime, nullable=True)
    )

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_user_enrollment_id_verified", "enrollment_id", "is_verified"),
        CheckConstraint(
            "(reset_token_hash IS NULL) = (reset_token_expiry IS NULL)",
            name="ck_user_reset_token_pair",
        ),
    )
