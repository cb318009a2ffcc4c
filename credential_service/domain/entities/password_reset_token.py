"""
PasswordResetToken Entity

Single-use, time-limited authorization to rotate one user's credential.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utcnow
from .enums import TokenStatus


class PasswordResetToken(SQLModel, table=True):
    """
    PasswordResetToken entity - pending password reset authorization.

    Business Rules:
    - Token is SHA-256 hash of a secure random string; plaintext never stored
    - At most one active token per user; issuing supersedes the previous one
    - Single-use: status moves active -> consumed exactly once
    - Expiry is checked lazily at validation time
    - Rows are kept after use for audit, but never count as active again
    """

    __tablename__ = "password_reset_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False)
    token_hash: str = Field(unique=True, max_length=64)  # SHA-256 output

    status: TokenStatus = Field(default=TokenStatus.active)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    consumed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_password_reset_expires_at", "expires_at"),
        Index("idx_password_reset_user_id", "user_id"),
        Index(
            "uq_password_reset_active_user",
            "user_id",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now
