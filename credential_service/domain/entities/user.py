"""
User Entity

Account holder whose credential this service rotates.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from ..base import utcnow


class User(SQLModel, table=True):
    """
    User entity - account holder with exactly one credential verifier.

    Business Rules:
    - id and username are immutable once assigned
    - Username must be unique across all users
    - Password stored as bcrypt verifier, never plaintext
    - Verifier is changed only by reset-token consumption
    - Provisioned and never deleted outside this service
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=150)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    # Contact address for reset notifications
    email: Optional[str] = Field(default=None, max_length=255)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    password_changed_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )
