"""
Credential Service Domain Entities

Each entity in its own file.
"""

from .enums import TokenStatus
from .user import User
from .password_reset_token import PasswordResetToken

__all__ = [
    # Enums
    "TokenStatus",
    # Entities
    "User",
    "PasswordResetToken",
]
