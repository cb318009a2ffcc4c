"""
Credential Service Domain Enums
"""

from enum import Enum


class TokenStatus(str, Enum):
    """Password reset token status"""

    active = "active"
    consumed = "consumed"
    superseded = "superseded"
    expired = "expired"
