"""
Credential Use Case DTOs (Data Transfer Objects)

Response classes and externally visible error codes.
"""

from pydantic import BaseModel

# ============================================================================
# Externally visible error codes
# ============================================================================

# Covers unknown, expired, superseded and already-used tokens alike
INVALID_OR_EXPIRED_TOKEN = "INVALID_OR_EXPIRED_TOKEN"
PASSWORD_POLICY_VIOLATION = "PASSWORD_POLICY_VIOLATION"
STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


# ============================================================================
# Response DTOs
# ============================================================================


class ResetAcceptedResponse(BaseModel):
    """Response for issue reset - identical whether or not the user exists"""

    status: str
    message: str


class ResetCompletedResponse(BaseModel):
    """Response for complete reset"""

    status: str
    message: str


class TokenCheckResponse(BaseModel):
    """Response for reset token pre-check"""

    valid: bool
