"""
Credential Use Cases

Password reset flow and credential checks.
"""

from .reset_flow_controller import ResetFlowController
from .verify_credentials_use_case import VerifyCredentialsUseCase
from .dtos import (
    INVALID_OR_EXPIRED_TOKEN,
    PASSWORD_POLICY_VIOLATION,
    STORE_UNAVAILABLE,
    ResetAcceptedResponse,
    ResetCompletedResponse,
    TokenCheckResponse,
)

__all__ = [
    # Use Cases
    "ResetFlowController",
    "VerifyCredentialsUseCase",
    # Error codes
    "INVALID_OR_EXPIRED_TOKEN",
    "PASSWORD_POLICY_VIOLATION",
    "STORE_UNAVAILABLE",
    # DTOs - Responses
    "ResetAcceptedResponse",
    "ResetCompletedResponse",
    "TokenCheckResponse",
]
