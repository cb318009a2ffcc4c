from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from credential_service.api.error import ClientError, ServerError
from credential_service.app.use_cases.auth import (
    INVALID_OR_EXPIRED_TOKEN,
    PASSWORD_POLICY_VIOLATION,
    STORE_UNAVAILABLE,
    ResetAcceptedResponse,
    ResetCompletedResponse,
    ResetFlowController,
    TokenCheckResponse,
)
from credential_service.depends import get_reset_flow_controller

router = APIRouter(prefix="/auth/password-reset", tags=["Password Reset"])


def _raise_for_error(error):
    if error.code in (INVALID_OR_EXPIRED_TOKEN, PASSWORD_POLICY_VIOLATION):
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    if error.code == STORE_UNAVAILABLE:
        raise ServerError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    raise ServerError(error)


class RequestPasswordResetRequest(BaseModel):
    """
    Request password reset HTTP request payload
    """

    username: str = Field(..., min_length=1, max_length=150, description="Login handle")


@router.post(
    "/request",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ResetAcceptedResponse,
)
async def request_password_reset(
    request: RequestPasswordResetRequest,
    controller: ResetFlowController = Depends(get_reset_flow_controller),
):
    """
    Request Password Reset

    Issues a reset token for the account and sends it to the account's
    contact address. Any previously issued token stops working.

    Security:
        - No account enumeration (same response for known/unknown usernames)
        - Rate limiting should be applied at middleware layer

    Returns:
        - 202 Accepted: Always, unless the store is unavailable
        - 503 Service Unavailable: Retryable store failure
    """
    result = await controller.issue_reset(request.username)

    if result.is_err():
        _raise_for_error(result.error)

    return result.value


class ValidateResetTokenRequest(BaseModel):
    """
    Reset token pre-check HTTP request payload
    """

    token: str = Field(..., max_length=256, description="Password reset token")


@router.post(
    "/validate", status_code=status.HTTP_200_OK, response_model=TokenCheckResponse
)
async def validate_reset_token(
    request: ValidateResetTokenRequest,
    controller: ResetFlowController = Depends(get_reset_flow_controller),
):
    """
    Validate Reset Token

    Lets the UI check a link before asking for a new password.
    The token is not consumed.
    """
    result = await controller.check_reset_token(request.token)

    if result.is_err():
        _raise_for_error(result.error)

    return result.value


class ConfirmPasswordResetRequest(BaseModel):
    """
    Confirm password reset HTTP request payload

    Password rules are enforced by the configured policy, not here, so the
    error shape is the same for every rule.
    """

    token: str = Field(..., max_length=256, description="Password reset token")
    new_password: str = Field(..., max_length=256, description="New password")


@router.post(
    "/confirm",
    status_code=status.HTTP_200_OK,
    response_model=ResetCompletedResponse,
)
async def confirm_password_reset(
    request: ConfirmPasswordResetRequest,
    controller: ResetFlowController = Depends(get_reset_flow_controller),
):
    """
    Confirm Password Reset

    Consumes the reset token and replaces the account password.

    Raises:
        - 400 Bad Request: INVALID_OR_EXPIRED_TOKEN (unknown, expired,
          superseded or used token) or PASSWORD_POLICY_VIOLATION
        - 503 Service Unavailable: Retryable store failure
    """
    result = await controller.complete_reset(request.token, request.new_password)

    if result.is_err():
        _raise_for_error(result.error)

    return result.value
