"""
Reset Flow Controller

Orchestrates the password reset lifecycle:
issue -> notify -> validate -> consume -> rotate.

Per-token states: NoActiveToken -> PendingReset -> {Consumed | Expired | Superseded}
"""

import asyncio
import logging
from datetime import datetime
from typing import Set

from credential_service.app.services.credential_hasher import CredentialHasher
from credential_service.app.services.credential_store import ICredentialStore
from credential_service.app.services.notification_sender import INotificationSender
from credential_service.app.services.password_policy import PasswordPolicy
from credential_service.app.services.settings import NotificationSettings
from credential_service.app.services.token_generator import TokenGenerator
from credential_service.domain.entities import User
from credential_service.domain.errors import InvalidInput, StoreUnavailable
from credential_service.libs.result import Error, Result, Return
from .dtos import (
    INVALID_OR_EXPIRED_TOKEN,
    PASSWORD_POLICY_VIOLATION,
    STORE_UNAVAILABLE,
    ResetAcceptedResponse,
    ResetCompletedResponse,
    TokenCheckResponse,
)

logger = logging.getLogger(__name__)

ACCEPTED_MESSAGE = "If the account exists, password reset instructions have been sent"


class ResetFlowController:
    """
    Controller for the password reset flow.

    Business Rules:
    - No account enumeration: issue_reset answers "accepted" for any username
    - Issuing supersedes any previous active token of the user
    - Notification is scheduled after the token is committed and runs in the
      background, so the response never waits on delivery; its failure is
      logged and never reverses issuance
    - Unknown, expired, superseded and used tokens are reported identically
    - Store failures surface as STORE_UNAVAILABLE (retryable), never partially applied
    """

    def __init__(
        self,
        store: ICredentialStore,
        hasher: CredentialHasher,
        token_generator: TokenGenerator,
        notification_sender: INotificationSender,
        password_policy: PasswordPolicy,
        notification_settings: NotificationSettings,
    ):
        self.store = store
        self.hasher = hasher
        self.token_generator = token_generator
        self.notification_sender = notification_sender
        self.password_policy = password_policy
        self.notification_settings = notification_settings
        self._notifications: Set[asyncio.Task] = set()

    @staticmethod
    def _store_unavailable(exc: StoreUnavailable) -> Result:
        logger.warning(f"Password reset aborted, store unavailable: {exc}")
        return Return.err(
            Error(STORE_UNAVAILABLE, "Service temporarily unavailable, please retry")
        )

    @staticmethod
    def _invalid_token() -> Result:
        return Return.err(
            Error(INVALID_OR_EXPIRED_TOKEN, "Invalid or expired password reset token")
        )

    async def issue_reset(self, username: str) -> Result[ResetAcceptedResponse]:
        """
        Start a password reset for username.

        Args:
            username: Login handle supplied by the caller

        Returns:
            Result with ResetAcceptedResponse, or Error(STORE_UNAVAILABLE)
        """
        accepted = ResetAcceptedResponse(status="accepted", message=ACCEPTED_MESSAGE)

        try:
            user_result = await self.store.get_user_by_username(username)
            if user_result.is_err():
                # Same outcome as for an existing user
                return Return.ok(accepted)

            user = user_result.value
            token, expires_at = self.token_generator.generate()
            issue_result = await self.store.issue_token(user.id, token, expires_at)
        except StoreUnavailable as exc:
            return self._store_unavailable(exc)

        if issue_result.is_err():
            # User vanished between lookup and issuance
            logger.warning(
                f"Password reset token not issued for user {user.id}: "
                f"{issue_result.error.code}"
            )
            return Return.ok(accepted)

        self._schedule_notification(user, token, expires_at)
        return Return.ok(accepted)

    def _schedule_notification(self, user: User, token: str, expires_at: datetime) -> None:
        task = asyncio.create_task(self._notify(user, token, expires_at))
        # The loop only keeps weak references to tasks
        self._notifications.add(task)
        task.add_done_callback(self._notification_done)

    def _notification_done(self, task: asyncio.Task) -> None:
        self._notifications.discard(task)
        if task.cancelled():
            logger.warning("Password reset notification cancelled before delivery")
        elif task.exception() is not None:
            logger.error(f"Password reset notification crashed: {task.exception()}")

    async def wait_for_notifications(self) -> None:
        """Wait until every scheduled notification has finished"""
        while self._notifications:
            await asyncio.gather(*list(self._notifications), return_exceptions=True)

    async def _notify(self, user: User, token: str, expires_at: datetime) -> None:
        """Best-effort delivery; never raises"""
        if not user.email:
            logger.warning(
                f"User {user.id} has no contact address, reset token issued without notification"
            )
            return

        context = {
            "username": user.username,
            "expires_at": expires_at.isoformat(),
            "reset_url": self.notification_settings.reset_url,
        }

        try:
            delivery = await asyncio.wait_for(
                self.notification_sender.send(user.email, token, context),
                timeout=self.notification_settings.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Password reset notification for user {user.id} timed out")
            return
        except Exception as exc:
            logger.warning(f"Password reset notification for user {user.id} failed: {exc}")
            return

        if not delivery.delivered:
            logger.warning(
                f"Password reset notification for user {user.id} not delivered: "
                f"{delivery.detail}"
            )
            return

        logger.info(f"Password reset notification sent for user {user.id}")

    async def complete_reset(
        self, token: str, new_password: str
    ) -> Result[ResetCompletedResponse]:
        """
        Consume a reset token and rotate the owner's credential.

        Args:
            token: Password reset token (plain text from the notification)
            new_password: New password to set

        Returns:
            Result with ResetCompletedResponse, or Error

        Errors:
            - PASSWORD_POLICY_VIOLATION: New password does not meet the policy
            - INVALID_OR_EXPIRED_TOKEN: Token unknown, expired, superseded or used
            - STORE_UNAVAILABLE: Retryable infrastructure failure
        """
        policy_result = self.password_policy.validate(new_password)
        if policy_result.is_err():
            return Return.err(policy_result.error)

        if not self.token_generator.is_well_formed(token):
            logger.info("Password reset rejected: malformed token")
            return self._invalid_token()

        try:
            # bcrypt is CPU bound, keep it off the event loop
            verifier = await asyncio.to_thread(self.hasher.hash, new_password)
        except InvalidInput as exc:
            return Return.err(Error(PASSWORD_POLICY_VIOLATION, str(exc)))

        try:
            result = await self.store.consume_token_and_rotate_credential(token, verifier)
        except StoreUnavailable as exc:
            return self._store_unavailable(exc)

        if result.is_err():
            logger.info(f"Password reset rejected: {result.error.code}")
            return self._invalid_token()

        return Return.ok(
            ResetCompletedResponse(
                status="success",
                message="Password has been reset successfully",
            )
        )

    async def check_reset_token(self, token: str) -> Result[TokenCheckResponse]:
        """Tell whether a token is currently active, without consuming it"""
        if not self.token_generator.is_well_formed(token):
            return Return.ok(TokenCheckResponse(valid=False))

        try:
            result = await self.store.find_active_token(token)
        except StoreUnavailable as exc:
            return self._store_unavailable(exc)

        return Return.ok(TokenCheckResponse(valid=result.is_ok()))
