"""
SQL Credential Store

Transactional gateway to users and password reset tokens.
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional, TypeVar
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from credential_service.app.services.credential_store import (
    TOKEN_ALREADY_CONSUMED,
    TOKEN_EXPIRED,
    TOKEN_NOT_FOUND,
    USER_NOT_FOUND,
    ICredentialStore,
)
from credential_service.app.services.settings import StoreSettings
from credential_service.app.services.token_generator import digest_token
from credential_service.app.services.unit_of_work import UnitOfWork
from credential_service.domain.base import utcnow
from credential_service.domain.entities import PasswordResetToken, TokenStatus, User
from credential_service.domain.errors import StoreUnavailable
from credential_service.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SqlCredentialStore(ICredentialStore):
    """
    Credential store backed by a relational database.

    Business Rules:
    - One transaction per operation, bounded by a timeout
    - Issuing locks the user row, supersedes the active token, then inserts
    - Consuming locks the owner's row, then the token row, re-validates the
      token, then swaps active -> consumed and rotates the verifier before a
      single commit
    - Both write paths lock the user row before any token row
    - Only token digests are read or written; plaintext tokens never persist
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        settings: StoreSettings,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow_factory = uow_factory
        self.timeout = settings.timeout_seconds
        self.clock = clock

    async def _run(self, operation: str, coro: Awaitable[T]) -> T:
        """Apply the transaction timeout and translate infrastructure failures"""
        try:
            return await asyncio.wait_for(coro, timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.error(f"Credential store timeout during {operation}")
            raise StoreUnavailable(f"Timed out during {operation}") from exc
        except SQLAlchemyError as exc:
            logger.exception(f"Credential store failure during {operation}")
            raise StoreUnavailable(f"Database error during {operation}") from exc

    @staticmethod
    def _check_active(
        reset_token: Optional[PasswordResetToken], now: datetime
    ) -> Optional[Error]:
        if reset_token is None:
            return Error(TOKEN_NOT_FOUND, "Password reset token not found")
        if reset_token.status == TokenStatus.consumed:
            return Error(TOKEN_ALREADY_CONSUMED, "Password reset token has already been used")
        if reset_token.status == TokenStatus.superseded:
            return Error(TOKEN_NOT_FOUND, "Password reset token has been superseded")
        if reset_token.status == TokenStatus.expired or reset_token.is_expired(now):
            return Error(TOKEN_EXPIRED, "Password reset token has expired")
        return None

    async def get_user_by_username(self, username: str) -> Result[User]:
        return await self._run("get_user_by_username", self._get_user_by_username(username))

    async def _get_user_by_username(self, username: str) -> Result[User]:
        async with self.uow_factory() as uow:
            user = await uow.users.get_by_username(username)
            if user is None:
                return Return.err(Error(USER_NOT_FOUND, "User not found"))
            return Return.ok(user)

    async def issue_token(
        self, user_id: UUID, token: str, expires_at: datetime
    ) -> Result[PasswordResetToken]:
        return await self._run(
            "issue_token", self._issue_token(user_id, digest_token(token), expires_at)
        )

    async def _issue_token(
        self, user_id: UUID, token_hash: str, expires_at: datetime
    ) -> Result[PasswordResetToken]:
        async with self.uow_factory() as uow:
            # Serialize concurrent issuance for the same user on the user row
            user = await uow.users.lock_by_id(user_id)
            if user is None:
                return Return.err(Error(USER_NOT_FOUND, "User not found"))

            superseded = await uow.password_reset_tokens.supersede_active_for_user(user_id)

            reset_token = await uow.password_reset_tokens.create(
                PasswordResetToken(
                    user_id=user_id,
                    token_hash=token_hash,
                    status=TokenStatus.active,
                    created_at=self.clock(),
                    expires_at=expires_at,
                )
            )

            await uow.commit()

        logger.info(
            f"Issued password reset token {reset_token.id} for user {user_id} "
            f"(superseded {superseded})"
        )
        return Return.ok(reset_token)

    async def find_active_token(self, token: str) -> Result[PasswordResetToken]:
        return await self._run("find_active_token", self._find_active_token(digest_token(token)))

    async def _find_active_token(self, token_hash: str) -> Result[PasswordResetToken]:
        async with self.uow_factory() as uow:
            reset_token = await uow.password_reset_tokens.get_by_token_hash(token_hash)
            error = self._check_active(reset_token, self.clock())
            if error is not None:
                return Return.err(error)
            return Return.ok(reset_token)

    async def consume_token_and_rotate_credential(
        self, token: str, new_verifier: str
    ) -> Result[PasswordResetToken]:
        return await self._run(
            "consume_token_and_rotate_credential",
            self._consume_and_rotate(digest_token(token), new_verifier),
        )

    async def _consume_and_rotate(
        self, token_hash: str, new_verifier: str
    ) -> Result[PasswordResetToken]:
        async with self.uow_factory() as uow:
            now = self.clock()

            candidate = await uow.password_reset_tokens.get_by_token_hash(token_hash)
            error = self._check_active(candidate, now)
            if error is not None:
                return Return.err(error)

            # Same lock order as issuance: user row first, then the token row
            user = await uow.users.lock_by_id(candidate.user_id)
            reset_token = await uow.password_reset_tokens.lock_by_token_hash(token_hash)
            error = self._check_active(reset_token, now)
            if error is not None:
                return Return.err(error)
            if user is None:
                logger.error(
                    f"Password reset token {reset_token.id} references missing user "
                    f"{reset_token.user_id}"
                )
                return Return.err(Error(USER_NOT_FOUND, "User not found"))

            # Conditional update: only one transaction can move active -> consumed
            if not await uow.password_reset_tokens.mark_consumed(reset_token.id, now):
                return Return.err(
                    Error(TOKEN_ALREADY_CONSUMED, "Password reset token has already been used")
                )

            rotated = await uow.users.update_password_hash(
                reset_token.user_id, new_verifier, now
            )
            if not rotated:
                # Leaving the block rolls back the consumption
                logger.error(
                    f"Password reset token {reset_token.id} references missing user "
                    f"{reset_token.user_id}"
                )
                return Return.err(Error(USER_NOT_FOUND, "User not found"))

            await uow.commit()

        reset_token.status = TokenStatus.consumed
        reset_token.consumed_at = now
        logger.info(
            f"Consumed password reset token {reset_token.id} and rotated credential "
            f"for user {reset_token.user_id}"
        )
        return Return.ok(reset_token)

    async def expire_stale_tokens(self) -> int:
        return await self._run("expire_stale_tokens", self._expire_stale_tokens())

    async def _expire_stale_tokens(self) -> int:
        async with self.uow_factory() as uow:
            expired = await uow.password_reset_tokens.expire_stale(self.clock())
            await uow.commit()

        if expired:
            logger.info(f"Marked {expired} stale password reset tokens as expired")
        return expired
