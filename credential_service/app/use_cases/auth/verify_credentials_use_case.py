"""
Verify Credentials Use Case

Checks a username/password pair against the stored verifier.
Establishes no session; callers decide what a successful check grants.
"""

import asyncio
import logging

from credential_service.app.services.credential_hasher import CredentialHasher
from credential_service.app.services.credential_store import ICredentialStore
from credential_service.domain.errors import CorruptVerifier, StoreUnavailable
from credential_service.libs.result import Error, Result, Return
from .dtos import STORE_UNAVAILABLE

logger = logging.getLogger(__name__)


class VerifyCredentialsUseCase:
    """
    Business Rules:
    - Unknown users still cost one bcrypt verification (timing parity)
    - A corrupt stored verifier fails closed and is logged as an integrity error
    """

    def __init__(self, store: ICredentialStore, hasher: CredentialHasher):
        self.store = store
        self.hasher = hasher

    async def execute(self, username: str, password: str) -> Result[bool]:
        try:
            user_result = await self.store.get_user_by_username(username)
        except StoreUnavailable as exc:
            logger.warning(f"Credential check aborted, store unavailable: {exc}")
            return Return.err(
                Error(STORE_UNAVAILABLE, "Service temporarily unavailable, please retry")
            )

        if user_result.is_err():
            await asyncio.to_thread(self.hasher.verify_dummy, password)
            return Return.ok(False)

        user = user_result.value
        try:
            valid = await asyncio.to_thread(self.hasher.verify, password, user.password_hash)
        except CorruptVerifier as exc:
            logger.error(f"DATA INTEGRITY: corrupt credential verifier for user {user.id}: {exc}")
            return Return.ok(False)

        return Return.ok(valid)
