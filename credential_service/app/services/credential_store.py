from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from credential_service.domain.entities import PasswordResetToken, User
from credential_service.libs.result import Result

# Error codes returned by CredentialStore operations
USER_NOT_FOUND = "USER_NOT_FOUND"
TOKEN_NOT_FOUND = "TOKEN_NOT_FOUND"
TOKEN_EXPIRED = "TOKEN_EXPIRED"
TOKEN_ALREADY_CONSUMED = "TOKEN_ALREADY_CONSUMED"


class ICredentialStore(ABC):
    """
    Credential store interface - application layer.

    Every operation runs in its own transaction. Infrastructure failures
    raise StoreUnavailable and leave nothing partially applied.
    """

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Result[User]:
        """Look up a user; Error(USER_NOT_FOUND) if absent"""
        pass

    @abstractmethod
    async def issue_token(
        self, user_id: UUID, token: str, expires_at: datetime
    ) -> Result[PasswordResetToken]:
        """Supersede the user's active token and insert a new one, atomically"""
        pass

    @abstractmethod
    async def find_active_token(self, token: str) -> Result[PasswordResetToken]:
        """Look up an active token; NOT_FOUND, EXPIRED or ALREADY_CONSUMED otherwise"""
        pass

    @abstractmethod
    async def consume_token_and_rotate_credential(
        self, token: str, new_verifier: str
    ) -> Result[PasswordResetToken]:
        """Consume the token and overwrite its owner's verifier in one transaction"""
        pass

    @abstractmethod
    async def expire_stale_tokens(self) -> int:
        """Storage hygiene: mark past-expiry active tokens as expired"""
        pass
