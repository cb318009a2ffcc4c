"""
Password Policy

Minimum length/complexity rules applied to a new plaintext before hashing.
"""

import string

from credential_service.libs.result import Error, Result, Return
from .credential_hasher import BCRYPT_MAX_BYTES
from .settings import PasswordPolicySettings


class PasswordPolicy:
    def __init__(self, settings: PasswordPolicySettings):
        self.settings = settings

    def validate(self, password: str) -> Result[None]:
        """
        Validate password against the configured policy.

        Returns:
            Result with None if valid, or Error(PASSWORD_POLICY_VIOLATION)
        """
        if not password or len(password) < self.settings.min_length:
            return self._violation(
                f"Password must be at least {self.settings.min_length} characters long"
            )

        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            return self._violation(
                f"Password must be at most {BCRYPT_MAX_BYTES} bytes long"
            )

        if self.settings.require_letter and not any(c.isalpha() for c in password):
            return self._violation("Password must contain at least one letter")

        if self.settings.require_digit and not any(c.isdigit() for c in password):
            return self._violation("Password must contain at least one digit")

        if self.settings.require_symbol and not any(
            c in string.punctuation for c in password
        ):
            return self._violation("Password must contain at least one symbol")

        return Return.ok(None)

    @staticmethod
    def _violation(message: str) -> Result[None]:
        return Return.err(Error("PASSWORD_POLICY_VIOLATION", message))
