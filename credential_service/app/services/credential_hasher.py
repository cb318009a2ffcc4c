"""
Credential Hasher

One-way bcrypt transform of plaintext passwords into storable verifiers.
"""

import re

import bcrypt

from credential_service.domain.errors import CorruptVerifier, InvalidInput
from .settings import HashingSettings

# bcrypt silently ignores input past 72 bytes; newer releases refuse it
BCRYPT_MAX_BYTES = 72

# $2b$12$ + 22 chars salt + 31 chars digest
_VERIFIER_RE = re.compile(r"^\$2[abxy]\$(\d{2})\$[./A-Za-z0-9]{53}$")


class CredentialHasher:
    """
    Stateless bcrypt hasher.

    The verifier embeds algorithm, cost and salt, so verification never
    depends on the currently configured work factor.
    """

    def __init__(self, settings: HashingSettings, min_length: int = 1):
        self.work_factor = settings.work_factor
        self.min_length = max(1, min_length)
        self._dummy_verifier = None

    def hash(self, plaintext: str) -> str:
        """
        Hash a plaintext secret.

        Raises:
            InvalidInput: empty, shorter than min_length, or over 72 bytes
        """
        if not plaintext or len(plaintext) < self.min_length:
            raise InvalidInput(
                f"Password must be at least {self.min_length} characters long"
            )
        encoded = plaintext.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_BYTES:
            raise InvalidInput(f"Password must be at most {BCRYPT_MAX_BYTES} bytes long")

        return bcrypt.hashpw(encoded, bcrypt.gensalt(self.work_factor)).decode("utf-8")

    def verify(self, plaintext: str, verifier: str) -> bool:
        """
        Check plaintext against a stored verifier in constant time.

        Returns False on mismatch.

        Raises:
            CorruptVerifier: verifier is not a bcrypt modular-crypt string
        """
        if not isinstance(verifier, str) or not _VERIFIER_RE.match(verifier):
            raise CorruptVerifier("Stored verifier is not a valid bcrypt hash")

        encoded = (plaintext or "").encode("utf-8")
        if not encoded or len(encoded) > BCRYPT_MAX_BYTES:
            # Could never have been produced by hash()
            return False

        try:
            return bcrypt.checkpw(encoded, verifier.encode("ascii"))
        except ValueError as exc:
            raise CorruptVerifier(f"Stored verifier rejected by bcrypt: {exc}") from exc

    def verify_dummy(self, plaintext: str) -> bool:
        """Spend one verification for callers that have no real verifier"""
        if self._dummy_verifier is None:
            self._dummy_verifier = bcrypt.hashpw(
                b"dummy_password", bcrypt.gensalt(self.work_factor)
            ).decode("utf-8")
        self.verify(plaintext, self._dummy_verifier)
        return False
