"""
Token Generator

Produces opaque, URL-safe password reset tokens and their expiry.
"""

import hashlib
import math
import re
import secrets
from datetime import datetime, timedelta
from typing import Callable, Tuple

from credential_service.domain.base import utcnow
from .settings import TokenSettings

_URLSAFE_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def digest_token(token: str) -> str:
    """SHA-256 hex digest of a token - the only form that is persisted"""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class TokenGenerator:
    """
    Stateless token source.

    Business Rules:
    - Tokens come from the secrets module (CSPRNG)
    - At least 128 bits of entropy; 256 by default
    - URL-safe base64 without padding
    - Expiry is now + configured TTL
    """

    def __init__(self, settings: TokenSettings, clock: Callable[[], datetime] = utcnow):
        self.token_bytes = settings.token_bytes
        self.ttl = timedelta(minutes=settings.ttl_minutes)
        self.clock = clock
        # token_urlsafe drops base64 padding
        self.token_length = math.ceil(self.token_bytes * 4 / 3)

    def generate(self) -> Tuple[str, datetime]:
        """Return (token, expires_at)"""
        token = secrets.token_urlsafe(self.token_bytes)
        return token, self.clock() + self.ttl

    def is_well_formed(self, token: str) -> bool:
        """Shape check so malformed tokens never reach storage"""
        return (
            isinstance(token, str)
            and len(token) == self.token_length
            and _URLSAFE_RE.match(token) is not None
        )
