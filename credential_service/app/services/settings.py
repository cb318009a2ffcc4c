"""
Credential Service Settings

Explicit configuration values handed to each component at construction.
Built once from ApplicationConfig in production; tests build them directly
with a fast hashing work factor.
"""

from pydantic import BaseModel, Field


class HashingSettings(BaseModel):
    """Bcrypt parameters"""

    work_factor: int = Field(default=12, ge=4, le=31)


class TokenSettings(BaseModel):
    """Reset token parameters"""

    ttl_minutes: int = Field(default=30, gt=0)
    token_bytes: int = Field(default=32, ge=16)  # 16 bytes = 128 bits minimum


class PasswordPolicySettings(BaseModel):
    """Minimum plaintext policy"""

    min_length: int = Field(default=8, ge=1)
    require_letter: bool = True
    require_digit: bool = True
    require_symbol: bool = False


class NotificationSettings(BaseModel):
    """Outbound reset notification parameters"""

    timeout_seconds: float = Field(default=10.0, gt=0)
    reset_url: str = "http://localhost:3000/reset-password"


class StoreSettings(BaseModel):
    """Database transaction parameters"""

    timeout_seconds: float = Field(default=5.0, gt=0)


class CredentialSettings(BaseModel):
    hashing: HashingSettings = Field(default_factory=HashingSettings)
    tokens: TokenSettings = Field(default_factory=TokenSettings)
    password_policy: PasswordPolicySettings = Field(default_factory=PasswordPolicySettings)
    notification: NotificationSettings = Field(default_factory=NotificationSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)

    @classmethod
    def from_config(cls, config) -> "CredentialSettings":
        """Build settings from an ApplicationConfig-style object"""
        return cls(
            hashing=HashingSettings(work_factor=config.HASH_WORK_FACTOR),
            tokens=TokenSettings(
                ttl_minutes=config.RESET_TOKEN_TTL_MINUTES,
                token_bytes=config.RESET_TOKEN_BYTES,
            ),
            password_policy=PasswordPolicySettings(
                min_length=config.PASSWORD_MIN_LENGTH,
                require_letter=config.PASSWORD_REQUIRE_LETTER,
                require_digit=config.PASSWORD_REQUIRE_DIGIT,
                require_symbol=config.PASSWORD_REQUIRE_SYMBOL,
            ),
            notification=NotificationSettings(
                timeout_seconds=config.NOTIFICATION_TIMEOUT_SECONDS,
                reset_url=config.RESET_URL,
            ),
            store=StoreSettings(timeout_seconds=config.STORE_TIMEOUT_SECONDS),
        )
