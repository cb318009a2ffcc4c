import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./credentials.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Hashing
    HASH_WORK_FACTOR = int(data.get("HASH_WORK_FACTOR", 12))

    # Reset tokens
    RESET_TOKEN_TTL_MINUTES = int(data.get("RESET_TOKEN_TTL_MINUTES", 30))
    RESET_TOKEN_BYTES = int(data.get("RESET_TOKEN_BYTES", 32))
    RESET_URL = data.get("RESET_URL", "http://localhost:3000/reset-password")

    # Password policy
    PASSWORD_MIN_LENGTH = int(data.get("PASSWORD_MIN_LENGTH", 8))
    PASSWORD_REQUIRE_LETTER = bool(data.get("PASSWORD_REQUIRE_LETTER", True))
    PASSWORD_REQUIRE_DIGIT = bool(data.get("PASSWORD_REQUIRE_DIGIT", True))
    PASSWORD_REQUIRE_SYMBOL = bool(data.get("PASSWORD_REQUIRE_SYMBOL", False))

    # Timeouts (seconds)
    STORE_TIMEOUT_SECONDS = float(data.get("STORE_TIMEOUT_SECONDS", 5))
    NOTIFICATION_TIMEOUT_SECONDS = float(data.get("NOTIFICATION_TIMEOUT_SECONDS", 10))

    # Mail transport; empty host logs notifications instead of sending
    SMTP_HOST = data.get("SMTP_HOST", "")
    SMTP_PORT = int(data.get("SMTP_PORT", 587))
    SMTP_USER = data.get("SMTP_USER", "")
    SMTP_PASSWORD = data.get("SMTP_PASSWORD", "")
    SMTP_FROM = data.get("SMTP_FROM", "no-reply@localhost")
    SMTP_USE_TLS = bool(data.get("SMTP_USE_TLS", True))
