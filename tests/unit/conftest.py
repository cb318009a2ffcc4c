import pytest
from unittest.mock import AsyncMock, MagicMock

from credential_service.app.services.credential_hasher import CredentialHasher
from credential_service.app.services.notification_sender import DeliveryResult
from credential_service.app.services.password_policy import PasswordPolicy
from credential_service.app.services.settings import (
    CredentialSettings,
    HashingSettings,
    NotificationSettings,
)
from credential_service.app.services.token_generator import TokenGenerator
from credential_service.app.use_cases.auth import ResetFlowController


@pytest.fixture
def settings():
    """Fast bcrypt cost so tests stay quick"""
    return CredentialSettings(
        hashing=HashingSettings(work_factor=4),
        notification=NotificationSettings(
            timeout_seconds=0.5, reset_url="https://app.test/reset-password"
        ),
    )


@pytest.fixture
def hasher(settings):
    return CredentialHasher(settings.hashing, min_length=settings.password_policy.min_length)


@pytest.fixture
def token_generator(settings):
    return TokenGenerator(settings.tokens)


@pytest.fixture
def mock_store():
    """Mock CredentialStore with every operation async"""
    store = MagicMock()
    store.get_user_by_username = AsyncMock()
    store.issue_token = AsyncMock()
    store.find_active_token = AsyncMock()
    store.consume_token_and_rotate_credential = AsyncMock()
    store.expire_stale_tokens = AsyncMock()
    return store


@pytest.fixture
def mock_sender():
    sender = MagicMock()
    sender.send = AsyncMock(return_value=DeliveryResult(delivered=True))
    return sender


@pytest.fixture
def controller(mock_store, hasher, token_generator, mock_sender, settings):
    return ResetFlowController(
        store=mock_store,
        hasher=hasher,
        token_generator=token_generator,
        notification_sender=mock_sender,
        password_policy=PasswordPolicy(settings.password_policy),
        notification_settings=settings.notification,
    )
