from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlmodel import SQLModel

from credential_service.adapter.database import create_engine, create_session_factory
from credential_service.app.services.credential_hasher import CredentialHasher
from credential_service.app.services.notification_sender import (
    DeliveryResult,
    INotificationSender,
)
from credential_service.app.services.settings import (
    CredentialSettings,
    HashingSettings,
    NotificationSettings,
)
from credential_service.depends import (
    build_reset_flow_controller,
    build_store,
    get_reset_flow_controller,
)
from credential_service.domain.entities import User
from credential_service.domain.errors import NotificationFailure
from tests.fixtures.json_loader import TestDataLoader


class RecordingSender(INotificationSender):
    """Captures deliveries so tests can read the issued token"""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []
        self.fail = False

    async def send(self, address: str, token: str, context: Dict[str, Any]) -> DeliveryResult:
        if self.fail:
            raise NotificationFailure("transport down")
        self.sent.append({"address": address, "token": token, "context": context})
        return DeliveryResult(delivered=True)

    @property
    def last_token(self) -> Optional[str]:
        return self.sent[-1]["token"] if self.sent else None


@pytest.fixture
def test_data():
    return TestDataLoader()


@pytest.fixture
def settings():
    return CredentialSettings(
        hashing=HashingSettings(work_factor=4),
        notification=NotificationSettings(
            timeout_seconds=2, reset_url="https://app.test/reset-password"
        ),
    )


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def hasher(settings):
    return CredentialHasher(settings.hashing, min_length=settings.password_policy.min_length)


@pytest.fixture
def store(session_factory, settings):
    return build_store(session_factory, settings)


@pytest.fixture
def sender():
    return RecordingSender()


@pytest_asyncio.fixture
async def controller(session_factory, settings, sender):
    controller = build_reset_flow_controller(session_factory, settings, sender)
    yield controller
    await controller.wait_for_notifications()


@pytest.fixture
def create_user(session_factory, hasher):
    async def _create(username: str, password: str, email: Optional[str] = None) -> User:
        user = User(username=username, password_hash=hasher.hash(password), email=email)
        async with session_factory() as session:
            session.add(user)
            await session.commit()
            await session.refresh(user)
        return user

    return _create


@pytest.fixture
def load_user(session_factory):
    async def _load(user_id) -> User:
        async with session_factory() as session:
            return await session.get(User, user_id)

    return _load


@pytest_asyncio.fixture
async def alice(create_user, test_data):
    data = test_data.get("users")["alice"]
    return await create_user(data["username"], data["password"], data["email"])


@pytest_asyncio.fixture
async def client(controller):
    from config import ApplicationConfig
    from credential_service.api.app import create_app

    app = create_app(ApplicationConfig)

    async def override_get_reset_flow_controller():
        return controller

    app.dependency_overrides[get_reset_flow_controller] = override_get_reset_flow_controller

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
