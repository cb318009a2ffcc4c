"""
End-to-end reset scenarios through the HTTP API
"""
import pytest
from httpx import AsyncClient

from credential_service.depends import build_verify_credentials_use_case


@pytest.fixture
def verify(session_factory, settings):
    return build_verify_credentials_use_case(session_factory, settings)


async def request_token(client: AsyncClient, controller, sender) -> str:
    await client.post("/auth/password-reset/request", json={"username": "alice"})
    await controller.wait_for_notifications()
    return sender.last_token


@pytest.mark.asyncio
async def test_rotation_then_reuse(client: AsyncClient, controller, alice, sender, verify):
    """
    alice resets with T1, then tries T1 again.
    The second attempt fails and the first rotation stands.
    """
    t1 = await request_token(client, controller, sender)

    first = await client.post(
        "/auth/password-reset/confirm", json={"token": t1, "new_password": "NewPass!23"}
    )
    assert first.status_code == 200
    assert (await verify.execute("alice", "NewPass!23")).value is True
    assert (await verify.execute("alice", "OldPass!01")).value is False

    second = await client.post(
        "/auth/password-reset/confirm", json={"token": t1, "new_password": "Other!45xy"}
    )
    assert second.status_code == 400
    assert second.json()["error"]["code"] == "INVALID_OR_EXPIRED_TOKEN"
    assert (await verify.execute("alice", "NewPass!23")).value is True
    assert (await verify.execute("alice", "Other!45xy")).value is False


@pytest.mark.asyncio
async def test_second_issue_supersedes_first(
    client: AsyncClient, controller, alice, sender, verify
):
    """issue twice -> T1, T2; T1 is dead, T2 works"""
    t1 = await request_token(client, controller, sender)
    t2 = await request_token(client, controller, sender)
    assert t1 != t2

    stale = await client.post(
        "/auth/password-reset/confirm", json={"token": t1, "new_password": "NewPass!23"}
    )
    fresh = await client.post(
        "/auth/password-reset/confirm", json={"token": t2, "new_password": "Fresh!Pass9"}
    )

    assert stale.status_code == 400
    assert stale.json()["error"]["code"] == "INVALID_OR_EXPIRED_TOKEN"
    assert fresh.status_code == 200
    assert (await verify.execute("alice", "Fresh!Pass9")).value is True
    assert (await verify.execute("alice", "NewPass!23")).value is False


@pytest.mark.asyncio
async def test_unknown_user_fails_verification(alice, verify):
    assert (await verify.execute("mallory", "OldPass!01")).value is False
    assert (await verify.execute("alice", "OldPass!01")).value is True
