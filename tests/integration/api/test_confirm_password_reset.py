"""
Integration tests for POST /auth/password-reset/confirm and /validate
"""
from datetime import timedelta

import pytest
from httpx import AsyncClient

from credential_service.app.services.token_generator import TokenGenerator
from credential_service.domain.base import utcnow
from tests.utils.json_compare import exclude_keys


async def request_token(client: AsyncClient, controller, sender, username: str = "alice") -> str:
    response = await client.post("/auth/password-reset/request", json={"username": username})
    assert response.status_code == 202
    await controller.wait_for_notifications()
    return sender.last_token


@pytest.mark.asyncio
async def test_successful_password_reset(client: AsyncClient, controller, alice, sender, hasher, load_user, test_data):
    token = await request_token(client, controller, sender)
    new_password = test_data.get("passwords")["first_rotation"]

    response = await client.post(
        "/auth/password-reset/confirm",
        json={"token": token, "new_password": new_password},
    )

    assert response.status_code == 200
    assert response.json() == test_data.get("responses")["completed"]

    user = await load_user(alice.id)
    assert hasher.verify(new_password, user.password_hash)
    assert not hasher.verify(test_data.get("users")["alice"]["password"], user.password_hash)


@pytest.mark.asyncio
async def test_reused_token_rejected(client: AsyncClient, controller, alice, sender, test_data):
    token = await request_token(client, controller, sender)
    passwords = test_data.get("passwords")

    first = await client.post(
        "/auth/password-reset/confirm",
        json={"token": token, "new_password": passwords["first_rotation"]},
    )
    second = await client.post(
        "/auth/password-reset/confirm",
        json={"token": token, "new_password": passwords["second_rotation"]},
    )

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json() == test_data.get("responses")["invalid_token"]


@pytest.mark.asyncio
async def test_unknown_and_expired_tokens_look_the_same(
    client: AsyncClient, alice, store, settings, test_data
):
    generator = TokenGenerator(settings.tokens)
    expired, _ = generator.generate()
    await store.issue_token(alice.id, expired, utcnow() - timedelta(minutes=1))
    unknown, _ = generator.generate()

    expired_response = await client.post(
        "/auth/password-reset/confirm",
        json={"token": expired, "new_password": "NewPass!23"},
    )
    unknown_response = await client.post(
        "/auth/password-reset/confirm",
        json={"token": unknown, "new_password": "NewPass!23"},
    )
    malformed_response = await client.post(
        "/auth/password-reset/confirm",
        json={"token": "../../etc/passwd", "new_password": "NewPass!23"},
    )

    assert expired_response.status_code == unknown_response.status_code == 400
    assert expired_response.json() == unknown_response.json() == malformed_response.json()
    assert exclude_keys(expired_response.json()["error"], {"message"}) == {
        "code": "INVALID_OR_EXPIRED_TOKEN"
    }


@pytest.mark.asyncio
async def test_policy_violation(client: AsyncClient, controller, alice, sender, test_data, hasher, load_user):
    token = await request_token(client, controller, sender)

    response = await client.post(
        "/auth/password-reset/confirm",
        json={"token": token, "new_password": test_data.get("passwords")["too_short"]},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PASSWORD_POLICY_VIOLATION"

    # Token still usable after a rejected password
    retry = await client.post(
        "/auth/password-reset/confirm",
        json={"token": token, "new_password": test_data.get("passwords")["first_rotation"]},
    )
    assert retry.status_code == 200


@pytest.mark.asyncio
async def test_validate_token(client: AsyncClient, controller, alice, sender):
    token = await request_token(client, controller, sender)

    before = await client.post("/auth/password-reset/validate", json={"token": token})
    await client.post(
        "/auth/password-reset/confirm",
        json={"token": token, "new_password": "NewPass!23"},
    )
    after = await client.post("/auth/password-reset/validate", json={"token": token})
    bogus = await client.post("/auth/password-reset/validate", json={"token": "bogus"})

    assert before.json() == {"valid": True}
    assert after.json() == {"valid": False}
    assert bogus.json() == {"valid": False}


@pytest.mark.asyncio
async def test_store_unavailable_returns_503(client: AsyncClient, controller, settings, monkeypatch):
    from credential_service.domain.errors import StoreUnavailable

    async def unavailable(*args):
        raise StoreUnavailable("database is locked")

    monkeypatch.setattr(controller.store, "consume_token_and_rotate_credential", unavailable)
    token, _ = TokenGenerator(settings.tokens).generate()

    response = await client.post(
        "/auth/password-reset/confirm",
        json={"token": token, "new_password": "NewPass!23"},
    )

    assert response.status_code == 503
    assert response.headers["retry-after"] == "1"
    assert response.json()["error"]["code"] == "STORE_UNAVAILABLE"
    assert "locked" not in response.text
