from datetime import timedelta

import bcrypt
import pytest
from httpx import AsyncClient
from sqlalchemy import update

from src.domain.base import utcnow
from src.domain.entities import User


async def fetch_user(db_session, user_id) -> User:
    return await db_session.get(User, user_id, populate_existing=True)


async def request_reset_token(client: AsyncClient, mail_notifier, email: str) -> str:
    response = await client.post("/auth/forgot-pin", json={"email": email})
    assert response.status_code == 200
    return mail_notifier.outbox[-1].reset_token


@pytest.mark.asyncio
async def test_reset_pin_with_emailed_token(
    client: AsyncClient, db_session, create_user, test_data, mail_notifier
):
    """Full flow: request a link, then set a new PIN with its token

    Given a verified user who received a reset link
    When they submit the token with a new PIN
    Then the new PIN hash is stored
    And both token fields are cleared
    And the same token cannot be used again
    """
    data = test_data.account("verified_user")
    user_id, email = await create_user(data)
    token = await request_reset_token(client, mail_notifier, email)

    response = await client.post("/auth/reset-pin", json={"token": token, "newPin": "7352"})

    assert response.status_code == 200
    assert response.json() == {"status": "success", "message": "PIN successfully reset"}

    user = await fetch_user(db_session, user_id)
    assert bcrypt.checkpw(b"7352", user.pin_hash.encode())
    assert not bcrypt.checkpw(data["pin"].encode(), user.pin_hash.encode())
    assert user.reset_token_hash is None
    assert user.reset_token_expiry is None

    reused = await client.post("/auth/reset-pin", json={"token": token, "newPin": "1111"})
    assert reused.status_code == 400
    assert reused.json()["error"] == {
        "code": "INVALID_TOKEN",
        "message": "Invalid or expired reset token",
    }

    user = await fetch_user(db_session, user_id)
    assert bcrypt.checkpw(b"7352", user.pin_hash.encode())


@pytest.mark.asyncio
async def test_snake_case_field_accepted(
    client: AsyncClient, create_user, test_data, mail_notifier
):
    _, email = await create_user(test_data.account("verified_user"))
    token = await request_reset_token(client, mail_notifier, email)

    response = await client.post("/auth/reset-pin", json={"token": token, "new_pin": "7352"})

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_superseded_token_rejected(
    client: AsyncClient, db_session, create_user, test_data, mail_notifier
):
    data = test_data.account("verified_user")
    user_id, email = await create_user(data)
    stale = await request_reset_token(client, mail_notifier, email)
    current = await request_reset_token(client, mail_notifier, email)

    response = await client.post("/auth/reset-pin", json={"token": stale, "newPin": "7352"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_TOKEN"
    user = await fetch_user(db_session, user_id)
    assert bcrypt.checkpw(data["pin"].encode(), user.pin_hash.encode())

    response = await client.post("/auth/reset-pin", json={"token": current, "newPin": "7352"})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_expired_token_rejected(
    client: AsyncClient, db_session, create_user, test_data, mail_notifier
):
    data = test_data.account("verified_user")
    user_id, email = await create_user(data)
    token = await request_reset_token(client, mail_notifier, email)

    await db_session.exec(
        update(User)
        .where(User.id == user_id)
        .values(reset_token_expiry=utcnow() - timedelta(minutes=1))
    )
    await db_session.commit()

    response = await client.post("/auth/reset-pin", json={"token": token, "newPin": "7352"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_TOKEN"
    user = await fetch_user(db_session, user_id)
    assert bcrypt.checkpw(data["pin"].encode(), user.pin_hash.encode())


@pytest.mark.asyncio
async def test_forged_token_rejected(client: AsyncClient, create_user, test_data):
    await create_user(test_data.account("verified_user"))

    response = await client.post(
        "/auth/reset-pin", json={"token": "eyJhbGciOiJIUzI1NiJ9.e30.forged", "newPin": "7352"}
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [{}, {"token": "abc"}, {"newPin": "1234"}, {"token": "", "newPin": ""}],
)
async def test_missing_fields(client: AsyncClient, payload):
    response = await client.post("/auth/reset-pin", json=payload)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "MISSING_FIELDS"
    assert error["message"] == "Token and new PIN are required"


@pytest.mark.asyncio
async def test_non_numeric_pin_rejected(
    client: AsyncClient, db_session, create_user, test_data, mail_notifier
):
    user_id, email = await create_user(test_data.account("verified_user"))
    token = await request_reset_token(client, mail_notifier, email)

    response = await client.post("/auth/reset-pin", json={"token": token, "newPin": "pin!"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_PIN"

    # Token is still usable after a rejected PIN
    user = await fetch_user(db_session, user_id)
    assert user.reset_token_hash is not None
