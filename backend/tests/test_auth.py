"""
Tests for authentication: registration, login, token validation and expiry.
"""

import pytest
from httpx import AsyncClient

from onboard.core.security import MemoryTokenStore, hash_password, verify_password

WEEK = 7 * 24 * 3600


@pytest.mark.asyncio
async def test_register_user(client: AsyncClient):
    """Successful registration returns the user and a bearer token."""
    response = await client.post("/api/auth/register", json={
        "email": "Alice@Example.com",
        "password": "password123",
        "firstName": "Alice",
        "lastName": "Smith",
        "title": "Ms",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "User registered successfully"
    assert data["user"]["email"] == "alice@example.com"
    assert data["user"]["firstName"] == "Alice"
    assert data["token"]
    assert "hashedPassword" not in data["user"]


@pytest.mark.asyncio
async def test_register_duplicate_email_any_case(client: AsyncClient, register_user):
    """A second account for the same address, in any letter case, returns 409."""
    await register_user(client, email="alice@example.com")
    response = await client.post("/api/auth/register", json={
        "email": "ALICE@example.com",
        "password": "password123",
        "firstName": "Alice",
        "lastName": "Again",
        "title": "Ms",
    })
    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "User with this email already exists"}


@pytest.mark.asyncio
async def test_register_invalid_payload(client: AsyncClient):
    """Short password and unknown title are reported together as 400."""
    response = await client.post("/api/auth/register", json={
        "email": "weak@example.com",
        "password": "short",
        "firstName": "Weak",
        "lastName": "User",
        "title": "Dr",
    })
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Invalid request data"
    assert any(e.startswith("password") for e in body["errors"])
    assert any(e.startswith("title") for e in body["errors"])


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, register_user):
    await register_user(client)
    response = await client.post("/api/auth/login", json={
        "email": "alice@example.com",
        "password": "password123",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["token"]

    validate = await client.get("/api/auth/validate", headers={"Authorization": f"Bearer {data['token']}"})
    assert validate.status_code == 200
    assert validate.json()["user"]["email"] == "alice@example.com"


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(client: AsyncClient, register_user):
    """Wrong password and unknown email give the same 401 body."""
    await register_user(client)
    wrong_password = await client.post("/api/auth/login", json={
        "email": "alice@example.com",
        "password": "wrongpassword",
    })
    unknown_email = await client.post("/api/auth/login", json={
        "email": "nobody@example.com",
        "password": "password123",
    })
    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()


@pytest.mark.asyncio
async def test_guest_identity_cannot_log_in(client: AsyncClient, settings):
    response = await client.post("/api/auth/login", json={
        "email": settings.GUEST_EMAIL,
        "password": "anything",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_validate_without_token(client: AsyncClient):
    response = await client.get("/api/auth/validate")
    assert response.status_code == 401
    assert response.json()["message"] == "No token provided"


@pytest.mark.asyncio
async def test_validate_with_unknown_token(client: AsyncClient):
    response = await client.get("/api/auth/validate", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


@pytest.mark.asyncio
async def test_logout_revokes_token(client: AsyncClient, auth_headers):
    response = await client.post("/api/auth/logout", headers=auth_headers)
    assert response.status_code == 200

    response = await client.get("/api/auth/validate", headers=auth_headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_suspended_user_is_rejected(client: AsyncClient, auth_headers, admin_headers):
    user = (await client.get("/api/auth/validate", headers=auth_headers)).json()["user"]
    response = await client.put(
        f"/api/admin/users/{user['id']}/status", json={"status": "suspended"}, headers=admin_headers
    )
    assert response.status_code == 200

    response = await client.get("/api/auth/validate", headers=auth_headers)
    assert response.status_code == 403
    assert response.json()["message"] == "Account is suspended"

    response = await client.post("/api/auth/login", json={
        "email": "alice@example.com",
        "password": "password123",
    })
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_verify_email(client: AsyncClient, auth_headers):
    tokens = client.app.state.tokens
    user = (await client.get("/api/auth/validate", headers=auth_headers)).json()["user"]
    assert user["emailVerified"] is False

    token = await tokens.issue(user["id"], "verify", 60)
    response = await client.post("/api/auth/verify-email", json={"token": token})
    assert response.status_code == 200
    assert response.json()["user"]["emailVerified"] is True

    # Single use
    response = await client.post("/api/auth/verify-email", json={"token": token})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_access_token_is_not_a_verification_token(client: AsyncClient, auth_headers):
    token = auth_headers["Authorization"].split()[1]
    response = await client.post("/api/auth/verify-email", json={"token": token})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_accepted_until_exactly_seven_days():
    now = [1_000_000.0]
    store = MemoryTokenStore(WEEK, clock=lambda: now[0])
    token = await store.issue(42)

    now[0] += WEEK
    assert await store.resolve(token) == 42

    now[0] += 0.001
    assert await store.resolve(token) is None
    # Expired entries are evicted on lookup
    assert len(store) == 0


@pytest.mark.asyncio
async def test_expired_token_rejected_over_http(make_settings, serve, register_user):
    now = [1_000_000.0]
    store = MemoryTokenStore(WEEK, clock=lambda: now[0])
    async for ac in serve(make_settings(), tokens=store):
        data = await register_user(ac)
        headers = {"Authorization": f"Bearer {data['token']}"}
        assert (await ac.get("/api/auth/validate", headers=headers)).status_code == 200

        now[0] += WEEK + 1
        response = await ac.get("/api/auth/validate", headers=headers)
        assert response.status_code == 401


@pytest.mark.asyncio
async def test_injected_empty_token_store_is_used(make_settings, serve):
    store = MemoryTokenStore(WEEK)
    assert len(store) == 0
    async for ac in serve(make_settings(), tokens=store):
        assert ac.app.state.tokens is store


def test_password_hashing_round_trip():
    hashed = hash_password("password123")
    assert hashed != "password123"
    assert verify_password("password123", hashed)
    assert not verify_password("password124", hashed)
    assert not verify_password("password123", None)


@pytest.fixture
def outbox(client: AsyncClient, monkeypatch):
    """Tokens handed to the notifier for verification and reset mails."""
    sent = []
    notifier = client.app.state.notifier

    async def verification(user, token):
        sent.append(("verify", user.email, token))
        return True

    async def password_reset(user, token, expires_minutes):
        sent.append(("reset", user.email, token))
        return True

    monkeypatch.setattr(notifier, "send_verification_email", verification)
    monkeypatch.setattr(notifier, "send_password_reset_email", password_reset)
    return sent


@pytest.mark.asyncio
async def test_resend_verification_email(client: AsyncClient, auth_headers, outbox):
    response = await client.post("/api/auth/verify-email/resend", json={"email": "ALICE@example.com"})
    assert response.status_code == 200
    assert outbox == [("verify", "alice@example.com", outbox[0][2])]
    token = outbox[0][2]

    status = (await client.get(f"/api/auth/verify-email/status/{token}")).json()
    assert status["valid"] is True
    assert status["emailVerified"] is False

    response = await client.post("/api/auth/verify-email", json={"token": token})
    assert response.json()["user"]["emailVerified"] is True

    # Verified accounts get no further links
    response = await client.post("/api/auth/verify-email/resend", json={"email": "alice@example.com"})
    assert response.status_code == 200
    assert len(outbox) == 1


@pytest.mark.asyncio
async def test_resend_verification_hides_unknown_accounts(client: AsyncClient, outbox):
    response = await client.post("/api/auth/verify-email/resend", json={"email": "nobody@example.com"})
    assert response.status_code == 200
    assert response.json()["message"] == (
        "If the account exists and is unverified, a verification email has been sent"
    )
    assert outbox == []


@pytest.mark.asyncio
async def test_verification_status_of_unknown_token(client: AsyncClient):
    response = await client.get("/api/auth/verify-email/status/not-a-token")
    assert response.status_code == 200
    assert response.json() == {"success": True, "valid": False, "emailVerified": False}


@pytest.mark.asyncio
async def test_password_reset(client: AsyncClient, register_user, outbox):
    await register_user(client, email="alice@example.com", password="password123")

    response = await client.post("/api/auth/password-reset", json={"email": "alice@example.com"})
    assert response.status_code == 200
    kind, email, token = outbox[-1]
    assert (kind, email) == ("reset", "alice@example.com")

    # A reset token does not authenticate requests
    response = await client.get("/api/auth/validate", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401

    response = await client.post(
        "/api/auth/password-reset/confirm", json={"token": token, "password": "newpassword456"}
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Password has been reset"

    old = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "password123"})
    assert old.status_code == 401
    new = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "newpassword456"})
    assert new.status_code == 200

    # Single use
    response = await client.post(
        "/api/auth/password-reset/confirm", json={"token": token, "password": "another789"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_password_reset_for_unknown_or_guest_address(client: AsyncClient, settings, outbox):
    for email in ("nobody@example.com", settings.GUEST_EMAIL):
        response = await client.post("/api/auth/password-reset", json={"email": email})
        assert response.status_code == 200
        assert response.json()["message"] == "If the account exists, a password reset email has been sent"
    assert outbox == []


@pytest.mark.asyncio
async def test_password_reset_rejects_verification_token(client: AsyncClient, register_user, outbox):
    await register_user(client)
    await client.post("/api/auth/verify-email/resend", json={"email": "alice@example.com"})
    _, _, verification_token = outbox[-1]

    response = await client.post(
        "/api/auth/password-reset/confirm", json={"token": verification_token, "password": "newpassword456"}
    )
    assert response.status_code == 401
