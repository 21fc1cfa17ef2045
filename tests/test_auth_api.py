"""
Tests for the authentication endpoints
"""

import pytest

from conftest import DEFAULT_PASSWORD, auth_headers
from pathway_tracker.core.rbac import Role
from pathway_tracker.core.security import decode_access_token

REGISTER_PAYLOAD = {
    "email": "New.Volunteer@Example.com",
    "password": "Sup3rSecret!",
    "first_name": "New",
    "last_name": "Volunteer",
}


@pytest.mark.asyncio
async def test_register_returns_profile_and_tokens(client):
    response = await client.post("/api/v1/auth/register", json=REGISTER_PAYLOAD)

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "new.volunteer@example.com"
    assert body["user"]["role"] == "VOLUNTEER"
    assert body["tokens"]["token_type"] == "bearer"

    payload = decode_access_token(body["tokens"]["access_token"])
    assert payload.subject == body["user"]["id"]
    assert payload.role == "VOLUNTEER"


@pytest.mark.asyncio
async def test_register_duplicate_email_conflicts(client):
    await client.post("/api/v1/auth/register", json=REGISTER_PAYLOAD)

    response = await client.post("/api/v1/auth/register", json=REGISTER_PAYLOAD)

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_rejects_privileged_roles(client):
    for role in ("SUPER_ADMIN", "TEAM_LEADER"):
        response = await client.post("/api/v1/auth/register", json={**REGISTER_PAYLOAD, "role": role})
        assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_validates_password_length(client):
    response = await client.post("/api/v1/auth/register", json={**REGISTER_PAYLOAD, "password": "short"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_success_updates_last_login(client, make_user):
    user = await make_user(Role.ADMIN, email="admin@example.com")

    response = await client.post(
        "/api/v1/auth/login", json={"email": "admin@example.com", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["id"] == str(user.id)
    assert body["user"]["last_login_at"] is not None
    assert decode_access_token(body["tokens"]["access_token"]).role == "ADMIN"


@pytest.mark.asyncio
async def test_login_wrong_password(client, make_user):
    await make_user(email="vol@example.com")

    response = await client.post("/api/v1/auth/login", json={"email": "vol@example.com", "password": "nope-nope"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_unknown_email(client):
    response = await client.post(
        "/api/v1/auth/login", json={"email": "ghost@example.com", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_inactive_account(client, make_user):
    await make_user(email="inactive@example.com", is_active=False)

    response = await client.post(
        "/api/v1/auth/login", json={"email": "inactive@example.com", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Account is inactive"


@pytest.mark.asyncio
async def test_refresh_rotates_tokens(client):
    registered = (await client.post("/api/v1/auth/register", json=REGISTER_PAYLOAD)).json()
    original_refresh = registered["tokens"]["refresh_token"]

    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": original_refresh})

    assert response.status_code == 200
    new_refresh = response.json()["refresh_token"]
    assert new_refresh != original_refresh

    # The used refresh token is no longer accepted
    replay = await client.post("/api/v1/auth/refresh", json={"refresh_token": original_refresh})
    assert replay.status_code == 401


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client):
    registered = (await client.post("/api/v1/auth/register", json=REGISTER_PAYLOAD)).json()

    response = await client.post(
        "/api/v1/auth/refresh", json={"refresh_token": registered["tokens"]["access_token"]}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_refresh_token(client):
    registered = (await client.post("/api/v1/auth/register", json=REGISTER_PAYLOAD)).json()
    headers = {"Authorization": f"Bearer {registered['tokens']['access_token']}"}

    response = await client.post("/api/v1/auth/logout", headers=headers)
    assert response.status_code == 200

    refresh = await client.post(
        "/api/v1/auth/refresh", json={"refresh_token": registered["tokens"]["refresh_token"]}
    )
    assert refresh.status_code == 401


@pytest.mark.asyncio
async def test_me_returns_current_profile(client, make_user):
    user = await make_user(Role.TEAM_LEADER)

    response = await client.get("/api/v1/auth/me", headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json()["email"] == user.email
    assert response.json()["full_name"] == "Test Team_Leader"


@pytest.mark.asyncio
async def test_me_requires_authentication(client):
    response = await client.get("/api/v1/auth/me")

    assert response.status_code == 401
