"""Auth and user account API tests."""
from datetime import timedelta

from plantcare.infra.security.jwt import create_access_token, create_refresh_token, decode_token
from plantcare.infra.security.password import get_password_hash, verify_password


def test_password_hash_roundtrip():
    hashed = get_password_hash("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)


def test_expired_token_is_rejected():
    token = create_access_token({"sub": "u1"}, expires_delta=timedelta(seconds=-1))
    assert decode_token(token) is None


async def test_register_login_and_profile(client):
    response = await client.post(
        "/v1/auth/register",
        json={"email": "ada@example.com", "password": "secret123", "firstname": "Ada", "lastname": "L"},
    )
    assert response.status_code == 201
    assert response.json()["token_type"] == "bearer"

    response = await client.post(
        "/v1/auth/login", json={"email": "ada@example.com", "password": "secret123"}
    )
    assert response.status_code == 200
    headers = {"Authorization": f"Bearer {response.json()['access_token']}"}

    profile = (await client.get("/v1/users/profile", headers=headers)).json()
    assert profile["email"] == "ada@example.com"
    assert profile["lastname"] == "L"
    assert "password_hash" not in profile


async def test_register_duplicate_email_conflicts(client, auth_headers):
    response = await client.post(
        "/v1/auth/register",
        json={"email": "ada@example.com", "password": "secret123", "firstname": "Ada"},
    )
    assert response.status_code == 409


async def test_register_short_password_rejected(client):
    response = await client.post(
        "/v1/auth/register",
        json={"email": "x@example.com", "password": "123", "firstname": "X"},
    )
    assert response.status_code == 422


async def test_login_wrong_password(client, auth_headers):
    response = await client.post(
        "/v1/auth/login", json={"email": "ada@example.com", "password": "nope-nope"}
    )
    assert response.status_code == 401


async def test_refresh_token_flow(client):
    response = await client.post(
        "/v1/auth/register",
        json={"email": "ada@example.com", "password": "secret123", "firstname": "Ada"},
    )
    tokens = response.json()

    refreshed = await client.post("/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    assert decode_token(refreshed.json()["access_token"])["type"] == "access"

    # An access token is not a refresh token
    rejected = await client.post("/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert rejected.status_code == 401


async def test_refresh_token_cannot_authorize_requests(client):
    token = create_refresh_token({"sub": "whoever"})
    response = await client.get("/v1/users/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


async def test_update_profile_email_taken(client, auth_headers, register_user):
    await register_user("bob@example.com")
    response = await client.put(
        "/v1/users/profile", json={"email": "bob@example.com"}, headers=auth_headers
    )
    assert response.status_code == 409

    response = await client.put("/v1/users/profile", json={"firstname": "Augusta"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["firstname"] == "Augusta"


async def test_stats_and_delete_account(client, auth_headers):
    plant = (
        await client.post(
            "/v1/plants",
            json={"name": "Fern", "water_amount_ml": 200, "water_frequency_days": 3},
            headers=auth_headers,
        )
    ).json()
    await client.post(
        "/v1/waterings", json={"plant_id": plant["id"], "amount_ml": 200}, headers=auth_headers
    )

    stats = (await client.get("/v1/users/stats", headers=auth_headers)).json()
    assert stats == {"total_plants": 1, "total_waterings": 1}

    response = await client.delete("/v1/users/account", headers=auth_headers)
    assert response.status_code == 200
    assert (await client.get("/v1/users/profile", headers=auth_headers)).status_code == 401


async def test_health(client):
    for path in ("/health", "/v1/health"):
        response = await client.get(path)
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
