from __future__ import annotations

import jwt
import pytest

from tourbook import config


@pytest.mark.anyio
async def test_register_then_login(async_client, test_db) -> None:
    resp = await async_client.post(
        "/api/auth/register",
        json={"name": "Meera", "email": "Meera@Example.com", "password": "pass1234"},
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["email"] == "meera@example.com"
    assert body["role"] == "user"
    assert body["token_type"] == "bearer"

    claims = jwt.decode(body["token"], config.jwt_secret(), algorithms=[config.JWT_ALGORITHM])
    assert claims["sub"] == body["id"]
    assert claims["role"] == "user"

    stored = await test_db.users.find_one({"email": "meera@example.com"})
    assert stored["passwordHash"] != "pass1234"

    login = await async_client.post("/api/auth/login", json={"email": "meera@example.com", "password": "pass1234"})
    assert login.status_code == 200
    assert login.json()["id"] == body["id"]


@pytest.mark.anyio
async def test_register_duplicate_email(async_client, customer) -> None:
    resp = await async_client.post(
        "/api/auth/register",
        json={"name": "Copy", "email": customer["email"], "password": "pass1234"},
    )

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "email_taken"


@pytest.mark.anyio
async def test_login_wrong_password(async_client, customer) -> None:
    resp = await async_client.post("/api/auth/login", json={"email": customer["email"], "password": "nope-nope"})

    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "unauthorized"


@pytest.mark.anyio
async def test_admin_login(async_client, admin, customer) -> None:
    ok = await async_client.post("/api/auth/admin-login", json={"email": admin["email"], "password": "admin123"})
    assert ok.status_code == 200
    assert ok.json()["role"] == "admin"

    denied = await async_client.post(
        "/api/auth/admin-login", json={"email": customer["email"], "password": "secret123"}
    )
    assert denied.status_code == 403
    assert denied.json()["error"]["code"] == "forbidden"


@pytest.mark.anyio
async def test_profile(async_client, customer) -> None:
    resp = await async_client.get("/api/auth/profile", headers=customer["headers"])

    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == str(customer["_id"])
    assert body["email"] == customer["email"]
    assert "passwordHash" not in body


@pytest.mark.anyio
async def test_profile_requires_valid_token(async_client, customer) -> None:
    missing = await async_client.get("/api/auth/profile")
    assert missing.status_code == 401

    expired = jwt.encode(
        {"sub": str(customer["_id"]), "role": "user", "exp": 1},
        config.jwt_secret(),
        algorithm=config.JWT_ALGORITHM,
    )
    resp = await async_client.get("/api/auth/profile", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401
    assert resp.json()["error"]["message"] == "Token expired"

    forged = jwt.encode({"sub": str(customer["_id"]), "role": "admin"}, "some-other-secret", algorithm="HS256")
    resp = await async_client.get("/api/auth/profile", headers={"Authorization": f"Bearer {forged}"})
    assert resp.status_code == 401
