"""
tests/test_auth.py
Registration, approval gate, login/logout and the single active session.
"""

import pytest
from httpx import AsyncClient

from tests.conftest import ADMIN_EMAIL, TEACHER_PASSWORD, auth_headers, login, login_admin


@pytest.mark.asyncio
async def test_register_teacher(client: AsyncClient):
    response = await client.post("/auth/register", json={
        "name": "Kamala Silva",
        "email": "kamala@dreamedu.com",
        "password": "secret",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "kamala@dreamedu.com"
    assert data["credits"] == 0
    assert data["is_approved"] is False
    assert "password_hash" not in data


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, teacher):
    response = await client.post("/auth/register", json={
        "name": "Someone Else",
        "email": teacher.email,
        "password": "another",
    })
    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE_EMAIL"


@pytest.mark.asyncio
async def test_register_invalid_email(client: AsyncClient):
    response = await client.post("/auth/register", json={
        "name": "Bad Email",
        "email": "not-an-email",
        "password": "secret",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_unapproved_teacher_cannot_login(client: AsyncClient):
    await client.post("/auth/register", json={
        "name": "Kamala Silva",
        "email": "kamala@dreamedu.com",
        "password": "secret",
    })
    response = await client.post("/auth/login", json={
        "email": "kamala@dreamedu.com",
        "password": "secret",
    })
    assert response.status_code == 403
    assert response.json()["code"] == "PENDING_APPROVAL"


@pytest.mark.asyncio
async def test_wrong_password(client: AsyncClient, teacher):
    response = await client.post("/auth/login", json={
        "email": teacher.email,
        "password": "wrong",
    })
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_teacher_login_and_me(client: AsyncClient, teacher):
    response = await client.post("/auth/login", json={
        "email": teacher.email,
        "password": TEACHER_PASSWORD,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["session"]["role"] == "teacher"
    assert data["session"]["id"] == teacher.id
    assert data["session"]["remembered"] is False

    me = await client.get("/auth/me", headers=auth_headers(data["access_token"]))
    assert me.status_code == 200
    assert me.json()["name"] == "Nimal Perera"


@pytest.mark.asyncio
async def test_admin_login(client: AsyncClient):
    headers = await login_admin(client)
    me = await client.get("/auth/me", headers=headers)
    assert me.json()["role"] == "admin"
    assert me.json()["email"] == ADMIN_EMAIL


@pytest.mark.asyncio
async def test_remember_me_writes_durable_session(client: AsyncClient, teacher, store):
    await login(client, teacher.email, TEACHER_PASSWORD, remember=True)
    assert "dream_session" in store.snapshot()

    session = await client.get("/auth/session")
    assert session.json()["remembered"] is True

    await login(client, teacher.email, TEACHER_PASSWORD, remember=False)
    assert "dream_session" not in store.snapshot()


@pytest.mark.asyncio
async def test_new_login_replaces_previous_session(client: AsyncClient, teacher_headers):
    admin_headers = await login_admin(client)

    stale = await client.get("/teachers/me", headers=teacher_headers)
    assert stale.status_code == 401

    assert (await client.get("/auth/me", headers=admin_headers)).status_code == 200


@pytest.mark.asyncio
async def test_logout(client: AsyncClient, teacher_headers):
    response = await client.post("/auth/logout", headers=teacher_headers)
    assert response.status_code == 200

    assert (await client.get("/auth/me", headers=teacher_headers)).status_code == 401
    session = (await client.get("/auth/session")).json()
    assert session["role"] is None
    assert session["id"] is None


@pytest.mark.asyncio
async def test_missing_and_bad_tokens(client: AsyncClient):
    assert (await client.get("/auth/me")).status_code == 401
    assert (await client.get("/auth/me", headers=auth_headers("garbage"))).status_code == 401


@pytest.mark.asyncio
async def test_role_required(client: AsyncClient, teacher_headers):
    response = await client.get("/admin/teachers", headers=teacher_headers)
    assert response.status_code == 403
