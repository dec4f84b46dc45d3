import pytest

from app.auth import security

pytestmark = pytest.mark.anyio


async def test_register_then_login(client):
    r = await client.post(
        "/auth/register",
        json={"email": "new@example.com", "password": "s3cret-pass", "name": "Nia New"},
    )
    assert r.status_code == 201, r.text
    assert r.json()["user"]["role"] == "customer"

    r = await client.post("/auth/token", data={"username": "new@example.com", "password": "s3cret-pass"})
    assert r.status_code == 200
    token = r.json()["access_token"]

    r = await client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["email"] == "new@example.com"


async def test_wrong_password_is_rejected(client, customer):
    r = await client.post("/auth/token", data={"username": customer.email, "password": "not-the-password"})
    assert r.status_code == 401


async def test_duplicate_registration(client, customer):
    r = await client.post("/auth/register", json={"email": customer.email, "password": "password123"})
    assert r.status_code == 400


async def test_admin_promotes_customer_to_staff(client, customer, admin):
    headers = {"Authorization": await _token_for(client, admin.email)}
    r = await client.patch(f"/users/{customer.id}/role", json={"role": "staff"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["role"] == "staff"


async def _token_for(client, email):
    r = await client.post("/auth/token", data={"username": email, "password": "password123"})
    return f"Bearer {r.json()['access_token']}"


async def test_disabled_account_cannot_sign_in(client, customer, admin):
    headers = {"Authorization": await _token_for(client, admin.email)}
    await client.patch(f"/users/{customer.id}/role", json={"role": "customer", "is_active": False}, headers=headers)

    r = await client.post("/auth/token", data={"username": customer.email, "password": "password123"})
    assert r.status_code == 403


async def test_token_claims_and_tampering(client, staff):
    token = security.token_for_user(staff)
    claims = security.decode_access_token(token)
    assert claims.user_id == staff.id
    assert claims.role == "staff"

    forged = token.rsplit(".", 1)[0] + ".not-a-signature"
    assert security.decode_access_token(forged) is None
    r = await client.get("/users/me", headers={"Authorization": f"Bearer {forged}"})
    assert r.status_code == 401
