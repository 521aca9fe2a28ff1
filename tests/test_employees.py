"""
Employee directory tests (admin only)
"""
import pytest

from conftest import auth_headers


@pytest.mark.asyncio
async def test_create_normalizes_username(client):
    r = await client.post(
        "/employees",
        json={"username": "  MaRiA.G ", "name": "Maria Gomez", "role": "manager"},
    )
    assert r.status_code == 201, r.text
    employee = r.json()
    assert employee["username"] == "maria.g"
    assert employee["role"] == "manager"
    assert employee["display_role"] == "CASHIER 01"
    assert employee["is_active"] is True


@pytest.mark.asyncio
@pytest.mark.parametrize("username", ["ab", "  a  "])
async def test_short_usernames_are_rejected(client, username):
    r = await client.post("/employees", json={"username": username, "name": "Short"})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_duplicate_username_conflicts(client):
    await client.post("/employees", json={"username": "pedro", "name": "Pedro"})
    r = await client.post("/employees", json={"username": "PEDRO", "name": "Pedro Again"})
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_update_and_deactivate(client):
    employee = (await client.post("/employees", json={"username": "lucia", "name": "Lucia"})).json()
    r = await client.patch(
        f"/employees/{employee['id']}",
        json={"display_role": "CASHIER 02", "is_active": False},
    )
    assert r.status_code == 200
    assert r.json()["display_role"] == "CASHIER 02"
    assert r.json()["is_active"] is False
    assert r.json()["name"] == "Lucia"


@pytest.mark.asyncio
async def test_admin_account_cannot_be_deleted(client):
    staff = (await client.get("/employees")).json()
    admin = next(e for e in staff if e["username"] == "admin")
    other = (await client.post("/employees", json={"username": "temp", "name": "Temp"})).json()

    assert (await client.delete(f"/employees/{admin['id']}")).status_code == 400
    assert (await client.delete(f"/employees/{other['id']}")).status_code == 204
    usernames = [e["username"] for e in (await client.get("/employees")).json()]
    assert "admin" in usernames
    assert "temp" not in usernames


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["manager", "employee"])
async def test_non_admins_are_forbidden(client, role):
    r = await client.get("/employees", headers=auth_headers(role))
    assert r.status_code == 403
