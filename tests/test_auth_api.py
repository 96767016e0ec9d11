from conftest import ADMIN_PASSWORD


async def test_login_returns_bearer_token(client, admin_user):
    res = await client.post("/auth/login", json={"email": "admin@pavilionsports.in", "password": ADMIN_PASSWORD})
    assert res.status_code == 200
    body = res.json()
    assert body["token_type"] == "bearer"
    assert body["role"] == "superadmin"

    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "admin@pavilionsports.in"


async def test_login_rejects_wrong_password(client, admin_user):
    res = await client.post("/auth/login", json={"email": "admin@pavilionsports.in", "password": "nope"})
    assert res.status_code == 401


async def test_missing_or_bad_token(client):
    assert (await client.get("/auth/me")).status_code == 401
    res = await client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401


async def test_logout_invalidates_token(client, admin_headers):
    res = await client.post("/auth/logout", headers=admin_headers)
    assert res.status_code == 200
    assert (await client.get("/auth/me", headers=admin_headers)).status_code == 401


async def test_activity_log_requires_admin(client, admin_headers, catalog):
    res = await client.get("/activities/", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["total"] == 0
    assert (await client.get("/activities/")).status_code == 401
