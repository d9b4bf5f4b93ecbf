from conftest import ADMIN_PASSWORD, STAFF_PASSWORD, auth_headers


def test_login_and_me(client, admin_user):
    res = client.post("/auth/login", json={"email": "admin@cdc-travel.com", "password": ADMIN_PASSWORD})
    assert res.status_code == 200
    tokens = res.json()
    assert tokens["token_type"] == "bearer"
    assert tokens["expires_in"] > 0

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "admin@cdc-travel.com"
    assert me.json()["role"] == "admin"


def test_login_wrong_password_is_localized(client, admin_user):
    res = client.post(
        "/auth/login?lang=en",
        json={"email": "admin@cdc-travel.com", "password": "wrong-password"},
    )
    assert res.status_code == 401
    assert res.json()["detail"] == "Incorrect email or password."


def test_refresh_token(client, staff_user):
    tokens = client.post("/auth/login", json={"email": "staff@cdc-travel.com", "password": STAFF_PASSWORD}).json()
    res = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert res.status_code == 200
    assert res.json()["access_token"]

    # access 토큰은 refresh 로 쓸 수 없다
    bad = client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert bad.status_code == 401


def test_missing_token_is_401(client):
    res = client.get("/auth/me")
    assert res.status_code == 401


def test_verify_token(staff_client, staff_user):
    res = staff_client.post("/auth/verify-token")
    assert res.status_code == 200
    body = res.json()
    assert body["valid"] is True
    assert body["uid"] == str(staff_user.id)


def test_non_admin_cannot_list_users(staff_client):
    res = staff_client.get("/users")
    assert res.status_code == 403


def test_admin_email_list_grants_admin(client):
    from conftest import _create_user, run

    owner = run(_create_user("owner@cdc-travel.com", "owner-pass-123", "user"))
    res = client.get("/users", headers=auth_headers(owner))
    assert res.status_code == 200
    assert res.json()["total"] == 1


def test_create_and_disable_user(admin_client):
    res = admin_client.post("/users", json={
        "email": "new@cdc-travel.com",
        "password": "new-pass-123",
        "displayName": "New",
        "team": "CINT",
    })
    assert res.status_code == 201
    user = res.json()
    assert user["team"] == "CINT"
    assert user["disabled"] is False

    dup = admin_client.post("/users", json={"email": "NEW@cdc-travel.com", "password": "new-pass-123"})
    assert dup.status_code == 400

    res = admin_client.patch(f"/users/{user['id']}", json={"disabled": True})
    assert res.status_code == 200
    assert res.json()["disabled"] is True

    login = admin_client.post("/auth/login", json={"email": "new@cdc-travel.com", "password": "new-pass-123"})
    assert login.status_code == 403


def test_activity_log_and_stats(admin_client, admin_user):
    res = admin_client.post("/users/activity", json={"action": "spotCreate", "details": "스팟 등록: 보라카이"})
    assert res.status_code == 201
    assert res.json()["userEmail"] == "admin@cdc-travel.com"

    empty = admin_client.post("/users/activity", json={"action": "", "details": ""})
    assert empty.status_code == 400

    listing = admin_client.get("/users/activity", params={"userId": str(admin_user.id)})
    assert listing.status_code == 200
    assert listing.json()["total"] == 1

    stats = admin_client.get(f"/users/{admin_user.id}/stats")
    assert stats.status_code == 200
    assert stats.json()["actionCounts"] == {"spotCreate": 1}
    assert stats.json()["lastActivityAt"] is not None


def test_unknown_user_is_404(admin_client):
    res = admin_client.get("/users/00000000-0000-0000-0000-000000000000?lang=en")
    assert res.status_code == 404
    assert res.json()["detail"] == "User not found."
