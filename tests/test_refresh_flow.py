# tests/test_refresh_flow.py
from app.models.user import Role
from tests.helpers import auth_header, create_account_in_db, DEFAULT_PASSWORD


def test_refresh_token_rotation_and_revocation(client, db_session):
    student = create_account_in_db(db_session, role=Role.USER)

    login = client.post("/auth/login", json={"email": student.email, "password": DEFAULT_PASSWORD})
    assert login.status_code == 200, login.text
    access1 = login.json()["data"]["access_token"]
    assert access1
    assert "refresh_token" in client.cookies
    refresh1 = client.cookies.get("refresh_token")
    assert refresh1

    r1 = client.post("/auth/refresh")
    assert r1.status_code == 200, r1.text
    access2 = r1.json()["data"]["access_token"]
    assert access2

    refresh2 = client.cookies.get("refresh_token")
    assert refresh2 and refresh2 != refresh1

    client.cookies.set("refresh_token", refresh1)
    r_old = client.post("/auth/refresh")
    assert r_old.status_code == 401
    assert r_old.json()["detail"] == "Refresh token revoked"

    client.cookies.set("refresh_token", refresh2)
    logout = client.post("/auth/logout", headers=auth_header(access2))
    assert logout.status_code == 204

    # 로그아웃 후에는 남아 있던 refresh 토큰도 무효
    client.cookies.set("refresh_token", refresh2)
    r_after = client.post("/auth/refresh")
    assert r_after.status_code == 401


def test_refresh_without_cookie(client):
    r = client.post("/auth/refresh")
    assert r.status_code == 401
    assert r.json()["detail"] == "Missing refresh token"
