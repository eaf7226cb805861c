from __future__ import annotations


def test_login_returns_user_and_role_home(client, login):
    res = login("teacher1")
    assert res.status_code == 200
    body = res.get_json()
    assert body["user"]["username"] == "teacher1"
    assert body["user"]["role"] == "TEACHER"
    assert body["redirect"] == "/teacher/dashboard"

    session = client.get("/api/auth/session").get_json()
    assert session["user"]["username"] == "teacher1"


def test_login_accepts_email(login):
    assert login("admin@example.com", "admin123").status_code == 200


def test_login_email_is_case_insensitive(login):
    res = login("  Admin@Example.COM", "admin123")
    assert res.status_code == 200
    assert res.get_json()["user"]["username"] == "admin"


def test_bad_credentials_are_rejected(client, login):
    res = login("admin", "wrong")
    assert res.status_code == 401
    assert res.get_json()["error"] == "Invalid username or password"

    res = client.post("/api/auth/login", json={"username": "admin"})
    assert res.status_code == 400


def test_logout_clears_session(client, login):
    login("admin")
    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/auth/session").get_json() == {"user": None}
    assert client.get("/api/admin/users").status_code == 401


def test_pages_redirect_anonymous_users_to_sign_in(client):
    res = client.get("/admin/dashboard")
    assert res.status_code == 302
    assert res.headers["Location"].endswith("/auth/sign-in?callbackUrl=/admin/dashboard")


def test_pages_redirect_wrong_role_to_unauthorized(client, login):
    login("teacher1")
    res = client.get("/admin/dashboard")
    assert res.status_code == 302
    assert res.headers["Location"].endswith("/unauthorized")

    res = client.get("/principal")
    assert res.headers["Location"].endswith("/unauthorized")

    assert client.get("/teacher/dashboard").status_code == 200


def test_role_dashboards_render(client, login):
    login("admin")
    assert client.get("/admin/dashboard").status_code == 200

    login("principal1")
    res = client.get("/principal")
    assert res.status_code == 200
    assert b"Demo Primary School" in res.data


def test_public_pages_and_root(client, login):
    assert client.get("/auth/sign-in").status_code == 200
    assert client.get("/api/health").status_code == 200

    res = client.get("/")
    assert res.headers["Location"].endswith("/auth/sign-in")

    login("principal1")
    assert client.get("/").headers["Location"].endswith("/principal")


def test_sign_in_form_redirects_to_callback(client):
    res = client.post(
        "/auth/sign-in?callbackUrl=/teacher/dashboard",
        data={"username": "teacher1", "password": "teacher123"},
    )
    assert res.status_code == 302
    assert res.headers["Location"].endswith("/teacher/dashboard")


def test_inactive_user_cannot_log_in(admin_client, login, ids):
    res = admin_client.put(f"/api/admin/users/{ids['teacher']}", json={"isActive": False})
    assert res.status_code == 200
    assert login("teacher1").status_code == 401


def test_api_role_checks(client, login):
    assert client.get("/api/teacher/lessons").status_code == 401
    login("principal1")
    assert client.get("/api/teacher/lessons").status_code == 403
    assert client.get("/api/principal/dashboard").status_code == 200
