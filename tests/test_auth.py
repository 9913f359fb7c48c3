"""Tests for /api/auth."""


class TestLogin:

    def test_login_returns_usable_token(self, client, admin):
        resp = client.post(
            "/api/auth/login", data={"username": "admin", "password": "Secreto123!"}
        )

        assert resp.status_code == 200
        token = resp.json()["access_token"]
        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["rol"] == "ADMIN"
        assert "password_hash" not in me.json()

    def test_wrong_password(self, client, admin):
        resp = client.post(
            "/api/auth/login", data={"username": "admin", "password": "otra"}
        )
        assert resp.status_code == 401

    def test_inactive_user_cannot_login(self, client, db_session, consulta):
        consulta.activo = False
        db_session.commit()

        resp = client.post(
            "/api/auth/login", data={"username": "consulta", "password": "Secreto123!"}
        )
        assert resp.status_code == 401

    def test_refresh(self, client, admin_headers):
        resp = client.post("/api/auth/refresh", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["token_type"] == "bearer"


def test_health(client):
    assert client.get("/api/health").json()["status"] == "ok"
