"""
Account and session endpoint tests.
"""

from bhejo.extensions import db
from bhejo.models import SessionToken, User
from bhejo.services import auth_service, session_service

from conftest import TEST_PASSWORD


class TestSignup:

    def test_creates_non_admin(self, client):
        resp = client.post("/api/users/signup", json={
            "username": "carol", "password": TEST_PASSWORD, "firstname": "Carol", "admin": True,
        })
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        assert body["user"]["username"] == "carol"
        assert body["user"]["admin"] is False

    def test_duplicate_username(self, client, user):
        resp = client.post("/api/users/signup", json={"username": user.username, "password": TEST_PASSWORD})
        assert resp.status_code == 409

    def test_weak_password(self, client):
        resp = client.post("/api/users/signup", json={"username": "dave", "password": "short"})
        assert resp.status_code == 400
        assert "at least 8 characters" in resp.get_json()["error"]

    def test_missing_fields(self, client):
        resp = client.post("/api/users/signup", json={"username": "dave"})
        assert resp.status_code == 400


class TestLogin:

    def test_returns_usable_token(self, client, user):
        resp = client.post("/api/users/login", json={"username": "alice", "password": TEST_PASSWORD})
        assert resp.status_code == 200
        token = resp.get_json()["token"]
        assert len(token) == 64

        created = client.post(
            "/api/products", json={"name": "kettle"}, headers={"Authorization": f"Bearer {token}"},
        )
        assert created.status_code == 200
        assert created.get_json()["owner"]["username"] == "alice"

    def test_wrong_password(self, client, user):
        resp = client.post("/api/users/login", json={"username": "alice", "password": "Wrong123!!"})
        assert resp.status_code == 401
        assert resp.get_json()["success"] is False

    def test_token_is_stored_hashed(self, client, user):
        token = client.post(
            "/api/users/login", json={"username": "alice", "password": TEST_PASSWORD},
        ).get_json()["token"]

        stored = db.session.query(SessionToken).filter_by(user_id=user.id).one()
        assert stored.token_hash == session_service.hash_token(token)
        assert stored.token_hash != token


class TestLogout:

    def test_revokes_token(self, client, user_headers):
        resp = client.get("/api/users/logout", headers=user_headers)
        assert resp.status_code == 200

        again = client.get("/api/users/logout", headers=user_headers)
        assert again.status_code == 401


class TestListUsers:

    def test_admin_sees_public_fields_only(self, client, admin_headers, user):
        resp = client.get("/api/users", headers=admin_headers)
        assert resp.status_code == 200
        users = resp.get_json()
        assert {u["username"] for u in users} == {"alice", "root"}
        assert all("password_hash" not in u for u in users)


class TestAuthService:

    def test_deactivated_account_cannot_use_session(self, app, user):
        _, token = session_service.create_session(user.id)
        user.is_active = False
        db.session.commit()

        assert session_service.validate_session(token) is None

    def test_set_admin(self, app, user):
        auth_service.set_admin("alice")
        db.session.expire_all()
        assert db.session.get(User, user.id).admin is True

    def test_verify_password_rejects_garbage_hash(self):
        assert auth_service.verify_password("x", "not-a-bcrypt-hash") is False
