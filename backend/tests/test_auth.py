from datetime import UTC, datetime, timedelta

from fastapi.testclient import TestClient
from jose import jwt

from postboard.auth import create_access_token
from postboard.config import settings


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


# ==================== Register ====================


class TestRegister:
    def test_register_success(self, client: TestClient):
        response = client.post(
            "/api/auth/register",
            json={"username": "alice", "password": "secret1"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "User created successfully"
        assert data["token"]
        assert data["user"]["username"] == "alice"
        assert "id" in data["user"]
        assert "password_hash" not in data["user"]

    def test_register_short_fields(self, client: TestClient):
        response = client.post(
            "/api/auth/register",
            json={"username": "al", "password": "12345"},
        )
        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["message"] == "Validation failed"
        fields = {e["field"] for e in data["errors"]}
        assert fields == {"username", "password"}

    def test_register_minimum_lengths(self, client: TestClient):
        response = client.post(
            "/api/auth/register",
            json={"username": "abc", "password": "123456"},
        )
        assert response.status_code == 201

    def test_register_duplicate(self, client: TestClient, alice: dict):
        response = client.post(
            "/api/auth/register",
            json={"username": "alice", "password": "different-pass"},
        )
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Username already exists",
        }

    def test_register_password_too_long_for_bcrypt(self, client: TestClient):
        response = client.post(
            "/api/auth/register",
            json={"username": "alice", "password": "x" * 73},
        )
        assert response.status_code == 400

    def test_register_missing_body(self, client: TestClient):
        response = client.post("/api/auth/register")
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_register_wrong_types(self, client: TestClient):
        response = client.post(
            "/api/auth/register",
            json={"username": 12345, "password": "secret1"},
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "username"


# ==================== Login ====================


class TestLogin:
    def test_login_success(self, client: TestClient, alice: dict):
        response = client.post(
            "/api/auth/login",
            json={"username": "alice", "password": "secret1"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Login successful"
        assert data["token"]
        assert data["user"] == alice["user"]

    def test_login_wrong_password(self, client: TestClient, alice: dict):
        response = client.post(
            "/api/auth/login",
            json={"username": "alice", "password": "wrong"},
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_login_errors_do_not_reveal_which_field(
        self, client: TestClient, alice: dict
    ):
        wrong_password = client.post(
            "/api/auth/login",
            json={"username": "alice", "password": "wrong-password"},
        )
        unknown_user = client.post(
            "/api/auth/login",
            json={"username": "nobody", "password": "wrong-password"},
        )
        assert wrong_password.status_code == unknown_user.status_code == 401
        assert wrong_password.json() == unknown_user.json()

    def test_login_empty_fields(self, client: TestClient):
        response = client.post(
            "/api/auth/login",
            json={"username": "", "password": ""},
        )
        assert response.status_code == 400
        messages = {e["message"] for e in response.json()["errors"]}
        assert messages == {"Username is required", "Password is required"}

    def test_login_overlong_password(self, client: TestClient, alice: dict):
        response = client.post(
            "/api/auth/login",
            json={"username": "alice", "password": "x" * 100},
        )
        assert response.status_code == 401


# ==================== Verify ====================


class TestVerify:
    def test_verify_after_register(self, client: TestClient, alice: dict):
        response = client.get("/api/auth/verify", headers=_auth(alice["token"]))
        assert response.status_code == 200
        assert response.json() == {"success": True, "user": alice["user"]}

    def test_verify_after_login(self, client: TestClient, alice: dict):
        token = client.post(
            "/api/auth/login",
            json={"username": "alice", "password": "secret1"},
        ).json()["token"]
        response = client.get("/api/auth/verify", headers=_auth(token))
        assert response.json()["user"]["username"] == "alice"

    def test_verify_without_token(self, client: TestClient):
        response = client.get("/api/auth/verify")
        assert response.status_code == 401
        assert response.json()["message"] == "Access token required"

    def test_verify_with_other_auth_scheme(self, client: TestClient):
        response = client.get("/api/auth/verify", headers={"Authorization": "Token abc"})
        assert response.status_code == 401
        assert response.json()["message"] == "Access token required"

    def test_verify_with_garbage_token(self, client: TestClient):
        response = client.get("/api/auth/verify", headers=_auth("invalid.token.here"))
        assert response.status_code == 403
        assert response.json() == {
            "success": False,
            "message": "Invalid or expired token",
        }

    def test_verify_expired_token(self, client: TestClient, alice: dict):
        token = create_access_token(
            alice["user"]["id"],
            "alice",
            issued_at=datetime.now(UTC) - timedelta(hours=25),
        )
        response = client.get("/api/auth/verify", headers=_auth(token))
        assert response.status_code == 403

    def test_verify_token_signed_with_other_secret(self, client: TestClient):
        token = jwt.encode(
            {
                "sub": "1",
                "username": "mallory",
                "exp": datetime.now(UTC) + timedelta(hours=1),
            },
            "not-the-server-secret",
            algorithm=settings.token_algorithm,
        )
        response = client.get("/api/auth/verify", headers=_auth(token))
        assert response.status_code == 403

    def test_verify_token_without_claims(self, client: TestClient):
        token = jwt.encode(
            {"exp": datetime.now(UTC) + timedelta(hours=1)},
            settings.secret_key,
            algorithm=settings.token_algorithm,
        )
        response = client.get("/api/auth/verify", headers=_auth(token))
        assert response.status_code == 403


def test_health(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["success"] is True
