"""HTTP tests for /auth/register, /auth/login, /user/me and /health via TestClient."""

import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core import security
from app.core.config import settings
from app.core.database import get_db
from app.core.tokens import SigningKey, TokenProvider
from app.main import app
from app.models import Base, User

PREFIX = settings.API_V1_PREFIX
OTHER_SECRET = "a-different-secret-that-is-also-over-32-bytes-long"


class _ApiTestCase(unittest.TestCase):
    """TestClient over an in-memory SQLite database swapped in for get_db."""

    def setUp(self) -> None:
        rounds = patch.object(security.settings, "BCRYPT_ROUNDS", 4)
        rounds.start()
        self.addCleanup(rounds.stop)

        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(engine)
        self.SessionTesting = sessionmaker(bind=engine, autoflush=False)

        def override_get_db():
            db = self.SessionTesting()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.addCleanup(app.dependency_overrides.clear)

        self.client = self.enterContext(TestClient(app))

    def register(self, username: str = "alice", email: str = "a@x.com", password: str = "secret1"):
        return self.client.post(
            f"{PREFIX}/auth/register",
            json={
                "username": username,
                "email": email,
                "password": password,
                "confirmPassword": password,
            },
        )

    def login(self, identifier: str = "alice", password: str = "secret1"):
        return self.client.post(
            f"{PREFIX}/auth/login",
            json={"usernameOrEmail": identifier, "password": password},
        )


class TestRegisterEndpoint(_ApiTestCase):
    def test_success_returns_profile(self) -> None:
        resp = self.register()
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "User registered successfully")
        self.assertEqual(body["profile"]["username"], "alice")
        self.assertEqual(body["profile"]["role"], "USER")
        self.assertTrue(body["profile"]["isActive"])
        self.assertNotIn("token", body)
        self.assertNotIn("passwordHash", body["profile"])

    def test_failure_is_400_with_message(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/auth/register",
            json={
                "username": "alice",
                "email": "a@x.com",
                "password": "secret1",
                "confirmPassword": "secret2",
            },
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"success": False, "message": "Passwords do not match"})

    def test_missing_fields_reported_by_service(self) -> None:
        resp = self.client.post(f"{PREFIX}/auth/register", json={})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Username is required")

    def test_duplicate_username(self) -> None:
        self.register()
        resp = self.register(email="other@x.com")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Username already exists")


class TestLoginEndpoint(_ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.register().json()["profile"]["id"]

    def test_success_returns_token_and_profile(self) -> None:
        resp = self.login()
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertTrue(body["token"])
        self.assertEqual(body["profile"]["id"], self.user_id)
        provider = app.state.token_provider
        self.assertEqual(provider.get_user_id_from_token(body["token"]), self.user_id)

    def test_login_by_email(self) -> None:
        self.assertEqual(self.login("a@x.com").status_code, 200)

    def test_username_field_alias(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/auth/login",
            json={"username": "alice", "password": "secret1"},
        )
        self.assertEqual(resp.status_code, 200)

    def test_bad_credentials_are_401_and_indistinguishable(self) -> None:
        wrong = self.login(password="wrong-password")
        unknown = self.login(identifier="nobody")
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(wrong.json(), unknown.json())
        self.assertEqual(wrong.json()["message"], "Invalid username/email or password")

    def test_inactive_account(self) -> None:
        db = self.SessionTesting()
        try:
            user = db.query(User).filter(User.username == "alice").first()
            user.is_active = False
            db.commit()
        finally:
            db.close()
        resp = self.login()
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["message"], "Account is inactive")


class TestCurrentUserEndpoint(_ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.register()
        self.token = self.login().json()["token"]

    def test_me_with_valid_token(self) -> None:
        resp = self.client.get(
            f"{PREFIX}/user/me", headers={"Authorization": f"Bearer {self.token}"}
        )
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["message"], "User retrieved successfully")
        self.assertEqual(body["profile"]["username"], "alice")
        self.assertEqual(body["profile"]["email"], "a@x.com")

    def test_me_without_token_is_401(self) -> None:
        resp = self.client.get(f"{PREFIX}/user/me")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"success": False, "message": "Unauthorized"})
        self.assertEqual(resp.headers["WWW-Authenticate"], "Bearer")

    def test_me_with_foreign_token_is_401(self) -> None:
        foreign = TokenProvider(SigningKey.from_secret(OTHER_SECRET)).generate_token("alice", 1)
        resp = self.client.get(f"{PREFIX}/user/me", headers={"Authorization": f"Bearer {foreign}"})
        self.assertEqual(resp.status_code, 401)

    def test_me_with_expired_token_is_401(self) -> None:
        two_days_ago = datetime.now(UTC) - timedelta(days=2)
        expired = TokenProvider(
            SigningKey.from_secret(settings.JWT_SECRET.get_secret_value()),
            clock=lambda: two_days_ago,
        ).generate_token("alice", 1)
        resp = self.client.get(f"{PREFIX}/user/me", headers={"Authorization": f"Bearer {expired}"})
        self.assertEqual(resp.status_code, 401)

    def test_me_for_deleted_user_is_404(self) -> None:
        db = self.SessionTesting()
        try:
            db.query(User).filter(User.username == "alice").delete()
            db.commit()
        finally:
            db.close()
        resp = self.client.get(
            f"{PREFIX}/user/me", headers={"Authorization": f"Bearer {self.token}"}
        )
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["message"], "User not found")


class TestRequestBodyHandling(_ApiTestCase):
    """Numbers are accepted as strings; unusable bodies get a 400 AuthResponse."""

    def test_numeric_username_is_coerced(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/auth/register",
            json={"username": 123, "email": "n@x.com", "password": "secret1", "confirmPassword": "secret1"},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["profile"]["username"], "123")

    def test_numeric_password_logs_in(self) -> None:
        reg = self.client.post(
            f"{PREFIX}/auth/register",
            json={"username": "alice", "email": "a@x.com", "password": 123456, "confirmPassword": 123456},
        )
        self.assertEqual(reg.status_code, 200)
        resp = self.client.post(
            f"{PREFIX}/auth/login", json={"usernameOrEmail": "alice", "password": 123456}
        )
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["token"])

    def test_wrong_field_type_is_400(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/auth/register",
            json={"username": ["alice"], "email": "a@x.com", "password": "secret1", "confirmPassword": "secret1"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"success": False, "message": "Invalid value for username"})

    def test_invalid_json_is_400(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/auth/login",
            content="not json",
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"success": False, "message": "Malformed request body"})

    def test_non_object_body_is_400(self) -> None:
        resp = self.client.post(f"{PREFIX}/auth/login", json=["alice", "secret1"])
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()["success"])


class TestHealthEndpoint(_ApiTestCase):
    def test_health_reports_database_and_tokens(self) -> None:
        resp = self.client.get(f"{PREFIX}/health/")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["database"], "connected")
        self.assertEqual(body["tokens"], "ready")


if __name__ == "__main__":
    unittest.main()
