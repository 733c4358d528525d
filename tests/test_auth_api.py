"""API tests for /api/auth: request validation, status mapping and caller identity."""

import unittest
from collections.abc import Generator
from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_auth_service
from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.security import (
    BcryptPasswordHasher,
    JwtTokenIssuer,
    get_password_hasher,
    get_token_issuer,
)
from app.main import app
from app.models import Base, User

SECRET = "api-test-secret-that-is-at-least-32-bytes-long"
REGISTER_URL = "/api/auth/register"
LOGIN_URL = "/api/auth/login"
ME_URL = "/api/auth/me"


class AuthApiTestCase(unittest.TestCase):
    """Runs the app against an in-memory SQLite store with fast bcrypt."""

    def setUp(self) -> None:
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(engine)
        self.Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        self.issuer = JwtTokenIssuer(secret=SECRET)
        self.settings = Settings(APP_ENV="dev", TRUST_USER_ID_HEADER=False)

        def _get_db() -> Generator[Session, None, None]:
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = _get_db
        app.dependency_overrides[get_password_hasher] = lambda: BcryptPasswordHasher(rounds=4)
        app.dependency_overrides[get_token_issuer] = lambda: self.issuer
        app.dependency_overrides[get_settings] = lambda: self.settings
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def _register(self, **overrides: str):
        body = {"name": "Ana", "email": "a@x.com", "password": "secret1"}
        body.update(overrides)
        return self.client.post(REGISTER_URL, json=body)

    def _user_count(self) -> int:
        with self.Session() as db:
            return db.scalar(select(func.count()).select_from(User))

    def _deactivate(self, email: str) -> None:
        with self.Session() as db:
            user = db.scalars(select(User).where(User.email == email)).one()
            user.active = False
            db.commit()


class TestRegisterEndpoint(AuthApiTestCase):
    def test_register_returns_201_with_token(self) -> None:
        resp = self._register()
        self.assertEqual(resp.status_code, 201)
        data = resp.json()
        self.assertTrue(data["token"])
        self.assertIsInstance(data["userId"], int)
        self.assertEqual(data["name"], "Ana")
        self.assertEqual(data["email"], "a@x.com")
        self.assertEqual(self.issuer.decode(data["token"])["sub"], str(data["userId"]))

    def test_password_is_stored_hashed(self) -> None:
        self._register()
        with self.Session() as db:
            user = db.scalars(select(User)).one()
        self.assertNotEqual(user.password_hash, "secret1")
        self.assertTrue(BcryptPasswordHasher(rounds=4).verify("secret1", user.password_hash))
        self.assertTrue(user.active)

    def test_duplicate_email_returns_409_and_store_unchanged(self) -> None:
        self.assertEqual(self._register().status_code, 201)
        resp = self._register(name="Other")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["detail"], "Email is already registered.")
        self.assertEqual(self._user_count(), 1)

    def test_invalid_fields_return_400_field_map(self) -> None:
        resp = self._register(name="Jo", email="email-invalido", password="123")
        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertEqual(body["detail"], "Validation failed")
        self.assertEqual(set(body["errors"]), {"name", "email", "password"})
        self.assertEqual(body["errors"]["password"], "must be at least 6 characters")
        self.assertEqual(self._user_count(), 0)

    def test_blank_name_rejected(self) -> None:
        resp = self._register(name="    ")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["errors"]["name"], "must not be blank")

    def test_missing_field_rejected(self) -> None:
        resp = self.client.post(REGISTER_URL, json={"email": "a@x.com", "password": "secret1"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("name", resp.json()["errors"])

    def test_validation_happens_before_service(self) -> None:
        service = MagicMock()
        app.dependency_overrides[get_auth_service] = lambda: service
        resp = self._register(email="not-an-email")
        self.assertEqual(resp.status_code, 400)
        service.register.assert_not_called()

    def test_malformed_json_keyed_as_body(self) -> None:
        resp = self.client.post(
            REGISTER_URL,
            content=b'{"name": "Ana", "email": ',
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(list(resp.json()["errors"]), ["body"])


class TestLoginEndpoint(AuthApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self._register().json()["userId"]

    def test_login_returns_token(self) -> None:
        resp = self.client.post(LOGIN_URL, json={"email": "a@x.com", "password": "secret1"})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertTrue(data["token"])
        self.assertEqual(data["userId"], self.user_id)
        self.assertEqual(data["name"], "Ana")
        self.assertEqual(data["email"], "a@x.com")

    def test_wrong_password_and_unknown_email_look_the_same(self) -> None:
        wrong = self.client.post(LOGIN_URL, json={"email": "a@x.com", "password": "wrong"})
        unknown = self.client.post(LOGIN_URL, json={"email": "b@x.com", "password": "secret1"})
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(wrong.json(), unknown.json())

    def test_inactive_account_rejected(self) -> None:
        self._deactivate("a@x.com")
        resp = self.client.post(LOGIN_URL, json={"email": "a@x.com", "password": "secret1"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Account is inactive.")

    def test_blank_password_rejected(self) -> None:
        resp = self.client.post(LOGIN_URL, json={"email": "a@x.com", "password": "  "})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("password", resp.json()["errors"])


class TestMeEndpoint(AuthApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        data = self._register().json()
        self.user_id = data["userId"]
        self.token = data["token"]

    def test_me_with_bearer_token(self) -> None:
        resp = self.client.get(ME_URL, headers={"Authorization": f"Bearer {self.token}"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json(),
            {"id": self.user_id, "name": "Ana", "email": "a@x.com", "active": True},
        )

    def test_me_without_credentials(self) -> None:
        resp = self.client.get(ME_URL)
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.headers["WWW-Authenticate"], "Bearer")

    def test_me_with_invalid_token(self) -> None:
        resp = self.client.get(ME_URL, headers={"Authorization": "Bearer not-a-jwt"})
        self.assertEqual(resp.status_code, 401)

    def test_me_for_unknown_user(self) -> None:
        token = self.issuer.issue("ghost@x.com", self.user_id + 100)
        resp = self.client.get(ME_URL, headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"], "User not found.")

    def test_user_id_header_ignored_by_default(self) -> None:
        resp = self.client.get(ME_URL, headers={"X-User-Id": str(self.user_id)})
        self.assertEqual(resp.status_code, 401)

    def test_user_id_header_when_trusted(self) -> None:
        self.settings = Settings(TRUST_USER_ID_HEADER=True)
        resp = self.client.get(ME_URL, headers={"X-User-Id": str(self.user_id)})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["id"], self.user_id)

    def test_non_integer_user_id_header(self) -> None:
        self.settings = Settings(TRUST_USER_ID_HEADER=True)
        resp = self.client.get(ME_URL, headers={"X-User-Id": "abc"})
        self.assertEqual(resp.status_code, 400)

    def test_out_of_range_user_id_header(self) -> None:
        self.settings = Settings(TRUST_USER_ID_HEADER=True)
        for value in ("9" * 30, str(2**31), "0", "-5"):
            with self.subTest(value=value):
                resp = self.client.get(ME_URL, headers={"X-User-Id": value})
                self.assertEqual(resp.status_code, 400)
                self.assertIn("X-User-Id must be an integer", resp.json()["detail"])

    def test_token_with_out_of_range_subject(self) -> None:
        token = self.issuer.issue("ghost@x.com", 10**30)
        resp = self.client.get(ME_URL, headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Invalid token payload")


class TestHealthEndpoint(AuthApiTestCase):
    def test_health_reports_connected(self) -> None:
        resp = self.client.get("/api/health/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json(),
            {"status": "ok", "service": "auth", "environment": "dev", "database": "connected"},
        )
