"""
End-to-end tests for the auth HTTP routes.
"""

import logging
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError as PydanticValidationError

from auth.errors import SigningFailure
from auth.jwt import TokenIssuer
from auth.models import UserRecord
from auth.notifier import Notifier
from auth.store import InMemoryCredentialStore
from config.settings import Settings
from main import create_app

ALICE = {"email": "a@x.com", "password": "secret123"}


class RecordingNotifier(Notifier):
    def __init__(self):
        self.sent = []

    async def notify(self, email):
        self.sent.append(email)


class BrokenNotifier(Notifier):
    async def notify(self, email):
        raise RuntimeError("smtp down")


def _settings(**overrides) -> Settings:
    values = {"signing_secret": "route-secret", "hash_work_factor": 4, "credential_store": "memory"}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def client(notifier):
    return TestClient(create_app(_settings(), notifier=notifier))


class TestRegisterRoute:
    def test_register_returns_201_without_hash(self, client, notifier):
        r = client.post("/api/v1/auth/register", json=ALICE)
        assert r.status_code == 201
        body = r.json()
        assert body["success"] is True
        assert body["message"] == "Registration successful"
        assert body["data"]["email"] == "a@x.com"
        assert body["data"]["identity_id"]
        assert "password" not in r.text
        assert notifier.sent == ["a@x.com"]

    def test_duplicate_is_409(self, client):
        client.post("/api/v1/auth/register", json=ALICE)
        r = client.post("/api/v1/auth/register", json=ALICE)
        assert r.status_code == 409
        assert r.json() == {
            "success": False,
            "error": "user_already_exists",
            "message": "User already exists",
        }

    def test_missing_field_is_422(self, client):
        r = client.post("/api/v1/auth/register", json={"email": "a@x.com"})
        assert r.status_code == 422
        assert r.json()["error"] == "validation_error"

    def test_notifier_failure_does_not_fail_registration(self):
        client = TestClient(create_app(_settings(), notifier=BrokenNotifier()))
        r = client.post("/api/v1/auth/register", json=ALICE)
        assert r.status_code == 201
        login = client.post("/api/v1/auth/login", json=ALICE)
        assert login.status_code == 200


class TestLoginRoute:
    def test_login_and_me(self, client):
        registered = client.post("/api/v1/auth/register", json=ALICE).json()["data"]

        r = client.post("/api/v1/auth/login", json=ALICE)
        assert r.status_code == 200
        token = r.json()["token"]

        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["data"] == {"identity_id": registered["identity_id"]}

    def test_wrong_password_and_unknown_email_are_indistinguishable(self, client):
        client.post("/api/v1/auth/register", json=ALICE)

        wrong = client.post("/api/v1/auth/login", json={"email": "a@x.com", "password": "wrong"})
        unknown = client.post("/api/v1/auth/login", json={"email": "nobody@x.com", "password": "x"})

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json() == {
            "success": False,
            "error": "invalid_credentials",
            "message": "Invalid credentials",
        }

    def test_me_without_token_is_401(self, client):
        r = client.get("/api/v1/auth/me")
        assert r.status_code == 401
        assert r.json()["error"] == "missing_token"

    def test_me_with_foreign_token_is_403(self, client):
        other = TestClient(create_app(_settings(signing_secret="someone-else")))
        other.post("/api/v1/auth/register", json=ALICE)
        token = other.post("/api/v1/auth/login", json=ALICE).json()["token"]

        r = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 403
        assert r.json()["error"] == "invalid_token"

    def test_expired_token_is_403(self, client):
        token = TokenIssuer("route-secret").issue("user-1", 0)

        r = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 403
        assert r.json()["error"] == "token_expired"


class TestAppStartup:
    def test_blank_signing_secret_refuses_to_start(self):
        with pytest.raises(SigningFailure):
            create_app(_settings(signing_secret=""))

    def test_unknown_store_is_rejected(self):
        with pytest.raises(RuntimeError):
            create_app(_settings(credential_store="redis"))

    def test_health_and_timing_header(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok"}
        assert "X-Process-Time" in r.headers

    def test_create_app_configures_logging(self):
        with patch("main.configure_logging") as configure:
            create_app(_settings(debug=True))
        configure.assert_called_once_with(True)

    @pytest.mark.parametrize("ttl", [0, -60])
    def test_non_positive_token_ttl_is_rejected(self, ttl):
        with pytest.raises(PydanticValidationError):
            _settings(token_ttl_seconds=ttl)


class CorruptHashStore(InMemoryCredentialStore):
    async def find_by_email(self, email):
        return UserRecord(email=email, identity_id="id-1", password_hash="corrupt")


class TestConfigurationFaults:
    def test_corrupt_stored_hash_is_opaque_500(self, caplog):
        client = TestClient(create_app(_settings(), store=CorruptHashStore()))

        with caplog.at_level(logging.INFO):
            r = client.post("/api/v1/auth/login", json=ALICE)

        assert r.status_code == 500
        assert r.json() == {
            "success": False,
            "error": "hashing_failure",
            "message": "Internal error",
        }
        assert "corrupt" not in r.text
        errors = [
            rec for rec in caplog.records
            if rec.name == "api.errors" and rec.levelno == logging.ERROR
        ]
        assert len(errors) == 1
        assert "hashing_failure" in errors[0].getMessage()

    def test_missing_signing_secret_at_login_is_opaque_500(self, caplog):
        app = create_app(_settings())
        client = TestClient(app)
        client.post("/api/v1/auth/register", json=ALICE)
        app.state.auth_service.issuer = TokenIssuer("")

        with caplog.at_level(logging.INFO):
            r = client.post("/api/v1/auth/login", json=ALICE)

        assert r.status_code == 500
        assert r.json()["error"] == "signing_failure"
        assert r.json()["message"] == "Internal error"
        assert any(
            rec.name == "api.errors" and rec.levelno == logging.ERROR
            for rec in caplog.records
        )

    def test_user_errors_are_not_logged_as_errors(self, client, caplog):
        with caplog.at_level(logging.INFO):
            client.post("/api/v1/auth/login", json={"email": "nobody@x.com", "password": "x"})
        assert not [rec for rec in caplog.records if rec.levelno >= logging.ERROR]


class TestRequestLogging:
    def test_failed_request_logs_error_kind(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="api.middleware"):
            client.post("/api/v1/auth/login", json={"email": "nobody@x.com", "password": "x"})
            client.get("/api/v1/auth/me")

        lines = [rec.getMessage() for rec in caplog.records if rec.name == "api.middleware"]
        assert any("POST /api/v1/auth/login 401 invalid_credentials" in line for line in lines)
        assert any("GET /api/v1/auth/me 401 missing_token" in line for line in lines)

    def test_successful_request_is_not_logged_at_info(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="api.middleware"):
            client.get("/health")
        assert not [rec for rec in caplog.records if rec.name == "api.middleware"]
