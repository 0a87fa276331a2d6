from types import SimpleNamespace

import pytest
from cryptography.fernet import Fernet

from src.quelio.quelio.assets.service import AssetService
from src.quelio.quelio.auth.rate_limiter import RateLimiter
from src.quelio.quelio.auth.service import AuthService
from src.quelio.quelio.auth.token import TokenService
from src.quelio.quelio.container import Container, build_container
from src.quelio.quelio.core.exceptions import ConfigurationError, PortalError, PortalLoginError
from src.quelio.quelio.main import create_app
from src.quelio.quelio.storage.json_storage import JsonFileStorage
from src.quelio.quelio.timesheet.accountant import TimeAccountant
from src.quelio.quelio.timesheet.rules import RuleConfig
from src.quelio.quelio.timesheet.service import TimesheetService


class FakeKelio:
    def __init__(self):
        self.down = False

    def login(self, username, password):
        if (username, password) != ("alice", "secret"):
            raise PortalLoginError("Login failed")
        return "js-1"

    def fetch_fragments(self, jsessionid):
        if self.down:
            raise PortalError("Portal returned HTTP 503 for offset 0")
        return [{"13/01/2026": ["08:30", "12:00", "13:00", "18:30"]}]


@pytest.fixture
def kelio():
    return FakeKelio()


@pytest.fixture
def container(tmp_path, kelio):
    rules = RuleConfig()
    storage = JsonFileStorage(tmp_path / "data.json")
    limiter = RateLimiter(tmp_path / "rate.json", max_attempts=2, window_seconds=900)
    tokens = TokenService(Fernet.generate_key())
    return Container(
        rules=rules,
        storage=storage,
        rate_limiter=limiter,
        kelio_client=kelio,
        token_service=tokens,
        auth_service=AuthService(storage, tokens, kelio, limiter, admin_username="admin", admin_password="root"),
        timesheet_service=TimesheetService(kelio, storage, tokens, accountant=TimeAccountant(rules)),
        asset_service=AssetService(),
    )


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    return app.test_client()


def test_login_with_credentials_returns_weeks(client):
    res = client.post("/login", data={"username": "alice", "password": "secret"})

    assert res.status_code == 200
    body = res.get_json()
    assert body["username"] == "alice"
    assert body["cache"] is False
    assert body["weeks"]["2026-w-03"]["days"]["13-01-2026"]["paid"] == "09:14"
    assert body["token"]
    assert res.headers["X-Content-Type-Options"] == "nosniff"
    assert res.headers["X-Frame-Options"] == "DENY"


def test_login_with_token_from_previous_login(client):
    token = client.post("/login", data={"username": "alice", "password": "secret"}).get_json()["token"]

    res = client.post("/login", json={"token": token})

    assert res.status_code == 200
    assert res.get_json()["authenticated_with"] == "token"
    assert res.get_json()["token"] == token


def test_login_requires_credentials(client):
    res = client.post("/login")

    assert res.status_code == 401
    assert res.get_json()["error"].startswith("Authentication required")


def test_wrong_password_then_rate_limited(client):
    res = client.post("/login", data={"username": "alice", "password": "wrong"})
    assert res.status_code == 401
    assert res.get_json()["token_invalidated"] is True

    client.post("/login", data={"username": "alice", "password": "wrong"})
    res = client.post("/login", data={"username": "alice", "password": "secret"})

    assert res.status_code == 429
    body = res.get_json()
    assert body["retry_after_minutes"] == 15
    assert 0 < body["retry_after"] <= 900


def test_password_in_query_string_is_ignored(client):
    res = client.post("/login?username=alice&password=secret")

    assert res.status_code == 401


def test_portal_outage_uses_cache(client, kelio):
    client.post("/login", data={"username": "alice", "password": "secret"})
    kelio.down = True

    res = client.post("/login", data={"username": "alice", "password": "secret"})

    assert res.status_code == 200
    assert res.get_json()["cache"] is True
    assert res.get_json()["fallback"] is True


def test_portal_outage_without_cache_is_bad_gateway(client, kelio):
    kelio.down = True

    res = client.post("/login", data={"username": "alice", "password": "secret"})

    assert res.status_code == 502
    assert res.get_json()["error"] == "No fresh data available and no cached data found"


def test_update_preferences(client):
    res = client.post(
        "/preferences",
        data={"username": "alice", "password": "secret", "theme": "ocean", "minutes_objective": "450"},
    )

    assert res.status_code == 200
    assert res.get_json()["preferences"] == {"theme": "ocean", "minutes_objective": 450}


def test_update_preferences_validation(client):
    res = client.post("/preferences", data={"username": "alice", "password": "secret", "theme": "no spaces"})

    assert res.status_code == 422
    assert "theme" in res.get_json()["fields"]


def test_data_dump_requires_admin(client):
    client.post("/login", data={"username": "alice", "password": "secret"})

    assert client.get("/data.json?username=admin&password=nope").status_code == 401

    res = client.post("/data.json", data={"username": "admin", "password": "root"})
    assert res.status_code == 200
    assert "alice" in res.get_json()


def test_icon_and_manifest(client):
    icon = client.get("/icon.svg?primary=%23112233")
    assert icon.status_code == 200
    assert icon.mimetype == "image/svg+xml"
    assert b'stop-color="#112233"' in icon.data

    manifest = client.get("/manifest.json?background=000000").get_json()
    assert manifest["background_color"] == "#000000"
    assert manifest["icons"][0]["src"].startswith("http://localhost/icon.svg?")


def test_unknown_route_is_json(client):
    res = client.get("/nope")

    assert res.status_code == 404
    assert "error" in res.get_json()


def test_build_container_from_settings(tmp_path):
    settings = SimpleNamespace(
        DATA_FILE=str(tmp_path / "data.json"),
        RATE_LIMIT_FILE=str(tmp_path / "rate.json"),
        KELIO_URL="https://acme.kelio.io",
        ENCRYPTION_KEY=Fernet.generate_key().decode(),
        NOON_MINIMUM_BREAK=45,
    )

    container = build_container(settings=settings)

    assert container.rules.noon_minimum_break_minutes == 45
    assert container.storage.path == tmp_path / "data.json"


def test_build_container_refuses_empty_encryption_key(tmp_path):
    settings = SimpleNamespace(
        DATA_FILE=str(tmp_path / "data.json"),
        RATE_LIMIT_FILE=str(tmp_path / "rate.json"),
        KELIO_URL="https://acme.kelio.io",
        ENCRYPTION_KEY="",
    )

    with pytest.raises(ConfigurationError):
        build_container(settings=settings)
