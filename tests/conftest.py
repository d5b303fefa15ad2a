"""Shared fixtures: an isolated sqlite file per test and fast bcrypt settings."""

import itertools
import os
import tempfile

# Establish isolated temp directory and set env BEFORE importing settings;
# importing expense_tracker.main builds a default app from the environment.
TEMP_DIR = tempfile.mkdtemp(prefix="expense_tracker_test_")
os.environ.setdefault("DATA_DIR", TEMP_DIR)
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from expense_tracker.core.config import Settings
from expense_tracker.db.dal import Database
from expense_tracker.db.migrate import apply_migrations
from expense_tracker.main import create_app
from expense_tracker.models.user import RegistrationIn
from expense_tracker.services.access import AccessMediator
from expense_tracker.services.accounts import AccountManager
from expense_tracker.services.credentials import CredentialStore
from expense_tracker.services.ledger import ExpenseLedger
from expense_tracker.services.tokens import TokenService

PASSWORD = "password123"
_emails = itertools.count(1)


@pytest.fixture
def settings(tmp_path):
    s = Settings(
        data_dir=tmp_path,
        db_filename="test.sqlite3",
        bcrypt_rounds=4,
        token_secret_key="test-secret-key",
        debug=False,
    )
    s.init_post_load()
    return s


@pytest.fixture
def db(settings):
    apply_migrations(settings.db_path)
    return Database(settings.db_path)


@pytest.fixture
def credentials():
    return CredentialStore(rounds=4)


@pytest.fixture
def accounts(db, credentials):
    return AccountManager(db, credentials)


@pytest.fixture
def ledger(db):
    return ExpenseLedger(db)


@pytest.fixture
def tokens(settings):
    return TokenService(settings.token_config())


@pytest.fixture
def access(tokens, accounts):
    return AccessMediator(tokens, accounts)


@pytest.fixture
def make_user(accounts):
    """Register a user with a unique email and return the ``User``."""

    def _make(email=None, password=PASSWORD, name="Test User"):
        email = email or f"user{next(_emails)}@example.com"
        result = accounts.register(
            RegistrationIn(email=email, password=password, name=name)
        )
        assert result.ok, result
        return result.value

    return _make


@pytest.fixture
def app(settings):
    return create_app(settings_override=settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def register_and_login(client):
    """Register through the API and return ``(user_json, auth_headers)``."""

    def _do(email=None, password=PASSWORD, name="Api User"):
        email = email or f"api{next(_emails)}@example.com"
        resp = client.post(
            "/api/auth/register",
            json={"user": {"email": email, "password": password, "name": name}},
        )
        assert resp.status_code == 201, resp.text
        login = client.post("/api/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        data = login.json()["data"]
        return data["user"], {"Authorization": f"Bearer {data['token']}"}

    return _do
