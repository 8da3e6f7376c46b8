import os

# cheap hashes for tests; read once when auth_hash is imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from taskify.storage.db import get_session_factory, reset_engines


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    # isolate data dir + database per test
    monkeypatch.setenv("APP_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'taskify.db'}")
    monkeypatch.setenv("JWT_SECRET", "dev-secret-for-tests")
    monkeypatch.setenv("JWT_EXP_MINUTES", "15")
    monkeypatch.setenv("SEARCH_DEBOUNCE_MS", "100")
    reset_engines()
    yield tmp_path
    reset_engines()


@pytest.fixture()
def client():
    from taskify.main import app

    return TestClient(app)


@pytest.fixture()
def session_factory(tmp_path):
    return get_session_factory(f"sqlite:///{tmp_path / 'taskify.db'}")


@pytest.fixture()
def guest_headers():
    return {"X-Taskify-Mode": "guest", "X-Guest-Profile": "tester"}
