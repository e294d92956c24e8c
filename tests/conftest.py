# tests/conftest.py
# Test setup: temporary SQLite DB, pinned clock, and dependency overrides.

import os
import sys
from datetime import datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine

# Ensure repo root on sys.path so "import pocketbook" works
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# The app's own engine is only touched by the startup check; keep it in memory.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pocketbook.models as _models  # noqa: F401,E402  # registers tables on SQLModel.metadata
from pocketbook.db import get_session  # noqa: E402
from pocketbook.main import app as fastapi_app  # noqa: E402
from pocketbook.periods import get_now  # noqa: E402

# Monday 15 Dec 2025, noon: mid-month, so both halves of the month matter
FIXED_NOW = datetime(2025, 12, 15, 12, 0, 0)


@pytest.fixture()
def tmp_db_path(tmp_path: Path) -> Path:
    return tmp_path / "test_pocketbook.db"


@pytest.fixture()
def test_engine(tmp_db_path: Path):
    # File-based SQLite so multiple connections share the same DB
    url = f"sqlite:///{tmp_db_path}"
    engine = create_engine(url, connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)  # tables from pocketbook.models
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session(test_engine):
    with Session(test_engine) as s:
        yield s


@pytest.fixture()
def client(test_engine):
    # Override the app's DB session and clock
    def _get_test_session():
        with Session(test_engine) as s:
            yield s

    fastapi_app.dependency_overrides[get_session] = _get_test_session
    fastapi_app.dependency_overrides[get_now] = lambda: FIXED_NOW
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


def register(client, email="jane@student.edu", name="Jane", password="secret123"):
    r = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert r.status_code == 201, r.text
    token = r.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


def make_category(client, headers, name, kind="expense"):
    r = client.post("/api/categories", json={"name": name, "kind": kind}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["data"]["id"]


def add_expense(client, headers, category_id, amount, when, note=None):
    r = client.post(
        "/api/expenses",
        json={"category_id": category_id, "amount": amount, "date": when, "note": note},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]


def add_income(client, headers, category_id, amount, when, description=None):
    r = client.post(
        "/api/incomes",
        json={
            "category_id": category_id,
            "amount": amount,
            "date": when,
            "description": description,
        },
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]


@pytest.fixture()
def auth(client):
    return register(client)


@pytest.fixture()
def other_auth(client):
    return register(client, email="mallory@student.edu", name="Mallory")


def send_raw_json(client, method, url, raw, headers):
    # httpx won't encode NaN/Infinity itself, but the server's JSON parser accepts them
    return client.request(
        method, url, content=raw, headers={**headers, "Content-Type": "application/json"}
    )
