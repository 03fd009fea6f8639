import os

# Settings are read at import time; point them at throwaway values first.
os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ["DATABASE_URL"] = "sqlite://"

from collections import defaultdict
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from storefront.core.local_storage import LocalStorage
from storefront.core.notifications import Notifier
from storefront.core.ttl_cache import TtlCache
from storefront.models.storage import StorageEntry  # noqa: F401


class FakeResponse:
    def __init__(self, data: Any):
        self.data = data


class FakeQuery:
    """Chainable stand-in for a PostgREST query builder."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload: Any = None
        self.filters: list[tuple[str, Any]] = []
        self.order_by: list[tuple[str, bool]] = []
        self.bounds: tuple[int, int] | None = None
        self.max_rows: int | None = None

    def select(self, columns: str = "*"):
        self.op = "select"
        return self

    def insert(self, payload: Any):
        self.op = "insert"
        self.payload = payload
        return self

    def eq(self, column: str, value: Any):
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False):
        self.order_by.append((column, desc))
        return self

    def range(self, start: int, end: int):
        self.bounds = (start, end)
        return self

    def limit(self, count: int):
        self.max_rows = count
        return self

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table, self.op))
        if self.table in self.db.failing:
            raise RuntimeError(f"{self.table} unavailable")

        rows = self.db.tables[self.table]
        if self.op == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            stored = []
            for row in payload:
                row = {"id": f"{self.table}-{len(rows) + 1}", **row}
                rows.append(row)
                stored.append(row)
            return FakeResponse(stored)

        result = [r for r in rows if all(r.get(c) == v for c, v in self.filters)]
        for column, desc in reversed(self.order_by):
            result.sort(key=lambda r: r.get(column), reverse=desc)
        if self.bounds is not None:
            start, end = self.bounds
            result = result[start : end + 1]
        if self.max_rows is not None:
            result = result[: self.max_rows]
        return FakeResponse(result)


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str):
        self.db = db
        self.name = name

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.name, "rpc"))
        if self.name in self.db.failing:
            raise RuntimeError(f"{self.name} unavailable")
        return FakeResponse(self.db.rpc_results[self.name])


class FakeAuth:
    def __init__(self):
        self.users: dict[str, tuple[str, str]] = {}
        self.signed_out = 0

    def sign_in_with_password(self, credentials: dict[str, str]):
        user = self.users.get(credentials["email"])
        if user is None or user[0] != credentials["password"]:
            raise RuntimeError("Invalid login credentials")
        return SimpleNamespace(user=SimpleNamespace(id=user[1]))

    def sign_out(self):
        self.signed_out += 1


class FakeSupabase:
    """In-memory Supabase client covering the calls the repositories make."""

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.rpc_results: dict[str, Any] = {"generate_order_number": "ORD-0001"}
        self.failing: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self.auth = FakeAuth()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict | None = None) -> FakeRpc:
        return FakeRpc(self, name)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def storage(session):
    return LocalStorage(session=session, namespace="client-test-1")


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def api(engine, fake_supabase):
    from storefront.core.supabase_client import get_supabase
    from storefront.database import get_session
    from storefront.dependencies import get_banners_cache, get_categories_cache
    from storefront.main import app

    def override_session():
        with Session(engine) as session:
            yield session

    categories_cache = TtlCache(300)
    banners_cache = TtlCache(300)

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_categories_cache] = lambda: categories_cache
    app.dependency_overrides[get_banners_cache] = lambda: banners_cache

    client = TestClient(app)
    client.headers.update({"X-Client-Id": "client-abc-123"})
    yield client

    app.dependency_overrides.clear()
