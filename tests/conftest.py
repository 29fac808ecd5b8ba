"""
tests/conftest.py -- Shared test fixtures for Store Manager tests.

This module provides:
  - FakeDataManager: dict-backed DataManager that records every call, for
    checking what the repositories do and do not delegate
  - data_manager / auth_service / store_service: unit-test wiring over an
    in-memory SQLite SqlDataManager
  - api_client: TestClient over the real app with a patched lifespan and
    three seeded accounts (ADMIN, MANAGER, USER)

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
for api_client because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

BCRYPT_ROUNDS must be set before any auth module import: auth.passwords reads
the cost factor at import time, and the default of 12 makes every hash take
a noticeable fraction of a second.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Optional

# CRITICAL: Set before any auth/core import so get_settings() sees it.
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app, wire_services
from auth.roles import Role
from auth.service import AuthenticationService, encode_basic
from core.models import Store, User
from repository.stores import StoreRepository
from repository.users import UserRepository
from services.stores import StoreService
from storage.sql import SqlDataManager

# ---------------------------------------------------------------------------
# Fake data manager
# ---------------------------------------------------------------------------


class FakeDataManager:
    """In-memory DataManager. Stores copies so callers cannot mutate state in place."""

    def __init__(self) -> None:
        self.users: dict[str, User] = {}
        self.stores: dict[str, Store] = {}
        self.calls: list[tuple[str, object]] = []
        self._lock = threading.Lock()

    def persist_user(self, user: User) -> User:
        self.calls.append(("persist_user", user.email))
        with self._lock:
            self.users[user.email] = replace(user)
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        self.calls.append(("get_user_by_email", email))
        with self._lock:
            user = self.users.get(email)
        return replace(user) if user is not None else None

    def get_all_users(self) -> list[User]:
        self.calls.append(("get_all_users", None))
        with self._lock:
            return [replace(u) for u in self.users.values()]

    def does_user_exist(self, email: str) -> bool:
        self.calls.append(("does_user_exist", email))
        with self._lock:
            return email in self.users

    def remove_user(self, email: str) -> bool:
        self.calls.append(("remove_user", email))
        with self._lock:
            return self.users.pop(email, None) is not None

    def persist_store(self, store: Store) -> Store:
        self.calls.append(("persist_store", store.id))
        with self._lock:
            self.stores[store.id] = replace(store)
        return store

    def get_store_by_id(self, store_id: str) -> Optional[Store]:
        self.calls.append(("get_store_by_id", store_id))
        with self._lock:
            store = self.stores.get(store_id)
        return replace(store) if store is not None else None

    def get_all_stores(self) -> list[Store]:
        self.calls.append(("get_all_stores", None))
        with self._lock:
            return [replace(s) for s in self.stores.values()]

    def does_store_exist(self, store_id: str) -> bool:
        self.calls.append(("does_store_exist", store_id))
        with self._lock:
            return store_id in self.stores

    def remove_store(self, store_id: str) -> bool:
        self.calls.append(("remove_store", store_id))
        with self._lock:
            return self.stores.pop(store_id, None) is not None


@pytest.fixture
def fake_dm() -> FakeDataManager:
    return FakeDataManager()


# ---------------------------------------------------------------------------
# Unit-test wiring over SQLite
# ---------------------------------------------------------------------------


@pytest.fixture
def data_manager() -> Generator[SqlDataManager, None, None]:
    dm = SqlDataManager("sqlite:///:memory:")
    yield dm
    dm.close()


@pytest.fixture
def auth_service(data_manager: SqlDataManager) -> AuthenticationService:
    return AuthenticationService(UserRepository(data_manager))


@pytest.fixture
def store_service(data_manager: SqlDataManager) -> StoreService:
    return StoreService(StoreRepository(data_manager))


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------

ACCOUNTS: dict[Role, tuple[str, str]] = {
    Role.ADMIN: ("admin@x.com", "adminpass"),
    Role.MANAGER: ("manager@x.com", "managerpass"),
    Role.USER: ("user@x.com", "userpass"),
}


def auth_headers(email: str, password: str) -> dict[str, str]:
    return {"Authorization": encode_basic(email, password)}


def headers_for(role: Role) -> dict[str, str]:
    return auth_headers(*ACCOUNTS[role])


@pytest.fixture
def as_role():
    """Return headers_for, so tests can write headers=as_role(Role.ADMIN)."""
    return headers_for


@pytest.fixture
def basic_auth():
    """Return auth_headers, for requests with arbitrary credentials."""
    return auth_headers


def _patch_lifespan(data_manager: SqlDataManager):
    """Return an async context manager that replaces the real lifespan.

    Wires the pre-seeded test data manager into app.state so TestClient
    routes see an isolated database rather than DATABASE_URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        wire_services(app, data_manager)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request: pytest.FixtureRequest) -> Generator[TestClient, None, None]:
    """Yield a TestClient with one seeded account per role (see ACCOUNTS).

    The database name includes the test module name so modules never share
    state. base_url uses localhost so TrustedHostMiddleware accepts the
    requests.
    """
    db_name = f"test_{request.module.__name__.rsplit('.', 1)[-1]}"
    data_manager = SqlDataManager(f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true")
    seeding = AuthenticationService(UserRepository(data_manager))
    for role, (email, password) in ACCOUNTS.items():
        seeding.register_user(email, password, role.value.title(), role)

    app.router.lifespan_context = _patch_lifespan(data_manager)

    with TestClient(app, base_url="http://localhost", raise_server_exceptions=True) as client:
        yield client

    data_manager.close()
