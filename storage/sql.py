"""
storage/sql.py -- SQLAlchemy Core implementation of the DataManager contract.

Pattern: Data Mapper. SqlDataManager owns the tables; _row_to_user and
_row_to_store translate raw rows into the dataclasses in core/models.py.
Repositories and services never touch SQL directly.

Uses SQLAlchemy Core (not ORM) so the domain dataclasses remain the
authoritative representation. Swapping SQLite for PostgreSQL is a connection
string change, not a rewrite.

Security:
  All queries use bound parameters. No f-strings in SQL.

Atomicity:
  persist_* runs UPDATE-then-INSERT inside one engine.begin() transaction.
  The natural key is the primary key, so a racing INSERT of the same key
  fails with IntegrityError instead of producing two rows.

Usage:
    dm = SqlDataManager()                                # settings.database_url
    dm = SqlDataManager("postgresql://user:pw@host/db")
    dm.persist_user(User(email="a@x.com", name="Ann", password=hash_password("pw")))
    user = dm.get_user_by_email("a@x.com")
    dm.close()
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event, select
from sqlalchemy.engine import Engine, Row

from auth.roles import parse_role
from core.config import get_settings
from core.models import Store, User

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_users = Table(
    "users",
    metadata,
    Column("email", String(255), primary_key=True),
    Column("password", Text),  # bcrypt hash; legacy rows may hold plaintext
    Column("name", String(255), nullable=False),
    Column("role", String(20), nullable=False, server_default="USER"),
)

_stores = Table(
    "stores",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("address", String(512), nullable=False),
    Column("description", Text, nullable=False, server_default=""),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Data manager
# ---------------------------------------------------------------------------


class SqlDataManager:
    """DataManager backed by a SQLAlchemy engine."""

    def __init__(self, db_url: Optional[str] = None) -> None:
        db_url = db_url or get_settings().database_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def persist_user(self, user: User) -> User:
        values = {"password": user.password, "name": user.name, "role": user.role.value}
        with self.engine.begin() as conn:
            result = conn.execute(_users.update().where(_users.c.email == user.email).values(**values))
            if result.rowcount == 0:
                conn.execute(_users.insert().values(email=user.email, **values))
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_all_users(self) -> list[User]:
        with self.engine.connect() as conn:
            rows = conn.execute(_users.select().order_by(_users.c.email)).fetchall()
        return [_row_to_user(r) for r in rows]

    def does_user_exist(self, email: str) -> bool:
        with self.engine.connect() as conn:
            row = conn.execute(select(_users.c.email).where(_users.c.email == email)).first()
        return row is not None

    def remove_user(self, email: str) -> bool:
        """Delete a user record. Returns True if deleted, False if not found."""
        with self.engine.begin() as conn:
            result = conn.execute(_users.delete().where(_users.c.email == email))
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Stores
    # ------------------------------------------------------------------

    def persist_store(self, store: Store) -> Store:
        values = {"name": store.name, "address": store.address, "description": store.description}
        with self.engine.begin() as conn:
            result = conn.execute(_stores.update().where(_stores.c.id == store.id).values(**values))
            if result.rowcount == 0:
                conn.execute(_stores.insert().values(id=store.id, **values))
        return store

    def get_store_by_id(self, store_id: str) -> Optional[Store]:
        with self.engine.connect() as conn:
            row = conn.execute(_stores.select().where(_stores.c.id == store_id)).fetchone()
        return _row_to_store(row) if row is not None else None

    def get_all_stores(self) -> list[Store]:
        with self.engine.connect() as conn:
            rows = conn.execute(_stores.select().order_by(_stores.c.id)).fetchall()
        return [_row_to_store(r) for r in rows]

    def does_store_exist(self, store_id: str) -> bool:
        with self.engine.connect() as conn:
            row = conn.execute(select(_stores.c.id).where(_stores.c.id == store_id)).first()
        return row is not None

    def remove_store(self, store_id: str) -> bool:
        with self.engine.begin() as conn:
            result = conn.execute(_stores.delete().where(_stores.c.id == store_id))
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_user(row: Row) -> User:
    # parse_role keeps a hand-edited or corrupted role column from raising
    # and from resolving to anything above USER.
    return User(
        email=row.email,
        name=row.name,
        role=parse_role(row.role),
        password=row.password,
    )


def _row_to_store(row: Row) -> Store:
    return Store(
        id=row.id,
        name=row.name,
        address=row.address,
        description=row.description or "",
    )
