"""
storage/contract.py -- The data access contract every backing store implements.

Repositories depend on this Protocol, never on a concrete engine. Anything
with these ten methods can back the application: SqlDataManager in
production, a dict-backed fake in tests.

Required semantics:
  persist_*    insert-or-replace keyed by the natural key (User.email,
               Store.id); returns the stored entity.
  get_*_by_*   the entity, or None. Never a placeholder object.
  get_all_*    a snapshot list; order is not part of the contract.
  does_*_exist True iff a record with the key is stored.
  remove_*     True iff a record was removed.

Each call must be atomic for the entity it touches, and a read after a
completed write on the same instance must observe that write. Failures are
raised, not swallowed -- the layers above do not retry.
"""

from __future__ import annotations

from typing import Optional, Protocol

from core.models import Store, User


class DataManager(Protocol):
    # Users

    def persist_user(self, user: User) -> User: ...

    def get_user_by_email(self, email: str) -> Optional[User]: ...

    def get_all_users(self) -> list[User]: ...

    def does_user_exist(self, email: str) -> bool: ...

    def remove_user(self, email: str) -> bool: ...

    # Stores

    def persist_store(self, store: Store) -> Store: ...

    def get_store_by_id(self, store_id: str) -> Optional[Store]: ...

    def get_all_stores(self) -> list[Store]: ...

    def does_store_exist(self, store_id: str) -> bool: ...

    def remove_store(self, store_id: str) -> bool: ...
