"""
repository/stores.py -- Repository for Store entities.

Same guard as UserRepository, keyed by Store.id.
"""

from __future__ import annotations

from typing import Optional

from core.models import Store
from core.validation import is_blank
from storage.contract import DataManager


class StoreRepository:
    def __init__(self, data_manager: DataManager) -> None:
        self._data_manager = data_manager

    def save(self, store: Store) -> Store:
        return self._data_manager.persist_store(store)

    def find_by_id(self, store_id: Optional[str]) -> Optional[Store]:
        if is_blank(store_id):
            return None
        return self._data_manager.get_store_by_id(store_id)

    def find_all(self) -> list[Store]:
        return list(self._data_manager.get_all_stores())

    def exists_by_id(self, store_id: Optional[str]) -> bool:
        if is_blank(store_id):
            return False
        return self._data_manager.does_store_exist(store_id)

    def delete(self, store: Optional[Store]) -> bool:
        if store is None:
            return False
        return self.delete_by_id(store.id)

    def delete_by_id(self, store_id: Optional[str]) -> bool:
        if is_blank(store_id):
            return False
        return self._data_manager.remove_store(store_id)
