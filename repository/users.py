"""
repository/users.py -- Repository for User entities.

A thin guard in front of the DataManager: blank or missing emails resolve to
"not found" here, so the backing store never receives an invalid key.
Everything else is delegated unchanged, including exceptions.

Layer rule: no imports from api/, auth.service, services/ or client/.
"""

from __future__ import annotations

from typing import Optional

from core.models import User
from core.validation import is_blank
from storage.contract import DataManager


class UserRepository:
    def __init__(self, data_manager: DataManager) -> None:
        self._data_manager = data_manager

    def save(self, user: User) -> User:
        return self._data_manager.persist_user(user)

    def find_by_email(self, email: Optional[str]) -> Optional[User]:
        if is_blank(email):
            return None
        return self._data_manager.get_user_by_email(email)

    def find_all(self) -> list[User]:
        return list(self._data_manager.get_all_users())

    def exists_by_email(self, email: Optional[str]) -> bool:
        if is_blank(email):
            return False
        return self._data_manager.does_user_exist(email)

    def delete(self, user: Optional[User]) -> bool:
        if user is None:
            return False
        return self.delete_by_email(user.email)

    def delete_by_email(self, email: Optional[str]) -> bool:
        if is_blank(email):
            return False
        return self._data_manager.remove_user(email)
