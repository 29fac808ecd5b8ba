"""
services/stores.py -- Role-gated store management.

Callers pass the already-authenticated User as actor. This service decides
what that role may do; it never re-checks credentials.

Access policy:
  list_stores / show_store   any authenticated user
  provision_store            ADMIN, MANAGER
  update_store               ADMIN, MANAGER
  delete_store               ADMIN

Missing stores come back as None (show/update) or False (delete), matching
the repository. Only bad input, duplicates and role violations raise.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from auth.roles import Role, ensure_role
from core.errors import DuplicateStoreError, ValidationError
from core.models import Store, User
from core.validation import is_blank, require
from repository.stores import StoreRepository

logger = logging.getLogger("storemgr.stores")

_WRITE_ROLES = (Role.ADMIN, Role.MANAGER)


class StoreService:
    def __init__(self, store_repository: StoreRepository) -> None:
        self._stores = store_repository

    def list_stores(self) -> list[Store]:
        return self._stores.find_all()

    def show_store(self, store_id: Optional[str]) -> Optional[Store]:
        return self._stores.find_by_id(store_id)

    def provision_store(
        self,
        actor: User,
        store_id: Optional[str],
        name: Optional[str],
        address: Optional[str],
        description: Optional[str] = None,
    ) -> Store:
        """Create a new store.

        Raises:
            AuthorizationError: actor is not ADMIN or MANAGER.
            ValidationError: store_id, name or address is blank.
            DuplicateStoreError: store_id is already provisioned.
        """
        ensure_role(actor, *_WRITE_ROLES)
        require(store_id, "store_id")
        require(name, "name")
        require(address, "address")

        if self._stores.exists_by_id(store_id):
            raise DuplicateStoreError(store_id)
        store = self._stores.save(
            Store(id=store_id, name=name, address=address, description=description or "")
        )
        logger.info("Store %s provisioned by %s", store_id, actor.email)
        return store

    def update_store(
        self,
        actor: User,
        store_id: Optional[str],
        description: Optional[str] = None,
        address: Optional[str] = None,
    ) -> Optional[Store]:
        """Update description and/or address. At least one must be given.

        Returns None if the store does not exist.
        """
        ensure_role(actor, *_WRITE_ROLES)
        if is_blank(description) and is_blank(address):
            raise ValidationError(
                "description", "At least one of description or address must be provided for update."
            )
        store = self._stores.find_by_id(store_id)
        if store is None:
            return None

        changes: dict = {}
        if not is_blank(description):
            changes["description"] = description
        if not is_blank(address):
            changes["address"] = address
        updated = self._stores.save(replace(store, **changes))
        logger.info("Store %s updated by %s", store_id, actor.email)
        return updated

    def delete_store(self, actor: User, store_id: Optional[str]) -> bool:
        ensure_role(actor, Role.ADMIN)
        deleted = self._stores.delete_by_id(store_id)
        if deleted:
            logger.info("Store %s deleted by %s", store_id, actor.email)
        return deleted
