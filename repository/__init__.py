"""repository/ -- Repositories for User and Store over the DataManager contract."""

from repository.stores import StoreRepository
from repository.users import UserRepository

__all__ = ["StoreRepository", "UserRepository"]
