"""
MindWell Backend — Entity Store Package
=======================================

What:  Storage layer for every entity (users, journal and mood entries,
       catalog, payments).
How:   `EntityStore` defines the contract; `InMemoryStore` and
       `SQLAlchemyStore` implement it. `build_store()` picks one from
       STORAGE_BACKEND.
"""

from mindwell.config import settings
from mindwell.repositories.base import EntityStore


def build_store() -> EntityStore:
    """Create the store selected by settings.storage_backend."""
    if settings.storage_backend == "database":
        from mindwell.repositories.sql import SQLAlchemyStore
        return SQLAlchemyStore(create_schema=settings.db_create_schema)

    from mindwell.repositories.memory import InMemoryStore
    return InMemoryStore()
