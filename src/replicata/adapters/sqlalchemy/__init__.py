"""SQLAlchemy adapter package for Replicata."""

from __future__ import annotations

from .relations import (
    MappedRelation,
    MappedRelationResolver,
    RelationRegistry,
    classify_relationship,
    find_discriminators,
    relation_registry_for,
)
from .store import SqlAlchemyReplicationStore
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "MappedRelation",
    "MappedRelationResolver",
    "RelationRegistry",
    "SqlAlchemyReplicationStore",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "classify_relationship",
    "configured_engine",
    "find_discriminators",
    "is_started",
    "relation_registry_for",
    "shutdown",
    "startup",
]
