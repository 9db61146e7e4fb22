"""Caller-facing replication entry point."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from replicata.adapters.sqlalchemy import MappedRelationResolver, SqlAlchemyReplicationStore
from replicata.config import get_replication_config
from replicata.domain import Replicator

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.orm import Session

    from replicata.adapters.sqlalchemy import MappedRelation
    from replicata.config import ReplicationConfig
    from replicata.domain import RelationResolver

TEntity = TypeVar("TEntity")


def replicate(
    session: Session,
    entity: TEntity,
    paths: Iterable[str] = (),
    *,
    relations: RelationResolver[MappedRelation] | None = None,
    config: ReplicationConfig | None = None,
    exclude: Iterable[str] = (),
    strict: bool | None = None,
) -> TEntity:
    """Copy ``entity`` and the relations named by ``paths`` into ``session``.

    ``paths`` are dotted relation names such as ``"lines.items"``. Segments that
    name no replicable relation are skipped unless ``strict`` is set (or
    ``REPLICATA_STRICT_PATHS`` is on). Nothing is committed: copies are flushed
    into the session's current transaction.
    """

    effective = (config or get_replication_config()).excluding(exclude)
    replicator = Replicator(
        store=SqlAlchemyReplicationStore(session, effective),
        relations=relations or MappedRelationResolver(),
        strict=effective.strict_paths if strict is None else strict,
    )
    return replicator.replicate(entity, paths)
