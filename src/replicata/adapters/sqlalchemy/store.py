"""Replication store backed by a SQLAlchemy session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy import Column, and_, delete, insert, inspect

from replicata.config import ReplicationConfig

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.orm import ColumnProperty, Mapper, Session

    from .relations import MappedRelation

log = logging.getLogger(__name__)

TEntity = TypeVar("TEntity")


def _attribute_key(mapper: Mapper[Any], column: Column[Any]) -> str:
    return mapper.get_property_by_column(column).key


class SqlAlchemyReplicationStore:
    """Copy, persist and link mapped entities within one session.

    Persisting flushes straight away so generated keys are available to the
    next step. Owned children are pointed at their parent before that flush.
    Nothing here commits; the caller owns the transaction.
    """

    def __init__(self, session: Session, config: ReplicationConfig | None = None) -> None:
        self.session = session
        self.config = config or ReplicationConfig()

    def replicate_shallow(self, entity: TEntity) -> TEntity:
        mapper = inspect(entity).mapper
        copy: TEntity = mapper.class_manager.new_instance()
        for prop in mapper.column_attrs:
            if self._copies(prop):
                setattr(copy, prop.key, getattr(entity, prop.key))
        return copy

    def persist(self, entity: object) -> None:
        self.session.add(entity)
        self.session.flush()

    def related(self, entity: object, relation: MappedRelation) -> list[object]:
        value = getattr(entity, relation.name)
        if value is None:
            return []
        if relation.kind.is_singular:
            return [value]
        return list(value)

    def save_owned(self, parent: object, relation: MappedRelation, child: object) -> None:
        parent_mapper = inspect(parent).mapper
        child_mapper = inspect(child).mapper
        for parent_column, child_column in relation.prop.synchronize_pairs:
            value = getattr(parent, _attribute_key(parent_mapper, parent_column))
            setattr(child, _attribute_key(child_mapper, child_column), value)
        for column, value in relation.discriminators:
            setattr(child, _attribute_key(child_mapper, column), value)
        # reloaded on next access, once the child has been flushed
        self.session.expire(parent, [relation.name])

    def sync_associations(
        self, parent: object, relation: MappedRelation, children: Sequence[object]
    ) -> None:
        link_table = relation.link_table
        if link_table is None:
            raise ValueError(f"{relation.owner.__name__}.{relation.name} has no link table")

        self.session.flush()
        parent_mapper = inspect(parent).mapper
        owner_values: dict[str, object] = {
            link_column.key: getattr(parent, _attribute_key(parent_mapper, parent_column))
            for parent_column, link_column in relation.prop.synchronize_pairs
        }
        owner_values.update({column.key: value for column, value in relation.discriminators})

        self.session.execute(
            delete(link_table).where(
                and_(*(link_table.c[key] == value for key, value in owner_values.items()))
            )
        )

        rows: list[dict[str, object]] = []
        for child in children:
            child_mapper = inspect(child).mapper
            row = dict(owner_values)
            for child_column, link_column in relation.prop.secondary_synchronize_pairs:
                row[link_column.key] = getattr(child, _attribute_key(child_mapper, child_column))
            rows.append(row)
        if rows:
            self.session.execute(insert(link_table), rows)

        log.debug(
            "Linked %d %s to %s via %s",
            len(rows),
            relation.prop.mapper.class_.__name__,
            relation.owner.__name__,
            relation.name,
        )
        self.session.expire(parent, [relation.name])

    def _copies(self, prop: ColumnProperty[Any]) -> bool:
        if prop.key in self.config.exclude or prop.key in self.config.auto_fields:
            return False
        for column in prop.columns:
            if not isinstance(column, Column):
                return False
            if column.primary_key or column.name in self.config.auto_fields:
                return False
            if column.onupdate is not None or column.server_onupdate is not None:
                return False
        return True


if TYPE_CHECKING:
    from replicata.domain import ReplicationStore

    _store_check: ReplicationStore[MappedRelation] = SqlAlchemyReplicationStore(
        session=Session()
    )
