"""Classify SQLAlchemy relationships into replication kinds.

The registry is built once from mapper metadata. Lookups during replication
go through ``(mapped class, relation name)`` and never reflect on the
entity itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cache
from typing import TYPE_CHECKING, Any, TypeAlias

from sqlalchemy import inspect
from sqlalchemy.orm import RelationshipDirection, configure_mappers
from sqlalchemy.sql import operators, visitors
from sqlalchemy.sql.elements import BinaryExpression, BindParameter

from replicata.domain import RelationKind

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Column, ColumnElement, FromClause
    from sqlalchemy.orm import Mapper, RelationshipProperty, registry

log = logging.getLogger(__name__)

Discriminators: TypeAlias = tuple[tuple["Column[Any]", object], ...]

_OWNED_KINDS = {
    (False, False): RelationKind.SINGULAR_OWNED,
    (False, True): RelationKind.SINGULAR_OWNED_POLYMORPHIC,
    (True, False): RelationKind.COLLECTION_OWNED,
    (True, True): RelationKind.COLLECTION_OWNED_POLYMORPHIC,
}


@dataclass(frozen=True, slots=True)
class MappedRelation:
    """A relationship of one mapped class, classified for replication."""

    owner: type[Any]
    name: str
    kind: RelationKind
    prop: RelationshipProperty[Any]
    discriminators: Discriminators = ()

    @property
    def link_table(self) -> FromClause | None:
        return self.prop.secondary


def find_discriminators(
    condition: ColumnElement[bool] | None, tables: tuple[FromClause, ...]
) -> Discriminators:
    """Return ``(column, literal)`` pairs compared with ``==`` in ``condition``.

    Only columns belonging to ``tables`` count, so the owner side of a join
    never contributes a discriminator.
    """

    if condition is None:
        return ()
    found: dict[Column[Any], object] = {}
    for element in visitors.iterate(condition):
        if not isinstance(element, BinaryExpression) or element.operator is not operators.eq:
            continue
        for column, other in ((element.left, element.right), (element.right, element.left)):
            table = getattr(column, "table", None)
            if isinstance(other, BindParameter) and any(table is t for t in tables):
                found[table.c[column.key]] = other.effective_value
    return tuple(found.items())


def _discriminators_for(prop: RelationshipProperty[Any]) -> Discriminators:
    if prop.secondary is not None:
        link: tuple[FromClause, ...] = (prop.secondary,)
        return find_discriminators(prop.primaryjoin, link) + find_discriminators(
            prop.secondaryjoin, link
        )
    return find_discriminators(prop.primaryjoin, tuple(prop.mapper.tables))


def _classify(
    prop: RelationshipProperty[Any],
) -> tuple[RelationKind, Discriminators] | None:
    if prop.direction is RelationshipDirection.MANYTOMANY:
        if prop.secondary is None:
            return None
        discriminators = _discriminators_for(prop)
        kind = (
            RelationKind.MANY_TO_MANY_POLYMORPHIC if discriminators else RelationKind.MANY_TO_MANY
        )
        return kind, discriminators

    if prop.direction is RelationshipDirection.ONETOMANY and not prop.viewonly:
        discriminators = _discriminators_for(prop)
        return _OWNED_KINDS[(bool(prop.uselist), bool(discriminators))], discriminators

    # MANYTOONE (the owned side pointing back) is not something to copy.
    return None


def classify_relationship(prop: RelationshipProperty[Any]) -> RelationKind | None:
    """Map a relationship onto a ``RelationKind``; ``None`` when it cannot be replicated."""

    classified = _classify(prop)
    return classified[0] if classified else None


class RelationRegistry:
    """Explicit ``(mapped class, relation name) -> MappedRelation`` table."""

    def __init__(self) -> None:
        self._relations: dict[tuple[type[Any], str], MappedRelation] = {}

    @classmethod
    def from_registry(cls, mapper_registry: registry) -> RelationRegistry:
        configure_mappers()
        instance = cls()
        for mapper in mapper_registry.mappers:
            instance.add_mapper(mapper)
        return instance

    @classmethod
    def from_classes(cls, *classes: type[Any]) -> RelationRegistry:
        configure_mappers()
        instance = cls()
        for mapped in classes:
            instance.add_mapper(inspect(mapped))
        return instance

    def add_mapper(self, mapper: Mapper[Any]) -> None:
        for prop in mapper.relationships:
            classified = _classify(prop)
            if classified is None:
                log.debug(
                    "Not replicable: %s.%s (%s)",
                    mapper.class_.__name__,
                    prop.key,
                    prop.direction.name,
                )
                continue
            kind, discriminators = classified
            self._relations[(mapper.class_, prop.key)] = MappedRelation(
                owner=mapper.class_,
                name=prop.key,
                kind=kind,
                prop=prop,
                discriminators=discriminators,
            )

    def register(self, owner: type[Any], name: str, kind: RelationKind) -> MappedRelation:
        """Add or override the kind of ``owner.name``.

        The relationship must exist and both its direction and its cardinality
        must fit ``kind``; a one-to-many list cannot be replicated as
        many-to-many or as a singular relation.
        """

        prop = inspect(owner).relationships[name]
        wanted = (
            RelationshipDirection.MANYTOMANY
            if kind.is_many_to_many
            else RelationshipDirection.ONETOMANY
        )
        if prop.direction is not wanted:
            raise ValueError(
                f"{owner.__name__}.{name} is {prop.direction.name}, cannot replicate as {kind}"
            )
        if kind.is_singular == bool(prop.uselist):
            shape = "a collection" if prop.uselist else "a single reference"
            raise ValueError(f"{owner.__name__}.{name} is {shape}, cannot replicate as {kind}")
        discriminators = _discriminators_for(prop)
        relation = MappedRelation(
            owner=owner, name=name, kind=kind, prop=prop, discriminators=discriminators
        )
        self._relations[(owner, name)] = relation
        return relation

    def unregister(self, owner: type[Any], name: str) -> None:
        """Stop replicating ``owner.name``; paths naming it are then skipped."""

        self._relations.pop((owner, name), None)

    def resolve(self, entity: object, name: str) -> MappedRelation | None:
        return self._relations.get((type(entity), name))

    def relations_of(self, owner: type[Any]) -> dict[str, MappedRelation]:
        return {name: rel for (cls, name), rel in self._relations.items() if cls is owner}

    def __contains__(self, key: object) -> bool:
        return key in self._relations

    def __iter__(self) -> Iterator[MappedRelation]:
        return iter(self._relations.values())

    def __len__(self) -> int:
        return len(self._relations)


@cache
def relation_registry_for(mapper_registry: registry) -> RelationRegistry:
    """Return the shared registry for ``mapper_registry``, building it on first use."""

    log.info("Building relation registry")
    return RelationRegistry.from_registry(mapper_registry)


class MappedRelationResolver:
    """Resolve against the registry each entity's class is mapped in."""

    def resolve(self, entity: object, name: str) -> MappedRelation | None:
        return relation_registry_for(inspect(entity).mapper.registry).resolve(entity, name)


if TYPE_CHECKING:
    from replicata.domain import RelationResolver

    _resolver_check: RelationResolver[MappedRelation] = MappedRelationResolver()
    _registry_check: RelationResolver[MappedRelation] = RelationRegistry()
