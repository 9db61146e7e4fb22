"""Ports the duplication engine needs from a persistence layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

from .relations import Relation

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

TEntity = TypeVar("TEntity")
TRelation = TypeVar("TRelation", bound=Relation)
TRelation_co = TypeVar("TRelation_co", bound=Relation, covariant=True)


@runtime_checkable
class RelationResolver(Protocol[TRelation_co]):
    """Look up a named relationship of an entity."""

    def resolve(self, entity: object, name: str) -> TRelation_co | None:
        """Return the classified relation, or ``None`` when absent or unclassifiable."""
        ...


@runtime_checkable
class ReplicationStore(Protocol[TRelation]):
    """Persistence operations used while duplicating a graph."""

    def replicate_shallow(self, entity: TEntity) -> TEntity:
        """Copy field values, leaving out identity and auto-managed fields."""
        ...

    def persist(self, entity: object) -> None:
        """Write ``entity`` so it has an identity."""
        ...

    def related(self, entity: object, relation: TRelation) -> Sequence[object]:
        """Return the entities currently linked through ``relation``."""
        ...

    def save_owned(self, parent: object, relation: TRelation, child: object) -> None:
        """Point ``child`` at ``parent`` via the relation's foreign key (and discriminator).

        ``parent`` is already persisted; ``child`` is a fresh copy that has not
        been written yet and is persisted right after this call.
        """
        ...

    def sync_associations(
        self, parent: object, relation: TRelation, children: Sequence[object]
    ) -> None:
        """Replace every association of ``parent`` through ``relation`` with ``children``."""
        ...


@runtime_checkable
class UnitOfWork(Protocol[TRelation]):
    """Transaction boundary around a replication store."""

    @property
    def store(self) -> ReplicationStore[TRelation]: ...

    @property
    def relations(self) -> RelationResolver[TRelation]: ...

    def get(self, model: type[TEntity], key: object) -> TEntity | None: ...

    def __enter__(self) -> UnitOfWork[TRelation]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
