"""Relation kinds understood by the duplication engine."""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol, runtime_checkable


class RelationKind(StrEnum):
    SINGULAR_OWNED = "singular_owned"
    SINGULAR_OWNED_POLYMORPHIC = "singular_owned_polymorphic"
    COLLECTION_OWNED = "collection_owned"
    COLLECTION_OWNED_POLYMORPHIC = "collection_owned_polymorphic"
    MANY_TO_MANY = "many_to_many"
    MANY_TO_MANY_POLYMORPHIC = "many_to_many_polymorphic"

    @property
    def is_polymorphic(self) -> bool:
        return self in _POLYMORPHIC

    @property
    def is_singular(self) -> bool:
        return self in _SINGULAR

    @property
    def is_many_to_many(self) -> bool:
        return self in _MANY_TO_MANY


_POLYMORPHIC = frozenset(
    {
        RelationKind.SINGULAR_OWNED_POLYMORPHIC,
        RelationKind.COLLECTION_OWNED_POLYMORPHIC,
        RelationKind.MANY_TO_MANY_POLYMORPHIC,
    }
)
_SINGULAR = frozenset({RelationKind.SINGULAR_OWNED, RelationKind.SINGULAR_OWNED_POLYMORPHIC})
_MANY_TO_MANY = frozenset({RelationKind.MANY_TO_MANY, RelationKind.MANY_TO_MANY_POLYMORPHIC})


@runtime_checkable
class Relation(Protocol):
    """A classified, named relationship of one entity type."""

    @property
    def name(self) -> str: ...

    @property
    def kind(self) -> RelationKind: ...
