"""Recursive duplication of an entity and a chosen part of its relation graph.

Every copy is persisted as soon as it is made, so its identity exists before
any foreign key or link row refers to it. Owned copies are pointed at their
new owner first, so their first write already carries the new foreign key.
The engine never opens or closes a transaction; wrap the call in one for
all-or-nothing behaviour.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from .errors import PathNotApplicableError
from .paths import build_path_tree, join_path
from .relations import Relation, RelationKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .paths import PathTree
    from .ports import RelationResolver, ReplicationStore

log = logging.getLogger(__name__)

TEntity = TypeVar("TEntity")
TRelation = TypeVar("TRelation", bound=Relation)


@dataclass(slots=True)
class Replicator(Generic[TRelation]):
    """Duplicate entities along dotted relation paths."""

    store: ReplicationStore[TRelation]
    relations: RelationResolver[TRelation]
    strict: bool = False

    def replicate(self, entity: TEntity, paths: Iterable[str] = ()) -> TEntity:
        """Return a persisted copy of ``entity`` with the relations in ``paths`` copied too."""

        tree = build_path_tree(paths)
        log.info("Replicating %s along %s", type(entity).__name__, list(tree) or "no relations")
        copy = self._copy(entity)
        self._duplicate_relations(entity, copy, tree, ())
        log.info("Finished replicating %s", type(entity).__name__)
        return copy

    def _copy(self, entity: TEntity) -> TEntity:
        copy = self.store.replicate_shallow(entity)
        self.store.persist(copy)
        return copy

    def _duplicate_relations(
        self, original: object, new: object, tree: PathTree, trail: tuple[str, ...]
    ) -> None:
        for name, nested in tree.items():
            self._duplicate_relation(original, new, name, nested, (*trail, name))

    def _duplicate_relation(
        self,
        original: object,
        new: object,
        name: str,
        nested: PathTree,
        trail: tuple[str, ...],
    ) -> None:
        relation = self.relations.resolve(original, name)
        if relation is None:
            owner = type(original).__name__
            if self.strict:
                raise PathNotApplicableError(owner, name, join_path(trail))
            log.debug("Skipping %r on %s: no replicable relation", join_path(trail), owner)
            return

        log.debug("Duplicating %s (%s)", join_path(trail), relation.kind)
        match relation.kind:
            case RelationKind.SINGULAR_OWNED | RelationKind.SINGULAR_OWNED_POLYMORPHIC:
                related = self.store.related(original, relation)
                if related:
                    self._duplicate_related(related[0], nested, trail, owner=(new, relation))
            case RelationKind.COLLECTION_OWNED | RelationKind.COLLECTION_OWNED_POLYMORPHIC:
                for member in self.store.related(original, relation):
                    self._duplicate_related(member, nested, trail, owner=(new, relation))
            case RelationKind.MANY_TO_MANY | RelationKind.MANY_TO_MANY_POLYMORPHIC:
                copies = [
                    self._duplicate_related(member, nested, trail)
                    for member in self.store.related(original, relation)
                ]
                self.store.sync_associations(new, relation, copies)

    def _duplicate_related(
        self,
        related: object,
        nested: PathTree,
        trail: tuple[str, ...],
        *,
        owner: tuple[object, TRelation] | None = None,
    ) -> object:
        copy = self.store.replicate_shallow(related)
        # owned copies never hit the store pointing at the original's owner
        if owner is not None:
            parent, relation = owner
            self.store.save_owned(parent, relation, copy)
        self.store.persist(copy)
        if nested:
            self._duplicate_relations(related, copy, nested, trail)
        return copy
