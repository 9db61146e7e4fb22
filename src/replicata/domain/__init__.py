"""Storage-agnostic duplication engine."""

from __future__ import annotations

from .engine import Replicator
from .errors import PathNotApplicableError, ReplicataError
from .paths import PathTree, build_path_tree, join_path, parse_path
from .ports import RelationResolver, ReplicationStore, UnitOfWork
from .relations import Relation, RelationKind

__all__ = [
    "PathNotApplicableError",
    "PathTree",
    "Relation",
    "RelationKind",
    "RelationResolver",
    "ReplicataError",
    "ReplicationStore",
    "Replicator",
    "UnitOfWork",
    "build_path_tree",
    "join_path",
    "parse_path",
]
