from __future__ import annotations

from importlib import metadata

from .api import replicate
from .domain import (
    PathNotApplicableError,
    RelationKind,
    ReplicataError,
    Replicator,
    build_path_tree,
    parse_path,
)

try:
    __version__ = metadata.version("replicata")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0+local"

__all__ = [
    "PathNotApplicableError",
    "RelationKind",
    "ReplicataError",
    "Replicator",
    "build_path_tree",
    "parse_path",
    "replicate",
]
