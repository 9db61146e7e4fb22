"""Errors raised by the duplication engine."""

from __future__ import annotations


class ReplicataError(RuntimeError):
    """Base class for errors raised by Replicata itself."""


class PathNotApplicableError(ReplicataError):
    """Raised in strict mode when a path segment names no usable relation."""

    def __init__(self, owner: str, segment: str, path: str | None = None) -> None:
        where = f" (in path {path!r})" if path and path != segment else ""
        super().__init__(f"{owner} has no replicable relation named {segment!r}{where}")
        self.owner = owner
        self.segment = segment
        self.path = path or segment
