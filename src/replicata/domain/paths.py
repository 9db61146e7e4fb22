"""Relationship path parsing.

A path such as ``"lines.items"`` means: traverse ``lines``, then traverse
``items`` on every entity reached. Paths sharing a prefix are merged into a
tree so each relation is walked once per owner.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

PathTree: TypeAlias = dict[str, "PathTree"]

SEPARATOR = "."


def parse_path(path: str) -> tuple[str, list[str]]:
    """Split ``path`` into its head segment and the remaining segments."""

    head, *rest = path.split(SEPARATOR)
    return head, rest


def join_path(segments: Sequence[str]) -> str:
    return SEPARATOR.join(segments)


def build_path_tree(paths: Iterable[str]) -> PathTree:
    """Merge dotted paths into a nested ``head -> subtree`` mapping.

    Insertion order follows the first appearance of each segment, so
    ``["lines", "lines.items", "tags"]`` becomes
    ``{"lines": {"items": {}}, "tags": {}}``.
    """

    tree: PathTree = {}
    for path in paths:
        head, rest = parse_path(path)
        node = tree.setdefault(head, {})
        for segment in rest:
            node = node.setdefault(segment, {})
    return tree
