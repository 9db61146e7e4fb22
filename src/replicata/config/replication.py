"""Replication defaults: which columns a shallow copy leaves behind."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Final

from .env import env_flag, env_list

if TYPE_CHECKING:
    from collections.abc import Iterable

DEFAULT_AUTO_FIELDS: Final[tuple[str, ...]] = ("created_at", "updated_at")


@dataclass(frozen=True, slots=True)
class ReplicationConfig:
    auto_fields: tuple[str, ...] = DEFAULT_AUTO_FIELDS
    exclude: tuple[str, ...] = field(default_factory=tuple)
    strict_paths: bool = False

    def excluding(self, names: Iterable[str]) -> ReplicationConfig:
        """Return a copy that additionally skips ``names`` when copying."""

        extra = tuple(name for name in names if name not in self.exclude)
        if not extra:
            return self
        return replace(self, exclude=self.exclude + extra)


def get_replication_config() -> ReplicationConfig:
    return ReplicationConfig(
        auto_fields=env_list("REPLICATA_AUTO_FIELDS", DEFAULT_AUTO_FIELDS),
        exclude=env_list("REPLICATA_EXCLUDE"),
        strict_paths=env_flag("REPLICATA_STRICT_PATHS"),
    )
