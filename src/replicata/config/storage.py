"""Database configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_var


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_database_config() -> DatabaseConfig:
    return DatabaseConfig(uri=require_env_var("DATABASE_URI"))
