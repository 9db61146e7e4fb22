"""SQLAlchemy-backed unit of work around replication."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, TypeVar

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from replicata.config import get_database_config, get_replication_config
from replicata.domain import ReplicataError

from .relations import MappedRelation, MappedRelationResolver
from .store import SqlAlchemyReplicationStore

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

    from replicata.config import ReplicationConfig
    from replicata.domain import RelationResolver

log = logging.getLogger(__name__)

TEntity = TypeVar("TEntity")


class StartupError(ReplicataError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call replicata.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine and session factory.

    Schema creation stays with the application; this only binds sessions.
    """

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri, future=True
    )
    log.info("Starting SQLAlchemy adapter on %s", resolved_engine.url)
    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class SqlAlchemyUnitOfWork:
    """One session, one transaction; rolls back when the block raises."""

    def __init__(
        self,
        *,
        config: ReplicationConfig | None = None,
        relations: RelationResolver[MappedRelation] | None = None,
    ) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self.config = config or get_replication_config()
        self._relations = relations or MappedRelationResolver()
        self._session: Session | None = None
        self._store: SqlAlchemyReplicationStore | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self.session = self.session_factory()
        self._store = SqlAlchemyReplicationStore(self.session, self.config)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        self._store = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    def get(self, model: type[TEntity], key: object) -> TEntity | None:
        return self.session.get(model, key)

    @property
    def store(self) -> SqlAlchemyReplicationStore:
        if self._store is None:
            raise StartupError("Unit of work session not initialised")
        return self._store

    @property
    def relations(self) -> RelationResolver[MappedRelation]:
        return self._relations

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


if TYPE_CHECKING:
    from replicata.domain import UnitOfWork

    _uow_check: UnitOfWork[MappedRelation] = SqlAlchemyUnitOfWork()
