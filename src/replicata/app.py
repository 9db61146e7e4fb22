"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv
from sqlalchemy import inspect

from replicata.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from replicata.config import configure_logging, get_replication_config
from replicata.domain import Replicator

if TYPE_CHECKING:
    from collections.abc import Iterable

    from replicata.adapters.sqlalchemy import MappedRelation
    from replicata.domain import UnitOfWork

UnitOfWorkFactory = Callable[[], "UnitOfWork[MappedRelation]"]

log = getLogger(__name__)


class RecordNotFoundError(LookupError):
    """Raised when the root record to replicate does not exist."""


def configure_from_environment(*, force: bool = False) -> None:
    """Load ``.env``, set up logging and bind the adapter to ``DATABASE_URI``."""

    load_dotenv()
    configure_logging(force=force)
    if force or not is_started():
        startup(force=force)


def replicate_record(
    model: type[Any],
    key: object,
    paths: Iterable[str] = (),
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    strict: bool | None = None,
) -> object:
    """Replicate the ``model`` row identified by ``key`` and commit.

    Everything happens in one unit of work: either the whole copy is
    committed or, on any error, nothing is. Returns the new primary key.
    """

    effective_uow = unit_of_work_factory or SqlAlchemyUnitOfWork
    config = get_replication_config()
    paths = list(paths)
    log.info("Replicating %s %r with paths=%s", model.__name__, key, paths)

    with effective_uow() as uow:
        original = uow.get(model, key)
        if original is None:
            raise RecordNotFoundError(f"{model.__name__} {key!r} not found")
        replicator = Replicator(
            store=uow.store,
            relations=uow.relations,
            strict=config.strict_paths if strict is None else strict,
        )
        copy = replicator.replicate(original, paths)
        new_key = inspect(copy).identity
        uow.commit()

    identity = new_key[0] if new_key and len(new_key) == 1 else new_key
    log.info("Replicated %s %r as %r", model.__name__, key, identity)
    return identity
