from __future__ import annotations

import os
from datetime import datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from replicata.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup
from tests.helpers.models import (
    Attachment,
    Invoice,
    InvoiceLine,
    Label,
    LineItem,
    Note,
    ShippingAddress,
    Tag,
    create_all_tables,
    link_labels,
    start_mappers,
)

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture(autouse=True)
def clean_replicata_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "REPLICATA_AUTO_FIELDS",
        "REPLICATA_EXCLUDE",
        "REPLICATA_STRICT_PATHS",
        "REPLICATA_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def invoice(sqlite_session: Session) -> Invoice:
    """A fully populated invoice, committed so every relation loads from the database."""

    invoice = Invoice(
        id=1,
        number="INV-001",
        created_at=datetime(2020, 1, 1, 9, 30),
        updated_at=datetime(2020, 1, 2, 9, 30),
        lines=[
            InvoiceLine(
                id=10,
                description="Consulting",
                quantity=3,
                items=[LineItem(id=100, sku="HOUR"), LineItem(id=101, sku="TRAVEL")],
                notes=[Note(owner_type="invoice_line", body="billed monthly")],
            ),
            InvoiceLine(id=11, description="Licence", quantity=12),
        ],
        address=ShippingAddress(street="1 Main Street"),
        notes=[
            Note(owner_type="invoice", body="first"),
            Note(owner_type="invoice", body="second"),
        ],
        attachment=Attachment(owner_type="invoice", filename="scan.pdf"),
        tags=[Tag(name="urgent"), Tag(name="export")],
    )
    labels = [Label(name="q1"), Label(name="audited")]
    sqlite_session.add_all([invoice, *labels])
    link_labels(sqlite_session, "invoice", 1, labels)
    link_labels(sqlite_session, "invoice_line", 10, labels[:1])
    sqlite_session.commit()
    return invoice
