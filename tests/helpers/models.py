"""Invoice schema used across replication tests.

Mapped imperatively onto plain dataclasses. Notes, attachments and labels
are polymorphic: one table serves several owner types, told apart by
``owner_type``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    and_,
    insert,
    orm,
)
from sqlalchemy.orm import relationship

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


def _utcnow() -> datetime:
    return datetime.now(tz=UTC).replace(tzinfo=None)


@dataclass(eq=False, kw_only=True)
class Customer:
    id: int | None = None
    name: str


@dataclass(eq=False, kw_only=True)
class Tag:
    id: int | None = None
    name: str


@dataclass(eq=False, kw_only=True)
class Label:
    id: int | None = None
    name: str


@dataclass(eq=False, kw_only=True)
class Note:
    id: int | None = None
    owner_type: str
    owner_id: int | None = None
    body: str


@dataclass(eq=False, kw_only=True)
class Attachment:
    id: int | None = None
    owner_type: str
    owner_id: int | None = None
    filename: str


@dataclass(eq=False, kw_only=True)
class ShippingAddress:
    id: int | None = None
    invoice_id: int | None = None
    street: str


@dataclass(eq=False, kw_only=True)
class LineItem:
    id: int | None = None
    line_id: int | None = None
    sku: str


@dataclass(eq=False, kw_only=True)
class InvoiceLine:
    id: int | None = None
    invoice_id: int | None = None
    description: str
    quantity: int = 1
    items: list[LineItem] = field(default_factory=list)
    notes: list[Note] = field(default_factory=list)


@dataclass(eq=False, kw_only=True)
class Invoice:
    id: int | None = None
    number: str
    customer_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    customer: Customer | None = None
    lines: list[InvoiceLine] = field(default_factory=list)
    address: ShippingAddress | None = None
    notes: list[Note] = field(default_factory=list)
    attachment: Attachment | None = None
    tags: list[Tag] = field(default_factory=list)


mapper_registry = orm.registry()

customer_table = Table(
    "customer",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String, nullable=False),
)

invoice_table = Table(
    "invoice",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True),
    Column("number", String, nullable=False),
    Column("customer_id", Integer, ForeignKey("customer.id"), nullable=True),
    Column("created_at", DateTime, nullable=True, default=_utcnow),
    Column("updated_at", DateTime, nullable=True, default=_utcnow, onupdate=_utcnow),
)

invoice_line_table = Table(
    "invoice_line",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True),
    Column("invoice_id", Integer, ForeignKey("invoice.id", ondelete="CASCADE"), nullable=False),
    Column("description", String, nullable=False),
    Column("quantity", Integer, nullable=False, default=1),
)

line_item_table = Table(
    "line_item",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True),
    Column("line_id", Integer, ForeignKey("invoice_line.id", ondelete="CASCADE"), nullable=False),
    Column("sku", String, nullable=False),
)

shipping_address_table = Table(
    "shipping_address",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True),
    Column(
        "invoice_id",
        Integer,
        ForeignKey("invoice.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    ),
    Column("street", String, nullable=False),
)

note_table = Table(
    "note",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True),
    Column("owner_type", String, nullable=False),
    Column("owner_id", Integer, nullable=False),
    Column("body", String, nullable=False),
)

attachment_table = Table(
    "attachment",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True),
    Column("owner_type", String, nullable=False),
    Column("owner_id", Integer, nullable=False),
    Column("filename", String, nullable=False),
)

tag_table = Table(
    "tag",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String, nullable=False),
)

invoice_tag_table = Table(
    "invoice_tag",
    mapper_registry.metadata,
    Column("invoice_id", Integer, ForeignKey("invoice.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True),
)

label_table = Table(
    "label",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String, nullable=False),
)

labelling_table = Table(
    "labelling",
    mapper_registry.metadata,
    Column("label_id", Integer, ForeignKey("label.id", ondelete="CASCADE"), primary_key=True),
    Column("owner_type", String, primary_key=True),
    Column("owner_id", Integer, primary_key=True),
)


def _notes_relationship(owner_table: Table, owner_type: str) -> orm.RelationshipProperty[Note]:
    return relationship(
        Note,
        primaryjoin=and_(
            note_table.c.owner_id == owner_table.c.id,
            note_table.c.owner_type == owner_type,
        ),
        foreign_keys=[note_table.c.owner_id],
        order_by=note_table.c.id,
        overlaps="notes",
    )


def _labels_relationship(owner_table: Table, owner_type: str) -> orm.RelationshipProperty[Label]:
    return relationship(
        Label,
        secondary=labelling_table,
        primaryjoin=and_(
            labelling_table.c.owner_id == owner_table.c.id,
            labelling_table.c.owner_type == owner_type,
        ),
        secondaryjoin=labelling_table.c.label_id == label_table.c.id,
        foreign_keys=[labelling_table.c.owner_id, labelling_table.c.label_id],
        order_by=label_table.c.id,
        viewonly=True,
    )


@cache
def start_mappers() -> orm.registry:
    """Map the test dataclasses onto their tables."""

    mapper_registry.map_imperatively(Customer, customer_table)
    mapper_registry.map_imperatively(Tag, tag_table)
    mapper_registry.map_imperatively(
        Label,
        label_table,
        properties={
            # owner type sits on the far side of the link table
            "invoices": relationship(
                Invoice,
                secondary=labelling_table,
                primaryjoin=labelling_table.c.label_id == label_table.c.id,
                secondaryjoin=and_(
                    labelling_table.c.owner_id == invoice_table.c.id,
                    labelling_table.c.owner_type == "invoice",
                ),
                foreign_keys=[labelling_table.c.label_id, labelling_table.c.owner_id],
                viewonly=True,
            ),
        },
    )
    mapper_registry.map_imperatively(Note, note_table)
    mapper_registry.map_imperatively(Attachment, attachment_table)
    mapper_registry.map_imperatively(ShippingAddress, shipping_address_table)
    mapper_registry.map_imperatively(LineItem, line_item_table)

    mapper_registry.map_imperatively(
        InvoiceLine,
        invoice_line_table,
        properties={
            "invoice": relationship(Invoice, back_populates="lines"),
            "items": relationship(
                LineItem,
                order_by=line_item_table.c.id,
                cascade="all, delete-orphan",
            ),
            "notes": _notes_relationship(invoice_line_table, "invoice_line"),
            "labels": _labels_relationship(invoice_line_table, "invoice_line"),
        },
    )

    mapper_registry.map_imperatively(
        Invoice,
        invoice_table,
        properties={
            "customer": relationship(Customer),
            "lines": relationship(
                InvoiceLine,
                back_populates="invoice",
                order_by=invoice_line_table.c.id,
                cascade="all, delete-orphan",
            ),
            "bulk_lines": relationship(
                InvoiceLine,
                primaryjoin=and_(
                    invoice_line_table.c.invoice_id == invoice_table.c.id,
                    invoice_line_table.c.quantity > 10,
                ),
                viewonly=True,
            ),
            "address": relationship(ShippingAddress, uselist=False),
            "notes": _notes_relationship(invoice_table, "invoice"),
            "attachment": relationship(
                Attachment,
                primaryjoin=and_(
                    attachment_table.c.owner_id == invoice_table.c.id,
                    attachment_table.c.owner_type == "invoice",
                ),
                foreign_keys=[attachment_table.c.owner_id],
                uselist=False,
            ),
            "tags": relationship(Tag, secondary=invoice_tag_table, order_by=tag_table.c.id),
            "labels": _labels_relationship(invoice_table, "invoice"),
        },
    )
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    mapper_registry.metadata.create_all(engine)


def link_labels(session: Session, owner_type: str, owner_id: int, labels: Iterable[Label]) -> None:
    """Write polymorphic label links directly; the relationship is read-only."""

    session.flush()
    rows = [
        {"label_id": label.id, "owner_type": owner_type, "owner_id": owner_id} for label in labels
    ]
    if rows:
        session.execute(insert(labelling_table), rows)
