"""SQLModel table definitions for the helpdesk data layer."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    """Return a timezone aware UTC timestamp."""

    return datetime.now(timezone.utc)


def _uuid_str() -> str:
    """Generate a random UUID string."""

    return str(uuid.uuid4())


class CategoryTable(SQLModel, table=True):
    """Incident categories a ticket is filed under."""

    __tablename__ = "categories"

    id: str = Field(default_factory=_uuid_str, primary_key=True, index=True)
    name: str = Field(sa_column=Column(String(100), nullable=False, unique=True))
    description: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))


class ClientTable(SQLModel, table=True):
    """Customers reporting tickets."""

    __tablename__ = "clients"

    id: str = Field(default_factory=_uuid_str, primary_key=True, index=True)
    name: str = Field(sa_column=Column(String(100), nullable=False))
    company: str = Field(sa_column=Column(String(100), nullable=False))
    contact_email: str = Field(sa_column=Column(String(100), nullable=False, unique=True))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))


class TechnicianTable(SQLModel, table=True):
    """Workers tickets can be assigned to."""

    __tablename__ = "technicians"

    id: str = Field(default_factory=_uuid_str, primary_key=True, index=True)
    name: str = Field(sa_column=Column(String(100), nullable=False))
    specialty: str = Field(sa_column=Column(String(100), nullable=False))
    availability: bool = Field(default=True, sa_column=Column(Boolean, nullable=False, default=True))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))


class TicketTable(SQLModel, table=True):
    """Support tickets moving through the open/in progress/resolved/closed lifecycle."""

    __tablename__ = "tickets"
    __table_args__ = (Index("ix_tickets_technician_status", "technician_id", "status"),)

    id: str = Field(default_factory=_uuid_str, primary_key=True, index=True)
    title: str = Field(sa_column=Column(String(200), nullable=False))
    description: str = Field(sa_column=Column(Text, nullable=False))
    status: str = Field(sa_column=Column(String(20), nullable=False))
    priority: str = Field(sa_column=Column(String(20), nullable=False))
    category_id: str = Field(
        sa_column=Column(String(36), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    )
    client_id: str = Field(
        sa_column=Column(String(36), ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False)
    )
    technician_id: str | None = Field(
        default=None,
        sa_column=Column(String(36), ForeignKey("technicians.id", ondelete="SET NULL"), nullable=True),
    )
    created_by: str = Field(sa_column=Column(String(255), nullable=False))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
