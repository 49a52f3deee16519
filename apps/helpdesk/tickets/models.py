from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .state import TicketPriority, TicketStatus


@dataclass(slots=True)
class Ticket:
    """Aggregate representing a support ticket entry."""

    id: str
    title: str
    description: str
    status: TicketStatus
    priority: TicketPriority
    category_id: str
    client_id: str
    technician_id: str | None
    created_by: str
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class Technician:
    """Worker that tickets can be assigned to."""

    id: str
    name: str
    specialty: str
    availability: bool
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class Category:
    id: str
    name: str
    description: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class Client:
    id: str
    name: str
    company: str
    contact_email: str
    created_at: datetime
    updated_at: datetime
