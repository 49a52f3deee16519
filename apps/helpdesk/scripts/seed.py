"""Populate a fresh database with reference data and a few sample tickets.

Run with ``helpdesk-seed`` (or ``python -m apps.helpdesk.scripts.seed``).
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from apps.helpdesk.core.config import get_settings, to_async_dsn
from apps.helpdesk.core.logging import configure_logging
from apps.helpdesk.tickets.models import Category, Client, Technician, Ticket
from apps.helpdesk.tickets.repository import TicketRepository
from apps.helpdesk.tickets.service import TicketService
from apps.helpdesk.tickets.state import TicketPriority, TicketStateMachine, TicketStatus

logger = logging.getLogger(__name__)

SEED_ACTOR = "seed"

CATEGORIES: tuple[tuple[str, str], ...] = (
    ("General request", "General support requests and questions"),
    ("Hardware incident", "Problems with computers and peripherals"),
    ("Software incident", "Problems with software, applications and operating systems"),
)

CLIENTS: tuple[tuple[str, str, str], ...] = (
    ("Carlos Rodriguez", "Tech Solutions S.A.", "carlos.rodriguez@techsolutions.com"),
    ("Maria Gonzalez", "Innovatech Corp", "maria.gonzalez@innovatech.com"),
    ("Juan Perez", "Digital Services Ltd", "juan.perez@digitalservices.com"),
    ("Ana Martinez", "Cloud Systems Inc", "ana.martinez@cloudsystems.com"),
    ("Luis Fernandez", "Data Analytics Co", "luis.fernandez@dataanalytics.com"),
)

TECHNICIANS: tuple[tuple[str, str], ...] = (
    ("Pedro Sanchez", "Hardware and networking"),
    ("Laura Torres", "Software and applications"),
    ("Miguel Ruiz", "Operating systems"),
)


@dataclass(slots=True)
class SeedResult:
    categories: list[Category] = field(default_factory=list)
    clients: list[Client] = field(default_factory=list)
    technicians: list[Technician] = field(default_factory=list)
    tickets: list[Ticket] = field(default_factory=list)


def _new_id() -> str:
    return str(uuid.uuid4())


async def seed_reference_data(repository: TicketRepository) -> SeedResult:
    now = datetime.now(timezone.utc)
    result = SeedResult()
    for name, description in CATEGORIES:
        result.categories.append(
            await repository.add_category(
                Category(id=_new_id(), name=name, description=description, created_at=now, updated_at=now)
            )
        )
    for name, company, email in CLIENTS:
        result.clients.append(
            await repository.add_client(
                Client(
                    id=_new_id(),
                    name=name,
                    company=company,
                    contact_email=email,
                    created_at=now,
                    updated_at=now,
                )
            )
        )
    for name, specialty in TECHNICIANS:
        result.technicians.append(
            await repository.add_technician(
                Technician(
                    id=_new_id(),
                    name=name,
                    specialty=specialty,
                    availability=True,
                    created_at=now,
                    updated_at=now,
                )
            )
        )
    logger.info(
        "Seeded %d categories, %d clients, %d technicians",
        len(result.categories),
        len(result.clients),
        len(result.technicians),
    )
    return result


@dataclass(frozen=True, slots=True)
class SampleTicket:
    """Indexes point into the lists of a ``SeedResult``."""

    title: str
    description: str
    category: int
    client: int
    priority: TicketPriority
    status: TicketStatus = TicketStatus.OPEN
    technician: int | None = None


SAMPLE_TICKETS: tuple[SampleTicket, ...] = (
    SampleTicket(
        "Computer does not power on",
        "The sales area computer has not powered on since this morning",
        category=1, client=0, priority=TicketPriority.HIGH, technician=0,
    ),
    SampleTicket(
        "Error installing software",
        "I cannot install the new accounting software",
        category=2, client=1, priority=TicketPriority.MEDIUM, status=TicketStatus.IN_PROGRESS, technician=1,
    ),
    SampleTicket(
        "Shared folder access request",
        "I need access to the shared projects folder",
        category=0, client=2, priority=TicketPriority.LOW, status=TicketStatus.RESOLVED, technician=2,
    ),
    SampleTicket(
        "Printer not printing",
        "The third floor printer does not respond",
        category=1, client=3, priority=TicketPriority.MEDIUM,
    ),
    SampleTicket(
        "Blue screen on Windows",
        "My computer shows a blue screen at startup",
        category=2, client=4, priority=TicketPriority.CRITICAL, status=TicketStatus.IN_PROGRESS, technician=2,
    ),
    SampleTicket(
        "New user account request",
        "I need an account created for the new employee",
        category=0, client=0, priority=TicketPriority.LOW, status=TicketStatus.CLOSED, technician=1,
    ),
    SampleTicket(
        "Keyboard not working",
        "Some keys on the keyboard do not respond",
        category=1, client=1, priority=TicketPriority.MEDIUM,
    ),
    SampleTicket(
        "Antivirus update",
        "The corporate antivirus needs to be updated",
        category=2, client=2, priority=TicketPriority.HIGH, status=TicketStatus.RESOLVED, technician=1,
    ),
    SampleTicket(
        "Slow internet connection",
        "The internet connection is very slow in my area",
        category=1, client=3, priority=TicketPriority.MEDIUM, status=TicketStatus.IN_PROGRESS, technician=0,
    ),
    SampleTicket(
        "Software license request",
        "I need an Adobe Photoshop license",
        category=0, client=4, priority=TicketPriority.LOW,
    ),
)


async def seed_sample_tickets(
    service: TicketService,
    seeded: SeedResult,
    samples: Sequence[SampleTicket] = SAMPLE_TICKETS,
) -> list[Ticket]:
    """Open the sample tickets through the service and walk each one to its target status."""

    machine = TicketStateMachine()
    tickets: list[Ticket] = []
    for sample in samples:
        technician = seeded.technicians[sample.technician] if sample.technician is not None else None
        ticket = await service.create_ticket(
            title=sample.title,
            description=sample.description,
            category_id=seeded.categories[sample.category].id,
            client_id=seeded.clients[sample.client].id,
            priority=sample.priority,
            technician_id=technician.id if technician else None,
            actor=SEED_ACTOR,
        )
        while ticket.status != sample.status:
            next_status = machine.successor(ticket.status)
            if next_status is None:
                raise ValueError(f"Sample ticket {sample.title!r} cannot reach {sample.status.value}")
            ticket = await service.change_status(ticket.id, new_status=next_status, actor=SEED_ACTOR)
        tickets.append(ticket)
    seeded.tickets.extend(tickets)
    return tickets


async def run_seed(dsn: str, *, reset: bool = True) -> SeedResult:
    """Seed the database at ``dsn``; by default existing tables are dropped first."""

    engine = create_async_engine(to_async_dsn(dsn), future=True)
    try:
        repository = TicketRepository(async_sessionmaker(engine, expire_on_commit=False), engine=engine)
        if reset:
            await repository.reset_schema()
        else:
            await repository.ensure_schema()
        seeded = await seed_reference_data(repository)
        await seed_sample_tickets(TicketService(repository), seeded)
        return seeded
    finally:
        await engine.dispose()


def main() -> None:  # pragma: no cover - CLI wrapper
    settings = get_settings()
    configure_logging(settings)
    seeded = asyncio.run(run_seed(settings.database_dsn))
    logger.info("Seed complete: %d sample tickets", len(seeded.tickets))


if __name__ == "__main__":  # pragma: no cover
    main()
