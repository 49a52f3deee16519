from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from apps.helpdesk.tickets.models import Category, Client, Technician, Ticket
from apps.helpdesk.tickets.repository import TicketRepository
from apps.helpdesk.tickets.service import TicketService
from apps.helpdesk.tickets.state import TicketPriority, TicketStatus


@dataclass
class Reference:
    category: Category
    client: Client
    technician: Technician


def make_ticket(
    *,
    category_id: str,
    client_id: str,
    technician_id: str | None = None,
    status: TicketStatus = TicketStatus.OPEN,
    created_at: datetime | None = None,
    title: str = "Laptop will not boot",
) -> Ticket:
    now = created_at or datetime.now(timezone.utc)
    return Ticket(
        id=str(uuid.uuid4()),
        title=title,
        description="Screen stays black after the logo appears",
        status=status,
        priority=TicketPriority.MEDIUM,
        category_id=category_id,
        client_id=client_id,
        technician_id=technician_id,
        created_by="user-1",
        created_at=now,
        updated_at=now,
    )


@pytest_asyncio.fixture
async def engine() -> AsyncEngine:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def repository(session_factory: async_sessionmaker, engine: AsyncEngine) -> TicketRepository:
    return TicketRepository(session_factory, engine=engine)


@pytest.fixture
def service(repository: TicketRepository) -> TicketService:
    return TicketService(repository)


@pytest_asyncio.fixture
async def reference(repository: TicketRepository) -> Reference:
    now = datetime.now(timezone.utc)
    category = await repository.add_category(
        Category(id=str(uuid.uuid4()), name="Hardware incident", description=None, created_at=now, updated_at=now)
    )
    client = await repository.add_client(
        Client(
            id=str(uuid.uuid4()),
            name="Ana Martinez",
            company="Cloud Systems Inc",
            contact_email="ana.martinez@cloudsystems.com",
            created_at=now,
            updated_at=now,
        )
    )
    technician = await repository.add_technician(
        Technician(
            id=str(uuid.uuid4()),
            name="Pedro Sanchez",
            specialty="Hardware and networking",
            availability=True,
            created_at=now,
            updated_at=now,
        )
    )
    return Reference(category=category, client=client, technician=technician)


async def load_technician(
    repository: TicketRepository,
    reference: Reference,
    *,
    count: int,
    status: TicketStatus = TicketStatus.IN_PROGRESS,
) -> list[Ticket]:
    """Store ``count`` tickets in ``status`` for the reference technician."""

    base = datetime.now(timezone.utc) - timedelta(hours=1)
    stored: list[Ticket] = []
    for index in range(count):
        ticket = make_ticket(
            category_id=reference.category.id,
            client_id=reference.client.id,
            technician_id=reference.technician.id,
            status=status,
            created_at=base + timedelta(minutes=index),
        )
        stored.append(await repository.add_ticket(ticket))
    return stored
