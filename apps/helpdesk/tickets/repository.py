from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Sequence

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel, select

from packages.db.models import CategoryTable, ClientTable, TechnicianTable, TicketTable

from .errors import ConflictError
from .models import Category, Client, Technician, Ticket
from .state import TicketPriority, TicketStatus


class TicketRepository:
    """Data access layer for tickets and the reference records they point at.

    Every method opens its own session; nothing is cached between calls.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        engine: AsyncEngine | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._engine: AsyncEngine | None = engine

    async def ensure_schema(self) -> None:
        if self._engine is None:
            raise RuntimeError("Session factory is not bound to an async engine")
        async with self._engine.begin() as connection:
            await connection.run_sync(SQLModel.metadata.create_all)

    async def reset_schema(self) -> None:
        """Drop every table and recreate an empty schema."""

        if self._engine is None:
            raise RuntimeError("Session factory is not bound to an async engine")
        async with self._engine.begin() as connection:
            await connection.run_sync(SQLModel.metadata.drop_all)
            await connection.run_sync(SQLModel.metadata.create_all)

    # Reference data

    async def get_category(self, category_id: str) -> Category | None:
        async with self._session_factory() as session:
            row = await session.get(CategoryTable, category_id)
        return None if row is None else self._table_to_category(row)

    async def get_client(self, client_id: str) -> Client | None:
        async with self._session_factory() as session:
            row = await session.get(ClientTable, client_id)
        return None if row is None else self._table_to_client(row)

    async def get_technician(self, technician_id: str) -> Technician | None:
        async with self._session_factory() as session:
            row = await session.get(TechnicianTable, technician_id)
        return None if row is None else self._table_to_technician(row)

    async def add_category(self, category: Category) -> Category:
        row = CategoryTable(
            id=category.id,
            name=category.name,
            description=category.description,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )
        return self._table_to_category(await self._insert(row, conflict_field="name"))

    async def add_client(self, client: Client) -> Client:
        row = ClientTable(
            id=client.id,
            name=client.name,
            company=client.company,
            contact_email=client.contact_email,
            created_at=client.created_at,
            updated_at=client.updated_at,
        )
        return self._table_to_client(await self._insert(row, conflict_field="contact_email"))

    async def add_technician(self, technician: Technician) -> Technician:
        row = TechnicianTable(
            id=technician.id,
            name=technician.name,
            specialty=technician.specialty,
            availability=technician.availability,
            created_at=technician.created_at,
            updated_at=technician.updated_at,
        )
        return self._table_to_technician(await self._insert(row, conflict_field="id"))

    # Tickets

    async def add_ticket(self, ticket: Ticket) -> Ticket:
        row = TicketTable(
            id=ticket.id,
            title=ticket.title,
            description=ticket.description,
            status=ticket.status.value,
            priority=ticket.priority.value,
            category_id=ticket.category_id,
            client_id=ticket.client_id,
            technician_id=ticket.technician_id,
            created_by=ticket.created_by,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
        )
        async with self._session_factory() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return self._table_to_ticket(row)

    async def get_ticket(self, ticket_id: str) -> Ticket | None:
        async with self._session_factory() as session:
            row = await session.get(TicketTable, ticket_id)
        return None if row is None else self._table_to_ticket(row)

    async def list_tickets(self) -> list[Ticket]:
        return await self._list_tickets()

    async def list_tickets_by_client(self, client_id: str) -> list[Ticket]:
        return await self._list_tickets(TicketTable.client_id == client_id)

    async def list_tickets_by_technician(self, technician_id: str) -> list[Ticket]:
        return await self._list_tickets(TicketTable.technician_id == technician_id)

    async def count_tickets(self, *, technician_id: str, status: TicketStatus) -> int:
        statement = (
            select(func.count())
            .select_from(TicketTable)
            .where(TicketTable.technician_id == technician_id, TicketTable.status == status.value)
        )
        async with self._session_factory() as session:
            result = await session.execute(statement)
            return int(result.scalar_one())

    async def update_status(
        self,
        ticket_id: str,
        *,
        expected: TicketStatus,
        status: TicketStatus,
        updated_at: datetime,
    ) -> Ticket | None:
        """Move a ticket to ``status`` only if it still holds ``expected``.

        Returns ``None`` when no row matched, either because the ticket is gone or
        because another writer changed its status first.
        """

        statement = (
            update(TicketTable)
            .where(TicketTable.id == ticket_id, TicketTable.status == expected.value)
            .values(status=status.value, updated_at=updated_at)
            .execution_options(synchronize_session=False)
        )
        return await self._apply_update(ticket_id, statement)

    async def assign_technician(
        self,
        ticket_id: str,
        *,
        technician_id: str | None,
        updated_at: datetime,
    ) -> Ticket | None:
        statement = (
            update(TicketTable)
            .where(TicketTable.id == ticket_id)
            .values(technician_id=technician_id, updated_at=updated_at)
            .execution_options(synchronize_session=False)
        )
        return await self._apply_update(ticket_id, statement)

    async def delete_ticket(self, ticket_id: str) -> bool:
        statement = delete(TicketTable).where(TicketTable.id == ticket_id)
        async with self._session_factory() as session:
            result = await session.execute(statement)
            await session.commit()
        return bool(result.rowcount)

    async def _list_tickets(self, *criteria: Any) -> list[Ticket]:
        statement = select(TicketTable)
        if criteria:
            statement = statement.where(*criteria)
        statement = statement.order_by(TicketTable.created_at.desc(), TicketTable.id)
        async with self._session_factory() as session:
            result = await session.execute(statement)
            rows: Sequence[TicketTable] = result.scalars().all()
        return [self._table_to_ticket(row) for row in rows]

    async def _apply_update(self, ticket_id: str, statement: Any) -> Ticket | None:
        async with self._session_factory() as session:
            result = await session.execute(statement)
            await session.commit()
            if not result.rowcount:
                return None
            row = await session.get(TicketTable, ticket_id)
        return None if row is None else self._table_to_ticket(row)

    async def _insert(self, row: SQLModel, *, conflict_field: str) -> Any:
        async with self._session_factory() as session:
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ConflictError(conflict_field) from exc
            await session.refresh(row)
            return row

    @staticmethod
    def _table_to_ticket(row: TicketTable) -> Ticket:
        return Ticket(
            id=str(row.id),
            title=row.title,
            description=row.description,
            status=TicketStatus(str(row.status)),
            priority=TicketPriority(str(row.priority)),
            category_id=str(row.category_id),
            client_id=str(row.client_id),
            technician_id=str(row.technician_id) if row.technician_id else None,
            created_by=row.created_by,
            created_at=_ensure_datetime(row.created_at),
            updated_at=_ensure_datetime(row.updated_at),
        )

    @staticmethod
    def _table_to_technician(row: TechnicianTable) -> Technician:
        return Technician(
            id=str(row.id),
            name=row.name,
            specialty=row.specialty,
            availability=bool(row.availability),
            created_at=_ensure_datetime(row.created_at),
            updated_at=_ensure_datetime(row.updated_at),
        )

    @staticmethod
    def _table_to_category(row: CategoryTable) -> Category:
        return Category(
            id=str(row.id),
            name=row.name,
            description=row.description,
            created_at=_ensure_datetime(row.created_at),
            updated_at=_ensure_datetime(row.updated_at),
        )

    @staticmethod
    def _table_to_client(row: ClientTable) -> Client:
        return Client(
            id=str(row.id),
            name=row.name,
            company=row.company,
            contact_email=row.contact_email,
            created_at=_ensure_datetime(row.created_at),
            updated_at=_ensure_datetime(row.updated_at),
        )


def _ensure_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    return datetime.fromisoformat(str(value))
