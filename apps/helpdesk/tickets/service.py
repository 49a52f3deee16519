from __future__ import annotations

import logging
import uuid
from contextlib import nullcontext
from datetime import datetime, timezone
from typing import AsyncContextManager, Sequence

from .assignment import DEFAULT_TECHNICIAN_CAPACITY, AssignmentValidator
from .errors import ConflictError, EntityNotFoundError, InvalidTicketTransitionError
from .locks import KeyedLocks
from .models import Ticket
from .repository import TicketRepository
from .state import TicketPriority, TicketStateMachine, TicketStatus

logger = logging.getLogger(__name__)


class TicketService:
    """High level orchestration for ticket creation, assignment and status changes.

    The service keeps no record state between calls. The only thing it holds is
    a pair of keyed lock tables: transitions are serialized per ticket, and when
    ``serialize_assignments`` is on, capacity checks are serialized per
    technician so the limit cannot be overrun by concurrent requests served by
    this process.
    """

    def __init__(
        self,
        repository: TicketRepository,
        *,
        state_machine: TicketStateMachine | None = None,
        validator: AssignmentValidator | None = None,
        capacity: int = DEFAULT_TECHNICIAN_CAPACITY,
        serialize_assignments: bool = True,
    ) -> None:
        self._repository = repository
        self._state_machine = state_machine or TicketStateMachine()
        self._validator = validator or AssignmentValidator(repository, capacity=capacity)
        self._serialize_assignments = serialize_assignments
        self._ticket_locks = KeyedLocks()
        self._technician_locks = KeyedLocks()

    async def ensure_schema(self) -> None:
        await self._repository.ensure_schema()

    async def create_ticket(
        self,
        *,
        title: str,
        description: str,
        category_id: str,
        client_id: str,
        actor: str,
        priority: TicketPriority | None = None,
        technician_id: str | None = None,
    ) -> Ticket:
        if await self._repository.get_category(category_id) is None:
            raise EntityNotFoundError("category", category_id)
        if await self._repository.get_client(client_id) is None:
            raise EntityNotFoundError("client", client_id)

        async with self._assignment_guard(technician_id):
            if technician_id is not None:
                await self._validator.check_capacity(technician_id)

            now = datetime.now(timezone.utc)
            ticket = Ticket(
                id=str(uuid.uuid4()),
                title=title,
                description=description,
                status=self._state_machine.initial_state(),
                priority=priority or TicketPriority.MEDIUM,
                category_id=category_id,
                client_id=client_id,
                technician_id=technician_id,
                created_by=actor,
                created_at=now,
                updated_at=now,
            )
            stored = await self._repository.add_ticket(ticket)

        logger.info("Ticket %s created by %s (technician=%s)", stored.id, actor, technician_id)
        return stored

    async def get_ticket(self, ticket_id: str) -> Ticket:
        ticket = await self._repository.get_ticket(ticket_id)
        if ticket is None:
            raise EntityNotFoundError("ticket", ticket_id)
        return ticket

    async def list_tickets(self) -> Sequence[Ticket]:
        return await self._repository.list_tickets()

    async def list_by_client(self, client_id: str) -> Sequence[Ticket]:
        if await self._repository.get_client(client_id) is None:
            raise EntityNotFoundError("client", client_id)
        return await self._repository.list_tickets_by_client(client_id)

    async def list_by_technician(self, technician_id: str) -> Sequence[Ticket]:
        if await self._repository.get_technician(technician_id) is None:
            raise EntityNotFoundError("technician", technician_id)
        return await self._repository.list_tickets_by_technician(technician_id)

    async def change_status(self, ticket_id: str, *, new_status: TicketStatus, actor: str) -> Ticket:
        async with self._ticket_locks.hold(ticket_id):
            ticket = await self.get_ticket(ticket_id)
            current = ticket.status
            self._state_machine.assert_transition(current, new_status)

            updated = await self._repository.update_status(
                ticket_id,
                expected=current,
                status=new_status,
                updated_at=datetime.now(timezone.utc),
            )
            if updated is None:
                # Another writer got there first; report against what is stored now.
                latest = await self.get_ticket(ticket_id)
                logger.warning(
                    "Ticket %s moved to %s before %s could apply %s",
                    ticket_id,
                    latest.status.value,
                    actor,
                    new_status.value,
                )
                raise InvalidTicketTransitionError(latest.status, new_status)

        logger.info("Ticket %s: %s -> %s by %s", ticket_id, current.value, new_status.value, actor)
        return updated

    async def assign_technician(self, ticket_id: str, *, technician_id: str, actor: str) -> Ticket:
        async with self._ticket_locks.hold(ticket_id):
            ticket = await self.get_ticket(ticket_id)
            if self._state_machine.is_terminal(ticket.status):
                raise ConflictError("status", f"Ticket {ticket_id} is {ticket.status.value} and cannot be reassigned")
            if ticket.technician_id == technician_id:
                return ticket

            async with self._assignment_guard(technician_id):
                await self._validator.check_capacity(technician_id)
                updated = await self._repository.assign_technician(
                    ticket_id,
                    technician_id=technician_id,
                    updated_at=datetime.now(timezone.utc),
                )
            if updated is None:
                raise EntityNotFoundError("ticket", ticket_id)

        logger.info(
            "Ticket %s reassigned from %s to %s by %s", ticket_id, ticket.technician_id, technician_id, actor
        )
        return updated

    async def delete_ticket(self, ticket_id: str) -> None:
        deleted = await self._repository.delete_ticket(ticket_id)
        if not deleted:
            raise EntityNotFoundError("ticket", ticket_id)
        logger.info("Ticket %s deleted", ticket_id)

    def _assignment_guard(self, technician_id: str | None) -> AsyncContextManager[None]:
        if technician_id is None or not self._serialize_assignments:
            return nullcontext()
        return self._technician_locks.hold(technician_id)
