from __future__ import annotations

import logging

from .errors import CapacityExceededError, EntityNotFoundError
from .models import Technician
from .repository import TicketRepository
from .state import TicketStatus

logger = logging.getLogger(__name__)

DEFAULT_TECHNICIAN_CAPACITY = 5


class AssignmentValidator:
    """Decide whether a technician may accept one more ticket.

    Only tickets already ``IN_PROGRESS`` for the technician count against the
    limit; the status of the ticket being assigned plays no part.
    """

    def __init__(self, repository: TicketRepository, *, capacity: int = DEFAULT_TECHNICIAN_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be a positive integer")
        self._repository = repository
        self._capacity = capacity

    @property
    def capacity(self) -> int:
        return self._capacity

    async def check_capacity(self, technician_id: str) -> Technician:
        technician = await self._repository.get_technician(technician_id)
        if technician is None:
            raise EntityNotFoundError("technician", technician_id)

        active = await self._repository.count_tickets(
            technician_id=technician_id,
            status=TicketStatus.IN_PROGRESS,
        )
        if active >= self._capacity:
            logger.warning(
                "Technician %s rejected: %d active tickets (limit %d)", technician_id, active, self._capacity
            )
            raise CapacityExceededError(technician_id, self._capacity, technician_name=technician.name)
        return technician
