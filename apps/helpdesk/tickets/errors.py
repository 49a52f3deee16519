from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .state import TicketStatus


class TicketServiceError(RuntimeError):
    """Base error for ticket lifecycle issues."""


class EntityNotFoundError(TicketServiceError):
    """Raised when a referenced ticket, category, client or technician is absent."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity.capitalize()} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class CapacityExceededError(TicketServiceError):
    """Raised when a technician already holds the maximum number of active tickets."""

    def __init__(self, technician_id: str, limit: int, *, technician_name: str | None = None) -> None:
        label = technician_name or technician_id
        super().__init__(
            f"Technician {label} already has {limit} tickets in progress and cannot take another one"
        )
        self.technician_id = technician_id
        self.technician_name = technician_name
        self.limit = limit


class InvalidTicketTransitionError(TicketServiceError):
    """Raised when attempting to transition to an invalid state."""

    def __init__(self, current: TicketStatus, requested: TicketStatus) -> None:
        super().__init__(
            f"Cannot change status from {current.value} to {requested.value}; "
            "valid sequence is open -> in_progress -> resolved -> closed"
        )
        self.current = current
        self.requested = requested


class ConflictError(TicketServiceError):
    """Raised when a write clashes with existing state for the given field."""

    def __init__(self, field: str, detail: str | None = None) -> None:
        super().__init__(detail or f"Conflicting value for {field}")
        self.field = field
