"""Ticket lifecycle and assignment domain."""

from .assignment import AssignmentValidator
from .errors import (
    CapacityExceededError,
    ConflictError,
    EntityNotFoundError,
    InvalidTicketTransitionError,
    TicketServiceError,
)
from .models import Category, Client, Technician, Ticket
from .service import TicketService
from .state import TicketPriority, TicketStateMachine, TicketStatus

__all__ = [
    "AssignmentValidator",
    "CapacityExceededError",
    "Category",
    "Client",
    "ConflictError",
    "EntityNotFoundError",
    "InvalidTicketTransitionError",
    "Technician",
    "Ticket",
    "TicketPriority",
    "TicketService",
    "TicketServiceError",
    "TicketStateMachine",
    "TicketStatus",
]
