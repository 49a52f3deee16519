from __future__ import annotations

from enum import Enum
from typing import Mapping

from .errors import InvalidTicketTransitionError


class TicketStatus(str, Enum):
    """Supported states for a ticket's lifecycle."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    """Urgency levels a ticket can be filed with."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TicketStateMachine:
    """Validate ticket lifecycle transitions.

    The lifecycle is a linear chain: every status has at most one successor and
    ``CLOSED`` has none. Only a move to that exact successor is accepted; staying
    put, skipping ahead and moving backwards are all rejected.
    """

    _DEFAULT_TRANSITIONS: Mapping[TicketStatus, TicketStatus | None] = {
        TicketStatus.OPEN: TicketStatus.IN_PROGRESS,
        TicketStatus.IN_PROGRESS: TicketStatus.RESOLVED,
        TicketStatus.RESOLVED: TicketStatus.CLOSED,
        TicketStatus.CLOSED: None,
    }

    def __init__(
        self,
        transitions: Mapping[TicketStatus, TicketStatus | None] | None = None,
        *,
        initial: TicketStatus = TicketStatus.OPEN,
    ) -> None:
        self._transitions = self._DEFAULT_TRANSITIONS if transitions is None else transitions
        self._initial = initial

    def initial_state(self) -> TicketStatus:
        return self._initial

    def successor(self, current: TicketStatus) -> TicketStatus | None:
        return self._transitions.get(current)

    def is_terminal(self, status: TicketStatus) -> bool:
        return self.successor(status) is None

    def can_transition(self, current: TicketStatus, requested: TicketStatus) -> bool:
        following = self.successor(current)
        return following is not None and following == requested

    def assert_transition(self, current: TicketStatus, requested: TicketStatus) -> None:
        if not self.can_transition(current, requested):
            raise InvalidTicketTransitionError(current, requested)
