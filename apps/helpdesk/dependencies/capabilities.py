"""Role capability table for ticket operations.

Authorization happens here, at the request boundary; the ticket service never
looks at roles.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from .auth import Role, roles_required


class Operation(str, Enum):
    CREATE_TICKET = "create_ticket"
    LIST_TICKETS = "list_tickets"
    READ_TICKET = "read_ticket"
    LIST_CLIENT_TICKETS = "list_client_tickets"
    LIST_TECHNICIAN_TICKETS = "list_technician_tickets"
    CHANGE_STATUS = "change_status"
    REASSIGN_TICKET = "reassign_ticket"
    DELETE_TICKET = "delete_ticket"


CAPABILITIES: Mapping[Operation, frozenset[Role]] = {
    Operation.CREATE_TICKET: frozenset({Role.CLIENT, Role.ADMIN}),
    Operation.LIST_TICKETS: frozenset({Role.ADMIN}),
    Operation.READ_TICKET: frozenset({Role.ADMIN, Role.TECHNICIAN, Role.CLIENT}),
    Operation.LIST_CLIENT_TICKETS: frozenset({Role.CLIENT, Role.ADMIN}),
    Operation.LIST_TECHNICIAN_TICKETS: frozenset({Role.TECHNICIAN, Role.ADMIN}),
    Operation.CHANGE_STATUS: frozenset({Role.TECHNICIAN, Role.ADMIN}),
    Operation.REASSIGN_TICKET: frozenset({Role.ADMIN}),
    Operation.DELETE_TICKET: frozenset({Role.ADMIN}),
}


def capability_required(operation: Operation):
    """Build a dependency admitting only the roles the table grants ``operation``."""

    return roles_required(*CAPABILITIES[operation])
