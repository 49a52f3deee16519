from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from apps.helpdesk.dependencies.auth import User
from apps.helpdesk.dependencies.capabilities import Operation, capability_required
from apps.helpdesk.tickets.service import TicketService

require_create = capability_required(Operation.CREATE_TICKET)
require_list = capability_required(Operation.LIST_TICKETS)
require_read = capability_required(Operation.READ_TICKET)
require_client_history = capability_required(Operation.LIST_CLIENT_TICKETS)
require_technician_queue = capability_required(Operation.LIST_TECHNICIAN_TICKETS)
require_status_change = capability_required(Operation.CHANGE_STATUS)
require_reassign = capability_required(Operation.REASSIGN_TICKET)
require_delete = capability_required(Operation.DELETE_TICKET)

CreatorUser = Annotated[User, Depends(require_create)]
ListerUser = Annotated[User, Depends(require_list)]
ReaderUser = Annotated[User, Depends(require_read)]
ClientHistoryUser = Annotated[User, Depends(require_client_history)]
TechnicianQueueUser = Annotated[User, Depends(require_technician_queue)]
StatusChangerUser = Annotated[User, Depends(require_status_change)]
ReassignerUser = Annotated[User, Depends(require_reassign)]
DeleterUser = Annotated[User, Depends(require_delete)]


async def get_ticket_service(request: Request) -> TicketService:
    service = getattr(request.app.state, "ticket_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Ticket service is not configured")
    return service


TicketServiceDep = Annotated[TicketService, Depends(get_ticket_service)]
