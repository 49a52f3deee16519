from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from apps.helpdesk.dependencies.tickets import (
    ClientHistoryUser,
    CreatorUser,
    DeleterUser,
    ListerUser,
    ReaderUser,
    ReassignerUser,
    StatusChangerUser,
    TechnicianQueueUser,
    TicketServiceDep,
    get_ticket_service,
)
from apps.helpdesk.response import Envelope, ok
from apps.helpdesk.tickets.errors import (
    CapacityExceededError,
    ConflictError,
    EntityNotFoundError,
    InvalidTicketTransitionError,
    TicketServiceError,
)
from apps.helpdesk.tickets.models import Ticket
from apps.helpdesk.tickets.state import TicketPriority, TicketStatus

__all__ = ["router", "get_ticket_service"]

router = APIRouter(prefix="/tickets", tags=["tickets"])


class TicketCreateRequest(BaseModel):
    title: str = Field(..., min_length=5, max_length=200)
    description: str = Field(..., min_length=10)
    category_id: UUID
    client_id: UUID
    priority: TicketPriority | None = None
    technician_id: UUID | None = None
    # Accepted for compatibility; new tickets always start open.
    status: TicketStatus | None = None


class TicketStatusChangeRequest(BaseModel):
    status: TicketStatus


class TicketAssignRequest(BaseModel):
    technician_id: UUID


class TicketResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    status: TicketStatus
    priority: TicketPriority
    category_id: str
    client_id: str
    technician_id: str | None
    created_by: str
    created_at: datetime
    updated_at: datetime


def _to_response(ticket: Ticket) -> TicketResponse:
    return TicketResponse.model_validate(ticket)


def _to_http_error(exc: TicketServiceError) -> HTTPException:
    if isinstance(exc, EntityNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, (CapacityExceededError, InvalidTicketTransitionError, ConflictError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post("", response_model=Envelope[TicketResponse], status_code=status.HTTP_201_CREATED)
async def create_ticket(
    payload: TicketCreateRequest,
    service: TicketServiceDep,
    user: CreatorUser,
) -> Envelope[TicketResponse]:
    try:
        ticket = await service.create_ticket(
            title=payload.title,
            description=payload.description,
            category_id=str(payload.category_id),
            client_id=str(payload.client_id),
            priority=payload.priority,
            technician_id=str(payload.technician_id) if payload.technician_id else None,
            actor=user.id,
        )
    except TicketServiceError as exc:
        raise _to_http_error(exc) from exc
    return ok(_to_response(ticket))


@router.get("", response_model=Envelope[list[TicketResponse]])
async def list_tickets(service: TicketServiceDep, _: ListerUser) -> Envelope[list[TicketResponse]]:
    tickets = await service.list_tickets()
    return ok([_to_response(ticket) for ticket in tickets])


@router.get("/client/{client_id}", response_model=Envelope[list[TicketResponse]])
async def list_client_tickets(
    client_id: str, service: TicketServiceDep, _: ClientHistoryUser
) -> Envelope[list[TicketResponse]]:
    try:
        tickets = await service.list_by_client(client_id)
    except TicketServiceError as exc:
        raise _to_http_error(exc) from exc
    return ok([_to_response(ticket) for ticket in tickets])


@router.get("/technician/{technician_id}", response_model=Envelope[list[TicketResponse]])
async def list_technician_tickets(
    technician_id: str, service: TicketServiceDep, _: TechnicianQueueUser
) -> Envelope[list[TicketResponse]]:
    try:
        tickets = await service.list_by_technician(technician_id)
    except TicketServiceError as exc:
        raise _to_http_error(exc) from exc
    return ok([_to_response(ticket) for ticket in tickets])


@router.get("/{ticket_id}", response_model=Envelope[TicketResponse])
async def get_ticket(ticket_id: str, service: TicketServiceDep, _: ReaderUser) -> Envelope[TicketResponse]:
    try:
        ticket = await service.get_ticket(ticket_id)
    except TicketServiceError as exc:
        raise _to_http_error(exc) from exc
    return ok(_to_response(ticket))


@router.patch("/{ticket_id}/status", response_model=Envelope[TicketResponse])
async def change_ticket_status(
    ticket_id: str,
    payload: TicketStatusChangeRequest,
    service: TicketServiceDep,
    user: StatusChangerUser,
) -> Envelope[TicketResponse]:
    try:
        ticket = await service.change_status(ticket_id, new_status=payload.status, actor=user.id)
    except TicketServiceError as exc:
        raise _to_http_error(exc) from exc
    return ok(_to_response(ticket))


@router.patch("/{ticket_id}/technician", response_model=Envelope[TicketResponse])
async def reassign_ticket(
    ticket_id: str,
    payload: TicketAssignRequest,
    service: TicketServiceDep,
    user: ReassignerUser,
) -> Envelope[TicketResponse]:
    try:
        ticket = await service.assign_technician(
            ticket_id, technician_id=str(payload.technician_id), actor=user.id
        )
    except TicketServiceError as exc:
        raise _to_http_error(exc) from exc
    return ok(_to_response(ticket))


@router.delete("/{ticket_id}", response_model=Envelope[None])
async def delete_ticket(ticket_id: str, service: TicketServiceDep, _: DeleterUser) -> Envelope[None]:
    try:
        await service.delete_ticket(ticket_id)
    except TicketServiceError as exc:
        raise _to_http_error(exc) from exc
    return ok(None, message="Ticket deleted")
