# routers/service_tickets.py
from fastapi import APIRouter, Depends, HTTPException
from tortoise import timezone
import logging
import uuid

from models import ServiceTicket, TicketStatus
from schemas import CustomerRead, ServiceTicketCreate, ServiceTicketRead, ServiceTicketStatusUpdate
from api_utils import RAListParams, apply_filter_map, contains, one_of, paginate_and_respond, respond_item
from deps import AuthSession, get_session
from services.projects import active_customers

router = APIRouter(prefix="/service-tickets", tags=["service-tickets"])
logger = logging.getLogger("uvicorn")

ALLOWED_SORTS = {"customer_name", "status", "created_at", "updated_at", "completed_at"}


def to_ticket_read(m: ServiceTicket) -> ServiceTicketRead:
    return ServiceTicketRead.model_validate(m)


@router.get("", response_model=list[ServiceTicketRead])
async def list_tickets(params: RAListParams = Depends(), _: AuthSession = Depends(get_session)):
    qs = ServiceTicket.all()
    fmap = {
        "customer_name": contains("customer_name"),
        "description": contains("description"),
        "status": one_of("status", TicketStatus),
    }
    qs = apply_filter_map(qs, params.filters, fmap)
    order = params.order(ALLOWED_SORTS, default="-created_at")
    return await paginate_and_respond(qs, params.skip, params.limit, order, to_ticket_read)


# Put /customers BEFORE /{ticket_id}
@router.get("/customers", response_model=list[CustomerRead])
async def list_customers(_: AuthSession = Depends(get_session)):
    """Customer picker for new tickets: one entry per name among active projects."""
    return [CustomerRead(**c) for c in await active_customers()]


@router.get("/{ticket_id}", response_model=ServiceTicketRead)
async def get_ticket(ticket_id: uuid.UUID, _: AuthSession = Depends(get_session)):
    obj = await ServiceTicket.get_or_none(id=ticket_id)
    if not obj:
        raise HTTPException(404, "Service ticket not found")
    return respond_item(obj, to_ticket_read)


@router.post("", response_model=ServiceTicketRead, status_code=201)
async def create_ticket(payload: ServiceTicketCreate, session: AuthSession = Depends(get_session)):
    if not payload.description.strip() or not payload.customer_name.strip():
        raise HTTPException(422, "Please select a customer and provide a description")
    obj = await ServiceTicket.create(**payload.model_dump(), status=TicketStatus.OPEN)
    logger.info(f"[tickets] {session.email} opened ticket {obj.id} for {obj.customer_name}")
    return respond_item(obj, to_ticket_read, status_code=201)


@router.put("/{ticket_id}/status", response_model=ServiceTicketRead)
async def update_ticket_status(ticket_id: uuid.UUID, payload: ServiceTicketStatusUpdate, _: AuthSession = Depends(get_session)):
    obj = await ServiceTicket.get_or_none(id=ticket_id)
    if not obj:
        raise HTTPException(404, "Service ticket not found")
    obj.status = payload.status
    obj.completed_at = timezone.now() if payload.status == TicketStatus.COMPLETED else None
    await obj.save()
    return respond_item(obj, to_ticket_read)


@router.post("/{ticket_id}/complete", response_model=ServiceTicketRead)
async def complete_ticket(ticket_id: uuid.UUID, _: AuthSession = Depends(get_session)):
    obj = await ServiceTicket.get_or_none(id=ticket_id)
    if not obj:
        raise HTTPException(404, "Service ticket not found")
    if obj.status != TicketStatus.COMPLETED:
        obj.status = TicketStatus.COMPLETED
        obj.completed_at = timezone.now()
        await obj.save()
    return respond_item(obj, to_ticket_read)
