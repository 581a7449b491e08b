# routers/payments.py
from fastapi import APIRouter, Depends, Header, Response
from typing import Optional
from urllib.parse import quote
import uuid

from schemas import PaymentCreate, PaymentEntryRead, ProjectDetailRead
from api_utils import respond_item
from deps import AuthSession, get_session, require_action
from routers.projects import to_project_detail
from services import projects as svc
from services.errors import RecordNotFound
from services.financials import payment_entries, to_money
from services.policy import Action
from services.receipt import receipt_for_advance, receipt_for_payment, render_receipt_pdf

router = APIRouter(tags=["payments"])


def pdf_response(content: bytes, filename: str) -> Response:
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "'")
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"},
    )


@router.get("/projects/{project_id}/payments", response_model=list[PaymentEntryRead])
async def list_payments(project_id: uuid.UUID, _: AuthSession = Depends(get_session)):
    """Payment rows with the advance synthesized as the first entry."""
    project = await svc.get_project(project_id)
    return [PaymentEntryRead.model_validate(e) for e in payment_entries(project, project.payment_history)]


@router.post("/projects/{project_id}/payments", response_model=ProjectDetailRead, status_code=201)
async def record_payment(
    project_id: uuid.UUID,
    payload: PaymentCreate,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    session: AuthSession = Depends(require_action(Action.ADD_PAYMENT)),
):
    obj = await svc.record_payment(
        project_id,
        payload.amount,
        payment_date=payload.payment_date,
        payment_mode=payload.payment_mode,
        client_token=payload.client_token or idempotency_key,
    )
    return respond_item(obj, lambda m: to_project_detail(m, session), status_code=201)


@router.delete("/payments/{payment_id}", response_model=ProjectDetailRead)
async def delete_payment(payment_id: uuid.UUID, session: AuthSession = Depends(require_action(Action.DELETE_PAYMENT))):
    obj = await svc.delete_payment(payment_id)
    return respond_item(obj, lambda m: to_project_detail(m, session))


# --- receipts ---------------------------------------------------------------

@router.get("/projects/{project_id}/payments/{payment_id}/receipt")
async def payment_receipt(
    project_id: uuid.UUID,
    payment_id: uuid.UUID,
    _: AuthSession = Depends(require_action(Action.VIEW_RECEIPTS)),
):
    project = await svc.get_project(project_id)
    payment = await svc.get_payment(project_id, payment_id)
    data = receipt_for_payment(project, payment)
    return pdf_response(render_receipt_pdf(data), data.filename)


@router.get("/projects/{project_id}/advance-receipt")
async def advance_receipt(project_id: uuid.UUID, _: AuthSession = Depends(require_action(Action.VIEW_RECEIPTS))):
    project = await svc.get_project(project_id)
    if to_money(project.advance_payment) <= 0:
        raise RecordNotFound("advance payment", project_id)
    data = receipt_for_advance(project)
    return pdf_response(render_receipt_pdf(data), data.filename)
