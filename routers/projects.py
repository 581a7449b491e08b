# routers/projects.py
from fastapi import APIRouter, Depends, Response
import uuid

from models import Project, ProjectPaymentMode, ProjectStatus, ProjectType
from schemas import CustomerUpdate, ProjectCreate, ProjectDetailRead, ProjectRead, StatusUpdate, PaymentEntryRead
from api_utils import RAListParams, apply_filter_map, contains, one_of, paginate_and_respond, respond_item
from deps import AuthSession, get_session, require_action
from services import projects as svc
from services.financials import outstanding_balance, payment_entries, to_money, total_paid
from services.policy import Action
from services.stages import PROJECT_STAGES, stage_index, stage_progress

router = APIRouter(prefix="/projects", tags=["projects"])

ALLOWED_SORTS = {"name", "customer_name", "proposal_amount", "status", "current_stage", "kwh", "start_date", "created_at"}


def to_project_read(p: Project) -> ProjectRead:
    return ProjectRead(
        id=p.id,
        name=p.name,
        customer_name=p.customer_name,
        email=p.email,
        phone=p.phone,
        address=p.address,
        project_type=p.project_type,
        payment_mode=p.payment_mode,
        proposal_amount=to_money(p.proposal_amount),
        advance_payment=to_money(p.advance_payment),
        paid_amount=to_money(p.paid_amount),
        loan_amount=to_money(p.loan_amount),
        balance=outstanding_balance(p),
        total_paid=total_paid(p),
        kwh=p.kwh or 0,
        current_stage=p.current_stage,
        stage_index=stage_index(p.current_stage),
        progress=stage_progress(p.current_stage),
        status=p.status,
        start_date=p.start_date,
        created_at=p.created_at,
        updated_at=p.updated_at,
    )


def to_project_detail(p: Project, session: AuthSession) -> ProjectDetailRead:
    entries = payment_entries(p, p.payment_history)
    return ProjectDetailRead(
        **to_project_read(p).model_dump(),
        payments=[PaymentEntryRead.model_validate(e) for e in entries],
        permissions=session.permissions(),
        stages=PROJECT_STAGES,
    )


@router.get("", response_model=list[ProjectRead])
async def list_projects(params: RAListParams = Depends(), _: AuthSession = Depends(get_session)):
    qs = svc.visible_projects()
    fmap = {
        "name": contains("name"),
        "customer_name": contains("customer_name"),
        "email": contains("email"),
        "phone": contains("phone"),
        "address": contains("address"),
        "status": one_of("status", ProjectStatus),
        "project_type": one_of("project_type", ProjectType),
        "payment_mode": one_of("payment_mode", ProjectPaymentMode),
        "current_stage": contains("current_stage"),
    }
    qs = apply_filter_map(qs, params.filters, fmap)
    order = params.order(ALLOWED_SORTS, default="-created_at")
    return await paginate_and_respond(qs, params.skip, params.limit, order, to_project_read)


@router.post("", response_model=ProjectDetailRead, status_code=201)
async def create_project(payload: ProjectCreate, session: AuthSession = Depends(get_session)):
    obj = await svc.create_project(payload.model_dump())
    return respond_item(obj, lambda m: to_project_detail(m, session), status_code=201)


@router.get("/{project_id}", response_model=ProjectDetailRead)
async def get_project(project_id: uuid.UUID, session: AuthSession = Depends(get_session)):
    obj = await svc.get_project(project_id)
    return respond_item(obj, lambda m: to_project_detail(m, session))


@router.put("/{project_id}/customer", response_model=ProjectDetailRead)
async def update_customer(
    project_id: uuid.UUID,
    payload: CustomerUpdate,
    session: AuthSession = Depends(require_action(Action.EDIT_CUSTOMER)),
):
    obj = await svc.update_customer(
        project_id,
        payload.model_dump(exclude_unset=True),
        allow_loan_edit=session.can(Action.EDIT_LOAN_AMOUNT),
    )
    return respond_item(obj, lambda m: to_project_detail(m, session))


@router.put("/{project_id}/status", response_model=ProjectDetailRead)
async def update_status(
    project_id: uuid.UUID,
    payload: StatusUpdate,
    session: AuthSession = Depends(require_action(Action.EDIT_CUSTOMER)),
):
    obj = await svc.set_status(project_id, ProjectStatus(payload.status))
    return respond_item(obj, lambda m: to_project_detail(m, session))


@router.delete("/{project_id}", status_code=204)
async def delete_project(project_id: uuid.UUID, _: AuthSession = Depends(require_action(Action.EDIT_CUSTOMER))):
    await svc.soft_delete(project_id)
    return Response(status_code=204)


# --- stage progression ------------------------------------------------------

@router.post("/{project_id}/stage/advance", response_model=ProjectDetailRead)
async def advance_stage(project_id: uuid.UUID, session: AuthSession = Depends(get_session)):
    obj = await svc.advance_stage(project_id)
    return respond_item(obj, lambda m: to_project_detail(m, session))


@router.post("/{project_id}/stage/retreat", response_model=ProjectDetailRead)
async def retreat_stage(project_id: uuid.UUID, session: AuthSession = Depends(get_session)):
    obj = await svc.retreat_stage(project_id)
    return respond_item(obj, lambda m: to_project_detail(m, session))
