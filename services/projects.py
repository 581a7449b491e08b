# services/projects.py: store-bound operations on projects and their payments
from __future__ import annotations
import logging
from datetime import date
from typing import Any, Awaitable, Callable, Dict, List, Optional
from uuid import UUID

from tortoise import timezone
from tortoise.exceptions import IntegrityError
from tortoise.expressions import F
from tortoise.queryset import QuerySet
from tortoise.transactions import in_transaction

from models import PaymentHistory, PaymentMode, Project, ProjectStatus
from services import config
from services.errors import ConcurrentUpdate, InvalidAmount, RecordNotFound, Unauthorized
from services.financials import decremented_paid_amount, to_money, validate_commitments, validate_payment
from services.stages import FIRST_STAGE, StageMove, next_stage, previous_stage
from services.store import store_call

logger = logging.getLogger("uvicorn")

CUSTOMER_FIELDS = ("name", "customer_name", "email", "phone", "address", "kwh", "start_date", "loan_amount")
REQUIRED_FIELDS = ("customer_name", "kwh", "loan_amount")


def visible_projects() -> QuerySet[Project]:
    """Every project that is not soft-deleted."""
    return Project.exclude(status=ProjectStatus.DELETED)


async def _load(project_id: UUID | str) -> Project:
    project = await visible_projects().filter(id=project_id).first()
    if not project:
        raise RecordNotFound("projects", project_id)
    return project


@store_call
async def get_project(project_id: UUID | str) -> Project:
    """Project joined with its payment history."""
    project = await visible_projects().filter(id=project_id).prefetch_related("payment_history").first()
    if not project:
        raise RecordNotFound("projects", project_id)
    return project


async def _compare_and_set(project: Project, **values: Any) -> bool:
    # deleted rows never match, so a writer that loaded before soft_delete loses
    updated = await visible_projects().filter(id=project.id, version=project.version).update(
        version=project.version + 1,
        updated_at=timezone.now(),
        **values,
    )
    return bool(updated)


async def _with_retries(project_id: UUID | str, attempt: Callable[[Project], Awaitable[None]], label: str) -> None:
    """Re-read the project and re-run ``attempt`` until its compare-and-set wins."""
    for n in range(1, config.MAX_UPDATE_RETRIES + 1):
        project = await _load(project_id)
        try:
            await attempt(project)
            return
        except ConcurrentUpdate:
            logger.info(f"[{label}] version conflict on project {project_id} (attempt {n}/{config.MAX_UPDATE_RETRIES})")
    raise ConcurrentUpdate(project_id)


# -----------------------------
# PROJECTS
# -----------------------------
@store_call
async def create_project(data: Dict[str, Any]) -> Project:
    proposal = to_money(data.get("proposal_amount"))
    advance = to_money(data.get("advance_payment"))
    loan = to_money(data.get("loan_amount"))
    validate_commitments(proposal, advance, loan)

    values = {k: v for k, v in data.items() if k not in {"proposal_amount", "advance_payment", "loan_amount"}}
    if not values.get("start_date"):
        values["start_date"] = date.today()
    project = await Project.create(
        **values,
        proposal_amount=proposal,
        advance_payment=advance,
        loan_amount=loan,
        paid_amount=to_money(0),
        current_stage=FIRST_STAGE,
        status=ProjectStatus.ACTIVE,
    )
    logger.info(f"[projects] created {project.id} for {project.customer_name}")
    return await get_project(project.id)


@store_call
async def update_customer(project_id: UUID | str, changes: Dict[str, Any], allow_loan_edit: bool = False) -> Project:
    changes = {
        k: v for k, v in changes.items()
        if k in CUSTOMER_FIELDS and not (v is None and k in REQUIRED_FIELDS)
    }
    if not changes:
        return await get_project(project_id)

    async def attempt(project: Project) -> None:
        values = dict(changes)
        if "loan_amount" in values:
            loan = to_money(values["loan_amount"])
            if loan != to_money(project.loan_amount):
                if not allow_loan_edit:
                    raise Unauthorized("edit_loan_amount")
                validate_commitments(project.proposal_amount, project.advance_payment, loan, project.paid_amount)
            values["loan_amount"] = loan
        if not await _compare_and_set(project, **values):
            raise ConcurrentUpdate(project.id)

    await _with_retries(project_id, attempt, "projects")
    logger.info(f"[projects] customer details updated on {project_id}: {sorted(changes)}")
    return await get_project(project_id)


@store_call
async def set_status(project_id: UUID | str, status: ProjectStatus) -> Project:
    if status == ProjectStatus.DELETED:
        raise ValueError("use soft_delete() to delete a project")

    async def attempt(project: Project) -> None:
        if project.status == status:
            return
        if not await _compare_and_set(project, status=status):
            raise ConcurrentUpdate(project.id)

    await _with_retries(project_id, attempt, "projects")
    return await get_project(project_id)


@store_call
async def soft_delete(project_id: UUID | str) -> None:
    updated = await visible_projects().filter(id=project_id).update(
        status=ProjectStatus.DELETED,
        version=F("version") + 1,
        updated_at=timezone.now(),
    )
    if not updated:
        raise RecordNotFound("projects", project_id)
    logger.info(f"[projects] soft-deleted {project_id}")


# -----------------------------
# PAYMENTS
# -----------------------------
@store_call
async def record_payment(
    project_id: UUID | str,
    amount: Any,
    payment_date: Optional[date] = None,
    payment_mode: PaymentMode = PaymentMode.CASH,
    client_token: Optional[str] = None,
) -> Project:
    """
    Insert a payment_history row and bump projects.paid_amount as one unit.

    The bump is a compare-and-set on projects.version inside the same
    transaction as the insert, so a concurrent writer makes this attempt roll
    back and retry against the fresh row. A client_token already recorded on
    this project returns the current project without recording anything.
    """
    amount = to_money(amount)
    if amount <= 0:
        raise InvalidAmount(amount)
    if client_token and await PaymentHistory.exists(project_id=project_id, client_token=client_token):
        logger.info(f"[payments] duplicate submission {client_token} ignored")
        return await get_project(project_id)

    async def attempt(project: Project) -> None:
        validate_payment(project, amount)
        async with in_transaction():
            payment = await PaymentHistory.create(
                project_id=project.id,
                amount=amount,
                payment_date=payment_date or date.today(),
                payment_mode=payment_mode,
                client_token=client_token,
            )
            new_paid = to_money(project.paid_amount) + amount
            if not await _compare_and_set(project, paid_amount=new_paid):
                raise ConcurrentUpdate(project.id)
        logger.info(f"[payments] recorded {amount} ({payment.payment_mode}) on project {project.id}")

    try:
        await _with_retries(project_id, attempt, "payments")
    except IntegrityError:
        if not client_token:
            raise
        logger.info(f"[payments] duplicate submission {client_token} lost the race, ignored")
    return await get_project(project_id)


@store_call
async def delete_payment(payment_id: UUID | str) -> Project:
    payment = await PaymentHistory.get_or_none(id=payment_id)
    if not payment:
        raise RecordNotFound("payment_history", payment_id)
    project_id = payment.project_id

    async def attempt(project: Project) -> None:
        async with in_transaction():
            deleted = await PaymentHistory.filter(id=payment.id).delete()
            if not deleted:
                raise RecordNotFound("payment_history", payment_id)
            new_paid = decremented_paid_amount(project.paid_amount, payment.amount)
            if not await _compare_and_set(project, paid_amount=new_paid):
                raise ConcurrentUpdate(project.id)

    await _with_retries(project_id, attempt, "payments")
    logger.info(f"[payments] deleted {payment.amount} from project {project_id}")
    return await get_project(project_id)


@store_call
async def get_payment(project_id: UUID | str, payment_id: UUID | str) -> PaymentHistory:
    payment = await PaymentHistory.get_or_none(id=payment_id, project_id=project_id)
    if not payment:
        raise RecordNotFound("payment_history", payment_id)
    return payment


# -----------------------------
# STAGES
# -----------------------------
async def _move_stage(project_id: UUID | str, mover: Callable[[str, str], StageMove]) -> Project:
    async def attempt(project: Project) -> None:
        status = getattr(project.status, "value", project.status)
        move = mover(project.current_stage, status)
        if not move.changed:
            return
        if not await _compare_and_set(project, current_stage=move.stage, status=ProjectStatus(move.status)):
            raise ConcurrentUpdate(project.id)
        logger.info(f"[stage] {project.id}: {project.current_stage!r} -> {move.stage!r} ({move.status})")

    await _with_retries(project_id, attempt, "stage")
    return await get_project(project_id)


@store_call
async def advance_stage(project_id: UUID | str) -> Project:
    return await _move_stage(project_id, next_stage)


@store_call
async def retreat_stage(project_id: UUID | str) -> Project:
    return await _move_stage(project_id, previous_stage)


# -----------------------------
# LOOKUPS
# -----------------------------
async def active_customers() -> List[Dict[str, Any]]:
    """Distinct customers of active projects (first row per name wins)."""
    rows = await Project.filter(status=ProjectStatus.ACTIVE).order_by("created_at").values(
        "customer_name", "email", "phone", "address"
    )
    seen: Dict[str, Dict[str, Any]] = {}
    for r in rows:
        seen.setdefault(r["customer_name"], r)
    return list(seen.values())
