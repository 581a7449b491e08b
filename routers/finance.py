# routers/finance.py
from __future__ import annotations
from fastapi import APIRouter, Depends

from schemas import FinanceRead
from deps import AuthSession, require_action
from services.policy import Action
from services.projects import visible_projects
from services.reports import finance_summary
from services.store import guarded

router = APIRouter(prefix="/finance", tags=["finance"])


@router.get("", response_model=FinanceRead)
async def get_finance(_: AuthSession = Depends(require_action(Action.VIEW_FINANCE))):
    """Collections overview; only the finance mailbox may open it."""
    projects = await guarded("finance", visible_projects().order_by("-created_at").prefetch_related("payment_history"))
    return finance_summary(projects)
