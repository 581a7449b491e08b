# routers/reports.py
from __future__ import annotations
from datetime import date
from fastapi import APIRouter, Depends, Query
from typing import Optional

from schemas import ReportRead
from deps import AuthSession, get_session
from services.policy import Action
from services.projects import visible_projects
from services.reports import report
from services.store import guarded

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=ReportRead)
async def get_report(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    session: AuthSession = Depends(get_session),
):
    projects = await guarded("reports", visible_projects())
    return report(projects, year or date.today().year, hide_revenue=session.can(Action.HIDE_REVENUE))
