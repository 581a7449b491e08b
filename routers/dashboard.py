# routers/dashboard.py
from __future__ import annotations
from datetime import date
from fastapi import APIRouter, Depends, Query
from typing import Literal

from models import ProjectStatus
from schemas import DashboardProjectRead, DashboardRead
from deps import AuthSession, get_session
from routers.projects import to_project_read
from services.policy import Action
from services.projects import visible_projects
from services.reports import elapsed_days, format_duration, headline, sort_projects
from services.store import guarded

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardRead)
async def dashboard(
    sort_by: Literal["date", "amount", "stage"] = Query("date"),
    order: Literal["asc", "desc"] = Query("desc"),
    session: AuthSession = Depends(get_session),
):
    """Headline figures plus the active projects, sorted as requested."""
    projects = await guarded("dashboard", visible_projects())
    stats = headline(projects, hide_revenue=session.can(Action.HIDE_REVENUE))
    active = [p for p in projects if p.status == ProjectStatus.ACTIVE]
    today = date.today()
    rows = []
    for p in sort_projects(active, sort_by, order, today=today):
        days = elapsed_days(p, today)
        rows.append(DashboardProjectRead(
            **to_project_read(p).model_dump(),
            duration_days=days,
            duration=format_duration(days),
        ))
    return DashboardRead(**stats, projects=rows)
