# services/reports.py: dashboard, reports and finance aggregates over project rows
from __future__ import annotations
import calendar
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

from services.financials import outstanding_balance, sum_payments, to_money, total_paid
from services.stages import COMPLETED, ACTIVE, PROJECT_STAGES, STAGE_GROUPS, stage_index

MONTHS = list(calendar.month_name)[1:]
SORT_KEYS = ("date", "amount", "stage")


def _status(p: Any) -> str:
    return getattr(p.status, "value", p.status)


def _started(p: Any) -> Optional[date]:
    d = p.start_date or p.created_at
    return d.date() if isinstance(d, datetime) else d


def headline(projects: Sequence[Any], hide_revenue: bool = False, unique_customers: bool = True) -> Dict[str, Any]:
    customers = {p.customer_name for p in projects} if unique_customers else projects
    revenue = sum((to_money(p.proposal_amount) for p in projects), Decimal("0.00"))
    return {
        "total_customers": len(customers),
        "active_projects": sum(1 for p in projects if _status(p) == ACTIVE),
        "completed_projects": sum(1 for p in projects if _status(p) == COMPLETED),
        "total_revenue": None if hide_revenue else revenue,
        "total_kwh": sum(float(p.kwh or 0) for p in projects),
    }


def elapsed_days(p: Any, today: Optional[date] = None) -> int:
    """Days since the project started (creation date when unstarted); negative for future starts."""
    started = _started(p)
    if started is None:
        return 0
    return ((today or date.today()) - started).days


def format_duration(days: int) -> str:
    """Dashboard wording: Today, 3 days, 2 weeks, 5 months, 1 year."""
    days = abs(days)
    if days < 1:
        return "Today"
    for size, unit, limit in ((1, "day", 7), (7, "week", 28), (30, "month", 360)):
        if days < limit:
            n = days // size
            return f"{n} {unit}" if n == 1 else f"{n} {unit}s"
    years = max(days // 365, 1)
    return "1 year" if years == 1 else f"{years} years"


def sort_projects(
    projects: Iterable[Any],
    sort_by: str = "date",
    order: str = "desc",
    today: Optional[date] = None,
) -> List[Any]:
    """
    date   -> by time since start; desc puts the longest-running first
    amount -> by proposal amount
    stage  -> alphabetically by stage name, as the dashboard always did
    """
    if sort_by not in SORT_KEYS:
        raise ValueError(f"sort_by must be one of {SORT_KEYS}")
    if sort_by == "date":
        key = lambda p: elapsed_days(p, today)
    elif sort_by == "amount":
        key = lambda p: to_money(p.proposal_amount)
    else:
        key = lambda p: p.current_stage or ""
    return sorted(projects, key=key, reverse=(order.lower() == "desc"))


def stage_counts(projects: Iterable[Any]) -> Dict[str, int]:
    counts = {stage: 0 for stage in PROJECT_STAGES}
    for p in projects:
        if p.current_stage in counts:
            counts[p.current_stage] += 1
    return counts


def stage_group_counts(counts: Dict[str, int]) -> List[Dict[str, Any]]:
    return [
        {
            "name": name,
            "total": sum(counts.get(s, 0) for s in stages),
            "stages": [{"stage": s, "index": stage_index(s), "count": counts.get(s, 0)} for s in stages],
        }
        for name, stages in STAGE_GROUPS
    ]


def monthly_kwh(projects: Iterable[Any], year: int) -> Dict[str, float]:
    """kWh contracted per start-date month; projects without a start date are skipped."""
    data = {m: 0.0 for m in MONTHS}
    for p in projects:
        if not p.start_date or not p.kwh:
            continue
        if p.start_date.year == year:
            data[MONTHS[p.start_date.month - 1]] += float(p.kwh)
    return data


def year_options(today: Optional[date] = None, span: int = 5) -> List[int]:
    current = (today or date.today()).year
    return [current - i for i in range(span)]


def report(projects: Sequence[Any], year: int, hide_revenue: bool = False) -> Dict[str, Any]:
    counts = stage_counts(projects)
    return {
        **headline(projects, hide_revenue=hide_revenue, unique_customers=False),
        "year": year,
        "years": year_options(),
        "stage_counts": counts,
        "stage_groups": stage_group_counts(counts),
        "monthly_kwh": monthly_kwh(projects, year),
    }


def finance_summary(projects: Sequence[Any]) -> Dict[str, Any]:
    """Collections across projects; expects payment_history prefetched."""
    zero = Decimal("0.00")
    by_mode: Dict[str, Decimal] = {}
    rows = []
    totals = {"proposal": zero, "advance": zero, "collected": zero, "loan": zero, "outstanding": zero}
    for p in projects:
        payments = list(p.payment_history)
        for pay in payments:
            mode = getattr(pay.payment_mode, "value", pay.payment_mode)
            by_mode[mode] = by_mode.get(mode, zero) + to_money(pay.amount)
        balance = outstanding_balance(p)
        totals["proposal"] += to_money(p.proposal_amount)
        totals["advance"] += to_money(p.advance_payment)
        totals["collected"] += total_paid(p)
        totals["loan"] += to_money(p.loan_amount)
        totals["outstanding"] += balance
        rows.append({
            "id": str(p.id),
            "customer_name": p.customer_name,
            "status": _status(p),
            "current_stage": p.current_stage,
            "proposal_amount": to_money(p.proposal_amount),
            "advance_payment": to_money(p.advance_payment),
            "paid_amount": to_money(p.paid_amount),
            "payments_recorded": sum_payments(payments),
            "loan_amount": to_money(p.loan_amount),
            "balance": balance,
        })
    if totals["advance"] > 0:
        by_mode["Advance"] = totals["advance"]
    return {"totals": totals, "by_mode": by_mode, "projects": rows}
