# services/financials.py: money figures for a project (pure, no I/O)
from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable, Optional

from services.errors import ExceedsBalance, InvalidAmount

CENT = Decimal("0.01")
ADVANCE_MODE = "Cash/UPI"


def to_money(value: Any) -> Decimal:
    """Decimal rounded to paise; floats go through str() so 0.1 stays 0.10."""
    if value is None:
        return Decimal("0.00")
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmount(value, f"Not a valid amount: {value!r}")


def outstanding_balance(project: Any) -> Decimal:
    """proposal - (advance + paid + loan)."""
    return to_money(project.proposal_amount) - (
        to_money(project.advance_payment) + to_money(project.paid_amount) + to_money(project.loan_amount)
    )


def total_paid(project: Any) -> Decimal:
    return to_money(project.advance_payment) + to_money(project.paid_amount)


def validate_payment(project: Any, amount: Any) -> Decimal:
    amount = to_money(amount)
    if amount <= 0:
        raise InvalidAmount(amount)
    balance = outstanding_balance(project)
    if amount > balance:
        raise ExceedsBalance(amount, balance)
    return amount


def validate_commitments(proposal_amount: Any, advance_payment: Any, loan_amount: Any, paid_amount: Any = 0) -> None:
    """Contract figures must be non-negative and must not overdraw the proposal."""
    proposal, advance, loan, paid = (to_money(v) for v in (proposal_amount, advance_payment, loan_amount, paid_amount))
    for name, v in (("proposal_amount", proposal), ("advance_payment", advance), ("loan_amount", loan)):
        if v < 0:
            raise InvalidAmount(v, f"{name} must not be negative (got {v})")
    committed = advance + paid + loan
    if committed > proposal:
        raise ExceedsBalance(committed, proposal, f"Advance, payments and loan ({committed}) exceed the proposal amount {proposal}")


def decremented_paid_amount(paid_amount: Any, amount: Any) -> Decimal:
    return max(Decimal("0.00"), to_money(paid_amount) - to_money(amount))


@dataclass(frozen=True)
class PaymentEntry:
    """One row of a project's payment listing; the advance is synthesized."""
    id: Optional[str]
    kind: str  # "advance" | "payment"
    amount: Decimal
    payment_date: Optional[date]
    payment_mode: str
    created_at: Optional[datetime] = None


def _as_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def payment_entries(project: Any, payments: Iterable[Any]) -> list[PaymentEntry]:
    entries: list[PaymentEntry] = []
    advance = to_money(project.advance_payment)
    if advance > 0:
        entries.append(PaymentEntry(
            id=None,
            kind="advance",
            amount=advance,
            payment_date=_as_date(project.start_date) or _as_date(project.created_at),
            payment_mode=ADVANCE_MODE,
            created_at=project.created_at,
        ))
    rows = sorted(payments, key=lambda p: (_as_date(p.payment_date) or date.min, p.created_at or datetime.min))
    for p in rows:
        mode = getattr(p.payment_mode, "value", p.payment_mode) or "Cash"
        entries.append(PaymentEntry(
            id=str(p.id),
            kind="payment",
            amount=to_money(p.amount),
            payment_date=_as_date(p.payment_date) or _as_date(p.created_at),
            payment_mode=mode,
            created_at=p.created_at,
        ))
    return entries


def sum_payments(payments: Iterable[Any]) -> Decimal:
    return sum((to_money(p.amount) for p in payments), Decimal("0.00"))
