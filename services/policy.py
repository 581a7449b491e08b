# services/policy.py: who may do what, as one static table
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from services import config
from services.errors import Unauthorized


class Action(str, Enum):
    VIEW_RECEIPTS = "view_receipts"
    ADD_PAYMENT = "add_payment"
    EDIT_CUSTOMER = "edit_customer"
    EDIT_LOAN_AMOUNT = "edit_loan_amount"
    DELETE_PAYMENT = "delete_payment"
    VIEW_FINANCE = "view_finance"
    HIDE_REVENUE = "hide_revenue"


@dataclass(frozen=True)
class Rule:
    """
    admin        -> the admin role grants the action
    emails       -> these mailboxes are granted regardless of role
    require_admin-> only admins, and only those not listed in ``denied``
    """
    admin: bool = False
    emails: frozenset[str] = field(default_factory=frozenset)
    require_admin: bool = False
    denied: frozenset[str] = field(default_factory=frozenset)

    def allows(self, email: Optional[str], is_admin: bool) -> bool:
        email = (email or "").strip().lower()
        if email in self.denied:
            return False
        if self.require_admin:
            return is_admin
        return (self.admin and is_admin) or email in self.emails


def _emails(values: Iterable[str]) -> frozenset[str]:
    return frozenset(v.strip().lower() for v in values if v and v.strip())


def build_rules() -> dict[Action, Rule]:
    return {
        Action.VIEW_RECEIPTS: Rule(admin=True, emails=_emails(config.RECEIPT_EMAILS)),
        Action.ADD_PAYMENT: Rule(require_admin=True, denied=_emails(config.READ_ONLY_EMAILS)),
        Action.EDIT_CUSTOMER: Rule(admin=True, emails=_emails(config.EDIT_CUSTOMER_EMAILS)),
        Action.EDIT_LOAN_AMOUNT: Rule(emails=_emails([config.SUPER_ADMIN_EMAIL])),
        Action.DELETE_PAYMENT: Rule(emails=_emails([config.SUPER_ADMIN_EMAIL])),
        Action.VIEW_FINANCE: Rule(emails=_emails([config.FINANCE_EMAIL])),
        Action.HIDE_REVENUE: Rule(emails=_emails(config.REVENUE_HIDDEN_EMAILS)),
    }


RULES: dict[Action, Rule] = build_rules()


def is_allowed(action: Action, email: Optional[str], is_admin: bool) -> bool:
    return RULES[action].allows(email, is_admin)


def can_view_receipts(email: Optional[str], is_admin: bool) -> bool:
    return is_allowed(Action.VIEW_RECEIPTS, email, is_admin)

def can_add_payment(email: Optional[str], is_admin: bool) -> bool:
    return is_allowed(Action.ADD_PAYMENT, email, is_admin)

def can_edit_customer(email: Optional[str], is_admin: bool) -> bool:
    return is_allowed(Action.EDIT_CUSTOMER, email, is_admin)

def can_edit_loan_amount(email: Optional[str], is_admin: bool = False) -> bool:
    return is_allowed(Action.EDIT_LOAN_AMOUNT, email, is_admin)

def can_delete_payment(email: Optional[str], is_admin: bool = False) -> bool:
    return is_allowed(Action.DELETE_PAYMENT, email, is_admin)

def is_finance_user(email: Optional[str], is_admin: bool = False) -> bool:
    return is_allowed(Action.VIEW_FINANCE, email, is_admin)

def hides_revenue(email: Optional[str], is_admin: bool = False) -> bool:
    return is_allowed(Action.HIDE_REVENUE, email, is_admin)


def permissions_for(email: Optional[str], is_admin: bool) -> dict[str, bool]:
    """Flags the client uses to show or hide controls."""
    return {action.value: is_allowed(action, email, is_admin) for action in Action}


def require(action: Action, email: Optional[str], is_admin: bool) -> None:
    if not is_allowed(action, email, is_admin):
        raise Unauthorized(action.value, email)
