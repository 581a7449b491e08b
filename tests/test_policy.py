"""The static permission table over (email, is_admin)."""

import pytest

from services import config
from services.errors import Unauthorized
from services.policy import (
    Action,
    can_add_payment,
    can_delete_payment,
    can_edit_customer,
    can_edit_loan_amount,
    can_view_receipts,
    hides_revenue,
    is_finance_user,
    permissions_for,
    require,
)

SUPER = config.SUPER_ADMIN_EMAIL
FINANCE = config.FINANCE_EMAIL
OPS = config.OPS_EMAIL
OTHER_ADMIN = "manager@axisogreen.in"
STAFF = "staff@axisogreen.in"


class TestReceipts:

    def test_admin_role(self):
        assert can_view_receipts(OTHER_ADMIN, True)

    @pytest.mark.parametrize("email", [OPS, FINANCE])
    def test_allow_list_without_admin_role(self, email):
        assert can_view_receipts(email, False)

    def test_plain_user(self):
        assert not can_view_receipts(STAFF, False)


class TestAddPayment:

    def test_admin(self):
        assert can_add_payment(OTHER_ADMIN, True)

    def test_read_only_mailbox_denied_even_as_admin(self):
        assert not can_add_payment(OPS, True)

    def test_non_admin_denied(self):
        assert not can_add_payment(FINANCE, False)

    def test_email_case_ignored(self):
        assert not can_add_payment(OPS.upper(), True)


class TestEditCustomer:

    def test_admin(self):
        assert can_edit_customer(OTHER_ADMIN, True)

    def test_allow_listed_non_admin(self):
        assert can_edit_customer(OPS, False)

    def test_plain_user(self):
        assert not can_edit_customer(STAFF, False)


class TestSuperAdminOnly:

    def test_super_admin(self):
        assert can_edit_loan_amount(SUPER)
        assert can_delete_payment(SUPER)

    def test_other_admins_denied(self):
        assert not can_edit_loan_amount(OTHER_ADMIN, True)
        assert not can_delete_payment(OTHER_ADMIN, True)


class TestFinance:

    def test_only_finance_mailbox(self):
        assert is_finance_user(FINANCE)
        assert not is_finance_user(SUPER, True)

    def test_revenue_hidden_for_finance_and_ops(self):
        assert hides_revenue(FINANCE)
        assert hides_revenue(OPS, True)
        assert not hides_revenue(SUPER, True)


class TestRequire:

    def test_raises_unauthorized(self):
        with pytest.raises(Unauthorized) as exc:
            require(Action.DELETE_PAYMENT, OTHER_ADMIN, True)
        assert exc.value.status_code == 403
        assert exc.value.action == "delete_payment"

    def test_passes_silently(self):
        require(Action.DELETE_PAYMENT, SUPER, True)

    def test_permissions_cover_every_action(self):
        flags = permissions_for(STAFF, False)
        assert set(flags) == {a.value for a in Action}
        assert not any(flags.values())
