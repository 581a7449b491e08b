from enum import Enum
from tortoise import fields, models
import uuid

from services.stages import FIRST_STAGE


class Role(str, Enum):
    ADMIN = "admin"
    FINANCE = "finance"
    USER = "user"


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DELETED = "deleted"  # soft delete; excluded from every query


class ProjectType(str, Enum):
    DCR = "DCR"
    NON_DCR = "Non DCR"


class ProjectPaymentMode(str, Enum):
    LOAN = "Loan"
    CASH = "Cash"


class PaymentMode(str, Enum):
    CASH = "Cash"
    UPI = "UPI"
    CHEQUE = "Cheque"
    SUBSIDY = "Subsidy"


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# -------- Users --------
class User(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    email = fields.CharField(max_length=100, unique=True, index=True)
    hashed_password = fields.CharField(max_length=128)
    role = fields.CharEnumField(Role, max_length=16, default=Role.USER)
    disabled = fields.BooleanField(default=False)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "users"

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


class RevokedToken(models.Model):
    """JWT ids invalidated by /logout until they expire."""
    jti = fields.CharField(max_length=64, pk=True)
    expires_at = fields.DatetimeField(index=True)
    revoked_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "revoked_tokens"


# -------- Projects & payments --------
class Project(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    name = fields.CharField(max_length=200, null=True)

    customer_name = fields.CharField(max_length=200, index=True)
    email = fields.CharField(max_length=100, null=True)
    phone = fields.CharField(max_length=32, null=True)
    address = fields.TextField(null=True)

    proposal_amount = fields.DecimalField(max_digits=14, decimal_places=2)
    advance_payment = fields.DecimalField(max_digits=14, decimal_places=2, default=0)
    loan_amount = fields.DecimalField(max_digits=14, decimal_places=2, default=0)
    # payments recorded after the advance; balance is always derived, never stored
    paid_amount = fields.DecimalField(max_digits=14, decimal_places=2, default=0)

    project_type = fields.CharEnumField(ProjectType, max_length=16, default=ProjectType.DCR)
    payment_mode = fields.CharEnumField(ProjectPaymentMode, max_length=16, default=ProjectPaymentMode.CASH)
    kwh = fields.FloatField(default=0)

    current_stage = fields.CharField(max_length=100, default=FIRST_STAGE, index=True)
    status = fields.CharEnumField(ProjectStatus, max_length=16, default=ProjectStatus.ACTIVE, index=True)
    # bumped on every financial/stage write; compare-and-set guard
    version = fields.IntField(default=0)

    start_date = fields.DateField(null=True, index=True)
    created_at = fields.DatetimeField(auto_now_add=True, index=True)
    updated_at = fields.DatetimeField(auto_now=True)

    payment_history: fields.ReverseRelation["PaymentHistory"]

    class Meta:
        table = "projects"

    def __str__(self) -> str:
        return self.name or f"{self.customer_name} ({self.id})"


class PaymentHistory(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    project = fields.ForeignKeyField("models.Project", related_name="payment_history", on_delete=fields.CASCADE, index=True)
    amount = fields.DecimalField(max_digits=14, decimal_places=2)
    payment_date = fields.DateField(index=True)
    payment_mode = fields.CharEnumField(PaymentMode, max_length=16, default=PaymentMode.CASH)
    # de-duplicates double submissions of the same form, per project
    client_token = fields.CharField(max_length=64, null=True)
    created_at = fields.DatetimeField(auto_now_add=True, index=True)

    class Meta:
        table = "payment_history"
        ordering = ["payment_date", "created_at"]
        unique_together = (("project", "client_token"),)

    def __str__(self) -> str:
        return f"{self.amount} on {self.payment_date} ({self.payment_mode})"


# -------- Service --------
class ServiceTicket(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    # tied to a customer by name only, not to a project row
    customer_name = fields.CharField(max_length=200, index=True)
    email = fields.CharField(max_length=100, null=True)
    phone = fields.CharField(max_length=32, null=True)
    address = fields.TextField(null=True)
    description = fields.TextField()
    status = fields.CharEnumField(TicketStatus, max_length=16, default=TicketStatus.OPEN, index=True)
    created_at = fields.DatetimeField(auto_now_add=True, index=True)
    updated_at = fields.DatetimeField(auto_now=True)
    completed_at = fields.DatetimeField(null=True)

    class Meta:
        table = "service_tickets"

    def __str__(self) -> str:
        return f"{self.customer_name}: {self.status}"
