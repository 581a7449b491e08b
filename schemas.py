import uuid
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, Literal, Dict, List, Any
from pydantic import BaseModel, EmailStr, ConfigDict, Field

from models import PaymentMode, ProjectPaymentMode, ProjectStatus, ProjectType, Role, TicketStatus


# =========================
# Auth
# =========================
class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    refresh_token: str


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    role: Optional[Role] = None


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[Role] = None
    disabled: Optional[bool] = None


class UserRead(BaseModel):
    id: uuid.UUID
    email: EmailStr
    role: Role
    disabled: bool
    is_admin: bool
    model_config = ConfigDict(from_attributes=True)


class SessionRead(BaseModel):
    user_id: uuid.UUID
    email: str
    role: Role
    is_admin: bool
    is_finance: bool
    permissions: Dict[str, bool]


# =========================
# Projects
# =========================
class ProjectCreate(BaseModel):
    name: Optional[str] = None
    customer_name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    project_type: ProjectType = ProjectType.DCR
    payment_mode: ProjectPaymentMode = ProjectPaymentMode.CASH
    proposal_amount: Decimal
    advance_payment: Decimal = Decimal("0")
    loan_amount: Decimal = Decimal("0")
    kwh: float = 0
    start_date: Optional[date] = None


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    customer_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    kwh: Optional[float] = None
    loan_amount: Optional[Decimal] = None
    start_date: Optional[date] = None


class StatusUpdate(BaseModel):
    status: Literal["active", "completed"]


class ProjectRead(BaseModel):
    id: uuid.UUID
    name: Optional[str] = None
    customer_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    project_type: ProjectType
    payment_mode: ProjectPaymentMode
    proposal_amount: Decimal
    advance_payment: Decimal
    paid_amount: Decimal
    loan_amount: Decimal
    balance: Decimal
    total_paid: Decimal
    kwh: float
    current_stage: str
    stage_index: int
    progress: int
    status: ProjectStatus
    start_date: Optional[date] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# =========================
# Payments
# =========================
class PaymentCreate(BaseModel):
    # sign/zero are checked by the service so they map to INVALID_AMOUNT
    amount: Decimal
    payment_date: Optional[date] = None
    payment_mode: PaymentMode = PaymentMode.CASH
    client_token: Optional[str] = Field(default=None, max_length=64)


class PaymentEntryRead(BaseModel):
    id: Optional[str] = None
    kind: Literal["advance", "payment"]
    amount: Decimal
    payment_date: Optional[date] = None
    payment_mode: str
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class ProjectDetailRead(ProjectRead):
    payments: List[PaymentEntryRead]
    permissions: Dict[str, bool]
    stages: List[str]


# =========================
# Views
# =========================
class DashboardProjectRead(ProjectRead):
    duration_days: int
    duration: str


class DashboardRead(BaseModel):
    total_customers: int
    active_projects: int
    completed_projects: int
    total_revenue: Optional[Decimal] = None
    total_kwh: float
    projects: List[DashboardProjectRead]


class StageCount(BaseModel):
    stage: str
    index: int
    count: int


class StageGroup(BaseModel):
    name: str
    total: int
    stages: List[StageCount]


class ReportRead(BaseModel):
    year: int
    years: List[int]
    total_customers: int
    active_projects: int
    completed_projects: int
    total_revenue: Optional[Decimal] = None
    total_kwh: float
    stage_counts: Dict[str, int]
    stage_groups: List[StageGroup]
    monthly_kwh: Dict[str, float]


class FinanceProjectRow(BaseModel):
    id: str
    customer_name: str
    status: str
    current_stage: str
    proposal_amount: Decimal
    advance_payment: Decimal
    paid_amount: Decimal
    payments_recorded: Decimal
    loan_amount: Decimal
    balance: Decimal


class FinanceRead(BaseModel):
    totals: Dict[str, Decimal]
    by_mode: Dict[str, Decimal]
    projects: List[FinanceProjectRow]


# =========================
# Service tickets
# =========================
class ServiceTicketCreate(BaseModel):
    customer_name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    description: str = Field(min_length=1)


class ServiceTicketStatusUpdate(BaseModel):
    status: TicketStatus


class ServiceTicketRead(BaseModel):
    id: uuid.UUID
    customer_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    description: str
    status: TicketStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class CustomerRead(BaseModel):
    customer_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
