"""
Pydantic schemas for derived dashboard and per-page statistics.

Every model is fully defaulted so an empty instance doubles as the
placeholder shown when the platform API cannot be reached.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from invest_admin.schemas.user import User
from invest_admin.schemas.withdrawal import Withdrawal
from invest_admin.schemas.kyc import KYCDocument


class NamedValue(BaseModel):
    """A labelled count, e.g. one slice of the plan distribution chart."""
    name: str
    value: int = 0


class BucketAmount(BaseModel):
    """One bucket of a time-series chart."""
    name: str
    amount: Decimal = Decimal("0.00")


class ActivityItem(BaseModel):
    id: str
    type: str
    user_name: str = ""
    user_email: str = ""
    avatar: str | None = None
    timestamp: datetime | None = None
    details: str = ""
    amount: Decimal | None = None


class DashboardStats(BaseModel):
    total_users: int = 0
    active_users: int = 0
    total_balance: Decimal = Decimal("0.00")
    total_deposits: Decimal = Decimal("0.00")
    total_withdrawals: Decimal = Decimal("0.00")
    pending_withdrawals: int = 0
    pending_kyc: int = 0
    kyc_approval_rate: Decimal = Decimal("0.00")
    plan_distribution: list[NamedValue] = Field(default_factory=list)
    recent_users: list[User] = Field(default_factory=list)
    recent_withdrawals: list[Withdrawal] = Field(default_factory=list)
    error: str | None = None


class UserStats(BaseModel):
    total: int = 0
    active: int = 0
    blocked: int = 0
    kyc_verified: int = 0
    error: str | None = None


class KYCStats(BaseModel):
    pending_count: int = 0
    approved_count: int = 0
    rejected_count: int = 0
    recent_submissions: list[KYCDocument] = Field(default_factory=list)
    error: str | None = None


class WithdrawalStats(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    pending_amount: Decimal = Decimal("0.00")
    approved_amount: Decimal = Decimal("0.00")
    error: str | None = None


class PaymentStats(BaseModel):
    total_payments: int = 0
    total_pending: int = 0
    total_completed: int = 0
    total_failed: int = 0
    total_manual: int = 0
    total_amount: Decimal = Decimal("0.00")
    error: str | None = None


class TaskStats(BaseModel):
    total_tasks: int = 0
    mandatory_tasks: int = 0
    by_type: dict[str, int] = Field(default_factory=dict)
    error: str | None = None


class PlanStats(BaseModel):
    total_plans: int = 0
    free_plans: int = 0
    paid_plans: int = 0
    cheapest_paid: str | None = None
    cheapest_paid_price: Decimal = Decimal("0.00")
    most_expensive: str | None = None
    most_expensive_price: Decimal = Decimal("0.00")
    error: str | None = None


class NotificationStats(BaseModel):
    total: int = 0
    read: int = 0
    unread: int = 0
    by_type: dict[str, int] = Field(default_factory=dict)
    error: str | None = None


class TransactionStats(BaseModel):
    total: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    by_type: dict[str, int] = Field(default_factory=dict)
    completed_deposits: Decimal = Decimal("0.00")
    completed_withdrawals: Decimal = Decimal("0.00")
    error: str | None = None


class ActivityFeed(BaseModel):
    items: list[ActivityItem] = Field(default_factory=list)
    error: str | None = None


class TransactionSeries(BaseModel):
    """Chart series for the dashboard transactions panel."""
    type: str | None = None
    status: str | None = None
    period: str = "daily"
    buckets: list[BucketAmount] = Field(default_factory=list)
    error: str | None = None
