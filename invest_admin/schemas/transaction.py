"""
Pydantic schemas for ledger transactions.
"""

import enum
from decimal import Decimal

from pydantic import Field

from invest_admin.schemas.common import PlatformModel, UTCDateTime


class TransactionType(str, enum.Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    BONUS = "bonus"
    REFERRAL_BONUS = "referral_bonus"
    PLAN_PURCHASE = "plan_purchase"
    REFERRAL_PROFIT = "referral_profit"


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"


class Transaction(PlatformModel):
    """A balance movement recorded by the platform."""
    id: int = 0
    user_id: int | None = None
    amount: Decimal = Decimal("0")
    type: TransactionType | str = Field(TransactionType.DEPOSIT, union_mode="left_to_right")
    status: TransactionStatus | str = Field(
        TransactionStatus.PENDING, union_mode="left_to_right"
    )
    reference_id: str | None = None
    description: str | None = None
    created_at: UTCDateTime = None
