"""
Pydantic schemas for withdrawal requests and their admin actions.
"""

import enum
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from invest_admin.schemas.common import PlatformModel, UTCDateTime


class WithdrawalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Withdrawal(PlatformModel):
    """A user's request to withdraw balance."""
    id: int = 0
    transaction_id: int | None = None
    user_id: int = 0
    amount: Decimal = Decimal("0")
    payment_method: str = ""
    payment_details: dict[str, Any] = Field(default_factory=dict)
    status: WithdrawalStatus | str = Field(
        WithdrawalStatus.PENDING, union_mode="left_to_right"
    )
    admin_note: str | None = None
    tasks_completed: bool = False
    created_at: UTCDateTime = None
    updated_at: UTCDateTime = None


class ApproveWithdrawalRequest(BaseModel):
    """Body for ``PUT /withdrawals/{id}/approve``."""
    admin_note: str = Field("", max_length=500)
