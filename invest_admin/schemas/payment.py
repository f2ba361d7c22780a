"""
Pydantic schemas for deposit payments collected through gateways.
"""

import enum
from decimal import Decimal

from pydantic import Field

from invest_admin.schemas.common import PlatformModel, UTCDateTime


class PaymentGateway(str, enum.Enum):
    COINGATE = "coingate"
    UDDOKTAPAY = "uddoktapay"
    MANUAL = "manual"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Currency(str, enum.Enum):
    USD = "USD"
    BDT = "BDT"


class Payment(PlatformModel):
    """A deposit attempt through one of the payment gateways."""
    id: int = 0
    transaction_id: int | None = None
    user_id: int | None = None
    gateway: PaymentGateway | str = Field(
        PaymentGateway.MANUAL, union_mode="left_to_right"
    )
    gateway_reference: str | None = None
    currency: Currency | str = Field(Currency.USD, union_mode="left_to_right")
    amount: Decimal = Decimal("0")
    status: PaymentStatus | str = Field(PaymentStatus.PENDING, union_mode="left_to_right")
    created_at: UTCDateTime = None
