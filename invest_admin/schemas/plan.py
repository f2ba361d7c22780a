"""
Pydantic schemas for investment plans.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from invest_admin.schemas.common import PlatformModel, UTCDateTime


class Plan(PlatformModel):
    """Investment plan with its daily limits."""
    id: int = 0
    name: str = ""
    daily_deposit_limit: Decimal = Decimal("0")
    daily_withdrawal_limit: Decimal = Decimal("0")
    daily_profit_limit: Decimal = Decimal("0")
    price: Decimal = Decimal("0")
    is_default: bool = False
    created_at: UTCDateTime = None


class PlanCreate(BaseModel):
    """Schema for creating a plan."""
    name: str = Field(..., min_length=1, max_length=100)
    daily_deposit_limit: Decimal = Field(..., ge=0)
    daily_withdrawal_limit: Decimal = Field(..., ge=0)
    daily_profit_limit: Decimal = Field(..., ge=0)
    price: Decimal = Field(..., ge=0)
    is_default: bool = False


class PlanUpdate(BaseModel):
    """Schema for partial plan updates."""
    name: str | None = Field(None, min_length=1, max_length=100)
    daily_deposit_limit: Decimal | None = Field(None, ge=0)
    daily_withdrawal_limit: Decimal | None = Field(None, ge=0)
    daily_profit_limit: Decimal | None = Field(None, ge=0)
    price: Decimal | None = Field(None, ge=0)
    is_default: bool | None = None
