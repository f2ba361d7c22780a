"""
Pydantic schemas for platform users as seen by the admin console.
"""

from decimal import Decimal

from pydantic import Field

from invest_admin.schemas.common import PlatformModel, UTCDateTime


class User(PlatformModel):
    """Platform user (investor or admin)."""
    id: int = 0
    name: str = ""
    email: str = ""
    phone: str = ""
    balance: Decimal = Decimal("0")
    referral_code: str = ""
    referred_by: int | None = None
    plan_id: int | None = None
    is_kyc_verified: bool = False
    email_verified: bool = False
    is_admin: bool = False
    is_blocked: bool = False
    biometric_enabled: bool = False
    profile_pic_url: str = ""
    created_at: UTCDateTime = None
    updated_at: UTCDateTime = None


class UserDetail(PlatformModel):
    """``GET /admin/users/{id}`` payload."""
    user: User = Field(default_factory=User)
    devices: list[dict] = []
    referral_count: int = 0
