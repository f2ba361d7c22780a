"""
Pydantic schemas for admin login and session responses.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from invest_admin.schemas.user import User


class LoginRequest(BaseModel):
    """Admin credentials forwarded to the platform API."""
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)
    device_id: str | None = None


class SessionResponse(BaseModel):
    """Returned after login and from ``GET /auth/me``."""
    session_id: str
    token_type: str = "bearer"
    expires_at: datetime
    user: User
