"""
Pydantic schemas for user notifications and admin broadcasts.
"""

import enum

from pydantic import BaseModel, Field

from invest_admin.schemas.common import PlatformModel, UTCDateTime


class NotificationType(str, enum.Enum):
    WITHDRAWAL = "withdrawal"
    DEPOSIT = "deposit"
    BONUS = "bonus"
    SYSTEM = "system"


class Notification(PlatformModel):
    id: int = 0
    user_id: int | None = None
    title: str = ""
    message: str = ""
    type: NotificationType | str = Field(NotificationType.SYSTEM, union_mode="left_to_right")
    is_read: bool = False
    created_at: UTCDateTime = None


class NotificationSend(BaseModel):
    """Schema for sending a notification. No ``user_id`` means everyone."""
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)
    user_id: int | None = None
