"""
Pydantic schemas for user tasks (follow / like / install).
"""

import enum

from pydantic import BaseModel, Field

from invest_admin.schemas.common import PlatformModel, UTCDateTime


class TaskType(str, enum.Enum):
    FOLLOW = "follow"
    LIKE = "like"
    INSTALL = "install"


class Task(PlatformModel):
    id: int = 0
    name: str = ""
    description: str = ""
    task_type: TaskType | str = Field(TaskType.FOLLOW, union_mode="left_to_right")
    task_url: str | None = None
    is_mandatory: bool = False
    created_at: UTCDateTime = None


class TaskCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=2000)
    task_type: TaskType
    task_url: str | None = None
    is_mandatory: bool = False


class TaskUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    task_type: TaskType | None = None
    task_url: str | None = None
    is_mandatory: bool | None = None
