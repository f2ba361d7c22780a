"""
Pydantic schemas for platform settings (key/value rows grouped for display).
"""

import enum

from pydantic import BaseModel, Field

from invest_admin.schemas.common import PlatformModel, UTCDateTime


class SettingType(str, enum.Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


class Setting(PlatformModel):
    id: int = 0
    key: str = ""
    value: str = ""
    type: SettingType | str = Field(SettingType.STRING, union_mode="left_to_right")
    display_name: str = ""
    description: str = ""
    group: str = ""
    updated_at: UTCDateTime = None


class SettingCreate(BaseModel):
    key: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z][a-z0-9_]*$")
    value: str
    type: SettingType = SettingType.STRING
    display_name: str = Field("", max_length=200)
    description: str = Field("", max_length=1000)
    group: str = Field("general", max_length=50)


class SettingUpdate(BaseModel):
    value: str | None = None
    display_name: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=1000)
    group: str | None = Field(None, max_length=50)
