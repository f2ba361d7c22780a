"""
Shared schema building blocks — base model, timestamp type, list envelopes.

Every platform DTO inherits ``PlatformModel`` so unknown fields sent by the
platform API are dropped and every field carries an explicit default.
"""

import enum
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field

# Bumped whenever a list envelope changes shape.
SCHEMA_VERSION = 1


def _blank_to_none(value: Any) -> Any:
    if value == "" or value == "0001-01-01T00:00:00Z":
        return None
    return value


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Platform timestamps, normalised to aware UTC datetimes.
UTCDateTime = Annotated[
    datetime | None,
    BeforeValidator(_blank_to_none),
    AfterValidator(_as_utc),
]


class PlatformModel(BaseModel):
    """Base class for DTOs mirrored from the platform API."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


T = TypeVar("T")


class ListPage(BaseModel, Generic[T]):
    """One page of a filtered list view."""
    items: list[T] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 10
    total_pages: int = 0
    start_item: int = 0
    end_item: int = 0
    has_more: bool = False
    schema_version: int = SCHEMA_VERSION
    error: str | None = None


class MutationResult(BaseModel):
    """Outcome of an approve/reject/block/create/delete action."""
    success: bool = True
    message: str = ""
    item: dict | None = None


class RejectRequest(BaseModel):
    """Body for reject actions (withdrawals, KYC, payments)."""
    reason: str = Field(..., min_length=1, max_length=500)


def to_wire(model: BaseModel, *, partial: bool = False) -> dict[str, Any]:
    """
    Request body for the platform API. Decimals travel as JSON numbers and
    enums as their values; ``partial`` keeps only fields the caller set.
    """
    data = model.model_dump(exclude_unset=partial)
    wire: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, Decimal):
            value = float(value)
        elif isinstance(value, enum.Enum):
            value = value.value
        wire[key] = value
    return wire
