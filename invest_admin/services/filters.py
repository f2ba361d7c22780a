"""
List filtering, search, date sorting and page windows.

Pure functions over in-memory lists; nothing here can fail or touch I/O.

Each entity kind has a FilterSpec describing how its "status" and "type"
selectors and its free-text search map onto item fields:

  - status/type selectors use exact matching on the key's string value
  - search is a case-insensitive substring match over ``search_fields``
    (numeric ids and amounts are stringified first)
  - ``"all"``, ``""`` and ``None`` disable a selector

Filtering never reorders: the result is always a subsequence of the input.
"""

import enum
import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, TypeVar

ALL = "all"

T = TypeVar("T")


def field_value(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def as_text(value: Any) -> str:
    """Stringify a field value the way it is displayed and searched."""
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def by_field(name: str) -> Callable[[Any], str]:
    """Selector key reading one field."""
    return lambda item: as_text(field_value(item, name))


def by_flag(name: str, when_true: str, when_false: str) -> Callable[[Any], str]:
    """Selector key mapping a boolean field onto two labels."""
    return lambda item: when_true if field_value(item, name) else when_false


def is_active(value: str | None) -> bool:
    return value is not None and value != "" and value != ALL


# ---------------------------------------------------------------------------
# Filter state and per-entity specs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ListFilter:
    """Current filter state of one list view."""
    status: str | None = None
    type: str | None = None
    search: str | None = None

    @property
    def is_noop(self) -> bool:
        return not (is_active(self.status) or is_active(self.type) or is_active(self.search))


@dataclass(frozen=True)
class FilterSpec:
    """How a ListFilter applies to one entity kind."""
    status_key: Callable[[Any], str] | None = None
    type_key: Callable[[Any], str] | None = None
    search_fields: tuple[str, ...] = field(default_factory=tuple)
    date_field: str | None = "created_at"


TRANSACTION_FILTER = FilterSpec(
    status_key=by_field("status"),
    type_key=by_field("type"),
    search_fields=("id", "description"),
)

WITHDRAWAL_FILTER = FilterSpec(
    status_key=by_field("status"),
    type_key=by_field("payment_method"),
    search_fields=("id", "amount", "payment_method", "user_id"),
)

KYC_FILTER = FilterSpec(
    status_key=by_field("status"),
    type_key=by_field("document_type"),
    search_fields=("id", "user_id"),
)

PAYMENT_FILTER = FilterSpec(
    status_key=by_field("status"),
    type_key=by_field("gateway"),
    search_fields=("id", "amount", "gateway_reference"),
)

NOTIFICATION_FILTER = FilterSpec(
    status_key=by_flag("is_read", "read", "unread"),
    type_key=by_field("type"),
    search_fields=("id", "title", "message", "user_id"),
)

USER_FILTER = FilterSpec(
    status_key=by_flag("is_blocked", "blocked", "active"),
    type_key=by_flag("is_kyc_verified", "verified", "unverified"),
    search_fields=("id", "name", "email", "phone"),
)

TASK_FILTER = FilterSpec(
    status_key=by_flag("is_mandatory", "mandatory", "optional"),
    type_key=by_field("task_type"),
    search_fields=("id", "name", "description"),
)

PLAN_FILTER = FilterSpec(
    status_key=by_flag("is_default", "default", "custom"),
    search_fields=("id", "name"),
)

SETTING_FILTER = FilterSpec(
    type_key=by_field("group"),
    search_fields=("key", "display_name", "description"),
    date_field="updated_at",
)


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


def matches(item: Any, spec: FilterSpec, flt: ListFilter) -> bool:
    """True when ``item`` satisfies every active predicate of ``flt``."""
    if is_active(flt.status) and spec.status_key is not None:
        if spec.status_key(item) != flt.status:
            return False

    if is_active(flt.type) and spec.type_key is not None:
        if spec.type_key(item) != flt.type:
            return False

    if is_active(flt.search):
        query = flt.search.strip().lower()
        if query and not any(
            query in as_text(field_value(item, name)).lower() for name in spec.search_fields
        ):
            return False

    return True


def apply_filter(items: Iterable[T], spec: FilterSpec, flt: ListFilter) -> list[T]:
    """Return the items matching ``flt``, in their original order."""
    if flt.is_noop:
        return list(items)
    return [item for item in items if matches(item, spec, flt)]


def sort_by_date(items: Iterable[T], date_field: str = "created_at", newest_first: bool = True) -> list[T]:
    """
    Stable sort on a datetime field. Items without a timestamp go last.
    """
    floor = datetime.min.replace(tzinfo=timezone.utc)

    def _key(item: Any) -> tuple[bool, datetime]:
        value = field_value(item, date_field)
        if not isinstance(value, datetime):
            return (False, floor)
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (True, value)

    ordered = sorted(items, key=_key, reverse=newest_first)
    if newest_first:
        return ordered
    # Ascending order still keeps undated items at the end.
    dated = [i for i in ordered if isinstance(field_value(i, date_field), datetime)]
    undated = [i for i in ordered if not isinstance(field_value(i, date_field), datetime)]
    return dated + undated


def most_recent(items: Iterable[T], limit: int, date_field: str = "created_at") -> list[T]:
    return sort_by_date(items, date_field)[:limit]


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PageWindow:
    """Slice bounds for one page over a list of ``total`` items (1-based)."""
    page: int
    page_size: int
    total: int
    total_pages: int
    start_item: int
    end_item: int

    @property
    def has_more(self) -> bool:
        return self.page < self.total_pages

    def slice(self, items: Sequence[T]) -> list[T]:
        if self.total == 0:
            return []
        return list(items[self.start_item - 1:self.end_item])


def paginate(total: int, page: int = 1, page_size: int = 10) -> PageWindow:
    """
    Compute the page window, clamping ``page`` into ``[1, total_pages]``.
    """
    page_size = max(1, page_size)
    total = max(0, total)
    total_pages = math.ceil(total / page_size)

    page = min(max(1, page), total_pages) if total_pages else 1

    start_item = 0 if total == 0 else (page - 1) * page_size + 1
    end_item = min(start_item + page_size - 1, total) if total else 0

    return PageWindow(
        page=page,
        page_size=page_size,
        total=total,
        total_pages=total_pages,
        start_item=start_item,
        end_item=end_item,
    )
