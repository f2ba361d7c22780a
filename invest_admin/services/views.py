"""
Derived list views — refresh a store, then filter, sort and page it.

Read views never raise: a failed refresh is reported through ``error`` and
the last loaded content (possibly empty) is served instead.
"""

import asyncio
import enum
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any

from invest_admin.schemas.common import ListPage
from invest_admin.services.filters import (
    FilterSpec,
    ListFilter,
    apply_filter,
    paginate,
    sort_by_date,
)
from invest_admin.services.list_store import ListStore


class SortOrder(str, enum.Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    NONE = "none"


@dataclass(frozen=True)
class ListParams:
    """Query parameters shared by every list endpoint."""
    filter: ListFilter
    page: int = 1
    page_size: int = 10
    sort: SortOrder = SortOrder.NEWEST
    refresh: bool = True


async def ensure_loaded(
    store: ListStore,
    fetch: Callable[[], Awaitable[Iterable[Any]]],
    refresh: bool = True,
) -> str | None:
    """Refresh ``store`` when asked to (or when it was never loaded)."""
    if refresh or not store.loaded:
        return await store.refresh(fetch)
    return None


async def load_all(
    loads: list[tuple[ListStore, Callable[[], Awaitable[Iterable[Any]]]]],
    refresh: bool = True,
) -> str | None:
    """Refresh several stores concurrently; return the first error, if any."""
    errors = await asyncio.gather(
        *(ensure_loaded(store, fetch, refresh) for store, fetch in loads)
    )
    return next((error for error in errors if error), None)


def page_of(items: list, spec: FilterSpec, params: ListParams, error: str | None = None) -> ListPage:
    filtered = apply_filter(items, spec, params.filter)
    if spec.date_field and params.sort is not SortOrder.NONE:
        filtered = sort_by_date(
            filtered, spec.date_field, newest_first=params.sort is SortOrder.NEWEST
        )

    window = paginate(len(filtered), params.page, params.page_size)
    return ListPage(
        items=window.slice(filtered),
        total=window.total,
        page=window.page,
        page_size=window.page_size,
        total_pages=window.total_pages,
        start_item=window.start_item,
        end_item=window.end_item,
        has_more=window.has_more,
        error=error,
    )


async def list_view(
    store: ListStore,
    fetch: Callable[[], Awaitable[Iterable[Any]]],
    spec: FilterSpec,
    params: ListParams,
) -> ListPage:
    error = await ensure_loaded(store, fetch, params.refresh)
    return page_of(store.items, spec, params, error)
