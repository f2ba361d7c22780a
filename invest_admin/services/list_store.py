"""
Per-session list state with stale-response protection and optimistic patches.

Each admin session owns one ListStore per entity kind. A store holds the
full list last fetched from the platform API; filtered and aggregated views
are always derived from it.

Fetch ordering:
  - ``begin_fetch`` hands out a generation number
  - ``complete_fetch`` applies a result only if its generation is still the
    newest; responses from superseded fetches are dropped
  - a successful mutation also advances the generation, so a fetch that was
    already in flight cannot overwrite the patched item

Mutations run the platform call first and touch local state only after it
succeeds; on PlatformAPIError the store is left exactly as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from invest_admin.services.filters import field_value
from invest_admin.services.platform_client import PlatformAPIError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class MutationOutcome:
    """Result of a store mutation, ready to report back to the operator."""
    success: bool
    message: str = ""
    item: Any = None
    status_code: int | None = None


def _with_fields(item: Any, fields: dict[str, Any]) -> Any:
    if isinstance(item, BaseModel):
        return item.model_copy(update=fields)
    if isinstance(item, Mapping):
        return {**item, **fields}
    raise TypeError(f"Cannot patch item of type {type(item).__name__}")


class ListStore(Generic[T]):
    """Full list of one entity kind for one session."""

    def __init__(self, kind: str):
        self.kind = kind
        self._items: list[T] = []
        self._generation = 0
        self.loaded = False
        self.last_error: str | None = None

    @property
    def items(self) -> list[T]:
        return list(self._items)

    @property
    def generation(self) -> int:
        return self._generation

    # --- Fetching ---

    def begin_fetch(self) -> int:
        self._generation += 1
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def complete_fetch(self, generation: int, items: Iterable[T]) -> bool:
        """Apply a fetch result. Returns False if the result was stale."""
        if not self.is_current(generation):
            logger.debug(
                "Discarding stale %s response (generation %d, current %d)",
                self.kind, generation, self._generation,
            )
            return False
        self._items = list(items)
        self.loaded = True
        self.last_error = None
        return True

    def fail_fetch(self, generation: int, message: str) -> bool:
        if not self.is_current(generation):
            return False
        self.last_error = message
        return True

    async def refresh(self, fetch: Callable[[], Awaitable[Iterable[T]]]) -> str | None:
        """
        Run ``fetch`` under a new generation.

        Returns the error message when the fetch failed, else None. On
        failure the previously loaded items stay in place.
        """
        generation = self.begin_fetch()
        try:
            items = await fetch()
        except PlatformAPIError as exc:
            self.fail_fetch(generation, exc.message)
            return exc.message
        self.complete_fetch(generation, items)
        return None

    # --- Local edits ---

    def _index(self, item_id: Any) -> int | None:
        for index, item in enumerate(self._items):
            if field_value(item, "id") == item_id:
                return index
        return None

    def get(self, item_id: Any) -> T | None:
        index = self._index(item_id)
        return None if index is None else self._items[index]

    def patch(self, item_id: Any, **fields: Any) -> T | None:
        """Replace the item with ``item_id`` by a copy carrying ``fields``."""
        index = self._index(item_id)
        if index is None:
            return None
        updated = _with_fields(self._items[index], fields)
        self._items[index] = updated
        return updated

    def replace(self, item: T) -> bool:
        index = self._index(field_value(item, "id"))
        if index is None:
            return False
        self._items[index] = item
        return True

    def prepend(self, item: T) -> T:
        self._items.insert(0, item)
        return item

    def remove(self, item_id: Any) -> bool:
        index = self._index(item_id)
        if index is None:
            return False
        del self._items[index]
        return True

    # --- Mutations ---

    async def mutate(
        self,
        call: Callable[[], Awaitable[R]],
        on_success: Callable[[R], Any] | None = None,
        *,
        success_message: str = "",
    ) -> MutationOutcome:
        """
        Await the platform ``call``; on success apply ``on_success`` to local
        state and invalidate in-flight fetches.
        """
        try:
            result = await call()
        except PlatformAPIError as exc:
            logger.warning("%s mutation failed: %s", self.kind, exc.message)
            return MutationOutcome(
                success=False, message=exc.message, status_code=exc.status_code
            )

        item = on_success(result) if on_success is not None else None
        self._generation += 1

        message = success_message
        if isinstance(result, Mapping) and result.get("message"):
            message = str(result["message"])
        return MutationOutcome(success=True, message=message, item=item)


class StoreRegistry:
    """ListStores keyed by session id, then entity kind."""

    def __init__(self):
        self._stores: dict[str, dict[str, ListStore]] = {}

    def get(self, session_id: str, kind: str) -> ListStore:
        per_session = self._stores.setdefault(session_id, {})
        store = per_session.get(kind)
        if store is None:
            store = per_session[kind] = ListStore(kind)
        return store

    def has_session(self, session_id: str) -> bool:
        return session_id in self._stores

    def drop(self, session_id: str) -> None:
        self._stores.pop(session_id, None)


store_registry = StoreRegistry()
