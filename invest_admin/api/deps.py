"""
Reusable FastAPI dependencies for admin sessions and list views.

Dependencies:
  - get_session_service  — SessionService bound to the shared Redis client
  - get_current_session  — resolves the caller's AdminSession (401 if none)
  - get_platform         — the shared PlatformClient
  - list_params          — filter/sort/page query parameters
"""

from fastapi import Cookie, Depends, Header, HTTPException, Query, status
from pydantic import BaseModel

from invest_admin.config import settings
from invest_admin.core.security import parse_bearer
from invest_admin.redis_client import get_redis
from invest_admin.schemas.common import MutationResult
from invest_admin.services.filters import ListFilter
from invest_admin.services.list_store import ListStore, MutationOutcome, store_registry
from invest_admin.services.platform_client import PlatformClient, get_platform_client
from invest_admin.services.session_service import AdminSession, SessionService
from invest_admin.services.views import ListParams, SortOrder


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


def get_platform() -> PlatformClient:
    return get_platform_client()


async def get_session_service(
    redis=Depends(get_redis),
    client: PlatformClient = Depends(get_platform),
) -> SessionService:
    return SessionService(redis, client)


async def get_current_session(
    authorization: str | None = Header(None, description="Bearer <session_id>"),
    session_cookie: str | None = Cookie(None, alias=settings.AUTH_COOKIE_NAME),
    service: SessionService = Depends(get_session_service),
) -> AdminSession:
    """
    Resolve the caller's session from the ``Authorization: Bearer`` header,
    falling back to the session cookie.

    Raises 401 when neither is present or the session is unknown/expired.
    """
    session_id = parse_bearer(authorization) or session_cookie
    if not session_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    session = await service.get(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired or invalid",
        )
    return session


def session_store(session: AdminSession, kind: str) -> ListStore:
    return store_registry.get(session.session_id, kind)


# ---------------------------------------------------------------------------
# List views
# ---------------------------------------------------------------------------


def list_params(
    status_filter: str | None = Query(None, alias="status"),
    type_filter: str | None = Query(None, alias="type"),
    search: str | None = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    sort: SortOrder = SortOrder.NEWEST,
    refresh: bool = True,
) -> ListParams:
    return ListParams(
        filter=ListFilter(status=status_filter, type=type_filter, search=search),
        page=page,
        page_size=page_size,
        sort=sort,
        refresh=refresh,
    )


# ---------------------------------------------------------------------------
# Mutation responses
# ---------------------------------------------------------------------------


def upstream_error(message: str, status_code: int | None = None) -> HTTPException:
    """Upstream 4xx codes are passed through; anything else is a 502."""
    if status_code is None or not 400 <= status_code < 500:
        status_code = status.HTTP_502_BAD_GATEWAY
    return HTTPException(status_code=status_code, detail=message)


def outcome_response(outcome: MutationOutcome) -> MutationResult:
    """Turn a store mutation outcome into the HTTP response."""
    if not outcome.success:
        raise upstream_error(outcome.message, outcome.status_code)

    item = outcome.item
    if isinstance(item, BaseModel):
        item = item.model_dump(mode="json")
    elif not isinstance(item, dict):
        item = None
    return MutationResult(success=True, message=outcome.message, item=item)
