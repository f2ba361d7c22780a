"""
User management endpoints — list, stats, detail, block/unblock and a user's
transaction history.
"""

from fastapi import APIRouter, Depends

from invest_admin.api.deps import (
    get_current_session,
    get_platform,
    list_params,
    outcome_response,
    session_store,
    upstream_error,
)
from invest_admin.schemas.common import ListPage, MutationResult
from invest_admin.schemas.stats import UserStats
from invest_admin.schemas.transaction import Transaction
from invest_admin.schemas.user import User, UserDetail
from invest_admin.services import aggregation
from invest_admin.services.filters import TRANSACTION_FILTER, USER_FILTER
from invest_admin.services.platform_client import PlatformAPIError, PlatformClient
from invest_admin.services.session_service import AdminSession
from invest_admin.services.views import ListParams, ensure_loaded, list_view

router = APIRouter()


@router.get("", response_model=ListPage[User])
async def list_users(
    params: ListParams = Depends(list_params),
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    """
    Users filtered by ``status`` (active/blocked), ``type``
    (verified/unverified) and a search over id, name, email and phone.
    """
    store = session_store(session, "users")
    return await list_view(store, lambda: client.list_users(session.token), USER_FILTER, params)


@router.get("/stats", response_model=UserStats)
async def get_user_stats(
    refresh: bool = True,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "users")
    error = await ensure_loaded(store, lambda: client.list_users(session.token), refresh)
    stats = aggregation.user_stats(store.items)
    stats.error = error
    return stats


@router.get("/{user_id}", response_model=UserDetail)
async def get_user(
    user_id: int,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    """Profile, devices and referral count of one user."""
    try:
        return await client.get_user(session.token, user_id)
    except PlatformAPIError as exc:
        raise upstream_error(exc.message, exc.status_code)


@router.get("/{user_id}/transactions", response_model=ListPage[Transaction])
async def list_user_transactions(
    user_id: int,
    params: ListParams = Depends(list_params),
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, f"user_transactions:{user_id}")
    return await list_view(
        store,
        lambda: client.list_user_transactions(session.token, user_id),
        TRANSACTION_FILTER,
        params,
    )


@router.put("/{user_id}/block", response_model=MutationResult)
async def block_user(
    user_id: int,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "users")
    outcome = await store.mutate(
        lambda: client.block_user(session.token, user_id),
        lambda _: store.patch(user_id, is_blocked=True),
        success_message="User blocked successfully",
    )
    return outcome_response(outcome)


@router.put("/{user_id}/unblock", response_model=MutationResult)
async def unblock_user(
    user_id: int,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "users")
    outcome = await store.mutate(
        lambda: client.unblock_user(session.token, user_id),
        lambda _: store.patch(user_id, is_blocked=False),
        success_message="User unblocked successfully",
    )
    return outcome_response(outcome)
