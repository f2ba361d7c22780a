"""
Platform-wide transaction ledger (read-only).
"""

from fastapi import APIRouter, Depends

from invest_admin.api.deps import get_current_session, get_platform, list_params, session_store
from invest_admin.schemas.common import ListPage
from invest_admin.schemas.stats import TransactionStats
from invest_admin.schemas.transaction import Transaction
from invest_admin.services import aggregation
from invest_admin.services.filters import TRANSACTION_FILTER
from invest_admin.services.platform_client import PlatformClient
from invest_admin.services.session_service import AdminSession
from invest_admin.services.views import ListParams, ensure_loaded, list_view

router = APIRouter()


@router.get("", response_model=ListPage[Transaction])
async def list_transactions(
    params: ListParams = Depends(list_params),
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    """
    Transactions filtered by ``status``, ``type`` and a search over id and
    description, newest first.
    """
    store = session_store(session, "transactions")
    return await list_view(
        store, lambda: client.list_transactions(session.token), TRANSACTION_FILTER, params
    )


@router.get("/stats", response_model=TransactionStats)
async def get_transaction_stats(
    refresh: bool = True,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "transactions")
    error = await ensure_loaded(store, lambda: client.list_transactions(session.token), refresh)
    stats = aggregation.transaction_stats(store.items)
    stats.error = error
    return stats
