"""
Dashboard endpoints — headline stats, activity feed and transaction charts.

All three read from the session's list stores. When any underlying fetch
fails the endpoint still answers 200 with placeholder values and ``error``
set, so the console can render its empty state.
"""

import logging

from fastapi import APIRouter, Depends

from invest_admin.api.deps import get_current_session, get_platform, session_store
from invest_admin.config import settings
from invest_admin.schemas.stats import ActivityFeed, DashboardStats, TransactionSeries
from invest_admin.services import aggregation
from invest_admin.services.aggregation import Period
from invest_admin.services.platform_client import PlatformClient
from invest_admin.services.session_service import AdminSession
from invest_admin.services.views import ensure_loaded, load_all

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    refresh: bool = True,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    """
    Main dashboard cards: user and balance totals, completed deposit and
    withdrawal volume, pending queues, KYC approval rate, plan distribution
    and the most recent users and pending withdrawals.
    """
    token = session.token
    users = session_store(session, "users")
    withdrawals = session_store(session, "withdrawals")
    kyc = session_store(session, "kyc")
    plans = session_store(session, "plans")
    transactions = session_store(session, "transactions")

    error = await load_all(
        [
            (users, lambda: client.list_users(token)),
            (withdrawals, lambda: client.list_withdrawals(token)),
            (kyc, lambda: client.list_kyc(token)),
            (plans, lambda: client.list_plans(token)),
            (transactions, lambda: client.list_transactions(token)),
        ],
        refresh,
    )
    if error:
        logger.warning("Dashboard stats unavailable: %s", error)
        return DashboardStats(error=error)

    return aggregation.dashboard_stats(
        users.items,
        withdrawals.items,
        kyc.items,
        plans.items,
        transactions.items,
        recent_limit=settings.RECENT_ITEMS_LIMIT,
    )


@router.get("/activity", response_model=ActivityFeed)
async def get_activity(
    refresh: bool = True,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    """Newest-first feed of joins, withdrawal requests and KYC submissions."""
    token = session.token
    users = session_store(session, "users")
    withdrawals = session_store(session, "withdrawals")
    kyc = session_store(session, "kyc")

    error = await load_all(
        [
            (users, lambda: client.list_users(token)),
            (withdrawals, lambda: client.list_withdrawals(token)),
            (kyc, lambda: client.list_kyc(token)),
        ],
        refresh,
    )
    if error:
        return ActivityFeed(error=error)

    items = aggregation.activity_feed(
        users.items, withdrawals.items, kyc.items, limit=settings.ACTIVITY_FEED_LIMIT
    )
    return ActivityFeed(items=items)


@router.get("/transactions", response_model=TransactionSeries)
async def get_transaction_series(
    type: str | None = None,
    status: str | None = None,
    period: Period = Period.DAILY,
    refresh: bool = True,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    """
    Transaction amounts bucketed by day of the current week, by the last
    four weeks, or by the last six months.
    """
    store = session_store(session, "transactions")
    error = await ensure_loaded(store, lambda: client.list_transactions(session.token), refresh)

    # On failure the last loaded transactions (or none) still give every bucket.
    return TransactionSeries(
        type=type,
        status=status,
        period=period.value,
        buckets=aggregation.bucket_sums(store.items, period, type=type, status=status),
        error=error,
    )
