"""
Deposit payment endpoints — list, pending queue, stats, detail and manual
approve/reject.
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
from invest_admin.schemas.common import ListPage, MutationResult, RejectRequest
from invest_admin.schemas.payment import Payment, PaymentStatus
from invest_admin.schemas.stats import PaymentStats
from invest_admin.services import aggregation
from invest_admin.services.filters import PAYMENT_FILTER
from invest_admin.services.platform_client import PlatformAPIError, PlatformClient
from invest_admin.services.session_service import AdminSession
from invest_admin.services.views import ListParams, ensure_loaded, list_view

router = APIRouter()


@router.get("", response_model=ListPage[Payment])
async def list_payments(
    params: ListParams = Depends(list_params),
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "payments")
    return await list_view(
        store, lambda: client.list_payments(session.token), PAYMENT_FILTER, params
    )


@router.get("/pending", response_model=ListPage[Payment])
async def list_pending_payments(
    params: ListParams = Depends(list_params),
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    """Manual payments waiting for an operator decision."""
    store = session_store(session, "payments:pending")
    return await list_view(
        store, lambda: client.list_pending_payments(session.token), PAYMENT_FILTER, params
    )


@router.get("/stats", response_model=PaymentStats)
async def get_payment_stats(
    refresh: bool = True,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "payments")
    error = await ensure_loaded(store, lambda: client.list_payments(session.token), refresh)
    stats = aggregation.payment_stats(store.items)
    stats.error = error
    return stats


@router.get("/{payment_id}", response_model=Payment)
async def get_payment(
    payment_id: int,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    try:
        return await client.get_payment(session.token, payment_id)
    except PlatformAPIError as exc:
        raise upstream_error(exc.message, exc.status_code)


def _settle(session: AdminSession, payment_id: int, new_status: PaymentStatus):
    # A decided payment leaves the pending queue and changes status in the full list.
    def apply(_result):
        session_store(session, "payments:pending").remove(payment_id)
        return session_store(session, "payments").patch(payment_id, status=new_status)
    return apply


@router.put("/{payment_id}/approve", response_model=MutationResult)
async def approve_payment(
    payment_id: int,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "payments")
    outcome = await store.mutate(
        lambda: client.approve_payment(session.token, payment_id),
        _settle(session, payment_id, PaymentStatus.COMPLETED),
        success_message="Payment approved successfully",
    )
    return outcome_response(outcome)


@router.put("/{payment_id}/reject", response_model=MutationResult)
async def reject_payment(
    payment_id: int,
    payload: RejectRequest,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "payments")
    outcome = await store.mutate(
        lambda: client.reject_payment(session.token, payment_id, payload.reason),
        _settle(session, payment_id, PaymentStatus.FAILED),
        success_message="Payment rejected successfully",
    )
    return outcome_response(outcome)
