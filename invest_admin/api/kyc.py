"""
KYC review endpoints — document queue, stats, detail, approve and reject.
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
from invest_admin.config import settings
from invest_admin.schemas.common import ListPage, MutationResult, RejectRequest
from invest_admin.schemas.kyc import KYCDocument, KYCStatus
from invest_admin.schemas.stats import KYCStats
from invest_admin.services import aggregation
from invest_admin.services.filters import KYC_FILTER
from invest_admin.services.platform_client import PlatformAPIError, PlatformClient
from invest_admin.services.session_service import AdminSession
from invest_admin.services.views import ListParams, ensure_loaded, list_view

router = APIRouter()


@router.get("", response_model=ListPage[KYCDocument])
async def list_kyc_documents(
    params: ListParams = Depends(list_params),
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "kyc")
    return await list_view(store, lambda: client.list_kyc(session.token), KYC_FILTER, params)


@router.get("/stats", response_model=KYCStats)
async def get_kyc_stats(
    refresh: bool = True,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    """Counts per status plus the most recent submissions."""
    store = session_store(session, "kyc")
    error = await ensure_loaded(store, lambda: client.list_kyc(session.token), refresh)
    stats = aggregation.kyc_stats(store.items, recent_limit=settings.RECENT_ITEMS_LIMIT)
    stats.error = error
    return stats


@router.get("/{kyc_id}", response_model=KYCDocument)
async def get_kyc_document(
    kyc_id: int,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    try:
        return await client.get_kyc(session.token, kyc_id)
    except PlatformAPIError as exc:
        raise upstream_error(exc.message, exc.status_code)


@router.put("/{kyc_id}/approve", response_model=MutationResult)
async def approve_kyc(
    kyc_id: int,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "kyc")
    outcome = await store.mutate(
        lambda: client.approve_kyc(session.token, kyc_id),
        lambda _: store.patch(kyc_id, status=KYCStatus.APPROVED),
        success_message="KYC approved successfully",
    )
    return outcome_response(outcome)


@router.put("/{kyc_id}/reject", response_model=MutationResult)
async def reject_kyc(
    kyc_id: int,
    payload: RejectRequest,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "kyc")
    outcome = await store.mutate(
        lambda: client.reject_kyc(session.token, kyc_id, payload.reason),
        lambda _: store.patch(kyc_id, status=KYCStatus.REJECTED, admin_note=payload.reason),
        success_message="KYC rejected successfully",
    )
    return outcome_response(outcome)
