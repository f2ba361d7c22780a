"""
Withdrawal review endpoints.

The list is fetched in full; ``tab`` (or ``status``) selects the
pending/approved/rejected view and ``all`` shows everything.
Approve and reject patch only the acted-on row once the platform confirms.
"""

import dataclasses

from fastapi import APIRouter, Depends

from invest_admin.api.deps import (
    get_current_session,
    get_platform,
    list_params,
    outcome_response,
    session_store,
)
from invest_admin.schemas.common import ListPage, MutationResult, RejectRequest
from invest_admin.schemas.stats import WithdrawalStats
from invest_admin.schemas.withdrawal import (
    ApproveWithdrawalRequest,
    Withdrawal,
    WithdrawalStatus,
)
from invest_admin.services import aggregation
from invest_admin.services.filters import WITHDRAWAL_FILTER
from invest_admin.services.platform_client import PlatformClient
from invest_admin.services.session_service import AdminSession
from invest_admin.services.views import ListParams, ensure_loaded, list_view

router = APIRouter()


@router.get("", response_model=ListPage[Withdrawal])
async def list_withdrawals(
    tab: str | None = None,
    params: ListParams = Depends(list_params),
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    if tab:
        params = dataclasses.replace(
            params, filter=dataclasses.replace(params.filter, status=tab)
        )
    store = session_store(session, "withdrawals")
    return await list_view(
        store, lambda: client.list_withdrawals(session.token), WITHDRAWAL_FILTER, params
    )


@router.get("/stats", response_model=WithdrawalStats)
async def get_withdrawal_stats(
    refresh: bool = True,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "withdrawals")
    error = await ensure_loaded(store, lambda: client.list_withdrawals(session.token), refresh)
    stats = aggregation.withdrawal_stats(store.items)
    stats.error = error
    return stats


@router.put("/{withdrawal_id}/approve", response_model=MutationResult)
async def approve_withdrawal(
    withdrawal_id: int,
    payload: ApproveWithdrawalRequest | None = None,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    admin_note = payload.admin_note if payload else ""
    store = session_store(session, "withdrawals")
    outcome = await store.mutate(
        lambda: client.approve_withdrawal(session.token, withdrawal_id, admin_note),
        lambda _: store.patch(
            withdrawal_id,
            status=WithdrawalStatus.APPROVED,
            admin_note=admin_note or None,
        ),
        success_message="Withdrawal approved successfully",
    )
    return outcome_response(outcome)


@router.put("/{withdrawal_id}/reject", response_model=MutationResult)
async def reject_withdrawal(
    withdrawal_id: int,
    payload: RejectRequest,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "withdrawals")
    outcome = await store.mutate(
        lambda: client.reject_withdrawal(session.token, withdrawal_id, payload.reason),
        lambda _: store.patch(
            withdrawal_id,
            status=WithdrawalStatus.REJECTED,
            admin_note=payload.reason,
        ),
        success_message="Withdrawal rejected successfully",
    )
    return outcome_response(outcome)
