"""
Investment plan endpoints — list, stats, create, update, delete.
"""

from fastapi import APIRouter, Depends, status

from invest_admin.api.deps import (
    get_current_session,
    get_platform,
    list_params,
    outcome_response,
    session_store,
)
from invest_admin.schemas.common import ListPage, MutationResult, to_wire
from invest_admin.schemas.plan import Plan, PlanCreate, PlanUpdate
from invest_admin.schemas.stats import PlanStats
from invest_admin.services import aggregation
from invest_admin.services.filters import PLAN_FILTER
from invest_admin.services.platform_client import PlatformClient
from invest_admin.services.session_service import AdminSession
from invest_admin.services.views import ListParams, ensure_loaded, list_view

router = APIRouter()


@router.get("", response_model=ListPage[Plan])
async def list_plans(
    params: ListParams = Depends(list_params),
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "plans")
    return await list_view(store, lambda: client.list_plans(session.token), PLAN_FILTER, params)


@router.get("/stats", response_model=PlanStats)
async def get_plan_stats(
    refresh: bool = True,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    """Free vs paid plan counts and the cheapest / most expensive paid plan."""
    store = session_store(session, "plans")
    error = await ensure_loaded(store, lambda: client.list_plans(session.token), refresh)
    stats = aggregation.plan_stats(store.items)
    stats.error = error
    return stats


@router.post("", response_model=MutationResult, status_code=status.HTTP_201_CREATED)
async def create_plan(
    payload: PlanCreate,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "plans")
    outcome = await store.mutate(
        lambda: client.create_plan(session.token, to_wire(payload)),
        store.prepend,
        success_message="Plan created successfully",
    )
    return outcome_response(outcome)


@router.put("/{plan_id}", response_model=MutationResult)
async def update_plan(
    plan_id: int,
    payload: PlanUpdate,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "plans")
    changes = to_wire(payload, partial=True)

    def apply(updated: Plan):
        if updated.id and store.replace(updated):
            return updated
        return store.patch(plan_id, **payload.model_dump(exclude_unset=True))

    outcome = await store.mutate(
        lambda: client.update_plan(session.token, plan_id, changes),
        apply,
        success_message="Plan updated successfully",
    )
    return outcome_response(outcome)


@router.delete("/{plan_id}", response_model=MutationResult)
async def delete_plan(
    plan_id: int,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "plans")
    outcome = await store.mutate(
        lambda: client.delete_plan(session.token, plan_id),
        lambda _: store.remove(plan_id),
        success_message="Plan deleted successfully",
    )
    return outcome_response(outcome)
