"""
Task endpoints — the follow / like / install tasks users complete before
withdrawing.
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
from invest_admin.schemas.stats import TaskStats
from invest_admin.schemas.task import Task, TaskCreate, TaskUpdate
from invest_admin.services import aggregation
from invest_admin.services.filters import TASK_FILTER
from invest_admin.services.platform_client import PlatformClient
from invest_admin.services.session_service import AdminSession
from invest_admin.services.views import ListParams, ensure_loaded, list_view

router = APIRouter()


@router.get("", response_model=ListPage[Task])
async def list_tasks(
    params: ListParams = Depends(list_params),
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "tasks")
    return await list_view(store, lambda: client.list_tasks(session.token), TASK_FILTER, params)


@router.get("/stats", response_model=TaskStats)
async def get_task_stats(
    refresh: bool = True,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "tasks")
    error = await ensure_loaded(store, lambda: client.list_tasks(session.token), refresh)
    stats = aggregation.task_stats(store.items)
    stats.error = error
    return stats


@router.post("", response_model=MutationResult, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "tasks")
    outcome = await store.mutate(
        lambda: client.create_task(session.token, to_wire(payload)),
        store.prepend,
        success_message="Task created successfully",
    )
    return outcome_response(outcome)


@router.put("/{task_id}", response_model=MutationResult)
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "tasks")

    def apply(updated: Task):
        if updated.id and store.replace(updated):
            return updated
        return store.patch(task_id, **payload.model_dump(exclude_unset=True))

    outcome = await store.mutate(
        lambda: client.update_task(session.token, task_id, to_wire(payload, partial=True)),
        apply,
        success_message="Task updated successfully",
    )
    return outcome_response(outcome)


@router.delete("/{task_id}", response_model=MutationResult)
async def delete_task(
    task_id: int,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "tasks")
    outcome = await store.mutate(
        lambda: client.delete_task(session.token, task_id),
        lambda _: store.remove(task_id),
        success_message="Task deleted successfully",
    )
    return outcome_response(outcome)
