"""
Platform settings endpoints — grouped key/value configuration rows.

``group`` (or ``type``) on the list endpoint selects the settings group.
"""

import dataclasses

from fastapi import APIRouter, Depends, status

from invest_admin.api.deps import (
    get_current_session,
    get_platform,
    list_params,
    outcome_response,
    session_store,
)
from invest_admin.schemas.common import ListPage, MutationResult, to_wire
from invest_admin.schemas.setting import Setting, SettingCreate, SettingUpdate
from invest_admin.services.filters import SETTING_FILTER
from invest_admin.services.platform_client import PlatformClient
from invest_admin.services.session_service import AdminSession
from invest_admin.services.views import ListParams, list_view

router = APIRouter()


@router.get("", response_model=ListPage[Setting])
async def list_settings(
    group: str | None = None,
    params: ListParams = Depends(list_params),
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    if group:
        params = dataclasses.replace(
            params, filter=dataclasses.replace(params.filter, type=group)
        )
    store = session_store(session, "settings")
    return await list_view(
        store, lambda: client.list_settings(session.token), SETTING_FILTER, params
    )


@router.post("", response_model=MutationResult, status_code=status.HTTP_201_CREATED)
async def create_setting(
    payload: SettingCreate,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "settings")
    outcome = await store.mutate(
        lambda: client.create_setting(session.token, to_wire(payload)),
        store.prepend,
        success_message="Setting created successfully",
    )
    return outcome_response(outcome)


@router.put("/{setting_id}", response_model=MutationResult)
async def update_setting(
    setting_id: int,
    payload: SettingUpdate,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "settings")

    def apply(updated: Setting):
        if updated.id and store.replace(updated):
            return updated
        return store.patch(setting_id, **payload.model_dump(exclude_unset=True))

    outcome = await store.mutate(
        lambda: client.update_setting(session.token, setting_id, to_wire(payload, partial=True)),
        apply,
        success_message="Setting updated successfully",
    )
    return outcome_response(outcome)


@router.delete("/{setting_id}", response_model=MutationResult)
async def delete_setting(
    setting_id: int,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "settings")
    outcome = await store.mutate(
        lambda: client.delete_setting(session.token, setting_id),
        lambda _: store.remove(setting_id),
        success_message="Setting deleted successfully",
    )
    return outcome_response(outcome)
