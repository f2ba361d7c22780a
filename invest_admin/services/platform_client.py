"""
Platform API client — the console's only route to the investment platform.

Architecture:
  - PlatformClient wraps one shared ``httpx.AsyncClient``
  - every call takes the caller's bearer token explicitly (no ambient storage)
  - failures raise PlatformAPIError carrying a display-ready message
  - list responses are unwrapped from their envelope key and validated
    into schema objects; rows that fail validation are skipped

Tests swap the client with ``set_platform_client`` (usually one built over
``httpx.MockTransport``).
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from invest_admin.config import settings
from invest_admin.schemas.kyc import KYCDocument
from invest_admin.schemas.notification import Notification
from invest_admin.schemas.payment import Payment
from invest_admin.schemas.plan import Plan
from invest_admin.schemas.setting import Setting
from invest_admin.schemas.task import Task
from invest_admin.schemas.transaction import Transaction
from invest_admin.schemas.user import User, UserDetail
from invest_admin.schemas.withdrawal import Withdrawal

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Unknown error occurred"

ModelT = TypeVar("ModelT", bound=BaseModel)


class PlatformAPIError(Exception):
    """Raised when the platform API call fails. ``message`` is safe to display."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message or GENERIC_ERROR
        self.status_code = status_code


def _status_message(status_code: int) -> str:
    return f"Request failed with status {status_code}"


class PlatformClient:
    """Async REST client for the investment platform API."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        device_id: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._device_id = device_id or settings.ADMIN_DEVICE_ID
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.PLATFORM_API_URL).rstrip("/"),
            timeout=timeout or settings.PLATFORM_API_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- Core request ---

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        token: str | None = None,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict:
        """
        Issue one request and return the decoded JSON object.

        A non-JSON success response yields ``{}``. Error responses raise
        PlatformAPIError with the body's ``error`` field when present,
        otherwise a generic status message.
        """
        headers = {
            "Content-Type": "application/json",
            "X-Device-ID": self._device_id,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if method.upper() == "GET":
            headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
            headers["Pragma"] = "no-cache"

        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            resp = await self._client.request(
                method, endpoint, headers=headers, params=params or None, json=json,
            )
        except httpx.RequestError as exc:
            logger.warning("Platform API %s %s error: %s", method, endpoint, exc)
            raise PlatformAPIError(str(exc) or GENERIC_ERROR) from exc

        content_type = resp.headers.get("content-type", "")
        if "application/json" not in content_type:
            if resp.is_error:
                logger.warning(
                    "Platform API %s %s failed: %s", method, endpoint, resp.status_code
                )
                raise PlatformAPIError(_status_message(resp.status_code), resp.status_code)
            return {}

        try:
            data = resp.json()
        except ValueError as exc:
            raise PlatformAPIError(GENERIC_ERROR, resp.status_code) from exc

        if resp.is_error:
            message = None
            if isinstance(data, dict):
                message = data.get("error")
            message = message or _status_message(resp.status_code)
            logger.warning(
                "Platform API %s %s failed: %s (%s)",
                method, endpoint, resp.status_code, message,
            )
            raise PlatformAPIError(message, resp.status_code)

        if not isinstance(data, dict):
            return {"data": data}
        return data

    # --- Helpers ---

    async def _list(
        self,
        endpoint: str,
        key: str,
        model: type[ModelT],
        token: str | None,
        params: dict[str, Any] | None = None,
    ) -> list[ModelT]:
        data = await self.request("GET", endpoint, token=token, params=params)
        rows = data.get(key) or []
        items: list[ModelT] = []
        for row in rows:
            try:
                items.append(model.model_validate(row))
            except ValidationError as exc:
                logger.warning("Skipping malformed %s row from %s: %s", key, endpoint, exc)
        return items

    @staticmethod
    def _one(data: dict, model: type[ModelT], *keys: str) -> ModelT:
        for key in keys:
            if isinstance(data.get(key), dict):
                return model.model_validate(data[key])
        return model.model_validate(data)

    # --- Auth ---

    async def login(self, email: str, password: str, device_id: str | None = None) -> dict:
        """POST /auth/login — returns ``{"token": ..., "user": User}``."""
        data = await self.request(
            "POST",
            "/auth/login",
            json={
                "email": email,
                "password": password,
                "device_id": device_id or self._device_id,
            },
        )
        token = data.get("token")
        if not token:
            raise PlatformAPIError("Login response did not include a token")
        return {"token": token, "user": User.model_validate(data.get("user") or {})}

    async def validate_token(self, token: str) -> bool:
        """
        GET /auth/validate. Only an explicit 401/403 counts as invalid; any
        other failure leaves the token's standing unknown and returns True.
        """
        try:
            data = await self.request("GET", "/auth/validate", token=token)
        except PlatformAPIError as exc:
            if exc.status_code in (401, 403):
                return False
            logger.warning("Token validation unavailable: %s", exc.message)
            return True
        return bool(data.get("valid", True))

    async def get_stats(self, token: str) -> dict:
        """GET /admin/stats — also used as the admin-access probe."""
        return await self.request("GET", "/admin/stats", token=token)

    # --- Users ---

    async def list_users(self, token: str) -> list[User]:
        return await self._list("/admin/users", "users", User, token)

    async def get_user(self, token: str, user_id: int) -> UserDetail:
        data = await self.request("GET", f"/admin/users/{user_id}", token=token)
        if isinstance(data.get("user"), dict):
            return UserDetail.model_validate(data)
        return UserDetail(user=User.model_validate(data))

    async def block_user(self, token: str, user_id: int) -> dict:
        return await self.request("PUT", f"/admin/users/{user_id}/block", token=token)

    async def unblock_user(self, token: str, user_id: int) -> dict:
        return await self.request("PUT", f"/admin/users/{user_id}/unblock", token=token)

    # --- Withdrawals ---

    async def list_withdrawals(self, token: str, status: str | None = None) -> list[Withdrawal]:
        return await self._list(
            "/admin/withdrawals", "withdrawals", Withdrawal, token, {"status": status}
        )

    async def approve_withdrawal(self, token: str, withdrawal_id: int, admin_note: str) -> dict:
        return await self.request(
            "PUT",
            f"/admin/withdrawals/{withdrawal_id}/approve",
            token=token,
            json={"admin_note": admin_note},
        )

    async def reject_withdrawal(self, token: str, withdrawal_id: int, reason: str) -> dict:
        return await self.request(
            "PUT",
            f"/admin/withdrawals/{withdrawal_id}/reject",
            token=token,
            json={"reason": reason},
        )

    # --- KYC ---

    async def list_kyc(self, token: str, status: str | None = None) -> list[KYCDocument]:
        return await self._list(
            "/admin/kyc", "kyc_documents", KYCDocument, token, {"status": status}
        )

    async def get_kyc(self, token: str, kyc_id: int) -> KYCDocument:
        data = await self.request("GET", f"/admin/kyc/{kyc_id}", token=token)
        return self._one(data, KYCDocument, "kyc_document", "kyc")

    async def approve_kyc(self, token: str, kyc_id: int) -> dict:
        return await self.request("PUT", f"/admin/kyc/{kyc_id}/approve", token=token)

    async def reject_kyc(self, token: str, kyc_id: int, reason: str) -> dict:
        return await self.request(
            "PUT", f"/admin/kyc/{kyc_id}/reject", token=token, json={"reason": reason}
        )

    # --- Payments ---

    async def list_payments(self, token: str, status: str | None = None) -> list[Payment]:
        return await self._list(
            "/admin/payments", "payments", Payment, token, {"status": status}
        )

    async def list_pending_payments(self, token: str) -> list[Payment]:
        return await self._list("/admin/payments/pending", "payments", Payment, token)

    async def get_payment(self, token: str, payment_id: int) -> Payment:
        data = await self.request("GET", f"/admin/payments/{payment_id}", token=token)
        return self._one(data, Payment, "payment")

    async def approve_payment(self, token: str, payment_id: int) -> dict:
        return await self.request("PUT", f"/admin/payments/{payment_id}/approve", token=token)

    async def reject_payment(self, token: str, payment_id: int, reason: str) -> dict:
        return await self.request(
            "PUT",
            f"/admin/payments/{payment_id}/reject",
            token=token,
            json={"reason": reason},
        )

    # --- Plans ---

    async def list_plans(self, token: str) -> list[Plan]:
        return await self._list("/plans", "plans", Plan, token)

    async def create_plan(self, token: str, payload: dict) -> Plan:
        data = await self.request("POST", "/admin/plans", token=token, json=payload)
        return self._one(data, Plan, "plan")

    async def update_plan(self, token: str, plan_id: int, payload: dict) -> Plan:
        data = await self.request("PUT", f"/admin/plans/{plan_id}", token=token, json=payload)
        return self._one(data, Plan, "plan")

    async def delete_plan(self, token: str, plan_id: int) -> dict:
        return await self.request("DELETE", f"/admin/plans/{plan_id}", token=token)

    # --- Tasks ---

    async def list_tasks(self, token: str) -> list[Task]:
        return await self._list("/tasks", "tasks", Task, token)

    async def create_task(self, token: str, payload: dict) -> Task:
        data = await self.request("POST", "/admin/tasks", token=token, json=payload)
        return self._one(data, Task, "task")

    async def update_task(self, token: str, task_id: int, payload: dict) -> Task:
        data = await self.request("PUT", f"/admin/tasks/{task_id}", token=token, json=payload)
        return self._one(data, Task, "task")

    async def delete_task(self, token: str, task_id: int) -> dict:
        return await self.request("DELETE", f"/admin/tasks/{task_id}", token=token)

    # --- Transactions ---

    async def list_transactions(self, token: str) -> list[Transaction]:
        return await self._list("/admin/transactions", "transactions", Transaction, token)

    async def list_user_transactions(self, token: str, user_id: int) -> list[Transaction]:
        return await self._list(
            f"/admin/users/{user_id}/transactions", "transactions", Transaction, token
        )

    # --- Notifications ---

    async def list_notifications(
        self,
        token: str,
        user_id: int | None = None,
        type: str | None = None,
        is_read: bool | None = None,
    ) -> list[Notification]:
        params = {
            "user_id": user_id,
            "type": type,
            "is_read": None if is_read is None else str(is_read).lower(),
        }
        return await self._list(
            "/admin/notifications", "notifications", Notification, token, params
        )

    async def send_notification(
        self, token: str, title: str, message: str, user_id: int | None = None
    ) -> dict:
        body: dict[str, Any] = {"title": title, "message": message}
        if user_id is not None:
            body["user_id"] = user_id
        return await self.request("POST", "/admin/notifications", token=token, json=body)

    async def mark_notification_read(self, token: str, notification_id: int) -> dict:
        return await self.request(
            "PUT", f"/admin/notifications/{notification_id}/read", token=token
        )

    async def delete_notification(self, token: str, notification_id: int) -> dict:
        return await self.request(
            "DELETE", f"/admin/notifications/{notification_id}", token=token
        )

    async def get_unread_count(self, token: str) -> int:
        data = await self.request("GET", "/notifications/unread-count", token=token)
        try:
            return max(0, int(data.get("unread_count", 0)))
        except (TypeError, ValueError):
            return 0

    async def mark_all_read(self, token: str) -> dict:
        return await self.request("PUT", "/notifications/mark-all-read", token=token)

    # --- Settings ---

    async def list_settings(self, token: str, group: str | None = None) -> list[Setting]:
        return await self._list(
            "/admin/settings", "settings", Setting, token, {"group": group}
        )

    async def create_setting(self, token: str, payload: dict) -> Setting:
        data = await self.request("POST", "/admin/settings", token=token, json=payload)
        return self._one(data, Setting, "setting")

    async def update_setting(self, token: str, setting_id: int, payload: dict) -> Setting:
        data = await self.request(
            "PUT", f"/admin/settings/{setting_id}", token=token, json=payload
        )
        return self._one(data, Setting, "setting")

    async def delete_setting(self, token: str, setting_id: int) -> dict:
        return await self.request("DELETE", f"/admin/settings/{setting_id}", token=token)


# ---------------------------------------------------------------------------
# Shared instance
# ---------------------------------------------------------------------------

_client: PlatformClient | None = None


def get_platform_client() -> PlatformClient:
    """Return the shared client, creating it on first use."""
    global _client
    if _client is None:
        logger.info("Using platform API at %s", settings.PLATFORM_API_URL)
        _client = PlatformClient()
    return _client


def set_platform_client(client: PlatformClient | None) -> None:
    """Override the shared client (used in tests)."""
    global _client
    _client = client


async def close_platform_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
