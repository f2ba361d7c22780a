"""Tests for plan, task and platform-setting management endpoints."""

import json
from decimal import Decimal

import pytest


@pytest.fixture
def plan_rows(platform, sample_rows):
    make = sample_rows["plan"]
    rows = [
        make(1, name="Free", created_at="2024-01-01T00:00:00Z"),
        make(2, name="Silver", price=10.0, is_default=False, created_at="2024-02-01T00:00:00Z"),
        make(3, name="Gold", price=25.0, is_default=False, created_at="2024-03-01T00:00:00Z"),
    ]
    platform.add("GET", "/plans", {"plans": rows})
    return rows


class TestPlans:
    """Tests for /api/v1/plans."""

    @pytest.mark.asyncio
    async def test_stats(self, client, auth_headers, plan_rows):
        data = (await client.get("/api/v1/plans/stats", headers=auth_headers)).json()
        assert (data["total_plans"], data["free_plans"], data["paid_plans"]) == (3, 1, 2)
        assert data["cheapest_paid"] == "Silver"
        assert data["most_expensive"] == "Gold"
        assert Decimal(data["most_expensive_price"]) == Decimal("25.00")

    @pytest.mark.asyncio
    async def test_create_prepends(self, client, auth_headers, platform, plan_rows):
        platform.add("POST", "/admin/plans", {"plan": {
            "id": 4, "name": "Platinum", "price": 99.0, "daily_deposit_limit": 5000.0,
            "daily_withdrawal_limit": 2000.0, "daily_profit_limit": 200.0,
            "created_at": "2024-06-01T00:00:00Z",
        }})
        await client.get("/api/v1/plans", headers=auth_headers)

        response = await client.post(
            "/api/v1/plans",
            json={
                "name": "Platinum",
                "daily_deposit_limit": "5000",
                "daily_withdrawal_limit": "2000",
                "daily_profit_limit": "200",
                "price": "99",
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["item"]["id"] == 4
        sent = json.loads(platform.calls("POST", "/admin/plans")[0].content)
        assert sent["price"] == 99.0

        listing = await client.get(
            "/api/v1/plans", params={"refresh": "false", "sort": "none"}, headers=auth_headers
        )
        assert [p["id"] for p in listing.json()["items"]] == [4, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_create_rejects_negative_price(self, client, auth_headers):
        response = await client.post(
            "/api/v1/plans",
            json={
                "name": "Broken",
                "daily_deposit_limit": 1,
                "daily_withdrawal_limit": 1,
                "daily_profit_limit": 1,
                "price": -5,
            },
            headers=auth_headers,
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_partial_update_patches_local_copy(self, client, auth_headers, platform, plan_rows):
        platform.add("PUT", "/admin/plans/2", {"message": "Plan updated"})
        await client.get("/api/v1/plans", headers=auth_headers)

        response = await client.put(
            "/api/v1/plans/2", json={"price": "12.5"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert json.loads(platform.calls("PUT", "/admin/plans/2")[0].content) == {"price": 12.5}
        item = response.json()["item"]
        assert item["name"] == "Silver"
        assert Decimal(item["price"]) == Decimal("12.5")

    @pytest.mark.asyncio
    async def test_delete_removes(self, client, auth_headers, platform, plan_rows):
        platform.add("DELETE", "/admin/plans/3", {"message": "Plan deleted"})
        await client.get("/api/v1/plans", headers=auth_headers)

        response = await client.delete("/api/v1/plans/3", headers=auth_headers)

        assert response.json()["success"] is True
        listing = await client.get(
            "/api/v1/plans", params={"refresh": "false"}, headers=auth_headers
        )
        assert [p["id"] for p in listing.json()["items"]] == [2, 1]


class TestTasks:
    """Tests for /api/v1/tasks."""

    @pytest.fixture
    def task_rows(self, platform):
        rows = [
            {"id": 1, "name": "Follow us", "task_type": "follow", "is_mandatory": True,
             "created_at": "2024-06-01T00:00:00Z"},
            {"id": 2, "name": "Like the post", "task_type": "like", "is_mandatory": False,
             "created_at": "2024-06-02T00:00:00Z"},
            {"id": 3, "name": "Install the app", "task_type": "install", "is_mandatory": True,
             "created_at": "2024-06-03T00:00:00Z"},
        ]
        platform.add("GET", "/tasks", {"tasks": rows})
        return rows

    @pytest.mark.asyncio
    async def test_filters(self, client, auth_headers, task_rows):
        response = await client.get(
            "/api/v1/tasks", params={"status": "mandatory", "search": "app"}, headers=auth_headers
        )
        assert [t["id"] for t in response.json()["items"]] == [3]

    @pytest.mark.asyncio
    async def test_stats(self, client, auth_headers, task_rows):
        data = (await client.get("/api/v1/tasks/stats", headers=auth_headers)).json()
        assert data["total_tasks"] == 3
        assert data["mandatory_tasks"] == 2
        assert data["by_type"] == {"follow": 1, "like": 1, "install": 1}

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_type(self, client, auth_headers):
        response = await client.post(
            "/api/v1/tasks", json={"name": "Share", "task_type": "share"}, headers=auth_headers
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_update_replaces_with_platform_copy(self, client, auth_headers, platform, task_rows):
        platform.add("PUT", "/admin/tasks/2", {"task": {
            "id": 2, "name": "Like and share", "task_type": "like", "is_mandatory": True,
            "created_at": "2024-06-02T00:00:00Z",
        }})
        await client.get("/api/v1/tasks", headers=auth_headers)

        response = await client.put(
            "/api/v1/tasks/2", json={"name": "Like and share", "is_mandatory": True},
            headers=auth_headers,
        )

        assert response.json()["item"]["name"] == "Like and share"
        stats = (await client.get(
            "/api/v1/tasks/stats", params={"refresh": "false"}, headers=auth_headers
        )).json()
        assert stats["mandatory_tasks"] == 3


class TestSettings:
    """Tests for /api/v1/settings."""

    @pytest.fixture
    def setting_rows(self, platform):
        rows = [
            {"id": 1, "key": "min_withdrawal", "value": "10", "type": "number",
             "group": "withdrawal", "updated_at": "2024-06-01T00:00:00Z"},
            {"id": 2, "key": "site_name", "value": "Invest", "type": "string",
             "group": "general", "updated_at": "2024-06-02T00:00:00Z"},
            {"id": 3, "key": "withdrawal_fee", "value": "2", "type": "number",
             "group": "withdrawal", "updated_at": "2024-06-03T00:00:00Z"},
        ]
        platform.add("GET", "/admin/settings", {"settings": rows})
        return rows

    @pytest.mark.asyncio
    async def test_group_selects_rows(self, client, auth_headers, setting_rows):
        response = await client.get(
            "/api/v1/settings", params={"group": "withdrawal"}, headers=auth_headers
        )
        assert [s["key"] for s in response.json()["items"]] == ["withdrawal_fee", "min_withdrawal"]

    @pytest.mark.asyncio
    async def test_create_validates_key(self, client, auth_headers):
        response = await client.post(
            "/api/v1/settings", json={"key": "Bad Key", "value": "x"}, headers=auth_headers
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_update_and_delete(self, client, auth_headers, platform, setting_rows):
        platform.add("PUT", "/admin/settings/1", {"message": "Setting updated"})
        platform.add("DELETE", "/admin/settings/2", {"message": "Setting deleted"})
        await client.get("/api/v1/settings", headers=auth_headers)

        updated = await client.put("/api/v1/settings/1", json={"value": "20"}, headers=auth_headers)
        deleted = await client.delete("/api/v1/settings/2", headers=auth_headers)

        assert updated.json()["item"]["value"] == "20"
        assert deleted.json()["message"] == "Setting deleted"
        listing = await client.get(
            "/api/v1/settings", params={"refresh": "false", "sort": "none"}, headers=auth_headers
        )
        assert [s["id"] for s in listing.json()["items"]] == [1, 3]

    @pytest.mark.asyncio
    async def test_delete_failure_keeps_row(self, client, auth_headers, platform, setting_rows):
        platform.add("DELETE", "/admin/settings/2", {"error": "Setting is protected"}, status_code=409)
        await client.get("/api/v1/settings", headers=auth_headers)

        response = await client.delete("/api/v1/settings/2", headers=auth_headers)

        assert response.status_code == 409
        listing = await client.get(
            "/api/v1/settings", params={"refresh": "false"}, headers=auth_headers
        )
        assert len(listing.json()["items"]) == 3
