"""Tests for dashboard aggregation, per-page stats and time buckets."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from invest_admin.schemas.kyc import KYCDocument
from invest_admin.schemas.plan import Plan
from invest_admin.schemas.transaction import Transaction
from invest_admin.schemas.user import User
from invest_admin.schemas.withdrawal import Withdrawal
from invest_admin.services.aggregation import (
    Period,
    activity_feed,
    bucket_sums,
    bucket_windows,
    count_by,
    dashboard_stats,
    kyc_stats,
    plan_stats,
    sum_amounts,
    transaction_stats,
    withdrawal_stats,
)

UTC = timezone.utc


def _at(*args) -> datetime:
    return datetime(*args, tzinfo=UTC)


def _txn(id, type, amount, status="completed", created_at=None):
    return Transaction(
        id=id,
        user_id=1,
        type=type,
        amount=Decimal(str(amount)),
        status=status,
        created_at=created_at,
    )


def _amounts(buckets) -> dict[str, Decimal]:
    return {b.name: b.amount for b in buckets}


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


class TestPrimitives:
    """Tests for counting and summing helpers."""

    def test_count_by_includes_declared_keys(self):
        items = [{"status": "pending"}, {"status": "pending"}, {"status": "odd"}]
        counts = count_by(items, "status", ["pending", "approved"])
        assert counts == {"pending": 2, "approved": 0, "odd": 1}

    def test_sum_amounts_rounds_half_up(self):
        items = [{"amount": "0.125"}, {"amount": "1"}]
        assert sum_amounts(items) == Decimal("1.13")

    def test_sum_amounts_ignores_garbage(self):
        assert sum_amounts([{"amount": "n/a"}, {"amount": 2}]) == Decimal("2.00")


# ---------------------------------------------------------------------------
# Buckets
# ---------------------------------------------------------------------------


class TestBuckets:
    """Tests for daily, weekly and monthly bucket sums."""

    def test_daily_deposits_land_on_their_weekday(self):
        """Monday deposit and Tuesday withdrawal; deposit series only has Monday."""
        now = _at(2024, 6, 5, 12)  # Wednesday
        items = [
            _txn(1, "deposit", 100, created_at=_at(2024, 6, 3, 9)),
            _txn(2, "withdrawal", 50, created_at=_at(2024, 6, 4, 9)),
        ]
        buckets = bucket_sums(items, Period.DAILY, now, type="deposit")

        assert [b.name for b in buckets] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        amounts = _amounts(buckets)
        assert amounts["Mon"] == Decimal("100.00")
        assert all(amounts[day] == Decimal("0") for day in ("Tue", "Wed", "Thu", "Fri", "Sat", "Sun"))

    def test_daily_ignores_previous_week(self):
        now = _at(2024, 6, 5, 12)
        items = [_txn(1, "deposit", 70, created_at=_at(2024, 6, 2, 23, 59))]  # last Sunday
        assert sum(b.amount for b in bucket_sums(items, "daily", now)) == 0

    def test_status_filter(self):
        now = _at(2024, 6, 5, 12)
        items = [
            _txn(1, "deposit", 100, created_at=_at(2024, 6, 3, 9)),
            _txn(2, "deposit", 40, status="pending", created_at=_at(2024, 6, 3, 10)),
        ]
        buckets = bucket_sums(items, Period.DAILY, now, type="deposit", status="pending")
        assert _amounts(buckets)["Mon"] == Decimal("40.00")

    @pytest.mark.parametrize("selector", ["all", ""])
    def test_all_selector_counts_everything(self, selector):
        now = _at(2024, 6, 5, 12)
        items = [
            _txn(1, "deposit", 100, created_at=_at(2024, 6, 3, 9)),
            _txn(2, "withdrawal", 40, status="pending", created_at=_at(2024, 6, 3, 10)),
        ]
        unfiltered = bucket_sums(items, Period.DAILY, now)
        assert bucket_sums(items, Period.DAILY, now, type=selector, status=selector) == unfiltered
        assert _amounts(unfiltered)["Mon"] == Decimal("140.00")

    def test_weekly_windows_end_now(self):
        now = _at(2024, 6, 30, 12)
        items = [
            _txn(1, "deposit", 10, created_at=now),
            _txn(2, "deposit", 20, created_at=now - timedelta(days=8)),
            _txn(3, "deposit", 30, created_at=now - timedelta(days=29)),
        ]
        amounts = _amounts(bucket_sums(items, Period.WEEKLY, now))
        assert list(amounts) == ["Week 1", "Week 2", "Week 3", "Week 4"]
        assert amounts["Week 4"] == Decimal("10.00")
        assert amounts["Week 3"] == Decimal("20.00")
        assert sum(amounts.values()) == Decimal("30.00")

    def test_monthly_last_six_months(self):
        now = _at(2024, 6, 15)
        items = [
            _txn(1, "deposit", 5, created_at=_at(2024, 5, 31, 23, 59)),
            _txn(2, "deposit", 7, created_at=_at(2024, 1, 1)),
            _txn(3, "deposit", 9, created_at=_at(2023, 12, 31)),
        ]
        amounts = _amounts(bucket_sums(items, Period.MONTHLY, now))
        assert list(amounts) == ["Jan", "Feb", "Mar", "Apr", "May", "Jun"]
        assert amounts["May"] == Decimal("5.00")
        assert amounts["Jan"] == Decimal("7.00")
        assert sum(amounts.values()) == Decimal("12.00")

    def test_monthly_crosses_year_boundary(self):
        labels = [label for label, _, _ in bucket_windows(Period.MONTHLY, _at(2024, 2, 10))]
        assert labels == ["Sep", "Oct", "Nov", "Dec", "Jan", "Feb"]

    def test_undated_items_are_skipped(self):
        items = [_txn(1, "deposit", 100, created_at=None)]
        assert sum(b.amount for b in bucket_sums(items, Period.DAILY, _at(2024, 6, 5))) == 0

    def test_unknown_period_rejected(self):
        with pytest.raises(ValueError):
            bucket_windows("hourly")


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


class TestDashboardStats:
    """Tests for the main dashboard card values."""

    @pytest.fixture
    def lists(self):
        users = [
            User(id=1, name="A", balance=Decimal("100"), plan_id=1, created_at=_at(2024, 6, 1)),
            User(id=2, name="B", balance=Decimal("200.5"), plan_id=1, created_at=_at(2024, 6, 3)),
            User(id=3, name="C", balance=Decimal("0"), plan_id=2, is_blocked=True, created_at=_at(2024, 6, 2)),
            User(id=4, name="D", plan_id=99, created_at=_at(2024, 5, 1)),
        ]
        withdrawals = [
            Withdrawal(id=1, user_id=1, amount=Decimal("10"), status="pending", created_at=_at(2024, 6, 4)),
            Withdrawal(id=2, user_id=2, amount=Decimal("20"), status="pending", created_at=_at(2024, 6, 5)),
            Withdrawal(id=3, user_id=2, amount=Decimal("30"), status="approved", created_at=_at(2024, 6, 6)),
        ]
        kyc = [
            KYCDocument(id=i, user_id=1, status=status, created_at=_at(2024, 6, i, 12))
            for i, status in enumerate(
                ["approved", "approved", "approved", "rejected", "pending", "pending"], start=1
            )
        ]
        plans = [Plan(id=1, name="Free"), Plan(id=2, name="Gold", price=Decimal("10"))]
        transactions = [
            _txn(1, "deposit", 100),
            _txn(2, "deposit", 50),
            _txn(3, "deposit", 999, status="pending"),
            _txn(4, "withdrawal", 30),
            _txn(5, "bonus", 5),
        ]
        return users, withdrawals, kyc, plans, transactions

    def test_totals(self, lists):
        stats = dashboard_stats(*lists)
        assert stats.total_users == 4
        assert stats.active_users == 3
        assert stats.total_balance == Decimal("300.50")
        assert stats.total_deposits == Decimal("150.00")
        assert stats.total_withdrawals == Decimal("30.00")
        assert stats.pending_withdrawals == 2
        assert stats.pending_kyc == 2
        assert stats.kyc_approval_rate == Decimal("75.00")
        assert stats.error is None

    def test_plan_distribution_skips_unknown_plans(self, lists):
        stats = dashboard_stats(*lists)
        assert [(p.name, p.value) for p in stats.plan_distribution] == [("Free", 2), ("Gold", 1)]

    def test_recent_lists(self, lists):
        stats = dashboard_stats(*lists, recent_limit=2)
        assert [u.id for u in stats.recent_users] == [2, 3]
        # Only pending withdrawals, newest first
        assert [w.id for w in stats.recent_withdrawals] == [2, 1]

    def test_empty_inputs(self):
        stats = dashboard_stats([], [], [], [], [])
        assert stats.total_users == 0
        assert stats.kyc_approval_rate == Decimal("0.00")
        assert stats.plan_distribution == []

    def test_activity_feed(self, lists):
        users, withdrawals, kyc, _, _ = lists
        orphan = Withdrawal(id=9, user_id=404, amount=Decimal("1"), created_at=_at(2024, 7, 1))
        feed = activity_feed(users, withdrawals + [orphan], kyc, limit=4)

        assert len(feed) == 4
        assert all(item.id != "withdrawal-9" for item in feed)
        stamps = [item.timestamp for item in feed]
        assert stamps == sorted(stamps, reverse=True)
        assert feed[0].id == "kyc-6"


# ---------------------------------------------------------------------------
# Per-page stats
# ---------------------------------------------------------------------------


class TestPageStats:
    """Tests for the stat cards of individual list pages."""

    def test_withdrawal_stats(self):
        items = [
            Withdrawal(id=1, amount=Decimal("10.10"), status="pending"),
            Withdrawal(id=2, amount=Decimal("5"), status="pending"),
            Withdrawal(id=3, amount=Decimal("7"), status="approved"),
            Withdrawal(id=4, amount=Decimal("1"), status="rejected"),
        ]
        stats = withdrawal_stats(items)
        assert (stats.total, stats.pending, stats.approved, stats.rejected) == (4, 2, 1, 1)
        assert stats.pending_amount == Decimal("15.10")
        assert stats.approved_amount == Decimal("7.00")

    def test_kyc_stats_recent_submissions(self):
        docs = [KYCDocument(id=i, status="pending", created_at=_at(2024, 6, i)) for i in range(1, 8)]
        stats = kyc_stats(docs, recent_limit=3)
        assert stats.pending_count == 7
        assert [d.id for d in stats.recent_submissions] == [7, 6, 5]

    def test_plan_stats(self):
        plans = [
            Plan(id=1, name="Free", price=Decimal("0")),
            Plan(id=2, name="Gold", price=Decimal("10")),
            Plan(id=3, name="Silver", price=Decimal("5")),
        ]
        stats = plan_stats(plans)
        assert (stats.total_plans, stats.free_plans, stats.paid_plans) == (3, 1, 2)
        assert stats.cheapest_paid == "Silver"
        assert stats.cheapest_paid_price == Decimal("5.00")
        assert stats.most_expensive == "Gold"

    def test_transaction_stats(self):
        items = [
            _txn(1, "deposit", 100),
            _txn(2, "withdrawal", 40),
            _txn(3, "deposit", 10, status="rejected"),
        ]
        stats = transaction_stats(items)
        assert stats.total == 3
        assert stats.by_status["completed"] == 2
        assert stats.by_status["rejected"] == 1
        assert stats.by_type["deposit"] == 2
        assert stats.completed_deposits == Decimal("100.00")
        assert stats.completed_withdrawals == Decimal("40.00")
