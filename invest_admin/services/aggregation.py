"""
Aggregations for dashboard cards and charts.

Counts by category, Decimal sums, and fixed calendar buckets anchored to
"now". All timestamps are compared in UTC; amounts are rounded to two
decimals (ROUND_HALF_UP) only when a result is produced.

Bucket sets:
  daily    Mon..Sun of the current ISO week
  weekly   Week 1..Week 4, consecutive 7-day windows ending now
  monthly  the last six calendar months, oldest first
"""

import calendar
import enum
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from invest_admin.schemas.kyc import KYCDocument, KYCStatus
from invest_admin.schemas.notification import Notification, NotificationType
from invest_admin.schemas.payment import Payment, PaymentGateway, PaymentStatus
from invest_admin.schemas.plan import Plan
from invest_admin.schemas.stats import (
    ActivityItem,
    BucketAmount,
    DashboardStats,
    KYCStats,
    NamedValue,
    NotificationStats,
    PaymentStats,
    PlanStats,
    TaskStats,
    TransactionStats,
    UserStats,
    WithdrawalStats,
)
from invest_admin.schemas.task import Task, TaskType
from invest_admin.schemas.transaction import Transaction, TransactionStatus, TransactionType
from invest_admin.schemas.user import User
from invest_admin.schemas.withdrawal import Withdrawal, WithdrawalStatus
from invest_admin.services.filters import as_text, field_value, is_active, most_recent

CENT = Decimal("0.01")
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class Period(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


def round_amount(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def count_by(
    items: Iterable[Any],
    key: str | Callable[[Any], str],
    keys: Iterable[str] | None = None,
) -> dict[str, int]:
    """
    Count items per key value. Every entry of ``keys`` is present (zero if
    unseen); values outside ``keys`` are appended in first-seen order.
    """
    key_fn = key if callable(key) else (lambda item: as_text(field_value(item, key)))
    counts: dict[str, int] = {k: 0 for k in (keys or ())}
    for item in items:
        value = key_fn(item)
        counts[value] = counts.get(value, 0) + 1
    return counts


def sum_amounts(items: Iterable[Any], field: str = "amount") -> Decimal:
    total = sum((to_decimal(field_value(item, field)) for item in items), Decimal("0"))
    return round_amount(total)


def _as_utc(value: Any) -> datetime | None:
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Time buckets
# ---------------------------------------------------------------------------


def _month_start(year: int, month: int) -> datetime:
    return datetime(year, month, 1, tzinfo=timezone.utc)


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def bucket_windows(period: Period | str, now: datetime | None = None) -> list[tuple[str, datetime, datetime]]:
    """
    Return ``(label, start, end)`` for each bucket; windows are half-open
    ``[start, end)`` and listed oldest first.
    """
    period = Period(period)
    now = _as_utc(now) or datetime.now(timezone.utc)

    if period is Period.DAILY:
        week_start = (now - timedelta(days=now.weekday())).replace(
            hour=0, minute=0, second=0, microsecond=0
        )
        return [
            (label, week_start + timedelta(days=i), week_start + timedelta(days=i + 1))
            for i, label in enumerate(WEEKDAY_LABELS)
        ]

    if period is Period.WEEKLY:
        # The last window is closed on the right so an item stamped exactly
        # at ``now`` still lands in Week 4.
        end_of_range = now + timedelta(microseconds=1)
        windows = []
        for i in range(4):
            start = end_of_range - timedelta(days=7 * (4 - i))
            end = end_of_range - timedelta(days=7 * (3 - i))
            windows.append((f"Week {i + 1}", start, end))
        return windows

    windows = []
    for delta in range(-5, 1):
        year, month = _shift_month(now.year, now.month, delta)
        next_year, next_month = _shift_month(year, month, 1)
        windows.append(
            (
                calendar.month_abbr[month],
                _month_start(year, month),
                _month_start(next_year, next_month),
            )
        )
    return windows


def bucket_sums(
    items: Iterable[Any],
    period: Period | str,
    now: datetime | None = None,
    *,
    type: str | None = None,
    status: str | None = None,
    type_field: str = "type",
    status_field: str = "status",
    date_field: str = "created_at",
    amount_field: str = "amount",
) -> list[BucketAmount]:
    """
    Sum item amounts into the fixed bucket set for ``period``.

    Only items whose ``type_field``/``status_field`` equal ``type``/``status``
    (ignored when ``"all"`` or empty) and whose timestamp falls inside one of
    the windows are counted; every bucket is present even when its sum is zero.
    """
    windows = bucket_windows(period, now)
    totals = [Decimal("0")] * len(windows)

    for item in items:
        if is_active(type) and as_text(field_value(item, type_field)) != type:
            continue
        if is_active(status) and as_text(field_value(item, status_field)) != status:
            continue
        stamp = _as_utc(field_value(item, date_field))
        if stamp is None:
            continue
        for index, (_, start, end) in enumerate(windows):
            if start <= stamp < end:
                totals[index] += to_decimal(field_value(item, amount_field))
                break

    return [
        BucketAmount(name=label, amount=round_amount(total))
        for (label, _, _), total in zip(windows, totals)
    ]


# ---------------------------------------------------------------------------
# Stats builders
# ---------------------------------------------------------------------------


def _with_status(items: Iterable[Any], value: str) -> list[Any]:
    return [item for item in items if as_text(field_value(item, "status")) == value]


def dashboard_stats(
    users: list[User],
    withdrawals: list[Withdrawal],
    kyc_documents: list[KYCDocument],
    plans: list[Plan],
    transactions: list[Transaction],
    recent_limit: int = 5,
) -> DashboardStats:
    """Build the main dashboard cards from full entity lists."""
    pending_withdrawals = _with_status(withdrawals, WithdrawalStatus.PENDING.value)
    kyc_counts = count_by(kyc_documents, "status", [s.value for s in KYCStatus])
    reviewed = kyc_counts[KYCStatus.APPROVED.value] + kyc_counts[KYCStatus.REJECTED.value]
    if reviewed:
        approval_rate = round_amount(
            Decimal(kyc_counts[KYCStatus.APPROVED.value]) * 100 / Decimal(reviewed)
        )
    else:
        approval_rate = Decimal("0.00")

    completed = _with_status(transactions, TransactionStatus.COMPLETED.value)

    return DashboardStats(
        total_users=len(users),
        active_users=sum(1 for u in users if not u.is_blocked),
        total_balance=sum_amounts(users, "balance"),
        total_deposits=sum_amounts(
            t for t in completed if as_text(t.type) == TransactionType.DEPOSIT.value
        ),
        total_withdrawals=sum_amounts(
            t for t in completed if as_text(t.type) == TransactionType.WITHDRAWAL.value
        ),
        pending_withdrawals=len(pending_withdrawals),
        pending_kyc=kyc_counts[KYCStatus.PENDING.value],
        kyc_approval_rate=approval_rate,
        plan_distribution=plan_distribution(users, plans),
        recent_users=most_recent(users, recent_limit),
        recent_withdrawals=most_recent(pending_withdrawals, recent_limit),
    )


def plan_distribution(users: list[User], plans: list[Plan]) -> list[NamedValue]:
    """Users per plan, in plan order; users on unknown plans are not counted."""
    names = {plan.id: plan.name for plan in plans}
    counts: dict[str, int] = {plan.name: 0 for plan in plans}
    for user in users:
        name = names.get(user.plan_id)
        if name is not None:
            counts[name] += 1
    return [NamedValue(name=name, value=value) for name, value in counts.items()]


def activity_feed(
    users: list[User],
    withdrawals: list[Withdrawal],
    kyc_documents: list[KYCDocument],
    limit: int = 10,
) -> list[ActivityItem]:
    """
    Merge recent joins, withdrawal requests and KYC submissions into one
    newest-first feed. Withdrawals and KYC rows whose user is unknown are
    left out.
    """
    by_id = {user.id: user for user in users}
    feed: list[ActivityItem] = []

    for user in most_recent(users, limit):
        feed.append(ActivityItem(
            id=f"user-{user.id}",
            type="join",
            user_name=user.name,
            user_email=user.email,
            avatar=user.profile_pic_url or None,
            timestamp=user.created_at,
            details="joined the platform",
        ))

    for withdrawal in most_recent(withdrawals, limit):
        user = by_id.get(withdrawal.user_id)
        if user is None:
            continue
        feed.append(ActivityItem(
            id=f"withdrawal-{withdrawal.id}",
            type="withdraw",
            user_name=user.name,
            user_email=user.email,
            avatar=user.profile_pic_url or None,
            timestamp=withdrawal.created_at,
            details=f"requested a withdrawal of {round_amount(withdrawal.amount)}",
            amount=round_amount(withdrawal.amount),
        ))

    for doc in most_recent(kyc_documents, limit):
        user = by_id.get(doc.user_id)
        if user is None:
            continue
        feed.append(ActivityItem(
            id=f"kyc-{doc.id}",
            type="kyc",
            user_name=user.name,
            user_email=user.email,
            avatar=user.profile_pic_url or None,
            timestamp=doc.created_at,
            details=f"submitted KYC verification ({as_text(doc.status)})",
        ))

    return most_recent(feed, limit, date_field="timestamp")


def user_stats(users: list[User]) -> UserStats:
    blocked = sum(1 for u in users if u.is_blocked)
    return UserStats(
        total=len(users),
        active=len(users) - blocked,
        blocked=blocked,
        kyc_verified=sum(1 for u in users if u.is_kyc_verified),
    )


def kyc_stats(documents: list[KYCDocument], recent_limit: int = 5) -> KYCStats:
    counts = count_by(documents, "status", [s.value for s in KYCStatus])
    return KYCStats(
        pending_count=counts[KYCStatus.PENDING.value],
        approved_count=counts[KYCStatus.APPROVED.value],
        rejected_count=counts[KYCStatus.REJECTED.value],
        recent_submissions=most_recent(documents, recent_limit),
    )


def withdrawal_stats(withdrawals: list[Withdrawal]) -> WithdrawalStats:
    counts = count_by(withdrawals, "status", [s.value for s in WithdrawalStatus])
    return WithdrawalStats(
        total=len(withdrawals),
        pending=counts[WithdrawalStatus.PENDING.value],
        approved=counts[WithdrawalStatus.APPROVED.value],
        rejected=counts[WithdrawalStatus.REJECTED.value],
        pending_amount=sum_amounts(_with_status(withdrawals, WithdrawalStatus.PENDING.value)),
        approved_amount=sum_amounts(_with_status(withdrawals, WithdrawalStatus.APPROVED.value)),
    )


def payment_stats(payments: list[Payment]) -> PaymentStats:
    counts = count_by(payments, "status", [s.value for s in PaymentStatus])
    return PaymentStats(
        total_payments=len(payments),
        total_pending=counts[PaymentStatus.PENDING.value],
        total_completed=counts[PaymentStatus.COMPLETED.value],
        total_failed=counts[PaymentStatus.FAILED.value],
        total_manual=sum(1 for p in payments if as_text(p.gateway) == PaymentGateway.MANUAL.value),
        total_amount=sum_amounts(payments),
    )


def task_stats(tasks: list[Task]) -> TaskStats:
    return TaskStats(
        total_tasks=len(tasks),
        mandatory_tasks=sum(1 for t in tasks if t.is_mandatory),
        by_type=count_by(tasks, "task_type", [t.value for t in TaskType]),
    )


def plan_stats(plans: list[Plan]) -> PlanStats:
    paid = sorted((p for p in plans if p.price > 0), key=lambda p: p.price)
    stats = PlanStats(
        total_plans=len(plans),
        free_plans=sum(1 for p in plans if p.price == 0),
        paid_plans=len(paid),
    )
    if paid:
        stats.cheapest_paid = paid[0].name
        stats.cheapest_paid_price = round_amount(paid[0].price)
        stats.most_expensive = paid[-1].name
        stats.most_expensive_price = round_amount(paid[-1].price)
    return stats


def notification_stats(notifications: list[Notification]) -> NotificationStats:
    read = sum(1 for n in notifications if n.is_read)
    return NotificationStats(
        total=len(notifications),
        read=read,
        unread=len(notifications) - read,
        by_type=count_by(notifications, "type", [t.value for t in NotificationType]),
    )


def transaction_stats(transactions: list[Transaction]) -> TransactionStats:
    completed = _with_status(transactions, TransactionStatus.COMPLETED.value)
    return TransactionStats(
        total=len(transactions),
        by_status=count_by(transactions, "status", [s.value for s in TransactionStatus]),
        by_type=count_by(transactions, "type", [t.value for t in TransactionType]),
        completed_deposits=sum_amounts(
            t for t in completed if as_text(t.type) == TransactionType.DEPOSIT.value
        ),
        completed_withdrawals=sum_amounts(
            t for t in completed if as_text(t.type) == TransactionType.WITHDRAWAL.value
        ),
    )
