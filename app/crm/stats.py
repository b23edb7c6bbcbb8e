"""
Dashboard and report statistics.

Everything here is derived from the store's current contents on each call:
no counters are maintained between calls and nothing is cached.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass
from datetime import datetime

from app.crm.constants import (
    CUSTOMER_ACTIVE,
    CUSTOMER_INACTIVE,
    GROWTH_MONTHS,
    MISSING_LABEL,
    TASK_COMPLETED,
    TASK_PENDING,
    TASK_POSTPONED,
    UNDEFINED_SECTOR,
)
from app.crm.storage import MemStorage


@dataclass(frozen=True)
class CustomerStats:
    total_customers: int
    active_customers: int
    monthly_new_customers: int


@dataclass(frozen=True)
class TaskStats:
    pending_tasks: int
    completed_tasks: int
    postponed_tasks: int

    @property
    def total(self) -> int:
        return self.pending_tasks + self.completed_tasks + self.postponed_tasks


@dataclass(frozen=True)
class LabelCount:
    label: str
    count: int


def _month_key(value: datetime) -> tuple[int, int]:
    return value.year, value.month


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Calendar arithmetic on (year, month); delta may be negative."""
    idx = year * 12 + (month - 1) + delta
    return idx // 12, idx % 12 + 1


def customer_stats(store: MemStorage, now: datetime | None = None) -> CustomerStats:
    now = now or store.now()
    current = _month_key(now)
    customers = store.list_customers()
    return CustomerStats(
        total_customers=len(customers),
        active_customers=sum(1 for c in customers if c.status == CUSTOMER_ACTIVE),
        monthly_new_customers=sum(1 for c in customers if _month_key(c.created_at) == current),
    )


def task_stats(store: MemStorage) -> TaskStats:
    counts = Counter(t.status for t in store.list_tasks())
    return TaskStats(
        pending_tasks=counts[TASK_PENDING],
        completed_tasks=counts[TASK_COMPLETED],
        postponed_tasks=counts[TASK_POSTPONED],
    )


def customer_growth(store: MemStorage, now: datetime | None = None, months: int = GROWTH_MONTHS) -> list[int]:
    """
    New customers per calendar month, oldest first; the last bucket is the
    month containing `now`.
    """
    now = now or store.now()
    buckets = [_shift_month(now.year, now.month, -offset) for offset in range(months - 1, -1, -1)]
    counts = Counter(_month_key(c.created_at) for c in store.list_customers())
    return [counts.get(b, 0) for b in buckets]


# ---- report breakdowns ----


def customers_by_status(store: MemStorage) -> dict[str, int]:
    counts = Counter(c.status for c in store.list_customers())
    return {CUSTOMER_ACTIVE: counts[CUSTOMER_ACTIVE], CUSTOMER_INACTIVE: counts[CUSTOMER_INACTIVE]}


def customers_by_sector(store: MemStorage) -> list[LabelCount]:
    # Sectors keep first-seen order, matching the report chart.
    counts: dict[str, int] = {}
    for c in store.list_customers():
        sector = (c.sector or "").strip() or UNDEFINED_SECTOR
        counts[sector] = counts.get(sector, 0) + 1
    return [LabelCount(label, n) for label, n in counts.items()]


def _labelled(counts: Counter, label_for) -> list[LabelCount]:
    """
    Id counts -> labels, most common first. Ids that no longer resolve share
    one MISSING_LABEL bucket.
    """
    merged: Counter = Counter()
    labels: dict[object, str] = {}
    for key, n in counts.items():
        label = label_for(key)
        bucket = key if label is not None else None
        labels[bucket] = label if label is not None else MISSING_LABEL
        merged[bucket] += n
    return [LabelCount(labels[b], n) for b, n in merged.most_common()]


def tasks_by_assignee(store: MemStorage) -> list[LabelCount]:
    counts = Counter(t.assigned_to for t in store.list_tasks() if t.assigned_to is not None)

    def label_for(user_id: int) -> str | None:
        user = store.get_user(user_id)
        return user.full_name if user else None

    return _labelled(counts, label_for)


def tasks_by_customer(store: MemStorage) -> list[LabelCount]:
    counts = Counter(t.customer_id for t in store.list_tasks() if t.customer_id is not None)

    def label_for(customer_id: int) -> str | None:
        customer = store.get_customer(customer_id)
        return customer.company_name if customer else None

    return _labelled(counts, label_for)


def report_summary(store: MemStorage) -> dict:
    ts = task_stats(store)
    return {
        "customersByStatus": customers_by_status(store),
        "customersBySector": [asdict(x) for x in customers_by_sector(store)],
        "tasksByStatus": {
            TASK_PENDING: ts.pending_tasks,
            TASK_COMPLETED: ts.completed_tasks,
            TASK_POSTPONED: ts.postponed_tasks,
        },
        "tasksByAssignee": [asdict(x) for x in tasks_by_assignee(store)],
        "tasksByCustomer": [asdict(x) for x in tasks_by_customer(store)],
    }
