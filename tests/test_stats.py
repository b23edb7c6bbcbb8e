"""Tests for dashboard/report statistics."""
from datetime import datetime

import pytest

from app.crm.stats import (
    CustomerStats,
    LabelCount,
    customer_growth,
    customer_stats,
    customers_by_sector,
    customers_by_status,
    task_stats,
    tasks_by_assignee,
    tasks_by_customer,
)
from app.crm.storage import MemStorage


class ManualClock:
    def __init__(self, value: datetime):
        self.value = value

    def __call__(self) -> datetime:
        return self.value


NOW = datetime(2026, 3, 15, 12, 0, 0)


@pytest.fixture()
def clock():
    return ManualClock(NOW)


@pytest.fixture()
def store(clock):
    return MemStorage(clock=clock)


def _add_customers(store, clock, when: datetime, n: int, status: str = "active"):
    clock.value = when
    for i in range(n):
        store.create_customer(company_name=f"C{when:%Y%m}-{i}", contact_name="x", status=status)
    clock.value = NOW


def test_empty_store_is_all_zero(store):
    assert customer_stats(store, now=NOW) == CustomerStats(0, 0, 0)
    ts = task_stats(store)
    assert (ts.pending_tasks, ts.completed_tasks, ts.postponed_tasks) == (0, 0, 0)
    assert customer_growth(store, now=NOW) == [0, 0, 0, 0, 0, 0]
    assert customers_by_sector(store) == []


def test_monthly_new_and_growth_series(store, clock):
    _add_customers(store, clock, datetime(2026, 3, 1), 3)
    _add_customers(store, clock, datetime(2026, 2, 27), 2, status="inactive")
    # nothing in January
    _add_customers(store, clock, datetime(2025, 10, 5), 1)
    # outside the window
    _add_customers(store, clock, datetime(2025, 9, 30), 4)
    # same month, previous year: not "this month"
    _add_customers(store, clock, datetime(2025, 3, 15), 1)

    cs = customer_stats(store, now=NOW)
    assert cs.total_customers == 11
    assert cs.active_customers == 9
    assert cs.monthly_new_customers == 3

    series = customer_growth(store, now=NOW)
    assert len(series) == 6
    # Oct, Nov, Dec, Jan, Feb, Mar
    assert series == [1, 0, 0, 0, 2, 3]


def test_growth_window_crosses_year_boundary(store, clock):
    _add_customers(store, clock, datetime(2025, 8, 31, 23, 59), 1)
    _add_customers(store, clock, datetime(2025, 12, 31), 2)
    _add_customers(store, clock, datetime(2026, 1, 1), 1)

    assert customer_growth(store, now=datetime(2026, 1, 10)) == [1, 0, 0, 0, 2, 1]


def test_growth_uses_calendar_months_on_month_end(store, clock):
    # On the 31st, "one month back" is still February, not early March.
    _add_customers(store, clock, datetime(2026, 2, 10), 1)
    assert customer_growth(store, now=datetime(2026, 3, 31))[-2:] == [1, 0]


def test_stats_default_to_store_clock(store, clock):
    _add_customers(store, clock, NOW, 2)
    assert customer_stats(store).monthly_new_customers == 2
    assert customer_growth(store)[-1] == 2


def test_task_partition_sums_to_total(store):
    for status in ("pending", "pending", "completed", "postponed"):
        store.create_task(title=status, status=status)

    ts = task_stats(store)
    assert (ts.pending_tasks, ts.completed_tasks, ts.postponed_tasks) == (2, 1, 1)
    assert ts.total == len(store.list_tasks())


def test_customers_by_status_and_sector(store):
    store.create_customer(company_name="a", contact_name="x", sector="Retail")
    store.create_customer(company_name="b", contact_name="x", sector="Energy", status="inactive")
    store.create_customer(company_name="c", contact_name="x", sector="Retail")
    store.create_customer(company_name="d", contact_name="x")

    assert customers_by_status(store) == {"active": 3, "inactive": 1}
    assert customers_by_sector(store) == [
        LabelCount("Retail", 2),
        LabelCount("Energy", 1),
        LabelCount("Tanımlanmamış", 1),
    ]


def test_task_breakdowns_resolve_names_and_tolerate_dangling_ids(store):
    alice = store.create_user(username="alice", password="pw", full_name="Alice")
    bob = store.create_user(username="bob", password="pw", full_name="Bob")
    acme = store.create_customer(company_name="Acme", contact_name="x")

    store.create_task(title="1", assigned_to=alice.id, customer_id=acme.id)
    store.create_task(title="2", assigned_to=alice.id, customer_id=acme.id)
    store.create_task(title="3", assigned_to=bob.id, customer_id=999)
    store.create_task(title="4")
    store.delete_user(bob.id)

    assert tasks_by_assignee(store) == [LabelCount("Alice", 2), LabelCount("-", 1)]
    assert tasks_by_customer(store) == [LabelCount("Acme", 2), LabelCount("-", 1)]


def test_dangling_ids_share_one_missing_bucket(store):
    acme = store.create_customer(company_name="Acme", contact_name="x")
    store.create_task(title="1", customer_id=acme.id, assigned_to=1)
    store.create_task(title="2", customer_id=998, assigned_to=41)
    store.create_task(title="3", customer_id=999, assigned_to=42)
    store.create_task(title="4", customer_id=999, assigned_to=42)

    assert tasks_by_customer(store) == [LabelCount("-", 3), LabelCount("Acme", 1)]
    assert tasks_by_assignee(store) == [LabelCount("-", 4)]
