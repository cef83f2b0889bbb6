import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
import pytest
from festival.async_ops import audit_history_async, reprice_orders_async, run_history_audit
from festival.catalog import default_catalog
from festival.domain import HistoryEntry
from festival.engine import compute_totals


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def sample_entries():
    return [
        HistoryEntry(
            timestamp="2025-10-19T05:03:00.000Z",
            order={"butaman": 3},
            subtotal=750,
            discount=150,
            final=600,
            applied_sets=("food-trio",),
        ),
        HistoryEntry(
            timestamp="2025-10-19T05:02:00.000Z",
            order={"butaman": 2},
            subtotal=400,
            discount=100,
            final=300,
            applied_sets=("any-pair",),
        ),
        HistoryEntry(
            timestamp="2025-10-19T05:01:00.000Z",
            order={"retired": 1},
            subtotal=100,
            discount=0,
            final=100,
            applied_sets=(),
        ),
    ]


@pytest.mark.asyncio
async def test_reprice_orders_matches_sequential(catalog):
    orders = [{"butaman": n, "wonglok": n % 3} for n in range(1, 12)]
    result = await reprice_orders_async(catalog, orders)

    assert result == [compute_totals(catalog, o) for o in orders]


@pytest.mark.asyncio
async def test_audit_history_statuses(catalog, sample_entries):
    report = await audit_history_async(catalog, sample_entries)

    assert [r["status"] for r in report] == ["ok", "changed", "error"]
    assert report[1]["current_final"] == 400
    assert "retired" in report[2]["error"]


def test_run_history_audit_sync(catalog, sample_entries):
    report = run_history_audit(catalog, sample_entries[:1])
    assert report[0]["status"] == "ok"
