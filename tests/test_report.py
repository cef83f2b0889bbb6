import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from datetime import datetime, timedelta, timezone

import pytest
from festival.domain import HistoryEntry
from festival.errors import EmptyHistoryError
from festival.lazy import iter_entries_by_day, lazy_top_items
from History_Service.report import (
    applied_set_counts,
    export_filename,
    export_history_csv,
    history_summary,
    sales_by_day,
)


@pytest.fixture
def entries():
    return (
        HistoryEntry(
            timestamp="2025-10-19T05:03:00.000Z",
            order={"shikuwasa": 1, "butaman": 2},
            subtotal=700,
            discount=200,
            final=500,
            applied_sets=("drink-trio",),
        ),
        HistoryEntry(
            timestamp="2025-10-18T09:00:00.000Z",
            order={"butaman": 4},
            subtotal=1000,
            discount=250,
            final=750,
            applied_sets=("food-trio", "any-pair"),
        ),
        HistoryEntry(
            timestamp="2025-10-18T08:00:00.000Z",
            order={"shikaman": 1},
            subtotal=350,
            discount=0,
            final=350,
            applied_sets=(),
        ),
    )


def test_export_history_csv(entries):
    csv_text = export_history_csv(entries[:1])
    assert csv_text == (
        "\ufeff"
        '"timestamp","subtotal","discount","final","applied_sets","order"\n'
        '"2025-10-19T05:03:00.000Z","700","200","500",'
        '"飲み物入り3品セット (-200)","{""shikuwasa"":1,""butaman"":2}"'
    )


def test_export_history_csv_summarizes_sets(entries):
    lines = export_history_csv(entries).split("\n")
    assert len(lines) == 4
    assert '"食品3品セット (-150) / 任意2品セット (-100)"' in lines[2]
    assert ',"",' in lines[3]


def test_export_empty_history():
    with pytest.raises(EmptyHistoryError):
        export_history_csv(())


def test_export_filename():
    assert export_filename(datetime(2025, 10, 19, 14, 3)) == "festival-history-2025-10-19-14-03.csv"


def test_export_filename_uses_utc():
    jst = timezone(timedelta(hours=9))
    # 08:30 по Токио это ещё предыдущий день в UTC
    assert export_filename(datetime(2025, 10, 20, 8, 30, tzinfo=jst)) == "festival-history-2025-10-19-23-30.csv"


def test_export_filename_defaults_to_current_utc_time(monkeypatch):
    class FrozenDatetime(datetime):
        @classmethod
        def now(cls, tz=None):
            return datetime(2025, 10, 19, 23, 30, tzinfo=timezone.utc).astimezone(tz)

    monkeypatch.setattr("History_Service.report.datetime", FrozenDatetime)
    assert export_filename() == "festival-history-2025-10-19-23-30.csv"


def test_history_summary(entries):
    summary = history_summary(entries)
    assert summary["orders"] == 3
    assert summary["gross_sales"] == 2050
    assert summary["total_discount"] == 450
    assert summary["net_sales"] == 1600
    assert summary["average_ticket"] == 533
    assert summary["sets"] == {"drink-trio": 1, "food-trio": 1, "any-pair": 1}


def test_history_summary_empty():
    assert history_summary(())["average_ticket"] == 0


def test_applied_set_counts_preserve_first_occurrence(entries):
    assert list(applied_set_counts(entries[1:2] + entries[:1])) == [
        "food-trio",
        "any-pair",
        "drink-trio",
    ]


def test_sales_by_day(entries):
    assert sales_by_day(entries) == {"2025-10-19": 500, "2025-10-18": 1100}


# Ленивые выборки


def test_iter_entries_by_day(entries):
    day = list(iter_entries_by_day(entries, "2025-10-18"))
    assert len(day) == 2
    assert list(iter_entries_by_day(entries, "2024-01-01")) == []


def test_lazy_top_items(entries):
    gen = lazy_top_items(entries, 2)
    assert hasattr(gen, "__next__")
    assert list(gen) == [("butaman", 6), ("shikaman", 1)]
