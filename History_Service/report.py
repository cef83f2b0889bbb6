import csv
import io
import json
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple
from functools import reduce
from festival.domain import HistoryEntry
from festival.errors import EmptyHistoryError
from festival.formatting import summarize_for_display

CSV_HEADER = ("timestamp", "subtotal", "discount", "final", "applied_sets", "order")


# ============ Выгрузка CSV ============


def history_rows(entries: Sequence[HistoryEntry]) -> List[Tuple]:
    """Строки CSV без заголовка, в порядке истории (новые первыми)"""
    return [
        (
            e.timestamp,
            e.subtotal,
            e.discount,
            e.final,
            " / ".join(summarize_for_display(e.applied_sets)),
            json.dumps(e.order, ensure_ascii=False, separators=(",", ":")),
        )
        for e in entries
    ]


def export_history_csv(entries: Sequence[HistoryEntry]) -> str:
    """
    CSV для Excel: BOM в начале, все ячейки в кавычках, строки через \\n.
    Пустая история -> EmptyHistoryError.
    """
    if not entries:
        raise EmptyHistoryError()

    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    writer.writerows(history_rows(entries))
    return "\ufeff" + buf.getvalue().rstrip("\n")


def export_filename(now: Optional[datetime] = None) -> str:
    """
    festival-history-2025-10-19-14-03.csv, время в UTC как у меток истории.
    Наивное время считается уже UTC.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return f"festival-history-{now.strftime('%Y-%m-%d-%H-%M')}.csv"


# ============ Сводки ============


def applied_set_counts(entries: Sequence[HistoryEntry]) -> Dict[str, int]:
    """Сколько раз сработал каждый набор, в порядке первого появления"""

    def count_sets(acc: dict, entry: HistoryEntry) -> dict:
        return reduce(lambda inner, key: {**inner, key: inner.get(key, 0) + 1}, entry.applied_sets, acc)

    return reduce(count_sets, entries, {})


def sales_by_day(entries: Sequence[HistoryEntry]) -> Dict[str, int]:
    """Итоговая выручка по дням: {ГГГГ-ММ-ДД: сумма final}"""

    def accumulate_by_day(acc: dict, entry: HistoryEntry) -> dict:
        day = entry.timestamp[:10]
        return {**acc, day: acc.get(day, 0) + entry.final}

    return reduce(accumulate_by_day, entries, {})


def history_summary(entries: Sequence[HistoryEntry]) -> dict:
    """Сводка по смене"""
    gross = reduce(lambda acc, e: acc + e.subtotal, entries, 0)
    discount = reduce(lambda acc, e: acc + e.discount, entries, 0)
    net = reduce(lambda acc, e: acc + e.final, entries, 0)

    return {
        "orders": len(entries),
        "gross_sales": gross,
        "total_discount": discount,
        "net_sales": net,
        "average_ticket": net // len(entries) if entries else 0,
        "sets": applied_set_counts(entries),
    }
