from typing import Iterator, Iterable
from collections import defaultdict
from .domain import HistoryEntry


## ленивый генератор: записи истории за день (ГГГГ-ММ-ДД, по UTC-метке)
def iter_entries_by_day(entries: Iterable[HistoryEntry], day: str) -> Iterator[HistoryEntry]:
    for entry in entries:
        if entry.timestamp.startswith(day):
            yield entry


## топ-k позиций по проданным штукам
def lazy_top_items(entries: Iterable[HistoryEntry], k: int) -> Iterator[tuple[str, int]]:
    sold = defaultdict(int)
    for entry in entries:
        for item_id, qty in entry.order.items():
            sold[item_id] += qty

    # при равенстве - по id, чтобы порядок был стабильным
    for item_id, qty in sorted(sold.items(), key=lambda x: (-x[1], x[0]))[:k]:
        yield (item_id, qty)
