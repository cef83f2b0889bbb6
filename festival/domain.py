from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple


@dataclass(frozen=True)
class CatalogItem:
    id: str
    name: str
    price: int  # иены, без дробной части
    category: str  # "food" | "drink"


@dataclass(frozen=True)
class Take:
    """Шаг поглощения: count единиц категории category (None = любая)"""

    count: int
    category: Optional[str] = None


@dataclass(frozen=True)
class DiscountRule:
    """
    Правило набора (сет):
    - trigger: предикат над пулом, решает применим ли набор
    - takes: какие единицы удаляются из пула, по порядку
    """

    key: str
    label: str
    amount: int
    trigger: Callable = field(compare=False)
    takes: Tuple[Take, ...]

    def __post_init__(self):
        # каждое срабатывание обязано уменьшать пул, иначе цикл не завершится
        if not self.takes or any(t.count <= 0 for t in self.takes):
            raise ValueError(f"Rule '{self.key}' must take at least one item per step")


@dataclass(frozen=True)
class AppliedSet:
    key: str
    label: str
    amount: int
    items: Tuple[str, ...]  # id позиций в порядке изъятия


@dataclass(frozen=True)
class Totals:
    subtotal: int
    discount: int
    final: int
    applied_sets: Tuple[str, ...]


@dataclass(frozen=True)
class Breakdown:
    """Totals плюс подробности: какие позиции ушли в какой набор и что осталось"""

    totals: Totals
    applied: Tuple[AppliedSet, ...]
    leftover: Tuple[Tuple[str, int], ...]


@dataclass(frozen=True)
class HistoryEntry:
    timestamp: str  # ISO-8601, UTC
    order: Dict[str, int]
    subtotal: int
    discount: int
    final: int
    applied_sets: Tuple[str, ...]
