from typing import Dict, Mapping, Optional, Tuple

from .catalog import Catalog, in_category
from .domain import Take
from .errors import InsufficientPoolError


class ItemPool:
    """
    Рабочий мультисет одного расчёта: id -> сколько единиц ещё не ушло в наборы.
    Живёт только внутри compute_totals, наружу отдаётся снимком remaining().
    """

    def __init__(self, catalog: Catalog, counts: Optional[Mapping[str, int]] = None):
        self.catalog = catalog
        self._counts: Dict[str, int] = {}
        for item_id, qty in (counts or {}).items():
            self.add(item_id, qty)

    def add(self, item_id: str, qty: int) -> None:
        if qty <= 0:
            return
        self.catalog.get(item_id)
        self._counts[item_id] = self._counts.get(item_id, 0) + qty

    def total(self) -> int:
        return sum(self._counts.values())

    def count(self, category: Optional[str] = None) -> int:
        matches = in_category(category)
        return sum(self._counts.get(item.id, 0) for item in self.catalog if matches(item))

    def remaining(self) -> Tuple[Tuple[str, int], ...]:
        """Остаток в порядке каталога"""
        return tuple(
            (item.id, self._counts[item.id])
            for item in self.catalog
            if self._counts.get(item.id, 0) > 0
        )

    def pop_first(self, category: Optional[str] = None, rule: str = "") -> str:
        """Снимает одну единицу с первой подходящей позиции каталога"""
        matches = in_category(category)
        for item in self.catalog:
            if not matches(item):
                continue
            current = self._counts.get(item.id, 0)
            if current > 0:
                if current == 1:
                    del self._counts[item.id]
                else:
                    self._counts[item.id] = current - 1
                return item.id
        raise InsufficientPoolError(rule, category, 1, 0)

    def take(self, step: Take, rule: str = "") -> Tuple[str, ...]:
        available = self.count(step.category)
        if available < step.count:
            raise InsufficientPoolError(rule, step.category, step.count, available)
        return tuple(self.pop_first(step.category, rule) for _ in range(step.count))

    def __repr__(self) -> str:
        return f"ItemPool({dict(self.remaining())})"


def build_item_pool(catalog: Catalog, order: Mapping[str, int]) -> Tuple[ItemPool, int]:
    """
    Пул и subtotal по заказу. Позиции с количеством <= 0 пропускаются,
    неизвестный id -> UnknownItemError.
    """
    pool = ItemPool(catalog)
    subtotal = 0
    for item_id, qty in order.items():
        if qty <= 0:
            continue
        product = catalog.get(item_id)
        pool.add(item_id, qty)
        subtotal += product.price * qty
    return pool, subtotal
