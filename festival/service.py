import logging
from typing import Mapping, Optional, Tuple

from .catalog import Catalog
from .domain import Breakdown, DiscountRule, HistoryEntry, Totals
from .engine import explain_totals, try_compute_totals
from .errors import EmptyOrderError, FestivalError, UnknownItemError
from .ftypes import Either
from .order import is_empty, normalize_order
from .rules import DEFAULT_RULES
from History_Service.history import HistoryStore, OrderStore, make_entry

logger = logging.getLogger(__name__)


class CheckoutService:
    """Фасад кассы: расчёт, сохранение текущего заказа и истории"""

    def __init__(
        self,
        catalog: Catalog,
        order_store: OrderStore,
        history_store: HistoryStore,
        rules: Tuple[DiscountRule, ...] = DEFAULT_RULES,
    ):
        self.catalog = catalog
        self.orders = order_store
        self.history_store = history_store
        self.rules = rules

    def price(self, order: Mapping[str, int]) -> Either[FestivalError, Totals]:
        return try_compute_totals(self.catalog, normalize_order(order), self.rules)

    def explain(self, order: Mapping[str, int]) -> Breakdown:
        """Состав наборов для кассира (UnknownItemError пробрасывается)"""
        return explain_totals(self.catalog, normalize_order(order), self.rules)

    def checkout(
        self, order: Mapping[str, int], ts: Optional[str] = None
    ) -> Either[FestivalError, HistoryEntry]:
        """
        Считает заказ и пишет его в историю.
        Left(EmptyOrderError) для пустого заказа, Left(UnknownItemError) для чужого id.
        """
        cleaned = normalize_order(order)
        if is_empty(cleaned):
            return Either.left(EmptyOrderError())

        def record(totals: Totals) -> Either[FestivalError, HistoryEntry]:
            self.orders.save(cleaned)
            entry = make_entry(cleaned, totals, ts)
            self.history_store.add(entry)
            logger.info("Checkout %s: final=%d sets=%s", entry.timestamp, entry.final, entry.applied_sets)
            return Either.right(entry)

        return try_compute_totals(self.catalog, cleaned, self.rules).bind(record)

    def save_draft(self, order: Mapping[str, int]) -> None:
        self.orders.save(normalize_order(order))

    def restore(self) -> Tuple[dict, Optional[Breakdown]]:
        """
        Сохранённый заказ и его расчёт с составом наборов.
        Заказ с позицией, которой больше нет в каталоге, отбрасывается.
        """
        order = self.orders.load()
        if is_empty(order):
            return {}, None
        try:
            breakdown = explain_totals(self.catalog, order, self.rules)
        except UnknownItemError as exc:
            logger.warning("Discarding saved order: %s", exc)
            self.orders.save({})
            return {}, None
        return order, breakdown

    def reset(self) -> None:
        self.orders.save({})

    def history(self) -> Tuple[HistoryEntry, ...]:
        return self.history_store.entries()

    def clear_history(self) -> None:
        self.history_store.clear()
