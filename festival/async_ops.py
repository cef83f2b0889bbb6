import asyncio
import logging
from typing import Dict, List, Mapping, Sequence, Tuple

from .catalog import Catalog
from .domain import DiscountRule, HistoryEntry, Totals
from .engine import compute_totals, try_compute_totals
from .rules import DEFAULT_RULES

logger = logging.getLogger(__name__)


# ============ Параллельный перерасчёт ============


async def reprice_orders_async(
    catalog: Catalog,
    orders: Sequence[Mapping[str, int]],
    rules: Tuple[DiscountRule, ...] = DEFAULT_RULES,
) -> List[Totals]:
    """
    Считает пачку заказов параллельно; порядок результатов = порядок заказов.
    Расчёты не делят состояние, поэтому gather безопасен.
    """

    async def price(order: Mapping[str, int]) -> Totals:
        await asyncio.sleep(0)
        return compute_totals(catalog, order, rules)

    return list(await asyncio.gather(*(price(o) for o in orders)))


async def audit_history_async(
    catalog: Catalog,
    entries: Sequence[HistoryEntry],
    rules: Tuple[DiscountRule, ...] = DEFAULT_RULES,
) -> List[Dict]:
    """
    Пересчитывает сохранённые записи по текущему каталогу:
    status = "ok" | "changed" (итог отличается) | "error" (позиции больше нет)
    """

    async def audit(entry: HistoryEntry) -> Dict:
        await asyncio.sleep(0)
        result = try_compute_totals(catalog, entry.order, rules)

        def on_error(err) -> Dict:
            return {
                "timestamp": entry.timestamp,
                "status": "error",
                "stored_final": entry.final,
                "current_final": None,
                "error": str(err),
            }

        def on_totals(totals: Totals) -> Dict:
            same = (
                totals.final == entry.final
                and totals.applied_sets == entry.applied_sets
            )
            return {
                "timestamp": entry.timestamp,
                "status": "ok" if same else "changed",
                "stored_final": entry.final,
                "current_final": totals.final,
                "error": None,
            }

        return result.fold(on_error, on_totals)

    report = list(await asyncio.gather(*(audit(e) for e in entries)))
    flagged = sum(1 for r in report if r["status"] != "ok")
    if flagged:
        logger.warning("History audit: %d of %d entries differ", flagged, len(report))
    return report


# ============ Синхронные обёртки для UI ============


def run_history_audit(
    catalog: Catalog,
    entries: Sequence[HistoryEntry],
    rules: Tuple[DiscountRule, ...] = DEFAULT_RULES,
) -> List[Dict]:
    return asyncio.run(audit_history_async(catalog, entries, rules))
