import logging
from functools import reduce
from typing import List, Mapping, Tuple

from .catalog import Catalog
from .domain import AppliedSet, Breakdown, DiscountRule, Totals
from .errors import UnknownItemError
from .ftypes import Either
from .pool import ItemPool, build_item_pool
from .rules import DEFAULT_RULES

logger = logging.getLogger(__name__)


def apply_discounts(
    pool: ItemPool, rules: Tuple[DiscountRule, ...] = DEFAULT_RULES
) -> Tuple[AppliedSet, ...]:
    """
    Жадно применяет наборы к пулу (пул мутируется).

    Каждое правило крутится, пока его trigger истинен, и только потом
    проверяется следующее. Правила только забирают позиции, поэтому к уже
    исчерпанному правилу возвращаться не нужно.
    InsufficientPoolError из take() не перехватывается.
    """
    applied: List[AppliedSet] = []
    for rule in rules:
        while rule.trigger(pool):
            taken = tuple(item_id for step in rule.takes for item_id in pool.take(step, rule.key))
            applied.append(AppliedSet(rule.key, rule.label, rule.amount, taken))
    return tuple(applied)


def explain_totals(
    catalog: Catalog,
    order: Mapping[str, int],
    rules: Tuple[DiscountRule, ...] = DEFAULT_RULES,
) -> Breakdown:
    """Расчёт с подробностями: состав каждого набора и остаток пула"""
    pool, subtotal = build_item_pool(catalog, order)
    applied = apply_discounts(pool, rules)
    discount = reduce(lambda acc, s: acc + s.amount, applied, 0)

    totals = Totals(
        subtotal=subtotal,
        discount=discount,
        # не обрезаем до нуля
        final=subtotal - discount,
        applied_sets=tuple(s.key for s in applied),
    )
    logger.debug(
        "Priced order %s: subtotal=%d discount=%d sets=%s",
        dict(order),
        subtotal,
        discount,
        totals.applied_sets,
    )
    return Breakdown(totals=totals, applied=applied, leftover=pool.remaining())


def compute_totals(
    catalog: Catalog,
    order: Mapping[str, int],
    rules: Tuple[DiscountRule, ...] = DEFAULT_RULES,
) -> Totals:
    """
    subtotal, скидка, итог и применённые наборы для заказа.
    Неизвестный id -> UnknownItemError.
    """
    return explain_totals(catalog, order, rules).totals


def try_compute_totals(
    catalog: Catalog,
    order: Mapping[str, int],
    rules: Tuple[DiscountRule, ...] = DEFAULT_RULES,
) -> Either[UnknownItemError, Totals]:
    """
    То же, что compute_totals, но ошибка ввода возвращается как Left.
    InsufficientPoolError (баг правил) по-прежнему пробрасывается.
    """
    try:
        return Either.right(compute_totals(catalog, order, rules))
    except UnknownItemError as exc:
        logger.info("Rejected order with unknown item %s", exc.item_id)
        return Either.left(exc)
