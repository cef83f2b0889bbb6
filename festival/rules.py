from typing import Callable, Optional, Tuple

from .catalog import DRINK, FOOD
from .domain import DiscountRule, Take
from .pool import ItemPool

Trigger = Callable[[ItemPool], bool]


# ============ Предикаты-замыкания ============


def at_least(n: int, category: Optional[str] = None) -> Trigger:
    """Пул содержит не меньше n единиц категории (None = всего)"""
    return lambda pool: pool.count(category) >= n


def all_of(*triggers: Trigger) -> Trigger:
    return lambda pool: all(t(pool) for t in triggers)


# ============ Наборы ларька ============

DRINK_TRIO = DiscountRule(
    key="drink-trio",
    label="飲み物入り3品セット (-200)",
    amount=200,
    trigger=all_of(at_least(3), at_least(1, DRINK)),
    takes=(Take(1, DRINK), Take(2)),
)

FOOD_TRIO = DiscountRule(
    key="food-trio",
    label="食品3品セット (-150)",
    amount=150,
    trigger=at_least(3, FOOD),
    takes=(Take(3, FOOD),),
)

ANY_PAIR = DiscountRule(
    key="any-pair",
    label="任意2品セット (-100)",
    amount=100,
    trigger=at_least(2),
    takes=(Take(2),),
)

# Порядок = приоритет. Перестановка меняет итоговую скидку.
DEFAULT_RULES: Tuple[DiscountRule, ...] = (DRINK_TRIO, FOOD_TRIO, ANY_PAIR)


def label_for(key: str, rules: Tuple[DiscountRule, ...] = DEFAULT_RULES) -> str:
    """Текст набора для кассира; неизвестный ключ возвращается как есть"""
    return next((r.label for r in rules if r.key == key), key)
