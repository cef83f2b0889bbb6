import re
from typing import Dict, Mapping

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_quantity(value: object) -> int:
    """
    Количество из поля формы: "3" -> 3, "12шт" -> 12, "" / None / "abc" -> 0.
    Отрицательные значения прижимаются к нулю.
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        return max(0, int(value))
    match = _LEADING_INT.match(str(value))
    return max(0, int(match.group(1))) if match else 0


def normalize_order(raw: Mapping[str, object]) -> Dict[str, int]:
    """Новый заказ только из положительных количеств"""
    parsed = {item_id: parse_quantity(value) for item_id, value in raw.items()}
    return {item_id: qty for item_id, qty in parsed.items() if qty > 0}


def adjust_quantity(order: Mapping[str, int], item_id: str, delta: int) -> Dict[str, int]:
    """Кнопки +/-: возвращает новый заказ, количество не уходит ниже нуля"""
    updated = dict(order)
    qty = max(0, updated.get(item_id, 0) + delta)
    if qty > 0:
        updated[item_id] = qty
    else:
        updated.pop(item_id, None)
    return updated


def is_empty(order: Mapping[str, int]) -> bool:
    return not any(qty > 0 for qty in order.values())
