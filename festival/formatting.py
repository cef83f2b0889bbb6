from datetime import datetime, tzinfo
from typing import Callable, Dict, Iterable, Optional, Tuple

from .rules import label_for


def format_currency(value: int) -> str:
    """1234 -> '1,234円'"""
    return f"{value:,}円"


def format_discount(value: int) -> str:
    return f"-{format_currency(value)}"


def format_timestamp(iso: str, tz: Optional[tzinfo] = None) -> str:
    """ISO-метка истории -> '2025/10/19 14:03:00' в локальном (или заданном) поясе"""
    moment = datetime.fromisoformat(iso.replace("Z", "+00:00"))
    return moment.astimezone(tz).strftime("%Y/%m/%d %H:%M:%S")


def summarize_applied_sets(
    applied: Iterable[str], label: Optional[Callable[[str], str]] = None
) -> Tuple[str, ...]:
    """
    Группирует повторы по первому появлению: ('a', 'b', 'a') -> ('a ×2', 'b').
    label переводит ключ набора в текст (по умолчанию ключ как есть).
    """
    counts: Dict[str, int] = {}
    for key in applied:
        counts[key] = counts.get(key, 0) + 1

    render = label or (lambda key: key)
    return tuple(
        f"{render(key)} ×{count}" if count > 1 else render(key)
        for key, count in counts.items()
    )


def summarize_for_display(applied: Iterable[str]) -> Tuple[str, ...]:
    return summarize_applied_sets(applied, label_for)
