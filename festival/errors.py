from typing import Optional


class FestivalError(Exception):
    """Базовая ошибка расчёта заказа"""


class UnknownItemError(FestivalError):
    """Заказ ссылается на позицию, которой нет в каталоге (ошибка ввода)"""

    def __init__(self, item_id: str):
        super().__init__(f"Unknown product: {item_id}")
        self.item_id = item_id


class InsufficientPoolError(FestivalError):
    """
    Набор не удалось собрать, хотя его предикат сработал.
    Это баг в паре trigger/takes, а не ошибка ввода: никогда не перехватывается.
    """

    def __init__(self, rule: str, category: Optional[str], required: int, available: int):
        what = category or "any"
        super().__init__(
            f"Rule '{rule}' needs {required} item(s) of category '{what}', "
            f"pool has {available}"
        )
        self.rule = rule
        self.category = category
        self.required = required
        self.available = available


class CatalogError(FestivalError):
    """Некорректный каталог: дубли id, отрицательная цена, битый файл"""


class EmptyOrderError(FestivalError):
    def __init__(self):
        super().__init__("Order is empty")


class EmptyHistoryError(FestivalError):
    def __init__(self):
        super().__init__("History is empty")
