import json
import logging
from typing import Callable, Dict, Iterable, Iterator, Optional, Tuple

from .domain import CatalogItem
from .errors import CatalogError, UnknownItemError
from .ftypes import Maybe

logger = logging.getLogger(__name__)

FOOD = "food"
DRINK = "drink"

# Порядок важен: при выборе "любых" позиций берутся первые по списку
FESTIVAL_ITEMS: Tuple[CatalogItem, ...] = (
    CatalogItem(id="butaman", name="豚まん", price=250, category=FOOD),
    CatalogItem(id="shikaman", name="鹿まん", price=350, category=FOOD),
    CatalogItem(id="shoronpo", name="小籠包", price=250, category=FOOD),
    CatalogItem(id="shikuwasa", name="シークワーサー", price=200, category=DRINK),
    CatalogItem(id="sugarcane", name="サトウキビジュース", price=350, category=DRINK),
    CatalogItem(id="wonglok", name="王老吉", price=400, category=DRINK),
)


class Catalog:
    """
    Упорядоченный неизменяемый каталог с индексом по id.
    Передаётся в движок явно, глобального индекса нет.
    """

    def __init__(self, items: Iterable[CatalogItem]):
        items = tuple(items)
        index: Dict[str, CatalogItem] = {}
        for item in items:
            if item.id in index:
                raise CatalogError(f"Duplicate catalog id: {item.id}")
            if isinstance(item.price, bool) or not isinstance(item.price, int):
                raise CatalogError(f"Price for {item.id} must be an integer: {item.price!r}")
            if item.price < 0:
                raise CatalogError(f"Negative price for {item.id}: {item.price}")
            index[item.id] = item
        self._items = items
        self._index = index

    @property
    def items(self) -> Tuple[CatalogItem, ...]:
        return self._items

    def __iter__(self) -> Iterator[CatalogItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._index

    def find(self, item_id: str) -> Maybe[CatalogItem]:
        return Maybe.of(self._index.get(item_id))

    def get(self, item_id: str) -> CatalogItem:
        found = self._index.get(item_id)
        if found is None:
            raise UnknownItemError(item_id)
        return found

    def filter(self, predicate: Callable[[CatalogItem], bool]) -> Tuple[CatalogItem, ...]:
        return tuple(filter(predicate, self._items))

    def categories(self) -> Tuple[str, ...]:
        """Категории в порядке первого появления"""
        return tuple(dict.fromkeys(i.category for i in self._items))

    def __repr__(self) -> str:
        return f"Catalog({', '.join(i.id for i in self._items)})"


# ============ Фильтры-замыкания ============


def in_category(category: Optional[str]) -> Callable[[CatalogItem], bool]:
    """Фильтр по категории; None пропускает всё"""
    if category is None:
        return lambda item: True
    return lambda item: item.category == category


# ============ Загрузка ============


def default_catalog() -> Catalog:
    return Catalog(FESTIVAL_ITEMS)


def load_catalog(path: str) -> Catalog:
    """
    Читает каталог из JSON вида {"items": [{"id", "name", "price", "category"}, ...]}
    Порядок в файле становится порядком каталога.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        raise CatalogError(f"Cannot read catalog {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise CatalogError(f"Catalog {path} must be a JSON object")

    def _to_item(raw: dict) -> CatalogItem:
        try:
            return CatalogItem(
                id=str(raw["id"]),
                name=str(raw.get("name", raw["id"])),
                # тип цены проверяет Catalog
                price=raw["price"],
                category=str(raw["category"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise CatalogError(f"Malformed catalog entry {raw!r}") from exc

    catalog = Catalog(map(_to_item, data.get("items", [])))
    logger.info("Loaded catalog from %s: %d items", path, len(catalog))
    return catalog
