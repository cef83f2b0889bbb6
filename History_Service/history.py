import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Tuple

from festival.config import MAX_HISTORY, Paths
from festival.domain import HistoryEntry, Totals
from festival.order import normalize_order

logger = logging.getLogger(__name__)


# ============ Записи истории ============


def now_iso() -> str:
    """Метка как у Date.toISOString: 2025-10-19T05:03:00.123Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def make_entry(order: Mapping[str, int], totals: Totals, ts: Optional[str] = None) -> HistoryEntry:
    return HistoryEntry(
        timestamp=ts or now_iso(),
        order=dict(order),
        subtotal=totals.subtotal,
        discount=totals.discount,
        final=totals.final,
        applied_sets=tuple(totals.applied_sets),
    )


def entry_to_dict(entry: HistoryEntry) -> Dict:
    return {
        "timestamp": entry.timestamp,
        "order": dict(entry.order),
        "subtotal": entry.subtotal,
        "discount": entry.discount,
        "final": entry.final,
        "appliedSets": list(entry.applied_sets),
    }


def entry_from_dict(raw: Mapping) -> HistoryEntry:
    """KeyError/TypeError/ValueError на битой записи"""
    return HistoryEntry(
        timestamp=str(raw["timestamp"]),
        order={str(k): int(v) for k, v in raw["order"].items()},
        subtotal=int(raw["subtotal"]),
        discount=int(raw["discount"]),
        final=int(raw["final"]),
        applied_sets=tuple(str(s) for s in raw.get("appliedSets", [])),
    )


# ============ Хранилища ============


class OrderStore(ABC):
    """Текущий (несохранённый в историю) заказ"""

    @abstractmethod
    def save(self, order: Mapping[str, int]) -> None:
        pass

    @abstractmethod
    def load(self) -> Dict[str, int]:
        pass


class HistoryStore(ABC):
    """Ограниченная история расчётов, новые записи первыми"""

    def __init__(self, max_entries: int = MAX_HISTORY):
        self.max_entries = max_entries

    @abstractmethod
    def entries(self) -> Tuple[HistoryEntry, ...]:
        pass

    @abstractmethod
    def _write(self, entries: Tuple[HistoryEntry, ...]) -> None:
        pass

    def add(self, entry: HistoryEntry) -> Tuple[HistoryEntry, ...]:
        updated = ((entry,) + self.entries())[: self.max_entries]
        self._write(updated)
        return updated

    def clear(self) -> None:
        self._write(())


class InMemoryOrderStore(OrderStore):
    def __init__(self):
        self._order: Dict[str, int] = {}

    def save(self, order: Mapping[str, int]) -> None:
        self._order = dict(order)

    def load(self) -> Dict[str, int]:
        return dict(self._order)


class InMemoryHistoryStore(HistoryStore):
    def __init__(self, max_entries: int = MAX_HISTORY):
        super().__init__(max_entries)
        self._entries: Tuple[HistoryEntry, ...] = ()

    def entries(self) -> Tuple[HistoryEntry, ...]:
        return self._entries

    def _write(self, entries: Tuple[HistoryEntry, ...]) -> None:
        self._entries = tuple(entries)


def _read_json(path: str, default):
    if not os.path.exists(path):
        return default
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Failed to read %s: %s", path, exc)
        return default


def _write_json(path: str, data) -> None:
    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
    except OSError as exc:
        logger.warning("Failed to save %s: %s", path, exc)


class JsonFileOrderStore(OrderStore):
    """Заказ в JSON-файле. Пустой заказ удаляет файл. Ошибки диска только логируются."""

    def __init__(self, path: str = Paths.ORDER_FILE):
        self.path = path

    def save(self, order: Mapping[str, int]) -> None:
        if not order:
            try:
                if os.path.exists(self.path):
                    os.remove(self.path)
            except OSError as exc:
                logger.warning("Failed to remove %s: %s", self.path, exc)
            return
        _write_json(self.path, dict(order))

    def load(self) -> Dict[str, int]:
        raw = _read_json(self.path, {})
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed saved order in %s", self.path)
            return {}
        return normalize_order(raw)


class JsonFileHistoryStore(HistoryStore):
    def __init__(self, path: str = Paths.HISTORY_FILE, max_entries: int = MAX_HISTORY):
        super().__init__(max_entries)
        self.path = path

    def entries(self) -> Tuple[HistoryEntry, ...]:
        raw = _read_json(self.path, [])
        if not isinstance(raw, list):
            logger.warning("Ignoring malformed history in %s", self.path)
            return ()

        loaded: List[HistoryEntry] = []
        for item in raw:
            try:
                loaded.append(entry_from_dict(item))
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                logger.warning("Skipping malformed history entry %r: %s", item, exc)
        return tuple(loaded[: self.max_entries])

    def _write(self, entries: Tuple[HistoryEntry, ...]) -> None:
        _write_json(self.path, [entry_to_dict(e) for e in entries])
