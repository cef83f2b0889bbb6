# festival/config.py
from __future__ import annotations
from dataclasses import dataclass
import logging
import os

ROOT: str = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

DATA_DIR: str = os.getenv("FESTIVAL_DATA_DIR", os.path.join(ROOT, "data"))
MAX_HISTORY: int = int(os.getenv("FESTIVAL_MAX_HISTORY", "50"))
# пустая строка = встроенный каталог ларька
CATALOG_PATH: str = os.getenv("FESTIVAL_CATALOG_PATH", "")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class Paths:
    DATA_DIR: str = DATA_DIR
    ORDER_FILE: str = os.path.join(DATA_DIR, "festival-order.json")
    HISTORY_FILE: str = os.path.join(DATA_DIR, "festival-history.json")


def configure_logging(level: str | None = None) -> logging.Logger:
    """Настраивает корневой логгер один раз (модули используют getLogger(__name__))"""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
    return logging.getLogger("festival")
