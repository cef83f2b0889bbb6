import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
import pytest
from festival.catalog import default_catalog
from festival.errors import EmptyOrderError, UnknownItemError
from festival.service import CheckoutService
from History_Service.history import (
    InMemoryHistoryStore,
    InMemoryOrderStore,
    JsonFileHistoryStore,
    JsonFileOrderStore,
)


@pytest.fixture
def service():
    return CheckoutService(default_catalog(), InMemoryOrderStore(), InMemoryHistoryStore(max_entries=2))


def test_price_normalizes_form_input(service):
    result = service.price({"butaman": "3", "wonglok": "0"})
    assert result.is_right
    assert result.value.applied_sets == ("food-trio",)


def test_checkout_records_history_and_order(service):
    result = service.checkout({"shikuwasa": 1, "butaman": 2}, ts="2025-10-19T05:03:00.000Z")

    assert result.is_right
    entry = result.value
    assert entry.final == 500
    assert service.history() == (entry,)
    assert service.orders.load() == {"shikuwasa": 1, "butaman": 2}


def test_checkout_empty_order(service):
    result = service.checkout({"butaman": 0})
    assert result.is_left
    assert isinstance(result.value, EmptyOrderError)
    assert service.history() == ()


def test_checkout_unknown_item_saves_nothing(service):
    result = service.checkout({"takoyaki": 1})
    assert isinstance(result.value, UnknownItemError)
    assert service.history() == ()
    assert service.orders.load() == {}


def test_history_bounded_through_service(service):
    for qty in (1, 2, 3):
        service.checkout({"butaman": qty})
    assert [e.order["butaman"] for e in service.history()] == [3, 2]


def test_explain_lists_set_members(service):
    breakdown = service.explain({"sugarcane": 1, "shikaman": 1, "butaman": 1})
    assert breakdown.applied[0].items == ("sugarcane", "butaman", "shikaman")


def test_restore_and_reset(tmp_path):
    def build():
        return CheckoutService(
            default_catalog(),
            JsonFileOrderStore(str(tmp_path / "order.json")),
            JsonFileHistoryStore(str(tmp_path / "history.json")),
        )

    build().save_draft({"butaman": 2})
    order, breakdown = build().restore()
    assert order == {"butaman": 2}
    assert breakdown.totals.final == 400
    assert breakdown.applied[0].items == ("butaman", "butaman")

    build().reset()
    assert build().restore() == ({}, None)


def test_restore_discards_stale_order(service):
    service.orders.save({"discontinued": 1})
    assert service.restore() == ({}, None)
    assert service.orders.load() == {}


def test_clear_history(service):
    service.checkout({"butaman": 1})
    service.clear_history()
    assert service.history() == ()


def test_breakdown_of_checked_out_order_matches_entry(service):
    """Состав наборов берётся из того же заказа, что ушёл в историю"""
    entry = service.checkout({"butaman": 3}).value
    breakdown = service.explain(entry.order)

    assert breakdown.totals.final == entry.final == 600
    assert breakdown.totals.applied_sets == entry.applied_sets == ("food-trio",)

    # после +1 напитка новый расчёт другой, сохранённый не меняется
    changed = service.explain({**entry.order, "wonglok": 1})
    assert changed.totals.applied_sets == ("drink-trio",)
    assert breakdown.applied[0].key == "food-trio"
