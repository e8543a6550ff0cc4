import logging
from datetime import date, timedelta

import pytest

from pharmaflow.models.drug import Drug
from pharmaflow.models.stock_movement import StockMovement
from pharmaflow.services import inventory_service, sales_service
from pharmaflow.schemas.sale import CartItem
from tests.conftest import cart_sale


@pytest.mark.parametrize("raw, expected", [
    (10, 10),
    (2.5, 3),
    (2.4, 2),
    (-5, 0),
    (float("nan"), 0),
    (float("inf"), 0),
    ("abc", 0),
    (None, 0),
])
def test_validate_stock(raw, expected):
    assert inventory_service.validate_stock(raw) == expected


def test_units_for_packs_and_units():
    assert inventory_service.units_for(2, False, 24) == 48
    assert inventory_service.units_for(5, True, 24) == 5
    assert inventory_service.units_for(3, False, None) == 3


def test_format_stock():
    assert inventory_service.format_stock(0, 20) == "Out of Stock"
    assert inventory_service.format_stock(40, 20) == "2 Packs"
    assert inventory_service.format_stock(50, 20) == "2.5 Packs"
    assert inventory_service.format_stock(7, 1) == "7 Packs"


def test_create_drug_assigns_internal_code(make_drug):
    first = make_drug(name="Panadol")
    second = make_drug(name="Brufen")
    assert first.internal_code == "000001"
    assert second.internal_code == "000002"


@pytest.mark.parametrize("data, message", [
    ({"name": "A"}, "name"),
    ({"name": "Brufen", "price": -1}, "price"),
    ({"name": "Brufen", "stock": -3}, "negative"),
    ({"name": "Brufen", "units_per_pack": 0}, "Units per pack"),
    ({"name": "Brufen", "internal_code": "12AB"}, "6 digits"),
])
def test_create_drug_validation(db, data, message):
    with pytest.raises(ValueError, match=message):
        inventory_service.create_drug(db, data)


def test_stock_change_clamps_at_zero_and_logs(db, make_drug, caplog):
    drug = make_drug(stock=10, units_per_pack=10)
    with caplog.at_level(logging.ERROR, logger="pharmaflow.services.inventory_service"):
        movement = inventory_service.apply_stock_change(db, drug, -25, "sale", reference_id="100001")
    db.commit()

    assert drug.stock == 0
    assert movement.quantity == -10
    assert movement.previous_stock == 10
    assert "Negative stock" in caplog.text


def test_restock_adds_packs_as_units(db, make_drug):
    drug = make_drug(stock=0, units_per_pack=20)
    inventory_service.restock(db, drug, 3)
    assert drug.stock == 60
    assert db.query(StockMovement).filter_by(drug_id=drug.id, movement_type="restock").count() == 1


def test_adjust_stock_records_difference(db, make_drug):
    drug = make_drug(stock=100)
    movement = inventory_service.adjust_stock(db, drug, 90, "Counted shelf")
    assert drug.stock == 90
    assert movement.quantity == -10
    with pytest.raises(ValueError, match="reason"):
        inventory_service.adjust_stock(db, drug, 80, "  ")


def test_update_drug_stock_goes_through_ledger(db, make_drug):
    drug = make_drug(stock=100)
    inventory_service.update_drug(db, drug, {"stock": 120, "price": 50})
    assert drug.stock == 120
    assert float(drug.price) == 50
    movement = db.query(StockMovement).filter_by(drug_id=drug.id, movement_type="adjustment").one()
    assert movement.quantity == 20


def test_check_stock_availability(db, make_drug):
    drug = make_drug(stock=30, units_per_pack=24)
    ok = [CartItem(drug_id=drug.id, quantity=1, price=48)]
    short = [CartItem(drug_id=drug.id, quantity=2, price=48), CartItem(drug_id=999, quantity=1, price=1)]

    assert inventory_service.check_stock_availability(db, ok) == []
    problems = inventory_service.check_stock_availability(db, short)
    assert len(problems) == 2
    assert problems[0]["requested"] == 48
    assert problems[0]["available"] == 30
    assert drug.stock == 30


def test_low_stock_and_expiring(db, make_drug):
    today = date(2026, 1, 1)
    low = make_drug(name="Low", stock=24, units_per_pack=24)
    make_drug(name="Plenty", stock=24 * 50, units_per_pack=24)
    soon = make_drug(name="Soon", stock=10, expiry_date=today + timedelta(days=30))
    make_drug(name="Later", stock=10, expiry_date=today + timedelta(days=400))
    make_drug(name="Empty", stock=0, expiry_date=today + timedelta(days=5))

    low_names = [d.name for d in inventory_service.low_stock_drugs(db)]
    assert "Low" in low_names and "Plenty" not in low_names
    assert low.id in {d.id for d in inventory_service.low_stock_drugs(db, threshold_packs=2)}

    expiring = inventory_service.expiring_drugs(db, days=90, today=today)
    assert [d.id for d in expiring] == [soon.id]


def test_search_by_generic_and_internal_code(db, make_drug):
    drug = make_drug(name="Panadol", generic_name="Paracetamol")
    make_drug(name="Brufen", generic_name="Ibuprofen")
    assert [d.id for d in inventory_service.list_drugs(db, search="paracet")] == [drug.id]
    assert [d.id for d in inventory_service.list_drugs(db, search=drug.internal_code)] == [drug.id]


def test_delete_drug_with_stock_history(db, make_drug):
    drug = make_drug(stock=240, units_per_pack=24)
    inventory_service.restock(db, drug, 2)
    sales_service.complete_sale(db, cart_sale((drug, 1, False), total=48))
    drug_id = drug.id
    assert db.query(StockMovement).filter(StockMovement.drug_id == drug_id).count() == 2

    inventory_service.delete_drug(db, drug)

    assert db.get(Drug, drug_id) is None
    assert db.query(StockMovement).filter(StockMovement.drug_id == drug_id).count() == 0
