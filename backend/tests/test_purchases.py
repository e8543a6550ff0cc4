import pytest

from pharmaflow.models.stock_movement import StockMovement
from pharmaflow.schemas.purchase import PurchaseCreate, PurchaseItemCreate
from pharmaflow.services import purchase_service, supplier_service


@pytest.fixture
def supplier(db):
    return supplier_service.create_supplier(db, {"name": "Ibnsina Pharma", "phone": "+20 2 3539 2000"})


def order(supplier, drug, quantity=10, cost=35.0, status="pending"):
    return PurchaseCreate(
        supplier_id=supplier.id,
        status=status,
        items=[PurchaseItemCreate(drug_id=drug.id, quantity=quantity, cost_price=cost)],
    )


def test_pending_purchase_does_not_touch_stock(db, supplier, make_drug):
    drug = make_drug(stock=0, units_per_pack=20)
    purchase = purchase_service.create_purchase(db, order(supplier, drug))

    db.refresh(drug)
    assert purchase.status == "pending"
    assert purchase.invoice_id == "PO-000001"
    assert purchase.supplier_name == "Ibnsina Pharma"
    assert float(purchase.total_cost) == 350
    assert drug.stock == 0


def test_approval_adds_units_and_sets_cost(db, supplier, make_drug):
    drug = make_drug(stock=0, units_per_pack=20, cost_price=30)
    purchase = purchase_service.create_purchase(db, order(supplier, drug, quantity=10, cost=35))
    purchase = purchase_service.approve_purchase(db, purchase, "Dr. Salma")

    db.refresh(drug)
    assert purchase.status == "completed"
    assert purchase.approved_by == "Dr. Salma"
    assert purchase.approval_date is not None
    assert drug.stock == 200
    assert float(drug.cost_price) == 35
    movement = db.query(StockMovement).filter_by(drug_id=drug.id, movement_type="purchase").one()
    assert movement.reference_id == purchase.invoice_id


def test_last_cost_wins(db, supplier, make_drug):
    drug = make_drug(stock=0, units_per_pack=1)
    first = purchase_service.create_purchase(db, order(supplier, drug, cost=35))
    second = purchase_service.create_purchase(db, order(supplier, drug, cost=31))
    purchase_service.approve_purchase(db, second, "Manager")
    purchase_service.approve_purchase(db, first, "Manager")
    db.refresh(drug)
    assert float(drug.cost_price) == 35
    assert drug.stock == 20


def test_cannot_approve_twice(db, supplier, make_drug):
    drug = make_drug(stock=0)
    purchase = purchase_service.create_purchase(db, order(supplier, drug))
    purchase_service.approve_purchase(db, purchase, "Manager")
    with pytest.raises(ValueError, match="Only pending"):
        purchase_service.approve_purchase(db, purchase, "Manager")


def test_reject_is_terminal(db, supplier, make_drug):
    drug = make_drug(stock=5)
    purchase = purchase_service.create_purchase(db, order(supplier, drug))
    purchase = purchase_service.reject_purchase(db, purchase, "Wrong batch")

    db.refresh(drug)
    assert purchase.status == "rejected"
    assert purchase.rejection_reason == "Wrong batch"
    assert drug.stock == 5
    with pytest.raises(ValueError):
        purchase_service.approve_purchase(db, purchase, "Manager")


def test_completed_purchase_applies_stock_immediately(db, supplier, make_drug):
    drug = make_drug(stock=0, units_per_pack=10)
    purchase = purchase_service.create_purchase(db, order(supplier, drug, quantity=4, status="completed"))
    db.refresh(drug)
    assert purchase.status == "completed"
    assert drug.stock == 40


def test_purchase_validation(db, supplier, make_drug):
    drug = make_drug()
    with pytest.raises(LookupError):
        purchase_service.create_purchase(db, PurchaseCreate(
            supplier_id=999, items=[PurchaseItemCreate(drug_id=drug.id, quantity=1, cost_price=1)]))
    with pytest.raises(ValueError, match="supplier"):
        purchase_service.create_purchase(db, PurchaseCreate(
            items=[PurchaseItemCreate(drug_id=drug.id, quantity=1, cost_price=1)]))
    with pytest.raises(ValueError, match="not found"):
        purchase_service.create_purchase(db, PurchaseCreate(
            supplier_id=supplier.id, items=[PurchaseItemCreate(drug_id=999, quantity=1, cost_price=1)]))


def test_list_purchases_by_status(db, supplier, make_drug):
    drug = make_drug()
    pending = purchase_service.create_purchase(db, order(supplier, drug))
    purchase_service.reject_purchase(db, purchase_service.create_purchase(db, order(supplier, drug)))
    assert [p.id for p in purchase_service.list_purchases(db, status="pending")] == [pending.id]
