from datetime import datetime, timedelta

import pytest

from pharmaflow.core.exceptions import TransactionTimeError
from pharmaflow.models.sale import Sale
from pharmaflow.models.shift import CashTransaction
from pharmaflow.models.stock_movement import StockMovement
from pharmaflow.schemas.sale import SaleUpdate
from pharmaflow.services import customer_service, sales_service, shift_service, transaction_clock
from tests.conftest import cart_sale


def test_pack_and_unit_lines_deduct_units(db, make_drug):
    drug = make_drug(stock=240, units_per_pack=24, price=48)
    sale = sales_service.complete_sale(db, cart_sale((drug, 2, False), (drug, 5, True), total=106))

    db.refresh(drug)
    assert drug.stock == 240 - 48 - 5
    assert sale.id == "100001"
    assert sale.daily_order_number == 1
    assert float(sale.net_total) == 106
    assert db.query(StockMovement).filter_by(reference_id=sale.id, movement_type="sale").count() == 2


def test_serial_ids_and_daily_order_numbers(db, make_drug):
    drug = make_drug(stock=1000)
    morning = datetime(2026, 3, 1, 9, 0)
    first = sales_service.complete_sale(db, cart_sale((drug, 1, True), total=2, when=morning))
    second = sales_service.complete_sale(db, cart_sale((drug, 1, True), total=2, when=morning + timedelta(hours=2)))
    next_day = sales_service.complete_sale(db, cart_sale((drug, 1, True), total=2, when=morning + timedelta(days=1)))

    assert [first.id, second.id, next_day.id] == ["100001", "100002", "100003"]
    assert [first.daily_order_number, second.daily_order_number, next_day.daily_order_number] == [1, 2, 1]


def test_overselling_clamps_stock_to_zero(db, make_drug):
    drug = make_drug(stock=10, units_per_pack=10)
    sales_service.complete_sale(db, cart_sale((drug, 3, False), total=144))
    db.refresh(drug)
    assert drug.stock == 0


def test_back_dated_sale_is_rejected_without_side_effects(db, make_drug):
    drug = make_drug(stock=100, units_per_pack=10)
    now = datetime(2026, 3, 1, 12, 0)
    sales_service.complete_sale(db, cart_sale((drug, 1, False), total=48, when=now))

    with pytest.raises(TransactionTimeError, match="before the last"):
        sales_service.complete_sale(db, cart_sale((drug, 1, False), total=48, when=now - timedelta(minutes=5)))
    db.rollback()

    db.refresh(drug)
    assert drug.stock == 90
    assert db.query(Sale).count() == 1
    assert transaction_clock.get_last_transaction_time(db) == now


def test_small_clock_drift_is_tolerated(db, make_drug):
    drug = make_drug(stock=100)
    now = datetime(2026, 3, 1, 12, 0, 10)
    sales_service.complete_sale(db, cart_sale((drug, 1, True), total=2, when=now))
    sales_service.complete_sale(db, cart_sale((drug, 1, True), total=2, when=now - timedelta(seconds=3)))

    # the marker does not move backwards
    assert transaction_clock.get_last_transaction_time(db) == now


@pytest.mark.parametrize("total, message", [(10, "Cart is empty"), (-1, "Invalid total")])
def test_invalid_sale_data(db, make_drug, total, message):
    drug = make_drug()
    data = cart_sale((drug, 1, False), total=total)
    if message == "Cart is empty":
        data.items = []
    with pytest.raises(ValueError, match=message):
        sales_service.complete_sale(db, data)


def test_unknown_drug_rejected_before_any_change(db, make_drug):
    drug = make_drug(stock=100)
    data = cart_sale((drug, 1, True), total=2)
    data.items[0].drug_id = 9999
    with pytest.raises(ValueError, match="not found"):
        sales_service.complete_sale(db, data)
    assert db.query(Sale).count() == 0


def test_points_credited_by_code(db, make_drug):
    customer = customer_service.create_customer(db, {"name": "Mona Adel"})
    drug = make_drug(price=1200, units_per_pack=1, stock=10)
    sale = sales_service.complete_sale(
        db, cart_sale((drug, 1, False), total=1500, customer_name="Mona Adel", customer_code=customer.code)
    )
    db.refresh(customer)
    assert sale.points_earned == 90.0
    assert customer.points == 90.0


def test_points_credited_by_serial_and_name(db, make_drug):
    customer = customer_service.create_customer(db, {"name": "Karim Nabil", "code": "VIP-7"})
    drug = make_drug(price=150, units_per_pack=1, stock=10)
    sales_service.complete_sale(db, cart_sale((drug, 1, False), total=150, customer_code=str(customer.serial_id)))
    sales_service.complete_sale(db, cart_sale((drug, 1, False), total=150, customer_name="Karim Nabil"))
    db.refresh(customer)
    assert customer.points == 9.0


def test_guest_sale_credits_nobody(db, make_drug):
    customer_service.create_customer(db, {"name": "Guest Customer"})
    drug = make_drug(price=1200, units_per_pack=1, stock=10)
    sale = sales_service.complete_sale(db, cart_sale((drug, 1, False), total=1500))
    assert sale.customer_name == "Guest Customer"
    assert all(c.points == 0 for c in customer_service.list_customers(db))


def test_sale_posts_to_open_shift(db, make_drug):
    shift_service.open_shift(db, 500, "Cashier")
    drug = make_drug(stock=100)
    sales_service.complete_sale(db, cart_sale((drug, 1, False), total=48))
    sales_service.complete_sale(db, cart_sale((drug, 1, False), total=48, payment_method="visa"))

    shift = shift_service.get_open_shift(db)
    assert float(shift.cash_sales) == 48
    assert float(shift.card_sales) == 48
    types = [tx.type for tx in db.query(CashTransaction).order_by(CashTransaction.id)]
    assert types == ["opening", "sale", "card_sale"]
    assert float(shift_service.expected_balance(shift)) == 548


def test_sale_without_open_shift_is_allowed(db, make_drug):
    drug = make_drug(stock=100)
    sales_service.complete_sale(db, cart_sale((drug, 1, False), total=48))
    assert db.query(CashTransaction).count() == 0


def test_cancel_restores_stock_once(db, make_drug):
    drug = make_drug(stock=100, units_per_pack=10)
    sale = sales_service.complete_sale(db, cart_sale((drug, 2, False), total=96))

    sales_service.update_sale(db, sale, SaleUpdate(status="cancelled"))
    sales_service.update_sale(db, sale, SaleUpdate(status="cancelled"))
    db.refresh(drug)
    assert drug.stock == 100
    assert sale.status == "cancelled"

    with pytest.raises(ValueError, match="cannot be reopened"):
        sales_service.update_sale(db, sale, SaleUpdate(status="completed"))


def test_delivery_details_update(db, make_drug):
    drug = make_drug(stock=100)
    sale = sales_service.complete_sale(db, cart_sale((drug, 1, False), total=48, sale_type="delivery", status="pending"))
    sale = sales_service.update_sale(db, sale, SaleUpdate(status="completed", customer_address="12 Tahrir St", delivery_fee=15))
    assert sale.status == "completed"
    assert sale.customer_address == "12 Tahrir St"
    assert float(sale.delivery_fee) == 15


def test_list_sales_filters(db, make_drug, make_employee):
    employee = make_employee("cashier")
    drug = make_drug(stock=100)
    base = datetime(2026, 3, 1, 9, 0)
    sales_service.complete_sale(db, cart_sale((drug, 1, True), total=2, when=base))
    sales_service.complete_sale(db, cart_sale((drug, 1, True), total=2, when=base + timedelta(days=2)), employee)

    assert len(sales_service.list_sales(db, start=base + timedelta(days=1))) == 1
    assert [s.sold_by_employee_id for s in sales_service.list_sales(db, employee_id=employee.id)] == [employee.id]
