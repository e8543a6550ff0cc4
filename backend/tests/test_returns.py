from datetime import timedelta

import pytest

from pharmaflow.core.exceptions import TransactionTimeError
from pharmaflow.schemas.sale import SaleUpdate
from pharmaflow.schemas.sale_return import ReturnCreate, ReturnItemCreate
from pharmaflow.services import return_service, sales_service, shift_service
from tests.conftest import cart_sale


def return_of(sale, drug, quantity, refund, is_unit=False, **extra):
    return ReturnCreate(
        sale_id=sale.id,
        items=[ReturnItemCreate(drug_id=drug.id, quantity_returned=quantity, is_unit=is_unit,
                                original_price=float(drug.price), refund_amount=refund)],
        **extra,
    )


@pytest.fixture
def sold(db, make_drug):
    drug = make_drug(stock=240, units_per_pack=24, price=48)
    sale = sales_service.complete_sale(db, cart_sale((drug, 3, False), total=144))
    return sale, drug


def test_return_restocks_and_updates_net_total(db, sold):
    sale, drug = sold
    sale_return = return_service.process_return(db, return_of(sale, drug, 1, 48))

    db.refresh(sale)
    db.refresh(drug)
    assert drug.stock == 240 - 72 + 24
    assert float(sale.net_total) == 96
    assert sale.has_returns is True
    assert sale.return_ids == [sale_return.id]
    assert sale.item_returned_quantities == {str(drug.id): 1}
    assert sale.return_details[0]["items"][0]["quantity"] == 1


def test_net_total_counts_every_return(db, sold):
    sale, drug = sold
    return_service.process_return(db, return_of(sale, drug, 1, 48))
    return_service.process_return(db, return_of(sale, drug, 12, 24, is_unit=True))

    db.refresh(sale)
    db.refresh(drug)
    assert float(sale.net_total) == 144 - 48 - 24
    assert sale.item_returned_quantities == {str(drug.id): 13}
    assert len(sale.return_dates) == 2
    assert drug.stock == 240 - 72 + 24 + 12


def test_explicit_total_refund_wins(db, sold):
    sale, drug = sold
    sale_return = return_service.process_return(db, return_of(sale, drug, 1, 48, total_refund=40))
    db.refresh(sale)
    assert float(sale_return.total_refund) == 40
    assert float(sale.net_total) == 104


def test_cash_return_counts_against_drawer(db, make_drug):
    shift_service.open_shift(db, 200, "Cashier")
    drug = make_drug(stock=100, units_per_pack=10, price=50)
    sale = sales_service.complete_sale(db, cart_sale((drug, 2, False), total=100))
    return_service.process_return(db, return_of(sale, drug, 1, 50))

    shift = shift_service.get_open_shift(db)
    assert float(shift.returns) == 50
    assert float(shift_service.expected_balance(shift)) == 200 + 100 - 50


def test_card_return_does_not_touch_cash(db, make_drug):
    shift_service.open_shift(db, 200, "Cashier")
    drug = make_drug(stock=100, units_per_pack=10, price=50)
    sale = sales_service.complete_sale(db, cart_sale((drug, 2, False), total=100, payment_method="visa"))
    return_service.process_return(db, return_of(sale, drug, 1, 50))

    shift = shift_service.get_open_shift(db)
    assert float(shift.returns) == 0
    assert float(shift.card_returns) == 50
    assert float(shift_service.expected_balance(shift)) == 200


def test_resubmitted_return_is_counted_twice(db, sold):
    sale, drug = sold
    data = return_of(sale, drug, 1, 48)
    return_service.process_return(db, data)
    return_service.process_return(db, data)
    db.refresh(sale)
    assert float(sale.net_total) == 48


def test_back_dated_return_rejected(db, sold):
    sale, drug = sold
    with pytest.raises(TransactionTimeError):
        return_service.process_return(db, return_of(sale, drug, 1, 48, date=sale.date - timedelta(hours=1)))
    db.rollback()
    db.refresh(sale)
    assert sale.has_returns is False


def test_return_errors(db, sold):
    sale, drug = sold
    with pytest.raises(LookupError):
        return_service.process_return(db, ReturnCreate(sale_id="999999", items=[]))
    with pytest.raises(ValueError, match="No items"):
        return_service.process_return(db, ReturnCreate(sale_id=sale.id, items=[]))

    sales_service.update_sale(db, sale, SaleUpdate(status="cancelled"))
    with pytest.raises(ValueError, match="cancelled"):
        return_service.process_return(db, return_of(sale, drug, 1, 48))


def test_list_returns_by_sale(db, sold):
    sale, drug = sold
    return_service.process_return(db, return_of(sale, drug, 1, 48))
    assert len(return_service.list_returns(db, sale.id)) == 1
    assert return_service.list_returns(db, "nope") == []


def test_return_of_unsold_drug_rejected(db, sold, make_drug):
    sale, drug = sold
    other = make_drug(name="Brufen 400mg", stock=70, units_per_pack=10, price=30)

    with pytest.raises(ValueError, match="not part of sale"):
        return_service.process_return(db, return_of(sale, other, 7, 210))

    db.refresh(other)
    db.refresh(sale)
    assert other.stock == 70
    assert sale.has_returns is False


def test_return_beyond_sold_quantity_rejected(db, sold):
    sale, drug = sold
    with pytest.raises(ValueError, match="only 72 left"):
        return_service.process_return(db, return_of(sale, drug, 50, 2400))

    db.refresh(drug)
    assert drug.stock == 240 - 72
    assert return_service.list_returns(db, sale.id) == []


def test_outstanding_quantity_counts_earlier_returns_in_units(db, sold):
    sale, drug = sold
    return_service.process_return(db, return_of(sale, drug, 2, 96))
    return_service.process_return(db, return_of(sale, drug, 20, 40, is_unit=True))

    # 72 sold, 48 + 20 already back
    with pytest.raises(ValueError, match="only 4 left"):
        return_service.process_return(db, return_of(sale, drug, 5, 10, is_unit=True))
    return_service.process_return(db, return_of(sale, drug, 4, 8, is_unit=True))

    db.refresh(drug)
    assert drug.stock == 240
