import pytest

from pharmaflow.services import shift_service


def test_open_shift_records_opening(db):
    shift = shift_service.open_shift(db, 300, "Nour")
    assert shift.status == "open"
    assert [tx.type for tx in shift.transactions] == ["opening"]
    # opening is not a running total
    assert float(shift.cash_in) == 0


def test_only_one_open_shift(db):
    shift_service.open_shift(db, 300, "Nour")
    with pytest.raises(ValueError, match="already open"):
        shift_service.open_shift(db, 100, "Omar")


def test_close_computes_expected_and_difference(db):
    shift_service.open_shift(db, 300, "Nour")
    shift_service.record_cash_movement(db, "in", 50, "Change from bank", "Nour")
    shift_service.record_cash_movement(db, "out", 20, "Courier", "Nour")
    shift = shift_service.get_open_shift(db)
    shift_service.add_transaction_to_open_shift(db, "sale", 400, "Sale #100001", "Nour", "100001")
    shift_service.add_transaction_to_open_shift(db, "card_sale", 250, "Sale #100002", "Nour", "100002")
    shift_service.add_transaction_to_open_shift(db, "return", 30, "Return", "Nour", "100001")
    db.commit()

    closed = shift_service.close_shift(db, 690, "Nour", notes="Count done")
    assert closed.id == shift.id
    assert float(closed.expected_balance) == 300 + 50 + 400 - 20 - 30
    assert float(closed.difference) == -10
    assert closed.status == "closed"
    assert closed.transactions[0].type == "closing"
    assert shift_service.get_open_shift(db) is None


def test_close_without_open_shift(db):
    with pytest.raises(ValueError, match="No open shift"):
        shift_service.close_shift(db, 0, "Nour")


def test_cash_movement_rules(db):
    with pytest.raises(ValueError, match="No open shift"):
        shift_service.record_cash_movement(db, "in", 10, "float", "Nour")
    shift_service.open_shift(db, 0, "Nour")
    with pytest.raises(ValueError, match="positive"):
        shift_service.record_cash_movement(db, "out", 0, "nothing", "Nour")
    with pytest.raises(ValueError, match="'in' or 'out'"):
        shift_service.record_cash_movement(db, "sale", 10, "sneaky", "Nour")


def test_posting_without_shift_returns_false(db):
    assert shift_service.add_transaction_to_open_shift(db, "sale", 10, "Sale", "System") is False
