"""Cash register shifts: open, close, cash in/out, and sale/return postings."""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from pharmaflow.models.shift import Shift, CashTransaction
from pharmaflow.services.transaction_clock import now

logger = logging.getLogger(__name__)

# Which running total each posted transaction type feeds
TOTAL_FIELD_BY_TYPE = {
    "in": "cash_in",
    "out": "cash_out",
    "sale": "cash_sales",
    "card_sale": "card_sales",
    "return": "returns",
    "card_return": "card_returns",
}


def _money(value) -> Decimal:
    return Decimal(str(value or 0))


def get_open_shift(db: Session) -> Optional[Shift]:
    return db.query(Shift).filter(Shift.status == "open").first()


def list_shifts(db: Session, limit: int = 50) -> List[Shift]:
    return db.query(Shift).order_by(Shift.id.desc()).limit(limit).all()


def expected_balance(shift: Shift) -> Decimal:
    """Cash that should be in the drawer. Card movements are excluded."""
    return (
        _money(shift.opening_balance)
        + _money(shift.cash_in)
        + _money(shift.cash_sales)
        - _money(shift.cash_out)
        - _money(shift.returns)
    )


def _append(db: Session, shift: Shift, tx_type: str, amount, reason: str | None, user_id: str,
            related_sale_id: str | None = None) -> CashTransaction:
    tx = CashTransaction(
        shift=shift,
        time=now(),
        type=tx_type,
        amount=_money(amount),
        reason=reason,
        user_id=user_id or "System",
        related_sale_id=related_sale_id,
    )
    field = TOTAL_FIELD_BY_TYPE.get(tx_type)
    if field:
        setattr(shift, field, _money(getattr(shift, field)) + _money(amount))
    db.add(tx)
    return tx


def open_shift(db: Session, opening_balance, opened_by: str) -> Shift:
    if get_open_shift(db):
        raise ValueError("A shift is already open")
    if _money(opening_balance) < 0:
        raise ValueError("Opening balance cannot be negative")
    shift = Shift(
        status="open",
        open_time=now(),
        opened_by=opened_by,
        opening_balance=_money(opening_balance),
        cash_in=Decimal("0"), cash_out=Decimal("0"),
        cash_sales=Decimal("0"), card_sales=Decimal("0"),
        returns=Decimal("0"), card_returns=Decimal("0"),
    )
    db.add(shift)
    _append(db, shift, "opening", opening_balance, "Shift opened", opened_by)
    db.commit()
    db.refresh(shift)
    logger.info(f"Shift #{shift.id} opened by {opened_by} with {shift.opening_balance}")
    return shift


def close_shift(db: Session, closing_balance, closed_by: str, notes: str | None = None) -> Shift:
    shift = get_open_shift(db)
    if not shift:
        raise ValueError("No open shift found")
    if _money(closing_balance) < 0:
        raise ValueError("Closing balance cannot be negative")

    expected = expected_balance(shift)
    shift.status = "closed"
    shift.close_time = now()
    shift.closed_by = closed_by
    shift.closing_balance = _money(closing_balance)
    shift.expected_balance = expected
    shift.difference = _money(closing_balance) - expected
    shift.notes = notes
    _append(db, shift, "closing", closing_balance, notes or "Shift closed", closed_by)
    db.commit()
    db.refresh(shift)
    if shift.difference != 0:
        logger.warning(f"Shift #{shift.id} closed with drawer difference {shift.difference}")
    return shift


def record_cash_movement(db: Session, tx_type: str, amount, reason: str, user_id: str) -> CashTransaction:
    """Manual cash in / cash out on the open shift."""
    if tx_type not in ("in", "out"):
        raise ValueError("Cash movement type must be 'in' or 'out'")
    if _money(amount) <= 0:
        raise ValueError("Amount must be positive")
    shift = get_open_shift(db)
    if not shift:
        raise ValueError("No open shift found")
    tx = _append(db, shift, tx_type, amount, reason, user_id)
    db.commit()
    db.refresh(tx)
    return tx


def add_transaction_to_open_shift(
    db: Session,
    tx_type: str,
    amount,
    reason: str,
    user_id: str,
    related_sale_id: str | None = None,
) -> bool:
    """
    Post a sale or return to the open shift. Caller commits.

    Returns False (and posts nothing) when no shift is open; selling without
    an open register is allowed.
    """
    shift = get_open_shift(db)
    if not shift:
        logger.info(f"No open shift; {tx_type} for sale #{related_sale_id} not posted to a register")
        return False
    _append(db, shift, tx_type, amount, reason, user_id, related_sale_id)
    return True
