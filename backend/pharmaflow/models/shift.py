"""
Cash register shift. At most one shift is open at a time.

Expected drawer balance on close:
    opening_balance + cash_in + cash_sales - cash_out - returns
Card sales and card returns are tracked but never touch the drawer.
"""
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime, Text
from sqlalchemy.orm import relationship
from pharmaflow.db.base import Base


class Shift(Base):
    __tablename__ = "shifts"

    id = Column(Integer, primary_key=True, index=True)
    status = Column(String(16), nullable=False, default="open", index=True)  # open | closed
    open_time = Column(DateTime, nullable=False)
    close_time = Column(DateTime, nullable=True)
    opened_by = Column(String(255), nullable=False)
    closed_by = Column(String(255), nullable=True)
    opening_balance = Column(Numeric(12, 2), nullable=False, default=0)
    closing_balance = Column(Numeric(12, 2), nullable=True)
    expected_balance = Column(Numeric(12, 2), nullable=True)
    difference = Column(Numeric(12, 2), nullable=True)
    cash_in = Column(Numeric(12, 2), nullable=False, default=0)
    cash_out = Column(Numeric(12, 2), nullable=False, default=0)
    cash_sales = Column(Numeric(12, 2), nullable=False, default=0)
    card_sales = Column(Numeric(12, 2), nullable=False, default=0)
    returns = Column(Numeric(12, 2), nullable=False, default=0)
    card_returns = Column(Numeric(12, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)

    transactions = relationship(
        "CashTransaction",
        back_populates="shift",
        cascade="all, delete-orphan",
        order_by="CashTransaction.id.desc()",
    )


class CashTransaction(Base):
    __tablename__ = "cash_transactions"

    id = Column(Integer, primary_key=True, index=True)
    shift_id = Column(Integer, ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False, index=True)
    time = Column(DateTime, nullable=False)
    type = Column(String(16), nullable=False)  # opening, closing, in, out, sale, card_sale, return, card_return
    amount = Column(Numeric(12, 2), nullable=False)
    reason = Column(String(512), nullable=True)
    user_id = Column(String(64), nullable=False, default="System")
    related_sale_id = Column(String(32), nullable=True)

    shift = relationship("Shift", back_populates="transactions")
