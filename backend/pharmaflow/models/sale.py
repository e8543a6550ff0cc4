"""
Sale: created once at checkout, never deleted.

After checkout only two things touch a sale:
- returns append to the return history and recompute net_total
- status updates (delivery orders, cancellation)
"""
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime, Float, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON
from pharmaflow.db.base import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(String(32), primary_key=True)  # serial: "100001", "100002", ...
    date = Column(DateTime, nullable=False, index=True)
    daily_order_number = Column(Integer, nullable=False, default=1)
    status = Column(String(16), nullable=False, default="completed")  # completed | pending | cancelled
    payment_method = Column(String(16), nullable=False, default="cash")  # cash | visa
    sale_type = Column(String(16), nullable=False, default="walk-in")  # walk-in | delivery

    customer_name = Column(String(255), nullable=False)
    customer_code = Column(String(64), nullable=True, index=True)
    customer_phone = Column(String(32), nullable=True)
    customer_address = Column(String(512), nullable=True)

    subtotal = Column(Numeric(12, 2), nullable=True)
    global_discount = Column(Numeric(12, 2), nullable=False, default=0)
    delivery_fee = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False)
    net_total = Column(Numeric(12, 2), nullable=True)  # total minus all refunds
    points_earned = Column(Float, nullable=False, default=0.0)
    sold_by_employee_id = Column(Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)

    # Return history (append-only)
    has_returns = Column(Boolean, nullable=False, default=False)
    return_ids = Column(JSON, nullable=False, default=list)
    return_dates = Column(JSON, nullable=False, default=list)
    return_details = Column(JSON, nullable=False, default=list)
    item_returned_quantities = Column(JSON, nullable=False, default=dict)  # drug_id -> qty

    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan", order_by="SaleItem.id")
    sold_by = relationship("Employee")


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(String(32), ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    drug_id = Column(Integer, ForeignKey("drugs.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)  # pack price at time of sale
    is_unit = Column(Boolean, nullable=False, default=False)
    units_per_pack = Column(Integer, nullable=False, default=1)
    discount = Column(Numeric(5, 2), nullable=False, default=0)  # percent

    sale = relationship("Sale", back_populates="items")
