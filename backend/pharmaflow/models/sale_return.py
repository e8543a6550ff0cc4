from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime, Boolean, Text
from sqlalchemy.orm import relationship
from pharmaflow.db.base import Base


class SaleReturn(Base):
    """Customer return against a sale. Immutable once written."""
    __tablename__ = "sale_returns"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(String(32), ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(DateTime, nullable=False)
    return_type = Column(String(16), nullable=False, default="partial")  # full | partial | unit
    reason = Column(String(32), nullable=False, default="customer_request")
    notes = Column(Text, nullable=True)
    processed_by = Column(Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    total_refund = Column(Numeric(12, 2), nullable=False)

    items = relationship("ReturnItem", back_populates="sale_return", cascade="all, delete-orphan", order_by="ReturnItem.id")
    sale = relationship("Sale", backref="returns")


class ReturnItem(Base):
    __tablename__ = "return_items"

    id = Column(Integer, primary_key=True, index=True)
    return_id = Column(Integer, ForeignKey("sale_returns.id", ondelete="CASCADE"), nullable=False, index=True)
    drug_id = Column(Integer, ForeignKey("drugs.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)
    quantity_returned = Column(Integer, nullable=False)
    is_unit = Column(Boolean, nullable=False, default=False)
    original_price = Column(Numeric(12, 2), nullable=False, default=0)
    refund_amount = Column(Numeric(12, 2), nullable=False)
    reason = Column(String(32), nullable=True)
    condition = Column(String(16), nullable=False, default="sellable")  # sellable | damaged | expired

    sale_return = relationship("SaleReturn", back_populates="items")
