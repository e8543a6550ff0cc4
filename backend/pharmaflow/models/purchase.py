"""
Purchase order from a supplier.
Status flow: pending -> completed (stock added) or pending -> rejected (terminal).
"""
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime, Date, Text
from sqlalchemy.orm import relationship
from pharmaflow.db.base import Base


class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(String(32), nullable=False, unique=True)  # PO number
    external_invoice_id = Column(String(64), nullable=True)  # supplier's invoice number
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True)
    supplier_name = Column(String(255), nullable=False)
    date = Column(DateTime, nullable=False)
    payment_type = Column(String(16), nullable=False, default="cash")  # cash | credit
    total_cost = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String(16), nullable=False, default="pending")  # pending | completed | rejected
    approval_date = Column(DateTime, nullable=True)
    approved_by = Column(String(255), nullable=True)
    rejection_reason = Column(Text, nullable=True)

    items = relationship("PurchaseItem", back_populates="purchase", cascade="all, delete-orphan", order_by="PurchaseItem.id")
    supplier = relationship("Supplier", backref="purchases")


class PurchaseItem(Base):
    __tablename__ = "purchase_items"

    id = Column(Integer, primary_key=True, index=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id", ondelete="CASCADE"), nullable=False, index=True)
    drug_id = Column(Integer, ForeignKey("drugs.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)  # packs
    cost_price = Column(Numeric(12, 2), nullable=False)  # per pack
    expiry_date = Column(Date, nullable=True)
    sale_price = Column(Numeric(12, 2), nullable=True)

    purchase = relationship("Purchase", back_populates="items")
