from sqlalchemy import Column, Integer, ForeignKey, DateTime, String
from sqlalchemy.orm import backref, relationship
from sqlalchemy.sql import func
from pharmaflow.db.base import Base


class StockMovement(Base):
    """Append-only stock ledger. quantity is signed, in units."""
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True, index=True)
    drug_id = Column(Integer, ForeignKey("drugs.id", ondelete="CASCADE"), nullable=False, index=True)
    movement_type = Column(String(32), nullable=False)  # sale, return, purchase, adjustment, restock, cancel
    quantity = Column(Integer, nullable=False)
    previous_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)
    reference_id = Column(String(64), nullable=True)  # sale / return / purchase id
    reason = Column(String(512), nullable=True)
    employee_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    # deleting a drug deletes its ledger rows
    drug = relationship("Drug", backref=backref("movements", cascade="all, delete-orphan"))
