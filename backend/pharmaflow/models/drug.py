from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Date, Text
from sqlalchemy.orm import relationship
from pharmaflow.db.base import Base


class Drug(Base):
    """
    Inventory item.

    STOCK UNITS:
    - stock is always the number of loose units (tablets, ampoules, ...)
    - price and cost_price are per pack; one pack holds units_per_pack units
    - stock only changes through sales, returns, cancellations,
      completed purchases, restocks and manual adjustments
    """
    __tablename__ = "drugs"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    generic_name = Column(String(255), nullable=True)
    category = Column(String(128), nullable=True)
    description = Column(Text, nullable=True)
    dosage_form = Column(String(64), nullable=True)  # Tablet, Syrup, Capsule...
    price = Column(Numeric(12, 2), nullable=False, default=0)
    cost_price = Column(Numeric(12, 2), nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    damaged_stock = Column(Integer, nullable=False, default=0)
    units_per_pack = Column(Integer, nullable=False, default=1)
    expiry_date = Column(Date, nullable=True)
    barcode = Column(String(64), nullable=True, index=True)
    internal_code = Column(String(16), nullable=True, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True)
    max_discount = Column(Numeric(5, 2), nullable=True)  # percent

    supplier = relationship("Supplier", backref="drugs")
