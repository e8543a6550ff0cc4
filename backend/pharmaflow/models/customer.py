from sqlalchemy import Column, Integer, String, Float, Text, DateTime
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
from pharmaflow.db.base import Base


class Customer(Base):
    """
    Loyalty customer.

    total_purchases and last_visit are not stored; they are derived from
    sales (see customer_service.enrich_customers).
    """
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    serial_id = Column(Integer, nullable=False, unique=True)  # 1, 2, 3...
    code = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    phone = Column(String(32), nullable=True)
    email = Column(String(255), nullable=True)
    governorate = Column(String(128), nullable=True)
    city = Column(String(128), nullable=True)
    area = Column(String(128), nullable=True)
    street_address = Column(String(512), nullable=True)
    insurance_provider = Column(String(255), nullable=True)
    policy_number = Column(String(128), nullable=True)
    chronic_conditions = Column(JSON, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="active")  # active | inactive
    points = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime, server_default=func.now())
