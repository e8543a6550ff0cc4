from sqlalchemy import Column, Integer, String
from pharmaflow.db.base import Base


class Employee(Base):
    """Register user. role must be one of core.permissions.ROLES."""
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    employee_code = Column(String(32), nullable=True, unique=True)
    name = Column(String(255), nullable=False)
    username = Column(String(64), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="cashier")
    phone = Column(String(32), nullable=True)
    email = Column(String(255), nullable=True)
    status = Column(String(16), nullable=False, default="active")  # active | inactive
