"""Customers: CRUD, input validation, loyalty matching and purchase history."""
import logging
import re
from typing import Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from pharmaflow.core.config import settings
from pharmaflow.models.customer import Customer
from pharmaflow.models.sale import Sale

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^\+?[\d\s\-]{7,20}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

CUSTOMER_FIELDS = (
    "code", "name", "phone", "email", "governorate", "city", "area", "street_address",
    "insurance_provider", "policy_number", "chronic_conditions", "notes", "status", "points",
)


def validate_phone(phone: str | None) -> None:
    if phone and not PHONE_PATTERN.match(phone.strip()):
        raise ValueError("Invalid phone number")


def validate_email(email: str | None) -> None:
    if email and not EMAIL_PATTERN.match(email.strip()):
        raise ValueError("Invalid email address")


def clean_name(name: str | None) -> str:
    """Collapse whitespace; at least 2 characters."""
    name = " ".join((name or "").split())
    if len(name) < 2:
        raise ValueError("Customer name must be at least 2 characters")
    return name[:255]


def _validate(data: dict, partial: bool = False) -> dict:
    data = {k: v for k, v in data.items() if k in CUSTOMER_FIELDS}
    if not partial or "name" in data:
        data["name"] = clean_name(data.get("name"))
    validate_phone(data.get("phone"))
    validate_email(data.get("email"))
    if data.get("status") and data["status"] not in ("active", "inactive"):
        raise ValueError("Status must be 'active' or 'inactive'")
    if data.get("points") is not None and data["points"] < 0:
        raise ValueError("Points cannot be negative")
    return data


def next_serial_id(db: Session) -> int:
    return (db.query(func.max(Customer.serial_id)).scalar() or 0) + 1


def get_customer(db: Session, customer_id: int) -> Optional[Customer]:
    return db.get(Customer, customer_id)


def get_by_code(db: Session, code: str) -> Optional[Customer]:
    """Look up by loyalty code or by serial id typed as text."""
    code = code.strip()
    customer = db.query(Customer).filter(Customer.code == code).first()
    if customer or not code.isdigit():
        return customer
    return db.query(Customer).filter(Customer.serial_id == int(code)).first()


def list_customers(db: Session, search: str | None = None) -> List[Customer]:
    q = db.query(Customer)
    if search:
        pattern = f"%{search.strip()}%"
        q = q.filter(or_(
            Customer.name.ilike(pattern),
            Customer.phone.ilike(pattern),
            Customer.email.ilike(pattern),
            Customer.code.ilike(pattern),
        ))
    return q.order_by(Customer.serial_id).all()


def create_customer(db: Session, data: dict) -> Customer:
    data = _validate(data)
    serial_id = next_serial_id(db)
    code = (data.get("code") or "").strip() or str(serial_id).zfill(5)
    if db.query(Customer).filter(Customer.code == code).first():
        raise ValueError(f"Customer code {code} already exists")
    data.update(code=code, serial_id=serial_id)
    data.setdefault("points", 0.0)
    customer = Customer(**data)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    logger.info(f"Customer {customer.name} registered with code {customer.code}")
    return customer


def update_customer(db: Session, customer: Customer, updates: dict) -> Customer:
    updates = _validate(updates, partial=True)
    new_code = updates.get("code")
    if new_code and new_code != customer.code:
        if db.query(Customer).filter(Customer.code == new_code, Customer.id != customer.id).first():
            raise ValueError(f"Customer code {new_code} already exists")
    for field, value in updates.items():
        setattr(customer, field, value)
    db.commit()
    db.refresh(customer)
    return customer


def delete_customer(db: Session, customer: Customer) -> None:
    db.delete(customer)
    db.commit()


def find_customer_for_sale(db: Session, customer_name: str | None, customer_code: str | None) -> Optional[Customer]:
    """
    Match the customer a sale belongs to.

    With a code: code or serial id as text. Without a code: exact name,
    unless it is the guest placeholder.
    """
    if customer_code:
        return get_by_code(db, customer_code)
    if not customer_name or customer_name == settings.GUEST_CUSTOMER_NAME:
        return None
    return db.query(Customer).filter(Customer.name == customer_name).first()


def _sales_for(customer: Customer, sales: List[Sale]) -> List[Sale]:
    codes = {customer.code, str(customer.serial_id)}
    return [
        s for s in sales
        if (s.customer_code and s.customer_code in codes)
        or (not s.customer_code and s.customer_name == customer.name)
    ]


def enrich_customers(db: Session, customers: List[Customer]) -> List[Dict]:
    """Add total_purchases (sum of net totals) and last_visit, both derived from sales."""
    sales = db.query(Sale).filter(Sale.status != "cancelled").all()
    enriched = []
    for customer in customers:
        own = _sales_for(customer, sales)
        total = sum(float(s.net_total if s.net_total is not None else s.total) for s in own)
        last_visit = max((s.date for s in own), default=None)
        enriched.append({"customer": customer, "total_purchases": round(total, 2), "last_visit": last_visit})
    return enriched


def customer_sales(db: Session, customer: Customer) -> List[Sale]:
    sales = db.query(Sale).order_by(Sale.date.desc()).all()
    return _sales_for(customer, sales)
