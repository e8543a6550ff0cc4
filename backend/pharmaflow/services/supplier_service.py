"""Suppliers: CRUD with the same contact validation customers get."""
import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from pharmaflow.models.supplier import Supplier
from pharmaflow.services.customer_service import validate_email, validate_phone

logger = logging.getLogger(__name__)

SUPPLIER_FIELDS = ("name", "contact_person", "phone", "email", "address")


def _validate(data: dict, partial: bool = False) -> dict:
    data = {k: v for k, v in data.items() if k in SUPPLIER_FIELDS}
    if not partial or "name" in data:
        name = " ".join((data.get("name") or "").split())
        if not name:
            raise ValueError("Supplier name is required")
        data["name"] = name
    validate_phone(data.get("phone"))
    validate_email(data.get("email"))
    return data


def get_supplier(db: Session, supplier_id: int) -> Optional[Supplier]:
    return db.get(Supplier, supplier_id)


def list_suppliers(db: Session, search: str | None = None) -> List[Supplier]:
    q = db.query(Supplier)
    if search:
        pattern = f"%{search.strip()}%"
        q = q.filter(or_(Supplier.name.ilike(pattern), Supplier.contact_person.ilike(pattern)))
    return q.order_by(Supplier.name).all()


def create_supplier(db: Session, data: dict) -> Supplier:
    supplier = Supplier(**_validate(data))
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    logger.info(f"Supplier added: {supplier.name}")
    return supplier


def update_supplier(db: Session, supplier: Supplier, updates: dict) -> Supplier:
    for field, value in _validate(updates, partial=True).items():
        setattr(supplier, field, value)
    db.commit()
    db.refresh(supplier)
    return supplier


def delete_supplier(db: Session, supplier: Supplier) -> None:
    db.delete(supplier)
    db.commit()
