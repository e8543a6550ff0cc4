"""
Inventory: drug CRUD and every stock mutation.

Stock is kept in units. Sales, returns, purchases, cancellations, restocks and
manual adjustments all go through apply_stock_change so that each change is
clamped at zero and written to the stock movement ledger.
"""
import logging
import math
import re
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from pharmaflow.core.config import settings
from pharmaflow.models.drug import Drug
from pharmaflow.models.stock_movement import StockMovement

logger = logging.getLogger(__name__)

INTERNAL_CODE_PATTERN = re.compile(r"^\d{6}$")

DRUG_FIELDS = (
    "name", "generic_name", "category", "description", "dosage_form", "price", "cost_price",
    "stock", "damaged_stock", "units_per_pack", "expiry_date", "barcode", "internal_code",
    "supplier_id", "max_discount",
)


def validate_stock(value) -> int:
    """Non-negative whole number of units. NaN, infinities and negatives become 0."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(value) or value < 0:
        return 0
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def units_for(quantity: int, is_unit: bool, units_per_pack: Optional[int]) -> int:
    """Convert a line quantity to units: as-is for unit lines, times pack size otherwise."""
    if is_unit:
        return int(quantity)
    return int(quantity) * (units_per_pack or 1)


def format_stock(stock: int, units_per_pack: int = 1) -> str:
    """Stock as packs, e.g. 50 units at 20/pack -> "2.5 Packs"."""
    if stock <= 0:
        return "Out of Stock"
    if units_per_pack <= 1:
        return f"{stock} Packs"
    packs = stock / units_per_pack
    if packs.is_integer():
        return f"{int(packs)} Packs"
    return f"{round(packs, 2):g} Packs"


def validate_drug_data(data: dict, partial: bool = False) -> None:
    if not partial or "name" in data:
        name = (data.get("name") or "").strip()
        if len(name) < 2:
            raise ValueError("Drug name is required (min 2 chars)")
    for field in ("price", "cost_price"):
        if data.get(field) is not None and data[field] < 0:
            raise ValueError(f"Invalid {field.replace('_', ' ')}")
    if data.get("stock") is not None and data["stock"] < 0:
        raise ValueError("Stock cannot be negative")
    if data.get("units_per_pack") is not None and data["units_per_pack"] < 1:
        raise ValueError("Units per pack must be at least 1")
    code = data.get("internal_code")
    if code and not INTERNAL_CODE_PATTERN.match(code):
        raise ValueError("Internal code must be 6 digits")


def next_internal_code(db: Session) -> str:
    codes = [c for (c,) in db.query(Drug.internal_code).all() if c and INTERNAL_CODE_PATTERN.match(c)]
    highest = max((int(c) for c in codes), default=0)
    return str(highest + 1).zfill(6)


def get_drug(db: Session, drug_id: int) -> Optional[Drug]:
    return db.get(Drug, drug_id)


def list_drugs(db: Session, search: str | None = None, category: str | None = None) -> List[Drug]:
    q = db.query(Drug)
    if search:
        pattern = f"%{search.strip()}%"
        q = q.filter(or_(
            Drug.name.ilike(pattern),
            Drug.generic_name.ilike(pattern),
            Drug.barcode == search.strip(),
            Drug.internal_code == search.strip(),
        ))
    if category:
        q = q.filter(Drug.category == category)
    return q.order_by(Drug.name).all()


def create_drug(db: Session, data: dict) -> Drug:
    validate_drug_data(data)
    data = {k: v for k, v in data.items() if k in DRUG_FIELDS}
    data["name"] = data["name"].strip()
    data["stock"] = validate_stock(data.get("stock") or 0)
    if not data.get("internal_code"):
        data["internal_code"] = next_internal_code(db)
    drug = Drug(**data)
    db.add(drug)
    db.commit()
    db.refresh(drug)
    logger.info(f"Added drug {drug.name} (#{drug.id}, code {drug.internal_code})")
    return drug


def update_drug(db: Session, drug: Drug, updates: dict) -> Drug:
    """
    Edit catalog fields. A new stock value goes through the movement
    ledger as an adjustment.
    """
    validate_drug_data(updates, partial=True)
    new_stock = updates.pop("stock", None)
    for field, value in updates.items():
        if field in DRUG_FIELDS:
            setattr(drug, field, value.strip() if field == "name" else value)
    if new_stock is not None and validate_stock(new_stock) != drug.stock:
        apply_stock_change(db, drug, validate_stock(new_stock) - drug.stock, "adjustment", reason="Edited in catalog")
    db.commit()
    db.refresh(drug)
    return drug


def delete_drug(db: Session, drug: Drug) -> None:
    db.delete(drug)
    db.commit()


def apply_stock_change(
    db: Session,
    drug: Drug,
    delta: int,
    movement_type: str,
    reference_id: str | None = None,
    reason: str | None = None,
    employee_id: int | None = None,
) -> StockMovement:
    """
    Add delta units (negative to remove) and record the movement. Caller commits.

    A result below zero is a stock-integrity violation: it is logged and the
    stock is clamped to 0 instead of aborting the surrounding transaction.
    """
    previous = drug.stock or 0
    new_stock = previous + delta
    if new_stock < 0:
        logger.error(
            f"STOCK ERROR: Negative stock detected for {drug.name} (#{drug.id}). "
            f"Removing {-delta} units, available {previous}. Clamping to 0."
        )
        new_stock = 0
    drug.stock = validate_stock(new_stock)

    movement = StockMovement(
        drug_id=drug.id,
        movement_type=movement_type,
        quantity=drug.stock - previous,
        previous_stock=previous,
        new_stock=drug.stock,
        reference_id=reference_id,
        reason=reason,
        employee_id=employee_id,
    )
    db.add(movement)
    return movement


def restock(db: Session, drug: Drug, packs: int, employee_id: int | None = None) -> Drug:
    """Quick restock; quantity is in packs."""
    if packs <= 0:
        raise ValueError("Restock quantity must be positive")
    units = units_for(packs, False, drug.units_per_pack)
    apply_stock_change(db, drug, units, "restock", reason=f"Restock {packs} packs", employee_id=employee_id)
    db.commit()
    db.refresh(drug)
    return drug


def adjust_stock(
    db: Session,
    drug: Drug,
    new_stock: int,
    reason: str,
    employee_id: int | None = None,
) -> StockMovement:
    """Manual count correction: set the unit count and keep the difference in the ledger."""
    if new_stock < 0:
        raise ValueError("Stock cannot be negative")
    if not reason or not reason.strip():
        raise ValueError("An adjustment reason is required")
    movement = apply_stock_change(
        db, drug, validate_stock(new_stock) - drug.stock, "adjustment",
        reason=reason.strip(), employee_id=employee_id,
    )
    db.commit()
    db.refresh(movement)
    return movement


def check_stock_availability(db: Session, items: Iterable) -> List[dict]:
    """
    Dry-run of a checkout. Returns one problem entry per line that is unknown
    or short on stock; an empty list means the cart can be sold as-is.
    """
    problems = []
    for item in items:
        drug = db.get(Drug, item.drug_id)
        if not drug:
            problems.append({"drug_id": item.drug_id, "message": f"Item not found in inventory: {item.drug_id}"})
            continue
        requested = units_for(item.quantity, item.is_unit, drug.units_per_pack)
        if drug.stock < requested:
            problems.append({
                "drug_id": drug.id,
                "message": (
                    f"Insufficient stock for {drug.name}. "
                    f"Requested: {requested} units, Available: {drug.stock} units"
                ),
                "requested": requested,
                "available": drug.stock,
            })
    return problems


def low_stock_drugs(db: Session, threshold_packs: int | None = None) -> List[Drug]:
    """Drugs with fewer than threshold_packs full packs left, lowest first."""
    threshold = settings.LOW_STOCK_THRESHOLD_PACKS if threshold_packs is None else threshold_packs
    drugs = db.query(Drug).order_by(Drug.stock.asc()).all()
    return [d for d in drugs if d.stock / (d.units_per_pack or 1) < threshold]


def expiring_drugs(db: Session, days: int | None = None, today: date | None = None) -> List[Drug]:
    """In-stock drugs expiring within the next `days` days (already expired included)."""
    today = today or date.today()
    limit = today + timedelta(days=settings.EXPIRY_ALERT_DAYS if days is None else days)
    return (
        db.query(Drug)
        .filter(Drug.expiry_date.isnot(None), Drug.expiry_date <= limit, Drug.stock > 0)
        .order_by(Drug.expiry_date.asc())
        .all()
    )


def list_movements(db: Session, drug_id: int, limit: int = 100) -> List[StockMovement]:
    return (
        db.query(StockMovement)
        .filter(StockMovement.drug_id == drug_id)
        .order_by(StockMovement.id.desc())
        .limit(limit)
        .all()
    )
