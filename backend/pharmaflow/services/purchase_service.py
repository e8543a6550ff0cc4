"""
Purchase orders.

Stock only moves when a purchase becomes `completed`, either at creation
or on approval: each line adds quantity * units_per_pack units and the
line cost becomes the drug's cost price (last cost wins).
"""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from pharmaflow.core.audit import AuditLog
from pharmaflow.models.drug import Drug
from pharmaflow.models.employee import Employee
from pharmaflow.models.purchase import Purchase, PurchaseItem
from pharmaflow.models.supplier import Supplier
from pharmaflow.schemas.purchase import PurchaseCreate
from pharmaflow.services import inventory_service, transaction_clock

logger = logging.getLogger(__name__)


def _money(value) -> Decimal:
    return Decimal(str(value or 0))


def next_invoice_id(db: Session) -> str:
    highest = db.query(func.max(Purchase.id)).scalar() or 0
    return f"PO-{highest + 1:06d}"


def _apply_to_stock(db: Session, purchase: Purchase, employee_id: int | None) -> None:
    for item in purchase.items:
        drug = db.get(Drug, item.drug_id) if item.drug_id else None
        if not drug:
            logger.warning(f"PO {purchase.invoice_id}: drug {item.drug_id} not in inventory, line skipped")
            continue
        units = inventory_service.units_for(item.quantity, False, drug.units_per_pack)
        inventory_service.apply_stock_change(
            db, drug, units, "purchase",
            reference_id=purchase.invoice_id,
            reason=f"PO {purchase.invoice_id}",
            employee_id=employee_id,
        )
        drug.cost_price = item.cost_price


def create_purchase(db: Session, data: PurchaseCreate, employee: Optional[Employee] = None) -> Purchase:
    """Save a purchase order. A `completed` order is received into stock immediately."""
    if not data.items:
        raise ValueError("Purchase order has no items")

    supplier = db.get(Supplier, data.supplier_id) if data.supplier_id else None
    if data.supplier_id and not supplier:
        raise LookupError(f"Supplier {data.supplier_id} not found")
    supplier_name = supplier.name if supplier else (data.supplier_name or "").strip()
    if not supplier_name:
        raise ValueError("A supplier is required")

    for item in data.items:
        if not db.get(Drug, item.drug_id):
            raise ValueError(f"Item not found in inventory: {item.name or item.drug_id}")

    employee_id = employee.id if employee else None
    purchase = Purchase(
        invoice_id=next_invoice_id(db),
        external_invoice_id=data.external_invoice_id,
        supplier_id=supplier.id if supplier else None,
        supplier_name=supplier_name,
        date=transaction_clock.to_local(data.date),
        payment_type=data.payment_type,
        status=data.status,
    )
    for item in data.items:
        purchase.items.append(PurchaseItem(
            drug_id=item.drug_id,
            name=item.name or db.get(Drug, item.drug_id).name,
            quantity=item.quantity,
            cost_price=_money(item.cost_price),
            expiry_date=item.expiry_date,
            sale_price=_money(item.sale_price) if item.sale_price is not None else None,
        ))
    purchase.total_cost = sum((i.cost_price * i.quantity for i in purchase.items), Decimal("0"))
    db.add(purchase)
    db.flush()

    if purchase.status == "completed":
        purchase.approval_date = transaction_clock.now()
        purchase.approved_by = employee.name if employee else None
        _apply_to_stock(db, purchase, employee_id)
    else:
        logger.info(f"Purchase order {purchase.invoice_id} saved as pending")

    db.commit()
    db.refresh(purchase)
    AuditLog.log_action("create", "purchase", purchase.invoice_id, employee_id,
                        changes={"status": purchase.status, "total_cost": float(purchase.total_cost)})
    return purchase


def approve_purchase(db: Session, purchase: Purchase, approver_name: str,
                     employee: Optional[Employee] = None) -> Purchase:
    """pending -> completed, then receive the goods into stock."""
    if purchase.status != "pending":
        raise ValueError(f"Only pending purchases can be approved (PO {purchase.invoice_id} is {purchase.status})")

    employee_id = employee.id if employee else None
    purchase.status = "completed"
    purchase.approval_date = transaction_clock.now()
    purchase.approved_by = approver_name
    _apply_to_stock(db, purchase, employee_id)

    db.commit()
    db.refresh(purchase)
    logger.info(f"PO {purchase.invoice_id} approved by {approver_name}")
    AuditLog.log_action("approve", "purchase", purchase.invoice_id, employee_id)
    return purchase


def reject_purchase(db: Session, purchase: Purchase, reason: str | None = None,
                    employee: Optional[Employee] = None) -> Purchase:
    """pending -> rejected. Terminal; inventory is not touched."""
    if purchase.status != "pending":
        raise ValueError(f"Only pending purchases can be rejected (PO {purchase.invoice_id} is {purchase.status})")

    purchase.status = "rejected"
    purchase.rejection_reason = reason
    db.commit()
    db.refresh(purchase)
    AuditLog.log_action("reject", "purchase", purchase.invoice_id, employee.id if employee else None,
                        changes={"reason": reason} if reason else None)
    return purchase


def get_purchase(db: Session, purchase_id: int) -> Optional[Purchase]:
    return db.get(Purchase, purchase_id)


def list_purchases(db: Session, status: str | None = None, supplier_id: int | None = None) -> List[Purchase]:
    q = db.query(Purchase)
    if status:
        q = q.filter(Purchase.status == status)
    if supplier_id:
        q = q.filter(Purchase.supplier_id == supplier_id)
    return q.order_by(Purchase.date.desc(), Purchase.id.desc()).all()
