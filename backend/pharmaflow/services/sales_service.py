"""
Checkout: turns a cart into a Sale.

complete_sale runs the whole register transaction in one session:
time check -> serial number -> stock deduction -> loyalty points ->
sale record -> shift posting, then commits once. Validation failures
raise before anything is written.
"""
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from pharmaflow.core.audit import AuditLog
from pharmaflow.core.config import settings
from pharmaflow.models.drug import Drug
from pharmaflow.models.employee import Employee
from pharmaflow.models.sale import Sale, SaleItem
from pharmaflow.schemas.sale import SaleCreate, SaleUpdate
from pharmaflow.services import customer_service, inventory_service, shift_service, transaction_clock
from pharmaflow.services.loyalty import calculate_loyalty_points

logger = logging.getLogger(__name__)


def _money(value) -> Decimal:
    return Decimal(str(value or 0))


def validate_sale_data(data: SaleCreate) -> None:
    if not data.items:
        raise ValueError("Cart is empty")
    if data.total < 0:
        raise ValueError("Invalid total amount")


def next_serial_id(db: Session) -> str:
    return str(settings.SALE_SERIAL_START + db.query(Sale).count())


def daily_order_number(db: Session, sale_date: datetime) -> int:
    day_start = sale_date.replace(hour=0, minute=0, second=0, microsecond=0)
    same_day = (
        db.query(Sale)
        .filter(Sale.date >= day_start, Sale.date < day_start + timedelta(days=1))
        .count()
    )
    return same_day + 1


def complete_sale(db: Session, data: SaleCreate, employee: Optional[Employee] = None) -> Sale:
    """
    Record a checkout.

    Raises:
        TransactionTimeError: sale time is before the last recorded transaction
        ValueError: empty cart, negative total or unknown drug
    """
    validate_sale_data(data)
    sale_date = transaction_clock.to_local(data.date)
    transaction_clock.validate_transaction_time(db, sale_date)

    drugs = {}
    for line in data.items:
        drug = db.get(Drug, line.drug_id)
        if not drug:
            raise ValueError(f"Item not found in inventory: {line.name or line.drug_id}")
        drugs[line.drug_id] = drug

    serial_id = next_serial_id(db)
    employee_id = employee.id if employee else None
    sale = Sale(
        id=serial_id,
        date=sale_date,
        daily_order_number=daily_order_number(db, sale_date),
        status=data.status,
        payment_method=data.payment_method,
        sale_type=data.sale_type,
        customer_name=(data.customer_name or "").strip() or settings.GUEST_CUSTOMER_NAME,
        customer_code=(data.customer_code or "").strip() or None,
        customer_phone=data.customer_phone,
        customer_address=data.customer_address,
        subtotal=_money(data.subtotal) if data.subtotal is not None else None,
        global_discount=_money(data.global_discount),
        delivery_fee=_money(data.delivery_fee),
        total=_money(data.total),
        net_total=_money(data.total),
        sold_by_employee_id=employee_id,
        has_returns=False,
        return_ids=[],
        return_dates=[],
        return_details=[],
        item_returned_quantities={},
    )

    for line in data.items:
        drug = drugs[line.drug_id]
        sale.items.append(SaleItem(
            drug_id=drug.id,
            name=line.name or drug.name,
            quantity=line.quantity,
            price=_money(line.price),
            is_unit=line.is_unit,
            units_per_pack=line.units_per_pack or drug.units_per_pack or 1,
            discount=_money(line.discount),
        ))
        units = inventory_service.units_for(line.quantity, line.is_unit, drug.units_per_pack)
        inventory_service.apply_stock_change(
            db, drug, -units, "sale",
            reference_id=serial_id, reason=f"Sale #{serial_id}", employee_id=employee_id,
        )

    points = calculate_loyalty_points(data.total, sale.items)
    sale.points_earned = points
    customer = customer_service.find_customer_for_sale(db, sale.customer_name, sale.customer_code)
    if customer and points > 0:
        customer.points = round((customer.points or 0) + points, 1)

    db.add(sale)
    transaction_clock.update_last_transaction_time(db, sale_date)

    shift_service.add_transaction_to_open_shift(
        db,
        "sale" if data.payment_method == "cash" else "card_sale",
        sale.total,
        reason=f"Sale #{serial_id}",
        user_id=str(employee_id) if employee_id else "System",
        related_sale_id=serial_id,
    )

    db.commit()
    db.refresh(sale)

    logger.info(f"Order #{serial_id} completed: total={sale.total} points={points}")
    AuditLog.log_action(
        "complete", "sale", serial_id, employee_id,
        changes={"total": float(sale.total), "items": len(sale.items), "points": points},
    )
    return sale


def get_sale(db: Session, sale_id: str) -> Optional[Sale]:
    return db.get(Sale, sale_id)


def list_sales(
    db: Session,
    start: datetime | None = None,
    end: datetime | None = None,
    customer_code: str | None = None,
    employee_id: int | None = None,
    status: str | None = None,
    limit: int = 200,
) -> List[Sale]:
    q = db.query(Sale)
    if start:
        q = q.filter(Sale.date >= start)
    if end:
        q = q.filter(Sale.date <= end)
    if customer_code:
        q = q.filter(Sale.customer_code == customer_code)
    if employee_id:
        q = q.filter(Sale.sold_by_employee_id == employee_id)
    if status:
        q = q.filter(Sale.status == status)
    return q.order_by(Sale.date.desc()).limit(limit).all()


def update_sale(db: Session, sale: Sale, updates: SaleUpdate, employee: Optional[Employee] = None) -> Sale:
    """
    Edit a sale (delivery details, status).

    Cancelling puts the sold units back on the shelf. Loyalty points and
    shift postings are left as they were.
    """
    values = updates.model_dump(exclude_unset=True)
    employee_id = employee.id if employee else None

    if values.get("status") == "cancelled" and sale.status != "cancelled":
        for item in sale.items:
            drug = db.get(Drug, item.drug_id) if item.drug_id else None
            if not drug:
                continue
            units = inventory_service.units_for(item.quantity, item.is_unit, drug.units_per_pack)
            inventory_service.apply_stock_change(
                db, drug, units, "cancel",
                reference_id=sale.id, reason=f"Sale #{sale.id} cancelled", employee_id=employee_id,
            )
        AuditLog.log_action("cancel", "sale", sale.id, employee_id)
    elif sale.status == "cancelled" and values.get("status") not in (None, "cancelled"):
        raise ValueError("A cancelled sale cannot be reopened")

    for field, value in values.items():
        if field == "delivery_fee":
            value = _money(value)
        setattr(sale, field, value)

    db.commit()
    db.refresh(sale)
    return sale
