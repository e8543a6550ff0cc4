"""
Customer returns against a completed sale.

A return restocks the returned units, refunds through the register and
updates the sale's running net total and per-item returned quantities.

Returns are not deduplicated by request: submitting the same return twice
records it twice, up to the quantity the sale still has outstanding.
"""
import logging
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from pharmaflow.core.audit import AuditLog
from pharmaflow.models.drug import Drug
from pharmaflow.models.employee import Employee
from pharmaflow.models.sale import Sale
from pharmaflow.models.sale_return import SaleReturn, ReturnItem
from pharmaflow.schemas.sale_return import ReturnCreate
from pharmaflow.services import inventory_service, shift_service, transaction_clock

logger = logging.getLogger(__name__)


def _money(value) -> Decimal:
    return Decimal(str(value or 0))


def refunded_so_far(db: Session, sale_id: str) -> Decimal:
    total = db.query(func.sum(SaleReturn.total_refund)).filter(SaleReturn.sale_id == sale_id).scalar()
    return _money(total)


def check_returnable(sale: Sale, items) -> None:
    """
    Every returned drug must be on the sale, and no more of it can come back
    than was sold minus what earlier returns already took. Compared in units
    so pack and unit lines mix.
    """
    sold: Dict[int, int] = {}
    pack_sizes: Dict[int, int] = {}
    for line in sale.items:
        if line.drug_id is None:
            continue
        sold[line.drug_id] = sold.get(line.drug_id, 0) + inventory_service.units_for(
            line.quantity, line.is_unit, line.units_per_pack)
        pack_sizes.setdefault(line.drug_id, line.units_per_pack)

    returned: Dict[int, int] = {}
    for previous in sale.returns:
        for line in previous.items:
            if line.drug_id in pack_sizes:
                returned[line.drug_id] = returned.get(line.drug_id, 0) + inventory_service.units_for(
                    line.quantity_returned, line.is_unit, pack_sizes[line.drug_id])

    requested: Dict[int, int] = {}
    for item in items:
        if item.drug_id not in sold:
            raise ValueError(f"Item {item.name or item.drug_id} was not part of sale #{sale.id}")
        requested[item.drug_id] = requested.get(item.drug_id, 0) + inventory_service.units_for(
            item.quantity_returned, item.is_unit, pack_sizes[item.drug_id])

    for drug_id, units in requested.items():
        remaining = sold[drug_id] - returned.get(drug_id, 0)
        if units > remaining:
            raise ValueError(
                f"Cannot return {units} units of item {drug_id} on sale #{sale.id}: only {remaining} left to return"
            )


def process_return(db: Session, data: ReturnCreate, employee: Optional[Employee] = None) -> SaleReturn:
    """
    Record a return and apply it to the sale, stock and open shift.

    Raises:
        LookupError: the sale does not exist
        TransactionTimeError: return time is before the last recorded transaction
        ValueError: no items, the sale was cancelled, or an item was not
            sold on it or is returned beyond the quantity still outstanding
    """
    sale = db.get(Sale, data.sale_id)
    if not sale:
        raise LookupError(f"Sale {data.sale_id} not found")
    if sale.status == "cancelled":
        raise ValueError("Cannot return items from a cancelled sale")
    if not data.items:
        raise ValueError("No items selected for return")
    check_returnable(sale, data.items)

    return_date = transaction_clock.to_local(data.date)
    transaction_clock.validate_transaction_time(db, return_date)

    employee_id = employee.id if employee else None
    total_refund = (
        _money(data.total_refund)
        if data.total_refund is not None
        else sum((_money(i.refund_amount) for i in data.items), Decimal("0"))
    )
    previous_refunds = refunded_so_far(db, sale.id)

    sale_return = SaleReturn(
        sale=sale,
        date=return_date,
        return_type=data.return_type,
        reason=data.reason,
        notes=data.notes,
        processed_by=employee_id,
        total_refund=total_refund,
    )
    names = {item.drug_id: item.name for item in sale.items}
    for item in data.items:
        sale_return.items.append(ReturnItem(
            drug_id=item.drug_id,
            name=item.name or names.get(item.drug_id) or str(item.drug_id),
            quantity_returned=item.quantity_returned,
            is_unit=item.is_unit,
            original_price=_money(item.original_price),
            refund_amount=_money(item.refund_amount),
            reason=item.reason,
            condition=item.condition,
        ))
    db.add(sale_return)
    db.flush()

    # JSON columns are reassigned, not mutated in place, so the change is tracked
    returned = dict(sale.item_returned_quantities or {})
    for item in sale_return.items:
        key = str(item.drug_id)
        returned[key] = returned.get(key, 0) + item.quantity_returned

    sale.has_returns = True
    sale.return_ids = list(sale.return_ids or []) + [sale_return.id]
    sale.return_dates = list(sale.return_dates or []) + [return_date.isoformat()]
    sale.return_details = list(sale.return_details or []) + [{
        "date": return_date.isoformat(),
        "items": [
            {
                "drug_id": item.drug_id,
                "name": item.name,
                "quantity": item.quantity_returned,
                "refund_amount": float(item.refund_amount),
            }
            for item in sale_return.items
        ],
    }]
    sale.item_returned_quantities = returned
    sale.net_total = _money(sale.total) - (previous_refunds + total_refund)

    for item in sale_return.items:
        drug = db.get(Drug, item.drug_id)
        if not drug:
            logger.warning(f"Return #{sale_return.id}: drug {item.drug_id} no longer in inventory, not restocked")
            continue
        units = inventory_service.units_for(item.quantity_returned, item.is_unit, drug.units_per_pack)
        inventory_service.apply_stock_change(
            db, drug, units, "return",
            reference_id=str(sale_return.id),
            reason=f"Return for Sale #{sale.id}",
            employee_id=employee_id,
        )

    transaction_clock.update_last_transaction_time(db, return_date)
    shift_service.add_transaction_to_open_shift(
        db,
        "return" if sale.payment_method == "cash" else "card_return",
        total_refund,
        reason=f"Return for Sale #{sale.id}",
        user_id=str(employee_id) if employee_id else "System",
        related_sale_id=sale.id,
    )

    db.commit()
    db.refresh(sale_return)

    logger.info(f"Return #{sale_return.id} for sale #{sale.id}: refund {total_refund}, net total now {sale.net_total}")
    AuditLog.log_action(
        "return", "sale", sale.id, employee_id,
        changes={"return_id": sale_return.id, "refund": float(total_refund)},
    )
    return sale_return


def get_return(db: Session, return_id: int) -> Optional[SaleReturn]:
    return db.get(SaleReturn, return_id)


def list_returns(db: Session, sale_id: str | None = None, limit: int = 200) -> List[SaleReturn]:
    q = db.query(SaleReturn)
    if sale_id:
        q = q.filter(SaleReturn.sale_id == sale_id)
    return q.order_by(SaleReturn.date.desc(), SaleReturn.id.desc()).limit(limit).all()
