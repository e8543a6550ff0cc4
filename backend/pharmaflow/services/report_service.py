"""
Dashboard and report figures.

Revenue is always taken from net totals (after refunds) of sales that were
not cancelled.
"""
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from pharmaflow.models.customer import Customer
from pharmaflow.models.drug import Drug
from pharmaflow.models.employee import Employee
from pharmaflow.models.sale import Sale, SaleItem
from pharmaflow.models.sale_return import SaleReturn
from pharmaflow.services import inventory_service


def _net(sale: Sale) -> float:
    return float(sale.net_total if sale.net_total is not None else sale.total)


def _active_sales(db: Session, start: datetime | None = None):
    q = db.query(Sale).filter(Sale.status != "cancelled")
    if start:
        q = q.filter(Sale.date >= start)
    return q


def summary(db: Session, today: date | None = None) -> Dict:
    today = today or date.today()
    day_start = datetime.combine(today, datetime.min.time())
    sales = _active_sales(db).all()

    inventory_value = sum(
        (Decimal(str(d.cost_price or 0)) * d.stock / (d.units_per_pack or 1) for d in db.query(Drug).all()),
        Decimal("0"),
    )
    return {
        "total_revenue": round(sum(_net(s) for s in sales), 2),
        "today_revenue": round(sum(_net(s) for s in sales if s.date >= day_start), 2),
        "total_sales": len(sales),
        "returns_total": float(db.query(func.sum(SaleReturn.total_refund)).scalar() or 0),
        "low_stock_count": len(inventory_service.low_stock_drugs(db)),
        "expiring_count": len(inventory_service.expiring_drugs(db, today=today)),
        "total_customers": db.query(func.count(Customer.id)).scalar() or 0,
        "inventory_value": round(float(inventory_value), 2),
    }


def daily_sales(db: Session, days: int = 7, today: date | None = None) -> List[Dict]:
    """One row per day for the last `days` days, oldest first, zero-filled."""
    today = today or date.today()
    start_date = today - timedelta(days=days - 1)
    by_day: Dict[date, List[Sale]] = defaultdict(list)
    for sale in _active_sales(db, datetime.combine(start_date, datetime.min.time())).all():
        by_day[sale.date.date()].append(sale)

    rows = []
    for i in range(days):
        d = start_date + timedelta(days=i)
        day_sales = by_day.get(d, [])
        rows.append({
            "date": d.isoformat(),
            "day": d.strftime("%a"),
            "revenue": round(sum(_net(s) for s in day_sales), 2),
            "orders": len(day_sales),
        })
    return rows


def top_selling(db: Session, limit: int = 5) -> List[Dict]:
    """Drugs ranked by units sold (packs converted to units)."""
    units: Dict[str, int] = defaultdict(int)
    revenue: Dict[str, float] = defaultdict(float)
    items = (
        db.query(SaleItem)
        .join(Sale, SaleItem.sale_id == Sale.id)
        .filter(Sale.status != "cancelled")
        .all()
    )
    for item in items:
        units[item.name] += inventory_service.units_for(item.quantity, item.is_unit, item.units_per_pack)
        price = float(item.price) / (item.units_per_pack or 1) if item.is_unit else float(item.price)
        revenue[item.name] += price * item.quantity
    ranked = sorted(units.items(), key=lambda kv: kv[1], reverse=True)[:limit]
    return [{"name": name, "units_sold": sold, "revenue": round(revenue[name], 2)} for name, sold in ranked]


def employee_sales(db: Session, start: datetime | None = None) -> List[Dict]:
    totals: Dict[int | None, Dict] = {}
    for sale in _active_sales(db, start).all():
        row = totals.setdefault(sale.sold_by_employee_id, {"orders": 0, "revenue": 0.0})
        row["orders"] += 1
        row["revenue"] += _net(sale)

    names = {e.id: e.name for e in db.query(Employee).all()}
    return sorted(
        (
            {
                "employee_id": employee_id,
                "name": names.get(employee_id, "Unknown"),
                "orders": row["orders"],
                "revenue": round(row["revenue"], 2),
            }
            for employee_id, row in totals.items()
        ),
        key=lambda r: r["revenue"],
        reverse=True,
    )
