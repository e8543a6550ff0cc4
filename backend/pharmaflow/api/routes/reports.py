"""
Reports API: dashboard cards and charts.

Provides:
- Summary cards (revenue, returns, stock alerts, customers)
- Daily sales (last N days)
- Top-selling drugs
- Sales per employee
"""
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmaflow.api.deps import get_db, require_permission
from pharmaflow.models.employee import Employee
from pharmaflow.services import report_service

router = APIRouter()


@router.get("/summary")
def get_summary(db: Session = Depends(get_db), _: Employee = Depends(require_permission("reports.view_financial"))):
    return report_service.summary(db)


@router.get("/daily-sales")
def get_daily_sales(
    days: int = Query(7, ge=1, le=366, description="Number of days to fetch"),
    db: Session = Depends(get_db),
    _: Employee = Depends(require_permission("reports.view_financial")),
):
    return report_service.daily_sales(db, days)


@router.get("/top-selling")
def get_top_selling(
    limit: int = Query(5, ge=1, le=100),
    db: Session = Depends(get_db),
    _: Employee = Depends(require_permission("reports.view_inventory")),
):
    return report_service.top_selling(db, limit)


@router.get("/employee-sales")
def get_employee_sales(
    start: datetime | None = Query(None),
    db: Session = Depends(get_db),
    _: Employee = Depends(require_permission("reports.view_financial")),
):
    return report_service.employee_sales(db, start)
