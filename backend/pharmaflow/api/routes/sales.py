"""Sales: checkout, stock pre-check, history, edits and receipts."""
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse, PlainTextResponse
from sqlalchemy.orm import Session

from pharmaflow.api.deps import get_db, get_current_employee, require_permission
from pharmaflow.core.audit import AuditLog
from pharmaflow.core.exceptions import BusinessError, TransactionTimeError
from pharmaflow.core.permissions import can_perform_action
from pharmaflow.models.employee import Employee
from pharmaflow.models.sale import Sale
from pharmaflow.schemas.sale import SaleCreate, SaleUpdate, SaleResponse, StockCheckRequest
from pharmaflow.services import inventory_service, receipt_service, sales_service

router = APIRouter()


def _get_sale_or_404(db: Session, sale_id: str) -> Sale:
    sale = sales_service.get_sale(db, sale_id)
    if not sale:
        raise BusinessError.not_found("Sale", f"id={sale_id}")
    return sale


@router.post("", response_model=SaleResponse, status_code=201)
def complete_sale(
    data: SaleCreate,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("sale.checkout")),
):
    """
    Checkout. A sale dated before the last recorded transaction is
    rejected and nothing is written.
    """
    try:
        return sales_service.complete_sale(db, data, employee)
    except TransactionTimeError as e:
        db.rollback()
        raise BusinessError.bad_request(str(e))
    except ValueError as e:
        db.rollback()
        raise BusinessError.bad_request(str(e))


@router.post("/check-stock")
def check_stock(
    data: StockCheckRequest,
    db: Session = Depends(get_db),
    _: Employee = Depends(require_permission("sale.create")),
):
    """Availability report for a cart. Does not touch stock."""
    problems = inventory_service.check_stock_availability(db, data.items)
    return {"available": not problems, "problems": problems}


@router.get("", response_model=List[SaleResponse])
def list_sales(
    start: datetime | None = Query(None),
    end: datetime | None = Query(None),
    customer_code: str | None = Query(None),
    employee_id: int | None = Query(None),
    status: str | None = Query(None),
    limit: int = Query(200, ge=1, le=1000),
    db: Session = Depends(get_db),
    _: Employee = Depends(require_permission("sale.view_history")),
):
    return sales_service.list_sales(db, start, end, customer_code, employee_id, status, limit)


@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(sale_id: str, db: Session = Depends(get_db), _: Employee = Depends(require_permission("sale.view_details"))):
    return _get_sale_or_404(db, sale_id)


@router.patch("/{sale_id}", response_model=SaleResponse)
def update_sale(
    sale_id: str,
    data: SaleUpdate,
    request: Request,
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    """Delivery/customer edits need sale.modify; cancelling needs sale.cancel."""
    action = "sale.cancel" if data.status == "cancelled" else "sale.modify"
    if not can_perform_action(employee.role, action):
        AuditLog.log_access_denied(action, employee.id, employee.role, request.url.path)
        raise BusinessError.forbidden(f"{employee.username} ({employee.role}) lacks {action}")

    sale = _get_sale_or_404(db, sale_id)
    try:
        return sales_service.update_sale(db, sale, data, employee)
    except ValueError as e:
        db.rollback()
        raise BusinessError.bad_request(str(e))


@router.get("/{sale_id}/receipt.pdf")
def receipt_pdf(sale_id: str, db: Session = Depends(get_db), _: Employee = Depends(require_permission("sale.view_details"))):
    sale = _get_sale_or_404(db, sale_id)
    buffer = receipt_service.generate_receipt_pdf(sale)
    return StreamingResponse(
        buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f"inline; filename=receipt_{sale.id}.pdf"},
    )


@router.get("/{sale_id}/receipt.txt", response_class=PlainTextResponse)
def receipt_text(sale_id: str, db: Session = Depends(get_db), _: Employee = Depends(require_permission("sale.view_details"))):
    """Plain-text receipt for the thermal printer."""
    return receipt_service.format_receipt_text(_get_sale_or_404(db, sale_id))
