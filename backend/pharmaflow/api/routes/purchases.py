"""Purchases: orders from suppliers and the approval queue."""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmaflow.api.deps import get_db, require_permission
from pharmaflow.core.exceptions import BusinessError
from pharmaflow.core.permissions import can_perform_action
from pharmaflow.models.employee import Employee
from pharmaflow.models.purchase import Purchase
from pharmaflow.schemas.purchase import PurchaseCreate, PurchaseApproval, PurchaseRejection, PurchaseResponse
from pharmaflow.services import purchase_service

router = APIRouter()


def _get_purchase_or_404(db: Session, purchase_id: int) -> Purchase:
    purchase = purchase_service.get_purchase(db, purchase_id)
    if not purchase:
        raise BusinessError.not_found("Purchase", f"id={purchase_id}")
    return purchase


@router.post("", response_model=PurchaseResponse, status_code=201)
def create_purchase(
    data: PurchaseCreate,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("purchase.create")),
):
    """Save a purchase order. Only approvers may record one as already completed."""
    if data.status == "completed" and not can_perform_action(employee.role, "purchase.approve"):
        raise BusinessError.forbidden(f"{employee.username} cannot receive purchases without approval")
    try:
        return purchase_service.create_purchase(db, data, employee)
    except LookupError:
        db.rollback()
        raise BusinessError.not_found("Supplier", f"id={data.supplier_id}")
    except ValueError as e:
        db.rollback()
        raise BusinessError.bad_request(str(e))


@router.get("", response_model=List[PurchaseResponse])
def list_purchases(
    status: str | None = Query(None),
    supplier_id: int | None = Query(None),
    db: Session = Depends(get_db),
    _: Employee = Depends(require_permission("purchase.view")),
):
    return purchase_service.list_purchases(db, status, supplier_id)


@router.get("/{purchase_id}", response_model=PurchaseResponse)
def get_purchase(purchase_id: int, db: Session = Depends(get_db), _: Employee = Depends(require_permission("purchase.view"))):
    return _get_purchase_or_404(db, purchase_id)


@router.post("/{purchase_id}/approve", response_model=PurchaseResponse)
def approve_purchase(
    purchase_id: int,
    data: PurchaseApproval | None = None,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("purchase.approve")),
):
    purchase = _get_purchase_or_404(db, purchase_id)
    approver = (data.approver_name if data else None) or employee.name
    try:
        return purchase_service.approve_purchase(db, purchase, approver, employee)
    except ValueError as e:
        db.rollback()
        raise BusinessError.bad_request(str(e))


@router.post("/{purchase_id}/reject", response_model=PurchaseResponse)
def reject_purchase(
    purchase_id: int,
    data: PurchaseRejection | None = None,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("purchase.reject")),
):
    purchase = _get_purchase_or_404(db, purchase_id)
    try:
        return purchase_service.reject_purchase(db, purchase, data.reason if data else None, employee)
    except ValueError as e:
        db.rollback()
        raise BusinessError.bad_request(str(e))
