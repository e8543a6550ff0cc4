"""Suppliers CRUD."""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmaflow.api.deps import get_db, require_permission
from pharmaflow.core.audit import AuditLog
from pharmaflow.core.exceptions import BusinessError
from pharmaflow.models.employee import Employee
from pharmaflow.models.supplier import Supplier
from pharmaflow.schemas.supplier import SupplierCreate, SupplierUpdate, SupplierResponse
from pharmaflow.services import supplier_service

router = APIRouter()


def _get_supplier_or_404(db: Session, supplier_id: int) -> Supplier:
    supplier = supplier_service.get_supplier(db, supplier_id)
    if not supplier:
        raise BusinessError.not_found("Supplier", f"id={supplier_id}")
    return supplier


@router.get("", response_model=List[SupplierResponse])
def list_suppliers(
    search: str | None = Query(None),
    db: Session = Depends(get_db),
    _: Employee = Depends(require_permission("supplier.view")),
):
    return supplier_service.list_suppliers(db, search)


@router.get("/{supplier_id}", response_model=SupplierResponse)
def get_supplier(supplier_id: int, db: Session = Depends(get_db), _: Employee = Depends(require_permission("supplier.view"))):
    return _get_supplier_or_404(db, supplier_id)


@router.post("", response_model=SupplierResponse, status_code=201)
def create_supplier(
    data: SupplierCreate,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("supplier.add")),
):
    try:
        supplier = supplier_service.create_supplier(db, data.model_dump())
    except ValueError as e:
        raise BusinessError.bad_request(str(e))
    AuditLog.log_action("create", "supplier", supplier.id, employee.id)
    return supplier


@router.put("/{supplier_id}", response_model=SupplierResponse)
def update_supplier(
    supplier_id: int,
    data: SupplierUpdate,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("supplier.update")),
):
    supplier = _get_supplier_or_404(db, supplier_id)
    try:
        supplier = supplier_service.update_supplier(db, supplier, data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise BusinessError.bad_request(str(e))
    AuditLog.log_action("update", "supplier", supplier.id, employee.id)
    return supplier


@router.delete("/{supplier_id}")
def delete_supplier(
    supplier_id: int,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("supplier.delete")),
):
    supplier_service.delete_supplier(db, _get_supplier_or_404(db, supplier_id))
    AuditLog.log_action("delete", "supplier", supplier_id, employee.id)
    return {"message": "Supplier deleted"}
