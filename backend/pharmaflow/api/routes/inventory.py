"""Inventory: drug catalog, restock, stock corrections and alerts."""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmaflow.api.deps import get_db, require_permission
from pharmaflow.core.audit import AuditLog
from pharmaflow.core.exceptions import BusinessError
from pharmaflow.models.drug import Drug
from pharmaflow.models.employee import Employee
from pharmaflow.schemas.drug import (
    DrugCreate, DrugUpdate, DrugResponse, RestockRequest, StockAdjustmentRequest, StockMovementResponse,
)
from pharmaflow.services import inventory_service

router = APIRouter()


def _to_response(drug: Drug) -> DrugResponse:
    out = DrugResponse.model_validate(drug)
    out.stock_display = inventory_service.format_stock(drug.stock, drug.units_per_pack)
    return out


def _get_drug_or_404(db: Session, drug_id: int) -> Drug:
    drug = inventory_service.get_drug(db, drug_id)
    if not drug:
        raise BusinessError.not_found("Drug", f"id={drug_id}")
    return drug


@router.get("", response_model=List[DrugResponse])
def list_drugs(
    search: str | None = Query(None),
    category: str | None = Query(None),
    db: Session = Depends(get_db),
    _: Employee = Depends(require_permission("inventory.view")),
):
    """Catalog with search over name, generic name, barcode and internal code."""
    return [_to_response(d) for d in inventory_service.list_drugs(db, search, category)]


@router.get("/alerts/low-stock", response_model=List[DrugResponse])
def low_stock(
    threshold_packs: int | None = Query(None, ge=0),
    db: Session = Depends(get_db),
    _: Employee = Depends(require_permission("inventory.view")),
):
    return [_to_response(d) for d in inventory_service.low_stock_drugs(db, threshold_packs)]


@router.get("/alerts/expiring", response_model=List[DrugResponse])
def expiring(
    days: int | None = Query(None, ge=0),
    db: Session = Depends(get_db),
    _: Employee = Depends(require_permission("inventory.view")),
):
    return [_to_response(d) for d in inventory_service.expiring_drugs(db, days)]


@router.get("/{drug_id}", response_model=DrugResponse)
def get_drug(drug_id: int, db: Session = Depends(get_db), _: Employee = Depends(require_permission("inventory.view"))):
    return _to_response(_get_drug_or_404(db, drug_id))


@router.post("", response_model=DrugResponse, status_code=201)
def create_drug(
    data: DrugCreate,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("inventory.add")),
):
    try:
        drug = inventory_service.create_drug(db, data.model_dump())
    except ValueError as e:
        raise BusinessError.bad_request(str(e))
    AuditLog.log_action("create", "drug", drug.id, employee.id, changes={"name": drug.name, "stock": drug.stock})
    return _to_response(drug)


@router.put("/{drug_id}", response_model=DrugResponse)
def update_drug(
    drug_id: int,
    data: DrugUpdate,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("inventory.update")),
):
    drug = _get_drug_or_404(db, drug_id)
    changes = data.model_dump(exclude_unset=True)
    try:
        drug = inventory_service.update_drug(db, drug, dict(changes))
    except ValueError as e:
        raise BusinessError.bad_request(str(e))
    AuditLog.log_action("update", "drug", drug.id, employee.id, changes=changes)
    return _to_response(drug)


@router.delete("/{drug_id}")
def delete_drug(
    drug_id: int,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("inventory.delete")),
):
    drug = _get_drug_or_404(db, drug_id)
    name = drug.name
    inventory_service.delete_drug(db, drug)
    AuditLog.log_action("delete", "drug", drug_id, employee.id, changes={"name": name})
    return {"message": f"{name} deleted"}


@router.post("/{drug_id}/restock", response_model=DrugResponse)
def restock(
    drug_id: int,
    data: RestockRequest,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("inventory.restock")),
):
    """Add whole packs to stock."""
    drug = _get_drug_or_404(db, drug_id)
    try:
        drug = inventory_service.restock(db, drug, data.packs, employee.id)
    except ValueError as e:
        raise BusinessError.bad_request(str(e))
    AuditLog.log_action("restock", "drug", drug.id, employee.id, changes={"packs": data.packs})
    return _to_response(drug)


@router.post("/{drug_id}/adjust", response_model=StockMovementResponse)
def adjust_stock(
    drug_id: int,
    data: StockAdjustmentRequest,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("inventory.adjust")),
):
    """Set the counted number of units; the difference is kept as an adjustment movement."""
    drug = _get_drug_or_404(db, drug_id)
    try:
        movement = inventory_service.adjust_stock(db, drug, data.new_stock, data.reason, employee.id)
    except ValueError as e:
        raise BusinessError.bad_request(str(e))
    AuditLog.log_action("adjust", "drug", drug.id, employee.id,
                        changes={"from": movement.previous_stock, "to": movement.new_stock, "reason": data.reason})
    return movement


@router.get("/{drug_id}/movements", response_model=List[StockMovementResponse])
def movements(
    drug_id: int,
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    _: Employee = Depends(require_permission("inventory.view")),
):
    _get_drug_or_404(db, drug_id)
    return inventory_service.list_movements(db, drug_id, limit)
