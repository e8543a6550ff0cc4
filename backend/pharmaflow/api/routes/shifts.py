"""Cash register: shifts and manual cash movements."""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmaflow.api.deps import get_db, require_permission
from pharmaflow.core.audit import AuditLog
from pharmaflow.core.exceptions import BusinessError
from pharmaflow.models.employee import Employee
from pharmaflow.schemas.shift import ShiftOpen, ShiftClose, CashMovement, ShiftResponse, CashTransactionResponse
from pharmaflow.services import shift_service

router = APIRouter()


@router.get("/current", response_model=ShiftResponse | None)
def current_shift(db: Session = Depends(get_db), _: Employee = Depends(require_permission("shift.view"))):
    """The open shift, or null when the register is closed."""
    return shift_service.get_open_shift(db)


@router.get("/current/expected")
def current_expected(db: Session = Depends(get_db), _: Employee = Depends(require_permission("shift.view"))):
    shift = shift_service.get_open_shift(db)
    if not shift:
        raise BusinessError.not_found("Open shift")
    return {"shift_id": shift.id, "expected_balance": float(shift_service.expected_balance(shift))}


@router.get("", response_model=List[ShiftResponse])
def shift_history(
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    _: Employee = Depends(require_permission("shift.reports")),
):
    return shift_service.list_shifts(db, limit)


@router.post("/open", response_model=ShiftResponse, status_code=201)
def open_shift(data: ShiftOpen, db: Session = Depends(get_db), employee: Employee = Depends(require_permission("shift.open"))):
    try:
        shift = shift_service.open_shift(db, data.opening_balance, employee.name)
    except ValueError as e:
        raise BusinessError.bad_request(str(e))
    AuditLog.log_action("open", "shift", shift.id, employee.id, changes={"opening_balance": data.opening_balance})
    return shift


@router.post("/close", response_model=ShiftResponse)
def close_shift(data: ShiftClose, db: Session = Depends(get_db), employee: Employee = Depends(require_permission("shift.close"))):
    try:
        shift = shift_service.close_shift(db, data.closing_balance, employee.name, data.notes)
    except ValueError as e:
        raise BusinessError.bad_request(str(e))
    AuditLog.log_action("close", "shift", shift.id, employee.id,
                        changes={"closing_balance": data.closing_balance, "difference": float(shift.difference)})
    return shift


@router.post("/cash", response_model=CashTransactionResponse, status_code=201)
def cash_movement(data: CashMovement, db: Session = Depends(get_db), employee: Employee = Depends(require_permission("shift.open"))):
    """Cash in / cash out on the open shift."""
    try:
        tx = shift_service.record_cash_movement(db, data.type, data.amount, data.reason, employee.name)
    except ValueError as e:
        raise BusinessError.bad_request(str(e))
    AuditLog.log_action(f"cash_{data.type}", "shift", tx.shift_id, employee.id,
                        changes={"amount": data.amount, "reason": data.reason})
    return tx
