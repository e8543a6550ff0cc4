"""Employees: account management for admins."""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pharmaflow.api.deps import get_db, require_permission
from pharmaflow.core.audit import AuditLog
from pharmaflow.core.exceptions import BusinessError
from pharmaflow.models.employee import Employee
from pharmaflow.schemas.employee import EmployeeCreate, EmployeeUpdate, EmployeeResponse
from pharmaflow.services import employee_service

router = APIRouter()


def _get_employee_or_404(db: Session, employee_id: int) -> Employee:
    employee = employee_service.get_employee(db, employee_id)
    if not employee:
        raise BusinessError.not_found("Employee", f"id={employee_id}")
    return employee


@router.get("", response_model=List[EmployeeResponse])
def list_employees(db: Session = Depends(get_db), _: Employee = Depends(require_permission("users.view"))):
    return employee_service.list_employees(db)


@router.get("/{employee_id}", response_model=EmployeeResponse)
def get_employee(employee_id: int, db: Session = Depends(get_db), _: Employee = Depends(require_permission("users.view"))):
    return _get_employee_or_404(db, employee_id)


@router.post("", response_model=EmployeeResponse, status_code=201)
def create_employee(
    data: EmployeeCreate,
    db: Session = Depends(get_db),
    current: Employee = Depends(require_permission("users.manage")),
):
    try:
        employee = employee_service.create_employee(db, data)
    except ValueError as e:
        raise BusinessError.conflict(str(e))
    AuditLog.log_action("create", "employee", employee.id, current.id, changes={"role": employee.role})
    return employee


@router.put("/{employee_id}", response_model=EmployeeResponse)
def update_employee(
    employee_id: int,
    data: EmployeeUpdate,
    db: Session = Depends(get_db),
    current: Employee = Depends(require_permission("users.manage")),
):
    employee = _get_employee_or_404(db, employee_id)
    try:
        employee = employee_service.update_employee(db, employee, data)
    except ValueError as e:
        raise BusinessError.bad_request(str(e))
    # Never log the password itself
    changes = data.model_dump(exclude_unset=True, exclude={"password"})
    if data.password is not None:
        changes["password"] = "changed"
    AuditLog.log_action("update", "employee", employee.id, current.id, changes=changes)
    return employee


@router.delete("/{employee_id}")
def delete_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    current: Employee = Depends(require_permission("users.manage")),
):
    if employee_id == current.id:
        raise BusinessError.bad_request("You cannot delete your own account")
    employee_service.delete_employee(db, _get_employee_or_404(db, employee_id))
    AuditLog.log_action("delete", "employee", employee_id, current.id)
    return {"message": "Employee deleted"}
