"""Customers: CRUD, loyalty lookup and purchase history."""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmaflow.api.deps import get_db, require_permission
from pharmaflow.core.audit import AuditLog
from pharmaflow.core.exceptions import BusinessError
from pharmaflow.models.customer import Customer
from pharmaflow.models.employee import Employee
from pharmaflow.schemas.customer import CustomerCreate, CustomerUpdate, CustomerResponse
from pharmaflow.schemas.sale import SaleResponse
from pharmaflow.services import customer_service

router = APIRouter()


def _enriched(db: Session, customers: List[Customer]) -> List[CustomerResponse]:
    out = []
    for row in customer_service.enrich_customers(db, customers):
        resp = CustomerResponse.model_validate(row["customer"])
        resp.total_purchases = row["total_purchases"]
        resp.last_visit = row["last_visit"]
        out.append(resp)
    return out


def _get_customer_or_404(db: Session, customer_id: int) -> Customer:
    customer = customer_service.get_customer(db, customer_id)
    if not customer:
        raise BusinessError.not_found("Customer", f"id={customer_id}")
    return customer


@router.get("", response_model=List[CustomerResponse])
def list_customers(
    search: str | None = Query(None),
    db: Session = Depends(get_db),
    _: Employee = Depends(require_permission("customer.view")),
):
    """Customers with total purchases and last visit derived from their sales."""
    return _enriched(db, customer_service.list_customers(db, search))


@router.get("/lookup/{code}", response_model=CustomerResponse)
def lookup(code: str, db: Session = Depends(get_db), _: Employee = Depends(require_permission("customer.view"))):
    """Loyalty lookup by customer code or serial number."""
    customer = customer_service.get_by_code(db, code)
    if not customer:
        raise BusinessError.not_found("Customer", f"code={code}")
    return _enriched(db, [customer])[0]


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, db: Session = Depends(get_db), _: Employee = Depends(require_permission("customer.view"))):
    return _enriched(db, [_get_customer_or_404(db, customer_id)])[0]


@router.get("/{customer_id}/sales", response_model=List[SaleResponse])
def customer_sales(customer_id: int, db: Session = Depends(get_db), _: Employee = Depends(require_permission("sale.view_history"))):
    return customer_service.customer_sales(db, _get_customer_or_404(db, customer_id))


@router.post("", response_model=CustomerResponse, status_code=201)
def create_customer(
    data: CustomerCreate,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("customer.add")),
):
    try:
        customer = customer_service.create_customer(db, data.model_dump())
    except ValueError as e:
        if "already exists" in str(e):
            raise BusinessError.conflict(str(e))
        raise BusinessError.bad_request(str(e))
    AuditLog.log_action("create", "customer", customer.id, employee.id, changes={"code": customer.code})
    return _enriched(db, [customer])[0]


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("customer.update")),
):
    customer = _get_customer_or_404(db, customer_id)
    try:
        customer = customer_service.update_customer(db, customer, data.model_dump(exclude_unset=True))
    except ValueError as e:
        if "already exists" in str(e):
            raise BusinessError.conflict(str(e))
        raise BusinessError.bad_request(str(e))
    AuditLog.log_action("update", "customer", customer.id, employee.id)
    return _enriched(db, [customer])[0]


@router.delete("/{customer_id}")
def delete_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("customer.delete")),
):
    customer_service.delete_customer(db, _get_customer_or_404(db, customer_id))
    AuditLog.log_action("delete", "customer", customer_id, employee.id)
    return {"message": "Customer deleted"}
