"""Returns against completed sales."""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmaflow.api.deps import get_db, require_permission
from pharmaflow.core.exceptions import BusinessError
from pharmaflow.models.employee import Employee
from pharmaflow.schemas.sale_return import ReturnCreate, ReturnResponse
from pharmaflow.services import return_service

router = APIRouter()


@router.post("", response_model=ReturnResponse, status_code=201)
def process_return(
    data: ReturnCreate,
    db: Session = Depends(get_db),
    employee: Employee = Depends(require_permission("sale.refund")),
):
    try:
        return return_service.process_return(db, data, employee)
    except LookupError:
        db.rollback()
        raise BusinessError.not_found("Sale", f"id={data.sale_id}")
    except ValueError as e:
        db.rollback()
        raise BusinessError.bad_request(str(e))


@router.get("", response_model=List[ReturnResponse])
def list_returns(
    sale_id: str | None = Query(None),
    limit: int = Query(200, ge=1, le=1000),
    db: Session = Depends(get_db),
    _: Employee = Depends(require_permission("sale.view_history")),
):
    return return_service.list_returns(db, sale_id, limit)


@router.get("/{return_id}", response_model=ReturnResponse)
def get_return(return_id: int, db: Session = Depends(get_db), _: Employee = Depends(require_permission("sale.view_history"))):
    sale_return = return_service.get_return(db, return_id)
    if not sale_return:
        raise BusinessError.not_found("Return", f"id={return_id}")
    return sale_return
