"""FastAPI dependencies: DB session, current employee from JWT, permission checks.

SECURITY: Supports JWT from:
1. Authorization header (for API clients)
2. httpOnly cookie (for the register frontend)
"""
from typing import Callable, Generator, Optional

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from pharmaflow.db.session import SessionLocal
from pharmaflow.core.audit import AuditLog
from pharmaflow.core.config import settings
from pharmaflow.core.exceptions import BusinessError
from pharmaflow.core.permissions import can_perform_action
from pharmaflow.core.security import decode_access_token
from pharmaflow.models.employee import Employee

security = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_employee_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> int:
    """
    Extract employee ID from JWT token.
    Header takes precedence over cookie.
    """
    token = None

    if credentials:
        token = credentials.credentials
    elif settings.AUTH_COOKIE_NAME in request.cookies:
        token = request.cookies[settings.AUTH_COOKIE_NAME]

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    sub = decode_access_token(token)
    if not sub:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return int(sub)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def get_current_employee(
    db: Session = Depends(get_db),
    employee_id: int = Depends(get_current_employee_id),
) -> Employee:
    """Load the logged-in employee. Deactivated accounts are rejected."""
    employee = db.get(Employee, employee_id)
    if not employee or employee.status != "active":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Employee not found")
    return employee


def require_permission(action: str) -> Callable[..., Employee]:
    """
    Route dependency that checks the employee's role against `action`.

    Example:
        def restock(..., employee: Employee = Depends(require_permission("inventory.restock"))):
    """
    def checker(request: Request, employee: Employee = Depends(get_current_employee)) -> Employee:
        if not can_perform_action(employee.role, action):
            AuditLog.log_access_denied(action, employee.id, employee.role, request.url.path)
            raise BusinessError.forbidden(f"{employee.username} ({employee.role}) lacks {action}")
        return employee

    return checker
