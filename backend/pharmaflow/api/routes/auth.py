"""Auth: employee login/logout and the navigation shell.

SECURITY FEATURES:
- Password hashing with bcrypt
- httpOnly, Secure, SameSite cookies
- Generic error message for bad credentials
- Every login attempt goes to the audit log
"""
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from pharmaflow.api.deps import get_db, get_current_employee
from pharmaflow.core.audit import AuditLog
from pharmaflow.core.config import settings
from pharmaflow.core.exceptions import BusinessError
from pharmaflow.core.navigation import pages_for_role
from pharmaflow.core.permissions import ROLE_PERMISSIONS
from pharmaflow.core.security import create_access_token
from pharmaflow.models.employee import Employee
from pharmaflow.schemas.employee import (
    EmployeeLogin, EmployeeResponse, Token, NavigationResponse, NavigationPage,
)
from pharmaflow.services import employee_service

router = APIRouter()


@router.post("/login", response_model=Token)
def login(data: EmployeeLogin, request: Request, response: Response, db: Session = Depends(get_db)):
    """
    Login and set the token in an httpOnly cookie. The token is also
    returned in the body for API clients.
    """
    ip = request.client.host if request.client else "unknown"
    employee = employee_service.authenticate(db, data.username, data.password)
    if not employee:
        AuditLog.log_authentication("failed_login", data.username, ip, False, "invalid credentials")
        raise BusinessError.unauthorized(f"login failed for {data.username}")

    token = create_access_token(subject=str(employee.id), role=employee.role)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        secure=settings.SECURE_COOKIES,
        httponly=True,
        samesite=settings.SAME_SITE_COOKIE,
    )
    AuditLog.log_authentication("login", employee.username, ip, True)
    return Token(access_token=token)


@router.post("/logout")
def logout(request: Request, response: Response, current: Employee = Depends(get_current_employee)):
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        secure=settings.SECURE_COOKIES,
        httponly=True,
        samesite=settings.SAME_SITE_COOKIE,
    )
    AuditLog.log_authentication("logout", current.username, request.client.host if request.client else "unknown", True)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=EmployeeResponse)
def me(current: Employee = Depends(get_current_employee)):
    return current


@router.get("/navigation", response_model=NavigationResponse)
def navigation(current: Employee = Depends(get_current_employee)):
    """Pages and permissions for the logged-in employee's role."""
    return NavigationResponse(
        role=current.role,
        permissions=sorted(ROLE_PERMISSIONS.get(current.role, frozenset())),
        pages=[NavigationPage(key=p.key, label=p.label, section=p.section) for p in pages_for_role(current.role)],
    )
