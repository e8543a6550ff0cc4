from typing import List, Optional
from pydantic import BaseModel, EmailStr, field_validator

from pharmaflow.core.config import settings
from pharmaflow.core.permissions import ROLES


def _check_role(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in ROLES:
        raise ValueError(f"Role must be one of: {', '.join(ROLES)}")
    return v


class EmployeeCreate(BaseModel):
    name: str
    username: str
    password: str
    role: str = "cashier"
    employee_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator('password')
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < settings.MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {settings.MIN_PASSWORD_LENGTH} characters')
        return v

    @field_validator('role')
    @classmethod
    def role_known(cls, v: str) -> str:
        return _check_role(v)


class EmployeeUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    employee_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    status: Optional[str] = None
    password: Optional[str] = None

    @field_validator('role')
    @classmethod
    def role_known(cls, v: Optional[str]) -> Optional[str]:
        return _check_role(v)

    @field_validator('status')
    @classmethod
    def status_known(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in ("active", "inactive"):
            raise ValueError("Status must be 'active' or 'inactive'")
        return v


class EmployeeLogin(BaseModel):
    username: str
    password: str


class EmployeeResponse(BaseModel):
    id: int
    name: str
    username: str
    role: str
    employee_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    status: str

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class NavigationPage(BaseModel):
    key: str
    label: str
    section: str


class NavigationResponse(BaseModel):
    role: str
    permissions: List[str]
    pages: List[NavigationPage]
