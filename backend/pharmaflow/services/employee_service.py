"""Employees: accounts, password hashing and login."""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from pharmaflow.core.config import settings
from pharmaflow.core.security import get_password_hash, verify_password
from pharmaflow.models.employee import Employee
from pharmaflow.schemas.employee import EmployeeCreate, EmployeeUpdate

logger = logging.getLogger(__name__)


def get_employee(db: Session, employee_id: int) -> Optional[Employee]:
    return db.get(Employee, employee_id)


def get_by_username(db: Session, username: str) -> Optional[Employee]:
    return db.query(Employee).filter(Employee.username == username.strip().lower()).first()


def list_employees(db: Session) -> List[Employee]:
    return db.query(Employee).order_by(Employee.name).all()


def create_employee(db: Session, data: EmployeeCreate) -> Employee:
    username = data.username.strip().lower()
    if get_by_username(db, username):
        raise ValueError(f"Username {username} is already taken")
    if data.employee_code and db.query(Employee).filter(Employee.employee_code == data.employee_code).first():
        raise ValueError(f"Employee code {data.employee_code} already exists")

    employee = Employee(
        name=data.name.strip(),
        username=username,
        password_hash=get_password_hash(data.password),
        role=data.role,
        employee_code=data.employee_code,
        phone=data.phone,
        email=data.email,
        status="active",
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    logger.info(f"Employee {employee.username} created with role {employee.role}")
    return employee


def update_employee(db: Session, employee: Employee, updates: EmployeeUpdate) -> Employee:
    values = updates.model_dump(exclude_unset=True)
    password = values.pop("password", None)
    if password is not None:
        if len(password) < settings.MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters")
        employee.password_hash = get_password_hash(password)

    code = values.get("employee_code")
    if code and code != employee.employee_code:
        clash = db.query(Employee).filter(Employee.employee_code == code, Employee.id != employee.id).first()
        if clash:
            raise ValueError(f"Employee code {code} already exists")

    for field, value in values.items():
        setattr(employee, field, value)
    db.commit()
    db.refresh(employee)
    return employee


def delete_employee(db: Session, employee: Employee) -> None:
    db.delete(employee)
    db.commit()


def authenticate(db: Session, username: str, password: str) -> Optional[Employee]:
    """Employee for valid credentials, None otherwise. Inactive accounts cannot log in."""
    employee = get_by_username(db, username)
    if not employee or not verify_password(password, employee.password_hash):
        return None
    if employee.status != "active":
        return None
    return employee
