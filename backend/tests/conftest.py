import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["ALLOWED_HOSTS"] = "testserver,localhost"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pharmaflow import models  # noqa: F401 - register models
from pharmaflow.api.deps import get_db
from pharmaflow.core.security import create_access_token, get_password_hash
from pharmaflow.db.base import Base
from pharmaflow.main import app
from pharmaflow.models.employee import Employee
from pharmaflow.schemas.sale import CartItem, SaleCreate
from pharmaflow.services import inventory_service


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_employee(db):
    def _make(role="cashier", username=None, password="password123", name=None):
        employee = Employee(
            name=name or f"{role.title()} User",
            username=username or role,
            password_hash=get_password_hash(password),
            role=role,
            status="active",
        )
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee
    return _make


def auth_headers(employee):
    token = create_access_token(subject=str(employee.id), role=employee.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_drug(db):
    def _make(name="Panadol 500mg", price=48.0, cost_price=40.0, stock=240, units_per_pack=24, **extra):
        return inventory_service.create_drug(db, {
            "name": name,
            "price": price,
            "cost_price": cost_price,
            "stock": stock,
            "units_per_pack": units_per_pack,
            **extra,
        })
    return _make


def cart_sale(*lines, total, when=None, **extra):
    """SaleCreate from (drug, quantity, is_unit) tuples, priced at the drug's pack price."""
    items = [
        CartItem(drug_id=drug.id, name=drug.name, quantity=qty, price=float(drug.price), is_unit=is_unit)
        for drug, qty, is_unit in lines
    ]
    return SaleCreate(items=items, total=total, date=when or datetime.now().replace(microsecond=0), **extra)
