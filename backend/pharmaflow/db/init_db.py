"""Create all tables and apply data migrations. Run on app startup.

SECURITY: The default admin gets a random password (not hardcoded).
It must be changed after first login.
"""
import logging
import secrets

from pharmaflow.db.base import Base
from pharmaflow.db.session import engine, SessionLocal
from pharmaflow.db.migrations import run_migrations
from pharmaflow import models  # noqa: F401 - register models
from pharmaflow.models.employee import Employee
from pharmaflow.core.security import get_password_hash

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_USERNAME = "admin"


def seed_default_admin(db) -> str | None:
    """Create the admin account when there are no employees. Returns the generated password."""
    if db.query(Employee).count():
        return None

    default_password = secrets.token_urlsafe(16)
    db.add(Employee(
        name="Administrator",
        username=DEFAULT_ADMIN_USERNAME,
        password_hash=get_password_hash(default_password),
        role="admin",
        status="active",
    ))
    db.commit()
    return default_password


def init_db():
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        run_migrations(db)
        default_password = seed_default_admin(db)
        if default_password:
            # Printed once, on initial setup only
            print("\n" + "=" * 70)
            print("DEFAULT ADMIN EMPLOYEE CREATED")
            print("=" * 70)
            print(f"Username: {DEFAULT_ADMIN_USERNAME}")
            print(f"Password: {default_password}")
            print("\nSECURITY: Change this password immediately after first login!")
            print("=" * 70 + "\n")
            logger.warning("Default admin account created with a generated password")
    finally:
        db.close()
