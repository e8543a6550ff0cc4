from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
from pharmaflow.db.base import Base


class AppState(Base):
    """Small key/value store for register-wide values (last transaction time)."""
    __tablename__ = "app_state"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=True)


class SchemaMigration(Base):
    __tablename__ = "schema_migrations"

    version = Column(Integer, primary_key=True)
    name = Column(String(128), nullable=False)
    applied_at = Column(DateTime, server_default=func.now())


class MigrationBackup(Base):
    """Inventory snapshot taken right before a data migration runs."""
    __tablename__ = "migration_backups"

    id = Column(Integer, primary_key=True, index=True)
    version = Column(Integer, nullable=False, index=True)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
