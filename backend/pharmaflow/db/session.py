"""Database engine and session factory. SQLite by default, any SQLAlchemy URL works."""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from pharmaflow.core.config import settings

connect_args = (
    {"check_same_thread": False}
    if settings.DATABASE_URL.startswith("sqlite")
    else {}
)

if settings.DATABASE_URL.startswith("sqlite"):
    # SQLite: Use NullPool for thread-safety
    from sqlalchemy.pool import NullPool
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args=connect_args,
        poolclass=NullPool
    )

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
else:
    # PostgreSQL/MySQL: Use QueuePool with sensible defaults
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args=connect_args,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=3600,
        pool_pre_ping=True
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
