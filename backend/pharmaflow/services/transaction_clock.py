"""
Register clock and the monotonic transaction-time check.

All timestamps are stored as naive local time so that "today" on the
register matches the pharmacy's calendar day.

The check guards against a clock rolled back to back-date sales or returns.
It is not a concurrency control.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from pharmaflow.core.config import settings
from pharmaflow.core.exceptions import TransactionTimeError
from pharmaflow.models.app_state import AppState

logger = logging.getLogger(__name__)

LAST_TRANSACTION_KEY = "last_transaction_time"


def now() -> datetime:
    return datetime.now().replace(microsecond=0)


def to_local(value: Optional[datetime]) -> datetime:
    """Client timestamps may carry a UTC offset; convert them to naive local time."""
    if value is None:
        return now()
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def get_last_transaction_time(db: Session) -> Optional[datetime]:
    state = db.get(AppState, LAST_TRANSACTION_KEY)
    if not state or not state.value:
        return None
    return datetime.fromisoformat(state.value)


def validate_transaction_time(db: Session, proposed: datetime) -> None:
    """
    Raise TransactionTimeError if proposed is before the last recorded
    transaction (minus the configured tolerance).
    """
    last = get_last_transaction_time(db)
    if last is None:
        return

    tolerance = timedelta(seconds=settings.TRANSACTION_TIME_TOLERANCE_SECONDS)
    if proposed < last - tolerance:
        logger.warning(
            f"Rejected back-dated transaction: proposed={proposed.isoformat()} last={last.isoformat()}"
        )
        raise TransactionTimeError(
            f"Transaction time ({proposed.strftime('%Y-%m-%d %H:%M:%S')}) is before the last "
            f"transaction ({last.strftime('%Y-%m-%d %H:%M:%S')}). Possible date tampering detected."
        )


def update_last_transaction_time(db: Session, timestamp: datetime) -> None:
    """Never moves the marker backwards. Caller commits."""
    state = db.get(AppState, LAST_TRANSACTION_KEY)
    if state is None:
        db.add(AppState(key=LAST_TRANSACTION_KEY, value=timestamp.isoformat()))
        return
    last = datetime.fromisoformat(state.value) if state.value else None
    if last is None or timestamp > last:
        state.value = timestamp.isoformat()
