"""
Concurrency helpers for account mutations.

Two guards are layered: SELECT ... FOR UPDATE where the database honours it,
and the optimistic version_id column on CustomerLoyaltyAccount everywhere
else (SQLite ignores FOR UPDATE).
"""
import time
import logging

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from ..utils.exceptions import ConcurrentModificationError

logger = logging.getLogger(__name__)

# Driver messages for lock timeouts and deadlocks (PostgreSQL, MySQL, SQLite)
LOCK_CONFLICT_MARKERS = (
    'deadlock',
    'lock timeout',
    'lock wait timeout',
    'could not obtain lock',
    'could not serialize',
    'database is locked',
)


def lock_for_update(query):
    """Apply row-level locking to a query."""
    return query.with_for_update()


def is_lock_conflict(exc: Exception) -> bool:
    """
    True for errors that mean another writer holds or won the row.

    Connectivity loss and other OperationalErrors are not conflicts and
    must not be retried.
    """
    if isinstance(exc, StaleDataError):
        return True
    if isinstance(exc, OperationalError):
        message = str(exc.orig if exc.orig is not None else exc).lower()
        return any(marker in message for marker in LOCK_CONFLICT_MARKERS)
    return False


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.05):
    """
    Execute a unit of work, retrying on concurrency conflicts.

    func must do all of its reads and writes and commit. On StaleDataError
    (optimistic lock lost) or a lock/deadlock OperationalError the session
    is rolled back and func runs again from scratch, so balance checks are
    repeated against fresh data. Any other error propagates unchanged.

    Raises:
        ConcurrentModificationError: every attempt conflicted
    """
    attempts = max(1, attempts)
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (StaleDataError, OperationalError) as exc:
            if not is_lock_conflict(exc):
                raise
            db.session.rollback()
            last_exc = exc
            logger.warning('Concurrent update conflict (attempt %d/%d): %s', attempt + 1, attempts, exc)
            if attempt < attempts - 1 and backoff_base:
                time.sleep(backoff_base * (2 ** attempt))

    raise ConcurrentModificationError() from last_exc
