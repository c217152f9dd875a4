# Overview: Row locking and retry for every multi-row till write.

"""
Write Guards

Checkout, returns, held carts and back-office edits all go through
guarded_write(). A write that loses a race (locked database, stale
version_id) is rolled back and run again from the top, so the operation
must re-read whatever it depends on inside `func`.
"""

from __future__ import annotations

import logging
import time

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from ..errors import StoreUnavailable

logger = logging.getLogger(__name__)

# Failures worth another attempt; anything else is reported at once
RETRYABLE = (OperationalError, StaleDataError)


def lock_for_update(query):
    """
    SELECT ... FOR UPDATE on dialects that support it.

    SQLite ignores the clause and serialises writers itself.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Call `func` up to `attempts` times, sleeping backoff_base * 2**n between
    tries. The final retryable error is re-raised.
    """
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except RETRYABLE as exc:
            db.session.rollback()
            if attempt == attempts:
                raise
            logger.warning(
                "Write attempt %d/%d failed (%s), retrying",
                attempt, attempts, exc.__class__.__name__,
            )
            time.sleep(backoff_base * (2 ** (attempt - 1)))


def guarded_write(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    run_with_retry(), with any database failure left over reported as
    StoreUnavailable. Domain errors raised by `func` pass straight through.
    """
    try:
        return run_with_retry(func, attempts=attempts, backoff_base=backoff_base)
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Store write failed: %s", exc.__class__.__name__)
        raise StoreUnavailable(
            "The store is unavailable. Please try again.",
            details={"reason": exc.__class__.__name__},
        ) from exc
