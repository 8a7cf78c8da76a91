# Overview: Retry helper for compare-and-swap stock writes.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError

from ..errors import ConcurrentModification
from ..extensions import db


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float | None = None):
    """
    Execute a read-check-write cycle with retry on concurrency failures.

    Retries on ConcurrentModification (a conditional write matched no row
    because the value read earlier has since changed) and OperationalError
    (database busy/locked). Every retry starts from a rolled-back session so
    the next attempt re-reads current state. Exhausting the budget re-raises
    the last error; nothing is swallowed.
    """
    if attempts is None:
        attempts = current_app.config.get("STOCK_ADJUST_MAX_ATTEMPTS", 3)
    if backoff_base is None:
        backoff_base = current_app.config.get("STOCK_ADJUST_BACKOFF_BASE", 0.05)
    attempts = max(int(attempts), 1)

    for attempt in range(attempts):
        try:
            return func()
        except (ConcurrentModification, OperationalError) as exc:
            db.session.rollback()
            current_app.logger.warning(
                "Concurrent write conflict (attempt %d/%d): %s", attempt + 1, attempts, exc
            )
            if attempt >= attempts - 1:
                raise
            if backoff_base:
                time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            # Leave no half-applied batch in the session
            db.session.rollback()
            raise
