"""
In-process row locks for databases without SELECT ... FOR UPDATE.

SQLite parses FOR UPDATE away, and the test engine shares one connection
between sessions, so nothing at the database level orders two transactions
that lock the same row. RowSecureStore.lock takes one of these locks instead:
keyed by (table, row id), held until the session's transaction commits or
rolls back, and re-entrant within one session.

Only lockers in this process are serialized. Deployments with several workers
run on PostgreSQL, where the row lock itself does the job.
"""

import asyncio
from typing import Hashable

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session, SessionTransaction

from event_hub.core.logging import get_logger

logger = get_logger(__name__)

HELD_LOCKS_KEY = "held_row_locks"

_locks: dict[Hashable, asyncio.Lock] = {}
_lockers: dict[Hashable, int] = {}


def needs_row_lock(session: AsyncSession) -> bool:
    """True when the session's database ignores FOR UPDATE."""
    return session.get_bind().dialect.name == "sqlite"


async def acquire(session: AsyncSession, key: Hashable) -> None:
    """Wait for `key`, then hold it until the session's transaction ends."""
    held = session.info.setdefault(HELD_LOCKS_KEY, set())
    if key in held:
        return

    lock = _locks.setdefault(key, asyncio.Lock())
    _lockers[key] = _lockers.get(key, 0) + 1
    try:
        await lock.acquire()
    except BaseException:
        _forget(key)
        raise
    held.add(key)
    logger.debug("row_lock_acquired", key=str(key))


def _forget(key: Hashable) -> None:
    _lockers[key] -= 1
    if _lockers[key] == 0:
        del _lockers[key]
        del _locks[key]


@event.listens_for(Session, "after_transaction_end")
def _release_row_locks(session: Session, transaction: SessionTransaction) -> None:
    # Savepoints end inside the outer transaction
    if transaction.parent is not None:
        return
    for key in session.info.pop(HELD_LOCKS_KEY, ()):
        _locks[key].release()
        _forget(key)
