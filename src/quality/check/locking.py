"""Per-check write guard.

Mutating operations on one quality check are serialized through a lock
keyed by the check id. A writer that cannot obtain the lock within the
configured wait gives up with ``ConcurrencyConflict`` instead of queuing
behind the current writer. The guard is held across the whole command,
unit-of-work commit included. Reads never take it.
"""

import os
import threading
from contextlib import contextmanager

import structlog
from protean.utils.globals import current_domain

from shared.exceptions import ConcurrencyConflict

logger = structlog.get_logger(__name__)

DEFAULT_LOCK_WAIT = 2.0


def _default_wait() -> float:
    return float(os.getenv("QUALITY_LOCK_WAIT", DEFAULT_LOCK_WAIT))


class CheckGuard:
    """Registry of per-id locks.

    A lock lives only while some writer holds or waits for it, so the
    registry does not grow with the number of checks ever written.
    """

    def __init__(self):
        # check id -> [lock, holders and waiters]
        self._locks: dict[str, list] = {}
        self._registry_lock = threading.Lock()

    def _checkout(self, check_id: str) -> list:
        with self._registry_lock:
            entry = self._locks.get(check_id)
            if entry is None:
                entry = self._locks[check_id] = [threading.Lock(), 0]
            entry[1] += 1
            return entry

    def _checkin(self, check_id: str, entry: list) -> None:
        with self._registry_lock:
            entry[1] -= 1
            if entry[1] == 0 and self._locks.get(check_id) is entry:
                del self._locks[check_id]

    def __len__(self):
        with self._registry_lock:
            return len(self._locks)

    @contextmanager
    def hold(self, check_id, wait: float | None = None):
        check_id = str(check_id)
        wait = _default_wait() if wait is None else wait
        entry = self._checkout(check_id)
        lock = entry[0]

        try:
            if not lock.acquire(timeout=wait):
                logger.warning("quality_check_guard_busy", quality_check_id=check_id, wait=wait)
                raise ConcurrencyConflict(
                    {"quality_check_id": [f"Quality check {check_id} is being modified by another request"]}
                )
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(check_id, entry)

    def reset(self):
        with self._registry_lock:
            self._locks.clear()


check_guard = CheckGuard()


def process_guarded(command, check_id, wait: float | None = None):
    """Process a command against one check while holding its guard."""
    with check_guard.hold(check_id, wait=wait):
        return current_domain.process(command, asynchronous=False)
