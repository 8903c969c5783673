"""
KeyedLockRegistry -- in-process mutual exclusion keyed by entity id.

Responsibility:
    Serializes work on one entity (a stock transfer) while letting work on
    different entities run in parallel.  Two threads calling ``ship`` on
    the same transfer queue behind one lock; the second then sees the
    already-advanced status and is rejected by the workflow.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.  Used by the
    transfer service.  Cross-process safety comes from the status
    compare-and-set in the same service, not from this registry.

Invariants enforced:
    - At most one holder per key at a time.
    - Lock objects are reference counted and dropped once no thread holds
      or waits on them, so the registry does not grow without bound.
"""

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager

from stock_kernel.logging_config import get_logger

logger = get_logger("services.lock")


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class KeyedLockRegistry:
    """Registry of per-key locks."""

    def __init__(self, name: str = "default"):
        self._name = name
        self._guard = threading.Lock()
        self._entries: dict[Hashable, _Entry] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Block until ``key`` is free, hold it for the ``with`` body."""
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.users += 1
            contended = entry.users > 1

        if contended:
            logger.debug(
                "keyed_lock_waiting",
                extra={"registry": self._name, "key": str(key)},
            )
        entry.lock.acquire()
        try:
            yield
        finally:
            entry.lock.release()
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
