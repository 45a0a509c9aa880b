from __future__ import annotations

from contextlib import contextmanager
import logging
from threading import Lock
import time
from typing import Iterable, Iterator

from slotguard.core.exceptions import StoreTimeoutError
from slotguard.services.conflict_rules import ScheduleSlot, resource_keys

logger = logging.getLogger(__name__)


def lock_keys(slot: ScheduleSlot) -> list[str]:
    return [f"{key}|{slot.semester}|{slot.day_of_week}" for key in resource_keys(slot)]


class Deadline:
    """Time budget for one validate+commit; None means unbounded."""

    def __init__(self, seconds: float | None) -> None:
        self._expires_at = None if seconds is None else time.monotonic() + max(0.0, seconds)

    def remaining(self) -> float | None:
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0

    def check(self, stage: str) -> None:
        if self.expired:
            raise StoreTimeoutError(f"Request deadline exceeded before {stage}, try again")


class ResourceLockManager:
    """Per-key mutual exclusion for (resource, semester, day) keys within this process.

    Keys are acquired in sorted order so two commits touching overlapping key
    sets cannot deadlock. Idle keys are dropped once nobody holds or waits on them.
    """

    def __init__(self) -> None:
        self._entries: dict[str, list] = {}
        self._guard = Lock()

    def _checkout(self, key: str) -> Lock:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = [Lock(), 0]
                self._entries[key] = entry
            entry[1] += 1
            return entry[0]

    def _checkin(self, key: str) -> None:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                return
            entry[1] -= 1
            if entry[1] <= 0:
                del self._entries[key]

    @contextmanager
    def hold(
        self,
        keys: Iterable[str],
        deadline: Deadline | None = None,
        max_wait_seconds: float | None = None,
    ) -> Iterator[None]:
        held: list[tuple[str, Lock]] = []
        try:
            for key in sorted(set(keys)):
                wait = _wait_budget(deadline, max_wait_seconds)
                lock = self._checkout(key)
                acquired = lock.acquire() if wait is None else lock.acquire(timeout=wait)
                if not acquired:
                    self._checkin(key)
                    logger.warning("Timed out waiting for schedule lock %s", key)
                    raise StoreTimeoutError("Schedule resource is busy, try again")
                held.append((key, lock))
            yield
        finally:
            for key, lock in reversed(held):
                lock.release()
                self._checkin(key)

    def active_keys(self) -> list[str]:
        with self._guard:
            return sorted(self._entries)


def _wait_budget(deadline: Deadline | None, max_wait_seconds: float | None) -> float | None:
    remaining = deadline.remaining() if deadline is not None else None
    if remaining is None:
        return max_wait_seconds
    if max_wait_seconds is None:
        return remaining
    return min(remaining, max_wait_seconds)


_manager = ResourceLockManager()


def get_lock_manager() -> ResourceLockManager:
    return _manager
