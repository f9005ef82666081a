"""Vzájemné vyloučení změn množství na úrovni položky.

Zámky se berou vždy ve vzestupném pořadí id, takže dvě hromadné zápůjčky
s překrývajícími se položkami se nemohou zablokovat navzájem. Zámky se
uvolňují až po commitu.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Iterable, Iterator

from sqlalchemy.orm import Session

from lendtrack.config import settings
from lendtrack.exceptions import ItemBusyError

logger = logging.getLogger(__name__)


class ItemLocks:
    """Registr zámků položek. Zámek žije jen, dokud na něj někdo čeká nebo jej drží."""

    def __init__(self, timeout: float | None = None, label: str = "Položka"):
        self._timeout = timeout
        self._label = label
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}
        self._users: dict[int, int] = {}

    def _checkout(self, item_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(item_id)
            if lock is None:
                lock = self._locks[item_id] = threading.Lock()
            self._users[item_id] = self._users.get(item_id, 0) + 1
            return lock

    def _checkin(self, item_id: int) -> None:
        with self._guard:
            remaining = self._users[item_id] - 1
            if remaining:
                self._users[item_id] = remaining
            else:
                del self._users[item_id]
                del self._locks[item_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, item_ids: Iterable[int]) -> Iterator[None]:
        timeout = self._timeout if self._timeout is not None else settings.LOCK_TIMEOUT_SECONDS
        checked_out: list[int] = []
        acquired: list[threading.Lock] = []
        try:
            for item_id in sorted(set(item_ids)):
                lock = self._checkout(item_id)
                checked_out.append(item_id)
                if not lock.acquire(timeout=timeout):
                    logger.warning("Zámek %s %s nezískán do %.1f s", self._label, item_id, timeout)
                    raise ItemBusyError(f"{self._label} {item_id} se právě upravuje, zkuste to znovu")
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for item_id in checked_out:
                self._checkin(item_id)


item_locks = ItemLocks()


@contextmanager
def item_transaction(db: Session, item_ids: Iterable[int], locks: ItemLocks | None = None) -> Iterator[None]:
    """Unit of work nad množinou položek: zámky -> změny -> commit, jinak rollback."""
    with (locks if locks is not None else item_locks).hold(item_ids):
        try:
            yield
            db.commit()
        except Exception:
            db.rollback()
            raise
