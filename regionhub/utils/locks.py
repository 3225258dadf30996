# regionhub/utils/locks.py
import threading
import time
from contextlib import contextmanager
from typing import Dict

from regionhub.config import settings
from regionhub.utils.errors import RetryableError


class KeyedLock:
    """In-process mutex per aggregate key ("cart:7", "product:3", ...).

    Keys are acquired in sorted order so that two callers locking
    overlapping key sets cannot deadlock. Entries are reference counted and
    dropped once no caller holds or waits on them.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._users: Dict[str, int] = {}

    def _checkout(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            self._users[key] = self._users.get(key, 0) + 1
            return lock

    def _release(self, key: str):
        with self._guard:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    @contextmanager
    def hold(self, *keys: str, timeout: float = None):
        timeout = settings.LOCK_TIMEOUT_SECONDS if timeout is None else timeout
        deadline = time.monotonic() + timeout
        held = []
        try:
            for key in sorted(set(keys)):
                lock = self._checkout(key)
                remaining = max(deadline - time.monotonic(), 0)
                if not lock.acquire(timeout=remaining):
                    self._release(key)
                    raise RetryableError(f"Timed out waiting for {key}, please retry")
                held.append((key, lock))
            yield
        finally:
            for key, lock in reversed(held):
                lock.release()
                self._release(key)


# Process-wide registry used by the cart and order services
locks = KeyedLock()


def cart_key(user_id: int) -> str:
    return f"cart:{user_id}"

def order_key(order_id: int) -> str:
    return f"order:{order_id}"

def product_key(product_id: int) -> str:
    return f"product:{product_id}"
