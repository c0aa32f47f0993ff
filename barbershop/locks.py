# barbershop/locks.py
# One lock per key (phone digits, barber/date pair), dropped once nobody holds or waits on it.

import threading
from contextlib import contextmanager
from typing import Hashable

from barbershop.errors import TransientStoreError


class KeyedLocks:
    def __init__(self, name: str):
        self.name = name
        self._guard = threading.Lock()
        self._locks: dict[Hashable, list] = {}  # key -> [lock, refcount]

    @contextmanager
    def hold(self, key: Hashable, timeout: float):
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        acquired = entry[0].acquire(timeout=timeout)
        try:
            if not acquired:
                raise TransientStoreError(
                    f"Timed out waiting for {self.name} lock, please try again"
                )
            yield
        finally:
            if acquired:
                entry[0].release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self):
        with self._guard:
            return len(self._locks)


# Phone digits -> serializes client upsert
client_locks = KeyedLocks("client")
# (barber_id, date) -> serializes conflict check + insert
slot_locks = KeyedLocks("slot")
