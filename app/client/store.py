"""
Client-side cache with TTL invalidation and optimistic updates.
"""
import copy
import logging
import time
from contextlib import contextmanager

logger = logging.getLogger(__name__)

_MISSING = object()


class CacheStore:
    """
    Keyed cache whose entries expire after a TTL.

    Stored values are deep-copied on the way in and out, so callers cannot
    mutate cached state behind the store's back.
    """

    def __init__(self, ttl=60, clock=None):
        self.ttl = ttl
        self.clock = clock or time.monotonic
        self._entries = {}

    def set(self, key, value, ttl=None):
        expires_at = self.clock() + (self.ttl if ttl is None else ttl)
        self._entries[key] = (copy.deepcopy(value), expires_at)

    def is_fresh(self, key):
        entry = self._entries.get(key)
        return entry is not None and self.clock() < entry[1]

    def get(self, key, default=None):
        """Cached value, or default when missing or expired."""
        if not self.is_fresh(key):
            self._entries.pop(key, None)
            return default
        return copy.deepcopy(self._entries[key][0])

    def peek(self, key, default=None):
        """Cached value even if expired."""
        entry = self._entries.get(key)
        if entry is None:
            return default
        return copy.deepcopy(entry[0])

    def invalidate(self, key):
        self._entries.pop(key, None)

    def clear(self):
        self._entries.clear()

    @contextmanager
    def optimistic(self, key, mutate):
        """
        Apply mutate(current_value) to the cache before the server confirms.

        Yields an Update; call update.confirm(value) with the server's data to
        replace the optimistic value. If the block raises, the snapshot taken
        before the change is restored and the exception propagates.
        """
        snapshot = self._entries.get(key, _MISSING)
        current = self.peek(key)
        optimistic_value = mutate(current)
        self.set(key, optimistic_value)

        update = Update(self, key)
        try:
            yield update
        except BaseException:
            logger.info(f"Rolling back optimistic update for {key!r}")
            if snapshot is _MISSING:
                self._entries.pop(key, None)
            else:
                self._entries[key] = snapshot
            raise
        if update.confirmed:
            self.set(key, update.value)


class Update:
    def __init__(self, store, key):
        self.store = store
        self.key = key
        self.confirmed = False
        self.value = None

    def confirm(self, value):
        self.confirmed = True
        self.value = value
