"""Explicit store handle over the gamezone domain's repositories.

Services receive a ``Storage`` instead of reaching for ``current_domain``:
the handle pushes the domain context itself, so it works the same from a
request handler, a background thread or the CLI.

Two kinds of locks are handed out, both with a timeout:

- ``locked()`` is the store's critical section. Every read-check-write that
  must look atomic to other requests (a conditional stock adjustment, a cart
  save) runs inside it.
- ``guard(key)`` serializes a longer sequence for one key, e.g. all cart
  mutations and the checkout saga of a single user.

Both locks live in this process. Across workers, atomicity comes from the
store: aggregates are saved with a compare-and-set on their version, and a
write based on a stale read fails with ``ExpectedVersionError``. ``locked()``
turns that into ``TransientStoreError`` so the caller re-reads and retries.

A lock timeout surfaces as ``TransientStoreError`` too.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from protean.domain import Domain
from protean.exceptions import ExpectedVersionError

from gamezone.errors import TransientStoreError


class _Guard:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.users = 0


class Storage:
    def __init__(self, domain: Domain, lock_timeout: float = 5.0) -> None:
        self.domain = domain
        self.lock_timeout = lock_timeout
        self._store_lock = threading.RLock()
        self._guards: dict[str, _Guard] = {}
        self._guards_lock = threading.Lock()

    def repository_for(self, aggregate_cls):
        return self.domain.repository_for(aggregate_cls)

    @contextmanager
    def context(self) -> Iterator[None]:
        """Run the block inside the domain's context."""
        with self.domain.domain_context():
            yield

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Run the block inside the store's critical section."""
        with self._acquire(self._store_lock, "store"):
            with self.domain.domain_context():
                try:
                    yield
                except ExpectedVersionError as exc:
                    raise TransientStoreError("Concurrent update, retry with fresh data", conflict=str(exc)) from exc

    @contextmanager
    def guard(self, key: str) -> Iterator[None]:
        """Serialize a multi-step sequence for ``key`` inside the domain context."""
        with self._guards_lock:
            entry = self._guards.setdefault(key, _Guard())
            entry.users += 1
        try:
            with self._acquire(entry.lock, key):
                with self.domain.domain_context():
                    yield
        finally:
            with self._guards_lock:
                entry.users -= 1
                if entry.users == 0:
                    del self._guards[key]

    def guard_count(self) -> int:
        """Keys with a caller holding or waiting on their guard."""
        with self._guards_lock:
            return len(self._guards)

    @contextmanager
    def _acquire(self, lock, name: str) -> Iterator[None]:
        if not lock.acquire(timeout=self.lock_timeout):
            raise TransientStoreError(f"Timed out waiting for {name} lock", lock=name)
        try:
            yield
        finally:
            lock.release()


def iter_all(queryset, batch_size: int = 100):
    """Yield every record matched by a Protean queryset, batch by batch."""
    offset = 0
    while True:
        results = queryset.offset(offset).limit(batch_size).all()
        yield from results.items
        if len(results.items) < batch_size:
            return
        offset += batch_size
