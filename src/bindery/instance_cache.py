"""Memoisation of singleton resolutions.

Each slot records the :class:`~bindery.domain.Binding` whose factory produced
the value, so a value produced under a binding that has since been replaced
is never returned for the new one.

Insertion is insert-once: the first value stored for a key wins, and a later
``put_if_absent`` for the same key returns the stored value instead of its
own argument. First access to a key is serialised with a per-key lock; the
resolver re-checks the cache under that lock before invoking a factory.

The cache records which thread holds each key's lock and which key each
blocked thread is waiting for. A thread about to wait on a key whose chain of
owners and waits leads back to itself would never be woken: its wait closes a
dependency cycle spread over several threads, and it fails with
:class:`~bindery.errors.CircularDependencyError` instead of blocking.
"""

import threading
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from bindery.domain import Binding, ComponentKey
from bindery.errors import CircularDependencyError

__all__ = ["MISS", "CachedInstance", "InstanceCache"]


class _Miss:
    def __repr__(self):
        return "MISS"

    def __bool__(self):
        return False


MISS: Any = _Miss()
"""Returned by :meth:`InstanceCache.get` when nothing is cached.

A sentinel is used rather than ``None`` because ``None`` is a valid value for
a factory to produce.
"""


@dataclass(frozen=True)
class CachedInstance:
    """A memoised singleton value.

    Attributes:
        binding: The binding whose factory produced the value.
        value: The value itself.
    """

    binding: Binding
    value: Any


class InstanceCache:
    """Key to value store for singletons, with per-key first-access locks."""

    def __init__(self, thread_safe: bool = True):
        self._thread_safe = thread_safe
        self._instances: dict[ComponentKey, CachedInstance] = {}
        self._guard = threading.Lock() if thread_safe else nullcontext()
        self._claims = threading.Condition()
        self._owners: dict[ComponentKey, int] = {}
        self._waiting: dict[int, ComponentKey] = {}

    def get(self, key: ComponentKey, binding: Optional[Binding] = None) -> Any:
        """Return the cached value for ``key``, or :data:`MISS`.

        Args:
            key: The key to look up.
            binding: If given, only a value produced by this binding counts
                as a hit.
        """
        cached = self._instances.get(key)
        if cached is None:
            return MISS
        if binding is not None and cached.binding is not binding:
            return MISS
        return cached.value

    def put_if_absent(self, key: ComponentKey, binding: Binding, value: Any) -> Any:
        """Store ``value`` unless a value for ``binding`` is already stored.

        Returns:
            The value now held in the cache, which is ``value`` only if this
            call performed the insertion.
        """
        with self._guard:
            cached = self._instances.get(key)
            if cached is not None and cached.binding is binding:
                return cached.value
            self._instances[key] = CachedInstance(binding, value)
            return value

    def invalidate(self, key: ComponentKey) -> None:
        with self._guard:
            self._instances.pop(key, None)

    @contextmanager
    def lock_for(self, key: ComponentKey) -> Iterator[None]:
        """Hold the lock serialising first resolution of ``key``.

        Raises:
            CircularDependencyError: If waiting for the lock would complete a
                cycle of threads each waiting on a key held by the next.
        """
        if not self._thread_safe:
            yield
            return

        self._acquire(key)
        try:
            yield
        finally:
            self._release(key)

    def _acquire(self, key: ComponentKey) -> None:
        me = threading.get_ident()
        with self._claims:
            while key in self._owners:
                cycle = self._wait_cycle(key, me)
                if cycle:
                    raise CircularDependencyError(cycle)
                self._waiting[me] = key
                try:
                    self._claims.wait()
                finally:
                    del self._waiting[me]
            self._owners[key] = me

    def _release(self, key: ComponentKey) -> None:
        with self._claims:
            del self._owners[key]
            self._claims.notify_all()

    def _wait_cycle(self, key: ComponentKey, me: int) -> Optional[list[ComponentKey]]:
        """Follow owners and waits from ``key``; the cycle if it returns to ``me``."""
        path = [key]
        owner = self._owners.get(key)
        while owner is not None and owner != me:
            waited = self._waiting.get(owner)
            if waited is None or waited in path:
                return None
            path.append(waited)
            owner = self._owners.get(waited)
        if owner is None:
            return None
        return path + [key]

    def __contains__(self, key: ComponentKey) -> bool:
        return key in self._instances

    def __len__(self) -> int:
        return len(self._instances)
