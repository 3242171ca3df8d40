"""Resolution of keys into values, with cycle detection.

The resolver walks the dependency chain implied by factories calling back
into the container. Every key being resolved on the current thread is held
in a :class:`ResolutionContext`; finding a key that is already in the context
means the graph contains a cycle, which is reported with the full path
instead of recursing until the interpreter's stack is exhausted.

Resolution contexts are thread-local: two threads resolving the same key at
the same time are not a cycle.
"""

import logging
import threading
from typing import Any

from bindery.binding_table import BindingTable
from bindery.domain import Binding, ComponentKey, describe_key
from bindery.errors import CircularDependencyError, UnboundKeyError
from bindery.instance_cache import MISS, InstanceCache

__all__ = ["ResolutionContext", "Resolver"]

logger = logging.getLogger(__name__)


class ResolutionContext:
    """Ordered set of keys currently being resolved by one thread.

    Example:
        >>> context = ResolutionContext()
        >>> context.enter("a")
        >>> context.enter("b")
        >>> context.cycle_to("a")  # Returns ["a", "b", "a"]
    """

    def __init__(self):
        self._stack: list[ComponentKey] = []
        self._active: set[ComponentKey] = set()

    def __contains__(self, key: ComponentKey) -> bool:
        return key in self._active

    def __len__(self) -> int:
        return len(self._stack)

    def enter(self, key: ComponentKey) -> None:
        self._stack.append(key)
        self._active.add(key)

    def leave(self, key: ComponentKey) -> None:
        # Keys leave in reverse order of entry, as make() calls unwind.
        self._stack.pop()
        self._active.discard(key)

    def cycle_to(self, key: ComponentKey) -> list[ComponentKey]:
        """The path from the first occurrence of ``key`` back to ``key``."""
        start = self._stack.index(key)
        return self._stack[start:] + [key]

    @property
    def path(self) -> list[ComponentKey]:
        return list(self._stack)


class Resolver:
    """Implements ``make`` over a binding table and an instance cache.

    Args:
        bindings: The table consulted for construction rules.
        instances: The cache holding singleton values.
        container: The object passed to every factory. Factories call
            ``container.make`` to obtain their own dependencies.
    """

    def __init__(self, bindings: BindingTable, instances: InstanceCache, container: Any):
        self._bindings = bindings
        self._instances = instances
        self._container = container
        self._local = threading.local()

    @property
    def context(self) -> ResolutionContext:
        """The resolution context of the calling thread."""
        context = getattr(self._local, "context", None)
        if context is None:
            context = self._local.context = ResolutionContext()
        return context

    def make(self, key: ComponentKey) -> Any:
        """Resolve ``key`` to a value.

        Returns:
            The cached value for a resolved singleton, otherwise the result of
            invoking the bound factory.

        Raises:
            CircularDependencyError: If ``key`` is already being resolved
                further up the current call chain.
            UnboundKeyError: If nothing is bound to ``key``.
            Exception: Anything raised by a factory propagates unchanged.
        """
        binding = self._bindings.get(key)

        if binding is not None and binding.is_singleton:
            cached = self._instances.get(key, binding)
            if cached is not MISS:
                return cached

        context = self.context
        if key in context:
            raise CircularDependencyError(context.cycle_to(key))

        if binding is None:
            raise UnboundKeyError(key)

        if binding.is_singleton:
            return self._make_singleton(binding, context)
        return self._invoke(binding, context)

    def _make_singleton(self, binding: Binding, context: ResolutionContext) -> Any:
        key = binding.key
        with self._instances.lock_for(key):
            cached = self._instances.get(key, binding)
            if cached is not MISS:
                return cached

            value = self._invoke(binding, context)
            stored = self._instances.put_if_absent(key, binding, value)
            if stored is value:
                logger.debug("Created singleton %r", describe_key(key))
            return stored

    def _invoke(self, binding: Binding, context: ResolutionContext) -> Any:
        context.enter(binding.key)
        try:
            return binding.factory(self._container)
        finally:
            context.leave(binding.key)
