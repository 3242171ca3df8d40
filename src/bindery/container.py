"""The container façade used as an application's composition root.

A :class:`Container` is constructed once at the application's entry point and
passed explicitly to whatever needs to resolve dependencies. There is no
process-wide instance.

Example:
    >>> container = Container()
    >>> container.singleton("config", lambda c: load_config())
    >>> container.singleton(Database, lambda c: Database(c.make("config").dsn))
    >>> container.bind(UserService, lambda c: UserService(c.make(Database)))
    >>> container.freeze()
    >>> service = container.make(UserService)

Bindings must not be changed while other threads are resolving. Call
:meth:`Container.freeze` at the end of the wiring phase; after that every
attempt to change bindings raises :class:`~bindery.errors.ContainerFrozenError`.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from bindery.binding_table import BindingTable
from bindery.domain import Binding, ComponentKey, Lifetime, describe_key
from bindery.errors import ContainerFrozenError
from bindery.instance_cache import InstanceCache
from bindery.resolver import Resolver

__all__ = ["ContainerConfig", "Container"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContainerConfig:
    """Settings for a :class:`Container`.

    Attributes:
        thread_safe: Serialise first resolution of each singleton with a
            per-key lock. Turn off only for strictly single-threaded use.
        name: Label used in ``repr`` and log messages.
    """

    thread_safe: bool = True
    name: str = "container"


class Container:
    """Registers bindings and resolves them into values."""

    def __init__(self, config: Optional[ContainerConfig] = None):
        self.config = config or ContainerConfig()
        self._bindings = BindingTable()
        self._instances = InstanceCache(self.config.thread_safe)
        self._resolver = Resolver(self._bindings, self._instances, self)
        self._resolved_unfrozen = False

    def bind(self, key: ComponentKey, factory: Callable[["Container"], Any]) -> None:
        """Register ``factory`` to be invoked on every resolution of ``key``."""
        self.register(key, factory, Lifetime.TRANSIENT)

    def singleton(self, key: ComponentKey, factory: Callable[["Container"], Any]) -> None:
        """Register ``factory`` to be invoked once, on first resolution of ``key``.

        Replacing an existing binding discards any value cached for it, so the
        next resolution invokes the new factory.
        """
        self.register(key, factory, Lifetime.SINGLETON)

    def instance(self, key: ComponentKey, value: Any) -> None:
        """Register an already-constructed value as the singleton for ``key``."""
        binding = self.register(key, lambda _container: value, Lifetime.SINGLETON)
        self._instances.put_if_absent(key, binding, value)

    def make(self, key: ComponentKey) -> Any:
        """Resolve ``key`` to a value.

        Raises:
            UnboundKeyError: If nothing is bound to ``key``.
            CircularDependencyError: If resolving ``key`` requires resolving
                ``key`` again.
            Exception: Errors raised by factories propagate unchanged.
        """
        if not self._resolved_unfrozen and not self._bindings.frozen:
            self._resolved_unfrozen = True
            logger.debug(
                "Resolving %r from %s before it is frozen; "
                "freeze before resolving from several threads",
                describe_key(key),
                self.config.name,
            )
        return self._resolver.make(key)

    def make_all(self, keys: Iterable[ComponentKey]) -> dict[ComponentKey, Any]:
        """Resolve each key in turn, typically at startup.

        Resolving critical keys eagerly surfaces wiring defects, such as a
        missing binding or a dependency cycle, before the application starts
        serving.

        Returns:
            Mapping of each key to its resolved value.
        """
        return {key: self.make(key) for key in keys}

    def forget(self, key: ComponentKey) -> None:
        """Drop the cached singleton for ``key``; its factory will run again."""
        if self._bindings.frozen:
            raise ContainerFrozenError(
                f"Cannot forget {describe_key(key)!r}: bindings are frozen"
            )
        self._instances.invalidate(key)

    def bound(self, key: ComponentKey) -> bool:
        return key in self._bindings

    def freeze(self) -> None:
        """End the wiring phase. Bindings can no longer be added or replaced."""
        if not self._bindings.frozen:
            logger.debug("Freezing %s with %d bindings", self.config.name, len(self._bindings))
        self._bindings.freeze()

    @property
    def frozen(self) -> bool:
        return self._bindings.frozen

    def keys(self) -> list[ComponentKey]:
        return self._bindings.keys()

    def register(
        self, key: ComponentKey, factory: Callable[["Container"], Any], lifetime: Lifetime
    ) -> Binding:
        """Register ``factory`` under ``key`` with an explicit lifetime.

        Any value cached for ``key`` is discarded.

        Raises:
            ContainerFrozenError: If the container has been frozen.
            InvalidBindingError: If ``factory`` is not callable.
        """
        binding = self._bindings.register(key, factory, lifetime)
        self._instances.invalidate(key)
        return binding

    def __contains__(self, key: ComponentKey) -> bool:
        return self.bound(key)

    def __repr__(self):
        state = "frozen" if self.frozen else "open"
        return f"<Container {self.config.name!r} {state}, {len(self._bindings)} bindings>"
