"""The key to construction-rule mapping held by a container.

A BindingTable is written during an application's wiring phase and read
during resolution. Registering a key that is already bound replaces the
previous binding (last write wins). Once the table is frozen, any further
registration is refused, which lets callers guarantee the table is not
mutated while other threads are resolving from it.
"""

import logging
from typing import Any, Callable, Iterator, Optional

from bindery.domain import Binding, ComponentKey, Lifetime, describe_key
from bindery.errors import ContainerFrozenError, InvalidBindingError

__all__ = ["BindingTable"]

logger = logging.getLogger(__name__)


class BindingTable:
    """Holds at most one :class:`Binding` per key."""

    def __init__(self):
        self._bindings: dict[ComponentKey, Binding] = {}
        self._frozen = False

    def bind(self, key: ComponentKey, factory: Callable[[Any], Any]) -> Binding:
        """Register a transient binding. The factory is not invoked.

        Returns:
            The newly registered binding.

        Raises:
            ContainerFrozenError: If the table has been frozen.
            InvalidBindingError: If ``factory`` is not callable.
        """
        return self.register(key, factory, Lifetime.TRANSIENT)

    def singleton(self, key: ComponentKey, factory: Callable[[Any], Any]) -> Binding:
        """Register a singleton binding. The factory is not invoked.

        Returns:
            The newly registered binding.

        Raises:
            ContainerFrozenError: If the table has been frozen.
            InvalidBindingError: If ``factory`` is not callable.
        """
        return self.register(key, factory, Lifetime.SINGLETON)

    def register(
        self, key: ComponentKey, factory: Callable[[Any], Any], lifetime: Lifetime
    ) -> Binding:
        if self._frozen:
            raise ContainerFrozenError(
                f"Cannot bind {describe_key(key)!r}: bindings are frozen"
            )
        if not callable(factory):
            raise InvalidBindingError(
                f"Factory for {describe_key(key)!r} is not callable: {factory!r}"
            )

        binding = Binding(key, factory, lifetime)
        replaced = self._bindings.get(key)
        self._bindings[key] = binding

        if replaced is not None:
            logger.debug(
                "Rebound %r as %s (was %s)",
                describe_key(key),
                lifetime.value,
                replaced.lifetime.value,
            )
        else:
            logger.debug("Bound %r as %s", describe_key(key), lifetime.value)
        return binding

    def get(self, key: ComponentKey) -> Optional[Binding]:
        return self._bindings.get(key)

    def keys(self) -> list[ComponentKey]:
        return list(self._bindings)

    def freeze(self) -> None:
        """Refuse all further registrations. Freezing twice is harmless."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, key: ComponentKey) -> bool:
        return key in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[Binding]:
        return iter(list(self._bindings.values()))
