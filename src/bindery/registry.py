"""Declarative registration of factories.

A :class:`ProviderRegistry` collects factories declared with the
:meth:`ProviderRegistry.provides` decorator, typically at import time in the
modules that define them. Registries are applied to a container by
:func:`bindery.builders.make_container`, keeping the composition root in one
place while letting each module declare how its own components are built.
"""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional

from bindery.domain import ComponentKey, Lifetime, describe_key
from bindery.errors import InvalidBindingError

__all__ = ["Provider", "ProviderRegistry", "inferred_key"]


@dataclass(frozen=True)
class Provider:
    """A factory declared in a registry, not yet bound to any container.

    Attributes:
        key: The key the factory will be bound under.
        factory: Callable accepting the container and returning the value.
        lifetime: Lifetime the binding will be registered with.

    Example:
        >>> @registry.provides(lifetime=Lifetime.SINGLETON)
        >>> def make_database(container) -> Database:
        ...     return Database(container.make("dsn"))
        >>>
        >>> # Creates Provider with:
        >>> # - key: "database"
        >>> # - factory: make_database
        >>> # - lifetime: Lifetime.SINGLETON
    """

    key: ComponentKey
    factory: Callable[[Any], Any]
    lifetime: Lifetime


def inferred_key(target: Any) -> ComponentKey:
    """Derive a key from a class or function, removing any 'make_' prefix.

    Args:
        target: The function or class to derive a key from.

    Returns:
        The class itself, or the function name with any 'make_' prefix removed.

    Example:
        >>> inferred_key(Database)       # Returns Database
        >>> inferred_key(make_database)  # Returns "database"
        >>> inferred_key(my_service)     # Returns "my_service"
    """
    if inspect.isclass(target):
        return target

    if target.__name__.startswith("make_"):
        return target.__name__[5:]
    return target.__name__


class ProviderRegistry:
    """Ordered collection of providers with unique keys."""

    def __init__(self):
        self._providers: dict[ComponentKey, Provider] = {}

    def register(self, provider: Provider) -> None:
        """Register a provider explicitly.

        Raises:
            InvalidBindingError: If the registry already holds a provider for
                the same key.
        """
        if provider.key in self._providers:
            raise InvalidBindingError(
                f"Duplicate provider for key {describe_key(provider.key)!r}"
            )
        self._providers[provider.key] = provider

    def registered_providers(self) -> list[Provider]:
        """Providers in the order they were declared."""
        return list(self._providers.values())

    def provides(
        self,
        key: Optional[ComponentKey] = None,
        lifetime: Lifetime = Lifetime.TRANSIENT,
    ) -> Callable:
        """Decorator registering a function or class as a provider.

        A decorated function is called with the container. A decorated class
        is instantiated with the container as its only argument.

        Args:
            key: Optional key to bind under; defaults to :func:`inferred_key`.
            lifetime: Lifetime of the resulting binding.

        Returns:
            A decorator that registers its target and returns it unchanged.

        Example:
            @registry.provides("greeting", lifetime=Lifetime.SINGLETON)
            def make_greeting(container) -> str:
                return "Hello"
        """

        def decorator(obj):
            if not (inspect.isclass(obj) or inspect.isfunction(obj)):
                raise InvalidBindingError(f"{obj!r} is not a class or function")

            provided_key = key if key is not None else inferred_key(obj)
            self.register(Provider(provided_key, obj, lifetime))
            return obj

        return decorator

    def singleton(self, key: Optional[ComponentKey] = None) -> Callable:
        """Shorthand for ``provides(key, lifetime=Lifetime.SINGLETON)``."""
        return self.provides(key, Lifetime.SINGLETON)

    def __len__(self) -> int:
        return len(self._providers)
