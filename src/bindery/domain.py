"""Domain models used throughout the container."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Union

__all__ = ["ComponentKey", "Lifetime", "Binding", "describe_key"]


ComponentKey = Union[str, type]
"""Type alias for keys under which bindings are registered.

Values can be bound either under a string name or under a type.

Example:
    >>> container.make("database")     # Lookup by name
    >>> container.make(Database)       # Lookup by type
"""


class Lifetime(Enum):
    """Whether a binding's factory runs on every resolution or only once."""

    TRANSIENT = "transient"
    SINGLETON = "singleton"


@dataclass(frozen=True, eq=False)
class Binding:
    """A registered rule mapping a key to a construction function.

    Bindings compare by identity: rebinding a key with the same factory still
    produces a new binding, and any instance cached for the old one is stale.

    Attributes:
        key: The key the binding is registered under.
        factory: Callable accepting the container and returning the value.
        lifetime: The lifetime policy applied to values the factory produces.
    """

    key: ComponentKey
    factory: Callable[[Any], Any]
    lifetime: Lifetime

    @property
    def is_singleton(self) -> bool:
        return self.lifetime is Lifetime.SINGLETON


def describe_key(key: ComponentKey) -> str:
    """Render a key for use in error and log messages.

    Example:
        >>> describe_key("database")  # Returns "database"
        >>> describe_key(Database)    # Returns "Database"
    """
    if isinstance(key, type):
        return key.__name__
    return str(key)
