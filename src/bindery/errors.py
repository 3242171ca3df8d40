from bindery.domain import ComponentKey, describe_key

__all__ = [
    "DependencyError",
    "UnboundKeyError",
    "CircularDependencyError",
    "ContainerFrozenError",
    "InvalidBindingError",
]


class DependencyError(Exception):
    """Base class for all errors raised by the container itself."""

    pass


class UnboundKeyError(DependencyError, KeyError):
    """Raised when a key is resolved that has no registered binding."""

    def __init__(self, key: ComponentKey):
        self.key = key
        super().__init__(key)

    def __str__(self):
        return f"No binding registered for key {describe_key(self.key)!r}"


class CircularDependencyError(DependencyError):
    """Raised when resolving a key transitively requires resolving it again.

    Attributes:
        path: Keys from the first occurrence of the repeated key up to and
            including its second occurrence, e.g. ``["a", "b", "a"]``.
    """

    def __init__(self, path: list[ComponentKey]):
        self.path = path
        super().__init__(
            "Circular dependency detected: "
            + " -> ".join(describe_key(key) for key in path)
        )


class ContainerFrozenError(DependencyError):
    """Raised when bindings are changed after the container has been frozen."""

    pass


class InvalidBindingError(DependencyError):
    """Raised when a binding cannot be registered as given."""

    pass
