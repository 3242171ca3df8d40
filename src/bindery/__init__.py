"""Bindery dependency-binding container.

Bindery is a small container for wiring an application's object graph at a
single composition root. Factories are registered under keys with a transient
or singleton lifetime, then resolved on demand. Factories receive the
container and may resolve their own dependencies from it; cycles in the
resulting graph are reported with the full path rather than recursing
without bound.

Key Features:
    - Transient and singleton lifetimes, with last-write-wins rebinding
    - Cycle detection naming every key in the cycle
    - Thread-safe first resolution of singletons (one factory call per binding)
    - Explicit freezing of bindings once wiring is complete
    - Declarative registries applied by a single builder function

Basic Usage:
    >>> from bindery.container import Container
    >>>
    >>> container = Container()
    >>> container.singleton(Database, lambda c: Database())
    >>> container.bind(UserService, lambda c: UserService(c.make(Database)))
    >>> container.freeze()
    >>> service = container.make(UserService)

The package consists of several modules:
    - container: The Container façade and its configuration
    - binding_table: Key to construction-rule mapping
    - instance_cache: Memoisation of singleton values
    - resolver: Resolution and cycle detection
    - registry: Declarative provider registration
    - builders: High-level container construction
    - domain: Core domain models (Binding, Lifetime)
    - errors: Container-specific exceptions
"""
