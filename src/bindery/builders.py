"""High level entry points for constructing containers."""

import logging
from typing import Iterable, Optional

from bindery.container import Container, ContainerConfig
from bindery.domain import ComponentKey
from bindery.registry import ProviderRegistry

__all__ = ["make_container"]

logger = logging.getLogger(__name__)


def make_container(
    *registries: ProviderRegistry,
    config: Optional[ContainerConfig] = None,
    eager: Iterable[ComponentKey] = (),
    freeze: bool = True,
) -> Container:
    """Construct a :class:`Container` wired from the given registries.

    Registries are applied in order, so a provider in a later registry
    replaces one for the same key in an earlier registry. This allows, for
    example, a test registry to override production bindings.

    Args:
        registries: Registries whose providers are bound into the container.
        config: Optional container settings.
        eager: Keys to resolve immediately, so that missing bindings and
            dependency cycles are reported at startup.
        freeze: Freeze the container once wiring and eager resolution are done.

    Returns:
        The wired :class:`Container`.

    Raises:
        UnboundKeyError: If an eager key, or one of its dependencies, is unbound.
        CircularDependencyError: If resolving an eager key hits a cycle.

    Example:
        >>> container = make_container(app_registry, eager=[Database])
        >>> container.make(UserService)
    """
    container = Container(config)

    for registry in registries:
        for provider in registry.registered_providers():
            container.register(provider.key, provider.factory, provider.lifetime)

    eager = list(eager)
    if eager:
        logger.debug("Eagerly resolving %d keys", len(eager))
        container.make_all(eager)

    if freeze:
        container.freeze()
    return container
