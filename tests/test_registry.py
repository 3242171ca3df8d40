import pytest

from bindery.domain import Lifetime
from bindery.errors import InvalidBindingError
from bindery.registry import Provider, ProviderRegistry, inferred_key


@pytest.fixture
def registry():
    return ProviderRegistry()


@pytest.fixture
def provider_finder(registry):
    def find(key) -> Provider:
        return next(p for p in registry.registered_providers() if p.key == key)

    return find


def test_provider_is_registered(registry, provider_finder):
    @registry.provides("greeter", lifetime=Lifetime.SINGLETON)
    def make_greeter(_container):
        def greeter(name: str) -> str:
            return "Hello %s" % name

        return greeter

    provider = provider_finder("greeter")
    assert provider.lifetime is Lifetime.SINGLETON
    assert provider.factory(None)("Dominic") == "Hello Dominic"


def test_key_is_inferred_from_function_name(registry, provider_finder):
    @registry.provides()
    def make_uppercase_greeter(_container):
        pass

    assert provider_finder("uppercase_greeter").lifetime is Lifetime.TRANSIENT


def test_empty_string_key_is_kept(registry):
    @registry.provides("")
    def make_blank(_container):
        pass

    assert [p.key for p in registry.registered_providers()] == [""]


def test_decorator_returns_target_unchanged(registry):
    def make_thing(_container):
        return 1

    assert registry.provides()(make_thing) is make_thing


def test_class_is_registered_under_itself(registry, provider_finder):
    @registry.singleton()
    class Clock:
        def __init__(self, container):
            self.container = container

    provider = provider_finder(Clock)
    assert provider.lifetime is Lifetime.SINGLETON
    assert provider.factory("c").container == "c"


def test_duplicate_key_raises(registry):
    @registry.provides("x")
    def x_a(_container):
        return 1

    with pytest.raises(InvalidBindingError, match="Duplicate provider for key 'x'"):

        @registry.provides("x")
        def x_b(_container):
            return 2


def test_rejects_non_function_targets(registry):
    with pytest.raises(InvalidBindingError, match="is not a class or function"):
        registry.provides("x")(42)


def test_providers_keep_declaration_order(registry):
    @registry.provides()
    def make_b(_container):
        pass

    @registry.provides()
    def make_a(_container):
        pass

    assert [p.key for p in registry.registered_providers()] == ["b", "a"]
    assert len(registry) == 2


def test_inferred_key():
    class Database:
        pass

    def make_database():
        pass

    def my_service():
        pass

    assert inferred_key(Database) is Database
    assert inferred_key(make_database) == "database"
    assert inferred_key(my_service) == "my_service"
