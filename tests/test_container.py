"""
Service registry backends: SimpleContainer, SimpleBackend,
FrameworkBackend and backend detection.
"""

import importlib.util

import pytest

from lalaz_testing import container as container_module
from lalaz_testing.container import (
    ContainerBackend,
    FrameworkBackend,
    SimpleBackend,
    SimpleContainer,
    detect_backend,
    framework_available,
    token_key,
)
from lalaz_testing.faults import ServiceNotFoundFault

from tests.support.framework import (
    FakeApplication,
    FakeContainer,
    FakeContainerInterface,
    FakeProviderRegistry,
    Mailer,
    MailServiceProvider,
)


class Repo:
    pass


# ============================================================================
# token_key
# ============================================================================

class TestTokenKey:

    def test_string_passes_through(self):
        assert token_key("cache") == "cache"

    def test_class_maps_to_dotted_path(self):
        assert token_key(Repo) == f"{__name__}.Repo"

    def test_nested_class_uses_qualname(self):
        class Local:
            pass

        assert token_key(Local).endswith("test_nested_class_uses_qualname.<locals>.Local")
        assert token_key(Local) == token_key(Local)


# ============================================================================
# SimpleContainer
# ============================================================================

class TestSimpleContainer:

    def test_set_and_get(self):
        c = SimpleContainer()
        c.set("greeting", "hello")
        assert c.has("greeting")
        assert c.get("greeting") == "hello"

    def test_get_unknown_raises(self):
        c = SimpleContainer()
        with pytest.raises(ServiceNotFoundFault) as exc_info:
            c.get("missing")
        assert exc_info.value.identifier == "missing"
        assert exc_info.value.code == "SERVICE_NOT_FOUND"
        assert "Service not found: missing" in str(exc_info.value)

    def test_lookup_miss_is_a_lookup_error(self):
        with pytest.raises(LookupError):
            SimpleContainer().get("missing")

    def test_class_identifiers(self):
        c = SimpleContainer()
        repo = Repo()
        c.set(Repo, repo)
        assert c.get(Repo) is repo
        assert c.has(token_key(Repo))

    def test_none_value_is_bound(self):
        c = SimpleContainer()
        c.set("nothing", None)
        assert c.has("nothing")
        assert c.get("nothing") is None

    def test_set_overwrites(self):
        c = SimpleContainer()
        c.set("k", 1)
        c.set("k", 2)
        assert c.get("k") == 2
        assert len(c) == 1

    def test_flush(self):
        c = SimpleContainer()
        c.set("a", 1)
        c.set("b", 2)
        c.flush()
        assert not c.has("a")
        assert "b" not in c
        assert len(c) == 0


# ============================================================================
# SimpleBackend
# ============================================================================

class TestSimpleBackend:

    def test_is_a_container_backend(self):
        assert isinstance(SimpleBackend(), ContainerBackend)
        assert SimpleBackend.framework_available is False

    def test_instance_and_resolve(self):
        backend = SimpleBackend()
        backend.instance("db", "sqlite")
        assert backend.has("db")
        assert backend.resolve("db", {"ignored": True}) == "sqlite"

    def test_bind_stores_concrete_as_is(self):
        backend = SimpleBackend()
        backend.bind(Repo, "repo-value")
        assert backend.resolve(Repo, {}) == "repo-value"

    def test_bind_without_concrete_stores_identifier(self):
        backend = SimpleBackend()
        backend.singleton(Repo)
        assert backend.resolve(Repo, {}) is Repo

    def test_resolve_unknown_raises(self):
        with pytest.raises(ServiceNotFoundFault):
            SimpleBackend().resolve("nope", {})

    def test_no_core_aliases(self):
        assert SimpleBackend().core_aliases() == []

    def test_flush_empties_container(self):
        backend = SimpleBackend()
        backend.instance("a", 1)
        backend.flush()
        assert not backend.has("a")

    def test_wraps_given_container(self):
        c = SimpleContainer()
        backend = SimpleBackend(c)
        backend.instance("x", 1)
        assert backend.container is c
        assert c.get("x") == 1


# ============================================================================
# FrameworkBackend
# ============================================================================

class TestFrameworkBackend:

    def make(self, **kw):
        container = FakeContainer()
        registry = FakeProviderRegistry(container)
        return FrameworkBackend(container, registry, **kw), container, registry

    def test_is_a_container_backend(self):
        backend, _, _ = self.make()
        assert isinstance(backend, ContainerBackend)
        assert backend.framework_available is True

    def test_delegates_bindings(self):
        backend, container, _ = self.make()
        backend.bind(Mailer, Mailer)
        backend.instance("cfg", {"a": 1})
        assert backend.has(Mailer)
        assert isinstance(backend.resolve(Mailer, {}), Mailer)
        assert container.instances["cfg"] == {"a": 1}

    def test_singleton_is_shared(self):
        backend, _, _ = self.make()
        backend.singleton(Mailer, Mailer)
        assert backend.resolve(Mailer, {}) is backend.resolve(Mailer, {})

    def test_delegates_provider_registry(self):
        backend, container, registry = self.make()
        backend.register_provider(MailServiceProvider)
        assert container.has(Mailer)
        backend.boot_providers()
        assert registry.booted is True

    def test_core_aliases(self):
        backend, _, _ = self.make(interface=FakeContainerInterface)
        assert backend.core_aliases() == [FakeContainerInterface, FakeContainer, "container"]

    def test_core_aliases_without_interface(self):
        backend, _, _ = self.make()
        assert backend.core_aliases() == [FakeContainer, "container"]

    def test_flush_skips_containers_without_flush(self):
        class NoFlush:
            pass

        backend = FrameworkBackend(NoFlush(), object())
        backend.flush()

    def test_publish_and_clear_global(self):
        backend, container, _ = self.make(application_class=FakeApplication)
        backend.publish({"base_path": "/srv/app", "debug": 0})
        assert FakeApplication.current.container is container
        assert FakeApplication.current.base_path == "/srv/app"
        assert FakeApplication.current.debug is False

        backend.clear_global()
        assert FakeApplication.current is None

    def test_publish_defaults_debug_true(self):
        backend, _, _ = self.make(application_class=FakeApplication)
        backend.publish({})
        assert FakeApplication.current.debug is True
        assert FakeApplication.current.base_path is None

    def test_publish_without_application_class(self):
        backend, _, _ = self.make()
        backend.publish({})
        backend.clear_global()
        assert FakeApplication.current is None


# ============================================================================
# Detection
# ============================================================================

class TestDetection:

    def test_framework_not_installed(self, monkeypatch):
        monkeypatch.setattr(importlib.util, "find_spec", lambda name: None)
        assert framework_available() is False
        assert isinstance(detect_backend(), SimpleBackend)

    def test_missing_parent_package(self, monkeypatch):
        def find_spec(name):
            raise ModuleNotFoundError("No module named 'lalaz'")

        monkeypatch.setattr(importlib.util, "find_spec", find_spec)
        assert framework_available() is False

    def test_framework_installed(self, monkeypatch):
        sentinel = FrameworkBackend(FakeContainer(), object())
        monkeypatch.setattr(container_module, "framework_available", lambda: True)
        monkeypatch.setattr(FrameworkBackend, "load", classmethod(lambda cls: sentinel))
        assert detect_backend() is sentinel
