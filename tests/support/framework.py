"""
In-memory stand-ins for the Lalaz framework's container, provider
registry and global Application context.

They implement only the surface :class:`FrameworkBackend` talks to, so
framework-mode behaviour can be tested without Lalaz installed.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from lalaz_testing.container import FrameworkBackend


class FakeContainer:
    """Container with instance, bind (factory) and singleton bindings."""

    def __init__(self):
        self.instances: Dict[Any, Any] = {}
        self.bindings: Dict[Any, Any] = {}
        self.singletons: Dict[Any, Any] = {}
        self.writes: List[tuple] = []
        self.flushed = 0

    def bind(self, identifier, concrete=None):
        self.instances.pop(identifier, None)
        self.bindings[identifier] = concrete if concrete is not None else identifier
        self.writes.append(("bind", identifier))

    def singleton(self, identifier, concrete=None):
        self.bind(identifier, concrete)
        self.singletons[identifier] = None

    def instance(self, identifier, value):
        self.instances[identifier] = value
        self.writes.append(("instance", identifier))

    def has(self, identifier):
        return identifier in self.instances or identifier in self.bindings

    def resolve(self, identifier, parameters=None):
        if identifier in self.instances:
            return self.instances[identifier]
        if identifier not in self.bindings:
            raise LookupError(f"Unresolvable: {identifier!r}")
        built = self.bindings[identifier](**(parameters or {}))
        if identifier in self.singletons:
            self.instances[identifier] = built
        return built

    def flush(self):
        self.instances.clear()
        self.bindings.clear()
        self.singletons.clear()
        self.flushed += 1


class FakeProviderRegistry:
    """Instantiates providers on register, boots them in order."""

    def __init__(self, container: FakeContainer):
        self.container = container
        self.providers: List[Any] = []
        self.booted = False

    def register(self, provider_cls):
        provider = provider_cls(self.container)
        provider.register()
        self.providers.append(provider)

    def boot(self):
        for provider in self.providers:
            provider.boot()
        self.booted = True


class FakeApplication:
    """Global application context with a class-level instance slot."""

    current: Optional["FakeApplication"] = None

    def __init__(self, container, base_path=None, debug=True):
        self.container = container
        self.base_path = base_path
        self.debug = debug

    @classmethod
    def set_instance(cls, instance):
        cls.current = instance

    @classmethod
    def clear_instance(cls):
        cls.current = None


class FakeContainerInterface:
    """Container contract the container is aliased under."""


def make_framework_backend() -> FrameworkBackend:
    container = FakeContainer()
    return FrameworkBackend(
        container,
        FakeProviderRegistry(container),
        application_class=FakeApplication,
        interface=FakeContainerInterface,
    )


# ---------------------------------------------------------------------------
# Sample services and providers
# ---------------------------------------------------------------------------

BOOT_LOG: List[str] = []


class Mailer:
    pass


class FakeMailer(Mailer):
    pass


class Clock:
    pass


class ServiceProvider:
    def __init__(self, container):
        self.container = container

    def register(self):
        pass

    def boot(self):
        pass


class MailServiceProvider(ServiceProvider):
    def register(self):
        self.container.singleton(Mailer, Mailer)

    def boot(self):
        BOOT_LOG.append("mail")


class ClockServiceProvider(ServiceProvider):
    def register(self):
        self.container.bind(Clock, Clock)

    def boot(self):
        BOOT_LOG.append("clock")


class RebindingProvider(ServiceProvider):
    """Rebinds Mailer from its boot hook."""

    def boot(self):
        self.container.instance(Mailer, Mailer())
        BOOT_LOG.append("rebinding")
