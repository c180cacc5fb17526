"""
Lalaz Testing - Service registry backends.

A :class:`TestApplication` talks to its container through a
:class:`ContainerBackend`.  Two implementations exist:

- :class:`FrameworkBackend` wraps the real Lalaz container, provider
  registry and global ``Application`` context.
- :class:`SimpleBackend` wraps a :class:`SimpleContainer`, a plain
  key/value registry used when the framework is not installed.

:func:`detect_backend` is the default composition root: it probes for the
framework once and picks the matching backend.  Tests (and the
``application_backend`` hook of the integration cases) may inject a
backend explicitly instead.
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
from typing import Any, Dict, List, Optional, Protocol, Type, runtime_checkable

from .faults import ServiceNotFoundFault

logger = logging.getLogger("lalaz_testing.container")

FRAMEWORK_CONTAINER_MODULE = "lalaz.container"
FRAMEWORK_CONTRACTS_MODULE = "lalaz.container.contracts"
FRAMEWORK_RUNTIME_MODULE = "lalaz.runtime"


def token_key(identifier: Type | str) -> str:
    """
    Normalise a service identifier to a string key.

    Strings pass through unchanged; classes map to
    ``"<module>.<qualname>"``.
    """
    if isinstance(identifier, str):
        return identifier

    if isinstance(identifier, type):
        return f"{identifier.__module__}.{identifier.__qualname__}"

    return str(identifier)


class SimpleContainer:
    """
    Minimal key/value service registry.

    Every entry is a pre-built value: no lazy resolution and no
    singleton/transient distinction.
    """

    __slots__ = ("_bindings",)

    def __init__(self):
        self._bindings: Dict[str, Any] = {}

    def has(self, identifier: Type | str) -> bool:
        return token_key(identifier) in self._bindings

    def get(self, identifier: Type | str) -> Any:
        key = token_key(identifier)
        try:
            return self._bindings[key]
        except KeyError:
            raise ServiceNotFoundFault(key) from None

    def set(self, identifier: Type | str, value: Any) -> None:
        self._bindings[token_key(identifier)] = value

    def flush(self) -> None:
        self._bindings.clear()

    def __contains__(self, identifier: Type | str) -> bool:
        return self.has(identifier)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"<SimpleContainer bindings={list(self._bindings)}>"


@runtime_checkable
class ContainerBackend(Protocol):
    """
    Service-registry interface shared by the framework and fallback
    backends.
    """

    framework_available: bool

    @property
    def container(self) -> Any:
        ...

    def bind(self, identifier: Any, concrete: Any = None) -> None:
        ...

    def singleton(self, identifier: Any, concrete: Any = None) -> None:
        ...

    def instance(self, identifier: Any, value: Any) -> None:
        ...

    def has(self, identifier: Any) -> bool:
        ...

    def resolve(self, identifier: Any, parameters: Dict[str, Any]) -> Any:
        ...

    def register_provider(self, provider: type) -> None:
        ...

    def boot_providers(self) -> None:
        ...

    def flush(self) -> None:
        ...

    def core_aliases(self) -> List[Any]:
        """Identifiers under which the container registers itself."""
        ...

    def publish(self, config: Dict[str, Any]) -> None:
        """Publish the framework's global application context."""
        ...

    def clear_global(self) -> None:
        ...


class SimpleBackend:
    """
    Fallback backend over a :class:`SimpleContainer`.

    ``bind`` and ``singleton`` store the concrete as a pre-built entry
    (the identifier itself when no concrete is given).  Provider
    registration, provider boot and global publication are no-ops.
    """

    framework_available = False

    def __init__(self, container: Optional[SimpleContainer] = None):
        self._container = container if container is not None else SimpleContainer()

    @property
    def container(self) -> SimpleContainer:
        return self._container

    def bind(self, identifier: Any, concrete: Any = None) -> None:
        self._container.set(identifier, identifier if concrete is None else concrete)

    def singleton(self, identifier: Any, concrete: Any = None) -> None:
        self.bind(identifier, concrete)

    def instance(self, identifier: Any, value: Any) -> None:
        self._container.set(identifier, value)

    def has(self, identifier: Any) -> bool:
        return self._container.has(identifier)

    def resolve(self, identifier: Any, parameters: Dict[str, Any]) -> Any:
        return self._container.get(identifier)

    def register_provider(self, provider: type) -> None:
        pass

    def boot_providers(self) -> None:
        pass

    def flush(self) -> None:
        self._container.flush()

    def core_aliases(self) -> List[Any]:
        return []

    def publish(self, config: Dict[str, Any]) -> None:
        pass

    def clear_global(self) -> None:
        pass


class FrameworkBackend:
    """
    Backend delegating to the host framework.

    Args:
        container: Framework container (``bind``, ``singleton``,
            ``instance``, ``has``, ``resolve``, optional ``flush``).
        providers: Provider registry (``register``, ``boot``).
        application_class: Global application context class exposing
            ``set_instance`` / ``clear_instance``, or ``None``.
        interface: Container contract to alias the container under,
            or ``None``.
    """

    framework_available = True

    def __init__(
        self,
        container: Any,
        providers: Any,
        *,
        application_class: Optional[type] = None,
        interface: Optional[type] = None,
    ):
        self._container = container
        self._providers = providers
        self._application_class = application_class
        self._interface = interface

    @classmethod
    def load(cls) -> "FrameworkBackend":
        """Import the framework and build a fresh container/registry pair."""
        module = importlib.import_module(FRAMEWORK_CONTAINER_MODULE)
        container = module.Container()
        providers = module.ProviderRegistry(container)
        return cls(
            container,
            providers,
            application_class=_optional_attr(FRAMEWORK_RUNTIME_MODULE, "Application"),
            interface=_optional_attr(FRAMEWORK_CONTRACTS_MODULE, "ContainerInterface"),
        )

    @property
    def container(self) -> Any:
        return self._container

    def bind(self, identifier: Any, concrete: Any = None) -> None:
        self._container.bind(identifier, concrete)

    def singleton(self, identifier: Any, concrete: Any = None) -> None:
        self._container.singleton(identifier, concrete)

    def instance(self, identifier: Any, value: Any) -> None:
        self._container.instance(identifier, value)

    def has(self, identifier: Any) -> bool:
        return bool(self._container.has(identifier))

    def resolve(self, identifier: Any, parameters: Dict[str, Any]) -> Any:
        return self._container.resolve(identifier, parameters)

    def register_provider(self, provider: type) -> None:
        self._providers.register(provider)

    def boot_providers(self) -> None:
        self._providers.boot()

    def flush(self) -> None:
        flush = getattr(self._container, "flush", None)
        if callable(flush):
            flush()

    def core_aliases(self) -> List[Any]:
        aliases: List[Any] = []
        if self._interface is not None:
            aliases.append(self._interface)
        aliases.extend([type(self._container), "container"])
        return aliases

    def publish(self, config: Dict[str, Any]) -> None:
        if self._application_class is None:
            return
        context = self._application_class(
            container=self._container,
            base_path=config.get("base_path"),
            debug=bool(config.get("debug", True)),
        )
        self._application_class.set_instance(context)

    def clear_global(self) -> None:
        if self._application_class is not None:
            self._application_class.clear_instance()


def framework_available() -> bool:
    """Capability probe: is the Lalaz container importable?"""
    try:
        return importlib.util.find_spec(FRAMEWORK_CONTAINER_MODULE) is not None
    except ModuleNotFoundError:
        # Parent package ``lalaz`` is missing.
        return False


def detect_backend() -> ContainerBackend:
    """Default composition root: framework backend when installed."""
    if framework_available():
        logger.debug("Lalaz framework detected; using FrameworkBackend")
        return FrameworkBackend.load()
    logger.debug("Lalaz framework not installed; using SimpleBackend")
    return SimpleBackend()


def _optional_attr(module_name: str, attr: str) -> Optional[Any]:
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    return getattr(module, attr, None)
