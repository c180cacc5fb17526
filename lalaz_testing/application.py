"""
Lalaz Testing - TestApplication, the mini runtime behind integration tests.

Owns a service container (through a :class:`ContainerBackend`), the list
of registered service providers, pending service overrides (mocks) and a
flat test configuration.  Manages the boot / flush lifecycle::

    create -> core bindings -> before_boot -> register providers
           -> boot (apply mocks, boot providers) -> after_boot
           -> publish as current -> ... -> flush

When the Lalaz framework is importable the real container and provider
registry are used; otherwise a :class:`SimpleContainer` stands in.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Type, Union

from .config import TestConfig
from .container import ContainerBackend, detect_backend, token_key
from .context import ApplicationContext
from .faults import ProviderLoadFault

logger = logging.getLogger("lalaz_testing.application")

ProviderSpec = Union[type, str]
BootHook = Callable[["TestApplication"], Any]


class TestApplication:
    """
    Container lifecycle manager for a single test.

    Build instances with :meth:`create`, never directly::

        app = TestApplication.create(
            providers=[AuthServiceProvider],
            config={"auth.default_guard": "token"},
        )
        manager = app.resolve(AuthManager)
        ...
        TestApplication.destroy()
    """

    __test__ = False

    def __init__(
        self,
        backend: ContainerBackend,
        *,
        strict_providers: bool = False,
    ):
        self._backend = backend
        self._framework_available = bool(backend.framework_available)
        self._strict_providers = strict_providers
        self._registered_providers: List[type] = []
        self._overrides: Dict[Any, Any] = {}
        self._config = TestConfig()
        self._booted = False

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        providers: Iterable[ProviderSpec] = (),
        config: Optional[Mapping[str, Any]] = None,
        before_boot: Optional[BootHook] = None,
        after_boot: Optional[BootHook] = None,
        *,
        backend: Optional[ContainerBackend] = None,
        strict_providers: bool = False,
    ) -> "TestApplication":
        """
        Create, boot and publish a new test application.

        Args:
            providers: Service provider classes or dotted import paths.
            config: Initial configuration values.
            before_boot: Called with the application before providers
                are registered.
            after_boot: Called with the application once booted.
            backend: Explicit backend; defaults to :func:`detect_backend`.
            strict_providers: Raise :class:`ProviderLoadFault` for
                providers that cannot be loaded instead of skipping them.
        """
        app = cls(
            backend if backend is not None else detect_backend(),
            strict_providers=strict_providers,
        )
        app._config = TestConfig(config)

        app._register_core_bindings()

        if before_boot is not None:
            before_boot(app)

        for provider in providers:
            app.register_provider(provider)

        app._boot()

        if after_boot is not None:
            after_boot(app)

        ApplicationContext.set(app)
        app._backend.publish(app._config.to_dict())

        logger.debug(
            "Test application created (framework=%s, providers=%d)",
            app.framework_available,
            len(app._registered_providers),
        )
        return app

    @classmethod
    def get_instance(cls) -> Optional["TestApplication"]:
        """Return the current test application, if any."""
        return ApplicationContext.current()

    # ------------------------------------------------------------------
    # Container access
    # ------------------------------------------------------------------

    @property
    def framework_available(self) -> bool:
        """Whether the real framework backend is in use; fixed at construction."""
        return self._framework_available

    @property
    def backend(self) -> ContainerBackend:
        return self._backend

    def container(self) -> Any:
        """Return the underlying container object."""
        return self._backend.container

    def resolve(
        self,
        identifier: Type | str,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Resolve a service.

        Raises:
            ServiceNotFoundFault: Unknown identifier on the fallback
                container.  Framework resolution errors propagate as the
                framework raises them.
        """
        return self._backend.resolve(identifier, parameters or {})

    def bound(self, identifier: Type | str) -> bool:
        return self._backend.has(identifier)

    def register_provider(self, provider: ProviderSpec) -> "TestApplication":
        """
        Register a service provider.

        Providers that cannot be loaded are skipped; a provider already
        registered is ignored, so the first registration wins.
        """
        provider_cls = self._load_provider(provider)
        if provider_cls is None:
            return self

        if provider_cls in self._registered_providers:
            return self

        self._backend.register_provider(provider_cls)
        self._registered_providers.append(provider_cls)
        return self

    def mock(self, identifier: Type | str, value: Any) -> "TestApplication":
        """
        Override a service with a mock or replacement.

        Before boot the override is queued and applied after providers
        have registered their own bindings; after boot it takes effect
        immediately.
        """
        self._overrides[identifier] = value

        if self._booted:
            self.instance(identifier, value)

        return self

    def bind(self, identifier: Type | str, concrete: Any = None) -> "TestApplication":
        self._backend.bind(identifier, concrete)
        return self

    def singleton(self, identifier: Type | str, concrete: Any = None) -> "TestApplication":
        self._backend.singleton(identifier, concrete)
        return self

    def instance(self, identifier: Type | str, value: Any) -> "TestApplication":
        self._backend.instance(identifier, value)
        return self

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def config(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def set_config(self, key: str, value: Any) -> "TestApplication":
        self._config.set(key, value)
        return self

    def forget_config(self, key: str) -> "TestApplication":
        self._config.remove(key)
        return self

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def has_framework(self) -> bool:
        return self.framework_available

    def is_booted(self) -> bool:
        return self._booted

    def get_registered_providers(self) -> List[type]:
        return list(self._registered_providers)

    def get_overrides(self) -> Dict[str, Any]:
        return {token_key(k): v for k, v in self._overrides.items()}

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def flush(self) -> None:
        """
        Reset the application and global state.

        The instance is inert afterwards; build a new one with
        :meth:`create`.
        """
        self._backend.clear_global()
        self._backend.flush()

        self._registered_providers = []
        self._overrides = {}
        self._config.clear()
        self._booted = False

        ApplicationContext.clear()
        logger.debug("Test application flushed")

    @classmethod
    def destroy(cls) -> None:
        """Flush the current application, if there is one."""
        app = ApplicationContext.current()
        if app is not None:
            app.flush()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _register_core_bindings(self) -> None:
        if not self.framework_available:
            return

        container = self._backend.container
        for alias in self._backend.core_aliases():
            self._backend.instance(alias, container)

        self._backend.instance(TestApplication, self)
        self._backend.instance("app", self)

    def _boot(self) -> None:
        if self._booted:
            return

        self._apply_overrides()

        if self.framework_available:
            self._backend.boot_providers()
            # Provider boot hooks may rebind a mocked identifier.
            self._apply_overrides()

        self._booted = True

    def _apply_overrides(self) -> None:
        for identifier, value in self._overrides.items():
            self.instance(identifier, value)

    def _load_provider(self, provider: ProviderSpec) -> Optional[type]:
        if isinstance(provider, type):
            return provider

        fault: ProviderLoadFault
        if isinstance(provider, str):
            try:
                loaded = _import_string(provider)
            except (ImportError, AttributeError, ValueError) as exc:
                fault = ProviderLoadFault(provider, str(exc))
            else:
                if isinstance(loaded, type):
                    return loaded
                fault = ProviderLoadFault(provider, "not a class")
        else:
            fault = ProviderLoadFault(repr(provider), "not a class or import path")

        if self._strict_providers:
            raise fault
        logger.debug("Skipping provider: %s", fault.message)
        return None

    def __repr__(self) -> str:
        return (
            f"<TestApplication framework={self.framework_available} "
            f"booted={self._booted} providers={len(self._registered_providers)}>"
        )


def _import_string(path: str) -> Any:
    """Import ``"pkg.module:Name"`` or ``"pkg.module.Name"``."""
    if ":" in path:
        module_path, _, attr = path.partition(":")
    else:
        module_path, _, attr = path.rpartition(".")
    if not module_path or not attr:
        raise ValueError(f"{path!r} is not an import path")

    module = importlib.import_module(module_path)
    target: Any = module
    for part in attr.split("."):
        target = getattr(target, part)
    return target
