"""
Lalaz Testing - Container interaction for test cases.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Type

from .application import ProviderSpec, TestApplication
from .config import load_env_config
from .container import ContainerBackend
from .reflection import trait


@trait
class InteractsWithContainer:
    """
    Mixin giving a ``unittest.TestCase`` a :class:`TestApplication`.

    The application is created lazily by :meth:`app` (or eagerly by the
    integration cases' ``setUp``) and torn down by
    :meth:`destroy_application`.

    Class attributes:
        env_file: Optional dotenv file seeding the configuration.
        strict_providers: Fail on providers that cannot be loaded.

    Optional hooks, called with no arguments when defined:
        before_application_boot(): before providers are registered.
        after_application_boot(): once the application has booted.
    """

    env_file: Optional[str] = None
    strict_providers: bool = False

    _app: Optional[TestApplication] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def app(self) -> TestApplication:
        """Return the test application, creating it on first access."""
        if self._app is None:
            self.create_application()
        return self._app

    def create_application(self) -> TestApplication:
        config: Dict[str, Any] = {}
        if self.env_file:
            config.update(load_env_config(self.env_file))
        config.update(self.get_package_config())

        self._app = TestApplication.create(
            providers=self.get_package_providers(),
            config=config,
            before_boot=self._boot_hook("before_application_boot"),
            after_boot=self._boot_hook("after_application_boot"),
            backend=self.get_application_backend(),
            strict_providers=self.strict_providers,
        )
        return self._app

    def _boot_hook(self, name: str) -> Optional[Callable[[TestApplication], None]]:
        hook = getattr(self, name, None)
        if not callable(hook):
            return None

        def run(app: TestApplication) -> None:
            # Container proxies inside hooks must not recreate the app.
            self._app = app
            hook()

        return run

    def destroy_application(self) -> None:
        """Flush the held application and any application still current."""
        if self._app is not None:
            self._app.flush()
            self._app = None

        TestApplication.destroy()

    def refresh_application(self) -> TestApplication:
        self.destroy_application()
        return self.create_application()

    # ------------------------------------------------------------------
    # Container proxies
    # ------------------------------------------------------------------

    def resolve(self, identifier: Type | str, parameters: Optional[Dict[str, Any]] = None) -> Any:
        return self.app().resolve(identifier, parameters)

    def bound(self, identifier: Type | str) -> bool:
        return self.app().bound(identifier)

    def mock(self, identifier: Type | str, value: Any):
        self.app().mock(identifier, value)
        return self

    def instance(self, identifier: Type | str, value: Any):
        self.app().instance(identifier, value)
        return self

    def bind(self, identifier: Type | str, concrete: Any = None):
        self.app().bind(identifier, concrete)
        return self

    def singleton(self, identifier: Type | str, concrete: Any = None):
        self.app().singleton(identifier, concrete)
        return self

    # ------------------------------------------------------------------
    # Assertions
    # ------------------------------------------------------------------

    def assert_bound(self, identifier: Type | str, msg: str = "") -> None:
        self.assertTrue(
            self.bound(identifier),
            msg or f"Failed asserting that [{_label(identifier)}] is bound in the container.",
        )

    def assert_not_bound(self, identifier: Type | str, msg: str = "") -> None:
        self.assertFalse(
            self.bound(identifier),
            msg or f"Failed asserting that [{_label(identifier)}] is not bound in the container.",
        )

    def assert_resolves(self, expected: type, identifier: Type | str, msg: str = "") -> None:
        resolved = self.resolve(identifier)
        self.assertIsInstance(
            resolved,
            expected,
            msg or (
                f"Failed asserting that [{_label(identifier)}] resolves to an "
                f"instance of [{_label(expected)}]."
            ),
        )

    # ------------------------------------------------------------------
    # Overridable configuration
    # ------------------------------------------------------------------

    def get_package_providers(self) -> List[ProviderSpec]:
        """Service providers to register; override in test classes."""
        return []

    def get_package_config(self) -> Dict[str, Any]:
        """Configuration values; override in test classes."""
        return {}

    def get_application_backend(self) -> Optional[ContainerBackend]:
        """
        Backend for the application.

        ``None`` lets :func:`~lalaz_testing.container.detect_backend`
        choose.
        """
        return None


def _label(identifier: Any) -> str:
    if isinstance(identifier, type):
        return f"{identifier.__module__}.{identifier.__qualname__}"
    return str(identifier)
