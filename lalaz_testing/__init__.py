"""
Lalaz Testing - test-support harness for Lalaz packages.

Provides layered base test cases, a container lifecycle for integration
tests, and an HTTP response wrapper for end-to-end tests.

Usage:
    from lalaz_testing import IntegrationTestCase

    class TestAuthManager(IntegrationTestCase):
        def get_package_providers(self):
            return [AuthServiceProvider]

        def test_resolves(self):
            self.assert_resolves(AuthManager, AuthManager)

Components:
    - UnitTestCase:            Reflection and structural assertions
    - IntegrationTestCase:     Fresh TestApplication per test
    - E2ETestCase:             Simulated HTTP requests
    - TestApplication:         Container bootstrap / mock / flush lifecycle
    - SimpleContainer:         Fallback key/value service registry
    - TestResponse:            Immutable HTTP response wrapper
    - InteractsWithContainer:  Container mixin for custom test cases
    - override_config:         Scoped configuration overrides
"""

__version__ = "1.0.0"

from .application import TestApplication
from .assertions import ResponseAssertions, StructureAssertions
from .cases import E2ETestCase, IntegrationTestCase, UnitTestCase
from .config import TestConfig, load_env_config, override_config
from .container import (
    ContainerBackend,
    FrameworkBackend,
    SimpleBackend,
    SimpleContainer,
    detect_backend,
    framework_available,
)
from .context import ApplicationContext
from .faults import (
    ConfigFault,
    ContainerFault,
    Fault,
    ProviderLoadFault,
    ServiceNotFoundFault,
)
from .mixins import InteractsWithContainer
from .reflection import class_uses_recursive, trait
from .response import TestResponse

__all__ = [
    # Test cases
    "UnitTestCase",
    "IntegrationTestCase",
    "E2ETestCase",
    "InteractsWithContainer",
    # Application
    "TestApplication",
    "ApplicationContext",
    # Containers
    "ContainerBackend",
    "FrameworkBackend",
    "SimpleBackend",
    "SimpleContainer",
    "detect_backend",
    "framework_available",
    # Config
    "TestConfig",
    "load_env_config",
    "override_config",
    # Response
    "TestResponse",
    # Assertions
    "ResponseAssertions",
    "StructureAssertions",
    # Reflection
    "trait",
    "class_uses_recursive",
    # Faults
    "Fault",
    "ContainerFault",
    "ServiceNotFoundFault",
    "ProviderLoadFault",
    "ConfigFault",
]
