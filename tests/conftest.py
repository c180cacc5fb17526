"""
Shared fixtures for the lalaz_testing suite.
"""

import pytest

from lalaz_testing.context import ApplicationContext

# Import fixtures so pytest can discover them
from lalaz_testing.fixtures import (  # noqa: F401
    test_app,
    test_config,
    response_factory,
    env_config,
)

from tests.support.framework import BOOT_LOG, FakeApplication, make_framework_backend


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Every test starts with no current application and a clean boot log."""
    ApplicationContext.clear()
    FakeApplication.current = None
    BOOT_LOG.clear()
    yield
    ApplicationContext.clear()
    FakeApplication.current = None


@pytest.fixture
def framework_backend():
    """A FrameworkBackend over the in-memory fakes."""
    return make_framework_backend()
