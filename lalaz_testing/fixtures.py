"""
Lalaz Testing - Pytest Fixtures.

Function-style counterparts of the base test cases.  Import the
fixtures in your ``conftest.py``::

    from lalaz_testing.fixtures import (  # noqa: F401
        test_app,
        test_config,
        response_factory,
        env_config,
    )
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

import pytest

from .application import TestApplication
from .config import TestConfig, load_env_config
from .container import SimpleBackend
from .response import TestResponse


@pytest.fixture
def test_app():
    """
    A booted :class:`TestApplication` on the fallback container.

    Destroyed after the test, even if it fails.
    """
    app = TestApplication.create(backend=SimpleBackend())
    yield app
    app.flush()
    TestApplication.destroy()


@pytest.fixture
def test_config():
    """A :class:`TestConfig` preloaded with test-mode defaults."""
    return TestConfig({"debug": True, "env": "testing"})


@pytest.fixture
def response_factory() -> Callable[..., TestResponse]:
    """
    Factory fixture; call with kwargs to build responses.

    Usage::

        def test_not_found(response_factory):
            resp = response_factory(status_code=404)
            assert resp.is_not_found
    """

    def make(
        status_code: int = 200,
        headers: Optional[Dict[str, Any]] = None,
        body: str = "",
        request: Optional[Dict[str, Any]] = None,
    ) -> TestResponse:
        return TestResponse(
            status_code=status_code,
            headers=headers or {},
            body=body,
            request=request or {},
        )

    return make


@pytest.fixture
def env_config(tmp_path):
    """
    Factory fixture writing a dotenv file and loading it.

    Usage::

        def test_env(env_config):
            cfg = env_config("LALAZ_DEBUG=false\\n")
            assert cfg == {"debug": False}
    """

    def load(contents: str, prefix: str = "LALAZ_") -> Dict[str, Any]:
        path = tmp_path / ".env.testing"
        path.write_text(contents)
        return load_env_config(path, prefix=prefix)

    return load
