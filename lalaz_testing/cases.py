"""
Lalaz Testing - Test Case Base Classes.

Three layers, each building on the previous one:

- :class:`UnitTestCase`: no container; reflection and structure helpers.
- :class:`IntegrationTestCase`: a fresh :class:`TestApplication` per test.
- :class:`E2ETestCase`: simulated HTTP requests returning
  :class:`TestResponse` values.
"""

from __future__ import annotations

import logging
import unittest
from typing import Any, Dict, Mapping, Optional, Sequence
from unittest import mock
from urllib.parse import urlencode

from . import reflection
from .assertions import ResponseAssertions, StructureAssertions
from .mixins import InteractsWithContainer
from .response import TestResponse

logger = logging.getLogger("lalaz_testing.cases")


class UnitTestCase(unittest.TestCase, StructureAssertions):
    """
    Test case for classes in isolation: no container, no lifecycle.

    Usage::

        class TestCalculator(UnitTestCase):
            def test_private_sum(self):
                calc = Calculator()
                self.assertEqual(self.invoke_method(calc, "_sum", [10, 20]), 30)
    """

    def invoke_method(
        self,
        obj: Any,
        name: str,
        args: Sequence[Any] = (),
        kwargs: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Call a non-public method and return its result."""
        return reflection.invoke_method(obj, name, args, kwargs)

    def get_property(self, obj: Any, name: str) -> Any:
        return reflection.get_property(obj, name)

    def set_property(self, obj: Any, name: str, value: Any) -> None:
        reflection.set_property(obj, name, value)

    def create_mock_with_methods(self, spec: type, methods: Mapping[str, Any]) -> Any:
        """
        Create an autospecced mock of *spec* whose methods return the
        configured values.
        """
        instance = mock.create_autospec(spec, instance=True)
        for name, return_value in methods.items():
            getattr(instance, name).return_value = return_value
        return instance


class IntegrationTestCase(InteractsWithContainer, UnitTestCase):
    """
    Test case with a fresh :class:`TestApplication` for every test.

    The application is created in ``setUp`` and destroyed by a cleanup,
    so it is torn down even when the test body raises.

    Usage::

        class TestAuthManager(IntegrationTestCase):
            def get_package_providers(self):
                return [AuthServiceProvider]

            def get_package_config(self):
                return {"auth.default_guard": "token"}

            def test_resolves(self):
                self.assert_resolves(AuthManager, AuthManager)
    """

    def setUp(self) -> None:
        super().setUp()
        self.addCleanup(self.destroy_application)
        self.create_application()

    def before_application_boot(self) -> None:
        """Hook: add bindings or config before providers register."""

    def after_application_boot(self) -> None:
        """Hook: extra setup once providers have booted."""


class E2ETestCase(ResponseAssertions, IntegrationTestCase):
    """
    Integration test case with HTTP request simulation.

    Requests are not routed through an HTTP kernel yet: :meth:`dispatch`
    returns ``200`` with an empty body for every request.  Override
    :meth:`dispatch` to route through a real kernel.

    Usage::

        class TestHealth(E2ETestCase):
            def test_health(self):
                response = self.get("/health")
                self.assert_response_ok(response)
    """

    base_url: str = "http://localhost"
    default_headers: Dict[str, str] = {}
    session: Dict[str, Any] = {}
    cookies: Dict[str, str] = {}

    def setUp(self) -> None:
        # Per-test copies of the class-level defaults.
        self.default_headers = dict(type(self).default_headers)
        self.session = dict(type(self).session)
        self.cookies = dict(type(self).cookies)
        super().setUp()

    # ------------------------------------------------------------------
    # HTTP verbs
    # ------------------------------------------------------------------

    def get(
        self,
        uri: str,
        query: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> TestResponse:
        return self.request("GET", uri, None, query, headers)

    def post(
        self,
        uri: str,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> TestResponse:
        return self.request("POST", uri, data, None, headers)

    def put(
        self,
        uri: str,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> TestResponse:
        return self.request("PUT", uri, data, None, headers)

    def patch(
        self,
        uri: str,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> TestResponse:
        return self.request("PATCH", uri, data, None, headers)

    def delete(
        self,
        uri: str,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> TestResponse:
        return self.request("DELETE", uri, data, None, headers)

    def json(
        self,
        method: str,
        uri: str,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> TestResponse:
        """Send a request with JSON ``Content-Type`` and ``Accept`` headers."""
        headers = dict(headers or {})
        headers["Content-Type"] = "application/json"
        headers["Accept"] = "application/json"
        return self.request(method, uri, data, None, headers)

    def request(
        self,
        method: str,
        uri: str,
        data: Optional[Dict[str, Any]] = None,
        query: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> TestResponse:
        """
        Simulate an HTTP request.

        Per-call *headers* win over :attr:`default_headers`.
        """
        merged = {**self.default_headers, **(headers or {})}
        data = dict(data or {})
        query = dict(query or {})

        url = self.base_url.rstrip("/") + "/" + uri.lstrip("/")
        if query:
            url += "?" + urlencode(query, doseq=True)

        return self.dispatch(
            url,
            {
                "method": method,
                "uri": uri,
                "data": data,
                "query": query,
                "headers": merged,
            },
        )

    def dispatch(self, url: str, request: Dict[str, Any]) -> TestResponse:
        """
        Turn a simulated request into a response.

        No HTTP kernel is wired in: every request yields ``200`` with no
        headers and an empty body.
        """
        logger.debug("Simulated %s %s (no HTTP kernel dispatch)", request["method"], url)
        return TestResponse(status_code=200, headers={}, body="", request=request)

    # ------------------------------------------------------------------
    # Request state
    # ------------------------------------------------------------------

    def with_session(self, data: Dict[str, Any]) -> "E2ETestCase":
        self.session.update(data)
        return self

    def with_cookies(self, cookies: Dict[str, str]) -> "E2ETestCase":
        self.cookies.update(cookies)
        return self

    def with_headers(self, headers: Dict[str, str]) -> "E2ETestCase":
        self.default_headers.update(headers)
        return self

    def with_token(self, token: str) -> "E2ETestCase":
        """Send ``Authorization: Bearer <token>`` with every request."""
        return self.with_headers({"Authorization": f"Bearer {token}"})
