"""
Lalaz Testing - Assertion mixins.

Mix into a ``unittest.TestCase``; every helper delegates to the case's
own ``assertTrue`` / ``assertEqual`` / ``assertIn`` primitives with a
message naming what was expected.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Type

from . import reflection
from .response import TestResponse


def _name(class_or_object: Any) -> str:
    klass = class_or_object if isinstance(class_or_object, type) else type(class_or_object)
    return f"{klass.__module__}.{klass.__qualname__}"


def _trait_name(expected: Type | str) -> str:
    return expected if isinstance(expected, str) else _name(expected)


def _body_preview(response: TestResponse, limit: int = 500) -> str:
    body = response.body
    if len(body) > limit:
        return body[:limit] + "..."
    return body


class StructureAssertions:
    """Assertions about how a class is composed."""

    def assert_uses_trait(self, trait: Type | str, class_or_object: Any, msg: str = "") -> None:
        self.assertTrue(
            reflection.uses_trait(class_or_object, trait),
            msg or (
                f"Failed asserting that class {_name(class_or_object)} "
                f"uses trait {_trait_name(trait)}"
            ),
        )

    def assert_implements_interface(self, interface: type, class_or_object: Any, msg: str = "") -> None:
        self.assertTrue(
            reflection.implements_interface(class_or_object, interface),
            msg or (
                f"Failed asserting that class {_name(class_or_object)} "
                f"implements {_name(interface)}"
            ),
        )

    def assert_has_method(self, name: str, class_or_object: Any, msg: str = "") -> None:
        self.assertTrue(
            reflection.has_method(class_or_object, name),
            msg or f"Failed asserting that class {_name(class_or_object)} has method {name}",
        )

    def assert_has_property(self, name: str, class_or_object: Any, msg: str = "") -> None:
        self.assertTrue(
            reflection.has_property(class_or_object, name),
            msg or f"Failed asserting that class {_name(class_or_object)} has property {name}",
        )


class ResponseAssertions:
    """Assertions against :class:`TestResponse` values."""

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def assert_response_status(self, response: TestResponse, status: int, msg: str = "") -> None:
        self.assertEqual(
            status,
            response.status_code,
            msg or (
                f"Expected status code {status} but received {response.status_code}\n"
                f"Body: {_body_preview(response)}"
            ),
        )

    def assert_response_ok(self, response: TestResponse, msg: str = "") -> None:
        """Assert a 2xx response."""
        self.assertTrue(
            response.is_successful,
            msg or f"Expected successful response but received status {response.status_code}",
        )

    def assert_response_redirects(
        self,
        response: TestResponse,
        uri: Optional[str] = None,
        msg: str = "",
    ) -> None:
        """Assert a 3xx response, optionally checking ``Location``."""
        self.assertTrue(
            response.is_redirect,
            msg or f"Expected redirect response but received status {response.status_code}",
        )

        if uri is not None:
            location = response.header("Location")
            self.assertEqual(
                uri,
                location,
                msg or f"Expected redirect to {uri} but got {location or 'no location'}",
            )

    # ------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------

    def assert_response_json(
        self,
        response: TestResponse,
        data: Optional[Dict[str, Any]] = None,
        msg: str = "",
    ) -> None:
        """Assert a JSON response whose body contains the *data* subset."""
        self.assertTrue(
            response.is_json,
            msg or "Expected JSON response but content type was not application/json",
        )

        if data:
            actual = response.json()
            for key, value in data.items():
                self.assertIn(key, actual, msg or f"Missing key {key!r} in response JSON")
                self.assertEqual(
                    value,
                    actual[key],
                    msg or f"JSON key {key!r}: expected {value!r}, got {actual[key]!r}",
                )

    # ------------------------------------------------------------------
    # Headers & body
    # ------------------------------------------------------------------

    def assert_response_header(
        self,
        response: TestResponse,
        name: str,
        value: Optional[str] = None,
        msg: str = "",
    ) -> None:
        """Assert a header exists (and optionally matches *value*)."""
        actual = response.header(name)
        self.assertIsNotNone(actual, msg or f"Header {name!r} not found")
        if value is not None:
            self.assertEqual(
                value,
                actual,
                msg or f"Header {name!r}: expected {value!r}, got {actual!r}",
            )

    def assert_response_body_contains(self, response: TestResponse, text: str, msg: str = "") -> None:
        self.assertIn(
            text,
            response.body,
            msg or f"Response body does not contain {text!r}\nBody: {_body_preview(response)}",
        )
