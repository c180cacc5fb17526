"""
Lalaz Testing - HTTP response wrapper for end-to-end tests.
"""

from __future__ import annotations

import json as stdlib_json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

HeaderValue = Union[str, List[str]]


@dataclass(frozen=True)
class TestResponse:
    """
    Immutable snapshot of a simulated HTTP response.

    Attributes:
        status_code: HTTP status code.
        headers: Header name -> value or list of values.
        body: Raw response body.
        request: Echo of the originating request (method, uri, data,
            query, headers).
    """

    __test__ = False

    status_code: int
    headers: Mapping[str, HeaderValue] = field(default_factory=dict)
    body: str = ""
    request: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        object.__setattr__(self, "request", MappingProxyType(dict(self.request)))

    # -- Accessors --------------------------------------------------------

    def header(self, name: str) -> Optional[str]:
        """
        Look up a header by exact name, then by lower-cased name.

        For multi-valued headers the first value is returned.
        """
        value = self.headers.get(name)
        if value is None:
            value = self.headers.get(name.lower())

        if isinstance(value, (list, tuple)):
            return value[0] if value else None
        return value

    def json(self) -> Dict[str, Any]:
        """
        Decode the body as a JSON object.

        Returns ``{}`` when the body is not valid JSON or does not decode
        to an object.
        """
        try:
            decoded = stdlib_json.loads(self.body)
        except (ValueError, RecursionError, TypeError):
            return {}
        return decoded if isinstance(decoded, dict) else {}

    # -- Status classes ---------------------------------------------------

    @property
    def is_successful(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status_code < 600

    @property
    def is_json(self) -> bool:
        return "application/json" in (self.header("Content-Type") or "")

    # -- Exact statuses ---------------------------------------------------

    @property
    def is_ok(self) -> bool:
        return self.status_code == 200

    @property
    def is_created(self) -> bool:
        return self.status_code == 201

    @property
    def is_no_content(self) -> bool:
        return self.status_code == 204

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    @property
    def is_forbidden(self) -> bool:
        return self.status_code == 403

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    def __repr__(self) -> str:
        return f"<TestResponse [{self.status_code}] {len(self.body)}B>"
