"""
Lalaz Testing - Current application context.

Holds the "current" :class:`TestApplication` per thread.  Test runners
that parallelise must do so with worker processes; within one worker,
tests run serially and setup/teardown pairing keeps at most one
application current.
"""

from __future__ import annotations

import threading
from typing import Any, Optional

_local = threading.local()


class ApplicationContext:
    """Thread-local pointer to the current test application."""

    @staticmethod
    def current() -> Optional[Any]:
        return getattr(_local, "app", None)

    @staticmethod
    def set(app: Any) -> None:
        _local.app = app

    @staticmethod
    def clear() -> None:
        _local.app = None
