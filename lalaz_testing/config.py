"""
Lalaz Testing - Test configuration.

Provides :class:`TestConfig` (the flat key/value store owned by a
:class:`TestApplication`), :func:`load_env_config` for seeding it from a
dotenv file, and :class:`override_config` for scoped overrides.
"""

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

from dotenv import dotenv_values

from .faults import ConfigFault

logger = logging.getLogger("lalaz_testing.config")

_SENTINEL = object()


class TestConfig:
    """
    Flat configuration mapping for a test application.

    Keys are plain strings; dots carry no nesting semantics
    (``"auth.default_guard"`` is a single key).

    Usage::

        cfg = TestConfig({"debug": True})
        assert cfg.get("debug") is True
        assert "debug" in cfg
    """

    __test__ = False
    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values: Dict[str, Any] = dict(values or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def has(self, key: str) -> bool:
        return key in self._values

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def keys(self) -> list:
        return list(self._values)

    def to_dict(self) -> dict:
        """Return a copy of the values as a plain dictionary."""
        return dict(self._values)

    def clear(self) -> None:
        self._values.clear()

    # -- Dict-like interface ---------------------------------------------

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"<TestConfig keys={self.keys()}>"


# -----------------------------------------------------------------------
# dotenv loading
# -----------------------------------------------------------------------

def load_env_config(path: str | Path, prefix: str = "LALAZ_") -> Dict[str, Any]:
    """
    Read configuration values from a dotenv file.

    Only keys starting with *prefix* are kept.  The prefix is stripped,
    the remainder lower-cased, and ``__`` mapped to ``.``::

        LALAZ_DEBUG=false              -> {"debug": False}
        LALAZ_AUTH__DEFAULT_GUARD=token -> {"auth.default_guard": "token"}

    A missing file yields ``{}``.
    """
    env_path = Path(path)
    if not env_path.exists():
        logger.debug("Env file %s not found; no config loaded", env_path)
        return {}
    if not env_path.is_file():
        raise ConfigFault(str(env_path), "not a regular file")

    values: Dict[str, Any] = {}
    for key, raw in dotenv_values(env_path).items():
        if not key.startswith(prefix) or raw is None:
            continue
        name = key[len(prefix):].lower().replace("__", ".")
        values[name] = _parse_value(raw)
    return values


_TRUTHY = frozenset({"true", "yes", "1"})
_FALSY = frozenset({"false", "no", "0"})


def _parse_value(raw: str) -> Any:
    """Coerce a dotenv string to bool, number or JSON; else keep it."""
    flag = raw.lower()
    if flag in _TRUTHY or flag in _FALSY:
        return flag in _TRUTHY

    number = float if "." in raw else int
    try:
        return number(raw)
    except ValueError:
        pass

    if raw.startswith(("{", "[")):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw

    return raw


# -----------------------------------------------------------------------
# override_config - Context manager / decorator
# -----------------------------------------------------------------------

class override_config:
    """
    Temporarily override configuration values on a test application.

    Works as both a **context manager** and a **decorator**.  Keyword
    names are lower-cased and ``__`` maps to ``.``, so
    ``AUTH__DEFAULT_GUARD="token"`` sets ``"auth.default_guard"``.

    Context manager::

        with override_config(app, DEBUG=False):
            ...

    Decorator (the application is looked up when the function runs)::

        @override_config(DEBUG=False)
        def test_production_mode(self):
            ...

    Previous values are restored on exit; keys that did not exist
    before are removed.
    """

    def __init__(self, app: Any = None, **overrides: Any):
        self._app = app
        self._overrides = {
            key.lower().replace("__", "."): value
            for key, value in overrides.items()
        }
        self._saved: Dict[str, Any] = {}
        self._target: Any = None

    def __enter__(self):
        self._apply()
        return self

    def __exit__(self, *exc_info):
        self._restore()

    def __call__(self, func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            self._apply()
            try:
                return func(*args, **kwargs)
            finally:
                self._restore()

        return wrapper

    def _apply(self) -> None:
        target = self._app
        if target is None:
            from .application import TestApplication
            target = TestApplication.get_instance()
        if target is None:
            return
        self._target = target
        for key, value in self._overrides.items():
            self._saved[key] = target.config(key, _SENTINEL)
            target.set_config(key, value)

    def _restore(self) -> None:
        if self._target is None:
            return
        for key, original in self._saved.items():
            if original is _SENTINEL:
                self._target.forget_config(key)
            else:
                self._target.set_config(key, original)
        self._saved.clear()
        self._target = None
