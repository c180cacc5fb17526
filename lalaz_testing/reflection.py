"""
Lalaz Testing - Bounded reflection helpers for unit tests.

Tests sometimes need to reach underscore-prefixed members or check how a
class is composed.  These helpers are that escape hatch and nothing more:

- :func:`invoke_method`, :func:`get_property`, :func:`set_property` reach
  non-public members, including name-mangled ``__private`` ones.
- :func:`trait` marks a mixin as a capability tag so
  :func:`class_uses_recursive` can report which traits a class composes,
  through parent classes and through traits built from other traits.
"""

from __future__ import annotations

import inspect
import weakref
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

T = TypeVar("T", bound=type)

_TRAITS: "weakref.WeakSet[type]" = weakref.WeakSet()


# ============================================================================
# Member access
# ============================================================================

def _class_of(class_or_object: Any) -> type:
    return class_or_object if isinstance(class_or_object, type) else type(class_or_object)


def _member_name(target: Any, name: str) -> str:
    """
    Resolve *name* on *target*.

    Names of the form ``__name`` are tried as given, then name-mangled
    against each class in the MRO.  Unresolvable names are returned
    unchanged so the caller's attribute access fails naturally.
    """
    if hasattr(target, name):
        return name
    if name.startswith("__") and not name.endswith("__"):
        for klass in _class_of(target).__mro__:
            mangled = f"_{klass.__name__.lstrip('_')}{name}"
            if hasattr(target, mangled):
                return mangled
    return name


def invoke_method(
    obj: Any,
    name: str,
    args: Sequence[Any] = (),
    kwargs: Optional[Dict[str, Any]] = None,
) -> Any:
    """
    Call a (possibly non-public) method and return its result.

    Raises:
        AttributeError: The method does not exist.
    """
    method = getattr(obj, _member_name(obj, name))
    return method(*args, **(kwargs or {}))


def get_property(obj: Any, name: str) -> Any:
    """
    Read a (possibly non-public) attribute.

    Raises:
        AttributeError: The attribute does not exist.
    """
    return getattr(obj, _member_name(obj, name))


def set_property(obj: Any, name: str, value: Any) -> None:
    """
    Write a (possibly non-public) attribute.

    The attribute must already exist on the object or its class.  No
    type checking is applied to *value*.

    Raises:
        AttributeError: The attribute does not exist.
    """
    resolved = _member_name(obj, name)
    if not has_property(obj, resolved):
        raise AttributeError(
            f"{_class_of(obj).__name__!r} object has no attribute {name!r}"
        )
    setattr(obj, resolved, value)


# ============================================================================
# Traits
# ============================================================================

def trait(cls: T) -> T:
    """
    Class decorator registering *cls* as a trait.

    Usage::

        @trait
        class Timestamps:
            ...

        @trait
        class SoftDeletes(Timestamps):
            ...
    """
    _TRAITS.add(cls)
    return cls


def is_trait(cls: Any) -> bool:
    return isinstance(cls, type) and cls in _TRAITS


def trait_uses_recursive(trait_cls: type) -> List[type]:
    """Traits composed by *trait_cls*, transitively (excluding itself)."""
    return [klass for klass in trait_cls.__mro__[1:] if is_trait(klass)]


def class_uses_recursive(class_or_object: Any) -> List[type]:
    """
    All traits used by a class, its parents, and the traits they compose.

    Parents' traits come first; the result holds no duplicates.
    """
    klass = _class_of(class_or_object)
    results: Dict[type, None] = {}
    for base in reversed(klass.__mro__):
        if base is klass:
            continue
        if is_trait(base):
            for used in trait_uses_recursive(base):
                results.setdefault(used, None)
            results.setdefault(base, None)
    return list(results)


def _matches(candidate: type, expected: Type | str) -> bool:
    if isinstance(expected, str):
        return expected in (
            candidate.__name__,
            candidate.__qualname__,
            f"{candidate.__module__}.{candidate.__qualname__}",
        )
    return candidate is expected


def uses_trait(class_or_object: Any, expected: Type | str) -> bool:
    """Check if a class uses a trait, given by class or (dotted) name."""
    return any(_matches(used, expected) for used in class_uses_recursive(class_or_object))


# ============================================================================
# Structural predicates
# ============================================================================

def implements_interface(class_or_object: Any, interface: type) -> bool:
    """
    Check nominal or ABC-registered implementation of *interface*.

    Protocols, ``runtime_checkable`` or not, are checked structurally
    against their public members, data members included.
    """
    klass = _class_of(class_or_object)
    if interface in klass.__mro__:
        return True
    if getattr(interface, "_is_protocol", False):
        return all(
            hasattr(class_or_object, name) or has_property(class_or_object, name)
            for name in _protocol_members(interface)
        )
    try:
        return issubclass(klass, interface)
    except TypeError:
        return False


def _protocol_members(protocol: type) -> List[str]:
    names: Dict[str, None] = {}
    for base in protocol.__mro__:
        if not getattr(base, "_is_protocol", False):
            continue
        if base.__module__ == "typing":
            continue
        for name in (*vars(base), *getattr(base, "__annotations__", {})):
            if not name.startswith("_"):
                names.setdefault(name, None)
    return list(names)


def has_method(class_or_object: Any, name: str) -> bool:
    member = getattr(class_or_object, _member_name(class_or_object, name), None)
    return member is not None and callable(member)


def has_property(class_or_object: Any, name: str) -> bool:
    """
    Check for an attribute on the instance, its class, or in the class
    annotations along the MRO.
    """
    if hasattr(class_or_object, name):
        member = inspect.getattr_static(class_or_object, name, None)
        return not inspect.isroutine(member)
    for klass in _class_of(class_or_object).__mro__:
        if name in getattr(klass, "__annotations__", {}):
            return True
        if name in getattr(klass, "__slots__", ()):
            return True
    return False
