"""Capability checks and field access for untrusted thrown values.

Thrown values arrive with no known shape.  Every helper here degrades to a
definite fallback (``None``, ``False``, ``"<unknown>"``) instead of raising,
even when the value's own ``__getattr__``, ``__str__`` or ``__iter__``
misbehaves.

Type tags mimic ``Object.prototype.toString``: plain dicts are
``[object Object]``, other objects report their class name, so a class named
``DOMException`` is recognised no matter which module defines it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from stackcanon.config import MAX_STRING_LENGTH, UNKNOWN

ELLIPSIS = "<...>"

_MISSING = object()

_FIELD_ALIASES: dict[str, str] = {
    "framesToPop": "frames_to_pop",
    "columnNumber": "column_number",
}

_ERROR_TAGS = frozenset({"[object Error]", "[object Exception]", "[object DOMException]"})

_PRIMITIVE_TYPES = (str, bytes, bool, int, float, complex)


def _lookup(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj[key] if key in obj else _MISSING
    return getattr(obj, key, _MISSING)


def get_field(obj: Any, name: str, default: Any = None) -> Any:
    """Read *name* from a mapping or an object, never raising."""
    if obj is None:
        return default
    for key in (name, _FIELD_ALIASES.get(name)):
        if key is None:
            continue
        try:
            value = _lookup(obj, key)
        except Exception:
            return default
        if value is not _MISSING:
            return value
    return default


def has_field(obj: Any, name: str) -> bool:
    """Return ``True`` when *obj* carries *name*, even if its value is ``None``."""
    return get_field(obj, name, _MISSING) is not _MISSING


def _tag_name(wat: Any) -> str:
    if wat is None:
        return "Null"
    if isinstance(wat, bool):
        return "Boolean"
    if isinstance(wat, (int, float)):
        return "Number"
    if isinstance(wat, str):
        return "String"
    if type(wat) is dict:
        return "Object"
    if type(wat) in (list, tuple):
        return "Array"
    return type(wat).__name__


def get_type(wat: Any) -> str:
    """Return the ``[object Tag]`` type tag of *wat*."""
    try:
        return f"[object {_tag_name(wat)}]"
    except Exception:
        return "[object Object]"


def _class_names(wat: Any) -> frozenset[str]:
    try:
        return frozenset(cls.__name__ for cls in type(wat).__mro__)
    except Exception:
        return frozenset()


def is_instance_of(wat: Any, base: Any) -> bool:
    """``isinstance`` that answers ``False`` instead of raising."""
    try:
        return isinstance(wat, base)
    except Exception:
        return False


def is_error(wat: Any) -> bool:
    if wat is None:
        return False
    if get_type(wat) in _ERROR_TAGS:
        return True
    return is_instance_of(wat, BaseException)


def is_error_event(wat: Any) -> bool:
    return wat is not None and get_type(wat) == "[object ErrorEvent]"


def is_dom_error(wat: Any) -> bool:
    return wat is not None and get_type(wat) == "[object DOMError]"


def is_dom_exception(wat: Any) -> bool:
    return wat is not None and get_type(wat) == "[object DOMException]"


def is_element(wat: Any) -> bool:
    return wat is not None and "Element" in _class_names(wat)


def is_event(wat: Any) -> bool:
    return wat is not None and "Event" in _class_names(wat)


def is_primitive(wat: Any) -> bool:
    return wat is None or is_instance_of(wat, _PRIMITIVE_TYPES)


def record_keys(wat: Any) -> list[str]:
    """Return the enumerable keys of a record-like value.

    Mappings contribute their keys, lists and tuples their indices, other
    objects their public instance attributes.  Anything that cannot be
    enumerated has no keys.
    """
    try:
        if isinstance(wat, Mapping):
            return [str(key) for key in wat]
        if isinstance(wat, (list, tuple)):
            return [str(index) for index in range(len(wat))]
        return [key for key in vars(wat) if not key.startswith("_")]
    except Exception:
        return []


def is_record(wat: Any) -> bool:
    """Return ``True`` for a non-primitive value with at least one key."""
    if is_primitive(wat):
        return False
    return len(record_keys(wat)) > 0


def is_truthy(value: Any) -> bool:
    """``bool(value)``, or ``False`` when the conversion raises."""
    try:
        return bool(value)
    except Exception:
        return False


def safe_str(value: Any) -> str:
    """``str(value)``, or ``"<unknown>"`` when the conversion raises."""
    try:
        return str(value)
    except Exception:
        return UNKNOWN


def truncate(value: Any, limit: int = MAX_STRING_LENGTH) -> str:
    """Cap *value* at *limit* characters, marking the cut with ``<...>``."""
    safe = safe_str(value)
    if len(safe) > limit:
        return safe[: limit - len(ELLIPSIS)] + ELLIPSIS
    return safe
