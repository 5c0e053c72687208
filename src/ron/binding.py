"""Bind request data (JSON bodies, form values) into dataclasses.

Field names map to request keys one-to-one unless overridden through
field metadata::

    @dataclass
    class Signup:
        email: str = field(metadata={"form": "email", "json": "email"})
        age: int = 0
        tags: list[str] = field(default_factory=list)
        joined: datetime | None = None

Supported field types: ``str``, ``int``, ``float``, ``bool``,
``datetime`` (ISO 8601 / RFC 3339), ``X | None`` and ``list[X]`` of
those. Keys missing from the request keep the field default; a value
that does not convert raises ``BindError``.
"""

from __future__ import annotations

import dataclasses
import json
import types
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Union, get_args, get_origin, get_type_hints

from ron.errors import BindError

_TRUE = frozenset({"1", "t", "true", "yes", "on"})
_FALSE = frozenset({"0", "f", "false", "no", "off"})


def _unwrap_optional(hint: Any) -> Any:
    """``X | None`` -> ``X``; anything else unchanged."""
    if get_origin(hint) in (Union, types.UnionType):
        args = [a for a in get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"invalid boolean {value!r}")


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"invalid integer {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"invalid integer {value!r}")
    return int(value)


_SCALARS: dict[type, Any] = {
    str: str,
    int: _parse_int,
    float: float,
    bool: _parse_bool,
    datetime: _parse_datetime,
}


def _convert(name: str, raw: Any, hint: Any) -> Any:
    target = _unwrap_optional(hint)
    if raw is None and target is not hint:
        return None

    convert = _SCALARS.get(target)
    if convert is None:
        if target is Any:
            return raw
        msg = f"unsupported type {target!r} for field {name!r}"
        raise BindError(msg)
    try:
        return convert(raw)
    except (TypeError, ValueError) as exc:
        msg = f"field {name!r}: cannot convert {raw!r} to {target.__name__}"
        raise BindError(msg) from exc


def _is_list(hint: Any) -> bool:
    return get_origin(_unwrap_optional(hint)) in (list, tuple)


def _item_hint(hint: Any) -> Any:
    args = get_args(_unwrap_optional(hint))
    return args[0] if args else str


def _check_dataclass(cls: Any) -> None:
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        msg = f"bind target must be a dataclass type, got {cls!r}"
        raise BindError(msg)


def _build[T](cls: type[T], lookup: Any, tag: str) -> T:
    _check_dataclass(cls)
    hints = get_type_hints(cls)
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):  # type: ignore[arg-type]
        if not f.init:
            continue
        key = f.metadata.get(tag, f.name)
        found, raw = lookup(key, _is_list(hints.get(f.name, str)))
        if not found:
            continue
        hint = hints.get(f.name, str)
        if _is_list(hint):
            item = _item_hint(hint)
            values = [_convert(f.name, v, item) for v in raw]
            kwargs[f.name] = tuple(values) if get_origin(_unwrap_optional(hint)) is tuple else values
        else:
            kwargs[f.name] = _convert(f.name, raw, hint)
    return cls(**kwargs)


def bind_form[T](cls: type[T], form: Any) -> T:
    """Populate *cls* from a multi-value mapping (``Values``, ``dict[str, list[str]]``).

    The metadata key ``"form"`` renames a field. List fields receive
    every submitted value; scalar fields the first.
    """

    def lookup(key: str, many: bool) -> tuple[bool, Any]:
        if hasattr(form, "get_list"):
            values = form.get_list(key)
        else:
            raw = form.get(key)
            values = [] if raw is None else (list(raw) if isinstance(raw, list | tuple) else [raw])
        if not values:
            return False, None
        return True, values if many else values[0]

    return _build(cls, lookup, "form")


def bind_mapping[T](cls: type[T], data: Mapping[str, Any]) -> T:
    """Populate *cls* from decoded JSON (metadata key ``"json"`` renames)."""
    if not isinstance(data, Mapping):
        msg = f"expected a JSON object, got {type(data).__name__}"
        raise BindError(msg)

    def lookup(key: str, many: bool) -> tuple[bool, Any]:
        if key not in data:
            return False, None
        value = data[key]
        if many and not isinstance(value, list):
            msg = f"field {key!r}: expected a JSON array"
            raise BindError(msg)
        return True, value

    return _build(cls, lookup, "json")


def bind_json[T](cls: type[T], body: bytes | str, content_type: str | None) -> T:
    """Decode a JSON request body into *cls*.

    Only ``application/json`` (parameters such as ``charset`` allowed)
    is accepted.
    """
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type != "application/json":
        msg = f"unsupported content type {content_type!r}, expected application/json"
        raise BindError(msg)
    try:
        data = json.loads(body)
    except ValueError as exc:
        msg = f"invalid JSON body: {exc}"
        raise BindError(msg) from exc
    return bind_mapping(cls, data)
