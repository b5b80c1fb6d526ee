"""Typed value conversion shared by route captures and record binding.

Route patterns name a converter in their type suffix (``:id:ulong``) and
bound record fields resolve to one from their annotation.  Both sides go
through the same registry, and every converter reports success or
failure through a ``Converted`` result instead of raising, so a failed
conversion is an ordinary value the caller branches on.

Text input comes from path segments, the query string and form bodies.
JSON input is whatever ``json.loads`` produced for a body key, and is
held to the JSON type (a JSON string is not an integer).
"""

import math
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Converted:
    """Outcome of a conversion attempt."""

    ok: bool
    value: Any = None


FAILED = Converted(ok=False)


@dataclass(frozen=True, slots=True)
class Converter:
    """A named conversion rule.

    ``from_text`` handles raw strings; ``from_json`` handles decoded JSON
    values.  Neither may raise.
    """

    name: str
    from_text: Callable[[str], Converted]
    from_json: Callable[[Any], Converted]


_SIGNED = re.compile(r"[+-]?[0-9]+")
_UNSIGNED = re.compile(r"\+?[0-9]+")
_MAX_DIGITS = len(str(2**64 - 1))
_DECIMAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def _integer(name: str, low: int, high: int) -> Converter:
    syntax = _SIGNED if low < 0 else _UNSIGNED

    def in_range(number: int) -> Converted:
        if low <= number <= high:
            return Converted(ok=True, value=number)
        return FAILED

    def from_text(value: str) -> Converted:
        # int() alone would also take whitespace, underscores and non-ASCII digits
        if not syntax.fullmatch(value):
            return FAILED
        # int() refuses strings past 4300 digits, leading zeros included
        digits = value.lstrip("+-").lstrip("0")
        if len(digits) > _MAX_DIGITS:
            return FAILED
        number = int(digits or "0")
        return in_range(-number if value.startswith("-") else number)

    def from_json(value: Any) -> Converted:
        if isinstance(value, bool):
            return FAILED
        if isinstance(value, int):
            return in_range(value)
        if isinstance(value, float) and value.is_integer():
            return in_range(int(value))
        return FAILED

    return Converter(name, from_text, from_json)


def _text_from_text(value: str) -> Converted:
    return Converted(ok=True, value=value)


def _text_from_json(value: Any) -> Converted:
    if isinstance(value, str):
        return Converted(ok=True, value=value)
    return FAILED


def _float_from_text(value: str) -> Converted:
    if not _DECIMAL.fullmatch(value):
        return FAILED
    number = float(value)
    if math.isinf(number):
        return FAILED
    return Converted(ok=True, value=number)


def _float_from_json(value: Any) -> Converted:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return FAILED
    # json.loads accepts the non-standard NaN and Infinity literals
    if isinstance(value, float) and not math.isfinite(value):
        return FAILED
    try:
        number = float(value)
    except OverflowError:
        return FAILED
    return Converted(ok=True, value=number)


def _bool_from_text(value: str) -> Converted:
    lowered = value.lower()
    if lowered == "true":
        return Converted(ok=True, value=True)
    if lowered == "false":
        return Converted(ok=True, value=False)
    return FAILED


def _bool_from_json(value: Any) -> Converted:
    if isinstance(value, bool):
        return Converted(ok=True, value=value)
    return FAILED


_text = Converter("string", _text_from_text, _text_from_json)
_float = Converter("double", _float_from_text, _float_from_json)

CONVERTERS: dict[str, Converter] = {
    "string": _text,
    "str": _text,
    "int": _integer("int", -(2**31), 2**31 - 1),
    "uint": _integer("uint", 0, 2**32 - 1),
    "long": _integer("long", -(2**63), 2**63 - 1),
    "ulong": _integer("ulong", 0, 2**64 - 1),
    "double": _float,
    "float": _float,
    "bool": Converter("bool", _bool_from_text, _bool_from_json),
}


def register_converter(converter: Converter, *aliases: str) -> None:
    """Add or replace a converter under its name and any *aliases*.

    Call during startup, before patterns using the name are registered
    or record types using it are first bound.
    """
    for name in (converter.name, *aliases):
        CONVERTERS[name] = converter


def get_converter(type_name: str) -> Converter:
    """Return the converter registered as *type_name*.

    Raises ``KeyError`` if no such converter exists.
    """
    return CONVERTERS[type_name]


def convert_text(value: str, type_name: str) -> Converted:
    """Convert a raw string with the converter named *type_name*."""
    return CONVERTERS[type_name].from_text(value)


def convert_json(value: Any, type_name: str) -> Converted:
    """Convert a decoded JSON value with the converter named *type_name*."""
    return CONVERTERS[type_name].from_json(value)


def is_valid(value: str, type_name: str) -> bool:
    """Whether *value* parses as *type_name*. Used for typed route captures."""
    return convert_text(value, type_name).ok
