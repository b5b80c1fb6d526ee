"""Binding request data onto dataclass records.

``bind()`` populates a dataclass from every place a request can carry a
named value, trying them in a fixed order and stopping at the first one
that has the key:

1. Path captures of the matched route
2. Query string
3. JSON body (only when the content type is ``application/json``)
4. URL-encoded body
5. Multipart form fields (file parts are never used)

The content type selects at most one of the three body sources, so a
JSON request never has URL-encoded or multipart fields to fall back on.

Usage::

    @dataclass(frozen=True, slots=True)
    class NoteQuery:
        folder_id: int = param("id", type="ulong", default=0)
        page: int = 1
        author: str = param("author_id", default="")
        cursor: str = ignore(default="")

    @app.get("/api/v1/folders/:id:ulong/notes")
    def list_notes(request: Request, output: Output) -> None:
        query = bind(request, NoteQuery)

Field metadata is read once per class and cached.  The converter for a
field comes from ``param(type=...)`` or from its annotation: ``int`` binds
as a signed 64-bit ``long``, ``str`` as ``string``, ``float`` as
``double`` and ``bool`` as ``bool``.  ``X | None`` binds as ``X`` and also
accepts a JSON ``null``.

A missing key leaves the field at its default.  A value that does not
convert aborts the whole bind with ``ParamsParseError``; no partially
populated record is ever returned.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from collections.abc import Iterator, Mapping
from dataclasses import MISSING, dataclass
from functools import cache
from typing import Any, TypeVar

from junction._internal.multimap import ParamSource
from junction.context import get_path_params
from junction.errors import ConfigurationError, ParamsParseError
from junction.http.forms import FormData
from junction.http.request import APPLICATION_JSON, Request
from junction.routing.params import CONVERTERS, convert_json, convert_text

_PARAM_NAME = "junction.param_name"
_PARAM_TYPE = "junction.param_type"
_IGNORED = "junction.ignored"

T = TypeVar("T")

# Converter used for a plain annotation when param(type=...) is not given
_ANNOTATION_TYPES: dict[type, str] = {
    bool: "bool",
    int: "long",
    float: "double",
    str: "string",
}


def param(
    name: str | None = None,
    *,
    type: str | None = None,  # noqa: A002
    default: Any = MISSING,
    default_factory: Any = MISSING,
) -> Any:
    """Declare how a dataclass field is bound.

    Args:
        name: External key to read instead of the field name.
        type: Converter name (``"ulong"``, ``"int"``, ...) overriding the
            one implied by the annotation.
        default: Value used when no source has the key.
        default_factory: Zero-argument callable producing the default.
    """
    metadata: dict[str, str] = {}
    if name is not None:
        metadata[_PARAM_NAME] = name
    if type is not None:
        metadata[_PARAM_TYPE] = type
    return dataclasses.field(default=default, default_factory=default_factory, metadata=metadata)


def ignore(*, default: Any = MISSING, default_factory: Any = MISSING) -> Any:
    """Declare a dataclass field that ``bind()`` never populates.

    The field must have a default, since binding always constructs the
    record without it.
    """
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata={_IGNORED: True},
    )


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """How one dataclass field is bound."""

    name: str
    param_name: str
    type_name: str | None
    ignored: bool = False
    required: bool = False
    nullable: bool = False


def _unwrap_optional(hint: Any) -> tuple[Any, bool]:
    """Split ``X | None`` / ``Optional[X]`` into ``(X, True)``."""
    if isinstance(hint, types.UnionType) or typing.get_origin(hint) is typing.Union:
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
    return hint, False


@cache
def field_specs(cls: type) -> tuple[FieldSpec, ...]:
    """Return the binding metadata for dataclass *cls*.

    Computed on first use and cached for the life of the process.

    Raises:
        ConfigurationError: If *cls* is not a dataclass, a field has an
            annotation with no converter and no ``param(type=...)``, names
            an unknown converter, or is ignored without a default.
    """
    if not isinstance(cls, type) or not dataclasses.is_dataclass(cls):
        msg = f"bind() needs a dataclass type, got {cls!r}"
        raise ConfigurationError(msg)

    try:
        hints = typing.get_type_hints(cls)
    except NameError as exc:
        msg = f"Cannot resolve field annotations of {cls.__qualname__}: {exc}"
        raise ConfigurationError(msg) from exc

    specs: list[FieldSpec] = []
    for f in dataclasses.fields(cls):
        has_default = f.default is not MISSING or f.default_factory is not MISSING

        if f.metadata.get(_IGNORED) or not f.init:
            if f.init and not has_default:
                msg = f"Ignored field {cls.__qualname__}.{f.name} needs a default."
                raise ConfigurationError(msg)
            specs.append(FieldSpec(f.name, f.name, None, ignored=True))
            continue

        hint, nullable = _unwrap_optional(hints.get(f.name, str))
        type_name = f.metadata.get(_PARAM_TYPE) or _ANNOTATION_TYPES.get(hint)
        if type_name is None:
            msg = (
                f"Field {cls.__qualname__}.{f.name} has annotation {hint!r} with no "
                "converter. Use param(type=...) or one of: bool, int, float, str."
            )
            raise ConfigurationError(msg)
        if type_name not in CONVERTERS:
            msg = f"Field {cls.__qualname__}.{f.name} uses unknown converter {type_name!r}."
            raise ConfigurationError(msg)

        specs.append(
            FieldSpec(
                name=f.name,
                param_name=f.metadata.get(_PARAM_NAME, f.name),
                type_name=type_name,
                required=not has_default,
                nullable=nullable,
            )
        )

    return tuple(specs)


_NOT_FOUND = object()


class _Sources:
    """The request's named values, in binding precedence order."""

    __slots__ = ("_body_json", "_path_params", "_request")

    def __init__(
        self,
        request: Request,
        path_params: Mapping[str, str],
        body_json: Mapping[str, Any] | None,
    ) -> None:
        self._request = request
        self._path_params = path_params
        self._body_json = body_json

    def _multipart(self) -> FormData:
        try:
            return self._request.form
        except ValueError:
            raise ParamsParseError("Invalid form data") from None

    def find(self, key: str) -> tuple[Any, bool]:
        """Return ``(raw value, came_from_json)``, or ``(_NOT_FOUND, False)``."""
        if key in self._path_params:
            return self._path_params[key], False
        if self._request.query.has(key):
            return self._request.query.read(key), False
        if self._body_json is not None and key in self._body_json:
            return self._body_json[key], True
        for source in self._body_fields():
            if source.has(key):
                return source.read(key), False
        return _NOT_FOUND, False

    def _body_fields(self) -> Iterator[ParamSource]:
        # Lazy so a multipart body is only parsed when a key reaches it
        yield self._request.post
        yield self._multipart()


def _parse_json_body(request: Request) -> Mapping[str, Any] | None:
    if request.media_type != APPLICATION_JSON:
        return None
    try:
        parsed = request.json()
    except ValueError:
        raise ParamsParseError("Invalid JSON") from None
    # Arrays and scalars carry no named values
    return parsed if isinstance(parsed, dict) else {}


def bind(request: Request, cls: type[T], path_params: Mapping[str, str] | None = None) -> T:
    """Populate a *cls* instance from *request*.

    Args:
        request: The request to read. Its body is parsed at most once.
        cls: A dataclass type, optionally using ``param()`` / ``ignore()``.
        path_params: Route captures. Defaults to ``request.path_params``,
            then to the captures published for the current dispatch.

    Raises:
        ParamsParseError: ``Invalid JSON`` for a malformed JSON body,
            ``Failed to parse "<name>". Invalid content`` when a value does
            not convert, ``Missing "<name>"`` when a field without a
            default has no value anywhere.
        ConfigurationError: If *cls* cannot be bound at all.
    """
    specs = field_specs(cls)
    if path_params is None:
        path_params = request.path_params or get_path_params()
    sources = _Sources(request, path_params, _parse_json_body(request))

    values: dict[str, Any] = {}
    for spec in specs:
        if spec.ignored:
            continue
        # Only ignored fields leave the converter unset
        type_name = typing.cast(str, spec.type_name)

        raw, from_json = sources.find(spec.param_name)
        if raw is _NOT_FOUND:
            if spec.required:
                raise ParamsParseError(f'Missing "{spec.param_name}"', spec.param_name)
            continue

        if from_json and raw is None and spec.nullable:
            values[spec.name] = None
            continue

        converted = convert_json(raw, type_name) if from_json else convert_text(raw, type_name)
        if not converted.ok:
            raise ParamsParseError.invalid_content(spec.param_name)
        values[spec.name] = converted.value

    return cls(**values)
