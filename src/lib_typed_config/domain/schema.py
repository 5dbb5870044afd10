"""Field schema descriptors for dataclass targets.

Purpose
-------
Translate a dataclass into the per-field tag information the decoder, default
applier, and validator consume. Tags live in ``dataclasses.field(metadata=...)``
and are most conveniently declared through :func:`setting`.

Contents
--------
* :func:`setting` – ``dataclasses.field`` wrapper declaring key/default/rule tags.
* :class:`FieldSpec` – one resolved field (key, type, tags, declared default).
* :func:`describe` – cached schema descriptor for a dataclass type.
* :func:`settings_paths` – dotted settings paths a dataclass reads.
* :func:`zero_value` / :func:`zero_instance` / :func:`is_zero` – the zero-value
  policy used before decode and by default application.

System Role
-----------
Lives in the domain layer: pure, I/O free, and shared by every application
stage. Descriptors are computed once per type and reused across unmarshal calls.

Examples
--------
>>> from dataclasses import dataclass
>>> @dataclass
... class Server:
...     host: str = setting("host", validate="required")
...     port: int = setting("port", default="8080")
>>> [spec.key for spec in describe(Server)]
['host', 'port']
>>> zero_instance(Server)
Server(host='', port=0)
"""

from __future__ import annotations

import dataclasses
import types
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Union, get_args, get_origin, get_type_hints

from .errors import SchemaError

KEY_TAG = "env"
DEFAULT_TAG = "default"
VALIDATE_TAG = "validate"
SECTION_TAG = "section"

MISSING: Any = dataclasses.MISSING

_SCALAR_ZEROS: dict[Any, Any] = {str: "", int: 0, float: 0.0, bytes: b""}
_CONTAINER_ZEROS: dict[Any, Any] = {list: list, dict: dict, set: set, frozenset: frozenset, tuple: tuple}


def setting(
    key: str | None = None,
    *,
    default: Any = MISSING,
    validate: str | None = None,
    section: str | None = None,
    **field_kwargs: Any,
) -> Any:
    """Declare a dataclass field together with its settings tags.

    Parameters
    ----------
    key:
        Settings key feeding the field; defaults to the field name.
    default:
        Default literal applied when the field is still zero after decoding.
        Strings are coerced to the field type (``"8080"`` for an ``int``).
    validate:
        Comma-separated validation rules (``"required"``, ``"min=1,max=10"``).
    section:
        Section name used instead of the lower-cased type name when the field
        holds a nested dataclass.
    field_kwargs:
        Passed to :func:`dataclasses.field` unchanged (``default_factory``,
        ``repr`` ...).
    """

    metadata = dict(field_kwargs.pop("metadata", None) or {})
    if key is not None:
        metadata[KEY_TAG] = key
    if default is not MISSING:
        metadata[DEFAULT_TAG] = default
    if validate:
        metadata[VALIDATE_TAG] = validate
    if section is not None:
        metadata[SECTION_TAG] = section
    return dataclasses.field(metadata=metadata, **field_kwargs)


@dataclass(frozen=True)
class FieldSpec:
    """Resolved description of a single dataclass field."""

    name: str
    key: str
    type: Any
    default: Any
    rules: tuple[str, ...]
    section: str | None
    field: dataclasses.Field = dataclasses.field(repr=False, compare=False)

    @property
    def nested(self) -> type | None:
        """Dataclass type held by the field (``Optional`` unwrapped), if any."""

        return nested_type(self.type)

    def declared_default(self) -> Any:
        """Return the dataclass-level default (value or factory result) or ``MISSING``."""

        if self.field.default is not dataclasses.MISSING:
            return self.field.default
        if self.field.default_factory is not dataclasses.MISSING:  # type: ignore[misc]
            return self.field.default_factory()  # type: ignore[misc]
        return MISSING

    def section_name(self) -> str | None:
        """Return the section key this field is routed to, if it is structured."""

        if self.section is not None:
            return self.section
        nested = self.nested
        return nested.__name__.lower() if nested is not None else None


def describe(target: Any) -> tuple[FieldSpec, ...]:
    """Return the schema descriptor for a dataclass type or instance.

    Raises
    ------
    SchemaError
        When *target* is not a dataclass, is frozen, or has unresolvable hints.
    """

    cls = target if isinstance(target, type) else type(target)
    if not dataclasses.is_dataclass(cls):
        raise SchemaError(f"{cls.__qualname__} is not a dataclass")
    return _describe(cls)


@lru_cache(maxsize=None)
def _describe(cls: type) -> tuple[FieldSpec, ...]:
    if cls.__dataclass_params__.frozen:  # type: ignore[attr-defined]
        raise SchemaError(f"{cls.__qualname__} is frozen and cannot be populated")
    try:
        hints = get_type_hints(cls)
    except (NameError, TypeError) as exc:
        raise SchemaError(f"cannot resolve type hints of {cls.__qualname__}: {exc}") from exc
    specs = []
    for item in dataclasses.fields(cls):
        rules = tuple(rule.strip() for rule in item.metadata.get(VALIDATE_TAG, "").split(",") if rule.strip())
        specs.append(
            FieldSpec(
                name=item.name,
                key=item.metadata.get(KEY_TAG, item.name),
                type=hints.get(item.name, Any),
                default=item.metadata.get(DEFAULT_TAG, MISSING),
                rules=rules,
                section=item.metadata.get(SECTION_TAG),
                field=item,
            )
        )
    return tuple(specs)


def settings_paths(target: Any) -> frozenset[str]:
    """Return the lower-cased dotted paths at which *target* reads a value.

    Nested dataclass fields contribute their fields below both their section
    name and their own key. Recursive types stop at the first repetition.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Server:
    ...     host: str = setting("HOST")
    ...     port: int = 0
    >>> sorted(settings_paths(Server))
    ['host', 'port']
    """

    cls = target if isinstance(target, type) else type(target)
    describe(cls)
    return _settings_paths(cls)


@lru_cache(maxsize=None)
def _settings_paths(cls: type) -> frozenset[str]:
    return frozenset(_walk_paths(cls, "", (cls,)))


def _walk_paths(cls: type, prefix: str, stack: tuple[type, ...]) -> list[str]:
    paths: list[str] = []
    for spec in _describe(cls):
        nested = spec.nested
        if nested is None:
            paths.append(f"{prefix}{spec.key.lower()}")
            continue
        if nested in stack:
            continue
        for name in {(spec.section_name() or spec.key).lower(), spec.key.lower()}:
            paths.extend(_walk_paths(nested, f"{prefix}{name}.", stack + (nested,)))
    return paths


def nested_type(tp: Any) -> type | None:
    """Return the dataclass inside *tp* (``Server`` or ``Server | None``).

    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Server:
    ...     host: str = ""
    >>> nested_type(Server) is Server, nested_type(Server | None) is Server, nested_type(int)
    (True, True, None)
    """

    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return tp
    if is_optional(tp):
        members = [arg for arg in get_args(tp) if arg is not type(None)]
        if len(members) == 1:
            return nested_type(members[0])
    return None


def is_optional(tp: Any) -> bool:
    """Return ``True`` for unions that accept ``None``."""

    return get_origin(tp) in (Union, types.UnionType) and type(None) in get_args(tp)


def zero_value(tp: Any) -> Any:
    """Return the zero value used to reset a field of type *tp*.

    >>> zero_value(int), zero_value(str), zero_value(list[int]), zero_value(int | None)
    (0, '', [], None)
    """

    if is_optional(tp):
        return None
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return zero_instance(tp)
    origin = get_origin(tp) or tp
    if origin in _CONTAINER_ZEROS:
        return _CONTAINER_ZEROS[origin]()
    if tp is bool:
        return False
    if isinstance(tp, type):
        for scalar, zero in _SCALAR_ZEROS.items():
            if issubclass(tp, scalar):
                return zero
    return None


def zero_instance(cls: type) -> Any:
    """Construct *cls* with every field set to its zero value."""

    specs = describe(cls)
    init_values = {spec.name: zero_value(spec.type) for spec in specs if spec.field.init}
    instance = cls(**init_values)
    for spec in specs:
        if not spec.field.init:
            setattr(instance, spec.name, zero_value(spec.type))
    return instance


def reset(instance: Any) -> None:
    """Set every field of *instance* back to its zero value in place."""

    for spec in describe(instance):
        setattr(instance, spec.name, zero_value(spec.type))


def is_zero(value: Any, tp: Any) -> bool:
    """Return ``True`` when *value* equals the zero value of *tp*.

    Nested dataclasses count as zero when every one of their fields is zero.
    """

    if value is None:
        return True
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return all(is_zero(getattr(value, spec.name), spec.type) for spec in describe(value))
    zero = zero_value(tp)
    if zero is None:
        return False
    return type(value) is type(zero) and value == zero
