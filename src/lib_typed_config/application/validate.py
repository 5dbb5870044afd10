"""Tag-driven validation of decoded dataclasses.

Purpose
-------
Check the rules declared in each field's ``validate`` tag after decoding and
before defaults are applied, collecting every violation instead of stopping at
the first one.

Contents
    - ``validate``: walk a dataclass (recursively) and raise ``ValidationError``.
    - ``collect_violations``: the same walk returning the violation list.

Supported rules: ``required``, ``omitempty``, ``min=N``, ``max=N``,
``oneof=a b c``. ``required`` and ``omitempty`` are zero-value checks. The
other rules become pydantic constraints: ``min``/``max`` bound numbers by value
(``ge``/``le``) and strings or containers by length
(``min_length``/``max_length``); ``oneof`` validates against a ``Literal``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..domain.errors import SchemaError, ValidationError, Violation
from ..domain.schema import describe, is_zero

BOUND_RULES = ("min", "max")

_NUMBER_CONSTRAINTS = {"min": "ge", "max": "le"}
_LENGTH_CONSTRAINTS = {"min": "min_length", "max": "max_length"}
_SIZED_TYPES = (str, bytes, list, tuple, set, frozenset, dict)

_ERROR_RULES = {
    "greater_than_equal": "min",
    "too_short": "min",
    "less_than_equal": "max",
    "too_long": "max",
    "literal_error": "oneof",
}
"""pydantic error ``type`` → rule name reported in :class:`Violation`."""


def validate(target: Any) -> None:
    """Raise :class:`ValidationError` listing every failed rule of *target*.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> from lib_typed_config.domain.schema import setting
    >>> @dataclass
    ... class Server:
    ...     host: str = setting(validate="required")
    ...     port: int = setting(validate="min=1")
    >>> validate(Server(host="h1", port=80))
    >>> validate(Server(host="", port=0))
    Traceback (most recent call last):
    ...
    lib_typed_config.domain.errors.ValidationError: errors: validation error: field 'host' is required, validation error: field 'port' is min
    """

    violations = collect_violations(target)
    if violations:
        raise ValidationError(violations)


def collect_violations(target: Any, prefix: str = "") -> list[Violation]:
    """Return all rule violations of *target*; nested dataclasses use dotted names."""

    violations: list[Violation] = []
    for spec in describe(target):
        value = getattr(target, spec.name)
        dotted = f"{prefix}{spec.name}"
        violations.extend(_check_field(value, spec.type, spec.rules, dotted))
        if spec.nested is not None and value is not None:
            violations.extend(collect_violations(value, dotted + "."))
    return violations


def _check_field(value: Any, tp: Any, rules: tuple[str, ...], dotted: str) -> list[Violation]:
    if "omitempty" in rules and is_zero(value, tp):
        return []
    failed: list[Violation] = []
    bounds: dict[str, str] = {}
    for rule in rules:
        name, _, param = rule.partition("=")
        if name == "omitempty":
            continue
        if name == "required":
            if is_zero(value, tp):
                failed.append(Violation(dotted, name))
        elif name in BOUND_RULES:
            bounds[name] = param
        elif name == "oneof":
            failed.extend(_check(_choices(tuple(param.split())), _as_text(value), dotted))
        else:
            raise SchemaError(f"unknown validation rule {name!r} on field '{dotted}'")
    if bounds:
        failed.extend(_check_bounds(value, bounds, dotted))
    return failed


def _check_bounds(value: Any, bounds: dict[str, str], dotted: str) -> list[Violation]:
    if value is None:
        return [Violation(dotted, "min")] if "min" in bounds else []
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        limits = {name: _number(param) for name, param in bounds.items()}
        kind: type = float if isinstance(value, float) or any(isinstance(v, float) for v in limits.values()) else int
        constraints = tuple(sorted((_NUMBER_CONSTRAINTS[name], limit) for name, limit in limits.items()))
    else:
        kind = next((sized for sized in _SIZED_TYPES if isinstance(value, sized)), type(None))
        if kind is type(None):
            raise SchemaError(f"cannot measure {type(value).__name__} for min/max on field '{dotted}'")
        constraints = tuple(sorted((_LENGTH_CONSTRAINTS[name], _length(param)) for name, param in bounds.items()))
    return _check(_bounded(kind, constraints), value, dotted)


def _check(adapter: TypeAdapter, value: Any, dotted: str) -> list[Violation]:
    try:
        adapter.validate_python(value)
    except PydanticValidationError as exc:
        return [Violation(dotted, _ERROR_RULES.get(error["type"], error["type"])) for error in exc.errors()]
    return []


def _as_text(value: Any) -> str:
    return str(value).lower() if isinstance(value, bool) else str(value)


def _number(param: str) -> int | float:
    try:
        return int(param)
    except ValueError:
        pass
    try:
        return float(param)
    except ValueError as exc:
        raise SchemaError(f"invalid min/max parameter {param!r}") from exc


def _length(param: str) -> int:
    try:
        return int(param)
    except ValueError as exc:
        raise SchemaError(f"invalid length bound {param!r}") from exc


@lru_cache(maxsize=256)
def _bounded(kind: type, constraints: tuple[tuple[str, int | float], ...]) -> TypeAdapter:
    return TypeAdapter(Annotated[kind, Field(**dict(constraints))])


@lru_cache(maxsize=256)
def _choices(options: tuple[str, ...]) -> TypeAdapter:
    if not options:
        raise SchemaError("oneof needs at least one option")
    return TypeAdapter(Literal[options])
