"""Generic settings decoder.

Purpose
-------
Convert a settings mapping into a dataclass instance. Keys are matched
case-insensitively against each field's ``env`` tag (or its name), values are
weakly coerced into the declared field type, and nested dataclass fields are
decoded recursively from the section routed to them.

Contents
    - ``Decoder``: configurable decode pass (zeroing, section hook, fallback).
    - ``coerce``: weak scalar/container coercion backed by ``pydantic.TypeAdapter``.

System Role
-----------
:func:`lib_typed_config.application.unmarshal.unmarshal` runs two decoder passes
over the promoted mapping: a zeroing routing pass and a generic pass that may
fall back to the enclosing mapping for structures without a section.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable, Mapping, Optional, get_args, get_origin

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..domain.errors import DecodeError
from ..domain.schema import FieldSpec, describe, is_optional, reset, zero_instance, zero_value
from ..domain.settings import find_key, is_section

SectionHook = Callable[[Mapping[str, Any], str], Optional[Mapping[str, Any]]]

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


class Decoder:
    """Decode settings mappings into dataclass instances.

    Parameters
    ----------
    zero_fields:
        Reset every field to its zero value before decoding so values from a
        previous call never leak through.
    weakly_typed:
        Allow representation changes (``"8080"`` → ``8080``). When ``False`` the
        value must already have the declared type.
    section_hook:
        Called with ``(settings, section_name)`` for every nested dataclass
        field; a returned mapping is used as that field's source.
    fallback_to_enclosing:
        Decode a nested dataclass from the enclosing mapping when neither the
        hook nor the field key produced a section.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Limits:
    ...     retries: int = 0
    ...     ratio: float = 0.0
    >>> Decoder().decode({"RETRIES": "3", "ratio": "0.5"}, Limits)
    Limits(retries=3, ratio=0.5)
    """

    def __init__(
        self,
        *,
        zero_fields: bool = False,
        weakly_typed: bool = True,
        section_hook: SectionHook | None = None,
        fallback_to_enclosing: bool = False,
    ) -> None:
        self._zero_fields = zero_fields
        self._weakly_typed = weakly_typed
        self._section_hook = section_hook
        self._fallback = fallback_to_enclosing

    def decode(self, settings: Mapping[str, Any], target: Any) -> Any:
        """Populate *target* (a dataclass type or instance) from *settings*.

        Returns the populated instance; a type is instantiated with zero values
        first. Fields without a matching key are left untouched.

        Raises
        ------
        DecodeError
            When a value cannot be coerced into its field type.
        """

        instance = zero_instance(target) if isinstance(target, type) else target
        if self._zero_fields:
            reset(instance)
        self._decode_fields(settings, instance, "", (type(instance),))
        return instance

    def _decode_fields(self, settings: Mapping[str, Any], instance: Any, prefix: str, stack: tuple[type, ...]) -> None:
        for spec in describe(instance):
            dotted = f"{prefix}{spec.name}"
            if spec.nested is not None:
                self._decode_nested(settings, instance, spec, dotted, stack)
                continue
            key = find_key(settings, spec.key)
            if key is not None:
                setattr(instance, spec.name, coerce(settings[key], spec.type, dotted, weakly_typed=self._weakly_typed))

    def _decode_nested(
        self,
        settings: Mapping[str, Any],
        instance: Any,
        spec: FieldSpec,
        dotted: str,
        stack: tuple[type, ...],
    ) -> None:
        nested = spec.nested
        assert nested is not None
        source = self._source_for(settings, spec, dotted, stack)
        if source is None:
            return
        current = getattr(instance, spec.name)
        child = current if isinstance(current, nested) else zero_instance(nested)
        self._decode_fields(source, child, dotted + ".", stack + (nested,))
        setattr(instance, spec.name, child)

    def _source_for(
        self,
        settings: Mapping[str, Any],
        spec: FieldSpec,
        dotted: str,
        stack: tuple[type, ...],
    ) -> Mapping[str, Any] | None:
        """Pick the mapping a nested field decodes from: section, own key, or enclosing."""

        if self._section_hook is not None:
            section = self._section_hook(settings, spec.section_name() or spec.key)
            if section is not None:
                return section
        key = find_key(settings, spec.key)
        if key is not None and settings[key] is not None:
            value = settings[key]
            if not is_section(value):
                raise DecodeError(dotted, value, "expected a section mapping")
            return value
        if self._fallback and not is_optional(spec.type) and spec.nested not in stack:
            return settings
        return None


def coerce(value: Any, tp: Any, field: str = "<value>", *, weakly_typed: bool = True) -> Any:
    """Convert *value* into *tp*, weakly when *weakly_typed* is set.

    Weak rules on top of pydantic's lax mode: numbers and bools become strings,
    an empty string becomes the zero value of a non-string scalar, a string
    becomes a comma-split sequence, and any other scalar a one-item sequence.

    >>> coerce("8080", int), coerce(8080, str), coerce(True, str), coerce("", int)
    (8080, '8080', 'true', 0)
    >>> coerce("a, b", list[str]), coerce("yes", bool)
    (['a', 'b'], True)
    """

    if weakly_typed:
        value = _weaken(value, tp)
    try:
        return _adapter(tp).validate_python(value, strict=not weakly_typed)
    except PydanticValidationError as exc:
        reason = "; ".join(error["msg"] for error in exc.errors())
        raise DecodeError(field, value, reason) from exc


def _weaken(value: Any, tp: Any) -> Any:
    if is_optional(tp):
        if value is None:
            return None
        members = [arg for arg in get_args(tp) if arg is not type(None)]
        if len(members) != 1:
            return value
        tp = members[0]
    origin = get_origin(tp) or tp
    if origin is str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        return value
    if isinstance(value, str) and value == "" and origin in (int, float, bool):
        return zero_value(tp)
    if origin in _SEQUENCE_TYPES:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",")] if value else []
        if not isinstance(value, (list, tuple, set, frozenset, Mapping)):
            return [value]
    return value


@lru_cache(maxsize=256)
def _adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)
