"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by adapters, the merge engine, and
consuming applications. The hierarchy lives in the domain layer so outer layers
may depend on it without the reverse being true.

Contents
--------
* :class:`ConfigError` – umbrella base class for all configuration issues.
* :class:`NotFound` – an optional resource (settings file, parser) is missing.
* :class:`SourceReadError` – the settings file exists but cannot be parsed.
* :class:`SchemaError` – the unmarshal target is not a dataclass.
* :class:`DecodeError` – a settings value cannot be coerced into a field type.
* :class:`Violation` / :class:`ValidationError` – aggregated rule failures.
* :class:`DefaultApplyError` – a declared default literal is malformed.

System Role
-----------
:meth:`lib_typed_config.core.Config.unmarshal` surfaces every failure through
this family so callers can handle the library with ``except ConfigError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_typed_config``."""


class NotFound(ConfigError):
    """Represents missing-but-optional resources (files, optional parsers).

    The settings source treats this as a non-fatal condition and continues with
    environment-only settings.
    """


class SourceReadError(ConfigError):
    """Raised when a settings file cannot be parsed into a mapping.

    Typical Sources
    ---------------
    Structured file loaders (:mod:`tomllib`, :mod:`json`, :mod:`yaml`) and the
    dotenv parser. Ignored at initialisation unless strict mode is enabled.
    """


class SchemaError(ConfigError):
    """Raised when a target cannot be described as a field schema."""


class DecodeError(ConfigError):
    """Raised when a value cannot be coerced into its target field type.

    Attributes
    ----------
    field:
        Dotted field path (``"server.port"``) that failed.
    value:
        The raw settings value.
    """

    def __init__(self, field: str, value: object, reason: str) -> None:
        super().__init__(f"cannot decode {value!r} into field '{field}': {reason}")
        self.field = field
        self.value = value


@dataclass(frozen=True)
class Violation:
    """One failed validation rule for one field."""

    field: str
    rule: str

    def message(self) -> str:
        return f"validation error: field '{self.field}' is {self.rule}"


class ValidationError(ConfigError):
    """Signifies that a decoded structure failed one or more declared rules.

    Every violation is collected before raising, so the message lists all
    offending fields rather than the first one.

    Examples
    --------
    >>> str(ValidationError([Violation("Host", "required"), Violation("Port", "min")]))
    "errors: validation error: field 'Host' is required, validation error: field 'Port' is min"
    """

    def __init__(self, violations: Sequence[Violation]) -> None:
        self.violations = tuple(violations)
        joined = ", ".join(violation.message() for violation in self.violations)
        super().__init__(f"errors: {joined}")


class DefaultApplyError(ConfigError):
    """Raised when a declared default cannot be coerced into its field type."""

    def __init__(self, field: str, default: object, reason: str) -> None:
        super().__init__(f"invalid default {default!r} for field '{field}': {reason}")
        self.field = field
        self.default = default
