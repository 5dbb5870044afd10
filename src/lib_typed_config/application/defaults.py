"""Default application for zero-valued fields.

Runs after validation: every field that is still at its zero value receives
its ``default`` tag (coerced to the field type) or, without a tag, the default
declared on the dataclass itself. Nested dataclasses are filled recursively.
"""

from __future__ import annotations

from typing import Any

from ..domain.errors import DecodeError, DefaultApplyError
from ..domain.schema import MISSING, describe, is_zero
from .decode import coerce


def apply_defaults(target: Any, prefix: str = "") -> Any:
    """Fill zero-valued fields of *target* in place and return it.

    Raises
    ------
    DefaultApplyError
        When a default literal cannot be coerced into its field type.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> from lib_typed_config.domain.schema import setting
    >>> @dataclass
    ... class Server:
    ...     host: str = setting(default="localhost")
    ...     port: int = setting(default="8080")
    >>> apply_defaults(Server(host="h1", port=0))
    Server(host='h1', port=8080)
    """

    for spec in describe(target):
        value = getattr(target, spec.name)
        dotted = f"{prefix}{spec.name}"
        if spec.nested is not None and value is not None:
            apply_defaults(value, dotted + ".")
            continue
        if not is_zero(value, spec.type):
            continue
        default = spec.default if spec.default is not MISSING else spec.declared_default()
        if default is MISSING:
            continue
        try:
            setattr(target, spec.name, coerce(default, spec.type, dotted))
        except DecodeError as exc:
            raise DefaultApplyError(dotted, default, str(exc)) from exc
    return target
