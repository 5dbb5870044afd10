"""Decode orchestration for the layered-settings merge engine.

Purpose
-------
Turn one settings snapshot into a populated, validated, defaulted dataclass.
The stage order decides precedence outcomes and must not change:

1. deep-copy and promote globals into sections;
2. routing pass: zero the target, decode sections matched by type name;
3. generic pass: decode the whole mapping, falling back to the enclosing
   mapping for structures without a section;
4. validate (all violations aggregated);
5. apply defaults (only after validation succeeded).

Because validation precedes defaulting, a ``required`` field with a default that
no source supplies still fails.

System Role
-----------
Pure and I/O free. :meth:`lib_typed_config.core.Config.unmarshal` feeds it the
settings source snapshot.
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Mapping, TypeVar

from ..domain.errors import ConfigError
from ..domain.schema import describe
from ..observability import log_debug, log_error, make_target_event
from .decode import Decoder
from .defaults import apply_defaults
from .promote import promote
from .sections import match_section
from .validate import validate

T = TypeVar("T")

_ROUTING = Decoder(zero_fields=True, section_hook=match_section)
_GENERIC = Decoder(section_hook=match_section, fallback_to_enclosing=True)


def unmarshal(settings: Mapping[str, Any], target: T | type[T]) -> T:
    """Populate *target* from *settings* and return the instance.

    Parameters
    ----------
    settings:
        Nested settings mapping; it is copied, never mutated.
    target:
        Dataclass type (instantiated with zero values) or instance (reset to
        zero values before decoding).

    Raises
    ------
    SchemaError
        *target* is not a mutable dataclass.
    DecodeError
        A value cannot be coerced into its field type.
    ValidationError
        One or more declared rules failed; the target must not be trusted.
    DefaultApplyError
        A default literal is malformed.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> from lib_typed_config.domain.schema import setting
    >>> @dataclass
    ... class Server:
    ...     name: str = setting("name", validate="required")
    ...     port: int = setting("port", default="8080")
    >>> unmarshal({"NAME": "X"}, Server)
    Server(name='X', port=8080)
    """

    describe(target)
    promoted = promote(deepcopy(dict(settings)))
    try:
        instance = _ROUTING.decode(promoted, target)
        _GENERIC.decode(promoted, instance)
        validate(instance)
        apply_defaults(instance)
    except ConfigError as exc:
        log_error("unmarshal_failed", **make_target_event(target, {"error": str(exc), "error_type": type(exc).__name__}))
        raise
    log_debug("unmarshal_complete", **make_target_event(target))
    return instance
