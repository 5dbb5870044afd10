"""Structure-aware section matching."""

from __future__ import annotations

from typing import Any, Mapping

from ..domain.settings import find_key, is_section
from ..observability import log_debug


def match_section(settings: Mapping[str, Any], field_type_name: str) -> Mapping[str, Any] | None:
    """Return the section named after *field_type_name*, or ``None``.

    The name is lower-cased and looked up case-insensitively; only mapping
    values qualify. ``None`` tells the decoder to fall back to the enclosing
    mapping, so the structure's fields can still match global keys.

    >>> match_section({"server": {"host": "h1"}}, "Server")
    {'host': 'h1'}
    >>> match_section({"server": "h1"}, "Server") is None
    True
    """

    name = field_type_name.lower()
    key = find_key(settings, name)
    if key is None or not is_section(settings[key]):
        return None
    log_debug("section_matched", section=key)
    return settings[key]
