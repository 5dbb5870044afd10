"""Settings mapping vocabulary shared by the merge engine.

A *settings mapping* is a nested ``dict`` whose values are scalars, lists, or
further mappings (named *sections*). Keys are stored as loaded but always
matched case-insensitively against field keys and section names.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, MutableMapping

SettingsMapping = MutableMapping[str, Any]


def is_section(value: object) -> bool:
    """Return ``True`` when *value* is a nested settings mapping.

    >>> is_section({"host": "h1"}), is_section("h1"), is_section(None)
    (True, False, False)
    """

    return isinstance(value, Mapping)


def find_key(settings: Mapping[str, Any], key: str) -> str | None:
    """Return the stored key matching *key* case-insensitively, or ``None``.

    An exact match wins over a case-folded one so mappings holding both
    ``Host`` and ``host`` stay deterministic.

    >>> find_key({"Host": 1}, "host")
    'Host'
    >>> find_key({"host": 1}, "port") is None
    True
    """

    if key in settings:
        return key
    folded = key.casefold()
    for existing in settings:
        if isinstance(existing, str) and existing.casefold() == folded:
            return existing
    return None


def lower_keys(settings: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of *settings* with every key lower-cased, recursively.

    >>> lower_keys({"Server": {"HOST": "h1"}, "Name": "X"})
    {'server': {'host': 'h1'}, 'name': 'X'}
    """

    result: dict[str, Any] = {}
    for key, value in settings.items():
        result[str(key).lower()] = lower_keys(value) if is_section(value) else value
    return result
