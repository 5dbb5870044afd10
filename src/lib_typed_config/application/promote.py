"""Global settings promotion.

Purpose
-------
Make top-level scalar settings visible to every section. A key defined inside
a section always wins over the global key of the same name.

Contents
    - ``promote``: public entry point mutating and returning the mapping.
    - ``global_settings``: the derived global key set for one pass.

System Role
-----------
First stage of :func:`lib_typed_config.application.unmarshal.unmarshal`. The
orchestrator hands it a private deep copy, so the settings source is never
mutated.
"""

from __future__ import annotations

from typing import Any

from ..domain.settings import SettingsMapping, find_key, is_section
from ..observability import log_debug


def promote(settings: SettingsMapping) -> SettingsMapping:
    """Copy every top-level scalar into each section that does not define it.

    Why
    ----
    Sections should inherit shared values (``name``, ``env``) without repeating
    them, while still being able to override them locally.

    What
    ----
    Partitions the top-level entries into globals and sections in one pass, then
    inserts each global into each section unless the section already holds the
    key (compared case-insensitively). Only one level is promoted; nested
    sub-sections receive globals through their enclosing section when it is
    routed during decode.

    Returns
    -------
    SettingsMapping
        The same mapping, mutated in place.

    Examples
    --------
    >>> settings = {"name": "X", "server": {"host": "h1"}, "db": {"name": "local"}}
    >>> promoted = promote(settings)
    >>> promoted["server"], promoted["db"]
    ({'host': 'h1', 'name': 'X'}, {'name': 'local'})
    >>> promote(promoted) == promoted
    True
    """

    globals_ = global_settings(settings)
    sections = [value for value in settings.values() if is_section(value)]
    injected = 0
    for section in sections:
        for key, value in globals_.items():
            if find_key(section, key) is None:
                section[key] = value
                injected += 1
    log_debug("settings_promoted", globals=sorted(globals_), sections=len(sections), injected=injected)
    return settings


def global_settings(settings: SettingsMapping) -> dict[str, Any]:
    """Return the top-level entries whose values are not sections.

    >>> global_settings({"name": "X", "debug": None, "server": {}})
    {'name': 'X', 'debug': None}
    """

    return {key: value for key, value in settings.items() if not is_section(value)}
