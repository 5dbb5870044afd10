"""Environment variable adapter.

Purpose
-------
Translate process environment variables into a nested settings mapping that
overrides file values at the leaf level.

Key behaviours
--------------
* Optional prefix filter (``APP`` captures ``APP_*`` and strips the prefix).
* ``__`` is the nesting delimiter (``SERVER__HOST`` → ``{"server": {"host": ...}}``).
* Names are lower-cased; values stay strings and are coerced later by the
  decoder against the target field type.
* Variables with empty name segments (``__CF_USER_TEXT_ENCODING``) are skipped.
"""

from __future__ import annotations

import os
from typing import Mapping

from ...domain.errors import SourceReadError
from ...observability import log_debug


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix('billing-service')
    'BILLING_SERVICE'
    """

    return slug.replace("-", "_").upper()


class DefaultEnvLoader:
    """Load environment variables that belong to the settings namespace."""

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        """Initialise the loader with a specific ``environ`` mapping for testability."""

        self._environ = os.environ if environ is None else environ

    def load(self, prefix: str | None = None) -> dict[str, object]:
        """Return a nested mapping of the variables matching *prefix*.

        Parameters
        ----------
        prefix:
            Prefix normalised through :func:`default_env_prefix` (``my-app``
            becomes ``MY_APP``); ``_`` is appended if missing. ``None`` or ``""``
            captures every variable.

        Raises
        ------
        SourceReadError
            When a variable would nest below another variable's scalar value.

        Examples
        --------
        >>> env = {'DEMO_SERVER__PORT': '8080', 'DEMO_NAME': 'x', 'OTHER': 'y'}
        >>> DefaultEnvLoader(environ=env).load('DEMO')
        {'server': {'port': '8080'}, 'name': 'x'}
        """

        if prefix:
            prefix = default_env_prefix(prefix)
            if not prefix.endswith("_"):
                prefix = f"{prefix}_"
        collected: dict[str, object] = {}
        for key, value in self._environ.items():
            if prefix and not key.startswith(prefix):
                continue
            stripped = key[len(prefix) :] if prefix else key
            if not stripped or "" in stripped.split("__"):
                continue
            try:
                assign_nested(collected, stripped, value)
            except ValueError as exc:
                raise SourceReadError(f"Environment variable {key}: {exc}") from exc
        log_debug("env_variables_loaded", layer="env", path=None, keys=sorted(collected.keys()))
        return collected


def assign_nested(target: dict[str, object], key: str, value: object) -> None:
    """Assign ``value`` inside ``target`` using ``__`` as a nesting delimiter.

    Examples
    --------
    >>> data: dict[str, object] = {}
    >>> assign_nested(data, 'SERVER__TIMEOUT', '5')
    >>> data
    {'server': {'timeout': '5'}}
    """

    parts = key.lower().split("__")
    cursor = target
    for part in parts[:-1]:
        child = cursor.setdefault(part, {})
        if not isinstance(child, dict):
            raise ValueError(f"cannot nest {key} below scalar value of {part!r}")
        cursor = child
    if isinstance(cursor.get(parts[-1]), dict):
        raise ValueError(f"cannot replace section {parts[-1]!r} with a scalar value")
    cursor[parts[-1]] = value
