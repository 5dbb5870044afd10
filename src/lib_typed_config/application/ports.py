"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts adapters satisfy so the façade can orchestrate
behaviour without depending on concrete implementations.

Contents
--------
* :class:`FileLoader` – parses one settings file.
* :class:`EnvLoader` – materialises environment variables.
* :class:`SettingsSource` – the merge engine's only collaborator: returns the
  union of file and environment settings, environment winning.

System Role
-----------
``Config`` accepts any :class:`SettingsSource` through ``with_source`` which keeps
the merge engine independent of file formats and environment discovery.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Protocol, runtime_checkable


@runtime_checkable
class FileLoader(Protocol):
    """Parse a settings file into a mapping."""

    def load(self, path: str) -> Mapping[str, object]:
        """Read *path*; raise ``NotFound`` when absent, ``SourceReadError`` when malformed."""


@runtime_checkable
class EnvLoader(Protocol):
    """Translate environment variables into a nested settings mapping."""

    def load(self, prefix: str | None = None) -> Mapping[str, object]:
        """Return variables matching *prefix* (``__`` for nesting)."""


@runtime_checkable
class SettingsSource(Protocol):
    """Expose every known settings key as one nested mapping.

    Why
    ----
    The merge engine must not care where values come from; it only needs a
    fresh snapshot per ``unmarshal`` call.
    """

    def all_settings(self, known: Iterable[str] | None = None) -> dict[str, Any]:
        """Return a new nested mapping; callers may mutate it freely.

        *known* holds the lower-cased dotted paths the caller will read. A
        source may use it to leave out unrelated keys.
        """
