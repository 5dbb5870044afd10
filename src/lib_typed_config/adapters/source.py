"""Layered settings source: one settings file overlaid by the environment.

Purpose
-------
Implement the :class:`~lib_typed_config.application.ports.SettingsSource` port.
The file is located and parsed once, at construction; environment variables are
re-read on every :meth:`LayeredSettingsSource.all_settings` call so each
``unmarshal`` sees the current process environment. Without a prefix only
variables overriding a file key, or named by the caller's known paths, are
kept, so unrelated process variables (``USER``, ``HOME``) never become
settings.

System Role
-----------
Built by :class:`lib_typed_config.core.Config` from its file path/name/type
knobs. A missing file is never fatal; a malformed file is logged and ignored
unless ``strict`` is set.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping

from ..application.merge import SourceInfo, known_only, merge_layers
from ..domain.errors import NotFound, SourceReadError
from ..domain.settings import lower_keys
from ..observability import log_debug, log_error, make_event
from .env.default import DefaultEnvLoader
from .file_loaders.structured import find_settings_file, loader_for


class LayeredSettingsSource:
    """Union of one settings file and the environment, environment winning.

    Parameters
    ----------
    file_path / file_name / file_type:
        Directory searched, base name without extension, and the type used for
        an extension-less file.
    env_prefix:
        Only variables named ``<PREFIX>_*`` are captured when set.
    strict:
        Raise :class:`SourceReadError` for a malformed file instead of
        continuing with environment-only settings.
    environ:
        Environment mapping, :data:`os.environ` by default.

    Without *env_prefix* the environment only overrides keys the file defines
    or the ``known`` paths passed to :meth:`all_settings` name. With a prefix
    every prefixed variable is kept.

    Examples
    --------
    >>> source = LayeredSettingsSource("/nonexistent", ".env", "yaml", environ={"NAME": "X", "SERVER__HOST": "h1", "USER": "root"})
    >>> source.config_file_used is None
    True
    >>> source.all_settings(known={"name", "server.host"})
    {'name': 'X', 'server': {'host': 'h1'}}
    >>> source.origin("server.host")["layer"]
    'env'
    """

    def __init__(
        self,
        file_path: str,
        file_name: str,
        file_type: str,
        *,
        env_prefix: str | None = None,
        strict: bool = False,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._env_loader = DefaultEnvLoader(environ=environ)
        self._env_prefix = env_prefix
        self._provenance: dict[str, SourceInfo] = {}
        self.config_file_used: str | None = None
        self._file_data = self._read_file(file_path, file_name, file_type, strict)

    def all_settings(self, known: Iterable[str] | None = None) -> dict[str, Any]:
        """Return a fresh snapshot of file values overlaid by environment values.

        *known* lists lower-cased dotted paths the caller reads; environment
        variables outside the file and outside *known* are dropped unless a
        prefix was configured.
        """

        layers: list[tuple[str, Mapping[str, object], str | None]] = []
        if self._file_data:
            layers.append(("file", self._file_data, self.config_file_used))
        env_data = self._env_loader.load(self._env_prefix)
        if not self._env_prefix:
            captured = len(env_data)
            env_data = known_only(env_data, self._file_data, known or ())
            log_debug("env_variables_filtered", **make_event("env", None, {"captured": captured, "kept": len(env_data)}))
        if env_data:
            layers.append(("env", env_data, None))
            log_debug("layer_loaded", **make_event("env", None, {"keys": len(env_data)}))
        data, self._provenance = merge_layers(layers)
        return data

    def origin(self, key: str) -> SourceInfo | None:
        """Return provenance for dotted *key* from the latest snapshot."""

        return self._provenance.get(key.lower())

    def _read_file(self, file_path: str, file_name: str, file_type: str, strict: bool) -> dict[str, Any]:
        found = find_settings_file(file_path, file_name, file_type)
        if found is None:
            log_debug("settings_file_missing", **make_event("file", str(Path(file_path) / file_name)))
            return {}
        path, kind = found
        try:
            data = loader_for(kind).load(str(path))
        except NotFound:
            log_debug("settings_file_missing", **make_event("file", str(path)))
            return {}
        except SourceReadError as exc:
            if strict:
                raise
            log_error("settings_file_ignored", **make_event("file", str(path), {"error": str(exc)}))
            return {}
        self.config_file_used = str(path)
        log_debug("settings_file_loaded", **make_event("file", str(path), {"format": kind, "keys": len(data)}))
        return lower_keys(data)
