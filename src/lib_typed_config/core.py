"""Composition root for ``lib_typed_config``.

Purpose
-------
Provide the single entry point that wires the settings source (file plus
environment) to the merge engine and exposes the typed ``unmarshal`` API.

Contents
--------
* :data:`DEFAULT_FILE_PATH` / :data:`DEFAULT_FILE_NAME` / :data:`DEFAULT_FILE_TYPE`.
* :class:`Config` – façade holding the source knobs and the source itself.
* :func:`new` – functional-options constructor.

System Role
-----------
Adapters are only instantiated here; the application layer never reaches for
the filesystem or the environment. Adjust source wiring in this module.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, TypeVar

from .adapters.source import LayeredSettingsSource
from .application.merge import SourceInfo
from .application.ports import SettingsSource
from .application.unmarshal import unmarshal
from .domain.schema import settings_paths
from .observability import bind_trace_id, log_info, make_target_event
from .options import Option, apply_options

DEFAULT_FILE_PATH = "./"
"""Directory searched for the settings file."""

DEFAULT_FILE_NAME = ".env"
"""Settings file base name, without extension."""

DEFAULT_FILE_TYPE = "yaml"
"""Format used for an extension-less settings file."""

T = TypeVar("T")


class Config:
    """Settings façade: read once, unmarshal into dataclasses many times.

    Why
    ----
    Applications want one object that knows where settings live and can fill
    any number of typed structures with consistent precedence rules.

    What
    ----
    Applies the options, builds a :class:`LayeredSettingsSource` (unless a
    custom source was supplied), and delegates every :meth:`unmarshal` call to
    the merge engine with a fresh settings snapshot.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> from lib_typed_config import setting, with_environ, with_file_path
    >>> @dataclass
    ... class Server:
    ...     host: str = setting("host", validate="required")
    ...     port: int = setting("port", default="8080")
    >>> config = Config(with_file_path("/nonexistent"), with_environ({"HOST": "h1"}))
    >>> config.unmarshal(Server)
    Server(host='h1', port=8080)
    """

    def __init__(self, *options: Option) -> None:
        self.file_path = DEFAULT_FILE_PATH
        self.file_name = DEFAULT_FILE_NAME
        self.file_type = DEFAULT_FILE_TYPE
        self.env_prefix: str | None = None
        self.strict = False
        self.environ: Mapping[str, str] | None = None
        self.custom_source: SettingsSource | None = None

        apply_options(self, options)

        self.source: SettingsSource
        if self.custom_source is not None:
            self.source = self.custom_source
        else:
            self.source = LayeredSettingsSource(
                self.file_path,
                self.file_name,
                self.file_type,
                env_prefix=self.env_prefix,
                strict=self.strict,
                environ=self.environ,
            )

    def unmarshal(self, target: T | type[T], *, trace_id: str | None = None) -> T:
        """Populate *target* from the current settings and return it.

        Parameters
        ----------
        target:
            Dataclass type or instance. Instances are reset to zero values
            before decoding and populated in place.
        trace_id:
            Optional identifier bound to every log entry of this call.

        Raises
        ------
        ConfigError
            ``DecodeError``, ``ValidationError``, ``DefaultApplyError`` or
            ``SchemaError`` from the merge engine.
        """

        bind_trace_id(trace_id)
        settings = self.all_settings(known=settings_paths(target))
        result = unmarshal(settings, target)
        log_info(
            "settings_unmarshalled",
            **make_target_event(target, {"keys": len(settings), "file": self.config_file_used}),
        )
        return result

    def all_settings(self, known: Iterable[str] | None = None) -> dict[str, Any]:
        """Return a fresh, un-promoted snapshot of the settings.

        Without an environment prefix, environment-only keys are included only
        when *known* (lower-cased dotted paths) names them.
        """

        return self.source.all_settings(known=known)

    def origin(self, key: str) -> SourceInfo | None:
        """Return the layer that supplied dotted *key* in the latest snapshot."""

        origin = getattr(self.source, "origin", None)
        return origin(key) if origin is not None else None

    @property
    def config_file_used(self) -> str | None:
        """Path of the parsed settings file, ``None`` when none was read."""

        return getattr(self.source, "config_file_used", None)


def new(*options: Option) -> Config:
    """Return a :class:`Config` built from *options*."""

    return Config(*options)
