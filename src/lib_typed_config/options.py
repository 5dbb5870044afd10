"""Functional options for :class:`lib_typed_config.core.Config`.

Each option is a callable mutating the façade before its settings source is
built. Options apply in caller order, so the last one touching a knob wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterable, Mapping

if TYPE_CHECKING:
    from .application.ports import SettingsSource
    from .core import Config

Option = Callable[["Config"], None]


def apply_options(config: Config, options: Iterable[Option]) -> None:
    """Apply *options* to *config* in order."""

    for option in options:
        option(config)


def with_file_path(file_path: str) -> Option:
    """Set the directory searched for the settings file."""

    def _apply(config: Config) -> None:
        config.file_path = file_path

    return _apply


def with_file_name(file_name: str) -> Option:
    """Set the settings file base name, without extension."""

    def _apply(config: Config) -> None:
        config.file_name = file_name

    return _apply


def with_file_type(file_type: str) -> Option:
    """Set the format used for an extension-less settings file (``yaml``, ``json``, ``toml``, ``env``)."""

    def _apply(config: Config) -> None:
        config.file_type = file_type

    return _apply


def with_env_prefix(prefix: str) -> Option:
    """Capture only environment variables named ``<PREFIX>_*``."""

    def _apply(config: Config) -> None:
        config.env_prefix = prefix

    return _apply


def with_strict(strict: bool = True) -> Option:
    """Fail construction when the settings file exists but cannot be parsed."""

    def _apply(config: Config) -> None:
        config.strict = strict

    return _apply


def with_environ(environ: Mapping[str, str]) -> Option:
    """Read environment variables from *environ* instead of :data:`os.environ`."""

    def _apply(config: Config) -> None:
        config.environ = environ

    return _apply


def with_source(source: SettingsSource) -> Option:
    """Use a custom settings source; file and environment knobs are then ignored."""

    def _apply(config: Config) -> None:
        config.custom_source = source

    return _apply
