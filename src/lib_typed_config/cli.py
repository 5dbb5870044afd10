"""CLI adapter for ``lib_typed_config`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators inspect what the settings source sees, and dry-run an unmarshal
into an application's dataclass, without writing Python.

Contents
--------
* :func:`cli` – root command wiring traceback handling into ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_settings` – prints the merged (optionally promoted) settings.
* :func:`cli_check` – unmarshals ``module:Dataclass`` and prints the result.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
Outermost layer: builds a :class:`lib_typed_config.core.Config` from options and
never touches adapters directly.
"""

from __future__ import annotations

import dataclasses
import json
import sys
from importlib import import_module, metadata
from typing import Any, Callable, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .application.promote import promote
from .core import DEFAULT_FILE_NAME, DEFAULT_FILE_PATH, DEFAULT_FILE_TYPE, Config
from .options import with_env_prefix, with_file_name, with_file_path, with_file_type, with_strict

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000
_DIST_NAME: Final[str] = "lib_typed_config"


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when metadata is missing."""

    try:
        return metadata.version(_DIST_NAME)
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _source_options(command: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the settings source knobs shared by ``settings`` and ``check``."""

    decorators = [
        click.option("--path", "file_path", default=DEFAULT_FILE_PATH, show_default=True, help="Directory searched for the settings file"),
        click.option("--name", "file_name", default=DEFAULT_FILE_NAME, show_default=True, help="Settings file name without extension"),
        click.option("--type", "file_type", default=DEFAULT_FILE_TYPE, show_default=True, help="Format of an extension-less settings file"),
        click.option("--env-prefix", default=None, help="Read every PREFIX_* variable; without a prefix only variables matching known settings keys are used"),
        click.option("--strict/--lenient", default=False, show_default=True, help="Fail when the settings file cannot be parsed"),
        click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size"),
    ]
    for decorator in reversed(decorators):
        command = decorator(command)
    return command


def _build_config(file_path: str, file_name: str, file_type: str, env_prefix: Optional[str], strict: bool) -> Config:
    options = [with_file_path(file_path), with_file_name(file_name), with_file_type(file_type), with_strict(strict)]
    if env_prefix:
        options.append(with_env_prefix(env_prefix))
    return Config(*options)


@click.group(
    help="Typed settings loader: file + environment into dataclasses",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name=_DIST_NAME,
    message="lib_typed_config version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command storing the traceback preference for ``lib_cli_exit_tools``."""

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata(_DIST_NAME)
    except metadata.PackageNotFoundError:
        click.echo(f"{_DIST_NAME} (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', _DIST_NAME)}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("settings", context_settings=CLICK_CONTEXT_SETTINGS)
@_source_options
@click.option("--promote/--no-promote", "promote_globals", default=False, help="Copy top-level values into every section")
@click.option("--provenance/--no-provenance", default=False, help="Include the layer that supplied each key")
def cli_settings(
    file_path: str,
    file_name: str,
    file_type: str,
    env_prefix: Optional[str],
    strict: bool,
    indent: Optional[int],
    promote_globals: bool,
    provenance: bool,
) -> None:
    """Print the merged settings (file overlaid by environment) as JSON."""

    config = _build_config(file_path, file_name, file_type, env_prefix, strict)
    data = config.all_settings()
    if promote_globals:
        data = promote(data)
    if provenance:
        meta = {key: config.origin(key) for key in _dotted_keys(data)}
        payload: Any = {"settings": data, "provenance": meta, "file": config.config_file_used}
    else:
        payload = data
    click.echo(json.dumps(payload, indent=indent, default=str))


@cli.command("check", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("target")
@_source_options
def cli_check(
    target: str,
    file_path: str,
    file_name: str,
    file_type: str,
    env_prefix: Optional[str],
    strict: bool,
    indent: Optional[int],
) -> None:
    """Unmarshal TARGET (``package.module:Dataclass``) and print it as JSON.

    Decode, validation, and default errors propagate and produce a non-zero
    exit code.
    """

    config = _build_config(file_path, file_name, file_type, env_prefix, strict)
    result = config.unmarshal(_import_target(target))
    click.echo(json.dumps(dataclasses.asdict(result), indent=indent, default=str))


def _import_target(spec: str) -> type:
    """Resolve ``module:Name`` into the referenced object."""

    module_name, _, attribute = spec.partition(":")
    if not module_name or not attribute:
        raise click.BadParameter("Target must look like 'package.module:Dataclass'", param_hint="TARGET")
    try:
        module = import_module(module_name)
    except ImportError as exc:
        raise click.BadParameter(f"Cannot import {module_name}: {exc}", param_hint="TARGET") from exc
    try:
        return getattr(module, attribute)
    except AttributeError as exc:
        raise click.BadParameter(f"{module_name} has no attribute {attribute}", param_hint="TARGET") from exc


def _dotted_keys(data: Any, prefix: str = "") -> list[str]:
    if not isinstance(data, dict):
        return [prefix.rstrip(".")]
    keys: list[str] = []
    for key, value in data.items():
        keys.extend(_dotted_keys(value, f"{prefix}{key}."))
    return keys


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name=_DIST_NAME,
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
