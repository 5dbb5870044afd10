"""Adapter contract tests for the default ports implementation.

Verify the default adapters continue to satisfy the application-layer ports
defined in ``lib_typed_config.application.ports`` so that ``Config`` can keep
accepting any settings source.
"""

from __future__ import annotations

from pathlib import Path

from lib_typed_config.adapters.dotenv.default import DotEnvFileLoader
from lib_typed_config.adapters.env.default import DefaultEnvLoader
from lib_typed_config.adapters.file_loaders.structured import FILE_LOADERS
from lib_typed_config.adapters.source import LayeredSettingsSource
from lib_typed_config.application import ports


def test_file_loaders_contract() -> None:
    """Every registered loader must fulfil the FileLoader protocol."""

    for loader in FILE_LOADERS.values():
        assert isinstance(loader, ports.FileLoader)
    assert isinstance(DotEnvFileLoader(), ports.FileLoader)


def test_env_loader_contract() -> None:
    loader = DefaultEnvLoader(environ={"DEMO_NAME": "x"})
    assert isinstance(loader, ports.EnvLoader)
    assert loader.load("DEMO") == {"name": "x"}


def test_settings_source_contract(tmp_path: Path) -> None:
    """The layered source hands out a new mapping on every call."""

    source = LayeredSettingsSource(str(tmp_path), ".env", "yaml", environ={"NAME": "x"})
    assert isinstance(source, ports.SettingsSource)
    assert source.all_settings() is not source.all_settings()
