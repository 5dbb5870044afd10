from __future__ import annotations

import json
from pathlib import Path

import pytest

from lib_typed_config.adapters.dotenv.default import DotEnvFileLoader
from lib_typed_config.adapters.file_loaders.structured import (
    JSONFileLoader,
    TOMLFileLoader,
    YAMLFileLoader,
    find_settings_file,
    loader_for,
)
from lib_typed_config.domain.errors import NotFound, SourceReadError


def test_toml_loader(tmp_path: Path) -> None:
    path = tmp_path / "settings.toml"
    path.write_text("[db]\nport = 5432\n", encoding="utf-8")
    assert TOMLFileLoader().load(str(path))["db"]["port"] == 5432


def test_toml_loader_missing_file(tmp_path: Path) -> None:
    with pytest.raises(NotFound):
        TOMLFileLoader().load(str(tmp_path / "missing.toml"))


def test_json_loader_invalid(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{invalid}", encoding="utf-8")
    with pytest.raises(SourceReadError):
        JSONFileLoader().load(str(path))


def test_json_loader_valid(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"feature": True}), encoding="utf-8")
    assert JSONFileLoader().load(str(path))["feature"] is True


def test_yaml_loader_handles_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("# empty file\n", encoding="utf-8")
    assert YAMLFileLoader().load(str(path)) == {}


def test_yaml_loader_rejects_non_mapping_documents(tmp_path: Path) -> None:
    path = tmp_path / ".env"
    path.write_text("NAME=demo\n", encoding="utf-8")
    with pytest.raises(SourceReadError):
        YAMLFileLoader().load(str(path))


def test_yaml_loader_rejects_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("server: [unclosed\n", encoding="utf-8")
    with pytest.raises(SourceReadError):
        YAMLFileLoader().load(str(path))


def test_loader_for_normalises_types() -> None:
    assert isinstance(loader_for("YAML"), YAMLFileLoader)
    assert isinstance(loader_for(".toml"), TOMLFileLoader)
    assert isinstance(loader_for("dotenv"), DotEnvFileLoader)
    with pytest.raises(NotFound):
        loader_for("ini")


def test_find_settings_file_prefers_extensions(tmp_path: Path) -> None:
    (tmp_path / "app").write_text("name: bare\n", encoding="utf-8")
    (tmp_path / "app.toml").write_text("name = 'toml'\n", encoding="utf-8")
    path, kind = find_settings_file(str(tmp_path), "app", "yaml")
    assert path == tmp_path / "app.toml"
    assert kind == "toml"


def test_find_settings_file_uses_configured_type_for_bare_name(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("NAME=demo\n", encoding="utf-8")
    path, kind = find_settings_file(str(tmp_path), ".env", "env")
    assert path == tmp_path / ".env"
    assert kind == "env"


def test_find_settings_file_missing(tmp_path: Path) -> None:
    assert find_settings_file(str(tmp_path), ".env", "yaml") is None
