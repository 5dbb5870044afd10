"""Structured settings file loaders and discovery.

Purpose
-------
Convert an on-disk settings file into a Python mapping the merge engine
understands. Loaders are small wrappers around ``tomllib``/``json``/
``yaml.safe_load`` (and the dotenv parser) so error handling and observability
live in one place.

Contents
--------
* :class:`BaseFileLoader` – shared helpers for reading files and validating
  mapping outputs.
* :class:`TOMLFileLoader` / :class:`JSONFileLoader` / :class:`YAMLFileLoader`.
* :data:`FILE_LOADERS` – loader instances keyed by file type.
* :func:`loader_for` – resolve a file type (``"yml"``, ``".json"``) to a loader.
* :func:`find_settings_file` – search a directory for ``<name>.<ext>`` or
  ``<name>``.

System Role
-----------
Invoked once by :class:`lib_typed_config.adapters.source.LayeredSettingsSource`
while the façade is constructed.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

try:  # Python >= 3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib  # type: ignore[no-redef]

import yaml

from ...domain.errors import NotFound, SourceReadError
from ...observability import log_debug, log_error
from ..dotenv.default import DotEnvFileLoader


class BaseFileLoader:
    """Common utilities shared by the structured file loaders."""

    def _read(self, path: str) -> bytes:
        """Read *path* as bytes, raising :class:`NotFound` when the file is missing.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile(delete=False)
        >>> _ = tmp.write(b"key = 'value'")
        >>> tmp.close()
        >>> BaseFileLoader()._read(tmp.name)[:3]
        b'key'
        >>> Path(tmp.name).unlink()
        """

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Settings file not found: {path}")
        payload = file_path.read_bytes()
        log_debug("settings_file_read", layer="file", path=path, size=len(payload))
        return payload

    @staticmethod
    def _ensure_mapping(data: object, *, path: str) -> Mapping[str, object]:
        """Ensure *data* behaves like a mapping, otherwise raise ``SourceReadError``.

        Examples
        --------
        >>> BaseFileLoader._ensure_mapping({"key": 1}, path="demo")
        {'key': 1}
        >>> BaseFileLoader._ensure_mapping("KEY=value", path="demo")
        Traceback (most recent call last):
        ...
        lib_typed_config.domain.errors.SourceReadError: File demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise SourceReadError(f"File {path} did not produce a mapping")
        return data


class TOMLFileLoader(BaseFileLoader):
    """Load TOML documents using the standard library parser."""

    def load(self, path: str) -> Mapping[str, object]:
        """Return mapping extracted from the TOML file at *path*.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile('w', delete=False, encoding='utf-8')
        >>> _ = tmp.write('key = "value"')
        >>> tmp.close()
        >>> TOMLFileLoader().load(tmp.name)["key"]
        'value'
        >>> Path(tmp.name).unlink()
        """

        try:
            data = tomllib.loads(self._read(path).decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            log_error("settings_file_invalid", layer="file", path=path, format="toml", error=str(exc))
            raise SourceReadError(f"Invalid TOML in {path}: {exc}") from exc
        return self._ensure_mapping(data, path=path)


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents."""

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = json.loads(self._read(path))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            log_error("settings_file_invalid", layer="file", path=path, format="json", error=str(exc))
            raise SourceReadError(f"Invalid JSON in {path}: {exc}") from exc
        return self._ensure_mapping(data, path=path)


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents with ``yaml.safe_load``; an empty document is ``{}``."""

    def load(self, path: str) -> Mapping[str, object]:
        try:
            data = yaml.safe_load(self._read(path))
        except yaml.YAMLError as exc:
            log_error("settings_file_invalid", layer="file", path=path, format="yaml", error=str(exc))
            raise SourceReadError(f"Invalid YAML in {path}: {exc}") from exc
        if data is None:
            data = {}
        return self._ensure_mapping(data, path=path)


_YAML = YAMLFileLoader()
_DOTENV = DotEnvFileLoader()

FILE_LOADERS = {
    "yaml": _YAML,
    "yml": _YAML,
    "json": JSONFileLoader(),
    "toml": TOMLFileLoader(),
    "env": _DOTENV,
    "dotenv": _DOTENV,
}
"""Loaders keyed by lower-case file type without a leading dot."""

SUPPORTED_TYPES = ("yaml", "yml", "json", "toml", "env")
"""Extensions probed, in order, when searching for ``<name>.<ext>``."""


def loader_for(file_type: str):
    """Return the loader registered for *file_type*.

    Raises
    ------
    NotFound
        When the type is not supported.

    >>> type(loader_for(".YML")).__name__
    'YAMLFileLoader'
    """

    normalized = file_type.lower().lstrip(".")
    try:
        return FILE_LOADERS[normalized]
    except KeyError:
        raise NotFound(f"Unsupported settings file type: {file_type}") from None


def find_settings_file(directory: str, name: str, file_type: str) -> tuple[Path, str] | None:
    """Locate the settings file and the type used to parse it.

    ``<directory>/<name>.<ext>`` is tried for every supported extension first
    and parsed by that extension; ``<directory>/<name>`` itself is parsed with
    *file_type*. Returns ``None`` when nothing exists.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> _ = (Path(tmp.name) / "app.json").write_text("{}", encoding="utf-8")
    >>> found = find_settings_file(tmp.name, "app", "yaml")
    >>> found[0].name, found[1]
    ('app.json', 'json')
    >>> find_settings_file(tmp.name, "missing", "yaml") is None
    True
    >>> tmp.cleanup()
    """

    base = Path(directory)
    for extension in SUPPORTED_TYPES:
        candidate = base / f"{name}.{extension}"
        if candidate.is_file():
            return candidate, extension
    candidate = base / name
    if candidate.is_file():
        return candidate, file_type.lower().lstrip(".")
    return None
