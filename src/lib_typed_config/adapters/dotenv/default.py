"""`.env` file adapter.

Purpose
-------
Parse ``KEY=VALUE`` settings files (file type ``env``/``dotenv``) into nested
mappings with the same ``__`` nesting semantics as environment variables.

Contents
--------
* :class:`DotEnvFileLoader` – file loader satisfying the ``FileLoader`` port.
* :func:`parse_dotenv` / :func:`_strip_quotes` – line parsing helpers.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from ...domain.errors import NotFound, SourceReadError
from ...observability import log_debug, log_error
from ..env.default import assign_nested


class DotEnvFileLoader:
    """Load a dotenv file into a nested settings mapping."""

    def load(self, path: str) -> Mapping[str, object]:
        """Return the parsed contents of *path*.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> target = Path(tmp.name) / '.env'
        >>> _ = target.write_text('NAME=demo\\nSERVER__HOST="h1"\\n', encoding='utf-8')
        >>> DotEnvFileLoader().load(str(target))
        {'name': 'demo', 'server': {'host': 'h1'}}
        >>> tmp.cleanup()
        """

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Settings file not found: {path}")
        data = parse_dotenv(file_path)
        log_debug("settings_file_read", layer="file", path=path, keys=sorted(data.keys()))
        return data


def parse_dotenv(path: Path) -> dict[str, object]:
    """Parse ``path`` into a nested dictionary, raising ``SourceReadError`` on malformed lines.

    Blank lines and ``#`` comments are skipped and an optional ``export``
    prefix is accepted.
    """

    result: dict[str, object] = {}
    with path.open("r", encoding="utf-8") as handle:
        for line_number, raw_line in enumerate(handle, start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("export "):
                line = line[len("export ") :].lstrip()
            if "=" not in line:
                log_error("dotenv_invalid_line", layer="file", path=str(path), line=line_number)
                raise SourceReadError(f"Malformed line {line_number} in {path}")
            key, value = line.split("=", 1)
            try:
                assign_nested(result, key.strip(), _strip_quotes(value.strip()))
            except ValueError as exc:
                raise SourceReadError(f"Line {line_number} in {path}: {exc}") from exc
    return result


def _strip_quotes(value: str) -> str:
    """Trim surrounding quotes and inline comments from ``value``.

    Examples
    --------
    >>> _strip_quotes('"token"')
    'token'
    >>> _strip_quotes("value # comment")
    'value'
    """

    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    if value.startswith("#"):
        return ""
    if " #" in value:
        return value.split(" #", 1)[0].strip()
    return value
