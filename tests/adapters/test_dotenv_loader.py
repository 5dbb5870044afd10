from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from lib_typed_config.adapters.dotenv.default import DotEnvFileLoader
from lib_typed_config.domain.errors import NotFound, SourceReadError


def test_dotenv_loader_parses_nested(tmp_path: Path) -> None:
    env_file = tmp_path / "settings.env"
    env_file.write_text(
        "# comment\nDB__HOST=localhost\nDB__PASSWORD='s3cret'\nexport FEATURE=true # inline\n",
        encoding="utf-8",
    )
    data = DotEnvFileLoader().load(str(env_file))
    assert data == {"db": {"host": "localhost", "password": "s3cret"}, "feature": "true"}


def test_dotenv_loader_missing_file(tmp_path: Path) -> None:
    with pytest.raises(NotFound):
        DotEnvFileLoader().load(str(tmp_path / ".env"))


def test_dotenv_loader_rejects_malformed_line(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("GOOD=1\nnot a pair\n", encoding="utf-8")
    with pytest.raises(SourceReadError, match="Malformed line 2"):
        DotEnvFileLoader().load(str(env_file))


SEGMENT = st.text(min_size=1, max_size=5, alphabet=st.characters(min_codepoint=65, max_codepoint=90))
DOTENV_VALUE = st.text(min_size=1, max_size=8, alphabet=st.characters(min_codepoint=97, max_codepoint=122))


def _no_prefix(paths):
    seen = []
    for parts in paths:
        for existing in seen:
            if parts[: len(existing)] == existing or existing[: len(parts)] == parts:
                return False
        seen.append(parts)
    return True


@st.composite
def dotenv_entries(draw):
    path_lists = draw(st.lists(st.lists(SEGMENT, min_size=1, max_size=3), min_size=1, max_size=5).filter(_no_prefix))
    values = draw(st.lists(DOTENV_VALUE, min_size=len(path_lists), max_size=len(path_lists)))
    return {"__".join(parts): value for parts, value in zip(path_lists, values)}


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(entries=dotenv_entries())
def test_dotenv_loader_handles_random_namespace(entries, tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("\n".join(f"{key}={value}" for key, value in entries.items()) + "\n", encoding="utf-8")

    data = DotEnvFileLoader().load(str(env_file))

    for raw_key, value in entries.items():
        parts = [part.lower() for part in raw_key.split("__")]
        cursor = data
        for part in parts[:-1]:
            cursor = cursor[part]
        assert cursor[parts[-1]] == value
