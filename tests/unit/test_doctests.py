"""Run the examples embedded in module docstrings."""

from __future__ import annotations

import doctest
import importlib

import pytest

MODULES = [
    "lib_typed_config.core",
    "lib_typed_config.observability",
    "lib_typed_config.domain.errors",
    "lib_typed_config.domain.schema",
    "lib_typed_config.domain.settings",
    "lib_typed_config.application.decode",
    "lib_typed_config.application.defaults",
    "lib_typed_config.application.merge",
    "lib_typed_config.application.promote",
    "lib_typed_config.application.sections",
    "lib_typed_config.application.unmarshal",
    "lib_typed_config.application.validate",
    "lib_typed_config.adapters.source",
    "lib_typed_config.adapters.env.default",
    "lib_typed_config.adapters.dotenv.default",
    "lib_typed_config.adapters.file_loaders.structured",
]


@pytest.mark.parametrize("name", MODULES)
def test_module_doctests(name: str) -> None:
    module = importlib.import_module(name)
    result = doctest.testmod(module, optionflags=doctest.ELLIPSIS)
    assert result.failed == 0
