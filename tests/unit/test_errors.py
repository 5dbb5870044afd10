from __future__ import annotations

import pytest

from lib_typed_config.domain.errors import (
    ConfigError,
    DecodeError,
    DefaultApplyError,
    NotFound,
    SchemaError,
    SourceReadError,
    ValidationError,
    Violation,
)


def test_error_hierarchy() -> None:
    for exception_type in (NotFound, SourceReadError, SchemaError, DecodeError, ValidationError, DefaultApplyError):
        assert issubclass(exception_type, ConfigError)


def test_violation_message() -> None:
    assert Violation("server.host", "required").message() == "validation error: field 'server.host' is required"


def test_validation_error_joins_every_violation() -> None:
    error = ValidationError([Violation("Host", "required"), Violation("Port", "min")])
    assert error.violations == (Violation("Host", "required"), Violation("Port", "min"))
    assert str(error) == (
        "errors: validation error: field 'Host' is required, validation error: field 'Port' is min"
    )


def test_decode_error_carries_field_and_value() -> None:
    error = DecodeError("server.port", "abc", "not an integer")
    assert error.field == "server.port"
    assert error.value == "abc"
    assert "server.port" in str(error)
    assert "'abc'" in str(error)


def test_default_apply_error_carries_default() -> None:
    error = DefaultApplyError("port", "eighty", "not an integer")
    assert (error.field, error.default) == ("port", "eighty")
    assert str(error).startswith("invalid default 'eighty' for field 'port'")


def test_all_errors_caught_by_base_class() -> None:
    with pytest.raises(ConfigError):
        raise ValidationError([Violation("name", "required")])
