from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import pytest

from lib_typed_config.application.defaults import apply_defaults
from lib_typed_config.application.validate import collect_violations, validate
from lib_typed_config.domain.errors import DefaultApplyError, SchemaError, ValidationError, Violation
from lib_typed_config.domain.schema import setting, zero_instance


@dataclass
class Pool:
    size: int = setting(default="4", validate="min=1,max=64")
    mode: str = setting(default="lazy", validate="oneof=lazy eager")


@dataclass
class Service:
    host: str = setting(validate="required")
    token: str = setting(validate="omitempty,min=8")
    pool: Pool = setting()
    tags: list[str] = field(default_factory=lambda: ["core"])


@dataclass
class BrokenDefault:
    port: int = setting(default="eighty")


@dataclass
class UnknownRule:
    name: str = setting(validate="uuid")


@dataclass
class Bounds:
    hosts: list[str] = setting(validate="min=1,max=2")
    ratio: float = setting(validate="min=0.5,max=1")
    verbose: bool = setting(validate="oneof=true false")
    retries: Optional[int] = setting(validate="min=1")


@dataclass
class Unmeasurable:
    flag: bool = setting(validate="min=1")


@dataclass
class BadBound:
    name: str = setting(validate="max=ten")


def test_validation_collects_every_violation() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate(zero_instance(Service))
    assert excinfo.value.violations == (
        Violation("host", "required"),
        Violation("pool.size", "min"),
        Violation("pool.mode", "oneof"),
    )
    assert str(excinfo.value) == (
        "errors: validation error: field 'host' is required, "
        "validation error: field 'pool.size' is min, "
        "validation error: field 'pool.mode' is oneof"
    )


def test_omitempty_skips_rules_for_zero_values() -> None:
    service = Service(host="h1", token="", pool=Pool(size=2, mode="eager"))
    assert collect_violations(service) == []
    service.token = "short"
    assert collect_violations(service) == [Violation("token", "min")]


def test_min_max_measure_length_of_strings_and_lists() -> None:
    service = Service(host="h1", token="long-enough", pool=Pool(size=65, mode="lazy"))
    assert collect_violations(service) == [Violation("pool.size", "max")]


def test_bounds_apply_to_lengths_and_numbers() -> None:
    bounds = Bounds(hosts=["a"], ratio=0.75, verbose=True, retries=3)
    assert collect_violations(bounds) == []
    bounds = Bounds(hosts=["a", "b", "c"], ratio=0.25, verbose=False, retries=None)
    assert collect_violations(bounds) == [
        Violation("hosts", "max"),
        Violation("ratio", "min"),
        Violation("retries", "min"),
    ]
    assert collect_violations(Bounds(hosts=[], ratio=2.0, verbose=True, retries=0)) == [
        Violation("hosts", "min"),
        Violation("ratio", "max"),
        Violation("retries", "min"),
    ]


def test_bounds_on_unmeasurable_values_are_schema_errors() -> None:
    with pytest.raises(SchemaError):
        validate(Unmeasurable(flag=True))
    with pytest.raises(SchemaError):
        validate(BadBound(name="x"))


def test_unknown_rule_is_a_schema_error() -> None:
    with pytest.raises(SchemaError):
        validate(UnknownRule(name="x"))


def test_defaults_fill_zero_fields_only() -> None:
    service = zero_instance(Service)
    service.host = "h1"
    service.pool.size = 8
    apply_defaults(service)
    assert service.pool == Pool(size=8, mode="lazy")
    assert service.tags == ["core"]
    assert service.host == "h1"
    assert service.token == ""


def test_malformed_default_raises() -> None:
    with pytest.raises(DefaultApplyError) as excinfo:
        apply_defaults(zero_instance(BrokenDefault))
    assert excinfo.value.field == "port"
    assert excinfo.value.default == "eighty"
