from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import pytest

from lib_typed_config.domain.errors import SchemaError
from lib_typed_config.domain.schema import (
    MISSING,
    describe,
    is_zero,
    reset,
    setting,
    settings_paths,
    zero_instance,
    zero_value,
)


@dataclass
class Limits:
    retries: int = setting("max_retries", default="3", validate="required,min=1")
    ratio: float = 0.5


@dataclass
class Service:
    name: str = setting(validate="required")
    tags: list[str] = field(default_factory=lambda: ["core"])
    limits: Limits = setting(section="throttle", default_factory=lambda: Limits(retries=1))
    parent: Optional[Limits] = None


@dataclass(frozen=True)
class Frozen:
    name: str = ""


@dataclass
class Node:
    label: str = ""
    child: Optional[Node] = None


def test_describe_reads_tags() -> None:
    retries, ratio = describe(Limits)
    assert retries.key == "max_retries"
    assert retries.default == "3"
    assert retries.rules == ("required", "min=1")
    assert ratio.key == "ratio"
    assert ratio.default is MISSING
    assert ratio.declared_default() == 0.5


def test_describe_resolves_nested_types() -> None:
    specs = {spec.name: spec for spec in describe(Service)}
    assert specs["limits"].nested is Limits
    assert specs["limits"].section_name() == "throttle"
    assert specs["parent"].nested is Limits
    assert specs["parent"].section_name() == "limits"
    assert specs["name"].nested is None
    assert specs["tags"].declared_default() == ["core"]


def test_describe_accepts_instances_and_caches() -> None:
    assert describe(Limits(retries=1)) is describe(Limits)


def test_describe_rejects_non_dataclasses() -> None:
    with pytest.raises(SchemaError):
        describe(dict)


def test_describe_rejects_frozen_dataclasses() -> None:
    with pytest.raises(SchemaError):
        describe(Frozen)


def test_zero_values() -> None:
    assert zero_value(str) == ""
    assert zero_value(int) == 0
    assert zero_value(float) == 0.0
    assert zero_value(bool) is False
    assert zero_value(list[int]) == []
    assert zero_value(dict[str, int]) == {}
    assert zero_value(Optional[int]) is None
    assert zero_value(Limits) == Limits(retries=0, ratio=0.0)


def test_zero_instance_ignores_declared_defaults() -> None:
    service = zero_instance(Service)
    assert service == Service(name="", tags=[], limits=Limits(retries=0, ratio=0.0), parent=None)


def test_reset_clears_previous_values() -> None:
    service = Service(name="api", tags=["x"], limits=Limits(retries=5))
    reset(service)
    assert service == zero_instance(Service)


def test_is_zero() -> None:
    assert is_zero("", str)
    assert not is_zero("x", str)
    assert is_zero(0, int)
    assert not is_zero(False, int)
    assert is_zero(None, Optional[int])
    assert not is_zero(0, Optional[int])
    assert is_zero(zero_instance(Limits), Limits)
    assert not is_zero(Limits(retries=1, ratio=0.0), Limits)


def test_settings_paths_follow_sections_and_keys() -> None:
    assert settings_paths(Service) == {
        "name",
        "tags",
        "throttle.max_retries",
        "throttle.ratio",
        "limits.max_retries",
        "limits.ratio",
        "parent.max_retries",
        "parent.ratio",
    }
    assert settings_paths(zero_instance(Limits)) == {"max_retries", "ratio"}


def test_settings_paths_stop_at_recursive_types() -> None:
    assert settings_paths(Node) == {"label"}
