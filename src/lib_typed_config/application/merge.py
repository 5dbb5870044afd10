"""Application-layer overlay of settings layers.

Purpose
-------
Combine the file layer and the environment layer into one nested mapping in
which later layers win at the leaf level, while recording which layer supplied
every dotted key. Free of I/O so any settings source can reuse it.

Contents
    - ``merge_layers``: public entry point driven by a simple loop.
    - ``known_only``: restricts a layer to keys another layer or a schema knows.
    - ``_overlay``: recursive stanza applying one layer.
    - ``_forget``: drops provenance for a replaced branch.

System Role
-----------
Used by :class:`lib_typed_config.adapters.source.LayeredSettingsSource` to build
each ``all_settings()`` snapshot (``file → env``).
"""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import Iterable, Optional, TypedDict

from ..domain.settings import find_key, is_section
from ..observability import log_debug


class SourceInfo(TypedDict):
    """Origin of one merged key: layer name, optional file path, dotted key."""

    layer: str
    path: str | None
    key: str


Layer = tuple[str, Mapping[str, object], Optional[str]]


def merge_layers(layers: Iterable[Layer]) -> tuple[dict[str, object], dict[str, SourceInfo]]:
    """Merge *layers* (lowest precedence first) and return ``(data, provenance)``.

    Sections merge key by key and a scalar from a later layer replaces an
    earlier scalar. A scalar never replaces an earlier section: the section is
    kept and the scalar is skipped. Keys are matched
    case-insensitively and keep the spelling of the first layer that set them.
    The input mappings are never mutated.

    Examples
    --------
    >>> data, meta = merge_layers([
    ...     ("file", {"server": {"host": "h1", "port": 80}}, "app.yaml"),
    ...     ("env", {"server": {"port": "8080"}}, None),
    ... ])
    >>> data
    {'server': {'host': 'h1', 'port': '8080'}}
    >>> meta["server.port"]["layer"], meta["server.host"]["path"]
    ('env', 'app.yaml')
    """

    merged: dict[str, object] = {}
    provenance: dict[str, SourceInfo] = {}
    for layer, data, path in layers:
        _overlay(merged, provenance, deepcopy(dict(data)), layer, path, ())
    return merged, provenance


def _overlay(
    target: dict[str, object],
    provenance: dict[str, SourceInfo],
    incoming: Mapping[str, object],
    layer: str,
    path: str | None,
    segments: tuple[str, ...],
) -> None:
    for key, value in incoming.items():
        stored = find_key(target, key) or key
        dotted = ".".join((*segments, stored))
        if is_section(value):
            branch = target.get(stored)
            if not is_section(branch):
                _forget(provenance, dotted)
                branch = {}
                target[stored] = branch
            _overlay(branch, provenance, value, layer, path, (*segments, stored))  # type: ignore[arg-type]
            continue
        if is_section(target.get(stored)):
            log_debug("scalar_over_section_skipped", layer=layer, key=dotted)
            continue
        _forget(provenance, dotted)
        target[stored] = value
        provenance[dotted] = {"layer": layer, "path": path, "key": dotted}


def _forget(provenance: dict[str, SourceInfo], prefix: str) -> None:
    """Remove provenance entries for *prefix* and its descendants."""

    for key in [key for key in provenance if key == prefix or key.startswith(prefix + ".")]:
        del provenance[key]


def known_only(
    incoming: Mapping[str, object],
    reference: Mapping[str, object],
    known: Iterable[str] = (),
) -> dict[str, object]:
    """Return the leaves of *incoming* that *reference* holds or *known* names.

    A leaf survives when *reference* stores a scalar at the same path, or when
    its dotted path (or one of its ancestors) is listed in *known*. Paths are
    compared lower-cased. Empty branches are dropped.

    Examples
    --------
    >>> env = {"user": "root", "server": {"port": "80", "junk": "x"}, "name": "n"}
    >>> known_only(env, {"name": "file"}, {"server.port"})
    {'server': {'port': '80'}, 'name': 'n'}
    """

    return _known_branch(incoming, reference, frozenset(path.lower() for path in known), ())


def _known_branch(
    incoming: Mapping[str, object],
    reference: Mapping[str, object] | None,
    known: frozenset[str],
    segments: tuple[str, ...],
) -> dict[str, object]:
    kept: dict[str, object] = {}
    for key, value in incoming.items():
        path = (*segments, str(key).lower())
        stored = find_key(reference, key) if reference is not None else None
        below = reference[stored] if reference is not None and stored is not None else None
        if is_section(value):
            branch = _known_branch(value, below if is_section(below) else None, known, path)  # type: ignore[arg-type]
            if branch:
                kept[key] = branch
        elif (stored is not None and not is_section(below)) or _is_known(path, known):
            kept[key] = value
    return kept


def _is_known(path: tuple[str, ...], known: frozenset[str]) -> bool:
    return any(".".join(path[:depth]) in known for depth in range(1, len(path) + 1))
