"""Public package surface for ``lib_typed_config``.

Load settings from a file and the environment into dataclasses::

    @dataclass
    class Server:
        host: str = setting("host", validate="required")
        port: int = setting("port", default="8080")

    server = Config(with_file_name("settings")).unmarshal(Server)
"""

from __future__ import annotations

from .application.promote import promote
from .application.sections import match_section
from .application.unmarshal import unmarshal
from .core import DEFAULT_FILE_NAME, DEFAULT_FILE_PATH, DEFAULT_FILE_TYPE, Config, new
from .domain.errors import (
    ConfigError,
    DecodeError,
    DefaultApplyError,
    NotFound,
    SchemaError,
    SourceReadError,
    ValidationError,
    Violation,
)
from .domain.schema import setting
from .observability import bind_trace_id, get_logger
from .options import (
    Option,
    with_environ,
    with_env_prefix,
    with_file_name,
    with_file_path,
    with_file_type,
    with_source,
    with_strict,
)

__all__ = [
    "Config",
    "ConfigError",
    "DEFAULT_FILE_NAME",
    "DEFAULT_FILE_PATH",
    "DEFAULT_FILE_TYPE",
    "DecodeError",
    "DefaultApplyError",
    "NotFound",
    "Option",
    "SchemaError",
    "SourceReadError",
    "ValidationError",
    "Violation",
    "bind_trace_id",
    "get_logger",
    "match_section",
    "new",
    "promote",
    "setting",
    "unmarshal",
    "with_env_prefix",
    "with_environ",
    "with_file_name",
    "with_file_path",
    "with_file_type",
    "with_source",
    "with_strict",
]
