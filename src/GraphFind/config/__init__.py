from __future__ import annotations

"""Public configuration API for GraphFind."""

from GraphFind.config.app import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    load_config,
    load_config_with_defaults,
    merge_config_dicts,
    parse_config_dict,
)
from GraphFind.config.display import DisplayConfig
from GraphFind.config.query import QueryConfig
from GraphFind.config.runtime import RuntimeConfig

__all__ = [
    "RuntimeConfig",
    "DisplayConfig",
    "QueryConfig",
    "AppConfig",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "load_config_with_defaults",
    "merge_config_dicts",
    "parse_config_dict",
]
