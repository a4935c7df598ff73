"""Runtime domain configuration: logging and the graph snapshot source.

Sections::

    log:
      level: INFO        # overridden by GRAPHFIND_LOG_LEVEL
      to_file: false
      dir: log
    graph:
      path: ""           # default snapshot for find/hide; GRAPHFIND_GRAPH
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

from GraphFind.config.common import (
    expect_bool,
    expect_str,
    get_optional_value,
    get_required_value,
    get_section,
)

LOG_LEVEL_ENV = "GRAPHFIND_LOG_LEVEL"
GRAPH_PATH_ENV = "GRAPHFIND_GRAPH"
_ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_GRAPH_SUFFIXES = (".json",)


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """Logging settings and the graph snapshot used when none is given.

    Attributes:
        level: Console log level name.
        to_file: Also write a per-action log file.
        dir: Directory for log files.
        graph_path: Default Cytoscape JSON snapshot, or "" for none.
    """

    level: str
    to_file: bool
    dir: str
    graph_path: str = ""


def load_runtime(raw: Mapping[str, Any]) -> RuntimeConfig:
    """Load the ``log`` and ``graph`` sections.

    Environment variables (shell or ``.env``) win over the file values.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If required keys are missing.
    """
    log_section = get_section(raw, "log", required=True)
    graph_section = get_section(raw, "graph", required=False)

    level = expect_str(get_required_value(log_section, "level", "log.level"), "log.level")
    graph_path = expect_str(get_optional_value(graph_section, "path", ""), "graph.path")
    return RuntimeConfig(
        level=(os.getenv(LOG_LEVEL_ENV, "").strip() or level).upper(),
        to_file=expect_bool(get_required_value(log_section, "to_file", "log.to_file"), "log.to_file"),
        dir=expect_str(get_required_value(log_section, "dir", "log.dir"), "log.dir"),
        graph_path=os.getenv(GRAPH_PATH_ENV, "").strip() or graph_path.strip(),
    )


def check_runtime(config: RuntimeConfig) -> None:
    """Validate runtime domain constraints.

    Raises:
        ValueError: If values violate runtime constraints.
    """
    if config.level not in _ALLOWED_LOG_LEVELS:
        raise ValueError(f"log.level must be one of {sorted(_ALLOWED_LOG_LEVELS)}")
    if not config.dir.strip():
        raise ValueError("log.dir must not be empty")
    if config.graph_path and not config.graph_path.lower().endswith(_GRAPH_SUFFIXES):
        raise ValueError("graph.path must point to a Cytoscape JSON file (.json)")
