"""Display domain configuration: graph settings toggled by find/hide."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from GraphFind.config.common import (
    expect_bool,
    expect_str,
    expect_str_list,
    get_optional_value,
    get_section,
)
from GraphFind.core.operands import EDGE_LABEL_MODES
from GraphFind.core.settings import DisplayOptions


@dataclass(frozen=True, slots=True)
class DisplayConfig:
    """Store validated initial display settings."""

    show_rank: bool
    show_security: bool
    show_idle_nodes: bool
    edge_labels: tuple[str, ...]
    compress_on_hide: bool
    layout: str

    def to_options(self) -> DisplayOptions:
        """Return a fresh mutable settings record seeded from this config."""
        return DisplayOptions(
            show_rank=self.show_rank,
            show_security=self.show_security,
            show_idle_nodes=self.show_idle_nodes,
            edge_labels=list(self.edge_labels),
            compress_on_hide=self.compress_on_hide,
            layout=self.layout,
        )


def load_display(raw: Mapping[str, Any]) -> DisplayConfig:
    """Load display configuration; every key is optional.

    Raises:
        TypeError: If config types are invalid.
    """
    section = get_section(raw, "display", required=False)

    def flag(name: str) -> bool:
        return expect_bool(get_optional_value(section, name, False), f"display.{name}")

    return DisplayConfig(
        show_rank=flag("show_rank"),
        show_security=flag("show_security"),
        show_idle_nodes=flag("show_idle_nodes"),
        edge_labels=tuple(expect_str_list(get_optional_value(section, "edge_labels", []), "display.edge_labels")),
        compress_on_hide=flag("compress_on_hide"),
        layout=expect_str(get_optional_value(section, "layout", "dagre"), "display.layout"),
    )


def check_display(config: DisplayConfig) -> None:
    """Validate display domain constraints.

    Raises:
        ValueError: If an edge label mode is unknown or layout is empty.
    """
    for idx, mode in enumerate(config.edge_labels):
        if mode not in EDGE_LABEL_MODES:
            raise ValueError(f"display.edge_labels[{idx}] must be one of {sorted(EDGE_LABEL_MODES)}")
    if not config.layout.strip():
        raise ValueError("display.layout must not be empty")
