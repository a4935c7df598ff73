"""Find and hide domain configuration: initial expressions and presets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from GraphFind.config.common import (
    expect_mapping,
    expect_str,
    get_optional_value,
    get_required_value,
    get_section,
)
from GraphFind.core.query import Channel
from GraphFind.core.settings import QueryPreset


@dataclass(frozen=True, slots=True)
class QueryConfig:
    """Initial expression and preset options for one channel."""

    value: str
    options: tuple[QueryPreset, ...]


def load_query(raw: Mapping[str, Any], channel: Channel) -> QueryConfig:
    """Load the ``find`` or ``hide`` section.

    Args:
        raw: Root configuration mapping.
        channel: Section name.

    Returns:
        Parsed query configuration.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If a preset misses a required key.
    """
    section = get_section(raw, channel, required=False)
    value = expect_str(get_optional_value(section, "value", ""), f"{channel}.value")

    options_obj = get_optional_value(section, "options", [])
    if not isinstance(options_obj, list):
        raise TypeError(f"{channel}.options must be a list")
    options: list[QueryPreset] = []
    for idx, item in enumerate(options_obj):
        key = f"{channel}.options[{idx}]"
        entry = expect_mapping(item, key)
        options.append(
            QueryPreset(
                description=expect_str(
                    get_required_value(entry, "description", f"{key}.description"), f"{key}.description"
                ),
                expression=expect_str(
                    get_required_value(entry, "expression", f"{key}.expression"), f"{key}.expression"
                ),
            )
        )
    return QueryConfig(value=value.strip(), options=tuple(options))


def check_query(config: QueryConfig, channel: Channel) -> None:
    """Validate query domain constraints.

    Raises:
        ValueError: If a preset has an empty expression.
    """
    for idx, option in enumerate(config.options):
        if not option.expression.strip():
            raise ValueError(f"{channel}.options[{idx}].expression must not be empty")
