"""Find/hide service layer for GraphFind.

Provides the evaluators, the session controller and a factory wiring them
from application config.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from GraphFind.services.find import FindEvaluator
from GraphFind.services.hide import HideEvaluator, HideHandle, HideResult
from GraphFind.services.session import GraphFindSession

if TYPE_CHECKING:
    from GraphFind.config import AppConfig
    from GraphFind.core.settings import ParamStore


def create_session(config: AppConfig, params: ParamStore | None = None) -> GraphFindSession:
    """Create a session seeded from configuration.

    Args:
        config: Application configuration.
        params: Optional query-parameter store; values found there win over
            the configured initial expressions.

    Returns:
        Configured GraphFindSession instance.
    """
    return GraphFindSession(
        options=config.display.to_options(),
        params=params,
        find_value=config.find.value,
        hide_value=config.hide.value,
        find_presets=config.find.options,
        hide_presets=config.hide.options,
    )


__all__ = [
    "FindEvaluator",
    "GraphFindSession",
    "HideEvaluator",
    "HideHandle",
    "HideResult",
    "create_session",
]
