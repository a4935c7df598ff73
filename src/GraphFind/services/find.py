"""Find evaluator: highlight elements matching a compiled selector."""

from __future__ import annotations

from dataclasses import dataclass

from GraphFind.core.operands import FIND_CLASS
from GraphFind.core.query import CompiledSelector
from GraphFind.graph.elements import ElementSet
from GraphFind.graph.store import ElementGraph
from GraphFind.utils.log import log


@dataclass(slots=True)
class FindEvaluator:
    """Marks find hits with a style class.

    Marking is cosmetic only: visibility and structure are never touched, and
    hits are not expanded (edges of a found node are not marked).
    """

    marker: str = FIND_CLASS

    def apply_find(self, graph: ElementGraph, selector: CompiledSelector | None) -> ElementSet:
        """Replace the current find highlight.

        Args:
            graph: Graph snapshot to mark.
            selector: Compiled find selector, or None to only clear.

        Returns:
            Elements marked by this call.
        """
        with graph.batch():
            # removed elements keep their classes until restored
            graph.elements(f".{self.marker}", include_removed=True).remove_class(self.marker)
            hits = graph.select(selector.text) if selector is not None else ElementSet(graph)
            if hits:
                hits.add_class(self.marker)

        log.debug("Find marked %d elements", len(hits))
        return hits
