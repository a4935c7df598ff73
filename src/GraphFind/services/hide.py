"""Hide evaluator: soft-hide or remove elements matching a compiled selector.

Hiding is reversible in both modes. The evaluator owns a single ``HideHandle``
describing what the previous evaluation hid (soft mode) or removed (compress
mode); every evaluation first releases it, restoring the graph when the handle
belongs to the same snapshot and simply dropping it otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from GraphFind.core.operands import NodeAttr
from GraphFind.core.query import CompiledSelector
from GraphFind.graph.elements import ElementSet
from GraphFind.graph.store import ElementGraph
from GraphFind.utils.log import log

DEFAULT_LAYOUT = "dagre"
ZOOM_IGNORE_EVENT = "zoomignore"


@dataclass(frozen=True, slots=True)
class HideHandle:
    """Elements hidden or removed by one hide evaluation on one snapshot."""

    graph: ElementGraph
    mode: Literal["hidden", "removed"]
    elements: ElementSet


@dataclass(frozen=True, slots=True)
class HideResult:
    """Outcome of one hide evaluation.

    Attributes:
        hidden: Ids made invisible (soft mode).
        removed: Ids structurally removed (compress mode).
        layout_requested: Whether a layout pass was triggered.
    """

    hidden: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()
    layout_requested: bool = False


class HideEvaluator:
    """Applies hide selectors and owns the resulting hide handle."""

    def __init__(self, layout: str = DEFAULT_LAYOUT) -> None:
        self.layout = layout
        self._handle: HideHandle | None = None

    @property
    def handle(self) -> HideHandle | None:
        return self._handle

    def release(self) -> None:
        """Forget the current handle without touching any graph.

        Used when the snapshot the handle points into is gone.
        """
        self._handle = None

    def apply_hide(
        self,
        graph: ElementGraph,
        selector: CompiledSelector | None,
        *,
        graph_changed: bool,
        compress: bool,
        compress_changed: bool = False,
        hide_changed: bool = False,
        elements_changed: bool = False,
        layout: str | None = None,
    ) -> HideResult:
        """Undo the previous hide and apply ``selector``.

        Args:
            graph: Current graph snapshot.
            selector: Compiled hide selector, or None to only undo.
            graph_changed: Whether ``graph`` is a new snapshot since the last call.
            compress: Remove hits structurally instead of hiding them.
            compress_changed: Whether compress mode was toggled since the last call.
            hide_changed: Whether the hide expression changed since the last call.
            elements_changed: Whether the new snapshot differs in element membership.
            layout: Layout to run when one is needed; defaults to ``self.layout``.

        Returns:
            What was hidden or removed, and whether a layout was requested.
        """
        with graph.batch():
            self._release_handle(graph, graph_changed=graph_changed)
            if selector is not None:
                hits = self._closure(graph, selector)
                if compress:
                    self._handle = HideHandle(graph, "removed", self._remove(graph, hits))
                else:
                    self._handle = HideHandle(graph, "hidden", self._hide(graph, hits))

        handle = self._handle
        has_removed = handle is not None and handle.mode == "removed" and not handle.elements.is_empty()
        layout_requested = (
            hide_changed
            or (compress_changed and selector is not None)
            or (has_removed and elements_changed)
        )
        if layout_requested:
            graph.emit(ZOOM_IGNORE_EVENT, True)
            graph.run_layout(layout or self.layout)

        if handle is None:
            return HideResult(layout_requested=layout_requested)
        ids = tuple(handle.elements.ids())
        log.debug("Hide %s %d elements", handle.mode, len(ids))
        if handle.mode == "removed":
            return HideResult(removed=ids, layout_requested=layout_requested)
        return HideResult(hidden=ids, layout_requested=layout_requested)

    def _release_handle(self, graph: ElementGraph, *, graph_changed: bool) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        if graph_changed or handle.graph is not graph:
            log.debug("Dropping %s handle from a previous snapshot", handle.mode)
            return
        if handle.mode == "hidden":
            handle.elements.set_visible(True)
        else:
            handle.elements.restore()

    @staticmethod
    def _closure(graph: ElementGraph, selector: CompiledSelector) -> ElementSet:
        hits = graph.select(selector.text)
        # hiding a node hides its edges
        hits = hits.add(hits.connected_edges())
        # nodes left with only hidden edges go too, except idle nodes which are shown on purpose
        remaining = hits.absolute_complement()
        nodes_with_visible_edges = remaining.edges().connected_nodes()
        orphans = remaining.nodes(f"[^{NodeAttr.is_idle}]").subtract(nodes_with_visible_edges)
        hits = hits.add(orphans)
        # group boxes are only hidden once empty
        return hits.subtract(hits.filter(lambda element: element.is_box))

    @staticmethod
    def _remove(graph: ElementGraph, hits: ElementSet) -> ElementSet:
        removed = graph.remove(hits)
        while True:
            empty_boxes = graph.nodes().filter(lambda node: node.is_box and not graph.children_of(node.id))
            if empty_boxes.is_empty():
                return removed
            removed = removed.add(graph.remove(empty_boxes))

    @staticmethod
    def _hide(graph: ElementGraph, hits: ElementSet) -> ElementSet:
        hits.set_visible(False)
        hidden = hits
        while True:
            empty_boxes = graph.nodes().filter(
                lambda node: node.is_box
                and node.visible
                and not any(child.visible for child in graph.children_of(node.id))
            )
            if empty_boxes.is_empty():
                return hidden
            empty_boxes.set_visible(False)
            hidden = hidden.add(empty_boxes)
