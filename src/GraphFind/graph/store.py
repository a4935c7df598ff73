"""In-memory graph handle.

``ElementGraph`` holds one graph snapshot built from Cytoscape JSON elements
and offers what the find/hide evaluators need: selector queries, structural
remove/restore, style classes and visibility, mutation batches, events and
layout requests.
"""

from __future__ import annotations

import json
from collections import defaultdict
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Mapping

from GraphFind.graph.elements import Element, ElementSet
from GraphFind.graph.selector import parse_selector
from GraphFind.utils.log import log


Listener = Callable[..., None]


class ElementGraph:
    """One graph snapshot.

    Elements are never dropped from the store: structural removal flags them
    so the removal handle can restore them exactly. Queries only see live
    (non-removed) elements.
    """

    def __init__(self, elements: Iterable[Mapping[str, Any]] = ()) -> None:
        self._elements: dict[str, Element] = {}
        self._positions: dict[str, int] = {}
        self._edges_by_node: dict[str, list[Element]] = defaultdict(list)
        self._children: dict[str, list[Element]] = defaultdict(list)
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._batch_depth = 0
        self._dirty = False
        self.render_count = 0
        self.layout_requests: list[str] = []
        for definition in elements:
            self.add(definition)

    @classmethod
    def from_json(cls, payload: Any) -> ElementGraph:
        """Build a graph from a Cytoscape JSON payload.

        Accepts a list of element definitions, ``{"elements": [...]}`` or
        ``{"elements": {"nodes": [...], "edges": [...]}}``.
        """
        if isinstance(payload, Mapping):
            payload = payload.get("elements", payload)
        if isinstance(payload, Mapping):
            nodes = payload.get("nodes") or []
            edges = payload.get("edges") or []
            definitions = [*({**n, "group": "nodes"} for n in nodes), *({**e, "group": "edges"} for e in edges)]
        elif isinstance(payload, list):
            definitions = payload
        else:
            raise TypeError("Graph JSON must be a list of elements or an object with 'elements'")
        return cls(definitions)

    # -- construction --------------------------------------------------------

    def add(self, definition: Mapping[str, Any]) -> Element:
        """Add one Cytoscape element definition (``{"data": {...}, "classes": ...}``)."""
        if not isinstance(definition, Mapping):
            raise TypeError("Graph element must be an object")
        data = definition.get("data")
        if not isinstance(data, Mapping):
            raise TypeError("Graph element must have a 'data' object")
        data = dict(data)

        group = definition.get("group") or ("edges" if "source" in data else "nodes")
        if group not in ("nodes", "edges"):
            raise ValueError(f"Unknown element group: {group}")
        if group == "edges":
            if not data.get("source") or not data.get("target"):
                raise ValueError(f"Edge must have source and target: {data}")
            data.setdefault("id", f"{data['source']}->{data['target']}")
        element_id = data.get("id")
        if not element_id:
            raise ValueError(f"Node must have an id: {data}")
        element_id = str(element_id)
        if element_id in self._elements:
            raise ValueError(f"Duplicate element id: {element_id}")

        classes = definition.get("classes") or ()
        if isinstance(classes, str):
            classes = classes.split()
        element = Element(id=element_id, group=group, data=data, classes=set(classes))

        self._positions[element_id] = len(self._positions)
        self._elements[element_id] = element
        if element.is_edge:
            self._edges_by_node[str(element.source)].append(element)
            if element.target != element.source:
                self._edges_by_node[str(element.target)].append(element)
        elif element.parent:
            self._children[str(element.parent)].append(element)
        return element

    # -- queries -------------------------------------------------------------

    def get(self, element_id: str) -> Element | None:
        return self._elements.get(element_id)

    def elements(self, selector: str | None = None, *, include_removed: bool = False) -> ElementSet:
        members = ElementSet(self, (e for e in self._elements.values() if include_removed or not e.removed))
        return members if selector is None else members.filter(selector)

    def select(self, selector: str) -> ElementSet:
        parsed = parse_selector(selector)
        return ElementSet(self, (e for e in self._elements.values() if not e.removed and parsed.matches(e)))

    def nodes(self, selector: str | None = None) -> ElementSet:
        return self.elements().nodes(selector)

    def edges(self, selector: str | None = None) -> ElementSet:
        return self.elements().edges(selector)

    def incident_edges(self, node_id: str) -> list[Element]:
        return [edge for edge in self._edges_by_node.get(node_id, ()) if not edge.removed]

    def children_of(self, node_id: str) -> list[Element]:
        return [child for child in self._children.get(node_id, ()) if not child.removed]

    def element_ids(self, *, include_removed: bool = False) -> frozenset[str]:
        return frozenset(e.id for e in self._elements.values() if include_removed or not e.removed)

    # -- mutation ------------------------------------------------------------

    def update_classes(self, elements: Iterable[Element], *, add: str | None = None, remove: str | None = None) -> None:
        for element in elements:
            if add:
                element.classes.add(add)
            if remove:
                element.classes.discard(remove)
        self._touch()

    def update_visibility(self, elements: Iterable[Element], visible: bool) -> None:
        for element in elements:
            element.visible = visible
        self._touch()

    def remove(self, elements: Iterable[Element]) -> ElementSet:
        """Remove elements along with their incident edges and descendants.

        Returns:
            The collection actually removed; pass it to ``restore`` to undo.
        """
        removed: list[Element] = []
        pending = [e for e in elements if not e.removed]
        while pending:
            element = pending.pop()
            if element.removed:
                continue
            element.removed = True
            removed.append(element)
            if element.is_node:
                pending.extend(self.incident_edges(element.id))
                pending.extend(self.children_of(element.id))
        self._touch()
        log.debug("Removed %d elements", len(removed))
        return ElementSet(self, sorted(removed, key=self._order))

    def restore(self, elements: Iterable[Element]) -> ElementSet:
        """Restore removed elements; nodes first so edges find their endpoints."""
        members = [e for e in elements if e.removed and self._elements.get(e.id) is e]
        restored: list[Element] = []
        for element in sorted(members, key=lambda e: (e.is_edge, self._order(e))):
            if element.is_edge and not self._endpoints_live(element):
                log.warning("Cannot restore edge %s: endpoint missing", element.id)
                continue
            element.removed = False
            restored.append(element)
        self._touch()
        return ElementSet(self, restored)

    # -- batching and events -------------------------------------------------

    def start_batch(self) -> None:
        self._batch_depth += 1

    def end_batch(self) -> None:
        if self._batch_depth == 0:
            raise RuntimeError("end_batch called without start_batch")
        self._batch_depth -= 1
        if self._batch_depth == 0 and self._dirty:
            self._render()

    @contextmanager
    def batch(self) -> Iterator[ElementGraph]:
        self.start_batch()
        try:
            yield self
        finally:
            self.end_batch()

    def on(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    def emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners.get(event, ())):
            listener(*args)

    def run_layout(self, name: str) -> None:
        log.debug("Layout requested: %s", name)
        self.layout_requests.append(name)
        self.emit("layoutstart", name)

    # -- internals -----------------------------------------------------------

    def _touch(self) -> None:
        self._dirty = True
        if self._batch_depth == 0:
            self._render()

    def _render(self) -> None:
        self._dirty = False
        self.render_count += 1
        self.emit("render")

    def _order(self, element: Element) -> int:
        return self._positions[element.id]

    def _endpoints_live(self, edge: Element) -> bool:
        for node_id in (edge.source, edge.target):
            node = self._elements.get(str(node_id))
            if node is None or node.removed:
                return False
        return True


def load_graph(path: Path) -> ElementGraph:
    """Load a graph snapshot from a Cytoscape JSON file."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    graph = ElementGraph.from_json(payload)
    log.debug("Loaded graph %s: %d elements", path, len(graph.element_ids()))
    return graph


def composition_changed(previous: ElementGraph | None, current: ElementGraph) -> bool:
    """Return True when the snapshots differ in element membership, not just data.

    Elements removed by a compress hide still count as members.
    """
    if previous is None:
        return True
    return previous.element_ids(include_removed=True) != current.element_ids(include_removed=True)
