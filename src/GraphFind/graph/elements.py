"""Graph elements and element collections.

``ElementSet`` is an ordered, immutable-by-convention collection in the
spirit of a Cytoscape collection: set algebra returns new collections, while
class, visibility and restore operations mutate the member elements through
their owning graph so batching and render bookkeeping stay in one place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator, Literal, Union

from GraphFind.core.operands import NodeAttr
from GraphFind.graph.selector import parse_selector

if TYPE_CHECKING:
    from GraphFind.graph.store import ElementGraph

ElementFilter = Union[str, Callable[["Element"], bool]]


@dataclass(eq=False, slots=True)
class Element:
    """A node or edge of a graph snapshot.

    Attributes:
        id: Unique element id.
        group: ``nodes`` or ``edges``.
        data: Element data; edges carry ``source``/``target``, nodes may carry
            ``parent`` (the id of the group box that contains them).
        classes: Style classes, e.g. ``find``.
        visible: Style visibility (soft hide).
        removed: Whether the element is structurally removed from the graph.
    """

    id: str
    group: Literal["nodes", "edges"]
    data: dict[str, Any]
    classes: set[str] = field(default_factory=set)
    visible: bool = True
    removed: bool = False

    @property
    def is_node(self) -> bool:
        return self.group == "nodes"

    @property
    def is_edge(self) -> bool:
        return self.group == "edges"

    @property
    def is_box(self) -> bool:
        return self.is_node and bool(self.data.get(NodeAttr.is_box))

    @property
    def source(self) -> str | None:
        return self.data.get("source")

    @property
    def target(self) -> str | None:
        return self.data.get("target")

    @property
    def parent(self) -> str | None:
        return self.data.get("parent")

    def __repr__(self) -> str:
        return f"Element({self.group[:-1]} {self.id!r})"


class ElementSet:
    """Ordered collection of elements belonging to one graph."""

    __slots__ = ("_graph", "_items")

    def __init__(self, graph: ElementGraph, elements: Iterable[Element] = ()) -> None:
        self._graph = graph
        self._items: dict[str, Element] = {}
        for element in elements:
            self._items.setdefault(element.id, element)

    @property
    def graph(self) -> ElementGraph:
        return self._graph

    def __iter__(self) -> Iterator[Element]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Element):
            return self._items.get(item.id) is item
        return item in self._items

    def __repr__(self) -> str:
        return f"ElementSet({self.ids()!r})"

    def ids(self) -> list[str]:
        return list(self._items)

    def is_empty(self) -> bool:
        return not self._items

    # -- set algebra ---------------------------------------------------------

    def add(self, other: Iterable[Element]) -> ElementSet:
        return ElementSet(self._graph, [*self, *other])

    def subtract(self, other: Iterable[Element]) -> ElementSet:
        excluded = {element.id for element in other}
        return ElementSet(self._graph, (e for e in self if e.id not in excluded))

    def filter(self, criteria: ElementFilter) -> ElementSet:
        if isinstance(criteria, str):
            criteria = parse_selector(criteria).matches
        return ElementSet(self._graph, (e for e in self if criteria(e)))

    def nodes(self, criteria: ElementFilter | None = None) -> ElementSet:
        nodes = ElementSet(self._graph, (e for e in self if e.is_node))
        return nodes if criteria is None else nodes.filter(criteria)

    def edges(self, criteria: ElementFilter | None = None) -> ElementSet:
        edges = ElementSet(self._graph, (e for e in self if e.is_edge))
        return edges if criteria is None else edges.filter(criteria)

    def absolute_complement(self) -> ElementSet:
        """Return every element of the graph not in this collection."""
        return self._graph.elements().subtract(self)

    # -- traversal -----------------------------------------------------------

    def connected_edges(self) -> ElementSet:
        """Return the live edges incident to the nodes of this collection."""
        edges: list[Element] = []
        for node in self.nodes():
            edges.extend(self._graph.incident_edges(node.id))
        return ElementSet(self._graph, edges)

    def connected_nodes(self) -> ElementSet:
        """Return the live endpoint nodes of the edges of this collection."""
        nodes: list[Element] = []
        for edge in self.edges():
            for node_id in (edge.source, edge.target):
                node = self._graph.get(node_id) if node_id else None
                if node is not None and not node.removed:
                    nodes.append(node)
        return ElementSet(self._graph, nodes)

    # -- mutation ------------------------------------------------------------

    def add_class(self, name: str) -> ElementSet:
        self._graph.update_classes(self, add=name)
        return self

    def remove_class(self, name: str) -> ElementSet:
        self._graph.update_classes(self, remove=name)
        return self

    def set_visible(self, visible: bool) -> ElementSet:
        self._graph.update_visibility(self, visible)
        return self

    def restore(self) -> ElementSet:
        """Put removed members back into the graph."""
        return self._graph.restore(self)
