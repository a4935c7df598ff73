"""In-memory graph engine: selectors, element collections and graph snapshots."""

from __future__ import annotations

from GraphFind.graph.elements import Element, ElementSet
from GraphFind.graph.selector import Selector, SelectorError, parse_selector
from GraphFind.graph.store import ElementGraph, composition_changed, load_graph

__all__ = [
    "Element",
    "ElementGraph",
    "ElementSet",
    "Selector",
    "SelectorError",
    "composition_changed",
    "load_graph",
    "parse_selector",
]
