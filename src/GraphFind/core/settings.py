"""Display options and query-parameter stores used by a find/hide session."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from GraphFind.core.query import EDGE_LABELS, DisplayFlags, OptionRequest
from GraphFind.utils.log import log

GRAPH_FIND_PARAM = "graphFind"
GRAPH_HIDE_PARAM = "graphHide"


@dataclass(frozen=True, slots=True)
class QueryPreset:
    """A named find or hide expression offered as a shortcut."""

    description: str
    expression: str


@dataclass(slots=True)
class DisplayOptions:
    """Mutable graph display settings.

    Attributes:
        show_rank: Whether node rank is computed and shown.
        show_security: Whether mTLS / principal information is shown.
        show_idle_nodes: Whether nodes without traffic are shown.
        edge_labels: Active edge label modes.
        compress_on_hide: Remove hidden elements instead of making them invisible.
        layout: Layout used when hiding changes the graph shape.
    """

    show_rank: bool = False
    show_security: bool = False
    show_idle_nodes: bool = False
    edge_labels: list[str] = field(default_factory=list)
    compress_on_hide: bool = False
    layout: str = "dagre"

    def flags(self) -> DisplayFlags:
        return DisplayFlags(
            show_rank=self.show_rank,
            show_security=self.show_security,
            show_idle_nodes=self.show_idle_nodes,
            edge_labels=tuple(self.edge_labels),
        )

    def apply(self, requests: Iterable[OptionRequest]) -> list[OptionRequest]:
        """Enable the requested options that are not active yet.

        Returns:
            Requests that actually changed a setting.
        """
        applied: list[OptionRequest] = []
        for request in requests:
            if request.option == EDGE_LABELS:
                if request.edge_labels[0] in self.edge_labels:
                    continue
                self.edge_labels.extend(label for label in request.edge_labels if label not in self.edge_labels)
            else:
                if getattr(self, request.option):
                    continue
                setattr(self, request.option, True)
            log.info("Enabling %s for graph find/hide expression", request.label)
            applied.append(request)
        return applied


class ParamStore(Protocol):
    """Persistent key/value store for the current find/hide text."""

    def get(self, name: str) -> str | None:
        raise NotImplementedError

    def set(self, name: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, name: str) -> None:
        raise NotImplementedError


class MemoryParamStore:
    """Dict-backed ``ParamStore``."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(values or {})

    def get(self, name: str) -> str | None:
        return self.values.get(name)

    def set(self, name: str, value: str) -> None:
        self.values[name] = value

    def delete(self, name: str) -> None:
        self.values.pop(name, None)


class UrlParamStore:
    """``ParamStore`` backed by the query string of a URL.

    ``url`` always reflects the current parameters; unrelated parameters keep
    their order.
    """

    def __init__(self, url: str = "") -> None:
        self._parts = urlsplit(url)
        self._params: dict[str, str] = dict(parse_qsl(self._parts.query, keep_blank_values=True))

    @property
    def url(self) -> str:
        return urlunsplit(self._parts._replace(query=urlencode(self._params)))

    def get(self, name: str) -> str | None:
        return self._params.get(name)

    def set(self, name: str, value: str) -> None:
        self._params[name] = value

    def delete(self, name: str) -> None:
        self._params.pop(name, None)
