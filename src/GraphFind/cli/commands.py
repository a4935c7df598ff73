"""Command implementations for GraphFind CLI.

Encapsulates what each command does, separated from CLI parameter handling.
Commands return the lines to print; the runner owns logging and failures.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from GraphFind.compiler import compile_query
from GraphFind.config import AppConfig
from GraphFind.core.operands import OPERANDS
from GraphFind.core.query import Channel, QueryError
from GraphFind.core.settings import UrlParamStore
from GraphFind.graph import load_graph
from GraphFind.services import GraphFindSession, create_session
from GraphFind.utils.autocomplete import AutoComplete
from GraphFind.utils.log import log


@dataclass(slots=True)
class CompileCommand:
    """Compile one expression and describe the resulting selector."""

    config: AppConfig
    expression: str
    channel: Channel = "find"

    def execute(self) -> list[str]:
        flags = self.config.display.to_options().flags()
        result = compile_query(self.expression, flags, is_find=self.channel == "find")
        for request in result.requests:
            log.info("Expression requires %s", request.label)
        if result.error is not None:
            raise result.error
        if result.selector is None:
            return ["(empty)"]

        lines = [f"{clause.target}\t{clause.selector}" for clause in result.selector.clauses]
        lines.append(f"selector\t{result.selector.text}")
        lines.extend(f"requires\t{request.option}" for request in result.requests)
        return lines


@dataclass(slots=True)
class GraphCommand:
    """Shared set-up for commands evaluating an expression on a graph file."""

    config: AppConfig
    expression: str
    graph_path: Path
    url: str | None = None

    def _session(self) -> tuple[GraphFindSession, UrlParamStore | None]:
        params = UrlParamStore(self.url) if self.url is not None else None
        return create_session(self.config, params), params

    @staticmethod
    def _check(session: GraphFindSession, channel: Channel) -> None:
        message = session.error(channel)
        if message:
            raise QueryError(message)

    @staticmethod
    def _url_lines(params: UrlParamStore | None) -> list[str]:
        return [f"url\t{params.url}"] if params is not None else []


@dataclass(slots=True)
class FindCommand(GraphCommand):
    """Highlight elements of a graph snapshot matching a find expression."""

    def execute(self) -> list[str]:
        session, params = self._session()
        session.attach_graph(load_graph(self.graph_path))
        session.set_value("find", self.expression)
        self._check(session, "find")

        found = session.last_find.ids() if session.last_find is not None else []
        log.info("Find matched %d elements", len(found))
        return [*(f"found\t{element_id}" for element_id in found), *self._url_lines(params)]


@dataclass(slots=True)
class HideCommand(GraphCommand):
    """Hide (or compress away) elements of a graph snapshot."""

    compress: bool | None = None

    def execute(self) -> list[str]:
        session, params = self._session()
        if self.compress is not None:
            session.set_compress_on_hide(self.compress)
        session.attach_graph(load_graph(self.graph_path))
        session.set_value("hide", self.expression)
        self._check(session, "hide")

        result = session.last_hide
        if result is None:
            return self._url_lines(params)
        log.info("Hide hid %d and removed %d elements", len(result.hidden), len(result.removed))
        lines = [f"hidden\t{element_id}" for element_id in result.hidden]
        lines.extend(f"removed\t{element_id}" for element_id in result.removed)
        lines.append(f"layout\t{'yes' if result.layout_requested else 'no'}")
        lines.extend(self._url_lines(params))
        return lines


@dataclass(slots=True)
class CompleteCommand:
    """Cycle through operand completions of a partial expression."""

    partial: str
    count: int = 1

    def execute(self) -> list[str]:
        completer = AutoComplete(OPERANDS)
        completer.set_input(self.partial)
        if not completer.matches:
            log.info("No operand starts with %r", self.partial)
            return []
        lines: list[str] = []
        for _ in range(self.count):
            completed = completer.next()
            if completed is None:
                break
            lines.append(completed)
        return lines


@dataclass(slots=True)
class OptionsCommand:
    """List configured preset expressions."""

    config: AppConfig
    channel: Channel = "find"

    def execute(self) -> list[str]:
        query = self.config.find if self.channel == "find" else self.config.hide
        return [f"{idx}\t{option.description}\t{option.expression}" for idx, option in enumerate(query.options)]
