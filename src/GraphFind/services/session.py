"""Find/hide session: keeps the two query inputs, their compiled selectors and
the current graph snapshot in step.

The session is the non-visual half of a graph find/hide toolbar. It decides
*when* to compile and evaluate:

- typing only updates the input buffer, unless the text grew or shrank by more
  than one character (a paste or a browser suggestion), which confirms it;
- confirming a value (submit, programmatic set, preset option) syncs the query
  parameter store and re-evaluates against the current graph;
- a new graph snapshot re-evaluates every non-empty query.
"""

from __future__ import annotations

from typing import Sequence

from GraphFind.compiler import QueryCompiler
from GraphFind.core.operands import OPERANDS
from GraphFind.core.query import Channel, CompiledSelector
from GraphFind.core.settings import (
    GRAPH_FIND_PARAM,
    GRAPH_HIDE_PARAM,
    DisplayOptions,
    MemoryParamStore,
    ParamStore,
    QueryPreset,
)
from GraphFind.graph.elements import ElementSet
from GraphFind.graph.store import ElementGraph, composition_changed
from GraphFind.services.find import FindEvaluator
from GraphFind.services.hide import HideEvaluator, HideResult
from GraphFind.utils.autocomplete import AutoComplete
from GraphFind.utils.log import log

_TYPING_STOPS = (" ", "!")
_PARAMS: dict[Channel, str] = {"find": GRAPH_FIND_PARAM, "hide": GRAPH_HIDE_PARAM}


class GraphFindSession:
    """Coordinates compiler, evaluators, autocomplete and external stores."""

    def __init__(
        self,
        *,
        options: DisplayOptions | None = None,
        params: ParamStore | None = None,
        find_value: str = "",
        hide_value: str = "",
        find_presets: Sequence[QueryPreset] = (),
        hide_presets: Sequence[QueryPreset] = (),
    ) -> None:
        self.options = options or DisplayOptions()
        self.params: ParamStore = params if params is not None else MemoryParamStore()
        self.compiler = QueryCompiler()
        self.find_evaluator = FindEvaluator()
        self.hide_evaluator = HideEvaluator(layout=self.options.layout)
        self.graph: ElementGraph | None = None
        self.last_find: ElementSet | None = None
        self.last_hide: HideResult | None = None

        self._autocomplete: dict[Channel, AutoComplete] = {
            "find": AutoComplete(OPERANDS),
            "hide": AutoComplete(OPERANDS),
        }
        self._presets: dict[Channel, tuple[QueryPreset, ...]] = {
            "find": tuple(find_presets),
            "hide": tuple(hide_presets),
        }
        # the parameter store wins over the initial values
        self._values: dict[Channel, str] = {
            "find": self._reconcile("find", find_value),
            "hide": self._reconcile("hide", hide_value),
        }
        self._inputs: dict[Channel, str] = dict(self._values)
        self._selectors: dict[Channel, CompiledSelector | None] = {"find": None, "hide": None}

    # -- state ---------------------------------------------------------------

    def value(self, channel: Channel) -> str:
        """Return the confirmed expression of ``channel``."""
        return self._values[channel]

    def input(self, channel: Channel) -> str:
        """Return the current (possibly unconfirmed) input text of ``channel``."""
        return self._inputs[channel]

    def error(self, channel: Channel) -> str | None:
        return self.compiler.error(channel)

    def presets(self, channel: Channel) -> tuple[QueryPreset, ...]:
        return self._presets[channel]

    # -- input handling ------------------------------------------------------

    def update_input(self, channel: Channel, text: str) -> None:
        """Handle a keystroke-level change of the input text."""
        if text == "":
            self.set_value(channel, "")
            return
        diff = abs(len(text) - len(self._inputs[channel]))
        self._autocomplete[channel].set_input(text, _TYPING_STOPS)
        self._inputs[channel] = text
        self.compiler.clear_error(channel)
        if diff > 1:
            self._confirm(channel, text)

    def complete(self, channel: Channel) -> str | None:
        """Replace the input with the next autocomplete candidate."""
        completed = self._autocomplete[channel].next()
        if completed is not None:
            self._inputs[channel] = completed
            self.compiler.clear_error(channel)
        return completed

    def submit(self, channel: Channel) -> None:
        """Confirm the current input text."""
        if self._values[channel] != self._inputs[channel]:
            self._confirm(channel, self._inputs[channel])

    def set_value(self, channel: Channel, value: str) -> None:
        """Set and confirm a value programmatically (clear button, presets, resets)."""
        self._autocomplete[channel].set_input(value)
        self._inputs[channel] = value
        self.compiler.clear_error(channel)
        self._confirm(channel, value)

    def select_preset(self, channel: Channel, index: int) -> QueryPreset:
        """Apply the preset expression at ``index``.

        Raises:
            IndexError: If there is no such preset.
        """
        preset = self._presets[channel][index]
        self.set_value(channel, preset.expression)
        return preset

    # -- graph lifecycle -----------------------------------------------------

    def attach_graph(self, graph: ElementGraph, *, elements_changed: bool | None = None) -> None:
        """Take a new graph snapshot and re-evaluate the active queries.

        Args:
            graph: The new snapshot.
            elements_changed: Whether element membership changed; computed by
                comparing with the previous snapshot when omitted.
        """
        previous = self.graph
        graph_changed = graph is not previous
        if elements_changed is None:
            elements_changed = composition_changed(previous, graph)
        self.graph = graph

        if self._values["find"]:
            self._run_find()
        if self._values["hide"]:
            self._run_hide(
                graph_changed=graph_changed,
                elements_changed=graph_changed and elements_changed,
            )

    def detach_graph(self) -> None:
        """Forget the current snapshot; hide state pointing into it is dropped."""
        self.graph = None
        self.last_find = None
        self.last_hide = None
        self.hide_evaluator.release()

    def set_compress_on_hide(self, compress: bool) -> None:
        """Switch between soft hide and compress (removal) mode."""
        if self.options.compress_on_hide == compress:
            return
        self.options.compress_on_hide = compress
        if self.graph is not None and self._values["hide"]:
            self._run_hide(compress_changed=True)

    # -- evaluation ----------------------------------------------------------

    def _reconcile(self, channel: Channel, value: str) -> str:
        stored = self.params.get(_PARAMS[channel])
        if stored:
            return stored
        if value:
            self.params.set(_PARAMS[channel], value)
        return value

    def _confirm(self, channel: Channel, value: str) -> None:
        if self._values[channel] == value:
            return
        self._values[channel] = value
        if value:
            self.params.set(_PARAMS[channel], value)
        else:
            self.params.delete(_PARAMS[channel])

        if self.graph is None:
            return
        if channel == "find":
            self._run_find()
        else:
            self._run_hide(hide_changed=True)

    def _compile(self, channel: Channel) -> CompiledSelector | None:
        result = self.compiler.compile(self._values[channel], self.options.flags(), channel=channel)
        self.options.apply(result.requests)
        if result.error is not None:
            # keep evaluating with the last valid selector
            log.warning("%s", self.compiler.error(channel))
            return self._selectors[channel]
        self._selectors[channel] = result.selector
        return result.selector

    def _run_find(self) -> None:
        assert self.graph is not None
        self.last_find = self.find_evaluator.apply_find(self.graph, self._compile("find"))

    def _run_hide(
        self,
        *,
        graph_changed: bool = False,
        hide_changed: bool = False,
        compress_changed: bool = False,
        elements_changed: bool = False,
    ) -> None:
        assert self.graph is not None
        self.last_hide = self.hide_evaluator.apply_hide(
            self.graph,
            self._compile("hide"),
            graph_changed=graph_changed,
            compress=self.options.compress_on_hide,
            compress_changed=compress_changed,
            hide_changed=hide_changed,
            elements_changed=elements_changed,
            layout=self.options.layout,
        )
