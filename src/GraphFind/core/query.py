"""Value types shared by the find/hide compiler, evaluators and session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence


Target = Literal["node", "edge"]
Channel = Literal["find", "hide"]

SHOW_RANK = "show_rank"
SHOW_SECURITY = "show_security"
SHOW_IDLE_NODES = "show_idle_nodes"
EDGE_LABELS = "edge_labels"


class QueryError(ValueError):
    """A find/hide expression that cannot be compiled.

    Attributes:
        message: Human-readable description shown to the user.
        kind: ``"syntax"`` for malformed expressions, ``"semantic"`` for
            unknown operands, bad values and conjunction misuse.
    """

    def __init__(self, message: str, *, kind: Literal["syntax", "semantic"] = "semantic") -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind


@dataclass(frozen=True, slots=True)
class ParsedExpression:
    """One resolved ``operand [op value]`` fragment.

    Attributes:
        target: Element group the fragment selects.
        alternatives: Data-predicate fragments (``[attr op value]...``) that are
            OR-ed together. Most expressions have exactly one.
    """

    target: Target
    alternatives: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class CompiledClause:
    """One AND clause compiled to a structural selector of a single target."""

    target: Target
    selector: str


@dataclass(frozen=True, slots=True)
class CompiledSelector:
    """OR of compiled clauses, consumed by the graph engine as ``text``."""

    clauses: tuple[CompiledClause, ...]

    @property
    def text(self) -> str:
        return ",".join(clause.selector for clause in self.clauses)

    @property
    def targets(self) -> tuple[Target, ...]:
        return tuple(clause.target for clause in self.clauses)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class DisplayFlags:
    """Read-only snapshot of the display options the compiler consults."""

    show_rank: bool = False
    show_security: bool = False
    show_idle_nodes: bool = False
    edge_labels: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class OptionRequest:
    """Request to enable a display option implied by an operand.

    Requests only ever enable an option; applying one that is already active
    is a no-op.

    Attributes:
        option: One of ``show_rank``, ``show_security``, ``show_idle_nodes`` or
            ``edge_labels``.
        label: Display name used in the user notification.
        edge_labels: Edge label modes to add when ``option`` is ``edge_labels``.
    """

    option: str
    label: str
    edge_labels: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CompileResult:
    """Outcome of compiling one find or hide input.

    Attributes:
        selector: Compiled selector, or None for an empty query or an error.
        error: The compile error, if any.
        requests: Display options to enable, returned even when ``error`` is set.
    """

    selector: CompiledSelector | None = None
    error: QueryError | None = None
    requests: Sequence[OptionRequest] = ()

    @property
    def ok(self) -> bool:
        return self.error is None
