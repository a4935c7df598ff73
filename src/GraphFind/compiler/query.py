"""Find/hide expression compiler.

Compiles user input into a structural selector understood by the graph engine.

Rules
- Clauses are separated by ``OR`` and compiled independently, so node and edge
  criteria may be mixed across clauses.
- Expressions inside a clause are separated by ``AND``; they must all target
  the same element group (node or edge).
- A clause's selector is the target followed by the data predicates of every
  expression (predicate adjacency is conjunction); clause selectors are joined
  with ``,`` (disjunction).
- Operands that only make sense with a display option turned on produce
  ``OptionRequest`` entries instead of toggling anything themselves.
"""

from __future__ import annotations

from GraphFind.compiler.expression import parse_expression
from GraphFind.compiler.normalize import prepare_value
from GraphFind.core.query import (
    Channel,
    CompiledClause,
    CompiledSelector,
    CompileResult,
    DisplayFlags,
    OptionRequest,
    QueryError,
    Target,
)
from GraphFind.utils.log import log


_DEFAULT_FLAGS = DisplayFlags()


def compile_query(
    value: str | None,
    flags: DisplayFlags = _DEFAULT_FLAGS,
    *,
    is_find: bool = True,
) -> CompileResult:
    """Compile a find or hide expression.

    Args:
        value: Raw input text; None or blank means "no query".
        flags: Current display options.
        is_find: Whether the text comes from the find input (log label only).

    Returns:
        Compile result. ``selector`` is None for an empty query or on error;
        ``requests`` holds the display options the expression implies.
    """
    text = prepare_value(value)
    if not text:
        return CompileResult()

    requests: list[OptionRequest] = []
    try:
        clauses = tuple(_compile_clause(clause, flags, requests) for clause in text.split(" OR "))
    except QueryError as error:
        log.debug("%s expression rejected: value=%r error=%s", _label(is_find), value, error.message)
        return CompileResult(error=error, requests=tuple(requests))

    selector = CompiledSelector(clauses)
    log.debug("%s selector=[%s]", _label(is_find), selector.text)
    return CompileResult(selector=selector, requests=tuple(requests))


def _compile_clause(clause: str, flags: DisplayFlags, requests: list[OptionRequest]) -> CompiledClause:
    expressions = clause.split(" AND ")
    conjunctive = len(expressions) > 1

    target: Target | None = None
    predicates = [""]
    for expression in expressions:
        parsed = parse_expression(expression, conjunctive=conjunctive, flags=flags, requests=requests)
        if target is None:
            target = parsed.target
        elif parsed.target != target:
            raise QueryError("Invalid expression. Can not AND node and edge criteria.")
        predicates = [prefix + alternative for prefix in predicates for alternative in parsed.alternatives]

    assert target is not None
    return CompiledClause(target=target, selector=",".join(target + p for p in predicates))


def _label(is_find: bool) -> str:
    return "Find" if is_find else "Hide"


class QueryCompiler:
    """Compiler front-end that keeps one live error message per input channel.

    A failed compile replaces the channel's message; a successful compile
    (including an empty query) clears it.
    """

    def __init__(self) -> None:
        self._errors: dict[Channel, str | None] = {"find": None, "hide": None}

    def compile(self, value: str | None, flags: DisplayFlags, *, channel: Channel) -> CompileResult:
        is_find = channel == "find"
        result = compile_query(value, flags, is_find=is_find)
        if result.error is None:
            self._errors[channel] = None
        else:
            self._errors[channel] = f"{_label(is_find)}: {result.error.message}"
        return result

    def error(self, channel: Channel) -> str | None:
        return self._errors[channel]

    def clear_error(self, channel: Channel) -> None:
        self._errors[channel] = None
