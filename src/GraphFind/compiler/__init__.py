"""Find/hide expression compiler.

Turns the user-facing query language into structural selectors.
"""

from __future__ import annotations

from GraphFind.compiler.expression import OPERANDS, UNARY_FLAGS, parse_expression
from GraphFind.compiler.normalize import prepare_value
from GraphFind.compiler.query import QueryCompiler, compile_query

__all__ = [
    "OPERANDS",
    "UNARY_FLAGS",
    "QueryCompiler",
    "compile_query",
    "parse_expression",
    "prepare_value",
]
