"""Structural selector parsing and matching.

Supports the Cytoscape selector subset produced by the find/hide compiler and
used by the evaluators:

- groups separated by ``,`` (disjunction)
- optional element group: ``node``, ``edge`` or ``*``
- data predicates: ``[attr]`` defined, ``[^attr]`` undefined, ``[?attr]``
  truthy, ``[!attr]`` falsy, ``[attr op value]``
- class filters: ``.find``

Comparison operators are ``= != > < >= <= *= ^= $=`` and the negated string
forms ``!*= !^= !$=``. Values are double-quoted strings (``\\"`` escapes) or
numbers. Negated operators match elements that lack the attribute.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from GraphFind.graph.elements import Element


_RE_GROUP_TYPE = re.compile(r"\s*(node|edge|\*)")
_RE_CLASS = re.compile(r"\.([A-Za-z_][\w-]*)")
_RE_FLAG = re.compile(r"^\s*([?!^]?)\s*([A-Za-z_][\w.-]*)\s*$")
_RE_COMPARE = re.compile(
    r"^\s*([A-Za-z_][\w.-]*)\s*(!\*=|!\^=|!\$=|!=|>=|<=|\*=|\^=|\$=|=|>|<)\s*(.+?)\s*$",
    re.DOTALL,
)
_RE_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")

_MISSING = object()

PredicateKind = Literal["defined", "undefined", "truthy", "falsy", "compare"]
_FLAG_KINDS: dict[str, PredicateKind] = {"": "defined", "^": "undefined", "?": "truthy", "!": "falsy"}


class SelectorError(ValueError):
    """Raised for malformed selector text."""


@dataclass(frozen=True, slots=True)
class Predicate:
    kind: PredicateKind
    attribute: str
    op: str = ""
    value: str | float | None = None

    def matches(self, data: dict[str, Any]) -> bool:
        raw = data.get(self.attribute, _MISSING)
        present = raw is not _MISSING and raw is not None
        if self.kind == "defined":
            return present
        if self.kind == "undefined":
            return not present
        if self.kind == "truthy":
            return present and bool(raw)
        if self.kind == "falsy":
            return not (present and bool(raw))

        if self.op.startswith("!"):
            return not _compare(raw, self.op[1:], self.value, present)
        return _compare(raw, self.op, self.value, present)


@dataclass(frozen=True, slots=True)
class SelectorGroup:
    group: Literal["nodes", "edges"] | None
    predicates: tuple[Predicate, ...] = ()
    classes: tuple[str, ...] = ()

    def matches(self, element: Element) -> bool:
        if self.group is not None and element.group != self.group:
            return False
        if any(name not in element.classes for name in self.classes):
            return False
        return all(predicate.matches(element.data) for predicate in self.predicates)


@dataclass(frozen=True, slots=True)
class Selector:
    text: str
    groups: tuple[SelectorGroup, ...]

    def matches(self, element: Element) -> bool:
        return any(group.matches(element) for group in self.groups)


@lru_cache(maxsize=256)
def parse_selector(text: str) -> Selector:
    """Parse selector text.

    Args:
        text: Selector such as ``node[app = "reviews"][?hasCB],edge[http > 5]``.

    Returns:
        Parsed selector.

    Raises:
        SelectorError: If the text is empty or malformed.
    """
    if not text or not text.strip():
        raise SelectorError("Selector must not be empty")
    groups = tuple(_parse_group(part, text) for part in _split_groups(text))
    return Selector(text=text, groups=groups)


def _split_groups(text: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    quoted = False
    escaped = False
    for char in text:
        if quoted:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                quoted = False
            continue
        if char == '"':
            quoted = True
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        elif char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    if quoted or depth != 0:
        raise SelectorError(f"Unbalanced selector: {text}")
    parts.append("".join(current))
    return parts


def _parse_group(part: str, text: str) -> SelectorGroup:
    if not part.strip():
        raise SelectorError(f"Empty selector group in: {text}")

    pos = 0
    group: Literal["nodes", "edges"] | None = None
    type_match = _RE_GROUP_TYPE.match(part)
    if type_match:
        kind = type_match.group(1)
        group = "nodes" if kind == "node" else "edges" if kind == "edge" else None
        pos = type_match.end()

    predicates: list[Predicate] = []
    classes: list[str] = []
    while pos < len(part):
        char = part[pos]
        if char.isspace():
            pos += 1
        elif char == "[":
            end = _bracket_end(part, pos)
            predicates.append(_parse_predicate(part[pos + 1 : end], text))
            pos = end + 1
        elif char == ".":
            class_match = _RE_CLASS.match(part, pos)
            if not class_match:
                raise SelectorError(f"Invalid class filter in: {text}")
            classes.append(class_match.group(1))
            pos = class_match.end()
        else:
            raise SelectorError(f"Unexpected '{char}' in selector: {text}")

    return SelectorGroup(group=group, predicates=tuple(predicates), classes=tuple(classes))


def _bracket_end(part: str, start: int) -> int:
    quoted = False
    escaped = False
    for pos in range(start + 1, len(part)):
        char = part[pos]
        if quoted:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                quoted = False
        elif char == '"':
            quoted = True
        elif char == "]":
            return pos
    raise SelectorError(f"Unterminated predicate in selector: {part}")


def _parse_predicate(body: str, text: str) -> Predicate:
    flag_match = _RE_FLAG.match(body)
    if flag_match:
        return Predicate(kind=_FLAG_KINDS[flag_match.group(1)], attribute=flag_match.group(2))

    compare_match = _RE_COMPARE.match(body)
    if not compare_match:
        raise SelectorError(f"Invalid predicate [{body}] in selector: {text}")
    attribute, op, raw_value = compare_match.groups()
    return Predicate(kind="compare", attribute=attribute, op=op, value=_parse_value(raw_value, text))


def _parse_value(raw: str, text: str) -> str | float:
    if len(raw) >= 2 and raw[0] == '"' and raw[-1] == '"':
        return re.sub(r"\\(.)", r"\1", raw[1:-1], flags=re.DOTALL)
    if _RE_NUMBER.match(raw):
        return float(raw)
    raise SelectorError(f"Invalid value {raw} in selector: {text}")


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and _RE_NUMBER.match(value.strip()):
        return float(value)
    return None


def _compare(raw: Any, op: str, expected: str | float | None, present: bool) -> bool:
    if not present:
        return False

    if op in ("*=", "^=", "$="):
        actual = str(raw)
        needle = str(expected)
        if op == "*=":
            return needle in actual
        if op == "^=":
            return actual.startswith(needle)
        return actual.endswith(needle)

    if isinstance(expected, float):
        left: Any = _as_number(raw)
        right: Any = expected
        if left is None:
            return False
    else:
        left = raw if isinstance(raw, str) else _stringify(raw)
        right = expected

    if op == "=":
        return left == right
    if op == ">":
        return left > right
    if op == "<":
        return left < right
    if op == ">=":
        return left >= right
    if op == "<=":
        return left <= right
    raise SelectorError(f"Unsupported operator: {op}")


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
