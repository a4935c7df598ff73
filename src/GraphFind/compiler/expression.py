"""Resolution of a single find/hide expression.

An expression is ``[!] operand [op value]``. Binary operands are looked up in
``OPERANDS``, unary flags in ``UNARY_FLAGS``; both tables map the user-facing
keyword (and its aliases) to a descriptor, so resolution is a lookup plus a
small per-kind selector rule.

Operators, in detection order:
- ``!=``, ``!*=``, ``!$=``, ``!^=``: negated equality / substring / suffix / prefix
- ``>=``, ``<=``
- ``*=`` substring, ``$=`` suffix, ``^=`` prefix
- ``=``, ``>``, ``<``
- ``!``: negation of a unary flag
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, MutableSequence

from GraphFind.core.operands import (
    NODE_TYPE_ALIASES,
    EdgeAttr,
    EdgeLabelMode,
    HealthStatus,
    NodeAttr,
)
from GraphFind.core.query import (
    EDGE_LABELS,
    SHOW_IDLE_NODES,
    SHOW_RANK,
    SHOW_SECURITY,
    DisplayFlags,
    OptionRequest,
    ParsedExpression,
    QueryError,
    Target,
)


OPERATORS: tuple[str, ...] = ("!=", "!*=", "!$=", "!^=", ">=", "<=", "*=", "$=", "^=", "=", ">", "<", "!")

_ORDERING_OPS = frozenset({">", "<", ">=", "<="})
_RE_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")

OperandKind = Literal["string", "numeric", "rank", "name", "node_type"]

RANK_REQUEST = OptionRequest(SHOW_RANK, '"Rank" display option')
SECURITY_REQUEST = OptionRequest(SHOW_SECURITY, '"Security" display option')
IDLE_REQUEST = OptionRequest(SHOW_IDLE_NODES, '"Idle nodes" display option')
RESPONSE_TIME_REQUEST = OptionRequest(
    EDGE_LABELS,
    '[P95] "Response Time" edge labels',
    (EdgeLabelMode.RESPONSE_TIME_GROUP, EdgeLabelMode.RESPONSE_TIME_P95),
)
THROUGHPUT_REQUEST = OptionRequest(
    EDGE_LABELS,
    '[Request] "Throughput" edge labels',
    (EdgeLabelMode.THROUGHPUT_GROUP, EdgeLabelMode.THROUGHPUT_REQUEST),
)


@dataclass(frozen=True, slots=True)
class OperandSpec:
    """Descriptor for a binary operand."""

    target: Target
    attribute: str
    kind: OperandKind = "string"
    request: OptionRequest | None = None


@dataclass(frozen=True, slots=True)
class UnarySpec:
    """Descriptor for a unary flag: fragments for the plain and negated form."""

    target: Target
    positive: tuple[str, ...]
    negative: tuple[str, ...]
    request: OptionRequest | None = None


def _node(attribute: str, kind: OperandKind = "string", request: OptionRequest | None = None) -> OperandSpec:
    return OperandSpec("node", attribute, kind, request)


def _edge(attribute: str, kind: OperandKind = "string", request: OptionRequest | None = None) -> OperandSpec:
    return OperandSpec("edge", attribute, kind, request)


def _flag(attribute: str, target: Target = "node", request: OptionRequest | None = None) -> UnarySpec:
    return UnarySpec(target, (f"[?{attribute}]",), (f"[^{attribute}]",), request)


OPERANDS: dict[str, OperandSpec] = {
    # nodes
    "app": _node(NodeAttr.app),
    "cluster": _node(NodeAttr.cluster),
    "grpcin": _node(NodeAttr.grpc_in, "numeric"),
    "grpcout": _node(NodeAttr.grpc_out, "numeric"),
    "httpin": _node(NodeAttr.http_in, "numeric"),
    "httpout": _node(NodeAttr.http_out, "numeric"),
    "name": _node(NodeAttr.aggregate_value, "name"),
    "node": _node(NodeAttr.node_type, "node_type"),
    "ns": _node(NodeAttr.namespace),
    "namespace": _node(NodeAttr.namespace),
    "op": _node(NodeAttr.aggregate_value),
    "operation": _node(NodeAttr.aggregate_value),
    "rank": _node(NodeAttr.rank, "rank", RANK_REQUEST),
    "svc": _node(NodeAttr.service),
    "service": _node(NodeAttr.service),
    "tcpin": _node(NodeAttr.tcp_in, "numeric"),
    "tcpout": _node(NodeAttr.tcp_out, "numeric"),
    "version": _node(NodeAttr.version),
    "wl": _node(NodeAttr.workload),
    "workload": _node(NodeAttr.workload),
    # edges
    "destprincipal": _edge(EdgeAttr.dest_principal, request=SECURITY_REQUEST),
    "grpc": _edge(EdgeAttr.grpc, "numeric"),
    "grpcerr": _edge(EdgeAttr.grpc_err, "numeric"),
    "%grpcerr": _edge(EdgeAttr.grpc_percent_err, "numeric"),
    "%grpcerror": _edge(EdgeAttr.grpc_percent_err, "numeric"),
    "%grpctraffic": _edge(EdgeAttr.grpc_percent_req, "numeric"),
    "http": _edge(EdgeAttr.http, "numeric"),
    "%httperr": _edge(EdgeAttr.http_percent_err, "numeric"),
    "%httperror": _edge(EdgeAttr.http_percent_err, "numeric"),
    "%httptraffic": _edge(EdgeAttr.http_percent_req, "numeric"),
    "httptraffic": _edge(EdgeAttr.http_percent_req, "numeric"),
    "protocol": _edge(EdgeAttr.protocol),
    "rt": _edge(EdgeAttr.response_time, "numeric", RESPONSE_TIME_REQUEST),
    "responsetime": _edge(EdgeAttr.response_time, "numeric", RESPONSE_TIME_REQUEST),
    "sourceprincipal": _edge(EdgeAttr.source_principal, request=SECURITY_REQUEST),
    "tcp": _edge(EdgeAttr.tcp, "numeric"),
    "throughput": _edge(EdgeAttr.throughput, "numeric", THROUGHPUT_REQUEST),
}

_CB = _flag(NodeAttr.has_cb)
_FI = _flag(NodeAttr.has_fault_injection)
_OUTSIDE = _flag(NodeAttr.is_outside)
_RR = _flag(NodeAttr.has_request_routing)
_RTO = _flag(NodeAttr.has_request_timeout)
_SE = _flag(NodeAttr.is_service_entry)
# hasMissingSC marks a node *without* a sidecar, so the plain form is the absence check
_SC = UnarySpec("node", (f"[^{NodeAttr.has_missing_sc}]",), (f"[?{NodeAttr.has_missing_sc}]",))
_TCPTS = _flag(NodeAttr.has_tcp_traffic_shifting)
_TS = _flag(NodeAttr.has_traffic_shifting)
_ROOT = _flag(NodeAttr.is_root)
_VS = _flag(NodeAttr.has_vs)
_WE = _flag(NodeAttr.has_workload_entry)

UNARY_FLAGS: dict[str, UnarySpec] = {
    # nodes
    "cb": _CB,
    "circuitbreaker": _CB,
    "dead": _flag(NodeAttr.is_dead),
    "fi": _FI,
    "faultinjection": _FI,
    "inaccessible": _flag(NodeAttr.is_inaccessible),
    "healthy": UnarySpec(
        "node",
        (f'[{NodeAttr.health_status} = "{HealthStatus.HEALTHY}"]',),
        (
            f'[{NodeAttr.health_status} = "{HealthStatus.FAILURE}"]',
            f'[{NodeAttr.health_status} = "{HealthStatus.DEGRADED}"]',
        ),
    ),
    "idle": _flag(NodeAttr.is_idle, request=IDLE_REQUEST),
    "mirroring": _flag(NodeAttr.has_mirroring),
    "outside": _OUTSIDE,
    "outsider": _OUTSIDE,
    "rr": _RR,
    "requestrouting": _RR,
    "rto": _RTO,
    "requesttimeout": _RTO,
    "se": _SE,
    "serviceentry": _SE,
    "sc": _SC,
    "sidecar": _SC,
    "tcpts": _TCPTS,
    "tcptrafficshifting": _TCPTS,
    "ts": _TS,
    "trafficshifting": _TS,
    "trafficsource": _ROOT,
    "root": _ROOT,
    "vs": _VS,
    "virtualservice": _VS,
    "we": _WE,
    "workloadentry": _WE,
    # edges
    "mtls": UnarySpec(
        "edge",
        (f"[{EdgeAttr.is_mtls} > 0]",),
        (f"[{EdgeAttr.is_mtls} <= 0]",),
        SECURITY_REQUEST,
    ),
    "traffic": _flag(EdgeAttr.has_traffic, target="edge"),
}


def detect_operator(expression: str) -> str | None:
    """Return the first operator found in precedence order, or None."""
    for op in OPERATORS:
        if op in expression:
            return op
    return None


def is_number(value: str) -> bool:
    """Return True when ``value`` is a plain decimal number literal."""
    return bool(_RE_NUMBER.match(value.strip()))


def request_option(request: OptionRequest | None, flags: DisplayFlags, requests: MutableSequence[OptionRequest]) -> None:
    """Record ``request`` unless the option is already active or already requested."""
    if request is None or request in requests:
        return
    if request.option == EDGE_LABELS:
        active = request.edge_labels[0] in flags.edge_labels
    else:
        active = bool(getattr(flags, request.option))
    if not active:
        requests.append(request)


def parse_expression(
    expression: str,
    *,
    conjunctive: bool,
    flags: DisplayFlags,
    requests: MutableSequence[OptionRequest],
) -> ParsedExpression:
    """Resolve one expression into target and selector fragments.

    Args:
        expression: Normalized expression text.
        conjunctive: Whether the expression belongs to an AND clause.
        flags: Current display options, used to decide option requests.
        requests: Collected option requests, appended in place.

    Returns:
        Parsed expression.

    Raises:
        QueryError: If the expression is malformed or semantically invalid.
    """
    op = detect_operator(expression)
    if op is None:
        if len(expression.split()) > 1:
            raise QueryError("No valid operator found in expression", kind="syntax")
        return _parse_unary(expression.strip(), negated=False, flags=flags, requests=requests)

    field, _, value = expression.partition(op)
    if op == "!":
        return _parse_unary(value.strip(), negated=True, flags=flags, requests=requests)

    field = field.strip()
    value = _unquote(value.strip())
    operand = OPERANDS.get(field.lower())
    if operand is None:
        raise QueryError(f"Invalid operand [{field}]")
    request_option(operand.request, flags, requests)

    if operand.kind == "numeric":
        return ParsedExpression(operand.target, (numeric_selector(operand.attribute, op, value),))
    if operand.kind == "rank":
        if not is_number(value) or not 1 <= float(value) <= 100:
            raise QueryError(f"Invalid rank range [{value}]. Expected a number between 1..100")
        return ParsedExpression(operand.target, (numeric_selector(operand.attribute, op, value),))
    if operand.kind == "name":
        return _name_expression(op, value, conjunctive=conjunctive)
    if operand.kind == "node_type":
        node_type = NODE_TYPE_ALIASES.get(value.lower())
        if node_type is None:
            raise QueryError(
                f"Invalid node type [{value}]. Expected app | operation | service | unknown | workload"
            )
        return ParsedExpression(operand.target, (string_selector(operand.attribute, op, node_type),))
    return ParsedExpression(operand.target, (string_selector(operand.attribute, op, value),))


def string_selector(attribute: str, op: str, value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'[{attribute} {op} "{escaped}"]'


def numeric_selector(attribute: str, op: str, value: str) -> str:
    """Build the selector for a numeric attribute.

    Metric attributes are absent on elements where the metric does not apply,
    so equality against a non-numeric value reads as a presence test:
    ``= x`` selects elements without the metric, ``!= x`` elements with it.

    Raises:
        QueryError: For a non-numeric value with an ordering operator, or an
            operator that has no numeric meaning.
    """
    numeric = is_number(value)
    if op in _ORDERING_OPS:
        if not numeric:
            raise QueryError(f"Invalid value [{value}]. Expected a numeric value (use '.' for decimals)")
        return f"[{attribute} {op} {value}]"
    if op == "=":
        return f"[{attribute} = {value}]" if numeric else f"[!{attribute}]"
    if op == "!=":
        return f"[{attribute} != {value}]" if numeric else f"[?{attribute}]"
    raise QueryError(f"Invalid operator [{op}] for numeric condition")


def _name_expression(op: str, value: str, *, conjunctive: bool) -> ParsedExpression:
    if conjunctive:
        raise QueryError("Can not use 'AND' with 'name' operand")
    fragments = tuple(
        string_selector(attribute, op, value)
        for attribute in (NodeAttr.aggregate_value, NodeAttr.app, NodeAttr.service, NodeAttr.workload)
    )
    if op.startswith("!"):
        # matches only when no name attribute matches
        return ParsedExpression("node", ("".join(fragments),))
    return ParsedExpression("node", fragments)


def _parse_unary(
    field: str,
    *,
    negated: bool,
    flags: DisplayFlags,
    requests: MutableSequence[OptionRequest],
) -> ParsedExpression:
    unary = UNARY_FLAGS.get(field.lower())
    if unary is None:
        raise QueryError(f"Invalid Node or Edge operand [{field}]")
    request_option(unary.request, flags, requests)
    return ParsedExpression(unary.target, unary.negative if negated else unary.positive)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value
