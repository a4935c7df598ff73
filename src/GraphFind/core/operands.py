"""Operand vocabulary and graph attribute keys.

The vocabulary is closed: these are the only keywords a find/hide expression
may start with (aliases such as ``svc`` or ``rt`` are resolved by the compiler
but are not offered by autocomplete).

Attribute names mirror the element data keys produced by the service graph
backend, e.g. a node's ``httpIn`` rate or an edge's ``isMTLS`` percentage.
"""

from __future__ import annotations

from typing import Final


OPERANDS: Final[tuple[str, ...]] = (
    "%grpcerr",
    "%grpctraffic",
    "%httperr",
    "%httptraffic",
    "app",
    "circuitbreaker",
    "cluster",
    "destprincipal",
    "faultinjection",
    "grpc",
    "grpcerr",
    "grpcin",
    "grpcout",
    "healthy",
    "http",
    "httpin",
    "httpout",
    "idle",
    "mirroring",
    "mtls",
    "name",
    "namespace",
    "node",
    "operation",
    "outside",
    "protocol",
    "rank",
    "requestrouting",
    "requesttimeout",
    "responsetime",
    "service",
    "serviceentry",
    "sidecar",
    "sourceprincipal",
    "tcp",
    "tcptrafficshifting",
    "throughput",
    "traffic",
    "trafficshifting",
    "trafficsource",
    "version",
    "virtualservice",
    "tcpin",
    "tcpout",
    "workload",
    "workloadentry",
)


class NodeAttr:
    """Data keys carried by graph nodes."""

    aggregate_value = "aggregateValue"
    app = "app"
    cluster = "cluster"
    grpc_in = "grpcIn"
    grpc_out = "grpcOut"
    has_cb = "hasCB"
    has_fault_injection = "hasFaultInjection"
    has_mirroring = "hasMirroring"
    has_missing_sc = "hasMissingSC"
    has_request_routing = "hasRequestRouting"
    has_request_timeout = "hasRequestTimeout"
    has_tcp_traffic_shifting = "hasTCPTrafficShifting"
    has_traffic_shifting = "hasTrafficShifting"
    has_vs = "hasVS"
    has_workload_entry = "hasWorkloadEntry"
    health_status = "healthStatus"
    http_in = "httpIn"
    http_out = "httpOut"
    is_box = "isBox"
    is_dead = "isDead"
    is_idle = "isIdle"
    is_inaccessible = "isInaccessible"
    is_outside = "isOutside"
    is_root = "isRoot"
    is_service_entry = "isServiceEntry"
    namespace = "namespace"
    node_type = "nodeType"
    rank = "rank"
    service = "service"
    tcp_in = "tcpIn"
    tcp_out = "tcpOut"
    version = "version"
    workload = "workload"


class EdgeAttr:
    """Data keys carried by graph edges."""

    dest_principal = "destPrincipal"
    grpc = "grpc"
    grpc_err = "grpcErr"
    grpc_percent_err = "grpcPercentErr"
    grpc_percent_req = "grpcPercentReq"
    has_traffic = "hasTraffic"
    http = "http"
    http_percent_err = "httpPercentErr"
    http_percent_req = "httpPercentReq"
    is_mtls = "isMTLS"
    protocol = "protocol"
    response_time = "responseTime"
    source_principal = "sourcePrincipal"
    tcp = "tcp"
    throughput = "throughput"


class NodeType:
    """Values of the ``nodeType`` node attribute."""

    AGGREGATE = "aggregate"
    APP = "app"
    BOX = "box"
    SERVICE = "service"
    UNKNOWN = "unknown"
    WORKLOAD = "workload"


# user-facing alias -> nodeType value
NODE_TYPE_ALIASES: Final[dict[str, str]] = {
    "app": NodeType.APP,
    "op": NodeType.AGGREGATE,
    "operation": NodeType.AGGREGATE,
    NodeType.AGGREGATE: NodeType.AGGREGATE,
    "svc": NodeType.SERVICE,
    NodeType.SERVICE: NodeType.SERVICE,
    "wl": NodeType.WORKLOAD,
    NodeType.WORKLOAD: NodeType.WORKLOAD,
    NodeType.UNKNOWN: NodeType.UNKNOWN,
}


class HealthStatus:
    """Values of the ``healthStatus`` node attribute."""

    HEALTHY = "Healthy"
    DEGRADED = "Degraded"
    FAILURE = "Failure"


class EdgeLabelMode:
    """Edge label display modes understood by the graph renderer."""

    RESPONSE_TIME_GROUP = "responseTime"
    RESPONSE_TIME_AVERAGE = "avg"
    RESPONSE_TIME_P50 = "rtP50"
    RESPONSE_TIME_P95 = "rtP95"
    RESPONSE_TIME_P99 = "rtP99"
    THROUGHPUT_GROUP = "throughput"
    THROUGHPUT_REQUEST = "throughputRequest"
    THROUGHPUT_RESPONSE = "throughputResponse"
    TRAFFIC_DISTRIBUTION = "trafficDistribution"
    TRAFFIC_RATE = "trafficRate"


EDGE_LABEL_MODES: Final[frozenset[str]] = frozenset(
    value for key, value in vars(EdgeLabelMode).items() if key.isupper()
)

# class set on elements matched by a find expression
FIND_CLASS: Final[str] = "find"
