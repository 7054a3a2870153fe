"""
Prometheus metrics for guest access, unlock dispatch and webhook ingestion.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Metric Types:
    - Counter: Cumulative metrics that only increase (e.g., total unlock requests)
    - Histogram: Observations bucketed by value (e.g., agent latency)

Example:
    >>> from str_access.metrics import unlock_requests
    >>> unlock_requests.labels(result="stub-ok").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Guest Metrics
# =============================================================================

reservation_lookups = Counter(
    "str_access_reservation_lookups_total",
    "Reservation lookups by access code",
    ["status"],
)
"""
Counter for reservation lookups.

Labels:
    status: found, not_found
"""

unlock_requests = Counter(
    "str_access_unlock_requests_total",
    "Unlock requests by outcome",
    ["result"],
)
"""
Counter for unlock requests.

Labels:
    result: stub-ok, agent-ok, agent-error, agent-unreachable, blocked-not-active,
            not-found, invalid
"""

# =============================================================================
# Agent Metrics
# =============================================================================

agent_latency = Histogram(
    "str_access_agent_latency_seconds",
    "Access agent unlock call latency in seconds",
    ["result"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 6.0, 10.0, float("inf")),
)
"""
Histogram for access agent call latency.

Labels:
    result: agent-ok (or agent-supplied result), agent-error, agent-unreachable

Buckets: 0.1s .. 6s (dispatch timeout), 10s, +Inf
"""

# =============================================================================
# Webhook Metrics
# =============================================================================

webhooks_received = Counter(
    "str_access_webhooks_received_total",
    "Hospitable webhooks received",
    ["status"],
)
"""
Counter for webhook deliveries.

Labels:
    status: accepted, invalid_signature, invalid_json, store_unavailable
"""
