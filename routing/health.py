"""
Health-check policy selection keyed on a service's wire protocol.

Websocket backends answer a bare GET with 400 because they expect an upgrade.
Their policy counts 400 as alive and probes at the platform's longest interval
so expected probe failures do not flood the logs.
"""

from dataclasses import replace
from typing import Iterable, Mapping

from routing.errors import UnsupportedProtocol
from routing.models import HealthCheckPolicy, Protocol, Service, ServiceHealthCheck

# Longest probe interval the load balancer accepts.
MAX_PROBE_INTERVAL_SECONDS = 300

DEFAULT_INTERVAL_SECONDS = 30
DEFAULT_TIMEOUT_SECONDS = 5
GRAPHQL_HEALTH_PATH = "/.well-known/apollo/server-health"

_DEFAULTS: dict[Protocol, HealthCheckPolicy] = {
    Protocol.HTTP: HealthCheckPolicy(
        protocol=Protocol.HTTP.value,
        healthy_codes=frozenset({200}),
        path="/",
        interval_seconds=DEFAULT_INTERVAL_SECONDS,
        timeout_seconds=DEFAULT_TIMEOUT_SECONDS,
    ),
    Protocol.GRAPHQL_HTTP: HealthCheckPolicy(
        protocol=Protocol.GRAPHQL_HTTP.value,
        healthy_codes=frozenset({200}),
        path=GRAPHQL_HEALTH_PATH,
        interval_seconds=DEFAULT_INTERVAL_SECONDS,
        timeout_seconds=DEFAULT_TIMEOUT_SECONDS,
    ),
    Protocol.WEBSOCKET: HealthCheckPolicy(
        protocol=Protocol.WEBSOCKET.value,
        healthy_codes=frozenset({200, 400}),
        path="/",
        interval_seconds=MAX_PROBE_INTERVAL_SECONDS,
        timeout_seconds=DEFAULT_TIMEOUT_SECONDS,
    ),
}


def select_policy(
    service: Service,
    override: HealthCheckPolicy | None = None,
) -> HealthCheckPolicy:
    """
    Return the health-check policy for a service.

    Args:
        service: Registered service.
        override: Explicit policy; used as-is when given. Required for
            protocols without a built-in policy.

    Raises:
        UnsupportedProtocol: The protocol is unknown and no override was given.
    """
    if override is not None:
        return override
    try:
        policy = _DEFAULTS[Protocol(service.protocol)]
    except ValueError:
        raise UnsupportedProtocol(service.identifier, service.protocol) from None
    if service.health_check_path:
        return replace(policy, path=service.health_check_path)
    return policy


def select_policies(
    services: Iterable[Service],
    overrides: Mapping[str, HealthCheckPolicy] | None = None,
) -> tuple[ServiceHealthCheck, ...]:
    """One policy per service, in the order the services are given."""
    overrides = overrides or {}
    return tuple(
        ServiceHealthCheck(s.identifier, select_policy(s, overrides.get(s.identifier)))
        for s in services
    )
