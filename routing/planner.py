"""
Planning pipeline: Topology in, validated RoutingPlan out.

Registry, coverage and build errors propagate as soon as they occur.
Validation problems are collected and raised together as ``PlanRejected``.
A plan is only ever returned after it passed validation.
"""

from routing.certificates import compute_sans
from routing.errors import PlanRejected
from routing.health import select_policies
from routing.models import Protocol, RoutingPlan, Service, Topology
from routing.registry import ServiceRegistry
from routing.rules import build_rules
from routing.validator import validate

DEFAULT_IDLE_TIMEOUT_SECONDS = 60
# Long-lived websocket connections are dropped by the load balancer once idle
# for longer than this.
WEBSOCKET_IDLE_TIMEOUT_SECONDS = 3600


def idle_timeout_for(services: tuple[Service, ...]) -> int:
    if any(s.protocol == Protocol.WEBSOCKET.value for s in services):
        return WEBSOCKET_IDLE_TIMEOUT_SECONDS
    return DEFAULT_IDLE_TIMEOUT_SECONDS


def plan_routing(topology: Topology) -> RoutingPlan:
    """
    Run one planning pass over a topology.

    Raises:
        RegistryError: A service definition is malformed.
        UnsupportedProtocol: A protocol has neither a built-in nor an explicit
            health-check policy.
        CoverageGap: A hostname is declared under conflicting protocols.
        BuildError: Rules conflict (duplicate or shadowed hostnames).
        PlanRejected: The built plan failed one or more checks; all failures
            are attached.
    """
    registry = ServiceRegistry(topology.base_domain)
    for service in topology.services:
        registry.register(service)
    services = registry.services

    health_checks = select_policies(services, topology.health_check_overrides)
    certificate = compute_sans(services, registry.base_domain)
    rules = build_rules(services, topology.default_rule_action())

    plan = RoutingPlan(
        services=services,
        rules=tuple(rules),
        certificate=certificate,
        health_checks=health_checks,
        idle_timeout_seconds=idle_timeout_for(services),
    )
    errors = validate(plan)
    if errors:
        raise PlanRejected(errors)
    return plan
