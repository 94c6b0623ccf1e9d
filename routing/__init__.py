"""
Edge routing planner.

Turns a declared topology (services, hostnames, protocols) into the
configuration a shared load balancer needs:

- **build_rules**: ordered host-header rules plus a catch-all default.
- **compute_sans**: minimal certificate SAN set covering every hostname.
- **select_policy**: protocol-appropriate health check per service.
- **validate**: consistency checks over a built plan.
- **plan_routing**: the whole pipeline; returns a validated RoutingPlan.

Pure Python with no Pulumi imports, so the engine can be tested and reused
without a Pulumi stack.
"""

from routing.certificates import compute_sans
from routing.errors import (
    BuildError,
    CoverageGap,
    PlanRejected,
    RegistryError,
    RoutingError,
    ValidationError,
)
from routing.health import select_policies, select_policy
from routing.hostnames import HostnamePattern
from routing.models import (
    CertificateSpec,
    DefaultActionKind,
    FixedResponseAction,
    ForwardAction,
    HealthCheckPolicy,
    Protocol,
    RedirectAction,
    RoutingPlan,
    RoutingRule,
    Service,
    Topology,
)
from routing.planner import plan_routing
from routing.registry import ServiceRegistry
from routing.rules import build_rules
from routing.validator import validate

__all__ = [
    "BuildError",
    "CertificateSpec",
    "CoverageGap",
    "DefaultActionKind",
    "FixedResponseAction",
    "ForwardAction",
    "HealthCheckPolicy",
    "HostnamePattern",
    "PlanRejected",
    "Protocol",
    "RedirectAction",
    "RegistryError",
    "RoutingError",
    "RoutingPlan",
    "RoutingRule",
    "Service",
    "ServiceRegistry",
    "Topology",
    "ValidationError",
    "build_rules",
    "compute_sans",
    "plan_routing",
    "select_policies",
    "select_policy",
    "validate",
]
