"""
Immutable values passed through the planning pipeline.

A ``Topology`` goes in, a ``RoutingPlan`` comes out. Nothing here is mutated
after construction, so a plan handed to the provisioning layer is exactly the
plan that was validated.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from routing.errors import InvalidServiceDefinition
from routing.hostnames import HostnamePattern


class Protocol(str, Enum):
    HTTP = "http"
    WEBSOCKET = "websocket"
    GRAPHQL_HTTP = "graphql-http"


class DefaultActionKind(str, Enum):
    FIXED_RESPONSE = "fixed-response"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class Service:
    """
    A backend service declared in the topology.

    Attributes:
        identifier: Unique name, also used to name target groups.
        port: Port the service listens on inside its container.
        protocol: Lowercase wire protocol name ("http", "websocket",
            "graphql-http"). Kept as a string so unknown protocols reach the
            health-check selector, which is where they are rejected.
        hostnames: Patterns the service answers on, in declared order.
        priority_hint: Optional ordering hint; lower values are evaluated
            first and hinted services precede unhinted ones.
        health_check_path: Optional probe path replacing the protocol default.
    """

    identifier: str
    port: int
    protocol: str
    hostnames: tuple[HostnamePattern, ...]
    priority_hint: int | None = None
    health_check_path: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Service":
        """
        Build a Service from a config mapping.

        Expected keys: ``id``, ``port``, ``protocol``, ``hostnames`` and the
        optional ``priority`` and ``health_check_path``.
        """
        identifier = data.get("id")
        if not isinstance(identifier, str) or not identifier.strip():
            raise InvalidServiceDefinition(f"service entry {dict(data)!r} has no 'id'")
        identifier = identifier.strip()

        try:
            port = int(data["port"])
        except (KeyError, TypeError, ValueError):
            raise InvalidServiceDefinition(
                f"service {identifier!r} needs an integer 'port'", identifier
            ) from None

        hostnames = data.get("hostnames", [])
        if isinstance(hostnames, str):
            hostnames = [hostnames]
        if not isinstance(hostnames, (list, tuple)) or not all(
            isinstance(h, str) for h in hostnames
        ):
            raise InvalidServiceDefinition(
                f"service {identifier!r} needs 'hostnames' as a list of strings", identifier
            )

        priority = data.get("priority")
        if priority is not None:
            try:
                priority = int(priority)
            except (TypeError, ValueError):
                raise InvalidServiceDefinition(
                    f"service {identifier!r} needs an integer 'priority'", identifier
                ) from None

        return cls(
            identifier=identifier,
            port=port,
            protocol=str(data.get("protocol", Protocol.HTTP.value)).strip().lower(),
            hostnames=tuple(HostnamePattern.parse(h) for h in hostnames),
            priority_hint=priority,
            health_check_path=data.get("health_check_path"),
        )

    @property
    def first_hostname(self) -> HostnamePattern:
        return self.hostnames[0]


@dataclass(frozen=True)
class ForwardAction:
    service_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "forward", "service": self.service_id}


@dataclass(frozen=True)
class FixedResponseAction:
    status_code: int = 404

    def to_dict(self) -> dict[str, Any]:
        return {"type": "fixed-response", "status_code": self.status_code}


@dataclass(frozen=True)
class RedirectAction:
    protocol: str = "HTTPS"
    port: int = 443
    host: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": "redirect",
            "protocol": self.protocol,
            "port": self.port,
        }
        if self.host:
            data["host"] = self.host
        return data


RuleAction = ForwardAction | FixedResponseAction | RedirectAction


@dataclass(frozen=True)
class RoutingRule:
    """
    One (priority, host match, action) entry, evaluated first-match-wins.

    An empty ``hostnames`` tuple matches every host; that is the default rule.
    """

    priority: int
    hostnames: tuple[HostnamePattern, ...]
    action: RuleAction

    @property
    def is_default(self) -> bool:
        return not self.hostnames

    @property
    def service_id(self) -> str | None:
        return self.action.service_id if isinstance(self.action, ForwardAction) else None

    def matches(self, host: str) -> bool:
        return self.is_default or any(p.matches(host) for p in self.hostnames)

    def to_dict(self) -> dict[str, Any]:
        return {
            "priority": self.priority,
            "hostnames": [p.text for p in self.hostnames],
            "action": self.action.to_dict(),
        }


@dataclass(frozen=True)
class HealthCheckPolicy:
    """
    How the load balancer decides a target may receive traffic.

    Attributes:
        protocol: Protocol the policy was selected for.
        healthy_codes: HTTP status codes counted as a successful probe.
        path: Probe path.
        interval_seconds: Seconds between probes.
        timeout_seconds: Seconds before a probe counts as failed.
        healthy_threshold: Consecutive successes before a target is healthy.
        unhealthy_threshold: Consecutive failures before it is unhealthy.
    """

    protocol: str
    healthy_codes: frozenset[int]
    path: str
    interval_seconds: int
    timeout_seconds: int
    healthy_threshold: int = 5
    unhealthy_threshold: int = 2

    def is_healthy(self, status_code: int) -> bool:
        return status_code in self.healthy_codes

    @property
    def matcher(self) -> str:
        """Success codes in load-balancer matcher syntax, e.g. "200,400"."""
        return ",".join(str(code) for code in sorted(self.healthy_codes))

    def to_dict(self) -> dict[str, Any]:
        return {
            "protocol": self.protocol,
            "healthy_codes": sorted(self.healthy_codes),
            "path": self.path,
            "interval_seconds": self.interval_seconds,
            "timeout_seconds": self.timeout_seconds,
            "healthy_threshold": self.healthy_threshold,
            "unhealthy_threshold": self.unhealthy_threshold,
        }


@dataclass(frozen=True)
class ServiceHealthCheck:
    service_id: str
    policy: HealthCheckPolicy


@dataclass(frozen=True)
class CertificateSpec:
    """Primary domain plus the SAN patterns the certificate is issued for."""

    primary_domain: str
    sans: tuple[HostnamePattern, ...]

    def covers(self, pattern: HostnamePattern) -> bool:
        return any(san.covers(pattern) for san in self.sans)

    @property
    def subject_alternative_names(self) -> list[str]:
        return [san.text for san in self.sans]

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary_domain": self.primary_domain,
            "sans": self.subject_alternative_names,
        }


@dataclass(frozen=True)
class Topology:
    """
    Declared input of one planning run.

    Attributes:
        base_domain: Root domain; primary certificate domain and the domain
            every wildcard must live under.
        services: Services in declared order.
        default_action: What the catch-all rule does.
        default_status_code: Status of the fixed-response default.
        health_check_overrides: Explicit policies keyed by service id. Needed
            for services whose protocol has no built-in policy.
    """

    base_domain: str
    services: tuple[Service, ...]
    default_action: DefaultActionKind = DefaultActionKind.FIXED_RESPONSE
    default_status_code: int = 404
    health_check_overrides: Mapping[str, HealthCheckPolicy] = field(default_factory=dict)

    def default_rule_action(self) -> FixedResponseAction | RedirectAction:
        if self.default_action is DefaultActionKind.REDIRECT:
            return RedirectAction(host=self.base_domain)
        return FixedResponseAction(self.default_status_code)


@dataclass(frozen=True)
class RoutingPlan:
    """
    Finalized output of a planning run, consumed read-only by provisioning.

    Attributes:
        services: Registered services in declared order.
        rules: Rules sorted by priority; the default rule is last.
        certificate: Certificate request covering every rule hostname.
        health_checks: One entry per service, in declared order.
        idle_timeout_seconds: Load-balancer idle timeout suited to the
            services' protocols.
    """

    services: tuple[Service, ...]
    rules: tuple[RoutingRule, ...]
    certificate: CertificateSpec
    health_checks: tuple[ServiceHealthCheck, ...]
    idle_timeout_seconds: int = 60

    @property
    def specific_rules(self) -> tuple[RoutingRule, ...]:
        return tuple(rule for rule in self.rules if not rule.is_default)

    @property
    def default_rule(self) -> RoutingRule | None:
        return next((rule for rule in self.rules if rule.is_default), None)

    def health_check_for(self, identifier: str) -> HealthCheckPolicy | None:
        return next(
            (hc.policy for hc in self.health_checks if hc.service_id == identifier),
            None,
        )

    def resolve(self, host: str) -> RoutingRule | None:
        """Rule the load balancer would apply to a request for ``host``."""
        for rule in sorted(self.rules, key=lambda r: r.priority):
            if rule.matches(host):
                return rule
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rules": [rule.to_dict() for rule in self.rules],
            "certificate": self.certificate.to_dict(),
            "health_checks": {
                hc.service_id: hc.policy.to_dict()
                for hc in sorted(self.health_checks, key=lambda hc: hc.service_id)
            },
            "idle_timeout_seconds": self.idle_timeout_seconds,
        }
