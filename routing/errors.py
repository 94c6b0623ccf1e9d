"""
Error taxonomy for the routing planner.

Registry, coverage and build errors are raised: they mean the topology itself
is ill-formed and nothing downstream is worth computing. Validation problems
are independent facts about a built plan, so they are returned as
``ValidationError`` records and raised together in a single ``PlanRejected``.
"""

from dataclasses import dataclass


class RoutingError(Exception):
    """Base class for every planning failure."""


class RegistryError(RoutingError):
    """A service definition is malformed."""


class InvalidServiceDefinition(RegistryError):
    def __init__(self, message: str, service_id: str | None = None):
        super().__init__(message)
        self.service_id = service_id


class DuplicateIdentifier(RegistryError):
    def __init__(self, service_id: str):
        super().__init__(f"service {service_id!r} is declared more than once")
        self.service_id = service_id


class InvalidPort(RegistryError):
    def __init__(self, service_id: str, port: int):
        super().__init__(
            f"service {service_id!r} listens on port {port}, expected 1-65535"
        )
        self.service_id = service_id
        self.port = port


class EmptyHostnameSet(RegistryError):
    def __init__(self, service_id: str):
        super().__init__(f"service {service_id!r} declares no hostnames")
        self.service_id = service_id


class TooManyHostnames(RegistryError):
    def __init__(self, service_id: str, count: int, limit: int):
        super().__init__(
            f"service {service_id!r} declares {count} hostnames, "
            f"a single rule accepts at most {limit}"
        )
        self.service_id = service_id
        self.count = count
        self.limit = limit


class InvalidHostname(RegistryError):
    def __init__(self, hostname: str, reason: str, service_id: str | None = None):
        owner = f" (service {service_id!r})" if service_id else ""
        super().__init__(f"invalid hostname {hostname!r}{owner}: {reason}")
        self.hostname = hostname
        self.reason = reason
        self.service_id = service_id


class UnsupportedProtocol(RoutingError):
    def __init__(self, service_id: str, protocol: str):
        super().__init__(
            f"service {service_id!r} uses protocol {protocol!r} which has no "
            "built-in health check; supply an explicit override policy"
        )
        self.service_id = service_id
        self.protocol = protocol


class CoverageGap(RoutingError):
    """Certificate binding for a hostname is ambiguous."""

    def __init__(self, hostname: str, services: tuple[str, ...], protocols: tuple[str, ...]):
        super().__init__(
            f"hostname {hostname!r} is declared by services "
            f"{', '.join(services)} with different protocols "
            f"({', '.join(protocols)})"
        )
        self.hostname = hostname
        self.services = services
        self.protocols = protocols


class BuildError(RoutingError):
    """Rules cannot be derived from the registered services."""


class DuplicateHostname(BuildError):
    def __init__(self, hostname: str, first: str, second: str):
        super().__init__(
            f"hostname {hostname!r} is claimed by both {first!r} and {second!r}"
        )
        self.hostname = hostname
        self.services = (first, second)


class ShadowedRule(BuildError):
    def __init__(self, hostname: str, wildcard: str, exact_service: str, wildcard_service: str):
        super().__init__(
            f"wildcard {wildcard!r} of service {wildcard_service!r} would be "
            f"evaluated before {hostname!r} of service {exact_service!r}; "
            f"give {exact_service!r} a lower priority hint than {wildcard_service!r}"
        )
        self.hostname = hostname
        self.wildcard = wildcard
        self.services = (exact_service, wildcard_service)


class PriorityExhausted(BuildError):
    def __init__(self, service_count: int, limit: int):
        super().__init__(
            f"{service_count} services do not fit below the default rule "
            f"priority {limit}"
        )
        self.service_count = service_count
        self.limit = limit


@dataclass(frozen=True)
class ValidationError:
    """
    One consistency problem found in a built plan.

    Attributes:
        code: Stable machine-readable kind, e.g. "duplicate-priority".
        message: Human-readable description naming everything involved.
        services: Service identifiers involved, in rule order.
        hostnames: Hostname patterns involved.
        priorities: Rule priorities involved.
    """

    code: str
    message: str
    services: tuple[str, ...] = ()
    hostnames: tuple[str, ...] = ()
    priorities: tuple[int, ...] = ()

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class PlanRejected(RoutingError):
    """The plan was built but failed validation."""

    def __init__(self, errors: list[ValidationError]):
        lines = "\n".join(f"  - {error}" for error in errors)
        super().__init__(f"routing plan failed {len(errors)} check(s):\n{lines}")
        self.errors = tuple(errors)
