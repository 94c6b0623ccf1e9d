"""
In-memory registry of the services declared for one planning run.
"""

from routing.errors import (
    DuplicateIdentifier,
    EmptyHostnameSet,
    InvalidHostname,
    InvalidPort,
    TooManyHostnames,
)
from routing.hostnames import normalize_hostname
from routing.models import Service

# A load-balancer rule holds at most five host-header values.
MAX_HOSTNAMES_PER_SERVICE = 5


class ServiceRegistry:
    """
    Ordered set of validated services.

    Args:
        base_domain: Root domain. Wildcard patterns must sit under it.
    """

    def __init__(self, base_domain: str):
        self.base_domain = normalize_hostname(base_domain)
        self._services: dict[str, Service] = {}

    def register(self, service: Service) -> None:
        """
        Validate and append a service.

        Raises:
            DuplicateIdentifier: The identifier is already registered.
            InvalidPort: The port is outside 1-65535.
            EmptyHostnameSet: The service declares no hostnames.
            TooManyHostnames: More hostnames than one rule can match.
            InvalidHostname: A wildcard lies outside the base domain.
        """
        if service.identifier in self._services:
            raise DuplicateIdentifier(service.identifier)
        if not 1 <= service.port <= 65535:
            raise InvalidPort(service.identifier, service.port)
        if not service.hostnames:
            raise EmptyHostnameSet(service.identifier)
        if len(service.hostnames) > MAX_HOSTNAMES_PER_SERVICE:
            raise TooManyHostnames(
                service.identifier, len(service.hostnames), MAX_HOSTNAMES_PER_SERVICE
            )
        for pattern in service.hostnames:
            if pattern.is_wildcard and not pattern.within(self.base_domain):
                raise InvalidHostname(
                    pattern.text,
                    f"wildcard suffix is not under {self.base_domain!r}",
                    service.identifier,
                )
        self._services[service.identifier] = service

    @property
    def services(self) -> tuple[Service, ...]:
        return tuple(self._services.values())
