"""
Minimal certificate SAN set covering every declared hostname pattern.

Every declared wildcard has to be on the certificate. Exact names a declared
wildcard already covers are dropped; all remaining exact names are kept
verbatim. No wildcard is ever introduced that no service asked for.
"""

from typing import Iterable

from routing.errors import CoverageGap
from routing.hostnames import HostnamePattern, normalize_hostname
from routing.models import CertificateSpec, Service


def _check_protocol_agreement(services: Iterable[Service]) -> None:
    # Only exact names; a wildcard shared by two services is a rule conflict.
    owners: dict[HostnamePattern, list[Service]] = {}
    for service in services:
        for pattern in dict.fromkeys(service.hostnames):
            if pattern.is_wildcard:
                continue
            owners.setdefault(pattern, []).append(service)

    for pattern, declared_by in owners.items():
        protocols = tuple(dict.fromkeys(s.protocol for s in declared_by))
        if len(protocols) > 1:
            raise CoverageGap(
                pattern.text,
                tuple(s.identifier for s in declared_by),
                protocols,
            )


def compute_sans(
    services: Iterable[Service],
    primary_domain: str,
) -> CertificateSpec:
    """
    Derive the certificate request for a set of services.

    Args:
        services: Registered services.
        primary_domain: Certificate subject (the base domain).

    Returns:
        CertificateSpec whose SANs are sorted root-first so that the same
        services always yield the same certificate request.

    Raises:
        CoverageGap: The same exact hostname is declared by services
            speaking different protocols.
    """
    services = tuple(services)
    _check_protocol_agreement(services)

    patterns = {p for s in services for p in s.hostnames}
    wildcards = {p for p in patterns if p.is_wildcard}
    exact = {
        p
        for p in patterns - wildcards
        if not any(w.covers(p) for w in wildcards)
    }
    sans = sorted(wildcards | exact, key=lambda p: (p.sort_key(), p.text))
    return CertificateSpec(
        primary_domain=normalize_hostname(primary_domain),
        sans=tuple(sans),
    )
