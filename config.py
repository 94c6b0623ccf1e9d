"""
Stack configuration loaded from pulumi.Config().

Provides a typed, immutable view of stack settings. All settings are read from
Pulumi config (e.g. Pulumi.<stack>.yaml or pulumi config set). Every key is
required. Used by __main__.main() to name resources, build the routing
topology, place the load balancer, and toggle GCP DNS publication.

``services`` and ``subnet_ids`` are structured values, set with
``pulumi config set --path`` or directly in the stack file::

    config:
      edge-plan:services:
        - id: web
          port: 3000
          protocol: http
          hostnames: [example.com, www.example.com]
        - id: chat
          port: 3012
          protocol: websocket
          hostnames: [chat.server.example.com]
"""

from dataclasses import dataclass
from typing import Any, Callable

import pulumi

from routing.models import DefaultActionKind, Service, Topology


def _require_bool(config: pulumi.Config, key: str) -> bool:
    raw = config.require(key)
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ("1", "true", "yes")


def _require_int(config: pulumi.Config, key: str) -> int:
    return int(config.require(key))


def _require_str(config: pulumi.Config, key: str) -> str:
    return config.require(key)


def _require_str_list(config: pulumi.Config, key: str) -> tuple[str, ...]:
    raw = config.require_object(key)
    if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
        raise ValueError(f"config {key!r} must be a list of strings")
    return tuple(raw)


def _require_services(config: pulumi.Config, key: str) -> tuple[Service, ...]:
    raw = config.require_object(key)
    if not isinstance(raw, list) or not all(isinstance(v, dict) for v in raw):
        raise ValueError(f"config {key!r} must be a list of service mappings")
    return tuple(Service.from_mapping(entry) for entry in raw)


def _require_default_action(config: pulumi.Config, key: str) -> DefaultActionKind:
    raw = config.require(key).strip().lower()
    try:
        return DefaultActionKind(raw)
    except ValueError:
        choices = ", ".join(kind.value for kind in DefaultActionKind)
        raise ValueError(f"config {key!r} must be one of: {choices}") from None


# (key, parser); parser receives (config, key) and returns value.
_CONFIG_SPEC: list[tuple[str, Callable[[pulumi.Config, str], Any]]] = [
    ("project_name", _require_str),
    ("environment", _require_str),
    ("domain_name", _require_str),
    ("vpc_id", _require_str),
    ("subnet_ids", _require_str_list),
    ("services", _require_services),
    ("default_action", _require_default_action),
    ("enable_gcp_dns", _require_bool),
    ("dns_ttl", _require_int),
]


@dataclass(frozen=True)
class StackConfig:
    """
    Stack configuration from Pulumi config.

    Attributes:
        project_name: Project name used in resource naming (required).
        environment: Environment label used in resource naming (required).
        domain_name: Base domain: certificate subject, DNS zone, and the
            domain every wildcard hostname must live under (required).
        vpc_id: VPC the load balancer and target groups live in (required).
        subnet_ids: Public subnets for the load balancer (required).
        services: Declared backend services, in order (required).
        default_action: "fixed-response" (404) or "redirect" (to the base
            domain) for requests matching no hostname (required).
        enable_gcp_dns: Whether to publish hostnames in GCP Cloud DNS (required).
        dns_ttl: TTL in seconds for published CNAME records (required).
    """

    project_name: str
    environment: str
    domain_name: str
    vpc_id: str
    subnet_ids: tuple[str, ...]
    services: tuple[Service, ...]
    default_action: DefaultActionKind
    enable_gcp_dns: bool
    dns_ttl: int

    @classmethod
    def from_pulumi_config(cls, config: pulumi.Config) -> "StackConfig":
        """
        Build StackConfig from pulumi.Config(). All keys in _CONFIG_SPEC are required.
        """
        kwargs = {key: parser(config, key) for key, parser in _CONFIG_SPEC}
        return cls(**kwargs)

    def topology(self) -> Topology:
        """Planning input for this stack."""
        return Topology(
            base_domain=self.domain_name,
            services=self.services,
            default_action=self.default_action,
        )
