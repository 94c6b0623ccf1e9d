"""
Pure helpers for DNS, naming and load-balancer argument shapes. Testable
without Pulumi runtime.

Used by the GCP component (ensure_trailing_dot, cname_rrdata,
split_apex_hostnames) and the AWS component (target_group_name and the
*_args builders). No Pulumi types; every function accepts plain Python values
or routing models and returns plain dicts/lists/strings. Pulumi accepts
dicts with snake_case keys wherever it expects ``*Args`` input types.
"""

import hashlib

from routing.hostnames import HostnamePattern, normalize_hostname
from routing.models import (
    FixedResponseAction,
    HealthCheckPolicy,
    RedirectAction,
    RoutingRule,
)

TARGET_GROUP_NAME_MAX_LEN = 32


def ensure_trailing_dot(
    domain: str,
) -> str:
    """
    Return domain with a single trailing dot for DNS FQDN.

    Cloud DNS (and many DNS APIs) expect zone and record names with a trailing
    dot when they are fully qualified. Idempotent if already present.
    """
    return domain if domain.endswith(".") else f"{domain}."


def cname_rrdata(
    target: str,
) -> list[str]:
    """
    Return CNAME rrdatas list (single target with trailing dot).

    GCP Cloud DNS RecordSet.rrdatas expects a list of strings; CNAME has
    one target. Target is normalized with a trailing dot.
    """
    return [target if target.endswith(".") else f"{target}."]


def split_apex_hostnames(
    hostnames: list[str],
    zone_domain: str,
) -> tuple[list[str], list[str]]:
    """
    Split hostname patterns into CNAME-able names and everything else.

    A CNAME cannot live at the zone apex, and names outside the zone cannot
    be published in it. Wildcards ("*.api.example.com") are fine as record
    names.

    Returns:
        (record_names, skipped): record names carry a trailing dot; skipped
        keeps the input spelling. Both preserve input order without
        duplicates.
    """
    zone = normalize_hostname(zone_domain)
    records: list[str] = []
    skipped: list[str] = []
    for hostname in dict.fromkeys(normalize_hostname(h) for h in hostnames):
        if hostname != zone and hostname.endswith(f".{zone}"):
            records.append(ensure_trailing_dot(hostname))
        else:
            skipped.append(hostname)
    return records, skipped


def target_group_name(
    prefix: str,
    service_id: str,
    max_len: int = TARGET_GROUP_NAME_MAX_LEN,
) -> str:
    """
    Produce a load-balancer target group name for a service.

    Target group names are at most 32 characters of alphanumerics and
    hyphens. Names that fit are used as-is; longer ones are truncated and
    given a short hash of the full name so two services never collide.
    """
    raw = f"{prefix}-{service_id}"
    cleaned = "".join(c if c.isalnum() else "-" for c in raw).strip("-")
    if len(cleaned) <= max_len:
        return cleaned
    digest = hashlib.sha1(cleaned.encode()).hexdigest()[:6]
    return f"{cleaned[: max_len - 7].rstrip('-')}-{digest}"


def resource_slug(
    hostname: str,
) -> str:
    """Pulumi resource-name fragment for a hostname ("*.api.x.com" -> "wildcard-api-x-com")."""
    return normalize_hostname(hostname).replace("*", "wildcard").replace(".", "-")


def host_header_conditions(
    rule: RoutingRule,
) -> list[dict]:
    """Listener rule conditions matching any of the rule's hostnames."""
    return [{"host_header": {"values": [p.text for p in rule.hostnames]}}]


def health_check_args(
    policy: HealthCheckPolicy,
) -> dict:
    """Target group health_check argument for a policy."""
    return {
        "enabled": True,
        "protocol": "HTTP",
        "path": policy.path,
        "matcher": policy.matcher,
        "interval": policy.interval_seconds,
        "timeout": policy.timeout_seconds,
        "healthy_threshold": policy.healthy_threshold,
        "unhealthy_threshold": policy.unhealthy_threshold,
    }


def default_action_args(
    action: FixedResponseAction | RedirectAction,
) -> dict:
    """Listener default_actions entry for the plan's catch-all rule."""
    if isinstance(action, RedirectAction):
        redirect = {
            "protocol": action.protocol,
            "port": str(action.port),
            "status_code": "HTTP_301",
        }
        if action.host:
            redirect["host"] = action.host
        return {"type": "redirect", "redirect": redirect}
    return {
        "type": "fixed-response",
        "fixed_response": {
            "content_type": "text/plain",
            "status_code": str(action.status_code),
        },
    }


def certificate_alternative_names(
    sans: tuple[HostnamePattern, ...],
    primary_domain: str,
) -> list[str]:
    """SAN list for a certificate request, without the primary domain itself."""
    primary = normalize_hostname(primary_domain)
    return [san.text for san in sans if san.text != primary]
