"""
Routing rule construction.

Each service becomes one rule whose host condition ORs over all of the
service's hostname patterns. The target load balancer evaluates rules by
ascending priority and applies the first match, so the order decides which
service wins when patterns overlap.

Ordering policy:

1. Services with a priority hint come first, by ascending hint.
2. Unhinted services follow.
3. Ties are broken by the first declared hostname compared label-by-label
   from the root (``example.com`` before ``chat.example.com``), then by
   identifier.

Priorities are handed out as 100, 200, 300, ... The gaps are reserved for
rules inserted by hand later without renumbering. The catch-all default rule
always takes ``DEFAULT_RULE_PRIORITY``, the last slot the load balancer
accepts, so it only fires when no hostname matched.

An exact hostname must be evaluated before any wildcard that also matches it.
Services sharing the same hint are reordered to satisfy that; any other
violation is a ``ShadowedRule`` and needs an explicit hint.
"""

import itertools
from typing import Iterable

from routing.errors import DuplicateHostname, PriorityExhausted, ShadowedRule
from routing.hostnames import HostnamePattern
from routing.models import (
    FixedResponseAction,
    ForwardAction,
    RedirectAction,
    RoutingRule,
    Service,
)

PRIORITY_STEP = 100
DEFAULT_RULE_PRIORITY = 50000


def _sort_key(service: Service) -> tuple:
    hinted = service.priority_hint is not None
    return (
        0 if hinted else 1,
        service.priority_hint if hinted else 0,
        service.first_hostname.sort_key(),
        service.identifier,
    )


def _shadowed_by(
    exact_holder: Service,
    wildcard_holder: Service,
) -> tuple[HostnamePattern, HostnamePattern] | None:
    """
    First (exact, wildcard) pair where a wildcard of ``wildcard_holder``
    matches an exact pattern of ``exact_holder``, or None.
    """
    if exact_holder is wildcard_holder:
        return None
    for wildcard in wildcard_holder.hostnames:
        if not wildcard.is_wildcard:
            continue
        for pattern in exact_holder.hostnames:
            if not pattern.is_wildcard and wildcard.matches(pattern.text):
                return pattern, wildcard
    return None


def _check_duplicates(services: list[Service]) -> None:
    claimed: dict[HostnamePattern, str] = {}
    for service in services:
        for pattern in service.hostnames:
            owner = claimed.setdefault(pattern, service.identifier)
            if owner != service.identifier:
                raise DuplicateHostname(pattern.text, owner, service.identifier)


def _exact_first(group: list[Service]) -> list[Service]:
    # Stable topological sort: the earliest service whose wildcards shadow no
    # still-pending service goes next. A cycle leaves the group unchanged.
    pending = list(group)
    placed: list[Service] = []
    while pending:
        for candidate in pending:
            if not any(_shadowed_by(other, candidate) for other in pending):
                break
        else:
            return group
        pending.remove(candidate)
        placed.append(candidate)
    return placed


def order_services(services: Iterable[Service]) -> list[Service]:
    """
    Evaluation order of services, independent of input order.

    Raises:
        DuplicateHostname: Two services declare the same pattern.
        ShadowedRule: A wildcard would be evaluated before an exact pattern
            of another service that it matches.
    """
    ordered = sorted(services, key=_sort_key)
    _check_duplicates(ordered)

    result: list[Service] = []
    for hint, group in itertools.groupby(ordered, key=lambda s: s.priority_hint):
        group = list(group)
        if hint is not None and len(group) > 1:
            group = _exact_first(group)
        result.extend(group)

    for index, earlier in enumerate(result):
        for later in result[index + 1 :]:
            shadow = _shadowed_by(later, earlier)
            if shadow:
                exact, wildcard = shadow
                raise ShadowedRule(
                    exact.text, wildcard.text, later.identifier, earlier.identifier
                )
    return result


def build_rules(
    services: Iterable[Service],
    default_action: FixedResponseAction | RedirectAction | None = None,
) -> list[RoutingRule]:
    """
    Build the ordered rule list for a set of registered services.

    Args:
        services: Registered services, in any order.
        default_action: Action of the catch-all rule; a 404 fixed response
            when omitted.

    Returns:
        Rules sorted by ascending priority, the default rule last.

    Raises:
        DuplicateHostname, ShadowedRule: See ``order_services``.
        PriorityExhausted: Too many services to fit below the default rule.
    """
    ordered = order_services(services)
    if PRIORITY_STEP * len(ordered) >= DEFAULT_RULE_PRIORITY:
        raise PriorityExhausted(len(ordered), DEFAULT_RULE_PRIORITY)

    rules = [
        RoutingRule(
            priority=PRIORITY_STEP * (index + 1),
            hostnames=tuple(dict.fromkeys(service.hostnames)),
            action=ForwardAction(service.identifier),
        )
        for index, service in enumerate(ordered)
    ]
    rules.append(
        RoutingRule(
            priority=DEFAULT_RULE_PRIORITY,
            hostnames=(),
            action=default_action or FixedResponseAction(),
        )
    )
    return rules
