"""
Post-build consistency checks on a RoutingPlan.

Every check runs on every plan; problems are collected rather than raised so
an operator sees all of them after a single run. An empty list means the plan
is deployable.
"""

from collections import Counter

from routing.errors import ValidationError
from routing.models import RedirectAction, RoutingPlan
from routing.rules import DEFAULT_RULE_PRIORITY


def _check_forward_targets(plan: RoutingPlan) -> list[ValidationError]:
    known = {s.identifier for s in plan.services}
    return [
        ValidationError(
            code="unknown-target",
            message=(
                f"rule {rule.priority} forwards to service {rule.service_id!r} "
                "which is not registered"
            ),
            services=(rule.service_id,),
            hostnames=tuple(p.text for p in rule.hostnames),
            priorities=(rule.priority,),
        )
        for rule in plan.rules
        if rule.service_id is not None and rule.service_id not in known
    ]


def _check_certificate_coverage(plan: RoutingPlan) -> list[ValidationError]:
    errors = []
    for rule in plan.rules:
        for pattern in rule.hostnames:
            if plan.certificate.covers(pattern):
                continue
            errors.append(
                ValidationError(
                    code="uncovered-hostname",
                    message=(
                        f"hostname {pattern.text!r} of rule {rule.priority} is not "
                        "covered by any certificate SAN"
                    ),
                    services=(rule.service_id,) if rule.service_id else (),
                    hostnames=(pattern.text,),
                    priorities=(rule.priority,),
                )
            )
    return errors


def _check_unique_priorities(plan: RoutingPlan) -> list[ValidationError]:
    counts = Counter(rule.priority for rule in plan.rules)
    errors = []
    for priority in sorted(p for p, n in counts.items() if n > 1):
        clashing = [rule for rule in plan.rules if rule.priority == priority]
        names = [rule.service_id or "<default>" for rule in clashing]
        errors.append(
            ValidationError(
                code="duplicate-priority",
                message=f"priority {priority} is shared by rules for {', '.join(names)}",
                services=tuple(rule.service_id for rule in clashing if rule.service_id),
                hostnames=tuple(p.text for rule in clashing for p in rule.hostnames),
                priorities=(priority,),
            )
        )
    return errors


def _check_priority_range(plan: RoutingPlan) -> list[ValidationError]:
    return [
        ValidationError(
            code="priority-out-of-range",
            message=(
                f"rule for {rule.service_id or '<default>'} has priority "
                f"{rule.priority}, expected 1-{DEFAULT_RULE_PRIORITY}"
            ),
            services=(rule.service_id,) if rule.service_id else (),
            priorities=(rule.priority,),
        )
        for rule in plan.rules
        if not 1 <= rule.priority <= DEFAULT_RULE_PRIORITY
    ]


def _check_default_rule(plan: RoutingPlan) -> list[ValidationError]:
    defaults = [rule for rule in plan.rules if rule.is_default]
    if not defaults:
        return [ValidationError(code="missing-default", message="plan has no default rule")]
    if len(defaults) > 1:
        return [
            ValidationError(
                code="multiple-defaults",
                message=f"plan has {len(defaults)} default rules",
                priorities=tuple(rule.priority for rule in defaults),
            )
        ]

    default = defaults[0]
    return [
        ValidationError(
            code="default-not-last",
            message=(
                f"default rule priority {default.priority} does not come after "
                f"rule {rule.priority} for {rule.service_id!r}"
            ),
            services=(rule.service_id,) if rule.service_id else (),
            hostnames=tuple(p.text for p in rule.hostnames),
            priorities=(rule.priority, default.priority),
        )
        for rule in plan.specific_rules
        if rule.priority >= default.priority
    ]


def _check_redirect_targets(plan: RoutingPlan) -> list[ValidationError]:
    errors = []
    for rule in plan.rules:
        if not isinstance(rule.action, RedirectAction) or not rule.action.host:
            continue
        if plan.resolve(rule.action.host) != rule:
            continue
        errors.append(
            ValidationError(
                code="redirect-loop",
                message=(
                    f"rule {rule.priority} redirects to {rule.action.host!r}, "
                    "which is routed back to the same rule"
                ),
                services=(rule.service_id,) if rule.service_id else (),
                hostnames=(rule.action.host,),
                priorities=(rule.priority,),
            )
        )
    return errors


def _check_shadowing(plan: RoutingPlan) -> list[ValidationError]:
    errors = []
    specific = sorted(plan.specific_rules, key=lambda r: r.priority)
    for index, earlier in enumerate(specific):
        wildcards = [p for p in earlier.hostnames if p.is_wildcard]
        for later in specific[index + 1 :]:
            for pattern in later.hostnames:
                wildcard = next((w for w in wildcards if w.covers(pattern)), None)
                if wildcard is None or pattern.is_wildcard:
                    continue
                errors.append(
                    ValidationError(
                        code="shadowed-rule",
                        message=(
                            f"{pattern.text!r} (rule {later.priority}) is shadowed by "
                            f"{wildcard.text!r} (rule {earlier.priority})"
                        ),
                        services=tuple(
                            r.service_id for r in (later, earlier) if r.service_id
                        ),
                        hostnames=(pattern.text, wildcard.text),
                        priorities=(later.priority, earlier.priority),
                    )
                )
    return errors


def _check_health_checks(plan: RoutingPlan) -> list[ValidationError]:
    counts = Counter(hc.service_id for hc in plan.health_checks)
    errors = []
    for service in plan.services:
        count = counts.get(service.identifier, 0)
        if count != 1:
            errors.append(
                ValidationError(
                    code="health-check-count",
                    message=(
                        f"service {service.identifier!r} has {count} health-check "
                        "policies, expected exactly 1"
                    ),
                    services=(service.identifier,),
                )
            )
    known = {s.identifier for s in plan.services}
    for service_id in sorted(set(counts) - known):
        errors.append(
            ValidationError(
                code="orphan-health-check",
                message=f"health-check policy for unknown service {service_id!r}",
                services=(service_id,),
            )
        )
    return errors


_CHECKS = (
    _check_forward_targets,
    _check_certificate_coverage,
    _check_unique_priorities,
    _check_priority_range,
    _check_default_rule,
    _check_redirect_targets,
    _check_shadowing,
    _check_health_checks,
)


def validate(plan: RoutingPlan) -> list[ValidationError]:
    """Run every check and return all problems found, in check order."""
    return [error for check in _CHECKS for error in check(plan)]
