"""Tests for routing rule construction"""

import pytest

from routing.errors import DuplicateHostname, PriorityExhausted, ShadowedRule
from routing.hostnames import HostnamePattern
from routing.models import FixedResponseAction, ForwardAction, RedirectAction, Service
from routing.rules import DEFAULT_RULE_PRIORITY, build_rules, order_services


def _service(identifier: str, *hostnames: str, hint: int | None = None) -> Service:
    return Service(
        identifier=identifier,
        port=8080,
        protocol="http",
        hostnames=tuple(HostnamePattern.parse(h) for h in hostnames),
        priority_hint=hint,
    )


def _summary(rules):
    return [(rule.priority, rule.service_id) for rule in rules]


class TestBuildRules:
    def test_two_services_by_hostname(self):
        rules = build_rules(
            [_service("web", "example.com"), _service("chat", "chat.example.com")]
        )
        assert _summary(rules) == [
            (100, "web"),
            (200, "chat"),
            (DEFAULT_RULE_PRIORITY, None),
        ]
        assert rules[-1].is_default
        assert rules[-1].priority >= 300

    def test_deterministic_across_input_order(self):
        services = [
            _service("web", "example.com", "www.example.com"),
            _service("chat", "thrustin.server.example.com"),
            _service("vote", "functionalvote.api.example.com"),
        ]
        assert build_rules(services) == build_rules(list(reversed(services)))
        assert _summary(build_rules(services))[:3] == [
            (100, "web"),
            (200, "vote"),
            (300, "chat"),
        ]

    def test_hostnames_grouped_in_one_rule(self):
        rules = build_rules([_service("web", "example.com", "www.example.com")])
        assert [p.text for p in rules[0].hostnames] == ["example.com", "www.example.com"]
        assert rules[0].action == ForwardAction("web")

    def test_hinted_services_first(self):
        rules = build_rules(
            [
                _service("a", "a.example.com"),
                _service("z", "z.example.com", hint=10),
                _service("m", "m.example.com", hint=5),
            ]
        )
        assert [r.service_id for r in rules[:3]] == ["m", "z", "a"]

    def test_top_level_domain_compared_first(self):
        services = order_services(
            [
                _service("beta", "example.com", "b.example.com"),
                _service("alpha", "example.org"),
            ]
        )
        assert [s.identifier for s in services] == ["beta", "alpha"]

    def test_default_fixed_response(self):
        assert build_rules([_service("web", "example.com")])[-1].action == FixedResponseAction(404)

    def test_default_redirect(self):
        redirect = RedirectAction("HTTPS", 443, "example.com")
        assert build_rules([_service("web", "example.com")], redirect)[-1].action == redirect

    def test_empty_topology_has_only_default(self):
        rules = build_rules([])
        assert len(rules) == 1
        assert rules[0].is_default

    def test_default_after_every_specific_rule(self):
        services = [_service(f"s{i}", f"s{i}.example.com") for i in range(50)]
        rules = build_rules(services)
        assert all(rule.priority < rules[-1].priority for rule in rules[:-1])
        assert len({rule.priority for rule in rules}) == len(rules)

    def test_priority_exhausted(self):
        services = [_service(f"s{i}", f"s{i}.example.com") for i in range(500)]
        with pytest.raises(PriorityExhausted):
            build_rules(services)


class TestDuplicateHostname:
    def test_names_both_services(self):
        with pytest.raises(DuplicateHostname) as excinfo:
            build_rules(
                [_service("web", "app.example.com"), _service("api", "APP.example.com")]
            )
        assert excinfo.value.hostname == "app.example.com"
        assert set(excinfo.value.services) == {"web", "api"}
        assert "web" in str(excinfo.value) and "api" in str(excinfo.value)

    def test_same_service_repeating_a_hostname_is_fine(self):
        rules = build_rules([_service("web", "example.com", "EXAMPLE.com")])
        assert [p.text for p in rules[0].hostnames] == ["example.com"]


class TestShadowing:
    def test_wildcard_before_exact_is_rejected(self):
        with pytest.raises(ShadowedRule) as excinfo:
            build_rules([_service("api", "*.example.com"), _service("web", "www.example.com")])
        assert excinfo.value.services == ("web", "api")
        assert excinfo.value.hostname == "www.example.com"
        assert excinfo.value.wildcard == "*.example.com"

    def test_exact_hint_lower_than_wildcard(self):
        rules = build_rules(
            [_service("api", "*.example.com"), _service("web", "www.example.com", hint=1)]
        )
        assert _summary(rules)[:2] == [(100, "web"), (200, "api")]

    def test_wildcard_hint_lower_than_exact_is_rejected(self):
        with pytest.raises(ShadowedRule):
            build_rules(
                [
                    _service("api", "*.example.com", hint=1),
                    _service("web", "www.example.com", hint=2),
                ]
            )

    def test_equal_hints_reordered_automatically(self):
        rules = build_rules(
            [
                _service("api", "*.example.com", hint=1),
                _service("web", "www.example.com", hint=1),
            ]
        )
        assert [r.service_id for r in rules[:2]] == ["web", "api"]

    def test_mutual_shadowing_is_rejected(self):
        with pytest.raises(ShadowedRule):
            build_rules(
                [
                    _service("x", "*.a.example.com", "x.c.example.com", hint=1),
                    _service("y", "*.c.example.com", "y.a.example.com", hint=1),
                ]
            )

    def test_deeper_exact_not_shadowed(self):
        rules = build_rules(
            [_service("api", "*.example.com"), _service("vote", "vote.api.example.com")]
        )
        assert _summary(rules)[:2] == [(100, "api"), (200, "vote")]

    def test_first_match_reaches_every_exact_hostname(self):
        services = [
            _service("catchall", "*.example.com", hint=5),
            _service("web", "www.example.com", "example.com", hint=5),
            _service("chat", "chat.example.com", hint=5),
            _service("vote", "*.api.example.com"),
        ]
        rules = build_rules(services)
        for service in services:
            for pattern in service.hostnames:
                if pattern.is_wildcard:
                    continue
                first = next(rule for rule in rules if rule.matches(pattern.text))
                assert first.service_id == service.identifier
