"""Tests for pure helpers"""

from components import _helpers
from routing.hostnames import HostnamePattern
from routing.models import (
    FixedResponseAction,
    ForwardAction,
    HealthCheckPolicy,
    RedirectAction,
    RoutingRule,
)


class TestEnsureTrailingDot:
    def test_adds_dot_when_missing(self):
        assert _helpers.ensure_trailing_dot("example.com") == "example.com."

    def test_leaves_dot_when_present(self):
        assert _helpers.ensure_trailing_dot("example.com.") == "example.com."


class TestCnameRrdata:
    def test_adds_trailing_dot(self):
        assert _helpers.cname_rrdata("lb.example.net") == ["lb.example.net."]

    def test_leaves_dot_unchanged(self):
        assert _helpers.cname_rrdata("lb.example.net.") == ["lb.example.net."]


class TestSplitApexHostnames:
    def test_apex_is_skipped(self):
        records, skipped = _helpers.split_apex_hostnames(
            ["example.com", "www.example.com"], "example.com"
        )
        assert records == ["www.example.com."]
        assert skipped == ["example.com"]

    def test_wildcards_become_records(self):
        records, _ = _helpers.split_apex_hostnames(["*.api.example.com"], "example.com")
        assert records == ["*.api.example.com."]

    def test_names_outside_zone_are_skipped(self):
        records, skipped = _helpers.split_apex_hostnames(
            ["shop.example.org", "notexample.com"], "example.com"
        )
        assert records == []
        assert skipped == ["shop.example.org", "notexample.com"]

    def test_deduplicates_and_normalizes(self):
        records, _ = _helpers.split_apex_hostnames(
            ["WWW.example.com", "www.example.com."], "example.com."
        )
        assert records == ["www.example.com."]


class TestTargetGroupName:
    def test_short_name_kept(self):
        assert _helpers.target_group_name("edge-dev", "web") == "edge-dev-web"

    def test_replaces_disallowed_characters(self):
        assert _helpers.target_group_name("edge", "chat_v2") == "edge-chat-v2"

    def test_respects_max_len(self):
        result = _helpers.target_group_name("edge-someproject-production", "functional-vote")
        assert len(result) <= 32
        assert result.startswith("edge-someproject")

    def test_truncated_names_do_not_collide(self):
        prefix = "edge-someproject-production"
        first = _helpers.target_group_name(prefix, "functional-vote-a")
        second = _helpers.target_group_name(prefix, "functional-vote-b")
        assert first != second


class TestResourceSlug:
    def test_wildcard(self):
        assert _helpers.resource_slug("*.api.example.com.") == "wildcard-api-example-com"


class TestHostHeaderConditions:
    def test_single_condition_with_all_hostnames(self):
        rule = RoutingRule(
            priority=100,
            hostnames=(
                HostnamePattern.parse("example.com"),
                HostnamePattern.parse("www.example.com"),
            ),
            action=ForwardAction("web"),
        )
        assert _helpers.host_header_conditions(rule) == [
            {"host_header": {"values": ["example.com", "www.example.com"]}}
        ]


class TestHealthCheckArgs:
    def test_matcher_and_timing(self):
        policy = HealthCheckPolicy(
            protocol="websocket",
            healthy_codes=frozenset({400, 200}),
            path="/",
            interval_seconds=300,
            timeout_seconds=5,
        )
        args = _helpers.health_check_args(policy)
        assert args["matcher"] == "200,400"
        assert args["interval"] == 300
        assert args["timeout"] == 5
        assert args["path"] == "/"


class TestDefaultActionArgs:
    def test_fixed_response(self):
        assert _helpers.default_action_args(FixedResponseAction(404)) == {
            "type": "fixed-response",
            "fixed_response": {"content_type": "text/plain", "status_code": "404"},
        }

    def test_redirect(self):
        args = _helpers.default_action_args(RedirectAction("HTTPS", 443))
        assert args == {
            "type": "redirect",
            "redirect": {"protocol": "HTTPS", "port": "443", "status_code": "HTTP_301"},
        }

    def test_redirect_with_host(self):
        args = _helpers.default_action_args(RedirectAction(host="example.com"))
        assert args["redirect"]["host"] == "example.com"


class TestCertificateAlternativeNames:
    def test_drops_primary_domain(self):
        sans = (
            HostnamePattern.parse("example.com"),
            HostnamePattern.parse("*.example.com"),
        )
        assert _helpers.certificate_alternative_names(sans, "Example.com") == [
            "*.example.com"
        ]
