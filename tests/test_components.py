"""Tests for the Pulumi components, run against Pulumi's mock engine"""

import pulumi


class EdgeMocks(pulumi.runtime.Mocks):
    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        outputs = {**args.inputs, "arn": f"arn:aws:mock:::{args.name}"}
        if args.typ == "aws:lb/loadBalancer:LoadBalancer":
            outputs["dnsName"] = f"{args.name}.eu-west-1.elb.amazonaws.com"
            outputs["zoneId"] = "Z32O12XQLNTSW2"
        if args.typ == "gcp:dns/managedZone:ManagedZone":
            outputs["nameServers"] = ["ns-cloud-a1.googledomains.com."]
        return [f"{args.name}_id", outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        return {}


pulumi.runtime.set_mocks(EdgeMocks(), preview=False)

from components import EdgeRouting, GcpDns  # noqa: E402
from routing.hostnames import HostnamePattern  # noqa: E402
from routing.models import Service, Topology  # noqa: E402
from routing.planner import plan_routing  # noqa: E402


def _plan():
    services = (
        Service("web", 3000, "http", (HostnamePattern.parse("example.com"),)),
        Service("chat", 3012, "websocket", (HostnamePattern.parse("chat.example.com"),)),
    )
    return plan_routing(Topology(base_domain="example.com", services=services))


def _edge(name: str) -> EdgeRouting:
    return EdgeRouting(name, _plan(), vpc_id="vpc-123", subnet_ids=["subnet-a", "subnet-b"])


@pulumi.runtime.test
def test_listener_rules_follow_plan_priorities():
    edge = _edge("edge-rules")

    def check(priorities):
        assert priorities == [100, 200]

    return pulumi.Output.all(*[rule.priority for rule in edge.listener_rules]).apply(check)


@pulumi.runtime.test
def test_one_target_group_per_service():
    edge = _edge("edge-targets")
    assert set(edge.target_group_arns) == {"web", "chat"}

    def check(ports):
        assert ports == [3000, 3012]

    return pulumi.Output.all(
        edge.target_groups["web"].port, edge.target_groups["chat"].port
    ).apply(check)


@pulumi.runtime.test
def test_certificate_requests_plan_sans():
    edge = _edge("edge-cert")

    def check(args):
        domain, sans = args
        assert domain == "example.com"
        assert sans == ["chat.example.com"]

    return pulumi.Output.all(
        edge.certificate.domain_name, edge.certificate.subject_alternative_names
    ).apply(check)


@pulumi.runtime.test
def test_idle_timeout_from_plan():
    edge = _edge("edge-idle")

    def check(timeout):
        assert timeout == 3600

    return edge.load_balancer.idle_timeout.apply(check)


@pulumi.runtime.test
def test_dns_records_skip_apex():
    dns = GcpDns(
        "dns-records",
        domain_name="example.com",
        hostnames=["example.com", "chat.example.com", "*.api.example.com"],
        target="lb.example.net",
    )
    assert dns.record_names == ["chat.example.com.", "*.api.example.com."]

    def check(name_servers):
        assert name_servers == ["ns-cloud-a1.googledomains.com."]

    return dns.name_servers.apply(check)
