"""
Edge Plan - shared load balancer routing entrypoint.

Plans routing from Pulumi config, then wires two ComponentResources using
output chaining:

- **Planning**: ``routing.plan_routing`` turns the configured services into
  ordered host-header rules, a certificate SAN set and per-service health
  checks. Any problem fails the deployment before a resource is touched;
  every problem is reported, not just the first.
- **AWS**: ALB, certificate, listeners, target groups and listener rules
  from the plan. Its DNS name is passed to GCP DNS as the CNAME target.
- **GCP** (optional): Cloud DNS managed zone with a CNAME per routed
  hostname. Caller must delegate the domain to the zone name servers.

Stack exports: alb_dns_name, alb_zone_id, certificate_arn,
certificate_validation_records, target_group_arns, routing_plan,
gcp_name_servers (when GCP DNS is enabled).
"""

import pulumi

from components import EdgeRouting, GcpDns
from config import StackConfig
from routing import PlanRejected, RoutingError, RoutingPlan, plan_routing


def _component_name(project_name: str, environment: str, prefix: str) -> str:
    return f"{prefix}-{project_name}-{environment}"


def _plan(config: StackConfig) -> RoutingPlan:
    """
    Plan routing for the stack, reporting every failure to the engine log.

    Raises the planning error after logging so the deployment stops without
    applying anything.
    """
    try:
        plan = plan_routing(config.topology())
    except PlanRejected as rejected:
        for error in rejected.errors:
            pulumi.log.error(str(error))
        raise
    except RoutingError as error:
        pulumi.log.error(str(error))
        raise

    for rule in plan.rules:
        target = rule.service_id or "default"
        hosts = ", ".join(p.text for p in rule.hostnames) or "*"
        pulumi.log.info(f"planned rule {rule.priority}: {hosts} -> {target}")
    return plan


def main():
    """
    Plan routing, build AWS and (optionally) GCP components, export outputs.

    Reads config (services, domain_name, vpc_id, subnet_ids, default_action,
    enable_gcp_dns), plans routing, instantiates the edge component, chains
    its DNS name into GCP DNS as the CNAME target, and exports the load
    balancer, certificate and plan details.
    """
    config = StackConfig.from_pulumi_config(pulumi.Config())
    plan = _plan(config)

    def name(prefix: str) -> str:
        return _component_name(config.project_name, config.environment, prefix)

    edge = EdgeRouting(
        name=name("edge"),
        plan=plan,
        vpc_id=config.vpc_id,
        subnet_ids=list(config.subnet_ids),
    )

    outputs = [
        ("alb_dns_name", edge.dns_name),
        ("alb_zone_id", edge.zone_id),
        ("certificate_arn", edge.certificate_arn),
        ("certificate_validation_records", edge.certificate_validation_records),
        ("target_group_arns", edge.target_group_arns),
        ("routing_plan", plan.to_dict()),
    ]

    if config.enable_gcp_dns:
        gcp = GcpDns(
            name=name("dns"),
            domain_name=config.domain_name,
            hostnames=[p.text for rule in plan.specific_rules for p in rule.hostnames],
            target=edge.dns_name,
            ttl=config.dns_ttl,
        )
        outputs.append(("gcp_name_servers", gcp.name_servers))

    for output_name, value in outputs:
        pulumi.export(output_name, value)


if __name__ == "__main__":
    main()
