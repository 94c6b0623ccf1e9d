"""
AWS edge: Application Load Balancer materializing a RoutingPlan.

This component turns a validated ``RoutingPlan`` into load-balancer resources:
a security group open on 80/443, an internet-facing ALB, an ACM certificate
for the plan's primary domain and SANs, an HTTPS listener whose default action
is the plan's catch-all rule, and an HTTP listener that always redirects to
HTTPS. Each service gets a target group carrying its health-check policy, and
each specific routing rule becomes a listener rule with the plan's priority
and host-header condition.

Containers are registered into the target groups elsewhere: the
``target_group_arns`` output maps service identifier to target group ARN.
``dns_name`` is an ``Output[str]`` so the DNS component can use it as the
CNAME target for every routed hostname.
"""

import pulumi
import pulumi_aws as aws

from components._helpers import (
    certificate_alternative_names,
    default_action_args,
    health_check_args,
    host_header_conditions,
    target_group_name,
)
from routing.models import RedirectAction, RoutingPlan

ID: str = "edgeplan:aws:EdgeRouting"

# Plain-HTTP requests are never routed; they are sent to the HTTPS listener.
INSECURE_REDIRECT = RedirectAction(protocol="HTTPS", port=443)

TLS_POLICY = "ELBSecurityPolicy-TLS13-1-2-2021-06"

# Ingress opened on the security group in front of the load balancer.
PUBLIC_PORTS: tuple[int, ...] = (80, 443)


class EdgeRouting(pulumi.ComponentResource):
    """
    ALB + ACM certificate + listeners, target groups and rules from a plan.

    Resources: SecurityGroup, LoadBalancer, Certificate, CertificateValidation,
    two Listeners, one TargetGroup per service, one ListenerRule per specific
    routing rule.
    """

    def __init__(
        self,
        name: str,
        plan: RoutingPlan,
        vpc_id: str | pulumi.Output[str],
        subnet_ids: list[str],
    ):
        """
        Create the load balancer and everything the plan routes through it.

        Args:
            name: Pulumi resource name prefix; also prefixes target group
                names via target_group_name.
            plan: Validated routing plan. Its rules, certificate, health
                checks and idle timeout are applied as-is.
            vpc_id: VPC the target groups and security group live in.
            subnet_ids: Public subnets the load balancer is placed in.

        Outputs (set on self, registered for the component):
            dns_name: Load balancer FQDN (CNAME target for routed hostnames).
            zone_id: Load balancer hosted zone id (for alias records).
            certificate_arn: ARN of the issued certificate.
            certificate_validation_records: DNS records ACM expects before it
                issues the certificate.
            target_group_arns: Service identifier -> target group ARN.
        """
        super().__init__(ID, name)

        # Child resources get parent=self so Pulumi builds a proper hierarchy:
        # lifecycle order (e.g. destroy rules before target groups) and UI grouping.
        child_opts = pulumi.ResourceOptions(parent=self)

        security_group = aws.ec2.SecurityGroup(
            resource_name=f"{name}-sg",
            vpc_id=vpc_id,
            description=f"Public HTTP/HTTPS ingress for {name}",
            ingress=[
                {
                    "protocol": "tcp",
                    "from_port": port,
                    "to_port": port,
                    "cidr_blocks": ["0.0.0.0/0"],
                    "ipv6_cidr_blocks": ["::/0"],
                }
                for port in PUBLIC_PORTS
            ],
            egress=[
                {
                    "protocol": "-1",
                    "from_port": 0,
                    "to_port": 0,
                    "cidr_blocks": ["0.0.0.0/0"],
                }
            ],
            opts=child_opts,
        )

        # Idle timeout comes from the plan: websocket backends hold connections
        # open far longer than the ALB's 60s default.
        self.load_balancer = aws.lb.LoadBalancer(
            resource_name=f"{name}-alb",
            load_balancer_type="application",
            internal=False,
            security_groups=[security_group.id],
            subnets=subnet_ids,
            idle_timeout=plan.idle_timeout_seconds,
            opts=child_opts,
        )

        self.certificate = aws.acm.Certificate(
            resource_name=f"{name}-cert",
            domain_name=plan.certificate.primary_domain,
            subject_alternative_names=certificate_alternative_names(
                plan.certificate.sans, plan.certificate.primary_domain
            ),
            validation_method="DNS",
            opts=child_opts,
        )
        # Waits until ACM has issued the certificate; the HTTPS listener cannot
        # attach a pending one. Validation records are published outside this
        # component (see certificate_validation_records).
        validation = aws.acm.CertificateValidation(
            resource_name=f"{name}-cert-validation",
            certificate_arn=self.certificate.arn,
            opts=child_opts,
        )

        default_rule = plan.default_rule
        if default_rule is None:
            raise ValueError("routing plan has no default rule; was it validated?")
        https_listener = aws.lb.Listener(
            resource_name=f"{name}-https",
            load_balancer_arn=self.load_balancer.arn,
            port=443,
            protocol="HTTPS",
            ssl_policy=TLS_POLICY,
            certificate_arn=validation.certificate_arn,
            default_actions=[default_action_args(default_rule.action)],
            opts=child_opts,
        )
        aws.lb.Listener(
            resource_name=f"{name}-http",
            load_balancer_arn=self.load_balancer.arn,
            port=80,
            protocol="HTTP",
            default_actions=[default_action_args(INSECURE_REDIRECT)],
            opts=child_opts,
        )

        # One target group per service. target_type="ip" is what Fargate tasks
        # register with.
        self.target_groups: dict[str, aws.lb.TargetGroup] = {}
        for service in plan.services:
            policy = plan.health_check_for(service.identifier)
            self.target_groups[service.identifier] = aws.lb.TargetGroup(
                resource_name=f"{name}-{service.identifier}-tg",
                name=target_group_name(name, service.identifier),
                port=service.port,
                protocol="HTTP",
                target_type="ip",
                vpc_id=vpc_id,
                health_check=health_check_args(policy) if policy else None,
                opts=child_opts,
            )

        self.listener_rules: list[aws.lb.ListenerRule] = []
        for rule in plan.specific_rules:
            target_group = self.target_groups[rule.service_id]
            self.listener_rules.append(
                aws.lb.ListenerRule(
                    resource_name=f"{name}-{rule.service_id}-rule",
                    listener_arn=https_listener.arn,
                    priority=rule.priority,
                    conditions=host_header_conditions(rule),
                    actions=[
                        {"type": "forward", "target_group_arn": target_group.arn}
                    ],
                    opts=child_opts,
                )
            )
            pulumi.log.info(
                f"rule {rule.priority}: {', '.join(p.text for p in rule.hostnames)}"
                f" -> {rule.service_id}",
                resource=self,
            )

        # Exposed as Output[str] so GCP DNS (or other stacks) can use as CNAME target.
        self.dns_name: pulumi.Output[str] = self.load_balancer.dns_name
        self.zone_id: pulumi.Output[str] = self.load_balancer.zone_id
        self.certificate_arn: pulumi.Output[str] = validation.certificate_arn
        self.certificate_validation_records: pulumi.Output[list[dict]] = (
            self.certificate.domain_validation_options.apply(
                lambda options: [
                    {
                        "name": option.resource_record_name,
                        "type": option.resource_record_type,
                        "value": option.resource_record_value,
                    }
                    for option in options or []
                ]
            )
        )
        self.target_group_arns: dict[str, pulumi.Output[str]] = {
            service_id: target_group.arn
            for service_id, target_group in self.target_groups.items()
        }
        self.register_outputs(
            {
                "dns_name": self.dns_name,
                "zone_id": self.zone_id,
                "certificate_arn": self.certificate_arn,
                "certificate_validation_records": self.certificate_validation_records,
                "target_group_arns": self.target_group_arns,
            }
        )
