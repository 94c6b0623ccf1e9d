"""
GCP Cloud DNS: managed zone and CNAME records for every routed hostname.

This component creates a Cloud DNS managed zone for the base domain and one
CNAME per routed hostname pattern, all pointing at the load balancer. It is
designed to be wired with outputs from the AWS component: pass ``target`` as
an ``Output[str]`` (the ALB's ``dns_name``) so records follow the load
balancer without code changes.

The zone apex cannot hold a CNAME and names outside the zone cannot be
published in it; such hostnames are skipped with a warning and need an
ALIAS/ANAME record at whichever provider serves them.

After deployment, the domain must be delegated at the registrar to the zone's
name servers (exposed as ``name_servers``).
"""

import pulumi
import pulumi_gcp as gcp

from components._helpers import (
    cname_rrdata,
    ensure_trailing_dot,
    resource_slug,
    split_apex_hostnames,
)

ID = "edgeplan:gcp:GcpDns"

# CNAME target may be known now (str) or only after another resource is created
# (pulumi.Output[str]). Use a plain string for a fixed target (e.g. "lb.example.com");
# use an Output when wiring this component to another (e.g. pass an AWS ALB's
# dns_name so GCP DNS points at it). The code normalizes both with
# pulumi.Output.from_input() before building the record set.
DnsTarget = str | pulumi.Output[str]


class GcpDns(pulumi.ComponentResource):
    """
    Cloud DNS managed zone with one CNAME per routed hostname.

    Each record: ``<hostname>`` → target (TTL ``ttl``). Wildcard hostnames
    become wildcard records.
    """

    def __init__(
        self,
        name: str,
        domain_name: str,
        hostnames: list[str],
        target: DnsTarget,
        ttl: int = 300,
    ):
        """
        Create the managed zone and CNAME record sets.

        Args:
            name: Pulumi resource name (used for zone and record naming).
            domain_name: Domain for the zone (e.g. "example.com"). Used as-is;
                trailing dot is added for the zone FQDN.
            hostnames: Routed hostname patterns, e.g. from the plan's
                certificate SANs or rules.
            target: CNAME target for every record. A string or Output[str],
                e.g. from the AWS component's dns_name.
            ttl: TTL in seconds for every record.

        Outputs (set on self, registered for the component):
            name_servers: Zone name servers; delegate the domain to these at
                the registrar.
            record_names: FQDNs of the CNAME records created.
        """
        super().__init__(ID, name)

        child_opts = pulumi.ResourceOptions(parent=self)

        # Trailing dot required by Cloud DNS for zone FQDN.
        zone = gcp.dns.ManagedZone(
            resource_name=f"{name}-zone",
            name=f"{name}-zone",
            dns_name=ensure_trailing_dot(domain_name),
            description=f"Managed zone for {name} (edge routing)",
            opts=child_opts,
        )

        record_names, skipped = split_apex_hostnames(hostnames, domain_name)
        for hostname in skipped:
            pulumi.log.warn(
                f"{hostname} cannot be a CNAME in zone {domain_name}; "
                "publish an ALIAS record for it manually",
                resource=self,
            )

        rrdatas = pulumi.Output.from_input(target).apply(cname_rrdata)
        for record_name in record_names:
            gcp.dns.RecordSet(
                resource_name=f"{name}-{resource_slug(record_name)}",
                name=record_name,
                managed_zone=zone.name,
                type="CNAME",
                ttl=ttl,
                rrdatas=rrdatas,
                opts=child_opts,
            )

        # Caller must delegate the domain at the registrar to these name servers.
        self.name_servers: pulumi.Output[list[str]] = zone.name_servers
        self.record_names: list[str] = record_names
        self.register_outputs(
            {"name_servers": self.name_servers, "record_names": self.record_names}
        )
