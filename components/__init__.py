"""
Edge-routing infrastructure components.

Each cloud is encapsulated in its own ComponentResource for clear ownership,
testability, and reuse. Both consume the output of ``routing.plan_routing``;
use them from the Pulumi entrypoint (e.g. __main__.py) with config and output
chaining:

- **EdgeRouting**: ALB, ACM certificate, listeners, target groups and
  listener rules from a RoutingPlan; exposes dns_name for DNS and
  target_group_arns for container services.
- **GcpDns**: Cloud DNS zone + one CNAME per routed hostname; accepts target
  (str or Output[str]) and exposes name_servers.
"""

from components.aws import EdgeRouting
from components.gcp import GcpDns

__all__ = ["EdgeRouting", "GcpDns"]
