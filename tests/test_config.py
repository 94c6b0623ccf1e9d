"""Tests for stack configuration parsing"""

import pytest

from config import StackConfig
from routing.models import DefaultActionKind


class FakeConfig:
    """Stands in for pulumi.Config: require() yields strings, require_object() values."""

    def __init__(self, values: dict):
        self.values = values

    def require(self, key: str) -> str:
        return str(self.values[key])

    def require_object(self, key: str):
        return self.values[key]


def _values(**overrides) -> dict:
    values = {
        "project_name": "cloud",
        "environment": "dev",
        "domain_name": "example.com",
        "vpc_id": "vpc-123",
        "subnet_ids": ["subnet-a", "subnet-b"],
        "services": [
            {"id": "web", "port": 3000, "hostnames": ["example.com", "www.example.com"]},
            {
                "id": "chat",
                "port": 3012,
                "protocol": "websocket",
                "hostnames": ["chat.server.example.com"],
            },
        ],
        "default_action": "fixed-response",
        "enable_gcp_dns": "true",
        "dns_ttl": "300",
    }
    values.update(overrides)
    return values


class TestStackConfig:
    def test_parses_every_key(self):
        config = StackConfig.from_pulumi_config(FakeConfig(_values()))
        assert config.project_name == "cloud"
        assert config.subnet_ids == ("subnet-a", "subnet-b")
        assert [s.identifier for s in config.services] == ["web", "chat"]
        assert config.services[1].protocol == "websocket"
        assert config.default_action is DefaultActionKind.FIXED_RESPONSE
        assert config.enable_gcp_dns is True
        assert config.dns_ttl == 300

    def test_bool_false(self):
        config = StackConfig.from_pulumi_config(FakeConfig(_values(enable_gcp_dns="no")))
        assert config.enable_gcp_dns is False

    def test_redirect_default(self):
        config = StackConfig.from_pulumi_config(FakeConfig(_values(default_action=" Redirect ")))
        assert config.default_action is DefaultActionKind.REDIRECT

    def test_unknown_default_action(self):
        with pytest.raises(ValueError, match="fixed-response, redirect"):
            StackConfig.from_pulumi_config(FakeConfig(_values(default_action="drop")))

    def test_subnets_must_be_list(self):
        with pytest.raises(ValueError):
            StackConfig.from_pulumi_config(FakeConfig(_values(subnet_ids="subnet-a")))

    def test_services_must_be_mappings(self):
        with pytest.raises(ValueError):
            StackConfig.from_pulumi_config(FakeConfig(_values(services=["web"])))

    def test_missing_key(self):
        values = _values()
        del values["vpc_id"]
        with pytest.raises(KeyError):
            StackConfig.from_pulumi_config(FakeConfig(values))

    def test_topology(self):
        config = StackConfig.from_pulumi_config(FakeConfig(_values(default_action="redirect")))
        topology = config.topology()
        assert topology.base_domain == "example.com"
        assert topology.services == config.services
        assert topology.default_action is DefaultActionKind.REDIRECT
