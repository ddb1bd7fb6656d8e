"""
Unit tests for routing table check variants.
"""

import pytest

from hostcheck.checks import (
    Gateway,
    GatewayInterface,
    RoutingTableDestination,
    RoutingTableGateway,
    RoutingTableInterface,
)
from hostcheck.errors import FatalEnvironmentError, MissingDependencyError, ParameterTypeError

ROUTE_OUTPUT = """\
Kernel IP routing table
Destination     Gateway         Genmask         Flags Metric Ref    Use Iface
192.168.1.0     0.0.0.0         255.255.255.0   U     100    0        0 eth0
0.0.0.0         192.168.1.1     0.0.0.0         UG    100    0        0 wlan0
0.0.0.0         10.0.0.1        0.0.0.0         UG    600    0        0 eth1
172.17.0.0      0.0.0.0         255.255.0.0     U     0      0        0 docker0"""

LOCAL_ONLY = """\
Kernel IP routing table
Destination     Gateway         Genmask         Flags Metric Ref    Use Iface
192.168.1.0     0.0.0.0         255.255.255.0   U     100    0        0 eth0"""


@pytest.fixture
def route(fake_session):
    def _make(output=ROUTE_OUTPUT, exit_code=0):
        return fake_session({"route -n": (exit_code, output)})

    return _make


@pytest.mark.unit
class TestGateway:
    """Test default gateway checks."""

    def test_first_nonzero_gateway_wins(self, route) -> None:
        session = route()
        assert Gateway.from_params(["192.168.1.1"]).execute(session).passed
        result = Gateway.from_params(["10.0.0.1"]).execute(session)
        assert result.message == "Gateway does not have address:\n\tSpecified: 10.0.0.1\n\tActual: 192.168.1.1"

    def test_no_gateway_reports_zero_address(self, route) -> None:
        result = Gateway.from_params(["192.168.1.1"]).execute(route(LOCAL_ONLY))
        assert result.message.endswith("Actual: 0.0.0.0")

    def test_gateway_interface(self, route) -> None:
        session = route()
        assert GatewayInterface.from_params(["wlan0"]).execute(session).passed
        result = GatewayInterface.from_params(["eth1"]).execute(session)
        assert result.message == (
            "Default gateway does not operate on interface:\n\tSpecified: eth1\n\tActual: wlan0"
        )

    def test_gateway_interface_without_gateway(self, route) -> None:
        result = GatewayInterface.from_params(["eth0"]).execute(route(LOCAL_ONLY))
        assert result.message.endswith("Actual: (none)")

    def test_fewer_names_than_gateways_is_fatal(self, route) -> None:
        broken = "Kernel IP routing table\nDestination Gateway Iface\n0.0.0.0 192.168.1.1"
        result = GatewayInterface.from_params(["eth0"]).execute(route(broken))
        assert isinstance(result.cause, FatalEnvironmentError)


@pytest.mark.unit
class TestRoutingTable:
    """Test routing table membership checks."""

    def test_destination(self, route) -> None:
        assert RoutingTableDestination.from_params(["172.17.0.0"]).execute(route()).passed
        assert not RoutingTableDestination.from_params(["10.10.0.0"]).execute(route()).passed

    def test_interface_exact_match(self, route) -> None:
        assert RoutingTableInterface.from_params(["docker0"]).execute(route()).passed
        result = RoutingTableInterface.from_params(["eth"]).execute(route())
        assert result.message.startswith("Not found in routing table:\n\tSpecified: eth\n")

    def test_gateway_column(self, route) -> None:
        assert RoutingTableGateway.from_params(["10.0.0.1"]).execute(route()).passed

    def test_ipv4_required(self) -> None:
        with pytest.raises(ParameterTypeError, match="IPv4 address"):
            RoutingTableGateway.from_params(["::1"])


@pytest.mark.unit
class TestBrokenRoutingTable:
    """An unreadable routing table is a fatal environment error."""

    def test_empty_output_is_fatal(self, route) -> None:
        result = RoutingTableInterface.from_params(["eth0"]).execute(route(""))
        assert result.code == 1
        assert isinstance(result.cause, FatalEnvironmentError)
        assert "not properly parsed" in result.message

    def test_missing_header_is_fatal(self, route) -> None:
        result = RoutingTableInterface.from_params(["eth0"]).execute(route("title\nA B C\n1 2 3"))
        assert isinstance(result.cause, FatalEnvironmentError)

    def test_missing_route_utility(self, fake_session) -> None:
        result = Gateway.from_params(["10.0.0.1"]).execute(fake_session())
        assert isinstance(result.cause, MissingDependencyError)
        assert not isinstance(result.cause, FatalEnvironmentError)
