"""Test the Endpoint value object."""

import json

import pytest

from provisioning_engine.core.endpoint import Endpoint
from provisioning_engine.core.errors import InvalidArgument


class TestEndpointConstruction:

    def test_bare_port_binds_any(self):
        endpoint = Endpoint(25565)

        assert endpoint.ip == Endpoint.INADDR_ANY
        assert endpoint.port == 25565

    def test_combined_string_is_split(self):
        endpoint = Endpoint("10.0.0.5:25565")

        assert endpoint.ip == "10.0.0.5"
        assert endpoint.port == 25565

    def test_ip_in_port_string_overrides_argument(self):
        endpoint = Endpoint("10.0.0.5:25565", ip="192.168.1.1")

        assert endpoint.ip == "10.0.0.5"

    def test_explicit_ip_argument(self):
        endpoint = Endpoint(2456, ip="192.168.1.10")

        assert endpoint.ip == "192.168.1.10"
        assert endpoint.port == 2456

    def test_bracketed_ipv6(self):
        endpoint = Endpoint("[2001:db8::1]:27015")

        assert endpoint.ip == "2001:db8::1"
        assert endpoint.port == 27015

    def test_numeric_string_port(self):
        assert Endpoint("8080").port == 8080

    @pytest.mark.parametrize("port", [1024, 80, 0, -5, 65535, 70000])
    def test_out_of_range_ports_rejected(self, port):
        with pytest.raises(InvalidArgument):
            Endpoint(port)

    def test_range_edges_accepted(self):
        assert Endpoint(1025).port == 1025
        assert Endpoint(65534).port == 65534

    def test_non_numeric_port_rejected(self):
        with pytest.raises(InvalidArgument):
            Endpoint("minecraft")

    def test_invalid_ip_rejected(self):
        with pytest.raises(InvalidArgument):
            Endpoint("999.1.1.1:25565")

    def test_invalid_argument_is_value_error(self):
        with pytest.raises(ValueError):
            Endpoint("not-an-ip:25565")


class TestEndpointFormatting:

    def test_any_address_renders_port_only(self):
        assert str(Endpoint(25565)) == "25565"

    def test_loopback_renders_localhost(self):
        assert str(Endpoint(25565, ip="127.0.0.1")) == "localhost:25565"

    def test_other_address_renders_ip_and_port(self):
        assert str(Endpoint("10.0.0.5:25565")) == "10.0.0.5:25565"

    def test_to_json_is_quoted_string(self):
        endpoint = Endpoint("10.0.0.5:25565")

        assert endpoint.to_json() == '"10.0.0.5:25565"'
        assert json.loads(endpoint.to_json()) == str(endpoint)

    def test_equality_by_value(self):
        assert Endpoint("10.0.0.5:25565") == Endpoint(25565, ip="10.0.0.5")
        assert Endpoint(25565) != Endpoint(25566)
        assert len({Endpoint(25565), Endpoint("0.0.0.0:25565")}) == 1
