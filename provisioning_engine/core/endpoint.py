"""Endpoint value object (``ip:port`` or bare ``port``)."""

import ipaddress
import json
from typing import Optional, Union

from provisioning_engine.core.errors import InvalidArgument


class Endpoint:
    """
    Validated host/port pair.

    Accepts either ``Endpoint(25565, "10.0.0.5")`` or the combined
    ``Endpoint("10.0.0.5:25565")`` form. An ip embedded in the port string
    wins over the ``ip`` argument. IPv6 addresses with a port must be
    bracketed (``"[::1]:25565"``).
    """

    PORT_FLOOR = 1024
    PORT_CEIL = 65535

    INADDR_ANY = "0.0.0.0"
    INADDR_LOOPBACK = "127.0.0.1"

    __slots__ = ("_ip", "_port")

    def __init__(self, port: Union[int, str], ip: Optional[str] = None):
        ip = ip if ip is not None else self.INADDR_ANY

        raw_port = str(port).strip()
        if ":" in raw_port:
            ip, _, raw_port = raw_port.rpartition(":")
            ip = ip.strip("[]")

        try:
            parsed_port = int(raw_port)
        except ValueError:
            raise InvalidArgument(f"{raw_port!r} is not a valid port") from None

        try:
            ipaddress.ip_address(ip)
        except ValueError:
            raise InvalidArgument(f"{ip} is an invalid IP address") from None

        if parsed_port <= self.PORT_FLOOR:
            raise InvalidArgument(
                f"Port {parsed_port} must be greater than {self.PORT_FLOOR}"
            )
        if parsed_port >= self.PORT_CEIL:
            raise InvalidArgument(
                f"Port {parsed_port} must be less than {self.PORT_CEIL}"
            )

        self._ip = ip
        self._port = parsed_port

    @property
    def ip(self) -> str:
        return self._ip

    @property
    def port(self) -> int:
        return self._port

    def __str__(self) -> str:
        if self._ip == self.INADDR_ANY:
            return str(self._port)

        ip = "localhost" if self._ip == self.INADDR_LOOPBACK else self._ip
        return f"{ip}:{self._port}"

    def __repr__(self) -> str:
        return f"Endpoint(ip={self._ip!r}, port={self._port})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Endpoint):
            return NotImplemented
        return (self._ip, self._port) == (other._ip, other._port)

    def __hash__(self) -> int:
        return hash((self._ip, self._port))

    def to_json(self) -> str:
        return json.dumps(str(self))
