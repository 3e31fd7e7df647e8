"""IPv4 socket addresses and name resolution."""

from __future__ import annotations

import ipaddress
import socket


class Address:
    """An IPv4 address and port.

    With an integer service the host must be a numeric address and nothing
    is resolved; with a string service both host and service are looked up.
    """

    def __init__(self, host: str, service: "int | str" = 0) -> None:
        if isinstance(service, int):
            if not 0 <= service <= 0xFFFF:
                raise ValueError(f"port out of range: {service}")
            service_text = str(service)
            flags = socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
        else:
            service_text = service
            flags = getattr(socket, "AI_ALL", 0)
        try:
            results = socket.getaddrinfo(host, service_text, socket.AF_INET, 0, 0, flags)
        except socket.gaierror as exc:
            raise socket.gaierror(exc.errno, f"getaddrinfo({host}, {service_text}): {exc.strerror}") from exc
        if not results:
            raise OSError("getaddrinfo returned successfully but with no results")
        sockaddr = results[0][4]
        self._sockaddr: tuple[str, int] = (sockaddr[0], int(sockaddr[1]))

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> "Address":
        """Create an Address (port 0) from a 32-bit host-order IPv4 address."""
        return cls(str(ipaddress.IPv4Address(ip_address & 0xFFFFFFFF)), 0)

    def ip_port(self) -> tuple[str, int]:
        """Dotted-quad address and numeric port."""
        return self._sockaddr

    def ip(self) -> str:
        """Dotted-quad address."""
        return self._sockaddr[0]

    def port(self) -> int:
        """Numeric port."""
        return self._sockaddr[1]

    def ipv4_numeric(self) -> int:
        """The address as a 32-bit integer in host byte order."""
        return int(ipaddress.IPv4Address(self._sockaddr[0]))

    def sockaddr(self) -> tuple[str, int]:
        """The address in the form the socket module expects."""
        return self._sockaddr

    def __str__(self) -> str:
        return f"{self._sockaddr[0]}:{self._sockaddr[1]}"

    def __repr__(self) -> str:
        return f"Address({self._sockaddr[0]!r}, {self._sockaddr[1]})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash(self._sockaddr)