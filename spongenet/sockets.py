"""Socket wrappers built on FileDescriptor: UDP, TCP and Unix-domain stream sockets."""

from __future__ import annotations

import socket
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from spongenet.address import Address
from spongenet.buffer import BufferViewList
from spongenet.file_descriptor import FileDescriptor

_MSG_TRUNC = getattr(socket, "MSG_TRUNC", 0)


def _payload_view(payload) -> BufferViewList:
    if isinstance(payload, BufferViewList):
        return payload
    return BufferViewList(payload)


class Socket(FileDescriptor):
    """Base class for network sockets of a fixed domain and type."""

    def __init__(self, fd: "Optional[int | FileDescriptor]", domain: int, sock_type: int) -> None:
        if fd is None:
            super().__init__(socket.socket(domain, sock_type).detach())
        else:
            super().__init__(fd)
            probe = socket.socket(fileno=self.fileno())
            try:
                actual_domain, actual_type = probe.family, probe.type
            finally:
                probe.detach()
            if actual_domain != domain:
                raise ValueError("socket domain mismatch")
            if actual_type != sock_type:
                raise ValueError("socket type mismatch")
        self._domain = domain
        self._sock_type = sock_type

    @contextmanager
    def _borrowed(self) -> Iterator[socket.socket]:
        sock = socket.socket(self._domain, self._sock_type, fileno=self.fileno())
        try:
            yield sock
        finally:
            sock.detach()

    def bind(self, address: Address) -> None:
        """Bind to a local address."""
        with self._borrowed() as sock:
            sock.bind(address.sockaddr())

    def connect(self, address: Address) -> None:
        """Connect to a peer address."""
        with self._borrowed() as sock:
            sock.connect(address.sockaddr())

    def shutdown(self, how: int) -> None:
        """Shut down reading, writing or both (SHUT_RD, SHUT_WR, SHUT_RDWR)."""
        if how not in (socket.SHUT_RD, socket.SHUT_WR, socket.SHUT_RDWR):
            raise ValueError("Socket.shutdown() called with invalid `how`")
        with self._borrowed() as sock:
            sock.shutdown(how)
        if how in (socket.SHUT_RD, socket.SHUT_RDWR):
            self._register_read()
        if how in (socket.SHUT_WR, socket.SHUT_RDWR):
            self._register_write()

    def local_address(self) -> Address:
        """The address this socket is bound to."""
        with self._borrowed() as sock:
            host, port = sock.getsockname()[:2]
        return Address(host, port)

    def peer_address(self) -> Address:
        """The address of the connected peer."""
        with self._borrowed() as sock:
            host, port = sock.getpeername()[:2]
        return Address(host, port)

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner."""
        with self._borrowed() as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)


@dataclass
class ReceivedDatagram:
    """A received datagram and the address it came from."""

    source_address: Address
    payload: bytes


class UDPSocket(Socket):
    """An IPv4 UDP socket."""

    def __init__(self, fd: "Optional[int | FileDescriptor]" = None) -> None:
        super().__init__(fd, socket.AF_INET, socket.SOCK_DGRAM)

    def recv(self, mtu: int = 65536) -> ReceivedDatagram:
        """Receive one datagram; raise if it is larger than ``mtu``."""
        buf = bytearray(mtu)
        with self._borrowed() as sock:
            nbytes, source = sock.recvfrom_into(buf, mtu, _MSG_TRUNC)
        if nbytes > mtu:
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return ReceivedDatagram(Address(source[0], source[1]), bytes(buf[:nbytes]))

    def _sendmsg(self, payload, destination: Optional[Address]) -> None:
        view = _payload_view(payload)
        with self._borrowed() as sock:
            if destination is None:
                sent = sock.sendmsg(view.as_chunks())
            else:
                sent = sock.sendmsg(view.as_chunks(), [], 0, destination.sockaddr())
        if sent != len(view):
            raise RuntimeError("datagram payload too big for sendmsg()")
        self._register_write()

    def sendto(self, destination: Address, payload) -> None:
        """Send a datagram to ``destination``."""
        self._sendmsg(payload, destination)

    def send(self, payload) -> None:
        """Send a datagram to the connected address."""
        self._sendmsg(payload, None)


class TCPSocket(Socket):
    """An IPv4 TCP socket."""

    def __init__(self, fd: "Optional[int | FileDescriptor]" = None) -> None:
        super().__init__(fd, socket.AF_INET, socket.SOCK_STREAM)

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting connections."""
        with self._borrowed() as sock:
            sock.listen(backlog)

    def accept(self) -> "TCPSocket":
        """Block until a connection arrives and return a socket for it."""
        self._register_read()
        with self._borrowed() as sock:
            conn, _ = sock.accept()
        return TCPSocket(conn.detach())


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket."""

    def __init__(self, fd: "int | FileDescriptor") -> None:
        super().__init__(fd, socket.AF_UNIX, socket.SOCK_STREAM)