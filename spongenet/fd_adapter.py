"""Adapters that carry TCP segments over an underlying datagram transport."""

from __future__ import annotations

from typing import Optional

from spongenet.parser import ParseError
from spongenet.sockets import UDPSocket
from spongenet.tcp_config import FdAdapterConfig
from spongenet.tcp_segment import TCPSegment


class FdAdapterBase:
    """Configuration and listening state shared by all adapters.

    ``config`` holds the addresses and loss rates; ``listening`` is true while
    the connected TCP endpoint waits for a peer; ``elapsed_ms`` counts the
    time reported through ``tick``.
    """

    def __init__(self) -> None:
        self.config = FdAdapterConfig()
        self.listening = False
        self.elapsed_ms = 0

    def tick(self, ms_since_last_tick: int) -> None:
        """Record the passage of time."""
        if ms_since_last_tick < 0:
            raise ValueError("time cannot run backwards")
        self.elapsed_ms += ms_since_last_tick


class TCPOverUDPSocketAdapter(FdAdapterBase):
    """Reads and writes TCP segments as UDP payloads."""

    def __init__(self, sock: UDPSocket) -> None:
        super().__init__()
        self.sock = sock

    def read(self) -> Optional[TCPSegment]:
        """Receive one datagram; return its segment if valid and related to this connection.

        While listening, a SYN without RST fixes the peer and ends listening.
        """
        datagram = self.sock.recv()

        if not self.listening and datagram.source_address != self.config.destination:
            return None

        try:
            seg = TCPSegment.parse(datagram.payload, 0)
        except ParseError:
            return None

        if self.listening:
            if seg.header.syn and not seg.header.rst:
                self.config.destination = datagram.source_address
                self.listening = False
            else:
                return None

        return seg

    def write(self, seg: TCPSegment) -> None:
        """Set the segment's ports and send it to the configured destination."""
        seg.header.sport = self.config.source.port()
        seg.header.dport = self.config.destination.port()
        self.sock.sendto(self.config.destination, seg.serialize(0))

    def fileno(self) -> int:
        return self.sock.fileno()