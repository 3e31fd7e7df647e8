"""TCP segments: a header and a payload."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from spongenet.buffer import Buffer, BufferList
from spongenet.parser import NetParser, ParseError, ParseResult
from spongenet.tcp_header import TCPHeader
from spongenet.util import InternetChecksum


@dataclass
class TCPSegment:
    """A TCP header followed by its payload."""

    header: TCPHeader = field(default_factory=TCPHeader)
    payload: Buffer = field(default_factory=Buffer)

    @classmethod
    def parse(cls, data, datagram_layer_checksum: int = 0) -> "TCPSegment":
        """Parse a segment, verifying the checksum; raise ParseError on failure.

        ``datagram_layer_checksum`` is the pseudo-header sum from the layer below.
        """
        if isinstance(data, BufferList):
            data = data.concatenate()
        buffer = Buffer(data)

        check = InternetChecksum(datagram_layer_checksum)
        check.add(bytes(buffer))
        if check.value():
            raise ParseError(ParseResult.BAD_CHECKSUM)

        parser = NetParser(buffer)
        try:
            header = TCPHeader.parse(parser)
        except ParseError:
            parser.check()
            raise
        payload = parser.buffer()
        parser.check()
        return cls(header=header, payload=payload)

    def serialize(self, datagram_layer_checksum: int = 0) -> BufferList:
        """Return the segment with a freshly computed checksum over header and payload."""
        header_out = replace(self.header, cksum=0)
        check = InternetChecksum(datagram_layer_checksum)
        check.add(header_out.serialize())
        check.add(bytes(self.payload))
        header_out.cksum = check.value()

        ret = BufferList(header_out.serialize())
        ret.append(self.payload)
        return ret

    def length_in_sequence_space(self) -> int:
        """Payload length plus one for SYN and one for FIN."""
        return len(self.payload) + (1 if self.header.syn else 0) + (1 if self.header.fin else 0)