"""Network-byte-order parsing and unparsing of integers."""

from __future__ import annotations

import enum

from spongenet.buffer import Buffer


class ParseResult(enum.Enum):
    """Outcome of parsing a datagram, segment, frame or ARP message."""

    NO_ERROR = 0
    BAD_CHECKSUM = 1
    PACKET_TOO_SHORT = 2
    WRONG_IP_VERSION = 3
    HEADER_TOO_SHORT = 4
    TRUNCATED_PACKET = 5
    UNSUPPORTED = 6

    def __str__(self) -> str:
        return _LABELS[self]


_LABELS = {
    ParseResult.NO_ERROR: "NoError",
    ParseResult.BAD_CHECKSUM: "BadChecksum",
    ParseResult.PACKET_TOO_SHORT: "PacketTooShort",
    ParseResult.WRONG_IP_VERSION: "WrongIPVersion",
    ParseResult.HEADER_TOO_SHORT: "HeaderTooShort",
    ParseResult.TRUNCATED_PACKET: "TruncatedPacket",
    ParseResult.UNSUPPORTED: "Unsupported",
}


class ParseError(Exception):
    """Raised when data cannot be parsed; carries the ParseResult."""

    def __init__(self, result: ParseResult) -> None:
        super().__init__(str(result))
        self.result = result


class NetParser:
    """Reads big-endian integers from the front of a Buffer.

    Running past the end sets a sticky PACKET_TOO_SHORT error; after an
    error every read returns 0 and consumes nothing.
    """

    def __init__(self, buffer) -> None:
        self._buffer = Buffer(buffer)
        self._error = ParseResult.NO_ERROR

    def buffer(self) -> Buffer:
        """Return a copy of the unparsed remainder."""
        return Buffer(self._buffer)

    def error(self) -> ParseResult:
        """Return the result of parsing so far."""
        return self._error

    def set_error(self, result: ParseResult) -> None:
        self._error = result

    def check(self) -> None:
        """Raise ParseError if an error has been recorded."""
        if self._error is not ParseResult.NO_ERROR:
            raise ParseError(self._error)

    def _check_size(self, size: int) -> None:
        if size > len(self._buffer):
            self._error = ParseResult.PACKET_TOO_SHORT

    def _parse_int(self, width: int) -> int:
        self._check_size(width)
        if self._error is not ParseResult.NO_ERROR:
            return 0
        value = int.from_bytes(bytes(self._buffer)[:width], "big")
        self._buffer.remove_prefix(width)
        return value

    def u8(self) -> int:
        return self._parse_int(1)

    def u16(self) -> int:
        return self._parse_int(2)

    def u32(self) -> int:
        return self._parse_int(4)

    def remove_prefix(self, n: int) -> None:
        """Skip ``n`` bytes, recording an error if there are not enough."""
        self._check_size(n)
        if self._error is not ParseResult.NO_ERROR:
            return
        self._buffer.remove_prefix(n)


def unparse_u8(value: int) -> bytes:
    """Encode the low 8 bits of ``value``."""
    return (value & 0xFF).to_bytes(1, "big")


def unparse_u16(value: int) -> bytes:
    """Encode the low 16 bits of ``value`` in network byte order."""
    return (value & 0xFFFF).to_bytes(2, "big")


def unparse_u32(value: int) -> bytes:
    """Encode the low 32 bits of ``value`` in network byte order."""
    return (value & 0xFFFFFFFF).to_bytes(4, "big")