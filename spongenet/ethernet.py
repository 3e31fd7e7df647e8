"""Ethernet frame headers and frames."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from spongenet.buffer import BufferList
from spongenet.parser import (
    NetParser,
    ParseError,
    ParseResult,
    unparse_u8,
    unparse_u16,
)

ETHERNET_ADDRESS_LENGTH = 6

#: The Ethernet broadcast address, ff:ff:ff:ff:ff:ff.
ETHERNET_BROADCAST = b"\xff" * ETHERNET_ADDRESS_LENGTH

_ZERO_ADDRESS = b"\x00" * ETHERNET_ADDRESS_LENGTH


def format_ethernet_address(address) -> str:
    """Return an Ethernet address as colon-separated lower-case hex."""
    return ":".join(f"{byte:02x}" for byte in bytes(address))


def _check_address(address) -> bytes:
    raw = bytes(address)
    if len(raw) != ETHERNET_ADDRESS_LENGTH:
        raise ValueError(f"Ethernet address must be {ETHERNET_ADDRESS_LENGTH} bytes, got {len(raw)}")
    return raw


def _read_address(parser: NetParser) -> bytes:
    return bytes(parser.u8() for _ in range(ETHERNET_ADDRESS_LENGTH))


@dataclass
class EthernetHeader:
    """Ethernet frame header: destination, source and EtherType."""

    LENGTH: ClassVar[int] = 14
    TYPE_IPV4: ClassVar[int] = 0x800
    TYPE_ARP: ClassVar[int] = 0x806

    dst: bytes = _ZERO_ADDRESS
    src: bytes = _ZERO_ADDRESS
    type: int = 0

    @classmethod
    def parse(cls, parser: NetParser) -> "EthernetHeader":
        """Read a header from ``parser``; raise ParseError on failure."""
        if len(parser.buffer()) < cls.LENGTH:
            raise ParseError(ParseResult.PACKET_TOO_SHORT)
        dst = _read_address(parser)
        src = _read_address(parser)
        frame_type = parser.u16()
        parser.check()
        return cls(dst=dst, src=src, type=frame_type)

    def serialize(self) -> bytes:
        """Return the header's wire representation."""
        parts = [unparse_u8(byte) for byte in _check_address(self.dst)]
        parts += [unparse_u8(byte) for byte in _check_address(self.src)]
        parts.append(unparse_u16(self.type))
        return b"".join(parts)

    def __str__(self) -> str:
        if self.type == self.TYPE_IPV4:
            type_name = "IPv4"
        elif self.type == self.TYPE_ARP:
            type_name = "ARP"
        else:
            type_name = f"[unknown type {self.type:x}!]"
        return (
            f"dst={format_ethernet_address(self.dst)}, "
            f"src={format_ethernet_address(self.src)}, type={type_name}"
        )


@dataclass
class EthernetFrame:
    """An Ethernet header followed by its payload."""

    header: EthernetHeader = field(default_factory=EthernetHeader)
    payload: BufferList = field(default_factory=BufferList)

    @classmethod
    def parse(cls, data) -> "EthernetFrame":
        """Parse a frame from bytes or a Buffer; raise ParseError on failure."""
        parser = NetParser(data)
        header = EthernetHeader.parse(parser)
        payload = BufferList(parser.buffer())
        parser.check()
        return cls(header=header, payload=payload)

    def serialize(self) -> BufferList:
        """Return the frame as a header Buffer followed by the payload."""
        ret = BufferList(self.header.serialize())
        ret.append(self.payload)
        return ret