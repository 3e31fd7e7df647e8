"""ARP messages for Ethernet and IPv4."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import ClassVar

from spongenet.ethernet import (
    ETHERNET_ADDRESS_LENGTH,
    EthernetHeader,
    format_ethernet_address,
)
from spongenet.parser import (
    NetParser,
    ParseError,
    ParseResult,
    unparse_u8,
    unparse_u16,
    unparse_u32,
)

IPV4_ADDRESS_LENGTH = 4

_ZERO_ADDRESS = b"\x00" * ETHERNET_ADDRESS_LENGTH


def _read_address(parser: NetParser) -> bytes:
    return bytes(parser.u8() for _ in range(ETHERNET_ADDRESS_LENGTH))


def _ethernet_bytes(address) -> bytes:
    raw = bytes(address)
    if len(raw) != ETHERNET_ADDRESS_LENGTH:
        raise ValueError(f"Ethernet address must be {ETHERNET_ADDRESS_LENGTH} bytes, got {len(raw)}")
    return raw


@dataclass
class ARPMessage:
    """An ARP request or reply mapping IPv4 addresses to Ethernet addresses."""

    LENGTH: ClassVar[int] = 28
    TYPE_ETHERNET: ClassVar[int] = 1
    OPCODE_REQUEST: ClassVar[int] = 1
    OPCODE_REPLY: ClassVar[int] = 2

    hardware_type: int = 1
    protocol_type: int = EthernetHeader.TYPE_IPV4
    hardware_address_size: int = ETHERNET_ADDRESS_LENGTH
    protocol_address_size: int = IPV4_ADDRESS_LENGTH
    opcode: int = 0
    sender_ethernet_address: bytes = _ZERO_ADDRESS
    sender_ip_address: int = 0
    target_ethernet_address: bytes = _ZERO_ADDRESS
    target_ip_address: int = 0

    @classmethod
    def parse(cls, data) -> "ARPMessage":
        """Parse a message; raise ParseError if it is short or unsupported."""
        parser = NetParser(data)
        if len(parser.buffer()) < cls.LENGTH:
            raise ParseError(ParseResult.PACKET_TOO_SHORT)

        message = cls(
            hardware_type=parser.u16(),
            protocol_type=parser.u16(),
            hardware_address_size=parser.u8(),
            protocol_address_size=parser.u8(),
            opcode=parser.u16(),
        )
        if not message.supported():
            raise ParseError(ParseResult.UNSUPPORTED)

        message.sender_ethernet_address = _read_address(parser)
        message.sender_ip_address = parser.u32()
        message.target_ethernet_address = _read_address(parser)
        message.target_ip_address = parser.u32()
        parser.check()
        return message

    def supported(self) -> bool:
        """Is this an Ethernet/IPv4 request or reply?"""
        return (
            self.hardware_type == self.TYPE_ETHERNET
            and self.protocol_type == EthernetHeader.TYPE_IPV4
            and self.hardware_address_size == ETHERNET_ADDRESS_LENGTH
            and self.protocol_address_size == IPV4_ADDRESS_LENGTH
            and self.opcode in (self.OPCODE_REQUEST, self.OPCODE_REPLY)
        )

    def serialize(self) -> bytes:
        """Return the wire representation of the message."""
        if not self.supported():
            raise ValueError(
                "ARPMessage.serialize(): unsupported field combination "
                "(must be Ethernet/IP, and request or reply)"
            )
        parts = [
            unparse_u16(self.hardware_type),
            unparse_u16(self.protocol_type),
            unparse_u8(self.hardware_address_size),
            unparse_u8(self.protocol_address_size),
            unparse_u16(self.opcode),
        ]
        parts += [unparse_u8(byte) for byte in _ethernet_bytes(self.sender_ethernet_address)]
        parts.append(unparse_u32(self.sender_ip_address))
        parts += [unparse_u8(byte) for byte in _ethernet_bytes(self.target_ethernet_address)]
        parts.append(unparse_u32(self.target_ip_address))
        return b"".join(parts)

    def __str__(self) -> str:
        if self.opcode == self.OPCODE_REQUEST:
            opcode_name = "REQUEST"
        elif self.opcode == self.OPCODE_REPLY:
            opcode_name = "REPLY"
        else:
            opcode_name = "(unknown type)"
        sender_ip = ipaddress.IPv4Address(self.sender_ip_address & 0xFFFFFFFF)
        target_ip = ipaddress.IPv4Address(self.target_ip_address & 0xFFFFFFFF)
        return (
            f"opcode={opcode_name}, "
            f"sender={format_ethernet_address(self.sender_ethernet_address)}/{sender_ip}, "
            f"target={format_ethernet_address(self.target_ethernet_address)}/{target_ip}"
        )