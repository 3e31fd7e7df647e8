"""TCP segment headers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from spongenet.parser import (
    NetParser,
    ParseError,
    ParseResult,
    unparse_u8,
    unparse_u16,
    unparse_u32,
)

_URG = 0b0010_0000
_ACK = 0b0001_0000
_PSH = 0b0000_1000
_RST = 0b0000_0100
_SYN = 0b0000_0010
_FIN = 0b0000_0001

_BOOL_TEXT = {True: "true", False: "false"}


@dataclass(eq=False)
class TCPHeader:
    """TCP segment header; options are skipped when parsing.

    Sequence and acknowledgment numbers are raw 32-bit values.
    """

    LENGTH: ClassVar[int] = 20

    sport: int = 0
    dport: int = 0
    seqno: int = 0
    ackno: int = 0
    doff: int = 5
    urg: bool = False
    ack: bool = False
    psh: bool = False
    rst: bool = False
    syn: bool = False
    fin: bool = False
    win: int = 0
    cksum: int = 0
    uptr: int = 0

    __hash__ = None  # type: ignore[assignment]

    @classmethod
    def parse(cls, parser: NetParser) -> "TCPHeader":
        """Read a header from ``parser``; raise ParseError on failure."""
        header = cls(
            sport=parser.u16(),
            dport=parser.u16(),
            seqno=parser.u32(),
            ackno=parser.u32(),
            doff=parser.u8() >> 4,
        )
        flags = parser.u8()
        header.urg = bool(flags & _URG)
        header.ack = bool(flags & _ACK)
        header.psh = bool(flags & _PSH)
        header.rst = bool(flags & _RST)
        header.syn = bool(flags & _SYN)
        header.fin = bool(flags & _FIN)
        header.win = parser.u16()
        header.cksum = parser.u16()
        header.uptr = parser.u16()

        if header.doff < 5:
            raise ParseError(ParseResult.HEADER_TOO_SHORT)

        parser.remove_prefix(header.doff * 4 - cls.LENGTH)
        parser.check()
        return header

    def serialize(self) -> bytes:
        """Return the header bytes, padded to ``4 * doff``; the checksum is not recomputed."""
        if self.doff < 5:
            raise ValueError("TCP header too short")
        flags = (
            (_URG if self.urg else 0)
            | (_ACK if self.ack else 0)
            | (_PSH if self.psh else 0)
            | (_RST if self.rst else 0)
            | (_SYN if self.syn else 0)
            | (_FIN if self.fin else 0)
        )
        ret = b"".join(
            (
                unparse_u16(self.sport),
                unparse_u16(self.dport),
                unparse_u32(self.seqno),
                unparse_u32(self.ackno),
                unparse_u8(self.doff << 4),
                unparse_u8(flags),
                unparse_u16(self.win),
                unparse_u16(self.cksum),
                unparse_u16(self.uptr),
            )
        )
        return ret.ljust(4 * self.doff, b"\x00")

    def __str__(self) -> str:
        return (
            f"TCP source port: {self.sport:x}\n"
            f"TCP dest port: {self.dport:x}\n"
            f"TCP seqno: {self.seqno:x}\n"
            f"TCP ackno: {self.ackno:x}\n"
            f"TCP doff: {self.doff:x}\n"
            f"Flags: urg: {_BOOL_TEXT[bool(self.urg)]} ack: {_BOOL_TEXT[bool(self.ack)]} "
            f"psh: {_BOOL_TEXT[bool(self.psh)]} rst: {_BOOL_TEXT[bool(self.rst)]} "
            f"syn: {_BOOL_TEXT[bool(self.syn)]} fin: {_BOOL_TEXT[bool(self.fin)]}\n"
            f"TCP winsize: {self.win:x}\n"
            f"TCP cksum: {self.cksum:x}\n"
            f"TCP uptr: {self.uptr:x}\n"
        )

    def summary(self) -> str:
        """A one-line summary of flags, numbers and window."""
        flags = (
            ("S" if self.syn else "")
            + ("A" if self.ack else "")
            + ("R" if self.rst else "")
            + ("F" if self.fin else "")
        )
        return f"Header(flags={flags},seqno={self.seqno},ack={self.ackno},win={self.win})"

    def __eq__(self, other) -> bool:
        """Compare headers, ignoring ports and checksum."""
        if not isinstance(other, TCPHeader):
            return NotImplemented
        return (
            self.seqno == other.seqno
            and self.ackno == other.ackno
            and self.doff == other.doff
            and self.urg == other.urg
            and self.ack == other.ack
            and self.psh == other.psh
            and self.rst == other.rst
            and self.syn == other.syn
            and self.fin == other.fin
            and self.win == other.win
            and self.uptr == other.uptr
        )