import pytest

from spongenet.buffer import BufferList
from spongenet.ethernet import (
    ETHERNET_BROADCAST,
    EthernetFrame,
    EthernetHeader,
    format_ethernet_address,
)
from spongenet.parser import NetParser, ParseError, ParseResult

SRC = bytes([0x02, 0x00, 0x00, 0x00, 0x00, 0x0A])


def test_format_broadcast_address():
    assert format_ethernet_address(ETHERNET_BROADCAST) == "ff:ff:ff:ff:ff:ff"


def test_format_pads_each_byte():
    assert format_ethernet_address(SRC) == "02:00:00:00:00:0a"


def test_header_serialize_wire_layout():
    header = EthernetHeader(dst=ETHERNET_BROADCAST, src=SRC, type=EthernetHeader.TYPE_ARP)
    wire = header.serialize()
    assert len(wire) == EthernetHeader.LENGTH
    assert wire == ETHERNET_BROADCAST + SRC + b"\x08\x06"


def test_header_parse_round_trip_and_consumes_header():
    header = EthernetHeader(dst=ETHERNET_BROADCAST, src=SRC, type=EthernetHeader.TYPE_IPV4)
    parser = NetParser(header.serialize() + b"rest")
    parsed = EthernetHeader.parse(parser)
    assert parsed == header
    assert bytes(parser.buffer()) == b"rest"


def test_header_parse_too_short():
    with pytest.raises(ParseError) as info:
        EthernetHeader.parse(NetParser(b"\x00" * (EthernetHeader.LENGTH - 1)))
    assert info.value.result is ParseResult.PACKET_TOO_SHORT


def test_header_str_names_known_types():
    ipv4 = EthernetHeader(dst=ETHERNET_BROADCAST, src=SRC, type=EthernetHeader.TYPE_IPV4)
    arp = EthernetHeader(dst=ETHERNET_BROADCAST, src=SRC, type=EthernetHeader.TYPE_ARP)
    assert str(ipv4).endswith("type=IPv4")
    assert str(arp).endswith("type=ARP")
    assert str(ipv4).startswith("dst=" + format_ethernet_address(ETHERNET_BROADCAST))


def test_header_str_unknown_type():
    header = EthernetHeader(dst=SRC, src=SRC, type=0xABC)
    assert "[unknown type abc!]" in str(header)


def test_header_serialize_rejects_bad_address():
    header = EthernetHeader(dst=b"\x01\x02", src=SRC, type=EthernetHeader.TYPE_IPV4)
    with pytest.raises(ValueError):
        header.serialize()


def test_frame_round_trip():
    frame = EthernetFrame(
        header=EthernetHeader(dst=ETHERNET_BROADCAST, src=SRC, type=EthernetHeader.TYPE_IPV4),
        payload=BufferList(b"hello, world"),
    )
    wire = frame.serialize().concatenate()
    parsed = EthernetFrame.parse(wire)
    assert parsed.header == frame.header
    assert parsed.payload.concatenate() == b"hello, world"


def test_frame_serialize_puts_header_first():
    frame = EthernetFrame(
        header=EthernetHeader(dst=SRC, src=ETHERNET_BROADCAST, type=EthernetHeader.TYPE_ARP),
        payload=BufferList(b"abc"),
    )
    wire = frame.serialize()
    assert len(wire) == EthernetHeader.LENGTH + 3
    assert wire.concatenate()[: EthernetHeader.LENGTH] == frame.header.serialize()


def test_frame_with_empty_payload():
    header = EthernetHeader(dst=SRC, src=SRC, type=EthernetHeader.TYPE_IPV4)
    parsed = EthernetFrame.parse(header.serialize())
    assert len(parsed.payload) == 0
    assert parsed.header == header


def test_frame_parse_too_short():
    with pytest.raises(ParseError) as info:
        EthernetFrame.parse(b"\x01\x02\x03")
    assert info.value.result is ParseResult.PACKET_TOO_SHORT