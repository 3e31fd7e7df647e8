import ipaddress

import pytest

from spongenet.arp import ARPMessage
from spongenet.parser import ParseError, ParseResult

SENDER_MAC = bytes([0x02, 0x00, 0x00, 0x00, 0x00, 0x01])
TARGET_MAC = bytes([0x02, 0x00, 0x00, 0x00, 0x00, 0x02])
SENDER_IP = int(ipaddress.IPv4Address("10.0.0.1"))
TARGET_IP = int(ipaddress.IPv4Address("10.0.0.2"))


def make_request() -> ARPMessage:
    return ARPMessage(
        opcode=ARPMessage.OPCODE_REQUEST,
        sender_ethernet_address=SENDER_MAC,
        sender_ip_address=SENDER_IP,
        target_ip_address=TARGET_IP,
    )


def test_default_request_is_supported():
    assert make_request().supported() is True


def test_serialize_length():
    assert len(make_request().serialize()) == ARPMessage.LENGTH


def test_serialize_fixed_fields():
    wire = make_request().serialize()
    assert wire[:8] == b"\x00\x01\x08\x00\x06\x04\x00\x01"
    assert wire[8:14] == SENDER_MAC
    assert wire[14:18] == SENDER_IP.to_bytes(4, "big")


def test_round_trip_request():
    message = make_request()
    assert ARPMessage.parse(message.serialize()) == message


def test_round_trip_reply():
    message = ARPMessage(
        opcode=ARPMessage.OPCODE_REPLY,
        sender_ethernet_address=TARGET_MAC,
        sender_ip_address=TARGET_IP,
        target_ethernet_address=SENDER_MAC,
        target_ip_address=SENDER_IP,
    )
    parsed = ARPMessage.parse(message.serialize())
    assert parsed == message
    assert parsed.opcode == ARPMessage.OPCODE_REPLY


def test_parse_too_short():
    wire = make_request().serialize()
    with pytest.raises(ParseError) as info:
        ARPMessage.parse(wire[:-1])
    assert info.value.result is ParseResult.PACKET_TOO_SHORT


def test_parse_unsupported_opcode():
    wire = bytearray(make_request().serialize())
    wire[7] = 3
    with pytest.raises(ParseError) as info:
        ARPMessage.parse(bytes(wire))
    assert info.value.result is ParseResult.UNSUPPORTED


def test_parse_unsupported_hardware_type():
    wire = bytearray(make_request().serialize())
    wire[1] = 6
    with pytest.raises(ParseError) as info:
        ARPMessage.parse(bytes(wire))
    assert info.value.result is ParseResult.UNSUPPORTED


def test_serialize_unsupported_raises():
    message = make_request()
    message.opcode = 7
    assert message.supported() is False
    with pytest.raises(ValueError):
        message.serialize()


def test_str_request():
    assert str(make_request()) == (
        "opcode=REQUEST, sender=02:00:00:00:00:01/10.0.0.1, "
        "target=00:00:00:00:00:00/10.0.0.2"
    )


def test_str_unknown_opcode():
    message = make_request()
    message.opcode = 9
    assert str(message).startswith("opcode=(unknown type), ")