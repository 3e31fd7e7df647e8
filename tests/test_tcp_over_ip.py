import ipaddress

from spongenet.address import Address
from spongenet.ipv4 import IPv4Datagram
from spongenet.tcp_header import TCPHeader
from spongenet.tcp_over_ip import TCPOverIPv4Adapter
from spongenet.tcp_segment import TCPSegment

A_ADDR = Address("10.0.0.1", 1000)
B_ADDR = Address("10.0.0.2", 2000)


def _adapter(source, destination):
    adapter = TCPOverIPv4Adapter()
    adapter.config.source = source
    adapter.config.destination = destination
    return adapter


def _wrapped(**flags):
    sender = _adapter(A_ADDR, B_ADDR)
    seg = TCPSegment(header=TCPHeader(seqno=99, **flags), payload=b"payload")
    return sender, seg, sender.wrap_tcp_in_ip(seg)


def test_wrap_sets_addresses_ports_and_length():
    _, seg, dgram = _wrapped()
    assert seg.header.sport == A_ADDR.port()
    assert seg.header.dport == B_ADDR.port()
    assert dgram.header.src == int(ipaddress.IPv4Address("10.0.0.1"))
    assert dgram.header.dst == int(ipaddress.IPv4Address("10.0.0.2"))
    assert dgram.header.payload_length() == len(dgram.payload)


def test_round_trip_through_wire_format():
    _, seg, dgram = _wrapped(ack=True)
    parsed = IPv4Datagram.parse(dgram.serialize().concatenate())
    receiver = _adapter(B_ADDR, A_ADDR)
    got = receiver.unwrap_tcp_in_ip(parsed)
    assert got is not None
    assert got.header == seg.header
    assert bytes(got.payload) == b"payload"


def test_wrong_destination_address_is_ignored():
    _, _, dgram = _wrapped()
    receiver = _adapter(Address("10.0.0.3", 2000), A_ADDR)
    assert receiver.unwrap_tcp_in_ip(dgram) is None


def test_wrong_source_address_is_ignored():
    _, _, dgram = _wrapped()
    receiver = _adapter(B_ADDR, Address("10.0.0.3", 1000))
    assert receiver.unwrap_tcp_in_ip(dgram) is None


def test_non_tcp_protocol_is_ignored():
    _, _, dgram = _wrapped()
    dgram.header.proto = 17
    assert _adapter(B_ADDR, A_ADDR).unwrap_tcp_in_ip(dgram) is None


def test_bad_checksum_is_ignored():
    _, _, dgram = _wrapped()
    raw = bytearray(dgram.payload.concatenate())
    raw[-1] ^= 0xFF
    dgram.payload = type(dgram.payload)(bytes(raw))
    assert _adapter(B_ADDR, A_ADDR).unwrap_tcp_in_ip(dgram) is None


def test_wrong_ports_are_ignored():
    _, _, dgram = _wrapped()
    assert _adapter(Address("10.0.0.2", 2001), A_ADDR).unwrap_tcp_in_ip(dgram) is None
    assert _adapter(B_ADDR, Address("10.0.0.1", 1001)).unwrap_tcp_in_ip(dgram) is None


def test_listening_accepts_syn_and_records_peer():
    _, _, dgram = _wrapped(syn=True)
    receiver = _adapter(Address("0", 2000), Address("0", 0))
    receiver.listening = True
    got = receiver.unwrap_tcp_in_ip(dgram)
    assert got is not None
    assert got.header.syn
    assert receiver.listening is False
    assert receiver.config.source == B_ADDR
    assert receiver.config.destination == A_ADDR


def test_listening_ignores_non_syn():
    _, _, dgram = _wrapped()
    receiver = _adapter(Address("0", 2000), Address("0", 0))
    receiver.listening = True
    assert receiver.unwrap_tcp_in_ip(dgram) is None
    assert receiver.listening is True


def test_listening_ignores_syn_with_rst():
    _, _, dgram = _wrapped(syn=True, rst=True)
    receiver = _adapter(Address("0", 2000), Address("0", 0))
    receiver.listening = True
    assert receiver.unwrap_tcp_in_ip(dgram) is None
    assert receiver.listening is True