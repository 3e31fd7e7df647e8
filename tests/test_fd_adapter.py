import pytest

from spongenet.address import Address
from spongenet.fd_adapter import TCPOverUDPSocketAdapter
from spongenet.sockets import UDPSocket
from spongenet.tcp_header import TCPHeader
from spongenet.tcp_segment import TCPSegment

LOCALHOST = "127.0.0.1"


@pytest.fixture
def endpoints():
    ours = UDPSocket()
    ours.bind(Address(LOCALHOST, 0))
    peer = UDPSocket()
    peer.bind(Address(LOCALHOST, 0))
    adapter = TCPOverUDPSocketAdapter(ours)
    adapter.config.source = ours.local_address()
    yield adapter, peer
    ours.close()
    peer.close()


def _segment(**flags) -> TCPSegment:
    return TCPSegment(header=TCPHeader(seqno=1234, **flags), payload=b"data")


def test_listening_accepts_syn_and_records_peer(endpoints):
    adapter, peer = endpoints
    adapter.listening = True
    peer.sendto(adapter.sock.local_address(), _segment(syn=True).serialize())
    seg = adapter.read()
    assert seg is not None
    assert seg.header.syn
    assert seg.header.seqno == 1234
    assert bytes(seg.payload) == b"data"
    assert adapter.listening is False
    assert adapter.config.destination == peer.local_address()


def test_listening_ignores_non_syn(endpoints):
    adapter, peer = endpoints
    adapter.listening = True
    peer.sendto(adapter.sock.local_address(), _segment().serialize())
    assert adapter.read() is None
    assert adapter.listening is True


def test_listening_ignores_syn_with_rst(endpoints):
    adapter, peer = endpoints
    adapter.listening = True
    peer.sendto(adapter.sock.local_address(), _segment(syn=True, rst=True).serialize())
    assert adapter.read() is None
    assert adapter.listening is True


def test_unrelated_source_is_ignored(endpoints):
    adapter, peer = endpoints
    peer.sendto(adapter.sock.local_address(), _segment().serialize())
    assert adapter.read() is None


def test_invalid_payload_is_ignored(endpoints):
    adapter, peer = endpoints
    adapter.config.destination = peer.local_address()
    peer.sendto(adapter.sock.local_address(), b"junk")
    assert adapter.read() is None


def test_connected_read_returns_segment(endpoints):
    adapter, peer = endpoints
    adapter.config.destination = peer.local_address()
    peer.sendto(adapter.sock.local_address(), _segment(fin=True).serialize())
    seg = adapter.read()
    assert seg is not None
    assert seg.header.fin
    assert bytes(seg.payload) == b"data"


def test_write_sets_ports_and_sends(endpoints):
    adapter, peer = endpoints
    adapter.config.destination = peer.local_address()
    seg = _segment(ack=True)
    adapter.write(seg)
    assert seg.header.sport == adapter.sock.local_address().port()
    assert seg.header.dport == peer.local_address().port()

    datagram = peer.recv()
    assert datagram.source_address == adapter.sock.local_address()
    received = TCPSegment.parse(datagram.payload)
    assert received.header == seg.header
    assert received.header.sport == seg.header.sport
    assert bytes(received.payload) == b"data"


def test_fileno_is_socket_descriptor(endpoints):
    adapter, _ = endpoints
    assert adapter.fileno() == adapter.sock.fileno()