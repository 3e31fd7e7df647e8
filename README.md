# spongenet

Building blocks for a TCP stack that runs in user space:

- wire formats for Ethernet headers and frames, ARP messages, IPv4 headers
  and datagrams, and TCP headers and segments;
- the Internet checksum (`InternetChecksum`) and a hex dump printer
  (`hexdump`);
- byte buffers that discard bytes from the front without copying
  (`Buffer`, `BufferList`, `BufferViewList`);
- IPv4 addresses with name resolution (`Address`);
- shared file descriptor handles that count reads and writes
  (`FileDescriptor`) and socket wrappers built on them (`UDPSocket`,
  `TCPSocket`, `LocalStreamSocket`);
- a `poll`-based event loop (`EventLoop`);
- adapters that carry TCP segments inside UDP payloads or IPv4 datagrams.

It needs a POSIX system (it uses `select.poll` and `os.writev`) and has no
dependencies outside the standard library.

## Installing

```
pip install .
```

The tests run with `pytest` after `pip install .[test]`.

## Parsing and building packets

Every format is a dataclass. `parse` is a class method: the frame,
datagram, segment and ARP classes take raw bytes (or a `Buffer`), while the
header classes take a `NetParser` positioned at the header. `serialize`
produces the wire form again: `bytes` for headers and ARP messages, a
`BufferList` (header followed by payload) for frames, datagrams and
segments.

Malformed input raises `spongenet.parser.ParseError`. Its `result`
attribute is a `ParseResult` member (`BAD_CHECKSUM`, `PACKET_TOO_SHORT`,
`WRONG_IP_VERSION`, `HEADER_TOO_SHORT`, `TRUNCATED_PACKET`, `UNSUPPORTED`),
whose `str()` is the CamelCase name, such as `BadChecksum`.

```python
from spongenet.tcp_segment import TCPSegment

seg = TCPSegment()
seg.header.syn = True
seg.header.seqno = 1000
wire = seg.serialize(0).concatenate()   # checksum is filled in

parsed = TCPSegment.parse(wire, 0)      # checksum is verified
print(parsed.header.summary())          # Header(flags=S,seqno=1000,ack=0,win=0)
print(parsed.length_in_sequence_space())  # 1
```

The second argument to `TCPSegment.parse` and `TCPSegment.serialize` is the
pseudo-header sum from the layer below; `IPv4Header.pseudo_cksum()` gives it
for a segment carried in IPv4. `IPv4Datagram.serialize` recomputes the header
checksum; `IPv4Header.parse` checks lengths, version and checksum.
`ARPMessage.parse` and `ARPMessage.serialize` accept only Ethernet/IPv4
requests and replies. The `str()` of `EthernetHeader`, `ARPMessage`,
`IPv4Header` and `TCPHeader` gives a readable description, and the IPv4 and
TCP headers also have a one-line `summary()`.

The low-level reader is `NetParser` (`u8`, `u16`, `u32`, `remove_prefix`,
with a sticky error recorded when data runs out and raised by `check()`);
`unparse_u8`, `unparse_u16` and `unparse_u32` encode integers in network
byte order.

## Checksums and hex dumps

```python
from spongenet.util import InternetChecksum, hexdump

check = InternetChecksum(0)
check.add(b"\x45\x00\x00\x14")
print(hex(check.value()))

hexdump(b"hello, world", indent=2)
```

Running `InternetChecksum` over data that already holds a correct checksum
gives zero. `spongenet.util` also has `timestamp_ms()` (milliseconds since
the module was loaded) and `get_random_generator()` (a well-seeded
`random.Random`).

## Sockets and the event loop

`UDPSocket`, `TCPSocket` and `LocalStreamSocket` wrap operating-system
sockets and take `Address` objects, for example `Address("127.0.0.1", 8080)`.
With an integer port the host must be numeric; with a string service both
host and service are resolved. `UDPSocket.recv` returns a `ReceivedDatagram`
with `source_address` and `payload`.

`EventLoop.add_rule(fd, direction, callback, interest, cancel)` registers a
callback for a `FileDescriptor` becoming readable (`Direction.IN`) or
writable (`Direction.OUT`). `EventLoop.wait_next_event(timeout_ms)` polls
once and returns an `EventLoopResult`: `SUCCESS`, `TIMEOUT`, or `EXIT` when
nothing is left to poll. A callback that neither reads nor writes its
descriptor while its rule is still interested raises `RuntimeError`
(busy wait).

## Carrying TCP segments

Every adapter derives from `FdAdapterBase`, which holds an `FdAdapterConfig`
(`source`, `destination`, `loss_rate_dn`, `loss_rate_up`) as `config`, a
`listening` flag and a `tick` method.

- `TCPOverUDPSocketAdapter` reads and writes TCP segments as UDP payloads
  on a `UDPSocket`. While listening, a SYN without RST fixes the peer.
- `TCPOverIPv4Adapter` wraps segments in IPv4 datagrams
  (`wrap_tcp_in_ip`) and returns the segment of an incoming datagram only
  when it belongs to the current connection (`unwrap_tcp_in_ip`).
- `LossyFdAdapter` wraps another adapter and drops reads and writes at the
  wrapped adapter's loss rates, which are out of 65536.

```python
from spongenet.address import Address
from spongenet.tcp_over_ip import TCPOverIPv4Adapter
from spongenet.tcp_segment import TCPSegment

adapter = TCPOverIPv4Adapter()
adapter.config.source = Address("10.0.0.1", 5000)
adapter.config.destination = Address("10.0.0.2", 6000)

datagram = adapter.wrap_tcp_in_ip(TCPSegment())
wire = datagram.serialize().concatenate()
```

`TCPConfig` holds the settings a TCP endpoint would use (retransmission
timeout, capacities, fixed initial sequence number).

## What this package does not do

It contains no TCP sender, receiver or connection state machine: nothing
here sequences, acknowledges or retransmits data, and `TCPConfig` is only a
settings record. There is no command-line program, no socket class that runs
a whole TCP connection, and no access to TUN or TAP devices; the adapters
work over UDP sockets or over IPv4 datagrams you supply.