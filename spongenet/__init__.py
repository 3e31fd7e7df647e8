"""Packet formats, the Internet checksum, buffers, sockets, an event loop and TCP carrying adapters."""

__version__ = "0.1.0"