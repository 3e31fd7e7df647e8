"""Small helpers: Internet checksum, timing, random generators and hex dumps."""

from __future__ import annotations

import random
import secrets
import sys
import time

_PROGRAM_START = time.monotonic()

# Number of 32-bit words in the state of a Mersenne Twister generator.
_MT_STATE_WORDS = 624


def timestamp_ms() -> int:
    """Return the number of milliseconds since the program started."""
    return int((time.monotonic() - _PROGRAM_START) * 1000)


def get_random_generator() -> random.Random:
    """Return a Mersenne Twister generator seeded with plenty of entropy."""
    seed = int.from_bytes(secrets.token_bytes(_MT_STATE_WORDS * 4), "big")
    return random.Random(seed)


class InternetChecksum:
    """Incremental Internet checksum (RFC 1071), returned in host byte order.

    Running it over data that already holds a correct checksum gives zero.
    To compute a checksum, zero the checksum field first and store the result.
    """

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & 0xFFFFFFFF
        self._parity = False

    def add(self, data) -> None:
        """Add bytes (or anything convertible with ``bytes()``) to the sum."""
        total = self._sum
        parity = self._parity
        for byte in bytes(data):
            total += byte if parity else byte << 8
            parity = not parity
        self._sum = total & 0xFFFFFFFF
        self._parity = parity

    def value(self) -> int:
        """Return the 16-bit one's-complement checksum."""
        ret = self._sum
        while ret > 0xFFFF:
            ret = (ret >> 16) + (ret & 0xFFFF)
        return ~ret & 0xFFFF


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte < 0x7F else "."


def hexdump(data, indent: int = 0) -> None:
    """Write a hex dump of ``data`` to standard output."""
    raw = bytes(data)
    pad = " " * indent
    out: list[str] = []
    chars: list[str] = []
    for printed, byte in enumerate(raw):
        if printed % 16 == 0:
            if printed:
                out.append("    " + "".join(chars) + "\n")
                chars = []
            out.append(f"{pad}{printed:08x}:    ")
        elif printed % 2 == 0:
            out.append(" ")
        out.append(f"{byte:02x}")
        chars.append(_printable(byte))
    remainder = (16 - len(raw) % 16) % 16
    out.append(" " * (2 * remainder + remainder // 2 + 4) + ("".join(chars) or " "))
    out.append("\n\n")
    sys.stdout.write("".join(out))
    sys.stdout.flush()