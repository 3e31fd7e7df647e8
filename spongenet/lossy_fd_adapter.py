"""An adapter wrapper that drops segments at random."""

from __future__ import annotations

import random
from typing import Optional

from spongenet.tcp_config import FdAdapterConfig
from spongenet.tcp_segment import TCPSegment
from spongenet.util import get_random_generator


class LossyFdAdapter:
    """Wraps an adapter and drops reads and writes with the configured loss rates.

    A loss rate is out of 65536: a transfer is dropped when the low 16 bits of
    a random 32-bit number fall below it.
    """

    def __init__(self, adapter, rng: Optional[random.Random] = None) -> None:
        self.adapter = adapter
        self._rng = rng if rng is not None else get_random_generator()

    def _should_drop(self, uplink: bool) -> bool:
        cfg = self.adapter.config
        loss = cfg.loss_rate_up if uplink else cfg.loss_rate_dn
        return loss != 0 and (self._rng.getrandbits(32) & 0xFFFF) < loss

    def read(self) -> Optional[TCPSegment]:
        """Read from the wrapped adapter, possibly dropping what was read."""
        ret = self.adapter.read()
        if self._should_drop(False):
            return None
        return ret

    def write(self, seg: TCPSegment) -> None:
        """Write through the wrapped adapter unless the segment is dropped."""
        if self._should_drop(True):
            return
        self.adapter.write(seg)

    def set_listening(self, listening: bool) -> None:
        self.adapter.listening = listening

    @property
    def config(self) -> FdAdapterConfig:
        """The wrapped adapter's configuration."""
        return self.adapter.config

    def tick(self, ms_since_last_tick: int) -> None:
        self.adapter.tick(ms_since_last_tick)

    def fileno(self) -> int:
        return self.adapter.fileno()