"""A poll-based event loop that runs callbacks when file descriptors are ready."""

from __future__ import annotations

import enum
import select
from dataclasses import dataclass
from typing import Callable, Optional

from spongenet.file_descriptor import FileDescriptor


class Direction(enum.Enum):
    """Whether a rule waits for its descriptor to become readable or writable."""

    IN = select.POLLIN
    OUT = select.POLLOUT


class EventLoopResult(enum.Enum):
    """Outcome of one call to ``EventLoop.wait_next_event``."""

    SUCCESS = enum.auto()
    TIMEOUT = enum.auto()
    EXIT = enum.auto()


@dataclass(eq=False)
class _Rule:
    fd: FileDescriptor
    direction: Direction
    callback: Callable[[], None]
    interest: Optional[Callable[[], bool]]
    cancel: Optional[Callable[[], None]]

    def service_count(self) -> int:
        if self.direction is Direction.IN:
            return self.fd.read_count()
        return self.fd.write_count()

    def interested(self) -> bool:
        return self.interest is None or bool(self.interest())


class EventLoop:
    """Waits for events on file descriptors and runs the matching callbacks.

    Every callback must read from or write to its descriptor, or its interest
    must turn false afterwards; otherwise a busy wait is reported.
    """

    def __init__(self) -> None:
        self._rules: list[_Rule] = []

    def add_rule(
        self,
        fd: FileDescriptor,
        direction: Direction,
        callback: Callable[[], None],
        interest: Optional[Callable[[], bool]] = None,
        cancel: Optional[Callable[[], None]] = None,
    ) -> None:
        """Run ``callback`` whenever ``fd`` is ready in ``direction`` and ``interest()`` holds.

        Without ``interest`` the rule is always interested; ``cancel`` is
        called when the rule is dropped.
        """
        self._rules.append(_Rule(fd.duplicate(), direction, callback, interest, cancel))

    def _cancel(self, rule: _Rule) -> None:
        if rule.cancel is not None:
            rule.cancel()
        self._rules.remove(rule)

    def wait_next_event(self, timeout_ms: int) -> EventLoopResult:
        """Poll once and run the callbacks of every ready rule."""
        polled: list[tuple[_Rule, int]] = []
        something_to_poll = False

        for rule in list(self._rules):
            if rule.direction is Direction.IN and rule.fd.eof():
                self._cancel(rule)
                continue
            if rule.fd.closed():
                self._cancel(rule)
                continue
            if rule.interested():
                polled.append((rule, rule.direction.value))
                something_to_poll = True
            else:
                # Still registered so that errors are reported.
                polled.append((rule, 0))

        if not something_to_poll:
            return EventLoopResult.EXIT

        masks: dict[int, int] = {}
        for rule, events in polled:
            fd_num = rule.fd.fileno()
            masks[fd_num] = masks.get(fd_num, 0) | events

        poller = select.poll()
        for fd_num, mask in masks.items():
            poller.register(fd_num, mask)

        try:
            ready = poller.poll(timeout_ms)
        except InterruptedError:
            return EventLoopResult.EXIT
        if not ready:
            return EventLoopResult.TIMEOUT

        revents_by_fd = dict(ready)
        for rule, events in polled:
            revents = revents_by_fd.get(rule.fd.fileno(), 0)
            if revents & (select.POLLERR | select.POLLNVAL):
                raise RuntimeError("EventLoop: error on polled file descriptor")

            poll_ready = bool(revents & events)
            poll_hup = bool(revents & select.POLLHUP)
            if poll_hup and events and not poll_ready:
                # The only condition was a hangup: this descriptor is defunct.
                self._cancel(rule)
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and rule.interested():
                    raise RuntimeError(
                        "EventLoop: busy wait detected: callback did not read/write fd and is still interested"
                    )

        return EventLoopResult.SUCCESS