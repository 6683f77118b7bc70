"""I/O multiplexing back ends that report which channels are ready."""

from __future__ import annotations

import abc
import contextlib
import os
import select
import sys

from .channel import EventFlag
from .log import log_err, msgx

INIT_POLL_SIZE = 1024
MAXEVENTS = 128


class EventDispatcher(abc.ABC):
    """Watches channels and reports ready ``(fd, EventFlag)`` pairs.

    ``dispatch`` returns the pairs in the order the events should be
    handled; the event loop runs the matching callbacks.
    """

    name = "abstract"

    def __init__(self, thread_name="main thread"):
        self.thread_name = thread_name

    @abc.abstractmethod
    def add(self, channel):
        """Start watching ``channel``."""

    @abc.abstractmethod
    def delete(self, channel):
        """Stop watching ``channel``."""

    @abc.abstractmethod
    def update(self, channel):
        """Change the events watched for ``channel``."""

    @abc.abstractmethod
    def dispatch(self, timeout):
        """Wait up to ``timeout`` seconds (``None`` blocks) and return ready events."""

    @abc.abstractmethod
    def clear(self):
        """Release all resources."""


def _ready_events(fd, revents, read_mask, write_mask):
    ready = []
    if revents & read_mask:
        ready.append((fd, EventFlag.READ))
    if revents & write_mask:
        ready.append((fd, EventFlag.WRITE))
    return ready


class PollDispatcher(EventDispatcher):
    """Dispatcher built on ``poll``, watching at most 1024 descriptors."""

    name = "poll"

    def __init__(self, thread_name="main thread"):
        super().__init__(thread_name)
        self._poll = select.poll()
        self._watched = {}

    @staticmethod
    def _mask(channel):
        mask = 0
        if channel.events & EventFlag.READ:
            mask |= select.POLLIN
        if channel.events & EventFlag.WRITE:
            mask |= select.POLLOUT
        return mask

    def add(self, channel):
        fd = channel.fd
        full = len(self._watched) >= INIT_POLL_SIZE and fd not in self._watched
        if not full:
            mask = self._mask(channel)
            self._poll.register(fd, mask)
            self._watched[fd] = mask
        msgx(f"poll added channel fd=={fd}, {self.thread_name}")
        if full:
            log_err("too many clients, just abort it")

    def delete(self, channel):
        fd = channel.fd
        found = self._watched.pop(fd, None) is not None
        if found:
            self._poll.unregister(fd)
        msgx(f"poll delete channel fd=={fd}, {self.thread_name}")
        if not found:
            log_err("can not find fd, poll delete error")

    def update(self, channel):
        fd = channel.fd
        found = fd in self._watched
        if found:
            mask = self._mask(channel)
            self._poll.modify(fd, mask)
            self._watched[fd] = mask
        msgx(f"poll updated channel fd=={fd}, {self.thread_name}")
        if not found:
            log_err("can not find fd, poll updated error")

    def dispatch(self, timeout):
        wait = None if timeout is None else int(timeout * 1000)
        ready = []
        for fd, revents in self._poll.poll(wait):
            if fd not in self._watched or revents <= 0:
                continue
            msgx(f"get message channel fd=={fd}, {self.thread_name}")
            ready.extend(_ready_events(fd, revents, select.POLLIN, select.POLLOUT))
        return ready

    def clear(self):
        for fd in list(self._watched):
            self._poll.unregister(fd)
        self._watched.clear()


class EpollDispatcher(EventDispatcher):
    """Level-triggered dispatcher built on ``epoll``."""

    name = "epoll"

    def __init__(self, thread_name="main thread"):
        super().__init__(thread_name)
        self._epoll = select.epoll()

    @staticmethod
    def _mask(channel):
        mask = 0
        if channel.events & EventFlag.READ:
            mask |= select.EPOLLIN
        if channel.events & EventFlag.WRITE:
            mask |= select.EPOLLOUT
        return mask

    def add(self, channel):
        self._epoll.register(channel.fd, self._mask(channel))

    def delete(self, channel):
        self._epoll.unregister(channel.fd)

    def update(self, channel):
        self._epoll.modify(channel.fd, self._mask(channel))

    def dispatch(self, timeout):
        wait = -1 if timeout is None else timeout
        events = self._epoll.poll(wait, MAXEVENTS)
        msgx(f"epoll_wait wakeup, {self.thread_name}")
        ready = []
        for fd, revents in events:
            if revents & (select.EPOLLERR | select.EPOLLHUP):
                print("epoll error", file=sys.stderr)
                with contextlib.suppress(OSError):
                    self._epoll.unregister(fd)
                with contextlib.suppress(OSError):
                    os.close(fd)
                continue
            if revents & select.EPOLLIN:
                msgx(f"get message channel fd=={fd} for read, {self.thread_name}")
            if revents & select.EPOLLOUT:
                msgx(f"get message channel fd=={fd} for write, {self.thread_name}")
            ready.extend(_ready_events(fd, revents, select.EPOLLIN, select.EPOLLOUT))
        return ready

    def clear(self):
        self._epoll.close()


def default_dispatcher(thread_name="main thread"):
    """An epoll dispatcher where the platform has one, otherwise poll."""
    if hasattr(select, "epoll"):
        msgx(f"set epoll as dispatcher, {thread_name}")
        return EpollDispatcher(thread_name)
    msgx(f"set poll as dispatcher, {thread_name}")
    return PollDispatcher(thread_name)