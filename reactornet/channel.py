"""Channels bind a file descriptor to its event interest and callbacks."""

from __future__ import annotations

import enum


class EventFlag(enum.IntFlag):
    """Kinds of events a channel can wait for."""

    NONE = 0
    TIMEOUT = 0x01
    READ = 0x02
    WRITE = 0x04
    SIGNAL = 0x08


def _descriptor(fd):
    return fd if isinstance(fd, int) else fd.fileno()


class Channel:
    """A descriptor, the events it waits for and what to call when they occur.

    ``data`` is handed to the callbacks; ``loop`` is the event loop that is
    told when the write interest changes.
    """

    def __init__(self, fd, events, read_callback=None, write_callback=None, data=None, loop=None):
        self.fd = _descriptor(fd)
        self.events = EventFlag(events)
        self.read_callback = read_callback
        self.write_callback = write_callback
        self.data = data
        self.loop = loop

    def __repr__(self):
        return f"Channel(fd={self.fd}, events={self.events!r})"

    def write_event_is_enabled(self):
        return bool(self.events & EventFlag.WRITE)

    def write_event_enable(self):
        """Start waiting for writability and tell the loop."""
        self.events |= EventFlag.WRITE
        self._notify_loop()

    def write_event_disable(self):
        """Stop waiting for writability and tell the loop."""
        self.events &= ~EventFlag.WRITE
        self._notify_loop()

    def _notify_loop(self):
        if self.loop is not None:
            self.loop.update_channel_event(self)


class ChannelMap:
    """Channels keyed by their file descriptor."""

    def __init__(self):
        self._entries = {}

    @staticmethod
    def _check(fd):
        if fd < 0:
            raise ValueError(f"invalid file descriptor: {fd}")

    def get(self, fd):
        """The channel for ``fd``, or ``None``."""
        return self._entries.get(fd)

    def set(self, fd, channel):
        self._check(fd)
        self._entries[fd] = channel

    def remove(self, fd):
        """Forget ``fd``; return the channel it held, or ``None``."""
        return self._entries.pop(fd, None)

    def clear(self):
        self._entries.clear()

    def __contains__(self, fd):
        return fd in self._entries

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries.values())