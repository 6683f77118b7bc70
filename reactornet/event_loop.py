"""A reactor: one thread waits for I/O and runs the callbacks of ready channels."""

from __future__ import annotations

import collections
import contextlib
import enum
import socket
import threading

from .channel import Channel, ChannelMap, EventFlag
from .dispatcher import default_dispatcher
from .log import log_err, msgx

_DISPATCH_TIMEOUT = 1.0


class _PendingOp(enum.Enum):
    ADD = 1
    REMOVE = 2
    UPDATE = 3


class EventLoop:
    """An event loop owned by the thread that created it.

    Channel changes requested from other threads are queued and the owning
    thread is woken through a socket pair to apply them.
    """

    def __init__(self, thread_name=None, dispatcher=None):
        self.thread_name = thread_name if thread_name is not None else "main thread"
        self.quit = False
        self.channel_map = ChannelMap()
        self.dispatcher = dispatcher if dispatcher is not None else default_dispatcher(self.thread_name)

        self.owner_thread_id = threading.get_ident()
        self._lock = threading.Lock()
        self._pending = collections.deque()
        self._handling_pending = False

        self.socket_pair = socket.socketpair()
        wakeup_channel = Channel(
            self.socket_pair[1], EventFlag.READ, self._handle_wakeup, None, self, self
        )
        self.add_channel_event(wakeup_channel)

    def __repr__(self):
        return f"EventLoop({self.thread_name!r})"

    # Thread ownership

    def is_in_same_thread(self):
        """True when called from the thread that owns this loop."""
        return self.owner_thread_id == threading.get_ident()

    def assert_in_same_thread(self):
        """Raise ``RuntimeError`` unless called from the owning thread."""
        if not self.is_in_same_thread():
            log_err("not in the same thread")
            raise RuntimeError(f"not in the thread that owns {self.thread_name}")

    # Channel registration

    def add_channel_event(self, channel):
        """Start watching ``channel``."""
        self._do_channel_event(channel, _PendingOp.ADD)

    def remove_channel_event(self, channel):
        """Stop watching ``channel``."""
        self._do_channel_event(channel, _PendingOp.REMOVE)

    def update_channel_event(self, channel):
        """Apply a change in the events ``channel`` waits for."""
        self._do_channel_event(channel, _PendingOp.UPDATE)

    def _do_channel_event(self, channel, op):
        with self._lock:
            if self._handling_pending:
                raise RuntimeError("channel change requested while pending changes are applied")
            self._pending.append((op, channel))
        if self.is_in_same_thread():
            self.handle_pending_channel()
        else:
            self.wakeup()

    def handle_pending_channel(self):
        """Apply every queued channel change, in the order they were asked for."""
        with self._lock:
            self._handling_pending = True
            try:
                while self._pending:
                    op, channel = self._pending.popleft()
                    if op is _PendingOp.ADD:
                        self._handle_pending_add(channel)
                    elif op is _PendingOp.REMOVE:
                        self._handle_pending_remove(channel)
                    else:
                        self._handle_pending_update(channel)
            finally:
                self._handling_pending = False

    def _handle_pending_add(self, channel):
        fd = channel.fd
        msgx(f"add channel fd == {fd}, {self.thread_name}")
        if fd < 0:
            return False
        if self.channel_map.get(fd) is not None:
            return False
        self.channel_map.set(fd, channel)
        self.dispatcher.add(channel)
        return True

    def _handle_pending_remove(self, channel):
        fd = channel.fd
        if fd < 0:
            return False
        registered = self.channel_map.get(fd)
        if registered is None:
            return False
        removed = True
        try:
            self.dispatcher.delete(registered)
        except OSError as exc:
            log_err(f"remove channel fd == {fd} failed: {exc}")
            removed = False
        self.channel_map.remove(fd)
        return removed

    def _handle_pending_update(self, channel):
        fd = channel.fd
        msgx(f"update channel fd == {fd}, {self.thread_name}")
        if fd < 0 or self.channel_map.get(fd) is None:
            return False
        self.dispatcher.update(channel)
        return True

    # Event delivery

    def channel_event_activate(self, fd, revents):
        """Run the callbacks of the channel on ``fd`` for the ready ``revents``.

        Returns ``False`` when no channel is registered for ``fd``.
        """
        msgx(f"activate channel fd == {fd}, revents={int(revents)}, {self.thread_name}")
        if fd < 0:
            return False
        channel = self.channel_map.get(fd)
        if channel is None:
            return False
        if revents & EventFlag.READ and channel.read_callback is not None:
            channel.read_callback(channel.data)
        if revents & EventFlag.WRITE and channel.write_callback is not None:
            channel.write_callback(channel.data)
        return True

    def wakeup(self):
        """Wake the owning thread out of its wait for I/O."""
        try:
            sent = self.socket_pair[0].send(b"a")
        except OSError:
            sent = 0
        if sent != 1:
            log_err("wakeup event loop thread failed")

    def _handle_wakeup(self, _data):
        try:
            received = self.socket_pair[1].recv(1)
        except OSError:
            received = b""
        if len(received) != 1:
            log_err("handleWakeup  failed")
        msgx(f"wakeup, {self.thread_name}")

    # Running

    def run(self):
        """Wait for events and run callbacks until ``stop`` is called.

        Must be called from the thread that created the loop.
        """
        if not self.is_in_same_thread():
            raise RuntimeError(f"{self.thread_name} must run in the thread that created it")
        msgx(f"event loop run, {self.thread_name}")
        while not self.quit:
            for fd, flag in self.dispatcher.dispatch(_DISPATCH_TIMEOUT):
                self.channel_event_activate(fd, flag)
            self.handle_pending_channel()
        msgx(f"event loop end, {self.thread_name}")

    def stop(self):
        """Ask the loop to finish; safe to call from any thread."""
        self.quit = True
        self.wakeup()

    def close(self):
        """Release the dispatcher and the wakeup sockets."""
        with contextlib.suppress(OSError):
            self.dispatcher.clear()
        for sock in self.socket_pair:
            sock.close()
        self.channel_map.clear()