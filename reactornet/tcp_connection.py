"""A TCP connection driven by an event loop, with input and output buffers."""

from __future__ import annotations

import contextlib
import socket

from .buffer import Buffer
from .channel import Channel, EventFlag
from .log import msgx


def _handle_read(connection):
    connection._on_readable()


def _handle_write(connection):
    connection._on_writable()


class TcpConnection:
    """One accepted connection served by ``loop``.

    Incoming bytes are collected in ``input_buffer`` and handed to the
    ``message`` callback. Data that cannot be written at once is kept in
    ``output_buffer`` and sent when the socket becomes writable.
    ``data``, ``request`` and ``response`` are free for callbacks to use.
    """

    def __init__(self, sock, loop, connection_completed=None, connection_closed=None,
                 message=None, write_completed=None):
        self.sock = sock
        self.loop = loop
        self.connection_completed = connection_completed
        self.connection_closed = connection_closed
        self.message = message
        self.write_completed = write_completed
        self.input_buffer = Buffer()
        self.output_buffer = Buffer()
        self.data = None
        self.request = None
        self.response = None
        self.closed = False

        fd = sock.fileno()
        self.name = f"connection-{fd}"
        self.channel = Channel(fd, EventFlag.READ, _handle_read, _handle_write, self, loop)

        if self.connection_completed is not None:
            self.connection_completed(self)

        loop.add_channel_event(self.channel)

    def __repr__(self):
        return f"TcpConnection({self.name!r})"

    def _on_connection_closed(self):
        if self.closed:
            return
        self.closed = True
        self.loop.remove_channel_event(self.channel)
        if self.connection_closed is not None:
            self.connection_closed(self)
        with contextlib.suppress(OSError):
            self.sock.close()

    def _on_readable(self):
        try:
            received = self.input_buffer.socket_read(self.sock)
        except BlockingIOError:
            return
        except OSError:
            received = 0
        if received > 0:
            if self.message is not None:
                self.message(self.input_buffer, self)
        else:
            self._on_connection_closed()

    def _on_writable(self):
        self.loop.assert_in_same_thread()
        try:
            written = self.sock.send(self.output_buffer.peek())
        except OSError:
            written = 0
        if written > 0:
            self.output_buffer.consume(written)
            if self.output_buffer.readable_size() == 0:
                self.channel.write_event_disable()
            if self.write_completed is not None:
                self.write_completed(self)
        else:
            msgx(f"handle_write for tcp connection {self.name}")

    def send_data(self, data):
        """Send ``data``; whatever cannot go out now is buffered.

        Returns the number of bytes written straight to the socket.
        """
        data = bytes(data)
        written = 0
        left = len(data)
        fault = False

        if not self.channel.write_event_is_enabled() and self.output_buffer.readable_size() == 0:
            try:
                written = self.sock.send(data)
                left -= written
            except BlockingIOError:
                written = 0
            except (BrokenPipeError, ConnectionResetError):
                written = 0
                fault = True
            except OSError:
                written = 0

        if not fault and left > 0:
            self.output_buffer.append(data[written:])
            if not self.channel.write_event_is_enabled():
                self.channel.write_event_enable()

        return written

    def send_buffer(self, buffer):
        """Send all readable bytes of ``buffer`` and mark them as read."""
        payload = buffer.peek()
        result = self.send_data(payload)
        buffer.consume(len(payload))
        return result

    def shutdown(self):
        """Close the sending half of the connection."""
        try:
            self.sock.shutdown(socket.SHUT_WR)
        except OSError:
            msgx(f"tcp_connection_shutdown failed, socket == {self.channel.fd}")