"""A TCP server that accepts on one loop and serves connections on a pool."""

from __future__ import annotations

from .channel import Channel, EventFlag
from .log import msgx
from .sockets import make_nonblocking
from .tcp_connection import TcpConnection
from .thread_pool import ThreadPool


class TcpServer:
    """Accepts connections on ``loop`` and hands each to a pool loop.

    With ``thread_num`` of zero the accepting loop serves the connections
    itself; otherwise worker loops are chosen in turn.
    """

    def __init__(self, loop, acceptor, connection_completed=None, message=None,
                 write_completed=None, connection_closed=None, thread_num=0):
        self.loop = loop
        self.acceptor = acceptor
        self.port = acceptor.listen_port
        self.connection_completed = connection_completed
        self.message = message
        self.write_completed = write_completed
        self.connection_closed = connection_closed
        self.thread_num = thread_num
        self.thread_pool = ThreadPool(loop, thread_num)
        self.data = None

    def _handle_connection_established(self, _data):
        try:
            sock, _address = self.acceptor.sock.accept()
        except BlockingIOError:
            return None
        make_nonblocking(sock)
        msgx(f"new connection established, socket == {sock.fileno()}")

        loop = self.thread_pool.get_loop()
        connection = TcpConnection(
            sock,
            loop,
            self.connection_completed,
            self.connection_closed,
            self.message,
            self.write_completed,
        )
        if self.data is not None:
            connection.data = self.data
        return connection

    def start(self):
        """Start the worker threads and begin accepting connections."""
        self.thread_pool.start()
        channel = Channel(
            self.acceptor.fileno(),
            EventFlag.READ,
            self._handle_connection_established,
            None,
            self,
            self.loop,
        )
        self.loop.add_channel_event(channel)

    def set_data(self, data):
        """Attach ``data`` to every connection accepted from now on; ``None`` is ignored."""
        if data is not None:
            self.data = data

    def stop(self):
        """Stop the worker threads."""
        self.thread_pool.stop()