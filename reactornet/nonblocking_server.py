"""A select-based ROT13 server built on non-blocking sockets."""

from __future__ import annotations

import argparse
import select
import time

from .rot13 import rot13
from .sockets import SERV_PORT, make_nonblocking, tcp_nonblocking_server_listen

MAX_LINE = 1024
FD_INIT_SIZE = 128
ACCEPT_DELAY = 5
_RECV_SIZE = 1024


class ConnectionBuffer:
    """Encoded bytes waiting to go back to one client.

    Bytes from ``read_index`` to the end of ``data`` still have to be sent.
    ``readable`` turns true once a newline has arrived, meaning the reply
    may be sent.
    """

    def __init__(self, sock):
        self.sock = sock
        self.data = bytearray()
        self.read_index = 0
        self.readable = False

    @property
    def write_index(self):
        """Where the next received byte goes."""
        return len(self.data)

    def __repr__(self):
        return f"ConnectionBuffer(pending={self.write_index - self.read_index}, readable={self.readable})"


def on_socket_read(sock, buffer):
    """Receive everything available, storing its ROT13 encoding in ``buffer``.

    At most ``MAX_LINE`` bytes are kept; the rest is dropped. Returns
    ``True`` when the peer has closed the connection and ``False`` when no
    more data is available for now. Other socket errors are raised.
    """
    while True:
        try:
            chunk = sock.recv(_RECV_SIZE)
        except BlockingIOError:
            return False
        if not chunk:
            return True
        room = MAX_LINE - len(buffer.data)
        if room > 0:
            buffer.data += rot13(chunk[:room])
        if b"\n" in chunk:
            buffer.readable = True


def on_socket_write(sock, buffer):
    """Send the unsent part of ``buffer``.

    When everything went out the buffer is emptied for reuse and no longer
    marked readable; if the socket would block, the rest stays for later.
    """
    while buffer.read_index < len(buffer.data):
        try:
            sent = sock.send(buffer.data[buffer.read_index:])
        except BlockingIOError:
            return
        buffer.read_index += sent
    buffer.data.clear()
    buffer.read_index = 0
    buffer.readable = False


def _accept(listener, connections):
    print("listening socket readable")
    time.sleep(ACCEPT_DELAY)
    try:
        sock, _address = listener.accept()
    except BlockingIOError:
        return
    if len(connections) >= FD_INIT_SIZE:
        sock.close()
        raise RuntimeError("too many connections")
    make_nonblocking(sock)
    connections[sock.fileno()] = ConnectionBuffer(sock)


def serve(port):
    """Serve clients on ``port`` forever, answering each line with its ROT13."""
    connections = {}
    with tcp_nonblocking_server_listen(port) as listener:
        try:
            while True:
                readers = [listener, *(conn.sock for conn in connections.values())]
                writers = [conn.sock for conn in connections.values() if conn.readable]
                readable, writable, _ = select.select(readers, writers, [])

                if listener in readable:
                    _accept(listener, connections)

                for fd, conn in list(connections.items()):
                    closed = False
                    try:
                        if conn.sock in readable:
                            closed = on_socket_read(conn.sock, conn)
                        if not closed and conn.sock in writable:
                            on_socket_write(conn.sock, conn)
                    except OSError:
                        closed = True
                    if closed:
                        del connections[fd]
                        conn.sock.close()
        finally:
            for conn in connections.values():
                conn.sock.close()


def main(argv=None):
    """Run the non-blocking ROT13 server until interrupted."""
    parser = argparse.ArgumentParser(description="non-blocking ROT13 server")
    parser.add_argument("--port", type=int, default=SERV_PORT, help="port to listen on")
    args = parser.parse_args(argv)
    try:
        serve(args.port)
    except KeyboardInterrupt:
        pass
    return 0