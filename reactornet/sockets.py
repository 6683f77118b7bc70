"""TCP socket helpers: listening, connecting and framed reads."""

from __future__ import annotations

import ipaddress
import os
import socket
import struct

SERV_PORT = 43211
MAXLINE = 4096
UNIXSTR_PATH = "/var/lib/unixstream.sock"
LISTENQ = 1024
BUFFER_SIZE = 4096

_HEADER = struct.Struct("!I")


def _listening_socket(port, *, nonblocking):
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        if nonblocking:
            sock.setblocking(False)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(("", port))
        sock.listen(LISTENQ)
    except OSError:
        sock.close()
        raise
    return sock


def tcp_server(port):
    """Listen on ``port``, accept a single client and return its socket."""
    with _listening_socket(port, nonblocking=False) as listener:
        conn, _ = listener.accept()
    return conn


def tcp_server_listen(port):
    """Return a blocking listening socket on all interfaces."""
    return _listening_socket(port, nonblocking=False)


def tcp_nonblocking_server_listen(port):
    """Return a non-blocking listening socket on all interfaces."""
    return _listening_socket(port, nonblocking=True)


def make_nonblocking(sock):
    """Put a socket, or a raw file descriptor, into non-blocking mode."""
    if isinstance(sock, int):
        os.set_blocking(sock, False)
    else:
        sock.setblocking(False)


def tcp_client(address, port):
    """Connect to an IPv4 ``address`` and ``port``; return the socket."""
    host = str(ipaddress.IPv4Address(address))
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.connect((host, port))
    except OSError:
        sock.close()
        raise
    return sock


def readn(sock, size):
    """Read ``size`` bytes, or fewer if the peer closes first."""
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = sock.recv(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def readline(sock, length):
    """Read one newline-terminated line of at most ``length - 1`` bytes.

    Returns the line with its newline, or ``b""`` when the peer closes.
    Raises ``ValueError`` if no newline arrives within the limit.
    """
    line = bytearray()
    while len(line) < length - 1:
        char = sock.recv(1)
        if not char:
            return b""
        line += char
        if char == b"\n":
            return bytes(line)
    raise ValueError(f"no newline within {max(length - 1, 0)} bytes")


def read_line(sock, size):
    """Read a line of at most ``size - 1`` bytes, turning CR and CRLF into LF.

    Stops after the line end or when the peer closes; the partial line is
    returned in the latter case.
    """
    line = bytearray()
    while len(line) < size - 1:
        char = sock.recv(1)
        if not char:
            break
        if char == b"\r":
            try:
                following = sock.recv(1, socket.MSG_PEEK)
            except BlockingIOError:
                following = b""
            if following == b"\n":
                sock.recv(1)
            char = b"\n"
        line += char
        if char == b"\n":
            break
    return bytes(line)


def read_message(sock, length):
    """Read one framed message: 4-byte length, 4-byte type, then the payload.

    The length is in network byte order. Returns the payload, or ``None``
    when the peer closes before a whole message arrived. Raises
    ``ValueError`` if the payload is longer than ``length``.
    """
    header = readn(sock, _HEADER.size)
    if len(header) != _HEADER.size:
        return None
    (msg_length,) = _HEADER.unpack(header)
    if len(readn(sock, _HEADER.size)) != _HEADER.size:
        return None
    if msg_length > length:
        raise ValueError(f"message of {msg_length} bytes exceeds limit of {length}")
    payload = readn(sock, msg_length)
    if len(payload) != msg_length:
        return None
    return payload


def sock_ntop(address):
    """Format an IPv4 ``(host, port)`` pair as ``host:port``; port 0 is left out."""
    host, port = address[0], address[1]
    text = str(ipaddress.IPv4Address(host))
    if port:
        return f"{text}:{port}"
    return text


class Acceptor:
    """A non-blocking listening socket for the event-driven servers."""

    def __init__(self, port):
        self.sock = _listening_socket(port, nonblocking=True)
        self.listen_port = self.sock.getsockname()[1]

    def fileno(self):
        return self.sock.fileno()

    def close(self):
        self.sock.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()