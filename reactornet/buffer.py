"""A growable byte buffer with separate read and write positions."""

from __future__ import annotations

INIT_BUFFER_SIZE = 65536
CRLF = b"\r\n"


class Buffer:
    """Byte buffer: bytes between the read and write index are readable.

    Space in front of the read index is reclaimed by moving the readable
    bytes to the start before the storage is ever enlarged.
    """

    def __init__(self, initial_size=INIT_BUFFER_SIZE):
        if initial_size < 0:
            raise ValueError("buffer size must not be negative")
        self.data = bytearray(initial_size)
        self.read_index = 0
        self.write_index = 0

    @property
    def total_size(self):
        """Size of the underlying storage."""
        return len(self.data)

    def writable_size(self):
        return self.total_size - self.write_index

    def readable_size(self):
        return self.write_index - self.read_index

    def front_spare_size(self):
        return self.read_index

    def _make_room(self, size):
        if self.writable_size() >= size:
            return
        if self.front_spare_size() + self.writable_size() >= size:
            readable = self.readable_size()
            self.data[:readable] = self.data[self.read_index:self.write_index]
            self.read_index = 0
            self.write_index = readable
        else:
            self.data.extend(bytes(size))

    def append(self, data):
        """Append bytes-like ``data`` after the readable region."""
        if data is None:
            return
        chunk = bytes(data)
        size = len(chunk)
        self._make_room(size)
        self.data[self.write_index:self.write_index + size] = chunk
        self.write_index += size

    def append_char(self, char):
        """Append one byte, given as an int or a one-byte bytes object."""
        if isinstance(char, int):
            if not 0 <= char <= 255:
                raise ValueError(f"byte value out of range: {char}")
            value = char
        elif isinstance(char, (bytes, bytearray)) and len(char) == 1:
            value = char[0]
        else:
            raise ValueError(f"not a single byte: {char!r}")
        self._make_room(1)
        self.data[self.write_index] = value
        self.write_index += 1

    def append_string(self, text):
        """Append ``text`` encoded as UTF-8; ``None`` appends nothing."""
        if text is not None:
            self.append(text.encode("utf-8"))

    def socket_read(self, sock):
        """Receive once from ``sock`` into the buffer; return the byte count.

        Up to the writable space plus one extra block is read in a single
        call, so a full buffer still takes in everything that arrived.
        Zero means the peer closed the connection; errors are raised.
        """
        max_writable = self.writable_size()
        chunk = sock.recv(max_writable + INIT_BUFFER_SIZE)
        received = len(chunk)
        if received <= max_writable:
            self.data[self.write_index:self.write_index + received] = chunk
            self.write_index += received
        else:
            self.data[self.write_index:] = chunk[:max_writable]
            self.write_index = self.total_size
            self.append(chunk[max_writable:])
        return received

    def read_char(self):
        """Take the next readable byte and return it as an int."""
        if self.readable_size() == 0:
            raise IndexError("read from an empty buffer")
        value = self.data[self.read_index]
        self.read_index += 1
        return value

    def peek(self):
        """Return the readable bytes without consuming them."""
        return bytes(self.data[self.read_index:self.write_index])

    def consume(self, size):
        """Mark ``size`` readable bytes as read."""
        if size < 0 or size > self.readable_size():
            raise ValueError(f"cannot consume {size} of {self.readable_size()} readable bytes")
        self.read_index += size

    def find_crlf(self):
        """Offset of the first CRLF within the readable bytes, or ``None``."""
        index = self.data.find(CRLF, self.read_index, self.write_index)
        if index < 0:
            return None
        return index - self.read_index