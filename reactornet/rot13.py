"""ROT13 encoding of ASCII letters."""

from __future__ import annotations

import string


def _rotate(code):
    if ord("a") <= code <= ord("m") or ord("A") <= code <= ord("M"):
        return code + 13
    if ord("n") <= code <= ord("z") or ord("N") <= code <= ord("Z"):
        return code - 13
    return code


_BYTE_TABLE = bytes(_rotate(code) for code in range(256))
_STR_TABLE = str.maketrans({letter: chr(_rotate(ord(letter))) for letter in string.ascii_letters})


def rot13_char(char):
    """Rotate one character, given as a byte value or a one-character string."""
    if isinstance(char, str):
        if len(char) != 1:
            raise ValueError(f"expected one character, got {char!r}")
        return char.translate(_STR_TABLE)
    if isinstance(char, int):
        if not 0 <= char <= 255:
            raise ValueError(f"byte value out of range: {char}")
        return _BYTE_TABLE[char]
    raise TypeError(f"cannot rotate {type(char).__name__}")


def rot13(data):
    """Rotate every ASCII letter in ``data`` (bytes-like or str)."""
    if isinstance(data, str):
        return data.translate(_STR_TABLE)
    return bytes(data).translate(_BYTE_TABLE)