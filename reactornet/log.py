"""Severity-tagged diagnostic messages written to standard output."""

from __future__ import annotations

import enum
import sys

_LINE_LIMIT = 1024


class Severity(enum.IntEnum):
    """Message severities, lowest first."""

    DEBUG = 0
    MSG = 1
    WARN = 2
    ERR = 3


_LABELS = {
    Severity.DEBUG: "debug",
    Severity.MSG: "msg",
    Severity.WARN: "warn",
    Severity.ERR: "err",
}


def log(severity, msg):
    """Write ``[label] msg`` to standard output; unknown severities print ``???``."""
    try:
        label = _LABELS[Severity(severity)]
    except ValueError:
        label = "???"
    print(f"[{label}] {msg}", file=sys.stdout)


def logx(severity, errstr, message):
    """Log ``message``, followed by ``: errstr`` when an error text is given.

    The text is limited to the size of a 1024-byte line buffer, as the
    formatted output of the original logger was.
    """
    text = (message or "")[: _LINE_LIMIT - 1]
    if errstr is not None and len(text) < _LINE_LIMIT - 3:
        text = f"{text}: {errstr}"[: _LINE_LIMIT - 1]
    log(severity, text)


def msgx(message):
    """Log an informational message."""
    logx(Severity.MSG, None, message)


def debugx(message):
    """Log a debug message."""
    logx(Severity.DEBUG, None, message)


def log_err(message):
    """Log an error message."""
    log(Severity.ERR, message)