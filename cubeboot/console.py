"""Debug output to a stream and, optionally, a serial line."""

from __future__ import annotations

import sys
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional, TextIO

UartWriter = Callable[[bytes], Optional[int]]


@dataclass
class _Console:
    stream: Optional[TextIO] = None
    uart: Optional[UartWriter] = None
    lock: threading.Lock = field(default_factory=threading.Lock)


_console = _Console()


def set_stream(stream: Optional[TextIO]) -> None:
    """Send output to ``stream``; ``None`` restores standard error."""
    _console.stream = stream


def set_uart(writer: Optional[UartWriter]) -> None:
    """Mirror output byte by byte to ``writer``; ``None`` disables it."""
    _console.uart = writer


def iprintf(fmt: str, *args) -> int:
    """Format printf-style, write it out and return the text length."""
    with _console.lock:
        text = fmt % args
        stream = _console.stream if _console.stream is not None else sys.stderr
        stream.write(text)
        stream.flush()
        if _console.uart is not None:
            for byte in text.replace("\n", "\r").encode():
                err = _console.uart(bytes([byte]))
                if err:
                    print(f"UART ERR: {err}")
    return len(text)