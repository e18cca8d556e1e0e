"""Splitting a serial byte stream into checksummed frames."""

from __future__ import annotations

import time
from typing import Callable, Optional, Protocol

__all__ = ["FrameBuffer", "frame_checksum", "is_valid_frame"]

FRAME_GAP_MS = 20
LENGTH_INDEX = 4
FRAME_OVERHEAD = 7

FrameCallback = Callable[[bytes, bool], None]


class Uart(Protocol):
    def read(self) -> bytes: ...

    def write(self, data: bytes) -> object: ...


def _monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


def frame_checksum(data: bytes) -> int:
    """Return 0xFFFF minus the sum of ``data``, kept to sixteen bits."""
    return (0xFFFF - sum(data)) & 0xFFFF


def is_valid_frame(frame: bytes) -> bool:
    """Check that the last two bytes of ``frame`` hold the checksum of the rest."""
    if len(frame) < 2:
        return False
    return int.from_bytes(frame[-2:], "big") == frame_checksum(frame[:-2])


class FrameBuffer:
    """Collects bytes from a UART into frames.

    A frame is five header bytes, a payload whose length is given by the
    fifth byte plus two further bytes, and a two-byte checksum. A pause of
    20 ms or more between bytes starts a new frame.

    ``uart.read()`` must return the bytes waiting (empty when there are
    none); ``clock()`` returns the time in milliseconds.
    """

    def __init__(self, uart: Uart, clock: Optional[Callable[[], int]] = None) -> None:
        self.uart = uart
        self._clock = clock or _monotonic_ms
        self._last_millis = 0
        self._frame = bytearray()
        self._index = 0

    def setup(self) -> None:
        """Start timing the gaps between bytes from now."""
        self._last_millis = self._clock()

    def loop(self, callback: Optional[FrameCallback] = None) -> None:
        """Consume all pending bytes, passing each complete frame to ``callback``."""
        while data := self.uart.read():
            for byte in data:
                self._feed(byte, callback)

    def _feed(self, byte: int, callback: Optional[FrameCallback]) -> None:
        now = self._clock()
        if now - self._last_millis >= FRAME_GAP_MS:
            self._index = 0
        self._last_millis = now

        del self._frame[self._index:]
        self._frame.append(byte)

        if self._index > LENGTH_INDEX:
            size = self._frame[LENGTH_INDEX] + FRAME_OVERHEAD
            if self._index + 1 == size:
                if callback is not None:
                    frame = bytes(self._frame)
                    callback(frame, is_valid_frame(frame))
                return

        self._index += 1