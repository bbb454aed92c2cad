"""
Newline framing for the daemon's stdout.

The daemon writes one JSON object per line, but reads from the pipe arrive in
arbitrary chunks. LineFramer holds the unterminated tail between reads and
only ever hands out complete records.
"""

import logging

from signal_bridge.errors import FramingError

DEFAULT_MAX_BUFFER_BYTES = 100_000
TERMINATOR = b"\n"

logger = logging.getLogger(__name__)


class LineFramer:
    """Split a byte stream into newline-terminated text records."""

    def __init__(self, max_buffer_bytes: int = DEFAULT_MAX_BUFFER_BYTES) -> None:
        self._max_buffer_bytes = max_buffer_bytes
        self._remainder = b""
        self._discarding = False
        self.overflows = 0

    @property
    def pending_bytes(self) -> int:
        return len(self._remainder)

    def feed(self, chunk: bytes) -> list[str]:
        """Consume a chunk and return every record it completes, in order."""
        data = self._remainder + chunk
        self._remainder = b""
        *complete, tail = data.split(TERMINATOR)

        records: list[str] = []
        for raw in complete:
            if self._discarding:
                # Rest of a record whose head was already thrown away.
                self._discarding = False
                continue
            records.append(raw.rstrip(b"\r").decode("utf-8", errors="replace"))

        if not self._discarding:
            if len(tail) > self._max_buffer_bytes:
                self._overflow(len(tail))
            else:
                self._remainder = tail
        return records

    def reset(self) -> None:
        self._remainder = b""
        self._discarding = False

    def _overflow(self, size: int) -> None:
        self.overflows += 1
        self._remainder = b""
        self._discarding = True
        err = FramingError(
            f"Unterminated record exceeded {self._max_buffer_bytes} bytes; discarded",
            details={"size": size},
        )
        logger.warning(f"{err} ({size} bytes buffered)")
