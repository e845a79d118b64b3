"""Line-buffered masking of secret values in build log streams."""

from __future__ import annotations

import re
from enum import Enum
from typing import BinaryIO, Iterable

from .types import MASKED_VALUE

LINE_TERMINATOR = b"\n"


class FilterState(str, Enum):
    """States of the masking filter."""

    BUFFERING = "buffering"
    FLUSHING = "flushing"


def _secret_pattern(secrets: Iterable[bytes]) -> re.Pattern[bytes] | None:
    """Compile secrets into one alternation, longest first.

    The regex engine scans leftmost-first, and at a given offset the first
    alternative that matches wins, so longer secrets take precedence over
    their own prefixes.
    """
    unique = sorted({s for s in secrets if s}, key=lambda s: (-len(s), s))
    if not unique:
        return None
    return re.compile(b"|".join(re.escape(s) for s in unique))


def mask_text(text: str, secrets: Iterable[str]) -> str:
    """Replace every occurrence of every secret in ``text`` with the mask token."""
    pattern = _secret_pattern(s.encode("utf-8") for s in secrets if s)
    if pattern is None or not text:
        return text
    masked = pattern.sub(MASKED_VALUE.encode("utf-8"), text.encode("utf-8"))
    return masked.decode("utf-8")


class MaskingOutputStream:
    """Output stream that masks secrets line by line before passing data on.

    Written data is buffered until a line terminator arrives. The complete
    line is then masked and forwarded to the sink with its terminator. With no
    secrets the stream forwards writes unchanged.
    """

    encoding = "utf-8"

    def __init__(self, sink: BinaryIO, secrets: Iterable[str], close_sink: bool = False):
        self.sink = sink
        self.close_sink = close_sink
        self.state = FilterState.BUFFERING
        self.closed = False

        self._pattern = _secret_pattern(s.encode("utf-8") for s in secrets if s)
        self._mask = MASKED_VALUE.encode("utf-8")
        self._buffer = bytearray()

    @property
    def transparent(self) -> bool:
        """Whether there is nothing to mask."""
        return self._pattern is None

    def write(self, data: bytes | str) -> int:
        """Accept bytes or text, emitting every line completed by this write."""
        if self.closed:
            raise ValueError("write to closed masking stream")

        chunk = data.encode(self.encoding) if isinstance(data, str) else bytes(data)

        if self._pattern is None:
            self.sink.write(chunk)
            return len(data)

        start = 0
        while True:
            end = chunk.find(LINE_TERMINATOR, start)
            if end == -1:
                self._buffer += chunk[start:]
                break
            self._buffer += chunk[start:end]
            self._emit(terminator=LINE_TERMINATOR)
            start = end + 1

        return len(data)

    def _emit(self, terminator: bytes = b"") -> None:
        """Mask the buffered line and forward it, then reset the buffer."""
        self.state = FilterState.FLUSHING
        try:
            line = bytes(self._buffer)
            self._buffer.clear()
            if self._pattern is not None:
                line = self._pattern.sub(self._mask, line)
            self.sink.write(line + terminator)
        finally:
            self.state = FilterState.BUFFERING

    def flush(self) -> None:
        """Flush the sink. A partial line stays buffered until it completes."""
        if hasattr(self.sink, "flush"):
            self.sink.flush()

    def close(self) -> None:
        """Emit any trailing partial line and flush the sink."""
        if self.closed:
            return
        try:
            if self._buffer:
                self._emit()
            self.flush()
        finally:
            self.closed = True
            if self.close_sink and hasattr(self.sink, "close"):
                self.sink.close()

    def writable(self) -> bool:
        return not self.closed

    def isatty(self) -> bool:
        return False

    def __enter__(self) -> MaskingOutputStream:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def decorate_logger(
    sink: BinaryIO | None, secrets: Iterable[str], close_sink: bool = False
) -> MaskingOutputStream | None:
    """Wrap ``sink`` in a masking stream, or return None when there is no sink."""
    if sink is None:
        return None
    return MaskingOutputStream(sink, secrets, close_sink=close_sink)
