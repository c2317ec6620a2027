"""Incremental decoder for Server-Sent Event frames.

Network reads do not line up with frame boundaries, so the decoder keeps
the unterminated tail of the text between calls and only parses frames
once their closing blank line has arrived.
"""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

FRAME_DELIMITER = "\n\n"
DATA_FIELD = "data:"


class SSEDecoder:
    """Turns a stream of text chunks into decoded `data:` JSON payloads."""

    def __init__(self) -> None:
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text received but not yet terminated by a blank line."""
        return self._buffer

    def feed(self, text: str) -> list[dict[str, Any]]:
        """Add a chunk of text and return payloads of all completed frames.

        Args:
            text: Next decoded chunk of the response body.

        Returns:
            Parsed JSON objects, in order. Malformed frames are skipped.
        """
        # A "\r" left at the end of the buffer joins the next chunk's "\n".
        self._buffer = (self._buffer + text).replace("\r\n", "\n")
        *frames, self._buffer = self._buffer.split(FRAME_DELIMITER)
        return [payload for frame in frames if (payload := _parse_frame(frame)) is not None]

    def flush(self) -> list[dict[str, Any]]:
        """Parse whatever is left once the stream has ended."""
        frame, self._buffer = self._buffer, ""
        payload = _parse_frame(frame.rstrip("\r\n"))
        return [payload] if payload is not None else []


def _parse_frame(frame: str) -> dict[str, Any] | None:
    data_lines = [
        line[len(DATA_FIELD):].removeprefix(" ")
        for line in frame.split("\n")
        if line.startswith(DATA_FIELD)
    ]
    if not data_lines:
        return None

    raw = "\n".join(data_lines)
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Error parsing SSE data: {e}")
        return None

    if not isinstance(payload, dict):
        logger.warning(f"Ignoring non-object SSE data: {raw[:80]!r}")
        return None
    return payload
