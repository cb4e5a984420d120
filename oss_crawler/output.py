"""
JSON Lines output.

Every fetched record is printed as exactly one line of JSON.
"""

import json
import sys
from typing import Any, Iterable, Optional, TextIO


class JsonLinesWriter:
    """Writes decoded JSON values to a text stream, one per line."""

    def __init__(self, stream: Optional[TextIO] = None):
        """
        Initialize writer.

        Args:
            stream: Output stream (sys.stdout at write time if None)
        """
        self._stream = stream
        self.count = 0

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def write(self, value: Any) -> None:
        """
        Write one value as a JSON line.

        Args:
            value: Any JSON-serializable value
        """
        stream = self.stream
        stream.write(json.dumps(value, ensure_ascii=False))
        stream.write("\n")
        stream.flush()
        self.count += 1

    def write_all(self, values: Iterable[Any]) -> int:
        """Write every value in order; returns how many were written."""
        written = 0
        for value in values:
            self.write(value)
            written += 1
        return written
