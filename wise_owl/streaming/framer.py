"""Incremental byte-to-line framing for chunked response bodies."""

import codecs

RECORD_SEPARATOR = "\n"


class LineFramer:
    """Split a live byte stream into newline-delimited text records.

    Bytes may arrive split anywhere, including inside a multi-byte UTF-8
    character. The trailing partial record is held until the next ``feed``
    or the final ``flush``.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""

    def feed(self, data: bytes) -> list[str]:
        """Consume bytes and return every record they complete, in order."""
        text = self._pending + self._decoder.decode(data)
        records = text.split(RECORD_SEPARATOR)
        self._pending = records.pop()
        return records

    def flush(self) -> str | None:
        """Return the held partial record at end of stream, if any."""
        tail = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        return tail or None
