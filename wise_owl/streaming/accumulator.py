"""Running answer text for the request in flight."""


class ContentAccumulator:
    """Concatenation of every chunk seen since the last reset."""

    def __init__(self) -> None:
        self._content = ""
        self._chunk_count = 0

    def reset(self) -> None:
        self._content = ""
        self._chunk_count = 0

    def append(self, content: str) -> str:
        """Add a chunk and return the full text so far."""
        self._content += content
        self._chunk_count += 1
        return self._content

    def current(self) -> str:
        return self._content

    @property
    def chunk_count(self) -> int:
        return self._chunk_count
