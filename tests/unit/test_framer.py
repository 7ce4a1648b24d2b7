"""Unit tests for LineFramer."""

import pytest_check as check

from wise_owl.streaming.decoder import decode_record
from wise_owl.streaming.framer import LineFramer

BODY = (
    'data: {"type": "chunk", "content": "Osmose ist Diffusion durch Membranen "}\n'
    "\n"
    'data: {"type": "chunk", "content": "— über Wasser 💧 und 日本語"}\n'
    "data: {not json\n"
    'data: {"type": "chunk", "content": " ✓"}\n'
    'data: {"type": "complete", "metadata": {}}\n'
).encode("utf-8")


def _chunk_contents(pieces: list[bytes]) -> list[str]:
    framer = LineFramer()
    records: list[str] = []
    for piece in pieces:
        records.extend(framer.feed(piece))
    tail = framer.flush()
    if tail is not None:
        records.append(tail)
    events = [decode_record(r) for r in records]
    return [e.content for e in events if e is not None and e.type == "chunk"]


class TestLineFramer:
    """Tests for incremental framing."""

    def test_yields_complete_records_in_order(self) -> None:
        """Every newline-terminated segment is returned in order."""
        framer = LineFramer()

        check.equal(framer.feed(b"one\ntwo\nthr"), ["one", "two"])
        check.equal(framer.feed(b"ee\n"), ["three"])
        check.is_none(framer.flush())

    def test_holds_partial_record_until_next_feed(self) -> None:
        """A record without its newline is not returned yet."""
        framer = LineFramer()

        check.equal(framer.feed(b'data: {"type": "ch'), [])
        check.equal(framer.feed(b'unk"}\n'), ['data: {"type": "chunk"}'])

    def test_split_multibyte_character_is_not_corrupted(self) -> None:
        """A UTF-8 sequence split across feeds decodes intact."""
        encoded = "héllo\n".encode()
        framer = LineFramer()

        check.equal(framer.feed(encoded[:2]), [])
        check.equal(framer.feed(encoded[2:]), ["héllo"])

    def test_flush_returns_trailing_record(self) -> None:
        """Data left without a final newline is returned on flush."""
        framer = LineFramer()
        framer.feed(b"first\nlast")

        check.equal(framer.flush(), "last")
        check.is_none(framer.flush())

    def test_flush_replaces_truncated_multibyte_sequence(self) -> None:
        """A dangling partial character becomes a replacement character."""
        framer = LineFramer()
        framer.feed("é".encode()[:1])

        check.equal(framer.flush(), "�")

    def test_blank_lines_are_records(self) -> None:
        """Keep-alive blank lines are passed through to the decoder."""
        check.equal(LineFramer().feed(b"\n\n"), ["", ""])


class TestFramingIsSplitIndependent:
    """Decoded content does not depend on where the byte stream was split."""

    def test_every_two_way_split_matches_single_feed(self) -> None:
        """Splitting at any byte offset yields the same chunk contents."""
        expected = _chunk_contents([BODY])

        assert expected == [
            "Osmose ist Diffusion durch Membranen ",
            "— über Wasser 💧 und 日本語",
            " ✓",
        ]
        for offset in range(1, len(BODY)):
            assert _chunk_contents([BODY[:offset], BODY[offset:]]) == expected, offset

    def test_single_byte_feeds_match_single_feed(self) -> None:
        """Feeding one byte at a time yields the same chunk contents."""
        pieces = [BODY[i : i + 1] for i in range(len(BODY))]

        assert _chunk_contents(pieces) == _chunk_contents([BODY])
