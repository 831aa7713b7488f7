# services/event_stream.py
"""
Incremental decoding of a server-sent-event body into text fragments.

The upstream sends one ``data:`` payload per line, each a JSON
chat-completion chunk, and finishes with ``data: [DONE]``.
"""
from __future__ import annotations

import codecs
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterator
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


class LineFramer:
    """Splits a chunked byte stream into complete text lines.

    Only the trailing partial line is held between chunks. Multi-byte
    UTF-8 sequences split across chunks are reassembled.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""

    def feed(self, chunk: bytes) -> list[str]:
        text = self._pending + self._decoder.decode(chunk)
        *lines, self._pending = text.split("\n")
        return [line.rstrip("\r") for line in lines]

    def flush(self) -> list[str]:
        """Return whatever is left once the stream has ended."""
        text = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        if not text:
            return []
        return [line.rstrip("\r") for line in text.split("\n")]


def data_payload(line: str) -> str | None:
    """Return the payload of a ``data:`` line, or None for any other line."""
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):]
    if payload.startswith(" "):
        payload = payload[1:]
    return payload


def extract_delta(payload: str) -> str | None:
    """Pull ``choices[0].delta.content`` out of one JSON chunk.

    Raises ValueError when the payload is not JSON.
    """
    parsed = json.loads(payload)
    try:
        content = parsed["choices"][0]["delta"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) and content else None


@dataclass
class StreamStats:
    fragments: int = 0
    skipped: int = 0
    done: bool = False


class EventStreamDecoder:
    """Turns raw upstream chunks into assistant text fragments."""

    def __init__(self) -> None:
        self._framer = LineFramer()
        self.stats = StreamStats()

    def feed(self, chunk: bytes) -> Iterator[str]:
        yield from self._decode_lines(self._framer.feed(chunk))

    def finish(self) -> Iterator[str]:
        yield from self._decode_lines(self._framer.flush())

    def _decode_lines(self, lines: list[str]) -> Iterator[str]:
        for line in lines:
            payload = data_payload(line)
            if payload is None:
                continue
            if payload.strip() == DONE_SENTINEL:
                self.stats.done = True
                continue
            try:
                fragment = extract_delta(payload)
            except ValueError:
                self.stats.skipped += 1
                logger.debug("EventStream: skipping malformed line (%d chars)", len(line))
                continue
            if fragment:
                self.stats.fragments += 1
                yield fragment


async def iter_text_fragments(
    chunks: AsyncIterable[bytes],
    decoder: EventStreamDecoder | None = None,
) -> AsyncIterator[str]:
    """Decode an async byte stream into text fragments, in arrival order."""
    decoder = decoder or EventStreamDecoder()
    async for chunk in chunks:
        for fragment in decoder.feed(chunk):
            yield fragment
    for fragment in decoder.finish():
        yield fragment
