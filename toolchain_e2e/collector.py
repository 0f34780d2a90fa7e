"""Draining of subprocess output streams into text."""

import asyncio
import codecs

CHUNK_SIZE = 64 * 1024


async def collect_stream(reader: asyncio.StreamReader, encoding: str = "utf-8") -> str:
    """Read a stream until EOF and return its decoded contents.

    Decoding is incremental, so a multi-byte character split across two
    chunks is reassembled instead of being replaced. Invalid byte sequences
    are replaced with U+FFFD.
    """
    decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
    parts: list[str] = []

    while chunk := await reader.read(CHUNK_SIZE):
        parts.append(decoder.decode(chunk))

    parts.append(decoder.decode(b"", final=True))
    return "".join(parts)
