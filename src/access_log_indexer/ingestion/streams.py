"""
Streaming byte and line utilities for the ingestion pipeline.

Provides the first two pipeline stages as async generators:

    object bytes -> decompress() -> split_lines() -> text lines

Both stages pull from their upstream only when their consumer asks for the
next element, so a file is never materialized in memory.
"""

import codecs
import logging
import zlib
from typing import AsyncIterable, AsyncIterator

from .exceptions import DecompressionError

logger = logging.getLogger(__name__)

# zlib window bits accepting a gzip header and trailer
GZIP_WBITS = 16 + zlib.MAX_WBITS

# Upper bound on decompressed bytes produced per step
DEFAULT_MAX_OUTPUT_BYTES = 256 * 1024


async def decompress(
    chunks: AsyncIterable[bytes],
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
) -> AsyncIterator[bytes]:
    """
    Gunzip an async stream of compressed byte chunks.

    Concatenated gzip members are decoded back to back, as the gzip
    command line tool does.

    Args:
        chunks: Async iterable of gzip-compressed byte chunks
        max_output_bytes: Maximum decompressed bytes yielded per step

    Yields:
        Decompressed byte chunks, in order

    Raises:
        DecompressionError: If the stream is malformed or ends before the
            gzip trailer
    """
    decompressor = zlib.decompressobj(GZIP_WBITS)
    consumed = 0
    member_open = False

    async for chunk in chunks:
        consumed += len(chunk)
        data = chunk
        while data:
            member_open = True
            try:
                output = decompressor.decompress(data, max_output_bytes)
            except zlib.error as e:
                raise DecompressionError(
                    f"Malformed gzip stream: {e}", bytes_consumed=consumed
                ) from e

            if output:
                yield output

            if decompressor.eof:
                # Start of the next gzip member, if any
                data = decompressor.unused_data
                decompressor = zlib.decompressobj(GZIP_WBITS)
                member_open = False
            elif len(output) == max_output_bytes and not decompressor.unconsumed_tail:
                # Output limit hit with all input consumed; flush what zlib holds
                data = b""
                while len(output) == max_output_bytes and not decompressor.eof:
                    output = decompressor.decompress(b"", max_output_bytes)
                    if output:
                        yield output
                if decompressor.eof:
                    data = decompressor.unused_data
                    decompressor = zlib.decompressobj(GZIP_WBITS)
                    member_open = False
            else:
                data = decompressor.unconsumed_tail

    if member_open:
        raise DecompressionError(
            "Truncated gzip stream: input ended before the end of the gzip member",
            bytes_consumed=consumed,
        )

    logger.debug(f"Decompressed {consumed} compressed bytes")


async def split_lines(
    chunks: AsyncIterable[bytes],
    encoding: str = "utf-8",
) -> AsyncIterator[str]:
    """
    Split an async stream of bytes into text lines.

    Lines spanning chunk boundaries are joined; multi-byte characters split
    across chunks are decoded correctly. Undecodable bytes are replaced
    rather than aborting the stream.

    Args:
        chunks: Async iterable of (decompressed) byte chunks
        encoding: Text encoding (default: utf-8)

    Yields:
        Lines in input order, without '\\n' or '\\r\\n' terminators. A final
        segment without a terminator is yielded if non-empty.
    """
    decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
    pending = ""

    async for chunk in chunks:
        pending += decoder.decode(chunk)
        if "\n" not in pending:
            continue
        *lines, pending = pending.split("\n")
        for line in lines:
            yield line.rstrip("\r")

    pending += decoder.decode(b"", final=True)
    if pending:
        yield pending.rstrip("\r")
