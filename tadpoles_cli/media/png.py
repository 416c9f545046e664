"""
Minimal PNG chunk codec: split a PNG stream into chunks, build text chunks and
join chunks back into a stream without touching image data.
"""

import struct
import zlib
from typing import List, NamedTuple

from tadpoles_cli.exceptions import PngFormatError

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class PngChunk(NamedTuple):
    """A single PNG chunk. The CRC is recomputed on encode."""

    type: bytes
    data: bytes


def extract_chunks(data: bytes) -> List[PngChunk]:
    """
    Splits a PNG byte stream into its chunks, verifying each CRC.

    Raises:
        PngFormatError: On a bad signature, truncated chunk or CRC mismatch.
    """
    if not data.startswith(PNG_SIGNATURE):
        raise PngFormatError("Invalid PNG signature.")

    chunks: List[PngChunk] = []
    offset = len(PNG_SIGNATURE)
    end = len(data)

    while offset < end:
        if offset + 8 > end:
            raise PngFormatError(f"Truncated chunk header at offset {offset}.")
        length, chunk_type = struct.unpack(">I4s", data[offset : offset + 8])
        body_start = offset + 8
        body_end = body_start + length
        if body_end + 4 > end:
            raise PngFormatError(
                f"Truncated {chunk_type!r} chunk at offset {offset}."
            )

        body = data[body_start:body_end]
        (crc,) = struct.unpack(">I", data[body_end : body_end + 4])
        if zlib.crc32(chunk_type + body) != crc:
            raise PngFormatError(f"CRC mismatch in {chunk_type!r} chunk.")

        chunks.append(PngChunk(chunk_type, body))
        offset = body_end + 4
        if chunk_type == b"IEND":
            break

    if not chunks or chunks[-1].type != b"IEND":
        raise PngFormatError("Missing IEND chunk.")
    return chunks


def encode_chunks(chunks: List[PngChunk]) -> bytes:
    """Serializes chunks back into a PNG byte stream."""
    parts = [PNG_SIGNATURE]
    for chunk in chunks:
        parts.append(struct.pack(">I", len(chunk.data)))
        parts.append(chunk.type)
        parts.append(chunk.data)
        parts.append(struct.pack(">I", zlib.crc32(chunk.type + chunk.data)))
    return b"".join(parts)


def text_chunk(keyword: str, text: str) -> PngChunk:
    """Builds a Latin-1 tEXt chunk."""
    if not 1 <= len(keyword) <= 79:
        raise ValueError("tEXt keyword must be 1-79 characters long.")
    return PngChunk(
        b"tEXt",
        keyword.encode("latin-1") + b"\x00" + text.encode("latin-1", "replace"),
    )


def text_keyword(chunk: PngChunk) -> str | None:
    """Returns the keyword of a tEXt chunk, or None for any other chunk."""
    if chunk.type != b"tEXt":
        return None
    keyword, _, _ = chunk.data.partition(b"\x00")
    return keyword.decode("latin-1")


def insert_text(chunks: List[PngChunk], keyword: str, text: str) -> List[PngChunk]:
    """
    Returns chunks with a new tEXt entry placed immediately before IEND.
    Existing chunks, including text chunks with the same keyword, are kept.
    """
    return chunks[:-1] + [text_chunk(keyword, text)] + chunks[-1:]
