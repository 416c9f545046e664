"""
Writes the event timestamp into downloaded media: embedded image metadata first,
then the filesystem times.
"""

import asyncio
import io
import logging
import os
import sys
from pathlib import Path

import piexif

from tadpoles_cli.exceptions import PngFormatError
from tadpoles_cli.models.event import Event
from tadpoles_cli.utils.formatting import format_exif_datetime
from tadpoles_cli.utils.retry import retry_io

from . import png

if sys.platform == "win32":
    from win32_setctime import setctime
else:
    setctime = None

log = logging.getLogger(__name__)

PNG_CREATION_TIME_KEY = "Creation Time"
JPEG_SOI = b"\xff\xd8"


def _write_bytes(path: Path, data: bytes) -> None:
    with open(path, "wb") as f:
        f.write(data)


def rewrite_jpeg_exif(data: bytes, timestamp: str) -> bytes:
    """
    Returns JPEG bytes whose EXIF DateTimeOriginal is set to `timestamp`.

    Existing EXIF data is preserved; an empty EXIF structure is created when the
    image has none.

    Raises:
        ValueError: If `data` is not a readable JPEG stream.
    """
    if not data.startswith(JPEG_SOI):
        raise ValueError("Not a JPEG stream.")
    exif_dict = piexif.load(data)
    exif_dict["Exif"][piexif.ExifIFD.DateTimeOriginal] = timestamp.encode("ascii")
    exif_bytes = piexif.dump(exif_dict)

    output = io.BytesIO()
    piexif.insert(exif_bytes, data, output)
    return output.getvalue()


def rewrite_png_creation_time(data: bytes, timestamp: str) -> bytes:
    """
    Returns PNG bytes with a 'Creation Time' tEXt chunk added just before IEND.
    Text chunks already in the stream are left in place.
    """
    chunks = png.extract_chunks(data)
    chunks = png.insert_text(chunks, PNG_CREATION_TIME_KEY, timestamp)
    return png.encode_chunks(chunks)


def set_file_times(path: Path, epoch_seconds: int) -> bool:
    """
    Sets the access and modification times of a file, and its creation time
    on Windows. Best effort.

    Returns:
        True if the times were set, False otherwise.
    """
    try:
        os.utime(path, (epoch_seconds, epoch_seconds))
        if setctime is not None:
            setctime(path, epoch_seconds)
        return True
    except OSError as e:
        log.warning(f"      -- Could not set file times on '{path.name}': {e}")
        return False


class MetadataRewriter:
    """Tags JPEG and PNG files with the event time and touches every file."""

    async def tag(self, path: Path, event: Event) -> None:
        timestamp = format_exif_datetime(event.event_time)
        ext = path.suffix.lstrip(".").lower()

        if ext == "jpg":
            await self._rewrite(path, rewrite_jpeg_exif, timestamp)
        elif ext == "png":
            await self._rewrite(path, rewrite_png_creation_time, timestamp)

        await asyncio.to_thread(set_file_times, path, event.event_time)

    async def _rewrite(self, path: Path, transform, timestamp: str) -> None:
        """Reads the file, transforms its bytes and writes them back in place."""
        data = await asyncio.to_thread(path.read_bytes)
        try:
            new_data = transform(data, timestamp)
        except (PngFormatError, ValueError) as e:
            log.warning(
                f"      -- Could not update embedded metadata of '{path.name}': {e}"
            )
            return
        await retry_io(_write_bytes, path, new_data, description="metadata write")
        log.debug(f"      -- Tagged '{path.name}' with {timestamp}")
