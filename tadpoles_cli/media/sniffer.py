"""
Detects the true format of downloaded images and fixes mislabeled extensions.
"""

import asyncio
import logging
import os
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from tadpoles_cli.models.stats import IngestStats
from tadpoles_cli.utils.retry import retry_io

log = logging.getLogger(__name__)

# Extensions whose content is checked; everything else passes through.
IMAGE_EXTENSIONS = {"jpg", "png"}

# Pillow format name -> archive extension. Other formats keep the extension
# they were downloaded under, so the archive only ever holds the extensions
# that the existence check looks for.
FORMAT_EXTENSIONS = {
    "JPEG": "jpg",
    "MPO": "jpg",
    "PNG": "png",
}


def detect_image_format(path: Path) -> str | None:
    """
    Identifies an image from its leading bytes.

    Returns:
        The Pillow format name (e.g. 'JPEG'), or None if the content is not a
        recognized image.
    """
    try:
        with Image.open(path) as img:
            return img.format
    except (UnidentifiedImageError, OSError) as e:
        log.debug(f"Could not identify image '{path.name}': {e}")
        return None


class MediaTypeSniffer:
    """
    Corrects image extensions using the file's content rather than the
    content type the server declared. The server is known to label PNG
    payloads as JPEG.
    """

    def __init__(self, stats: IngestStats | None = None):
        self.stats = stats

    async def correct(self, path: Path) -> Path:
        """
        Renames `path` if its content does not match its image extension.

        Returns:
            The (possibly new) path of the file.
        """
        current_ext = path.suffix.lstrip(".").lower()
        if current_ext not in IMAGE_EXTENSIONS:
            return path

        detected_format = await asyncio.to_thread(detect_image_format, path)
        if detected_format is None:
            log.warning(
                f"      -- Could not determine the image type of '{path.name}'; "
                "keeping its extension"
            )
            return path

        detected_ext = FORMAT_EXTENSIONS.get(detected_format)
        if detected_ext is None:
            log.info(
                f"      -- '{path.name}' is actually {detected_format}, "
                "keeping its extension"
            )
            return path
        if detected_ext == current_ext:
            return path

        new_path = path.with_suffix(f".{detected_ext}")
        log.info(
            f"      -- '{path.name}' is actually {detected_ext.upper()}, "
            f"renaming to '{new_path.name}'"
        )
        await retry_io(os.replace, path, new_path, description="rename")
        if self.stats is not None:
            self.stats.files_renamed += 1
        return new_path
