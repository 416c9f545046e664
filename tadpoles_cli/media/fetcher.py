"""
Downloads event attachments into the archive, skipping anything already archived.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional, Protocol

import aiofiles
import aiohttp
from rich.markup import escape

from tadpoles_cli.api.client import AttachmentPayload
from tadpoles_cli.models.event import Event
from tadpoles_cli.models.stats import IngestStats
from tadpoles_cli.utils.path import PathFormatter, content_hash, create_dir

log = logging.getLogger(__name__)

# Declared content type -> archive extension. Anything else is not archived.
CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "video/mp4": "mp4",
    "application/pdf": "pdf",
}

ARCHIVE_EXTENSIONS = tuple(CONTENT_TYPE_EXTENSIONS.values())


class AttachmentSource(Protocol):
    async def fetch_attachment(self, key: str) -> AttachmentPayload: ...


def with_extension(base: Path, ext: str) -> Path:
    """Appends an extension to a base path that may itself contain dots."""
    return base.with_name(f"{base.name}.{ext}")


def discard_temp(path: Path) -> None:
    """Removes a leftover temporary file, if any."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        log.debug(f"Could not remove temporary file '{path.name}': {e}")


def find_archived(base: Path) -> Optional[Path]:
    """Returns the archived file for `base` under any supported extension."""
    for ext in ARCHIVE_EXTENSIONS:
        candidate = with_extension(base, ext)
        if candidate.exists():
            return candidate
    return None


class AttachmentFetcher:
    """
    Fetches one attachment at a time into the archive tree.

    The presence of an archived file is the only record of past downloads, so
    re-running over the same events downloads nothing new.
    """

    def __init__(
        self,
        source: AttachmentSource,
        path_formatter: PathFormatter,
        stats: IngestStats | None = None,
    ):
        self.source = source
        self.path_formatter = path_formatter
        self.stats = stats or IngestStats()

    async def fetch(self, key: str, event: Event) -> Optional[Path]:
        """
        Downloads an attachment unless it is already archived.

        Args:
            key: The attachment key on the Tadpoles server.
            event: The event that references the attachment.

        Returns:
            The path of the written file, or None if nothing was written.
        """
        base = self.path_formatter.format_base(event, key)

        if await asyncio.to_thread(find_archived, base):
            self.stats.attachments_skipped_exists += 1
            log.debug(f"    -- File {escape(base.name)} already archived, skipping")
            return None

        log.info(
            f"    -- File {escape(base.name)} from {event.event_date} "
            "does not exist... downloading"
        )
        await asyncio.to_thread(create_dir, base.parent)

        if event.comment:
            await self._write_comment(with_extension(base, "txt"), event.comment)

        try:
            payload = await self.source.fetch_attachment(key)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.stats.attachments_failed += 1
            log.error(
                f"[red]Error downloading file for {escape(event.parent_member_display)}:"
                f" {escape(key)} on {event.event_date} ({e})[/red]"
            )
            return None

        ext = CONTENT_TYPE_EXTENSIONS.get(payload.content_type)
        if ext is None:
            self.stats.attachments_skipped_filtered += 1
            log.info(
                f"      -- content-type {escape(payload.content_type or 'unknown')}"
                " excluded - skipping"
            )
            return None

        final_path = with_extension(base, ext)
        try:
            await self._write_file(final_path, payload.data, key)
        except OSError as e:
            self.stats.attachments_failed += 1
            log.error(f"[red]Error writing '{escape(str(final_path))}': {e}[/red]")
            return None

        self.stats.attachments_downloaded += 1
        self.stats.total_size_downloaded += len(payload.data)
        return final_path

    async def _write_comment(self, path: Path, comment: str) -> None:
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(comment)
        self.stats.comments_written += 1

    async def _write_file(self, final_path: Path, data: bytes, key: str) -> None:
        """
        Writes to a temporary sibling first so an interrupted write never leaves
        a file that later runs would take as already archived.
        """
        temp_path = final_path.with_name(f"{final_path.name}.{content_hash(key)}.tmp")
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(data)
            await asyncio.to_thread(os.replace, temp_path, final_path)
        finally:
            await asyncio.to_thread(discard_temp, temp_path)
