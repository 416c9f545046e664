"""
Dataclass for tracking ingestion session statistics.
"""

from dataclasses import dataclass


@dataclass
class IngestStats:
    """Counters for a single ingestion run."""

    pages_fetched: int = 0
    events_seen: int = 0
    attachments_downloaded: int = 0
    attachments_skipped_exists: int = 0
    attachments_skipped_filtered: int = 0
    attachments_failed: int = 0
    files_renamed: int = 0
    comments_written: int = 0
    total_size_downloaded: int = 0
