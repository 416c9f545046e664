"""
The main orchestrator: walks the event feed and runs every attachment through
fetch, type correction and timestamp tagging.
"""

import logging
from typing import Protocol

from rich.markup import escape

from tadpoles_cli.media import AttachmentFetcher, MediaTypeSniffer, MetadataRewriter
from tadpoles_cli.models.event import Event, Overview
from tadpoles_cli.models.stats import IngestStats

from .pagination import EventPaginator, EventSource, PaginationState

log = logging.getLogger(__name__)


class FeedSource(EventSource, Protocol):
    async def fetch_overview(self) -> Overview: ...


class IngestionDriver:
    """
    Orchestrates a full ingestion run.

    Everything runs one step at a time: the next attachment is not fetched
    before the previous one has been tagged.
    """

    def __init__(
        self,
        source: FeedSource,
        fetcher: AttachmentFetcher,
        sniffer: MediaTypeSniffer,
        rewriter: MetadataRewriter,
        stats: IngestStats | None = None,
    ):
        self.source = source
        self.paginator = EventPaginator(source)
        self.fetcher = fetcher
        self.sniffer = sniffer
        self.rewriter = rewriter
        self.stats = stats or IngestStats()

    async def run(self) -> IngestStats:
        """Ingests every page between the latest and earliest known events."""
        overview = await self.source.fetch_overview()
        state = PaginationState.start(overview)

        while not state.is_exhausted:
            page = await self.paginator.next_page(state)
            if page is None:
                break
            state = page.state
            self.stats.pages_fetched += 1

            for event in page.events:
                self.stats.events_seen += 1
                for key in event.attachments:
                    await self.process_attachment(key, event)

        return self.stats

    async def process_attachment(self, key: str, event: Event) -> None:
        """Runs one attachment through fetch, type correction and tagging."""
        path = await self.fetcher.fetch(key, event)
        if path is None:
            return
        path = await self.sniffer.correct(path)
        await self.rewriter.tag(path, event)
        log.debug(f"      -- Archived {escape(str(path))}")
