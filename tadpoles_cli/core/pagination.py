"""
Walks the Tadpoles event feed backward in time from the latest known event.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, List, NamedTuple, Optional, Protocol

from tadpoles_cli.models.event import Event, Overview
from tadpoles_cli.utils.formatting import format_epoch

log = logging.getLogger(__name__)

# Pushes the first cursor past the latest event so that event is included.
CURSOR_OFFSET = 1000
PAGE_SIZE = 78


class EventSource(Protocol):
    async def fetch_events(
        self, earliest_event_time: int, latest_event_time: int, num_events: int
    ) -> List[Event]: ...


@dataclass(frozen=True)
class PaginationState:
    """
    Cursor state for one run.

    `lastitem` only ever moves down towards `finalitem`. `visited` holds every
    cursor a page has been requested for; requesting the same cursor twice
    means the feed made no progress and the walk must stop.
    """

    lastitem: int
    finalitem: int
    visited: FrozenSet[int] = field(default_factory=frozenset)

    @classmethod
    def start(cls, overview: Overview) -> "PaginationState":
        return cls(
            lastitem=overview.last_event_time + CURSOR_OFFSET,
            finalitem=overview.first_event_time,
        )

    @property
    def is_exhausted(self) -> bool:
        return self.lastitem == self.finalitem

    @property
    def has_cycled(self) -> bool:
        return self.lastitem in self.visited

    def visit(self) -> "PaginationState":
        """Records the current cursor as requested."""
        return replace(self, visited=self.visited | {self.lastitem})

    def advance(self, events: Iterable[Event]) -> "PaginationState":
        """Lowers the cursor to the oldest event older than it."""
        lastitem = self.lastitem
        for event in events:
            if event.event_time < lastitem:
                lastitem = event.event_time
        return replace(self, lastitem=lastitem)


class Page(NamedTuple):
    events: List[Event]
    state: PaginationState


class EventPaginator:
    """Requests event pages one cursor step at a time."""

    def __init__(self, source: EventSource, page_size: int = PAGE_SIZE):
        self.source = source
        self.page_size = page_size

    async def next_page(self, state: PaginationState) -> Optional[Page]:
        """
        Fetches the page below the current cursor.

        Returns:
            The events of the page and the advanced state, or None when the
            cursor has already been requested (the feed has no more data).

        Raises:
            ListingError: If the page cannot be retrieved.
        """
        if state.has_cycled:
            log.info("Ending loop")
            return None

        state = state.visit()
        log.info(
            f"  -- Getting listings from {state.lastitem} "
            f"({format_epoch(state.lastitem)})"
        )
        events = await self.source.fetch_events(
            earliest_event_time=state.finalitem,
            latest_event_time=state.lastitem,
            num_events=self.page_size,
        )
        return Page(events, state.advance(events))
