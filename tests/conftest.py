"""
Shared fixtures: an in-memory Tadpoles feed and real image payloads.
"""

import io
from typing import Dict, List

import pytest
from PIL import Image

from tadpoles_cli.api.client import AttachmentPayload
from tadpoles_cli.models.event import Event, Overview


def _image_bytes(fmt: str) -> bytes:
    output = io.BytesIO()
    Image.new("RGB", (8, 8), color=(200, 120, 40)).save(output, format=fmt)
    return output.getvalue()


@pytest.fixture
def jpeg_bytes() -> bytes:
    return _image_bytes("JPEG")


@pytest.fixture
def png_bytes() -> bytes:
    return _image_bytes("PNG")


@pytest.fixture
def gif_bytes() -> bytes:
    return _image_bytes("GIF")


class FakeFeed:
    """
    Stands in for TadpolesAPIClient. Pages include events whose time lies in
    [earliest_event_time, latest_event_time], newest first.
    """

    def __init__(
        self,
        events: List[Event],
        attachments: Dict[str, AttachmentPayload] | None = None,
        first_event_time: int | None = None,
        last_event_time: int | None = None,
    ):
        self.events = events
        self.attachments = attachments or {}
        times = [e.event_time for e in events] or [0]
        self.overview = Overview(
            first_event_time=min(times) if first_event_time is None else first_event_time,
            last_event_time=max(times) if last_event_time is None else last_event_time,
        )
        self.page_requests: List[tuple] = []
        self.attachment_requests: List[str] = []

    async def fetch_overview(self) -> Overview:
        return self.overview

    async def fetch_events(
        self, earliest_event_time: int, latest_event_time: int, num_events: int
    ) -> List[Event]:
        self.page_requests.append((earliest_event_time, latest_event_time, num_events))
        page = [
            e
            for e in self.events
            if earliest_event_time <= e.event_time <= latest_event_time
        ]
        page.sort(key=lambda e: e.event_time, reverse=True)
        return page[:num_events]

    async def fetch_attachment(self, key: str) -> AttachmentPayload:
        self.attachment_requests.append(key)
        return self.attachments[key]


@pytest.fixture
def fake_feed():
    return FakeFeed


@pytest.fixture
def make_event():
    def _make_event(
        event_time: int,
        attachments: List[str] | None = None,
        event_date: str = "2019-03-14",
        child: str = "Ada",
        comment: str | None = None,
    ) -> Event:
        return Event(
            event_time=event_time,
            event_date=event_date,
            parent_member_display=child,
            comment=comment,
            attachments=attachments or [],
        )

    return _make_event
