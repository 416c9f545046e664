"""
Tests for IngestionDriver, wired with real media components over a fake feed.
"""

from unittest.mock import AsyncMock

import piexif
import pytest

from tadpoles_cli.api.client import AttachmentPayload
from tadpoles_cli.core.ingestion import IngestionDriver
from tadpoles_cli.exceptions import ListingError
from tadpoles_cli.media import AttachmentFetcher, MediaTypeSniffer, MetadataRewriter
from tadpoles_cli.models.stats import IngestStats
from tadpoles_cli.utils.formatting import format_exif_datetime
from tadpoles_cli.utils.path import PathFormatter, content_hash


def build_driver(feed, archive_root, stats=None):
    stats = stats or IngestStats()
    formatter = PathFormatter(
        str(archive_root / "%child%" / "%YYYY%" / "%MM%"), "%YYYY%-%MM%-%DD%_%keymd5%"
    )
    return IngestionDriver(
        feed,
        AttachmentFetcher(feed, formatter, stats),
        MediaTypeSniffer(stats),
        MetadataRewriter(),
        stats,
    )


def archived_files(root):
    return sorted(p for p in root.rglob("*") if p.is_file())


@pytest.fixture
def scenario_feed(fake_feed, make_event, jpeg_bytes):
    events = [
        make_event(5000, ["key-a"], comment="Painting today"),
        make_event(4000, ["key-b"]),
        make_event(3000, ["key-c"]),
    ]
    attachments = {
        key: AttachmentPayload("image/jpeg", jpeg_bytes)
        for key in ("key-a", "key-b", "key-c")
    }
    return fake_feed(
        events, attachments, first_event_time=1000, last_event_time=5000
    )


class TestIngestionScenario:
    @pytest.mark.asyncio
    async def test_three_jpeg_events(self, scenario_feed, tmp_path):
        driver = build_driver(scenario_feed, tmp_path)

        stats = await driver.run()

        # First page from the offset cursor, then one more from the oldest event
        # which makes no progress and ends the walk.
        assert scenario_feed.page_requests[0][:2] == (1000, 6000)
        assert scenario_feed.page_requests[1][:2] == (1000, 3000)
        assert len(scenario_feed.page_requests) == 2

        media = [p for p in archived_files(tmp_path) if p.suffix == ".jpg"]
        assert len(media) == 3
        assert stats.attachments_downloaded == 3
        assert stats.comments_written == 1
        assert scenario_feed.attachment_requests == ["key-a", "key-b", "key-c"]

    @pytest.mark.asyncio
    async def test_files_are_tagged_with_event_time(self, scenario_feed, tmp_path):
        await build_driver(scenario_feed, tmp_path).run()

        path = (
            tmp_path / "Ada" / "2019" / "03" / f"2019-03-14_{content_hash('key-b')}.jpg"
        )
        exif = piexif.load(str(path))
        assert exif["Exif"][piexif.ExifIFD.DateTimeOriginal] == format_exif_datetime(
            4000
        ).encode()
        assert int(path.stat().st_mtime) == 4000


class TestIdempotence:
    @pytest.mark.asyncio
    async def test_second_run_downloads_nothing(self, scenario_feed, tmp_path):
        await build_driver(scenario_feed, tmp_path).run()
        files_after_first = archived_files(tmp_path)
        requests_after_first = list(scenario_feed.attachment_requests)

        stats = await build_driver(scenario_feed, tmp_path).run()

        assert archived_files(tmp_path) == files_after_first
        assert scenario_feed.attachment_requests == requests_after_first
        assert stats.attachments_downloaded == 0
        assert stats.comments_written == 0
        # The oldest event comes back on the second page and is skipped again.
        assert stats.attachments_skipped_exists == 4

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ext", ["png", "mp4", "pdf"])
    async def test_existing_variant_skips_download(
        self, fake_feed, make_event, jpeg_bytes, tmp_path, ext
    ):
        feed = fake_feed(
            [make_event(5000, ["key-a"])],
            {"key-a": AttachmentPayload("image/jpeg", jpeg_bytes)},
        )
        directory = tmp_path / "Ada" / "2019" / "03"
        directory.mkdir(parents=True)
        existing = directory / f"2019-03-14_{content_hash('key-a')}.{ext}"
        existing.write_bytes(b"already here")

        stats = await build_driver(feed, tmp_path).run()

        assert feed.attachment_requests == []
        assert archived_files(tmp_path) == [existing]
        assert stats.attachments_skipped_exists == 1

    @pytest.mark.asyncio
    async def test_gif_served_as_jpeg_is_downloaded_once(
        self, fake_feed, make_event, gif_bytes, tmp_path
    ):
        feed = fake_feed(
            [make_event(5000, ["key-a"])],
            {"key-a": AttachmentPayload("image/jpeg", gif_bytes)},
        )

        await build_driver(feed, tmp_path).run()
        stats = await build_driver(feed, tmp_path).run()

        assert feed.attachment_requests == ["key-a"]
        files = archived_files(tmp_path)
        assert [p.suffix for p in files] == [".jpg"]
        assert files[0].read_bytes() == gif_bytes
        assert stats.attachments_skipped_exists == 1


class TestPipelineOrdering:
    @pytest.mark.asyncio
    async def test_mislabeled_png_is_renamed_then_tagged(
        self, fake_feed, make_event, png_bytes, tmp_path
    ):
        feed = fake_feed(
            [make_event(5000, ["key-a"])],
            {"key-a": AttachmentPayload("image/jpeg", png_bytes)},
        )

        stats = await build_driver(feed, tmp_path).run()

        files = archived_files(tmp_path)
        assert [p.suffix for p in files] == [".png"]
        assert stats.files_renamed == 1
        assert b"Creation Time" in files[0].read_bytes()

    @pytest.mark.asyncio
    async def test_later_steps_skipped_when_nothing_fetched(
        self, fake_feed, make_event
    ):
        feed = fake_feed([make_event(5000, ["key-a", "key-b"])])
        fetcher = AsyncMock()
        fetcher.fetch.return_value = None
        sniffer = AsyncMock()
        rewriter = AsyncMock()

        await IngestionDriver(feed, fetcher, sniffer, rewriter).run()

        assert fetcher.fetch.await_count == 2
        sniffer.correct.assert_not_awaited()
        rewriter.tag.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_attachments_processed_in_event_order(self, fake_feed, make_event):
        feed = fake_feed(
            [make_event(5000, ["a1", "a2"]), make_event(4000, ["b1"])]
        )
        calls = []
        fetcher = AsyncMock()
        fetcher.fetch.side_effect = lambda key, event: calls.append(key) or None

        await IngestionDriver(feed, fetcher, AsyncMock(), AsyncMock()).run()

        assert calls == ["a1", "a2", "b1"]

    @pytest.mark.asyncio
    async def test_overview_failure_aborts_run(self):
        source = AsyncMock()
        source.fetch_overview.side_effect = ListingError("overview unavailable")
        fetcher = AsyncMock()

        driver = IngestionDriver(source, fetcher, AsyncMock(), AsyncMock())
        with pytest.raises(ListingError):
            await driver.run()
        fetcher.fetch.assert_not_awaited()
