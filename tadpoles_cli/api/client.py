"""
Async client for the Tadpoles parent API, backed by a cookie-holding aiohttp session.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, NamedTuple, Optional

import aiohttp

from tadpoles_cli.exceptions import ListingError
from tadpoles_cli.models.config import DEFAULT_BASE_URL
from tadpoles_cli.models.event import Event, Overview

from .auth import TadpolesAuthenticator

log = logging.getLogger(__name__)


class AttachmentPayload(NamedTuple):
    """Raw bytes of an attachment and the content type the server declared."""

    content_type: str
    data: bytes


class TadpolesAPIClient:
    """
    Async client for the Tadpoles remote API.

    The session is authenticated through cookies: the authenticator logs in and
    admits the session, and every later call rides on the same cookie jar.
    Calls are not retried; network failures propagate to the caller.
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL):
        """
        Initializes the API client.

        Args:
            base_url: Root URL of the Tadpoles service.
        """
        self.base_url = base_url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None
        self._authenticator = TadpolesAuthenticator(self)

    @property
    def authenticator(self) -> TadpolesAuthenticator:
        """Provides access to the authentication helper."""
        return self._authenticator

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session with a cookie jar is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                cookie_jar=aiohttp.CookieJar(),
                headers={
                    "User-Agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 11_4_1 like Mac OS X)",
                },
                timeout=aiohttp.ClientTimeout(total=120, connect=15, sock_read=60),
            )
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def post_form(self, path: str, form: Dict[str, str]) -> None:
        """Posts a url-encoded form; any non-2xx status raises."""
        session = await self._initialize_session()
        async with session.post(self.base_url + path, data=form) as r:
            log.debug(f"POST {path} -> {r.status}")
            r.raise_for_status()

    async def get_json(self, path: str, **params: Any) -> Dict[str, Any]:
        """Issues a GET request and decodes the JSON body."""
        session = await self._initialize_session()
        start_time = time.monotonic()
        async with session.get(self.base_url + path, params=params) as r:
            duration_ms = (time.monotonic() - start_time) * 1000
            log.debug(f"GET {path} -> {r.status} ({duration_ms:.0f} ms)")
            r.raise_for_status()
            return await r.json(content_type=None)

    async def fetch_overview(self) -> Overview:
        """
        Retrieves the earliest and latest event times for the account.

        Raises:
            ListingError: If the request fails or the response is unusable.
        """
        log.info("  -- Getting overview information")
        try:
            data = await self.get_json(
                "/remote/v1/parameters",
                include_all_kids="true",
                include_guardians="false",
            )
            return Overview.model_validate(data)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise ListingError(f"Error retrieving overview: {e}") from e

    async def fetch_events(
        self, earliest_event_time: int, latest_event_time: int, num_events: int
    ) -> List[Event]:
        """
        Retrieves one page of events between two epoch times.

        Raises:
            ListingError: If the request fails or the response is unusable.
        """
        try:
            data = await self.get_json(
                "/remote/v1/events",
                state="client",
                num_events=str(num_events),
                direction="range",
                latest_event_time=str(latest_event_time),
                earliest_event_time=str(earliest_event_time),
            )
            return [Event.model_validate(e) for e in data.get("events") or []]
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise ListingError(f"Error retrieving events: {e}") from e

    async def fetch_attachment(self, key: str) -> AttachmentPayload:
        """
        Downloads the raw bytes of an attachment.

        Network errors are not handled here; the caller decides whether they are
        fatal.
        """
        session = await self._initialize_session()
        async with session.get(
            self.base_url + "/remote/v1/attachment",
            params={"key": key},
            headers={"Accept": "*/*"},
        ) as r:
            r.raise_for_status()
            data = await r.read()
            return AttachmentPayload(content_type=r.content_type, data=data)
