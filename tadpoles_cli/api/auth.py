"""
Handles authentication with the Tadpoles service: credential login followed by
admission of the session to the parent app API.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

import aiohttp

from tadpoles_cli.exceptions import AdmissionError, AuthenticationError

if TYPE_CHECKING:
    from .client import TadpolesAPIClient

log = logging.getLogger(__name__)

# The admit endpoint expects the device description the iOS app sends.
ADMIT_PARAMETERS = {
    "state": "client",
    "os_name": "iphone",
    "app_version": "8.8.7",
    "ostype": "64bit",
    "tz": "America New_York",
    "battery_level": "-1",
    "locale": "en-US",
    "available_memory": "62.65625",
    "platform_version": "11.4.1",
    "logged_in": "0",
    "uses_dst": "1",
    "utc_offset": "-05:00",
    "model": "iPhone9,1",
    "v": "2",
}


class TadpolesAuthenticator:
    """
    Manages the authentication flow for the Tadpoles API client.
    """

    def __init__(self, api_client: "TadpolesAPIClient"):
        """
        Initializes the authenticator.

        Args:
            api_client: A reference to the main TadpolesAPIClient instance.
        """
        self._api_client = api_client

    async def authenticate(self, username: str, password: str) -> None:
        """
        Logs in with an email address and password, storing the session cookie.

        Raises:
            AuthenticationError: If the login request is rejected or fails.
        """
        log.info(f"  -- Authenticating {username}")
        login_payload = {
            "email": username,
            "password": password,
            "server": "tadpoles",
        }
        try:
            await self._api_client.post_form("/auth/login", login_payload)
        except aiohttp.ClientResponseError as e:
            if e.status in (401, 403):
                raise AuthenticationError("Invalid email or password.") from e
            raise AuthenticationError(f"Login failed: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise AuthenticationError(f"Login failed: {e}") from e

    async def admit(self) -> None:
        """
        Admits the authenticated session; required before any listing call.

        Raises:
            AdmissionError: If the admit request is rejected or fails.
        """
        log.info("  -- Admitting")
        try:
            await self._api_client.post_form(
                "/remote/v1/athome/admit", ADMIT_PARAMETERS
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise AdmissionError(f"Admission failed: {e}") from e

    async def login(self, username: str, password: str) -> None:
        """Runs the complete authenticate-then-admit flow."""
        await self.authenticate(username, password)
        await self.admit()
