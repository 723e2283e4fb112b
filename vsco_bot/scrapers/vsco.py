"""VSCO media source implementing the MediaSource protocol.

Reads a profile's gallery page to discover its site id and the guest API
token embedded in ``window.__PRELOADED_STATE__``, then asks the public media
API for the most recent posts. Locators are returned scheme-less
(``im.vsco.co/...``), the same shape VSCO uses in its own payloads.
"""

import json
import logging
import re
from collections.abc import Callable
from typing import Any

import aiohttp
from bs4 import BeautifulSoup

from ..bot.utils import create_session
from ..exceptions import ParsingError, ProfileNotFoundError, ScraperError, ScrapingFailedError
from .base import BaseScraper

logger = logging.getLogger(__name__)

VSCO_BASE_URL = "https://vsco.co"
VSCO_MEDIA_API = f"{VSCO_BASE_URL}/api/3.0/medias/profile"

PRELOADED_STATE_RE = re.compile(r"window\.__PRELOADED_STATE__\s*=\s*(\{.*\})\s*;?\s*$", re.S)
SCHEME_RE = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.-]*:)?//")


def _strip_scheme(url: str) -> str:
    """Drop ``https://`` or ``//`` so every locator has the same shape."""
    return SCHEME_RE.sub("", url.strip())


def _parse_preloaded_state(html: str) -> dict[str, Any]:
    """Extract the ``window.__PRELOADED_STATE__`` JSON from a gallery page.

    Raises:
        ParsingError: If the page carries no parsable state.
    """
    soup = BeautifulSoup(html, "html.parser")
    for script in soup.find_all("script"):
        text = script.string
        if not text or "__PRELOADED_STATE__" not in text:
            continue

        match = PRELOADED_STATE_RE.search(text.strip())
        if not match:
            continue

        # The state is a JS object literal; undefined is not valid JSON
        payload = re.sub(r":\s*undefined\b", ":null", match.group(1))
        try:
            state = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ParsingError(f"Malformed VSCO page state: {e}") from e

        if isinstance(state, dict):
            return state

    raise ParsingError("VSCO page state not found")


def _section(state: dict[str, Any], *path: str) -> dict[str, Any]:
    """Walk nested state objects; a missing or null level yields an empty dict.

    Raises:
        ParsingError: If a level holds something other than an object.
    """
    node: Any = state
    for key in path:
        node = node.get(key)
        if node is None:
            return {}
        if not isinstance(node, dict):
            raise ParsingError(f"Unexpected VSCO page state at '{key}'")
    return node


def _extract_site_id(state: dict[str, Any], handle: str) -> str | None:
    """Find the numeric site id VSCO assigned to ``handle``."""
    by_username = _section(state, "sites", "siteByUsername")
    for key in (handle, handle.lower()):
        entry = by_username.get(key)
        if isinstance(entry, dict):
            site = entry.get("site")
            site_id = site.get("id") if isinstance(site, dict) else None
            if site_id is not None:
                return str(site_id)
    return None


def _extract_token(state: dict[str, Any]) -> str | None:
    token = _section(state, "users", "currentUser").get("tkn")
    return token or None


def _field(data: dict[str, Any], *keys: str) -> Any:
    """Return the first present value among snake_case/camelCase variants."""
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return None


def _image_locator(image: dict[str, Any]) -> str | None:
    if _field(image, "is_video", "isVideo"):
        video_url = _field(image, "video_url", "videoUrl")
        if video_url:
            return _strip_scheme(video_url)

    responsive_url = _field(image, "responsive_url", "responsiveUrl")
    return _strip_scheme(responsive_url) if responsive_url else None


def _media_locator(entry: dict[str, Any]) -> str | None:
    """Pick the best resource URL for one API media entry."""
    media_type = entry.get("type")

    if media_type == "video":
        video = entry.get("video") or {}
        url = _field(video, "playback_url", "playbackUrl", "download_url")
        return _strip_scheme(url) if url else None

    if media_type == "image":
        return _image_locator(entry.get("image") or {})

    return None


def _state_media(state: dict[str, Any], limit: int) -> list[str]:
    """Fallback: media already embedded in the page state, newest first."""
    images = _section(state, "entities", "images")

    entries = sorted(
        (image for image in images.values() if isinstance(image, dict)),
        key=lambda image: _field(image, "upload_date", "uploadDate") or 0,
        reverse=True,
    )

    locators: list[str] = []
    for image in entries:
        locator = _image_locator(image)
        if locator:
            locators.append(locator)
        if len(locators) >= limit:
            break
    return locators


class VscoScraper(BaseScraper):
    """Fetches recent media locators of a VSCO profile."""

    def __init__(
        self, session_factory: Callable[[], aiohttp.ClientSession] = create_session
    ) -> None:
        """Initialize VSCO scraper.

        Args:
            session_factory: Callable creating the HTTP session per fetch.
        """
        super().__init__("vsco")
        self._session_factory = session_factory

    async def get_media(self, handle: str, limit: int) -> list[str]:
        """Fetch up to ``limit`` media locators of a VSCO profile.

        Args:
            handle: VSCO username.
            limit: Maximum number of locators.

        Returns:
            Scheme-less locators in the order VSCO lists them.

        Raises:
            ProfileNotFoundError: If the profile does not exist.
            ScrapingFailedError: On HTTP or network failures.
            ParsingError: If VSCO responses cannot be understood.
        """
        self._log_scraping_start(handle, limit)

        try:
            async with self._session_factory() as session:
                html = await self._fetch_gallery_page(session, handle)
                state = _parse_preloaded_state(html)

                site_id = _extract_site_id(state, handle)
                if site_id is None:
                    raise ProfileNotFoundError(f"VSCO profile '{handle}' not found")

                token = _extract_token(state)
                if token:
                    locators = await self._fetch_profile_media(session, site_id, token, limit)
                else:
                    logger.debug("No VSCO guest token on page, using embedded media")
                    locators = _state_media(state, limit)

        except ScraperError as e:
            self._log_scraping_error(handle, e)
            raise
        except (aiohttp.ClientError, TimeoutError) as e:
            self._log_scraping_error(handle, e)
            raise ScrapingFailedError(f"Could not reach VSCO: {e}") from e

        self._log_scraping_success(handle, len(locators))
        return locators[:limit]

    async def _fetch_gallery_page(self, session: aiohttp.ClientSession, handle: str) -> str:
        url = f"{VSCO_BASE_URL}/{handle}/gallery"
        async with session.get(url) as response:
            if response.status == 404:
                raise ProfileNotFoundError(f"VSCO profile '{handle}' not found")
            if response.status != 200:
                raise ScrapingFailedError(f"VSCO returned HTTP {response.status} for {url}")
            return await response.text()

    async def _fetch_profile_media(
        self, session: aiohttp.ClientSession, site_id: str, token: str, limit: int
    ) -> list[str]:
        params = {"site_id": site_id, "limit": str(limit)}
        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}

        async with session.get(VSCO_MEDIA_API, params=params, headers=headers) as response:
            if response.status != 200:
                raise ScrapingFailedError(f"VSCO media API returned HTTP {response.status}")
            try:
                data = await response.json(content_type=None)
            except (json.JSONDecodeError, aiohttp.ContentTypeError) as e:
                raise ParsingError(f"Malformed VSCO media response: {e}") from e

        entries = data.get("media") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise ParsingError("VSCO media response has no media list")

        locators: list[str] = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            locator = _media_locator(entry)
            if locator:
                locators.append(locator)
        return locators


vsco_scraper = VscoScraper()
