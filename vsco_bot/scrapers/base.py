"""Base media source protocol and abstractions for profile media retrieval.

Defines the interface the fetch orchestrator consumes, so the bot logic never
depends on a concrete scraper and can be tested with fakes.
"""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class MediaSource(Protocol):
    """Protocol defining the interface for profile media sources.

    Methods:
        get_media: Fetch locators of the most recent media of a profile.
        get_platform_name: Get platform identifier.
    """

    async def get_media(self, handle: str, limit: int) -> list[str]:
        """Fetch the most recent media locators of a profile.

        Args:
            handle: Canonical profile handle.
            limit: Maximum number of locators to return.

        Returns:
            Scheme-less resource locators, newest first.

        Raises:
            ScraperError: If the profile is missing or the source misbehaves.
        """
        ...

    def get_platform_name(self) -> str:
        """Get the platform name identifier.

        Returns:
            Platform name (e.g., 'vsco').
        """
        ...


class BaseScraper:
    """Base class providing common functionality for media sources."""

    def __init__(self, platform_name: str):
        """Initialize base scraper.

        Args:
            platform_name: Name of the platform (e.g., 'vsco').
        """
        self.platform_name = platform_name
        self.logger = logging.getLogger(f"{__name__}.{platform_name}")

    def get_platform_name(self) -> str:
        """Get the platform name identifier."""
        return self.platform_name

    def _log_scraping_start(self, handle: str, limit: int) -> None:
        self.logger.info(f"Fetching up to {limit} media for {self.platform_name} profile: {handle}")

    def _log_scraping_success(self, handle: str, count: int) -> None:
        self.logger.info(f"Fetched {count} media from {self.platform_name} profile: {handle}")

    def _log_scraping_error(self, handle: str, error: Exception) -> None:
        self.logger.error(
            f"Failed to fetch media from {self.platform_name} profile ({handle}): {error}"
        )
