"""Fetch orchestration for profile media delivery.

Coordinates one fetch: asks the media source for recent locators, classifies
them, groups them into media-group sized batches and hands each batch to a
reply sink, strictly in order.
"""

import logging
import re
from collections.abc import Awaitable, Callable
from datetime import datetime

from ..exceptions import FetchError
from ..models import MEDIA_GROUP_LIMIT, MediaItem
from ..scrapers import MediaSource, vsco_scraper
from .media_classifier import classify_all
from .types import FetchSummary
from .utils import chunk

logger = logging.getLogger(__name__)

ReplySink = Callable[[list[MediaItem]], Awaitable[None]]

HAS_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def to_absolute(locator: str) -> str:
    """Prefix scheme-less locators with https://."""
    if HAS_SCHEME_RE.match(locator):
        return locator
    if locator.startswith("//"):
        return f"https:{locator}"
    return f"https://{locator}"


class FetchOrchestrator:
    """Fetches profile media and delivers it batch by batch.

    Responsibilities:
    - Query the media source for a bounded number of locators
    - Drop media kinds the chat cannot display
    - Split the rest into batches no larger than a media group
    - Deliver batches sequentially, aborting on the first failure
    """

    def __init__(self, media_source: MediaSource, batch_size: int = MEDIA_GROUP_LIMIT) -> None:
        """Initialize fetch orchestrator.

        Args:
            media_source: Source of profile media locators.
            batch_size: Maximum items per delivered batch.
        """
        if not 1 <= batch_size <= MEDIA_GROUP_LIMIT:
            raise ValueError(f"Batch size must be between 1 and {MEDIA_GROUP_LIMIT}")

        self.media_source = media_source
        self.batch_size = batch_size

    async def fetch_and_deliver(
        self, handle: str, limit: int, reply_sink: ReplySink
    ) -> FetchSummary:
        """Fetch recent media of a profile and deliver it through ``reply_sink``.

        Batches already delivered stay delivered when a later step fails;
        nothing is retried.

        Args:
            handle: Canonical profile handle.
            limit: Maximum number of media to fetch.
            reply_sink: Coroutine called once per batch, in order.

        Returns:
            Summary of what was delivered.

        Raises:
            FetchError: Wrapping the scraper or reply exception that aborted the run.
        """
        start_time = datetime.now()

        try:
            raw_locators = await self.media_source.get_media(handle, limit)
            locators = [to_absolute(locator) for locator in raw_locators[:limit]]

            items = classify_all(locators)
            batches = chunk(items, self.batch_size)

            logger.info(
                f"Delivering {len(items)} media from {self.media_source.get_platform_name()} "
                f"profile '{handle}' in {len(batches)} batch(es)"
            )

            for batch in batches:
                await reply_sink(batch)

        except Exception as e:
            logger.warning(f"Fetch for '{handle}' aborted: {e}")
            raise FetchError(e) from e

        processing_time = int((datetime.now() - start_time).total_seconds() * 1000)
        return FetchSummary(
            handle=handle,
            locators=len(locators),
            delivered=len(items),
            skipped=len(locators) - len(items),
            batches=len(batches),
            processing_time_ms=processing_time,
        )


# Global orchestrator instance
fetch_orchestrator = FetchOrchestrator(vsco_scraper)
