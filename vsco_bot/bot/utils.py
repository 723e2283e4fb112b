"""Bot utility functions.

Provides the media batching helper, sender formatting for logs, response-time
logging for Telegram handlers, and HTTP session management for VSCO requests.
"""

import functools
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

import aiohttp
from telegram import Update
from telegram.ext import ContextTypes

from ..config import config

logger = logging.getLogger(__name__)

T = TypeVar("T")

HandlerCallback = Callable[[Update, ContextTypes.DEFAULT_TYPE], Awaitable[None]]


def chunk(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into consecutive groups of at most ``size`` elements.

    Order is preserved and every item lands in exactly one group. An empty
    input produces no groups.

    Args:
        items: Items to split.
        size: Maximum group size.

    Returns:
        List of groups, each holding between 1 and ``size`` items.

    Raises:
        ValueError: If size is smaller than 1.
    """
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")

    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def format_sender(first_name: str | None, last_name: str | None) -> str:
    """Build a display name from Telegram first/last name."""
    if not last_name:
        return first_name or ""
    return f"{first_name or ''} {last_name}".strip()


def log_response_time(handler: HandlerCallback) -> HandlerCallback:
    """Wrap a Telegram handler to log how long it took to process an update."""

    @functools.wraps(handler)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        before = time.monotonic()
        try:
            await handler(update, context)
        finally:
            elapsed_ms = int((time.monotonic() - before) * 1000)
            logger.info(f"Response time: {elapsed_ms} ms")

    return wrapper


def create_session() -> aiohttp.ClientSession:
    """Create configured aiohttp session for VSCO requests.

    Sets up session with connection limits, timeouts, and browser-like headers;
    VSCO serves its profile pages to regular browsers only.

    Returns:
        aiohttp.ClientSession: Configured HTTP session for making requests.
    """
    connector = aiohttp.TCPConnector(limit=20, limit_per_host=10)
    timeout = aiohttp.ClientTimeout(total=config.bot.timeout)

    headers = {
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "DNT": "1",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
    }

    return aiohttp.ClientSession(connector=connector, timeout=timeout, headers=headers)
