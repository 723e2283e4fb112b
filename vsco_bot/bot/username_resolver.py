"""Username resolution for incoming messages.

Turns the raw text of a message into a canonical VSCO profile handle, either
taken verbatim or extracted from a vsco.co profile link.
"""

from __future__ import annotations

import logging
import re
from typing import Final
from urllib.parse import urlparse

from ..exceptions import InputRejectedError
from ..models import RejectionReason
from .types import ResolvedInput

logger = logging.getLogger(__name__)

VSCO_HOST: Final[str] = "vsco.co"


class UsernameResolver:
    """Validates message text and extracts the profile handle."""

    HANDLE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9_-]+$")

    def is_valid_handle(self, text: str) -> bool:
        return bool(self.HANDLE_PATTERN.fullmatch(text))

    def handle_from_url(self, text: str) -> str | None:
        """Return the profile handle of a vsco.co URL, None for any other URL."""
        parsed = urlparse(text)
        host = parsed.hostname or ""

        if host != VSCO_HOST:
            logger.debug(f"Rejected link with foreign host: {host}")
            return None

        segments = [segment for segment in parsed.path.split("/") if segment]
        if not segments or not self.is_valid_handle(segments[0]):
            logger.debug(f"VSCO link without a profile segment: {text}")
            return None

        return segments[0]

    def resolve(self, text: str | None) -> ResolvedInput:
        """Resolve message text to a profile handle or a rejection reason."""
        text = text or ""

        parsed = urlparse(text)
        if parsed.scheme and parsed.netloc:
            handle = self.handle_from_url(text)
            if handle is None:
                return ResolvedInput(handle=None, rejection=RejectionReason.INVALID_LINK)
            return ResolvedInput(handle=handle, rejection=None)

        if self.is_valid_handle(text):
            return ResolvedInput(handle=text, rejection=None)

        return ResolvedInput(handle=None, rejection=RejectionReason.INVALID_USERNAME)

    def require_handle(self, text: str | None) -> str:
        """Resolve message text to a profile handle.

        Raises:
            InputRejectedError: If the text is neither a username nor a VSCO profile link.
        """
        resolved = self.resolve(text)
        if resolved["handle"] is None:
            raise InputRejectedError(resolved["rejection"] or RejectionReason.INVALID_USERNAME)
        return resolved["handle"]


username_resolver = UsernameResolver()
