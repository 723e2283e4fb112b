"""Custom exceptions for the VSCO media bot."""

from telegram.error import TelegramError

from .models import RejectionReason


class VscoBotError(Exception):
    """Base exception for the VSCO media bot."""
    pass


class InputRejectedError(VscoBotError):
    """Message text is neither a VSCO username nor a VSCO profile link."""

    def __init__(self, reason: RejectionReason):
        super().__init__(f"Input rejected: {reason.value}")
        self.reason = reason


class ScraperError(VscoBotError):
    """Base exception for media source failures."""
    pass


class ProfileNotFoundError(ScraperError):
    """Profile does not exist or is not accessible."""
    pass


class ScrapingFailedError(ScraperError):
    """Failed to retrieve data from VSCO."""
    pass


class ParsingError(ScraperError):
    """Failed to parse data returned by VSCO."""
    pass


class FetchError(VscoBotError):
    """Fetch-and-deliver aborted by a scraper or reply failure.

    Attributes:
        cause: The exception that aborted the fetch.
    """

    def __init__(self, cause: BaseException):
        super().__init__(str(cause))
        self.cause = cause


class MediaGroupSendError(TelegramError):
    """Telegram rejected a media group (or one of its standalone items)."""
    pass
