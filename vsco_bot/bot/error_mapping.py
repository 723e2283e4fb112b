"""Classification of request failures into user-facing replies.

Telegram errors are recognised by their python-telegram-bot type first and by
their description as a fallback, which keeps the three-way split between
blocked recipients, failed media sends and other platform errors stable.
"""

import logging

from telegram.error import BadRequest, Forbidden, NetworkError, RetryAfter, TelegramError
from telegram.helpers import escape_markdown

from ..exceptions import FetchError, MediaGroupSendError
from ..models import FailureKind
from .messages import (
    FETCH_FAILED_MESSAGE,
    PLATFORM_ERROR_MESSAGE,
    SEND_FAILED_MESSAGE,
)

logger = logging.getLogger(__name__)

BLOCKED_MARKER = "blocked by the user"
MEDIA_GROUP_MARKER = "sendMediaGroup"


def unwrap(error: BaseException) -> BaseException:
    """Return the exception a FetchError carries, or the error itself."""
    if isinstance(error, FetchError):
        return error.cause
    return error


def error_text(error: BaseException) -> str:
    """Human readable description of an error."""
    if isinstance(error, TelegramError):
        return error.message
    return str(error) or error.__class__.__name__


def classify_failure(error: BaseException) -> FailureKind:
    """Map an exception raised while serving a request to a FailureKind."""
    error = unwrap(error)

    if not isinstance(error, TelegramError):
        return FailureKind.SCRAPER

    description = error.message
    if isinstance(error, Forbidden) or BLOCKED_MARKER in description:
        return FailureKind.BLOCKED
    if isinstance(error, (MediaGroupSendError, RetryAfter)) or MEDIA_GROUP_MARKER in description:
        return FailureKind.SEND_FAILED
    # BadRequest derives from NetworkError but means Telegram did answer
    if isinstance(error, NetworkError) and not isinstance(error, BadRequest):
        return FailureKind.CONNECTIVITY
    return FailureKind.PLATFORM_OTHER


def failure_reply(kind: FailureKind, error: BaseException) -> str | None:
    """Reply text for a failed request; None when the recipient blocked the bot."""
    if kind is FailureKind.BLOCKED:
        return None

    if kind is FailureKind.SEND_FAILED:
        return SEND_FAILED_MESSAGE

    text = escape_markdown(error_text(unwrap(error)))
    if kind in (FailureKind.PLATFORM_OTHER, FailureKind.CONNECTIVITY):
        return PLATFORM_ERROR_MESSAGE.format(error=text)
    return FETCH_FAILED_MESSAGE.format(error=text)
