"""Data models for the VSCO media bot.

Defines Pydantic models and enums for the data flowing through a single
request: classified media items, the per-message request context, and the
states and failure categories the request handler reports.
"""

from enum import Enum

from pydantic import BaseModel

# Telegram accepts at most 10 items in one sendMediaGroup call
MEDIA_GROUP_LIMIT = 10


class MediaKind(str, Enum):
    """Kind of media a locator points at."""

    PHOTO = "photo"
    VIDEO = "video"
    ANIMATION = "animation"


class MediaItem(BaseModel):
    """Classified media resource ready to be sent to the chat.

    Attributes:
        kind: Photo, video or animation.
        locator: Absolute URL of the resource.
    """

    kind: MediaKind
    locator: str


class RejectionReason(str, Enum):
    """Why a message could not be resolved to a profile handle."""

    INVALID_LINK = "invalid_link"
    INVALID_USERNAME = "invalid_username"


class RequestState(str, Enum):
    """Lifecycle of one inbound message."""

    RECEIVED = "received"
    VALIDATING = "validating"
    FETCHING = "fetching"
    DONE = "done"
    REJECTED = "rejected"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Categories used to pick the user-facing reply for a failed request."""

    BLOCKED = "blocked"
    SEND_FAILED = "send_failed"
    PLATFORM_OTHER = "platform_other"
    CONNECTIVITY = "connectivity"
    SCRAPER = "scraper"


class RequestContext(BaseModel):
    """Ephemeral per-message state.

    Attributes:
        user_id: Telegram id of the sender.
        user_display: Sender's first and last name.
        username: Sender's @username, if any.
        chat_id: Chat the message arrived in.
        chat_type: Telegram chat type (private, group, supergroup, channel).
        message_id: Id of the original message, used to thread replies.
        update_id: Id of the update that carried the message.
        text: Raw message text.
    """

    user_id: int
    user_display: str = ""
    username: str | None = None
    chat_id: int
    chat_type: str = "private"
    message_id: int
    update_id: int | None = None
    text: str = ""
