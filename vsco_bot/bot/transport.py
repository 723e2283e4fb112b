"""Chat transport abstraction over the Telegram Bot API.

The request handler talks to the chat only through ``ChatTransport`` so it can
be exercised with fakes. ``TelegramTransport`` is the production
implementation on top of python-telegram-bot.
"""

import logging
from typing import Protocol

from telegram import Bot, InputMediaPhoto, InputMediaVideo, ReplyParameters
from telegram.constants import ParseMode
from telegram.error import BadRequest, Forbidden, NetworkError, RetryAfter, TelegramError

from ..exceptions import MediaGroupSendError
from ..models import MediaItem, MediaKind

logger = logging.getLogger(__name__)


class ChatTransport(Protocol):
    """Outbound chat operations the bot relies on."""

    async def send_message(
        self, chat_id: int, text: str, reply_to_message_id: int | None = None
    ) -> int:
        """Send a Markdown text message and return its message id."""
        ...

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        """Delete a previously sent message."""
        ...

    async def send_media_group(
        self, chat_id: int, items: list[MediaItem], reply_to_message_id: int | None = None
    ) -> None:
        """Send one batch of media as a gallery."""
        ...


def _reply_parameters(reply_to_message_id: int | None) -> ReplyParameters | None:
    if reply_to_message_id is None:
        return None
    return ReplyParameters(message_id=reply_to_message_id, allow_sending_without_reply=True)


class TelegramTransport:
    """ChatTransport backed by a python-telegram-bot ``Bot``."""

    def __init__(self, bot: Bot) -> None:
        self.bot = bot

    async def send_message(
        self, chat_id: int, text: str, reply_to_message_id: int | None = None
    ) -> int:
        message = await self.bot.send_message(
            chat_id=chat_id,
            text=text,
            parse_mode=ParseMode.MARKDOWN,
            reply_parameters=_reply_parameters(reply_to_message_id),
        )
        return message.message_id

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        await self.bot.delete_message(chat_id=chat_id, message_id=message_id)

    async def send_media_group(
        self, chat_id: int, items: list[MediaItem], reply_to_message_id: int | None = None
    ) -> None:
        """Send a batch of media.

        Telegram groups only photos and videos, and only 2-10 of them, so a
        lone photo/video is sent on its own and animations follow the group
        one by one, keeping their relative order.

        Raises:
            MediaGroupSendError: If Telegram rejects the media.
            Forbidden, RetryAfter, NetworkError: Propagated unchanged.
        """
        reply_parameters = _reply_parameters(reply_to_message_id)
        grouped = [item for item in items if item.kind is not MediaKind.ANIMATION]
        animations = [item for item in items if item.kind is MediaKind.ANIMATION]

        try:
            if len(grouped) == 1:
                await self._send_single(chat_id, grouped[0], reply_parameters)
            elif grouped:
                media = [
                    InputMediaPhoto(media=item.locator)
                    if item.kind is MediaKind.PHOTO
                    else InputMediaVideo(media=item.locator)
                    for item in grouped
                ]
                await self.bot.send_media_group(
                    chat_id=chat_id, media=media, reply_parameters=reply_parameters
                )

            for item in animations:
                await self._send_single(chat_id, item, reply_parameters)

        except BadRequest as e:
            raise MediaGroupSendError(f"Call to 'sendMediaGroup' failed! ({e.message})") from e
        except (Forbidden, RetryAfter, NetworkError):
            raise
        except TelegramError as e:
            raise MediaGroupSendError(f"Call to 'sendMediaGroup' failed! ({e.message})") from e

    async def _send_single(
        self, chat_id: int, item: MediaItem, reply_parameters: ReplyParameters | None
    ) -> None:
        if item.kind is MediaKind.PHOTO:
            await self.bot.send_photo(
                chat_id=chat_id, photo=item.locator, reply_parameters=reply_parameters
            )
        elif item.kind is MediaKind.VIDEO:
            await self.bot.send_video(
                chat_id=chat_id, video=item.locator, reply_parameters=reply_parameters
            )
        else:
            await self.bot.send_animation(
                chat_id=chat_id, animation=item.locator, reply_parameters=reply_parameters
            )
