"""Telegram bot handlers.

Thin python-telegram-bot adapters: they turn an ``Update`` into a
``RequestContext`` and delegate to the request handler, answer the /start and
/help commands, and provide the application-wide error handler.
"""

import logging

from telegram import Update
from telegram.constants import ChatType, ParseMode
from telegram.error import BadRequest, Forbidden, NetworkError, TelegramError
from telegram.ext import ContextTypes

from ..config import config
from ..models import RequestContext
from .error_mapping import BLOCKED_MARKER
from .messages import (
    GENERIC_ERROR_MESSAGE,
    GROUPS_NOT_SUPPORTED,
    HELP_MESSAGE,
    LOG_BLOCKED,
    START_MESSAGE,
)
from .request_handler import request_handler
from .transport import TelegramTransport
from .utils import format_sender, log_response_time

logger = logging.getLogger(__name__)


@log_response_time
async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command.

    Sends the welcome message. Groups and channels get a refusal instead
    unless they are explicitly allowed.

    Args:
        update: Telegram update object containing message data.
        context: Bot context for accessing application instance.
    """
    message = update.effective_message
    chat = update.effective_chat
    if message is None or chat is None:
        return

    if chat.type != ChatType.PRIVATE and not config.fetch.allow_group_chats:
        await context.bot.send_message(
            chat_id=chat.id, text=GROUPS_NOT_SUPPORTED, parse_mode=ParseMode.MARKDOWN
        )
        return

    await message.reply_text(START_MESSAGE, parse_mode=ParseMode.MARKDOWN)
    logger.info(f"New user added: {chat.id} ({chat.type})")


@log_response_time
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command with usage instructions."""
    message = update.effective_message
    if message is None:
        return

    await message.reply_text(
        HELP_MESSAGE.format(limit=config.fetch.media_limit), parse_mode=ParseMode.MARKDOWN
    )
    logger.info(f"Help command sent to {message.chat_id}")


def build_request_context(update: Update) -> RequestContext | None:
    """Extract the request data from an update, None if it carries no text message."""
    message = update.effective_message
    user = update.effective_user
    if message is None or user is None:
        return None

    return RequestContext(
        user_id=user.id,
        user_display=format_sender(user.first_name, user.last_name),
        username=user.username,
        chat_id=message.chat_id,
        chat_type=message.chat.type,
        message_id=message.message_id,
        update_id=update.update_id,
        text=message.text or "",
    )


@log_response_time
async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle text messages containing a VSCO username or profile link.

    Args:
        update: Telegram update object containing message data.
        context: Bot context for accessing application instance.
    """
    request = build_request_context(update)
    if request is None:
        return

    await request_handler.handle(request, TelegramTransport(context.bot))


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Last-resort handler for errors escaping the other handlers."""
    error = context.error
    query = None
    update_id = None
    if isinstance(update, Update):
        update_id = update.update_id
        if update.effective_message:
            query = update.effective_message.text

    logger.error(f"Error while handling update {update_id}\nQuery: {query}")

    if isinstance(error, Forbidden) or (
        isinstance(error, TelegramError) and BLOCKED_MARKER in error.message
    ):
        logger.info(LOG_BLOCKED)
    elif isinstance(error, NetworkError) and not isinstance(error, BadRequest):
        logger.error(f"Could not contact Telegram: {error}")
    elif isinstance(error, TelegramError):
        logger.error(f"Error in request: {error.message}")
        if isinstance(update, Update) and update.effective_message:
            try:
                await update.effective_message.reply_text(GENERIC_ERROR_MESSAGE)
            except TelegramError as e:
                logger.error(f"Failed to report error to chat: {e}")
    else:
        logger.error("Unknown error:", exc_info=error)
