"""Per-message request flow.

Validates the message, shows a short-lived "Downloading" notice, runs the
fetch orchestrator and turns any failure into the matching reply. One failing
request never propagates past ``RequestHandler.handle``.
"""

import asyncio
import logging

from telegram.error import TelegramError

from ..config import FetchConfig, config
from ..exceptions import FetchError, InputRejectedError
from ..models import FailureKind, MediaItem, RejectionReason, RequestContext, RequestState
from .error_mapping import classify_failure, error_text, failure_reply
from .fetch_orchestrator import FetchOrchestrator, fetch_orchestrator
from .messages import (
    DOWNLOADING_MESSAGE,
    INVALID_LINK_MESSAGE,
    INVALID_USERNAME_MESSAGE,
    LOG_BLOCKED,
    LOG_INCOMING_MESSAGE,
    LOG_SEND_FAILED,
)
from .transport import ChatTransport
from .username_resolver import UsernameResolver, username_resolver

logger = logging.getLogger(__name__)

REJECTION_MESSAGES = {
    RejectionReason.INVALID_LINK: INVALID_LINK_MESSAGE,
    RejectionReason.INVALID_USERNAME: INVALID_USERNAME_MESSAGE,
}

# Strong references to detached tasks until they finish
_background_tasks: set[asyncio.Task[None]] = set()


async def delete_message_later(
    transport: ChatTransport, chat_id: int, message_id: int, delay: float
) -> None:
    """Delete a message after ``delay`` seconds, ignoring any failure."""
    await asyncio.sleep(delay)
    try:
        await transport.delete_message(chat_id, message_id)
    except Exception as e:
        logger.debug(f"Could not delete status message {message_id} in chat {chat_id}: {e}")


def schedule_status_deletion(
    transport: ChatTransport, chat_id: int, message_id: int, delay: float
) -> asyncio.Task[None]:
    """Schedule deletion of the status notice without waiting for it."""
    task = asyncio.create_task(delete_message_later(transport, chat_id, message_id, delay))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


class RequestHandler:
    """Runs the validate, fetch and reply flow for a single message."""

    def __init__(
        self,
        orchestrator: FetchOrchestrator,
        resolver: UsernameResolver,
        fetch_config: FetchConfig,
    ) -> None:
        self.orchestrator = orchestrator
        self.resolver = resolver
        self.fetch_config = fetch_config

    async def handle(self, request: RequestContext, transport: ChatTransport) -> RequestState:
        """Process one inbound message.

        Args:
            request: Message data.
            transport: Chat operations for replying.

        Returns:
            Terminal state: DONE, REJECTED or FAILED.
        """
        logger.info(
            LOG_INCOMING_MESSAGE.format(
                name=request.user_display,
                username=request.username,
                user_id=request.user_id,
                text=request.text,
            )
        )
        self._transition(request, RequestState.RECEIVED)

        try:
            handle = self.resolver.require_handle(request.text)
        except InputRejectedError as e:
            logger.info(f"Rejected message {request.message_id}: {e.reason.value}")
            await self._safe_reply(request, transport, REJECTION_MESSAGES[e.reason])
            return self._transition(request, RequestState.REJECTED)

        self._transition(request, RequestState.VALIDATING)

        try:
            status_message_id = await transport.send_message(request.chat_id, DOWNLOADING_MESSAGE)
        except TelegramError as e:
            return await self._fail(request, transport, e)

        schedule_status_deletion(
            transport,
            request.chat_id,
            status_message_id,
            self.fetch_config.status_delete_delay,
        )

        self._transition(request, RequestState.FETCHING)
        reply_to = request.message_id if self.fetch_config.thread_replies else None

        async def reply_sink(batch: list[MediaItem]) -> None:
            await transport.send_media_group(request.chat_id, batch, reply_to_message_id=reply_to)

        try:
            summary = await self.orchestrator.fetch_and_deliver(
                handle, self.fetch_config.media_limit, reply_sink
            )
        except FetchError as e:
            return await self._fail(request, transport, e)

        logger.info(
            f"Sent {summary['delivered']} media ({summary['skipped']} skipped) "
            f"from '{handle}' to chat {request.chat_id}"
        )
        return self._transition(request, RequestState.DONE)

    async def _fail(
        self, request: RequestContext, transport: ChatTransport, error: BaseException
    ) -> RequestState:
        kind = classify_failure(error)
        description = error_text(error.cause if isinstance(error, FetchError) else error)

        if kind is FailureKind.BLOCKED:
            logger.info(LOG_BLOCKED)
        elif kind is FailureKind.SEND_FAILED:
            logger.warning(f"{LOG_SEND_FAILED} {description}")
        elif kind is FailureKind.CONNECTIVITY:
            logger.error(f"Could not contact Telegram: {description}")
        elif kind is FailureKind.PLATFORM_OTHER:
            logger.error(f"Error sending message: {description}")
        else:
            logger.error(f"An error occurred: {description}")

        reply = failure_reply(kind, error)
        if reply is not None:
            await self._safe_reply(request, transport, reply)

        return self._transition(request, RequestState.FAILED)

    async def _safe_reply(
        self, request: RequestContext, transport: ChatTransport, text: str
    ) -> None:
        try:
            await transport.send_message(
                request.chat_id, text, reply_to_message_id=request.message_id
            )
        except TelegramError as e:
            logger.error(f"Failed to reply in chat {request.chat_id}: {e}")

    @staticmethod
    def _transition(request: RequestContext, state: RequestState) -> RequestState:
        logger.debug(f"Message {request.message_id} in chat {request.chat_id}: {state.value}")
        return state


# Global request handler instance
request_handler = RequestHandler(fetch_orchestrator, username_resolver, config.fetch)
