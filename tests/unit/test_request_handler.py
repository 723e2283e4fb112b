"""Tests for the per-message request flow with fake transport and media source."""

import asyncio

import pytest
import pytest_asyncio
from telegram.error import BadRequest, Forbidden, NetworkError, TimedOut

from vsco_bot.bot import request_handler as request_handler_module
from vsco_bot.bot.fetch_orchestrator import FetchOrchestrator
from vsco_bot.bot.messages import (
    DOWNLOADING_MESSAGE,
    INVALID_LINK_MESSAGE,
    INVALID_USERNAME_MESSAGE,
    SEND_FAILED_MESSAGE,
)
from vsco_bot.bot.request_handler import RequestHandler, schedule_status_deletion
from vsco_bot.bot.username_resolver import UsernameResolver
from vsco_bot.config import FetchConfig
from vsco_bot.exceptions import MediaGroupSendError, ScrapingFailedError
from vsco_bot.models import RequestState

# Defaults of the request_context fixture
TEST_CHAT_ID = 4242
TEST_MESSAGE_ID = 77


async def _drain_background_tasks() -> None:
    tasks = list(request_handler_module._background_tasks)
    if tasks:
        await asyncio.gather(*tasks)


@pytest_asyncio.fixture(autouse=True)
async def drain_status_deletions():
    """Let scheduled status deletions finish inside the test loop."""
    yield
    await _drain_background_tasks()


def _handler(source, fetch_config: FetchConfig) -> RequestHandler:
    return RequestHandler(FetchOrchestrator(source), UsernameResolver(), fetch_config)


@pytest.mark.asyncio
async def test_username_flow_delivers_two_batches(
    fake_transport, make_media_source, photo_locators, request_context
) -> None:
    source = make_media_source(photo_locators(25))
    fetch_config = FetchConfig(media_limit=20, status_delete_delay=0.0)

    state = await _handler(source, fetch_config).handle(request_context("johndoe"), fake_transport)
    await _drain_background_tasks()

    assert state is RequestState.DONE
    assert source.calls == [("johndoe", 20)]
    assert [len(group["items"]) for group in fake_transport.media_groups] == [10, 10]
    assert all(g["reply_to_message_id"] == TEST_MESSAGE_ID for g in fake_transport.media_groups)

    status = fake_transport.messages[0]
    assert status["text"] == DOWNLOADING_MESSAGE
    assert status["reply_to_message_id"] is None
    assert fake_transport.deleted == [(TEST_CHAT_ID, status["message_id"])]


@pytest.mark.asyncio
async def test_profile_link_resolves_handle(
    fake_transport, make_media_source, photo_locators, request_context, fetch_config
) -> None:
    source = make_media_source(photo_locators(3))

    state = await _handler(source, fetch_config).handle(
        request_context("https://vsco.co/johndoe/gallery"), fake_transport
    )

    assert state is RequestState.DONE
    assert source.calls == [("johndoe", fetch_config.media_limit)]


@pytest.mark.asyncio
async def test_foreign_link_is_rejected(
    fake_transport, make_media_source, request_context, fetch_config
) -> None:
    source = make_media_source([])

    state = await _handler(source, fetch_config).handle(
        request_context("https://example.com/johndoe"), fake_transport
    )

    assert state is RequestState.REJECTED
    assert source.calls == []
    assert fake_transport.messages == [
        {
            "chat_id": TEST_CHAT_ID,
            "text": INVALID_LINK_MESSAGE,
            "reply_to_message_id": TEST_MESSAGE_ID,
            "message_id": fake_transport.messages[0]["message_id"],
        }
    ]
    assert INVALID_LINK_MESSAGE == "*Send a valid VSCO profile link.*"


@pytest.mark.asyncio
async def test_invalid_username_is_rejected(
    fake_transport, make_media_source, request_context, fetch_config
) -> None:
    state = await _handler(make_media_source([]), fetch_config).handle(
        request_context("not a username!"), fake_transport
    )

    assert state is RequestState.REJECTED
    assert [m["text"] for m in fake_transport.messages] == [INVALID_USERNAME_MESSAGE]


@pytest.mark.asyncio
async def test_unsupported_media_dropped_single_reply(
    fake_transport, make_media_source, request_context, fetch_config
) -> None:
    source = make_media_source(["im.vsco.co/a.jpg", "im.vsco.co/b.txt", "im.vsco.co/c.gif"])

    state = await _handler(source, fetch_config).handle(request_context("johndoe"), fake_transport)

    assert state is RequestState.DONE
    assert len(fake_transport.media_groups) == 1
    assert len(fake_transport.media_groups[0]["items"]) == 2


@pytest.mark.asyncio
async def test_thread_replies_disabled(
    fake_transport, make_media_source, photo_locators, request_context
) -> None:
    fetch_config = FetchConfig(thread_replies=False, status_delete_delay=0.0)

    await _handler(make_media_source(photo_locators(2)), fetch_config).handle(
        request_context("johndoe"), fake_transport
    )

    assert fake_transport.media_groups[0]["reply_to_message_id"] is None


@pytest.mark.asyncio
async def test_blocked_user_gets_no_reply(
    fake_transport, make_media_source, photo_locators, request_context, fetch_config, caplog
) -> None:
    fake_transport.media_group_error = Forbidden("Forbidden: bot was blocked by the user")

    with caplog.at_level("INFO"):
        state = await _handler(make_media_source(photo_locators(5)), fetch_config).handle(
            request_context("johndoe"), fake_transport
        )

    assert state is RequestState.FAILED
    # Only the status notice was sent
    assert [m["text"] for m in fake_transport.messages] == [DOWNLOADING_MESSAGE]
    assert "Bot was blocked by the user" in caplog.text


@pytest.mark.asyncio
async def test_media_group_failure_replies_with_limit_message(
    fake_transport, make_media_source, photo_locators, request_context
) -> None:
    fetch_config = FetchConfig(media_limit=20, status_delete_delay=0.0)
    fake_transport.media_group_error = MediaGroupSendError("Call to 'sendMediaGroup' failed!")
    fake_transport.fail_on_batch = 1

    state = await _handler(make_media_source(photo_locators(15)), fetch_config).handle(
        request_context("johndoe"), fake_transport
    )

    assert state is RequestState.FAILED
    assert len(fake_transport.media_groups) == 1
    reply = fake_transport.messages[-1]
    assert reply["text"] == SEND_FAILED_MESSAGE
    assert reply["reply_to_message_id"] == TEST_MESSAGE_ID


@pytest.mark.asyncio
async def test_other_platform_error_is_echoed(
    fake_transport, make_media_source, photo_locators, request_context, fetch_config
) -> None:
    fake_transport.media_group_error = BadRequest("Replied message not found")

    state = await _handler(make_media_source(photo_locators(2)), fetch_config).handle(
        request_context("johndoe"), fake_transport
    )

    assert state is RequestState.FAILED
    assert fake_transport.messages[-1]["text"] == "*An error occurred: Replied message not found*"


@pytest.mark.asyncio
async def test_timed_out_upload_is_answered(
    fake_transport, make_media_source, photo_locators, request_context, fetch_config
) -> None:
    fake_transport.media_group_error = TimedOut()

    state = await _handler(make_media_source(photo_locators(3)), fetch_config).handle(
        request_context("johndoe"), fake_transport
    )

    assert state is RequestState.FAILED
    assert [m["text"] for m in fake_transport.messages] == [
        DOWNLOADING_MESSAGE,
        "*An error occurred: Timed out*",
    ]
    assert fake_transport.messages[-1]["reply_to_message_id"] == TEST_MESSAGE_ID


@pytest.mark.asyncio
async def test_scraper_failure_replies_with_error_text(
    fake_transport, make_media_source, request_context, fetch_config
) -> None:
    source = make_media_source(error=ScrapingFailedError("VSCO returned HTTP 503"))

    state = await _handler(source, fetch_config).handle(request_context("johndoe"), fake_transport)

    assert state is RequestState.FAILED
    reply = fake_transport.messages[-1]["text"]
    assert "Are you sure you sent a valid VSCO username?" in reply
    assert "VSCO returned HTTP 503" in reply


@pytest.mark.asyncio
async def test_status_message_failure_is_handled(
    fake_transport, make_media_source, request_context, fetch_config
) -> None:
    fake_transport.send_error = Forbidden("Forbidden: bot was blocked by the user")
    source = make_media_source(["im.vsco.co/a.jpg"])

    state = await _handler(source, fetch_config).handle(request_context("johndoe"), fake_transport)

    assert state is RequestState.FAILED
    assert source.calls == []


@pytest.mark.asyncio
async def test_failed_error_reply_does_not_raise(
    fake_transport, make_media_source, request_context, fetch_config
) -> None:
    source = make_media_source(error=ScrapingFailedError("down"))
    handler = _handler(source, fetch_config)

    async def flaky_send(chat_id, text, reply_to_message_id=None):
        if text == DOWNLOADING_MESSAGE:
            return 1
        raise NetworkError("connection lost")

    fake_transport.send_message = flaky_send

    state = await handler.handle(request_context("johndoe"), fake_transport)

    assert state is RequestState.FAILED


@pytest.mark.asyncio
async def test_status_deletion_failure_is_swallowed(fake_transport) -> None:
    fake_transport.delete_error = BadRequest("Message to delete not found")

    task = schedule_status_deletion(fake_transport, TEST_CHAT_ID, 5, 0.0)
    await task

    assert task.exception() is None
    assert fake_transport.deleted == []
