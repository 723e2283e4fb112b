"""Global test configuration and fixtures.

Provides shared fixtures for all test levels: environment setup, fake chat
transport and fake media source, so the request flow can be exercised without
Telegram or VSCO.
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

from vsco_bot.config import FetchConfig
from vsco_bot.models import RequestContext

# Test constants
TEST_BOT_TOKEN = os.getenv("TEST_BOT_TOKEN", "test_bot_token_placeholder")
TEST_CHAT_ID = 4242
TEST_MESSAGE_ID = 77


@pytest.fixture(autouse=True)
def test_environment():
    """Setup test environment variables for all tests."""
    test_env = {
        'BOT_TOKEN': TEST_BOT_TOKEN,
        'LOG_LEVEL': 'DEBUG',
    }

    # Store original values
    original_env = {}
    for key, value in test_env.items():
        original_env[key] = os.environ.get(key)
        os.environ[key] = value

    yield

    # Restore original values
    for key, original_value in original_env.items():
        if original_value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original_value


class FakeTransport:
    """In-memory ChatTransport recording every outbound call."""

    def __init__(self) -> None:
        self.messages: list[dict] = []
        self.deleted: list[tuple[int, int]] = []
        self.media_groups: list[dict] = []
        self.send_error: Exception | None = None
        self.delete_error: Exception | None = None
        self.media_group_error: Exception | None = None
        self.fail_on_batch: int | None = None
        self._next_message_id = 1000

    async def send_message(self, chat_id, text, reply_to_message_id=None):
        if self.send_error is not None:
            raise self.send_error
        self._next_message_id += 1
        self.messages.append(
            {
                "chat_id": chat_id,
                "text": text,
                "reply_to_message_id": reply_to_message_id,
                "message_id": self._next_message_id,
            }
        )
        return self._next_message_id

    async def delete_message(self, chat_id, message_id):
        if self.delete_error is not None:
            raise self.delete_error
        self.deleted.append((chat_id, message_id))

    async def send_media_group(self, chat_id, items, reply_to_message_id=None):
        if self.media_group_error is not None and (
            self.fail_on_batch is None or self.fail_on_batch == len(self.media_groups)
        ):
            raise self.media_group_error
        self.media_groups.append(
            {
                "chat_id": chat_id,
                "items": list(items),
                "reply_to_message_id": reply_to_message_id,
            }
        )


class FakeMediaSource:
    """MediaSource returning canned locators or raising a canned error."""

    def __init__(self, locators: list[str] | None = None, error: Exception | None = None):
        self.locators = locators or []
        self.error = error
        self.calls: list[tuple[str, int]] = []

    async def get_media(self, handle: str, limit: int) -> list[str]:
        self.calls.append((handle, limit))
        if self.error is not None:
            raise self.error
        return list(self.locators)

    def get_platform_name(self) -> str:
        return "fake"


@pytest.fixture
def fake_transport():
    """Fresh fake chat transport."""
    return FakeTransport()


@pytest.fixture
def make_media_source():
    """Factory for fake media sources."""
    return FakeMediaSource


@pytest.fixture
def photo_locators():
    """Scheme-less photo locators as VSCO returns them."""
    def _make(count: int) -> list[str]:
        return [f"im.vsco.co/aws-us-west-2/abc/{i}/photo{i}.jpg" for i in range(count)]

    return _make


@pytest.fixture
def fetch_config():
    """Fetch policy with an immediate status deletion."""
    return FetchConfig(
        media_limit=10,
        thread_replies=True,
        status_delete_delay=0.0,
        allow_group_chats=False,
    )


@pytest.fixture
def request_context():
    """Factory for request contexts with sensible defaults."""
    def _make(text: str, **overrides) -> RequestContext:
        data = {
            "user_id": 555,
            "user_display": "John Doe",
            "username": "john",
            "chat_id": TEST_CHAT_ID,
            "chat_type": "private",
            "message_id": TEST_MESSAGE_ID,
            "update_id": 1,
            "text": text,
        }
        data.update(overrides)
        return RequestContext(**data)

    return _make


@pytest.fixture
def mock_telegram_bot():
    """Mock telegram.Bot for transport tests."""
    bot = MagicMock()
    bot.send_message = AsyncMock(return_value=MagicMock(message_id=321))
    bot.delete_message = AsyncMock(return_value=True)
    bot.send_media_group = AsyncMock(return_value=[])
    bot.send_photo = AsyncMock()
    bot.send_video = AsyncMock()
    bot.send_animation = AsyncMock()
    return bot
