import os
import tempfile
import pytest
from typing import List
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

# Set test environment variables before importing app modules
os.environ.setdefault("LOGS_DIR", tempfile.mkdtemp(prefix="feedback-bot-logs-"))
os.environ.setdefault("WHATSAPP_TOKEN", "test-token")
os.environ.setdefault("WHATSAPP_PHONE_NUMBER_ID", "123456789")
os.environ.setdefault("WHATSAPP_VERIFY_TOKEN", "test-verify-token")

from fastapi.testclient import TestClient  # noqa: E402

from app.main import create_app  # noqa: E402
from app.services.messaging.client import MessagingClient  # noqa: E402
from app.services.common.types import CompletionRecord  # noqa: E402
from app.services.messaging.session_store import SessionStore  # noqa: E402
from app.services.workflow.dispatcher import ConversationDispatcher  # noqa: E402


class FakeClock:
    """Clock whose time only moves when a test says so"""

    def __init__(self, start: datetime = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class MemoryCompletionSink:
    """Keeps completion records in a list"""

    def __init__(self):
        self.records: List[CompletionRecord] = []

    def write(self, record: CompletionRecord) -> None:
        self.records.append(record)


def sent_texts(client) -> list:
    """Message bodies passed to client.send_message, in order"""
    return [call.args[0] for call in client.send_message.await_args_list]


def text_message(user_key: str, body: str) -> dict:
    return {
        "id": "wamid.text",
        "from": user_key,
        "timestamp": "1714554000",
        "type": "text",
        "text": {"body": body},
    }


def image_message(user_key: str, image_id: str) -> dict:
    return {
        "id": "wamid.image",
        "from": user_key,
        "timestamp": "1714554000",
        "type": "image",
        "image": {"id": image_id, "mime_type": "image/jpeg"},
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return MemoryCompletionSink()


@pytest.fixture
def store(clock, sink):
    return SessionStore(clock=clock, record_sink=sink)


@pytest.fixture
def messaging_client():
    client = AsyncMock(spec=MessagingClient)
    client.send_message.return_value = {"messages": [{"id": "wamid.reply"}]}
    return client


@pytest.fixture
def dispatcher(messaging_client, store):
    return ConversationDispatcher(messaging_client, store)


@pytest.fixture
def api_client(messaging_client, store):
    """Test client for an application wired to the fake messaging client"""
    app = create_app(messaging_client=messaging_client, store=store)
    with TestClient(app) as client:
        yield client
