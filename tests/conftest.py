"""Shared fixtures for the Adafruit IO MQTT client tests."""

import asyncio
from collections.abc import Generator
from unittest.mock import AsyncMock, Mock, patch

import aiomqtt
import pytest


class FakeMessages:
    """Async iterator standing in for `aiomqtt.Client.messages`.

    Messages pushed by the test are yielded in order. Pushing an exception
    makes the iterator raise it, which is how aiomqtt reports a lost
    connection.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[aiomqtt.Message | Exception] = asyncio.Queue()

    def push(self, item: aiomqtt.Message | Exception) -> None:
        self._queue.put_nowait(item)

    def __aiter__(self) -> "FakeMessages":
        return self

    async def __anext__(self) -> aiomqtt.Message:
        item = await self._queue.get()
        if isinstance(item, Exception):
            raise item
        return item


def make_message(topic: str, payload: bytes, qos: int = 0, retain: bool = False) -> aiomqtt.Message:
    return aiomqtt.Message(topic=topic, payload=payload, qos=qos, retain=retain, mid=1, properties=None)


class Recorder:
    """Records the arguments of every call so tests can wait for them."""

    def __init__(self) -> None:
        self.calls: list = []
        self.event = asyncio.Event()

    def append(self, args) -> None:
        self.calls.append(args)
        self.event.set()

    async def wait(self) -> None:
        await asyncio.wait_for(self.event.wait(), timeout=1.0)
        self.event.clear()


@pytest.fixture(name="fake_messages")
def fake_messages_fixture() -> FakeMessages:
    return FakeMessages()


@pytest.fixture(name="mock_aiomqtt_client")
def mock_aiomqtt_client_fixture(fake_messages: FakeMessages) -> AsyncMock:
    """The client object returned by the patched `aiomqtt.Client` constructor."""
    mock_client = AsyncMock()
    mock_client.messages = fake_messages
    mock_client.subscribe.return_value = (0,)
    mock_client.publish.return_value = None
    mock_client.unsubscribe.return_value = None
    return mock_client


@pytest.fixture(name="mock_aiomqtt")
def mock_aiomqtt_fixture(mock_aiomqtt_client: AsyncMock) -> Generator[Mock, None, None]:
    """Patch the aiomqtt client class used by the session."""
    mock_shim = Mock(return_value=mock_aiomqtt_client)
    with patch("adafruit_io_mqtt.mqtt.aiomqtt_session.aiomqtt.Client", mock_shim):
        yield mock_shim
