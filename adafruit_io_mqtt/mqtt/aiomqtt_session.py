"""An MQTT session backed by aiomqtt.

This is a thin wrapper around the async MQTT client. It connects with the
options built for Adafruit IO, forwards every incoming message to a single
handler from a background task, and reports connection changes. Protocol
handling, keep-alive and TLS are left entirely to aiomqtt.
"""

import asyncio
import logging
from collections.abc import Sequence

import aiomqtt
from aiomqtt import MqttError
from paho.mqtt.reasoncodes import ReasonCode

from adafruit_io_mqtt.containers import ReceivedMessageEventArgs

from .session import ConnectionOptions, MqttSession, PayloadType, SessionHandlers

_LOGGER = logging.getLogger(__name__)
_MQTT_LOGGER = logging.getLogger(f"{__name__}.aiomqtt")


class AiomqttSession(MqttSession):
    """An MQTT session for sending and receiving messages.

    Call connect() to open the connection. While connected a background task
    reads messages from the broker and passes them to the message handler.
    There is no automatic reconnection: if the connection drops, the
    disconnected handler is called with the error and the caller decides
    whether to connect again.
    """

    def __init__(self, options: ConnectionOptions, handlers: SessionHandlers) -> None:
        self._options = options
        self._handlers = handlers
        self._client: aiomqtt.Client | None = None
        self._client_lock = asyncio.Lock()
        self._background_task: asyncio.Task[None] | None = None

    @property
    def connected(self) -> bool:
        """True if the session is connected to the broker."""
        return self._client is not None

    def _create_client(self) -> aiomqtt.Client:
        options = self._options
        return aiomqtt.Client(
            hostname=options.host,
            port=options.port,
            username=options.username,
            password=options.password,
            identifier=options.client_id,
            keepalive=options.keepalive,
            protocol=aiomqtt.ProtocolVersion.V311,
            transport=options.transport.value,
            tls_params=options.tls,
            websocket_path=options.websocket_path,
            logger=_MQTT_LOGGER,
        )

    async def connect(self) -> None:
        """Connect to the broker.

        Connection failures are raised to the caller as aiomqtt errors.
        """
        async with self._client_lock:
            if self._client is not None:
                _LOGGER.warning("Already connected")
                return
            _LOGGER.debug(
                "Connecting to %s:%s over %s for %s",
                self._options.host,
                self._options.port,
                self._options.transport.value,
                self._options.username,
            )
            client = self._create_client()
            await client.__aenter__()
            self._client = client

        _LOGGER.info("Connected to MQTT broker %s as %s", self._options.host, self._options.client_id)
        loop = asyncio.get_running_loop()
        self._background_task = loop.create_task(self._process_message_loop(client))
        self._handlers.on_connected()

    async def disconnect(self) -> None:
        """Stop reading messages and close the connection.

        If the connection was already lost and is being closed by the message
        loop, this waits for that to finish instead of interrupting it.
        """
        task, self._background_task = self._background_task, None
        async with self._client_lock:
            client, self._client = self._client, None

        if task:
            if client is None:
                await task
            else:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        if client is None:
            _LOGGER.debug("Not connected, nothing to disconnect")
            return

        _LOGGER.info("Disconnecting from MQTT broker %s", self._options.host)
        try:
            await client.__aexit__(None, None, None)
        finally:
            self._handlers.on_disconnected(True, None)

    async def _process_message_loop(self, client: aiomqtt.Client) -> None:
        _LOGGER.debug("Processing MQTT messages")
        error: Exception | None = None
        try:
            async for message in client.messages:
                _LOGGER.debug("Received message on %s", message.topic.value)
                try:
                    self._handlers.on_message(ReceivedMessageEventArgs.from_message(message))
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    _LOGGER.error("Uncaught exception in message handler: %s", e)
        except MqttError as err:
            error = err

        async with self._client_lock:
            if self._client is not client:
                return
            self._client = None
        _LOGGER.info("MQTT connection lost: %s", error)
        try:
            await client.__aexit__(None, None, None)
        except MqttError as err:
            _LOGGER.debug("Error closing lost MQTT connection: %s", err)
        finally:
            if self._background_task is asyncio.current_task():
                self._background_task = None
            self._handlers.on_disconnected(True, error)

    async def _current_client(self, action: str) -> aiomqtt.Client:
        async with self._client_lock:
            if self._client is None:
                raise MqttError(f"Could not {action}, MQTT client not connected")
            return self._client

    async def publish(self, topic: str, payload: PayloadType, qos: int = 0, retain: bool = False) -> None:
        """Publish a message on the topic."""
        _LOGGER.debug("Publishing to topic %s: %s", topic, payload)
        client = await self._current_client("publish message")
        await client.publish(topic, payload=payload, qos=qos, retain=retain)

    async def subscribe(self, topic: str, qos: int = 0) -> Sequence[int | ReasonCode]:
        """Subscribe to the topic."""
        _LOGGER.debug("Subscribing to topic %s", topic)
        client = await self._current_client("subscribe to topic")
        return await client.subscribe(topic, qos=qos)

    async def unsubscribe(self, topics: list[str]) -> None:
        """Unsubscribe from the topics."""
        _LOGGER.debug("Unsubscribing from topics %s", topics)
        client = await self._current_client("unsubscribe from topics")
        await client.unsubscribe(topics)


def create_mqtt_session(options: ConnectionOptions, handlers: SessionHandlers) -> MqttSession:
    """Create an MQTT session.

    The session is not connected; call connect() on the returned session.
    """
    return AiomqttSession(options, handlers)
