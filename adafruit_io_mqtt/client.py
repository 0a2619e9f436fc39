"""Adafruit IO MQTT client.

This wraps an MQTT session with the conveniences needed for Adafruit IO:
feed keys are mapped to topics under the user's namespace, results are
returned as typed objects and connection and message events can be
observed with listeners.
"""

import enum
import logging
from collections.abc import Callable
from typing import Any

from .containers import (
    ConnectedEventArgs,
    DisconnectedEventArgs,
    PublishResult,
    ReceivedMessageEventArgs,
    SubscribeResult,
    UnSubscribeResult,
)
from .exceptions import AdafruitIOException, ClientNotInitializedError
from .mqtt.aiomqtt_session import create_mqtt_session
from .mqtt.session import (
    DEFAULT_HOST,
    DEFAULT_INSECURE_PORT,
    DEFAULT_SECURE_PORT,
    ConnectionConfig,
    ConnectionMode,
    ConnectionOptions,
    MqttSession,
    PayloadType,
    SessionHandlers,
    build_connection_options,
)

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "AdafruitIOClient",
    "EventKind",
    "feed_topic",
]


class EventKind(enum.Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    MESSAGE_RECEIVED = "message_received"


def feed_topic(username: str, feed_key: str) -> str:
    """Return the MQTT topic for a feed owned by the user.

    The feed key is not escaped, so a key containing "/" yields a nested topic.
    """
    return f"{username}/feeds/{feed_key}"


class AdafruitIOClient:
    """MQTT client for Adafruit IO feeds."""

    def __init__(
        self,
        username: str | None = None,
        key: str | None = None,
        client_id: str | None = None,
        host: str = DEFAULT_HOST,
        secure_port: int = DEFAULT_SECURE_PORT,
        insecure_port: int = DEFAULT_INSECURE_PORT,
        *,
        config: ConnectionConfig | None = None,
    ) -> None:
        """Initialize the client.

        Either pass the username and key (plus optional host, ports and client
        id) or a prepared `ConnectionConfig`. Call `init_client()` before
        connecting.
        """
        if config is None:
            if username is None or key is None:
                raise ValueError("username and key are required when no config is given")
            config = ConnectionConfig(
                username=username,
                key=key,
                client_id=client_id or "",
                host=host,
                secure_port=secure_port,
                insecure_port=insecure_port,
            )
        self._config = config
        self._options: ConnectionOptions | None = None
        self._session: MqttSession | None = None
        self._listeners: dict[EventKind, list[Callable[[Any], None]]] = {kind: [] for kind in EventKind}

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    @property
    def client_id(self) -> str:
        return self._config.client_id

    @property
    def username(self) -> str:
        return self._config.username

    @property
    def connection_options(self) -> ConnectionOptions | None:
        """Options built by `init_client()`, or None before it was called."""
        return self._options

    @property
    def is_connected(self) -> bool:
        return self._session is not None and self._session.connected

    def init_client(self, mode: ConnectionMode = ConnectionMode.TCP, secure: bool = True) -> None:
        """Build the connection options and create the MQTT session.

        Calling this again replaces the previous session. This raises if the
        previous session is still connected; disconnect it first.
        """
        if self.is_connected:
            raise AdafruitIOException("Client is connected, call disconnect() before init_client()")
        self._options = build_connection_options(self._config, mode, secure)
        _LOGGER.debug(
            "Initialized client %s for %s over %s (secure=%s)",
            self.client_id,
            self._config.host,
            mode.value,
            secure,
        )
        self._session = create_mqtt_session(
            self._options,
            SessionHandlers(
                on_message=self._on_message,
                on_connected=self._on_connected,
                on_disconnected=self._on_disconnected,
            ),
        )

    def _require_session(self) -> MqttSession:
        if self._session is None:
            raise ClientNotInitializedError("Client not initialized, call init_client() first")
        return self._session

    def get_topic(self, feed_key: str) -> str:
        """Return the topic for one of this user's feeds."""
        return feed_topic(self._config.username, feed_key)

    async def connect(self) -> None:
        """Connect to Adafruit IO."""
        await self._require_session().connect()

    async def disconnect(self) -> None:
        """Disconnect from Adafruit IO."""
        await self._require_session().disconnect()

    async def publish_feed(self, feed_key: str, value: PayloadType, qos: int = 0, retain: bool = False) -> PublishResult:
        """Publish a value to a feed."""
        return await self.publish_topic(self.get_topic(feed_key), value, qos=qos, retain=retain)

    async def publish_topic(self, topic: str, value: PayloadType, qos: int = 0, retain: bool = False) -> PublishResult:
        """Publish a value to a raw MQTT topic."""
        session = self._require_session()
        await session.publish(topic, value, qos=qos, retain=retain)
        return PublishResult(topic)

    async def subscribe_feed(self, feed_key: str, qos: int = 0) -> SubscribeResult:
        """Subscribe to a feed."""
        return await self.subscribe_topic(self.get_topic(feed_key), qos=qos)

    async def subscribe_topic(self, topic: str, qos: int = 0) -> SubscribeResult:
        """Subscribe to a raw MQTT topic."""
        session = self._require_session()
        codes = await session.subscribe(topic, qos=qos)
        return SubscribeResult.from_transport([topic], codes)

    async def unsubscribe_feed(self, *feed_keys: str) -> UnSubscribeResult:
        """Unsubscribe from one or more feeds."""
        return await self.unsubscribe_topic(*[self.get_topic(feed_key) for feed_key in feed_keys])

    async def unsubscribe_topic(self, *topics: str) -> UnSubscribeResult:
        """Unsubscribe from one or more raw MQTT topics in a single request."""
        session = self._require_session()
        await session.unsubscribe(list(topics))
        return UnSubscribeResult.from_topics(topics)

    def _add_listener(self, kind: EventKind, callback: Callable[[Any], None]) -> Callable[[], None]:
        self._listeners[kind].append(callback)
        return lambda: self._listeners[kind].remove(callback)

    def add_message_listener(self, callback: Callable[[ReceivedMessageEventArgs], None]) -> Callable[[], None]:
        """Invoke the callback for every message received.

        The callback runs in the event loop and should not block. The returned
        callable removes the listener.
        """
        return self._add_listener(EventKind.MESSAGE_RECEIVED, callback)

    def add_connected_listener(self, callback: Callable[[ConnectedEventArgs], None]) -> Callable[[], None]:
        """Invoke the callback when the connection is established."""
        return self._add_listener(EventKind.CONNECTED, callback)

    def add_disconnected_listener(self, callback: Callable[[DisconnectedEventArgs], None]) -> Callable[[], None]:
        """Invoke the callback when the connection is closed or lost."""
        return self._add_listener(EventKind.DISCONNECTED, callback)

    def _dispatch(self, kind: EventKind, args: Any) -> None:
        for listener in list(self._listeners[kind]):
            try:
                listener(args)
            except Exception as e:
                _LOGGER.exception("Uncaught error in %s listener: %s", kind.value, e)

    def _on_message(self, args: ReceivedMessageEventArgs) -> None:
        self._dispatch(EventKind.MESSAGE_RECEIVED, args)

    def _on_connected(self) -> None:
        self._dispatch(EventKind.CONNECTED, ConnectedEventArgs(client_id=self.client_id))

    def _on_disconnected(self, was_connected: bool, exception: Exception | None) -> None:
        self._dispatch(
            EventKind.DISCONNECTED,
            DisconnectedEventArgs(client_was_connected=was_connected, exception=exception),
        )
