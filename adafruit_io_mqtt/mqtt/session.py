"""Connection settings and the transport interface used by the Adafruit IO client."""

import enum
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from aiomqtt import TLSParameters
from paho.mqtt.reasoncodes import ReasonCode

from adafruit_io_mqtt.containers import ReceivedMessageEventArgs

DEFAULT_HOST = "io.adafruit.com"
DEFAULT_SECURE_PORT = 8883
DEFAULT_INSECURE_PORT = 1883
DEFAULT_KEEPALIVE = 60

WEBSOCKET_PATH = "/mqtt"
WEBSOCKET_SECURE_PORT = 443
WEBSOCKET_INSECURE_PORT = 80

PayloadType = str | bytes | bytearray | int | float | None


class ConnectionMode(enum.Enum):
    """Transport used to reach the broker."""

    TCP = "tcp"
    WEBSOCKET = "websockets"


@dataclass(frozen=True)
class ConnectionConfig:
    """Settings for connecting to Adafruit IO."""

    username: str
    """Adafruit IO username, also the root of every feed topic."""

    key: str
    """Adafruit IO access key, sent as the MQTT password."""

    client_id: str = ""
    """MQTT client identifier. A random UUID is used when empty."""

    host: str = DEFAULT_HOST
    """MQTT host to connect to."""

    secure_port: int = DEFAULT_SECURE_PORT
    """TCP port used for TLS connections."""

    insecure_port: int = DEFAULT_INSECURE_PORT
    """TCP port used for plain connections."""

    keepalive: int = DEFAULT_KEEPALIVE
    """Keep-alive interval in seconds."""

    def __post_init__(self) -> None:
        if not self.client_id or not self.client_id.strip():
            object.__setattr__(self, "client_id", str(uuid.uuid4()))


@dataclass(frozen=True)
class ConnectionOptions:
    """Options handed to the MQTT library when connecting."""

    client_id: str
    username: str
    password: str
    keepalive: int
    host: str
    transport: ConnectionMode
    tcp_port: int | None = None
    """Broker port, only set for TCP connections."""

    tls: TLSParameters | None = None
    """TLS parameters, only set for secure connections."""

    websocket_path: str | None = None

    @property
    def port(self) -> int:
        """The port the transport actually connects to."""
        if self.tcp_port is not None:
            return self.tcp_port
        return WEBSOCKET_SECURE_PORT if self.tls is not None else WEBSOCKET_INSECURE_PORT


def build_connection_options(config: ConnectionConfig, mode: ConnectionMode, secure: bool) -> ConnectionOptions:
    """Build the connection options for the given transport mode.

    A secure connection always carries TLS parameters and uses the secure
    port. WebSocket connections never set a TCP port.
    """
    port = config.secure_port if secure else config.insecure_port
    return ConnectionOptions(
        client_id=config.client_id,
        username=config.username,
        password=config.key,
        keepalive=config.keepalive,
        host=config.host,
        transport=mode,
        tcp_port=port if mode is ConnectionMode.TCP else None,
        tls=TLSParameters() if secure else None,
        websocket_path=WEBSOCKET_PATH if mode is ConnectionMode.WEBSOCKET else None,
    )


@dataclass
class SessionHandlers:
    """Callbacks a session invokes for transport events."""

    on_message: Callable[[ReceivedMessageEventArgs], None]
    on_connected: Callable[[], None]
    on_disconnected: Callable[[bool, Exception | None], None]


class MqttSession(ABC):
    """An MQTT connection that can publish, subscribe and unsubscribe."""

    @property
    @abstractmethod
    def connected(self) -> bool:
        """True if the session is connected to the broker."""

    @abstractmethod
    async def connect(self) -> None:
        """Connect to the broker and start delivering messages."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Disconnect from the broker."""

    @abstractmethod
    async def publish(self, topic: str, payload: PayloadType, qos: int = 0, retain: bool = False) -> None:
        """Publish a message on the specified topic.

        This will raise an exception if the message could not be sent.
        """

    @abstractmethod
    async def subscribe(self, topic: str, qos: int = 0) -> Sequence[int | ReasonCode]:
        """Subscribe to a topic, returning the codes granted by the broker."""

    @abstractmethod
    async def unsubscribe(self, topics: list[str]) -> None:
        """Unsubscribe from all the topics in a single request."""
