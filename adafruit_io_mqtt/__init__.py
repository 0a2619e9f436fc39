"""Asyncio MQTT client for Adafruit IO feeds."""

from .client import AdafruitIOClient, EventKind, feed_topic
from .containers import (
    ConnectedEventArgs,
    DisconnectedEventArgs,
    PublishReasonCode,
    PublishResult,
    ReceivedMessageEventArgs,
    SubscribeResult,
    SubscribeResultCode,
    SubscribeResultItem,
    UnSubscribeResult,
    UnSubscribeResultCode,
    UnSubscribeResultItem,
)
from .exceptions import AdafruitIOException, ClientNotInitializedError
from .mqtt.session import ConnectionConfig, ConnectionMode, ConnectionOptions, build_connection_options
