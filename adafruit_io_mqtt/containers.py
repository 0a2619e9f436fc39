"""Read-only result and event objects returned by the Adafruit IO MQTT client.

These are created once per call or event from whatever the underlying MQTT
library returned and are never mutated afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import aiomqtt
from paho.mqtt.reasoncodes import ReasonCode

__all__ = [
    "PublishReasonCode",
    "PublishResult",
    "SubscribeResultCode",
    "SubscribeResultItem",
    "SubscribeResult",
    "UnSubscribeResultCode",
    "UnSubscribeResultItem",
    "UnSubscribeResult",
    "ReceivedMessageEventArgs",
    "ConnectedEventArgs",
    "DisconnectedEventArgs",
]


class _ResultCode(IntEnum):
    """Reason code where unknown values fall back to UNSPECIFIED_ERROR."""

    @classmethod
    def _missing_(cls, value: object) -> Any:
        return cls["UNSPECIFIED_ERROR"]

    @classmethod
    def from_transport(cls, code: int | ReasonCode) -> Any:
        """Convert a granted QoS or paho reason code into this enum."""
        if isinstance(code, ReasonCode):
            return cls(code.value)
        return cls(int(code))


class PublishReasonCode(_ResultCode):
    SUCCESS = 0
    NO_MATCHING_SUBSCRIBERS = 16
    UNSPECIFIED_ERROR = 128
    IMPLEMENTATION_SPECIFIC_ERROR = 131
    NOT_AUTHORIZED = 135
    TOPIC_NAME_INVALID = 144
    PACKET_IDENTIFIER_IN_USE = 145
    QUOTA_EXCEEDED = 151
    PAYLOAD_FORMAT_INVALID = 153


class SubscribeResultCode(_ResultCode):
    GRANTED_QOS_0 = 0
    GRANTED_QOS_1 = 1
    GRANTED_QOS_2 = 2
    UNSPECIFIED_ERROR = 128
    IMPLEMENTATION_SPECIFIC_ERROR = 131
    NOT_AUTHORIZED = 135
    TOPIC_FILTER_INVALID = 143
    PACKET_IDENTIFIER_IN_USE = 145
    QUOTA_EXCEEDED = 151
    SHARED_SUBSCRIPTIONS_NOT_SUPPORTED = 158
    SUBSCRIPTION_IDENTIFIERS_NOT_SUPPORTED = 161
    WILDCARD_SUBSCRIPTIONS_NOT_SUPPORTED = 162


class UnSubscribeResultCode(_ResultCode):
    SUCCESS = 0
    NO_SUBSCRIPTION_EXISTED = 17
    UNSPECIFIED_ERROR = 128
    IMPLEMENTATION_SPECIFIC_ERROR = 131
    NOT_AUTHORIZED = 135
    TOPIC_FILTER_INVALID = 143
    PACKET_IDENTIFIER_IN_USE = 145


@dataclass(frozen=True)
class PublishResult:
    """Outcome of a single publish."""

    topic: str
    """Topic the message was published on."""

    reason_code: PublishReasonCode = PublishReasonCode.SUCCESS
    """Reason code reported for the publish."""

    reason_string: str | None = None
    """Optional human readable reason from the broker."""

    @property
    def is_success(self) -> bool:
        return self.reason_code in (PublishReasonCode.SUCCESS, PublishReasonCode.NO_MATCHING_SUBSCRIBERS)


@dataclass(frozen=True)
class SubscribeResultItem:
    """Outcome of subscribing to one topic."""

    topic: str
    result_code: SubscribeResultCode

    @property
    def is_success(self) -> bool:
        return self.result_code <= SubscribeResultCode.GRANTED_QOS_2

    @property
    def granted_qos(self) -> int | None:
        """The QoS granted by the broker, or None if the subscription failed."""
        if not self.is_success:
            return None
        return int(self.result_code)


@dataclass(frozen=True)
class SubscribeResult:
    """Per-topic outcomes of a subscribe call, in request order."""

    items: tuple[SubscribeResultItem, ...]

    @classmethod
    def from_transport(cls, topics: Sequence[str], codes: Iterable[int | ReasonCode]) -> SubscribeResult:
        """Pair each requested topic with the code the broker granted for it."""
        return cls(
            items=tuple(
                SubscribeResultItem(topic, SubscribeResultCode.from_transport(code))
                for topic, code in zip(topics, codes, strict=True)
            )
        )


@dataclass(frozen=True)
class UnSubscribeResultItem:
    """Outcome of unsubscribing from one topic."""

    topic: str
    result_code: UnSubscribeResultCode = UnSubscribeResultCode.SUCCESS


@dataclass(frozen=True)
class UnSubscribeResult:
    """Per-topic outcomes of an unsubscribe call, in request order."""

    items: tuple[UnSubscribeResultItem, ...]

    @classmethod
    def from_topics(cls, topics: Sequence[str]) -> UnSubscribeResult:
        # aiomqtt only returns once the broker acknowledged every topic
        return cls(items=tuple(UnSubscribeResultItem(topic) for topic in topics))


@dataclass(frozen=True)
class ReceivedMessageEventArgs:
    """A message delivered by the broker."""

    topic: str
    payload: bytes
    qos: int
    retain: bool

    @property
    def text(self) -> str:
        """The payload decoded as UTF-8, which is how Adafruit IO sends feed values."""
        return self.payload.decode("utf-8")

    @classmethod
    def from_message(cls, message: aiomqtt.Message) -> ReceivedMessageEventArgs:
        payload = message.payload
        if payload is None:
            payload = b""
        elif isinstance(payload, bytearray):
            payload = bytes(payload)
        elif not isinstance(payload, bytes):
            payload = str(payload).encode("utf-8")
        return cls(
            topic=message.topic.value,
            payload=payload,
            qos=message.qos,
            retain=message.retain,
        )


@dataclass(frozen=True)
class ConnectedEventArgs:
    client_id: str


@dataclass(frozen=True)
class DisconnectedEventArgs:
    client_was_connected: bool
    """True if the connection had been established before it was closed."""

    exception: Exception | None = None
    """The error that closed the connection, or None for a requested disconnect."""
