"""Exceptions raised by the Adafruit IO MQTT client."""


class AdafruitIOException(Exception):
    """Base class for errors raised by this library."""


class ClientNotInitializedError(AdafruitIOException):
    """Raised when the client is used before `init_client` was called."""
