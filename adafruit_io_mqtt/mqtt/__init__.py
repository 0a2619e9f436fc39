"""This module contains the low level MQTT session used by the Adafruit IO client.

This is not meant to be used directly, but rather as a base for the
higher level client in `adafruit_io_mqtt.client`.
"""

__all__: list[str] = []
