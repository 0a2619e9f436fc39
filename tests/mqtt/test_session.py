"""Tests for building connection options."""

import uuid

import pytest
from aiomqtt import TLSParameters

from adafruit_io_mqtt.mqtt.session import (
    ConnectionConfig,
    ConnectionMode,
    build_connection_options,
)

CONFIG = ConnectionConfig(
    username="username",
    key="aio_key",
    client_id="client-1",
    host="localhost",
    secure_port=8884,
    insecure_port=1884,
)


def test_config_defaults() -> None:
    """Test the default Adafruit IO settings."""
    config = ConnectionConfig(username="username", key="aio_key")
    assert config.host == "io.adafruit.com"
    assert config.secure_port == 8883
    assert config.insecure_port == 1883
    assert config.keepalive == 60


@pytest.mark.parametrize("client_id", ["", "   "])
def test_config_generates_client_id(client_id: str) -> None:
    """Test a random client id is generated when none is given."""
    config = ConnectionConfig(username="username", key="aio_key", client_id=client_id)
    assert uuid.UUID(config.client_id)


def test_config_generates_unique_client_ids() -> None:
    """Test each config gets its own client id."""
    first = ConnectionConfig(username="username", key="aio_key")
    second = ConnectionConfig(username="username", key="aio_key")
    assert first.client_id != second.client_id


def test_config_keeps_client_id() -> None:
    assert CONFIG.client_id == "client-1"


@pytest.mark.parametrize("mode", list(ConnectionMode))
def test_secure_options_have_tls(mode: ConnectionMode) -> None:
    """Test secure connections always carry TLS parameters."""
    options = build_connection_options(CONFIG, mode, secure=True)
    assert isinstance(options.tls, TLSParameters)


@pytest.mark.parametrize("mode", list(ConnectionMode))
def test_insecure_options_have_no_tls(mode: ConnectionMode) -> None:
    """Test insecure connections never carry TLS parameters."""
    options = build_connection_options(CONFIG, mode, secure=False)
    assert options.tls is None


@pytest.mark.parametrize(("secure", "port"), [(True, 8884), (False, 1884)])
def test_tcp_options(secure: bool, port: int) -> None:
    """Test TCP connections use the secure or insecure port."""
    options = build_connection_options(CONFIG, ConnectionMode.TCP, secure=secure)
    assert options.tcp_port == port
    assert options.port == port
    assert options.transport == ConnectionMode.TCP
    assert options.websocket_path is None
    assert options.host == "localhost"
    assert options.client_id == "client-1"
    assert options.username == "username"
    assert options.password == "aio_key"
    assert options.keepalive == 60


@pytest.mark.parametrize(("secure", "port"), [(True, 443), (False, 80)])
def test_websocket_options(secure: bool, port: int) -> None:
    """Test WebSocket connections never set a TCP port."""
    options = build_connection_options(CONFIG, ConnectionMode.WEBSOCKET, secure=secure)
    assert options.tcp_port is None
    assert options.port == port
    assert options.transport == ConnectionMode.WEBSOCKET
    assert options.websocket_path == "/mqtt"
