"""Tests for environment driven configuration."""
import pytest

from the_hub.config import HubConfig, STORE_MEMORY, STORE_MONGODB


def test_defaults(monkeypatch):
    for name in ("HUB_MESSAGE_STORE", "MONGODB_CONNECTION", "HUB_PUSH_TIMEOUT", "HUB_WS_PATH"):
        monkeypatch.delenv(name, raising=False)
    config = HubConfig.from_env()
    assert config.message_store == STORE_MEMORY
    assert config.push_timeout == 5.0
    assert config.ws_path == "/ws"


def test_mongodb_from_env(monkeypatch):
    monkeypatch.setenv("HUB_MESSAGE_STORE", "MongoDB")
    monkeypatch.setenv("MONGODB_CONNECTION", "mongodb://localhost:27017")
    monkeypatch.setenv("HUB_PUSH_TIMEOUT", "1.5")
    config = HubConfig.from_env()
    assert config.message_store == STORE_MONGODB
    assert config.mongo_uri == "mongodb://localhost:27017"
    assert config.push_timeout == 1.5


def test_unknown_store_rejected():
    with pytest.raises(ValueError):
        HubConfig(message_store="firestore")


def test_mongodb_needs_uri():
    with pytest.raises(ValueError):
        HubConfig(message_store=STORE_MONGODB)


def test_push_timeout_must_be_positive():
    with pytest.raises(ValueError):
        HubConfig(push_timeout=0)


def test_push_timeout_can_be_disabled(monkeypatch):
    assert HubConfig(push_timeout=None).push_timeout is None
    monkeypatch.setenv("HUB_PUSH_TIMEOUT", "none")
    assert HubConfig.from_env().push_timeout is None


def test_disabled_timeout_reaches_the_channel():
    from the_hub.realtime import ChatHub
    hub = ChatHub.from_config(HubConfig(push_timeout=None))
    assert hub.channel.push_timeout is None
