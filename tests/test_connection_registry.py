"""Tests for the connection registry."""
from the_hub.hub_models import ConnectionState
from the_hub.realtime import Connection
from .conftest import FakeTransport, open_connection


def test_register_starts_with_no_interests(registry):
    connection = open_connection(registry)
    assert registry.active_count == 1
    assert connection.circles == set()
    assert registry.get(connection.id) is connection


def test_join_is_idempotent(registry):
    connection = open_connection(registry, "c1")
    registry.join(connection, "c1")
    assert connection.circles == {"c1"}
    assert registry.interested_in("c1") == frozenset({connection})
    assert registry.circle_count == 1


def test_joins_are_additive(registry):
    connection = open_connection(registry, "c1", "c2")
    assert connection.circles == {"c1", "c2"}
    assert connection in registry.interested_in("c1")
    assert connection in registry.interested_in("c2")


def test_unknown_circle_has_no_listeners(registry):
    open_connection(registry, "c1")
    assert registry.interested_in("nope") == frozenset()


def test_unregister_removes_from_every_circle(registry):
    a = open_connection(registry, "c1", "c2")
    b = open_connection(registry, "c2")
    registry.unregister(a)

    assert a.state == ConnectionState.CLOSED
    assert registry.interested_in("c1") == frozenset()
    assert registry.interested_in("c2") == frozenset({b})
    assert registry.active_count == 1
    assert registry.circle_count == 1
    assert registry.get(a.id) is None


def test_unregister_twice_is_harmless(registry):
    connection = open_connection(registry, "c1")
    registry.unregister(connection)
    registry.unregister(connection)
    assert registry.active_count == 0


def test_join_after_close_is_ignored(registry):
    connection = open_connection(registry, "c1")
    registry.unregister(connection)
    registry.join(connection, "c2")
    assert registry.interested_in("c2") == frozenset()
    assert registry.circle_count == 0


def test_register_after_close_is_ignored(registry):
    connection = open_connection(registry)
    registry.unregister(connection)
    registry.register(connection)
    assert registry.active_count == 0
    assert connection.state == ConnectionState.CLOSED


def test_duplicate_register_keeps_interests(registry):
    connection = open_connection(registry, "c1")
    registry.register(connection)
    assert registry.active_count == 1
    assert connection.circles == {"c1"}


def test_join_on_unregistered_connection_is_ignored(registry):
    connection = Connection(transport=FakeTransport())
    registry.join(connection, "c1")
    assert registry.interested_in("c1") == frozenset()


def test_snapshot_is_not_a_live_view(registry):
    a = open_connection(registry, "c1")
    snapshot = registry.interested_in("c1")
    b = open_connection(registry, "c1")
    registry.unregister(a)

    assert snapshot == frozenset({a})
    assert registry.interested_in("c1") == frozenset({b})


def test_closing_connection_is_excluded_from_snapshots(registry):
    connection = open_connection(registry, "c1")
    registry.mark_closing(connection)

    assert connection.state == ConnectionState.CLOSING
    assert registry.interested_in("c1") == frozenset()
    assert not registry.is_open(connection)
    registry.unregister(connection)
    assert connection.state == ConnectionState.CLOSED
