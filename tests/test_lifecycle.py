from constants import ROOM_MAX_AGE_SECONDS
from events import CONTROLLER_DISCONNECTED, GAME_DISCONNECTED, PLAYER_SHOOT, ROOM_EXPIRED
from backend import RoomRegistry, SessionRouter
from lifecycle import ConnectionLifecycle
from relay import RelayChannel
from tests.conftest import SequenceRandom


def test_host_disconnect_destroys_room_and_notifies_peer_once(router, registry, lifecycle, transport):
    code = router.bind_host("game-1")
    router.bind_peer("controller-1", code)

    lifecycle.handle_disconnect("game-1")

    assert registry.get_room(code) is None
    assert transport.events_for("controller-1") == [GAME_DISCONNECTED]
    assert router.get_binding("game-1") is None
    assert router.get_binding("controller-1") is None


def test_host_disconnect_without_peer(router, registry, lifecycle, transport):
    code = router.bind_host("game-1")

    lifecycle.handle_disconnect("game-1")

    assert registry.get_room(code) is None
    assert transport.sent == []


def test_orphaned_peer_can_join_a_new_room(router, lifecycle):
    code = router.bind_host("game-1")
    router.bind_peer("controller-1", code)
    lifecycle.handle_disconnect("game-1")

    new_code = router.bind_host("game-2")
    room = router.bind_peer("controller-1", new_code)

    assert room.peer_connection_id == "controller-1"


def test_peer_disconnect_keeps_room_awaiting(router, registry, lifecycle, transport):
    code = router.bind_host("game-1")
    router.bind_peer("controller-1", code)

    lifecycle.handle_disconnect("controller-1")

    room = registry.get_room(code)
    assert room is not None
    assert room.peer_connection_id is None
    assert room.state == "awaiting_peer"
    assert router.find_room_for_connection("game-1") is room
    assert transport.events_for("game-1") == [CONTROLLER_DISCONNECTED]

    router.bind_peer("controller-2", code)
    assert room.peer_connection_id == "controller-2"


def test_unbound_disconnect_is_noop(router, registry, lifecycle, transport):
    code = router.bind_host("game-1")

    lifecycle.handle_disconnect("stranger")

    assert registry.get_room(code) is not None
    assert transport.sent == []


def test_disconnect_after_room_already_gone(router, registry, lifecycle, transport):
    code = router.bind_host("game-1")
    registry.delete_room(code)

    lifecycle.handle_disconnect("game-1")

    assert router.get_binding("game-1") is None
    assert transport.sent == []


def test_sweep_notifies_both_sides_of_expired_rooms(router, registry, lifecycle, transport, clock):
    old_code = router.bind_host("game-old")
    router.bind_peer("controller-old", old_code)
    lonely_code = router.bind_host("game-lonely")
    clock.advance(ROOM_MAX_AGE_SECONDS / 2)
    fresh_code = router.bind_host("game-fresh")
    router.bind_peer("controller-fresh", fresh_code)

    clock.advance(ROOM_MAX_AGE_SECONDS / 2 + 1)
    expired = lifecycle.sweep_expired()

    assert sorted(expired) == sorted([old_code, lonely_code])
    assert transport.events_for("controller-old") == [GAME_DISCONNECTED]
    assert transport.events_for("game-old") == [ROOM_EXPIRED]
    assert transport.events_for("game-lonely") == [ROOM_EXPIRED]
    assert transport.events_for("game-fresh") == []
    assert transport.events_for("controller-fresh") == []
    assert router.get_binding("controller-old") is None
    assert router.get_binding("game-old") is None
    assert registry.get_room(fresh_code).peer_connection_id == "controller-fresh"


def test_expired_host_may_create_a_new_room(router, lifecycle, clock):
    router.bind_host("game-1")
    clock.advance(ROOM_MAX_AGE_SECONDS + 1)
    lifecycle.sweep_expired()

    code = router.bind_host("game-1")

    assert router.get_binding("game-1").room_code == code


def test_disconnect_after_sweep(router, lifecycle, transport, clock):
    code = router.bind_host("game-1")
    router.bind_peer("controller-1", code)
    clock.advance(ROOM_MAX_AGE_SECONDS + 1)
    lifecycle.sweep_expired()
    transport.sent.clear()

    lifecycle.handle_disconnect("game-1")
    lifecycle.handle_disconnect("controller-1")

    assert transport.sent == []


def test_pairing_scenario_with_reconnecting_controller(clock, transport):
    registry = RoomRegistry(clock=clock, rng=SequenceRandom(4821))
    router = SessionRouter(registry)
    relay = RelayChannel(router, transport)
    lifecycle = ConnectionLifecycle(router, transport)

    assert router.bind_host("game") == "4821"
    router.bind_peer("controller-a", "4821")
    relay.relay_action("controller-a")

    lifecycle.handle_disconnect("controller-a")
    assert transport.events_for("game") == [PLAYER_SHOOT, CONTROLLER_DISCONNECTED]
    assert router.find_room_for_connection("game").code == "4821"

    room = router.bind_peer("controller-b", "4821")
    assert room.peer_connection_id == "controller-b"
