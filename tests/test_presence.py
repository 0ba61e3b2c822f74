from tests.conftest import drain, events


def test_join_notifies_existing_members_then_publishes_list(coordinator, hub, room_of):
    room_id, (alice,) = room_of("alice")
    bob = coordinator.connect()
    drain(hub, bob.connection_id)

    ack = coordinator.handle(bob, {"event": "joinRoom", "data": {"roomId": room_id, "username": "bob"}, "id": 7})

    assert ack["id"] == 7
    assert ack["data"]["success"] is True
    assert ack["data"]["members"] == [
        {"connectionId": alice.connection_id, "username": "alice"},
        {"connectionId": bob.connection_id, "username": "bob"},
    ]

    alice_frames = drain(hub, alice.connection_id)
    assert [f["event"] for f in alice_frames] == ["userJoined", "updateUserList"]
    assert alice_frames[0]["data"] == {"connectionId": bob.connection_id, "username": "bob"}
    assert alice_frames[1]["data"] == ack["data"]["members"]

    # The joiner gets its ack before any room broadcast
    assert events(hub, bob.connection_id) == ["ack", "updateUserList"]


def test_leave_notifies_remaining_members(coordinator, hub, room_of):
    room_id, (alice, bob, carol) = room_of("alice", "bob", "carol")

    coordinator.disconnect(bob)

    for session in (alice, carol):
        frames = drain(hub, session.connection_id)
        assert [f["event"] for f in frames] == ["userLeft", "updateUserList"]
        assert frames[0]["data"] == bob.connection_id
        assert [m["connectionId"] for m in frames[1]["data"]] == [alice.connection_id, carol.connection_id]


def test_sole_member_disconnect_deletes_room_silently(coordinator, registry, hub, room_of):
    room_id, (alice,) = room_of("alice")

    assert coordinator.disconnect(alice) is True

    assert room_id not in registry
    assert hub.outbound(alice.connection_id) is None

    newcomer = coordinator.connect()
    ack = coordinator.handle(newcomer, {"event": "joinRoom", "data": {"roomId": room_id, "username": "late"}})
    assert ack["data"] == {
        "success": False,
        "roomId": None,
        "roomState": None,
        "members": None,
        "message": "Room not found.",
    }


def test_disconnect_runs_cleanup_exactly_once(coordinator, registry, hub, room_of):
    room_id, (alice, bob) = room_of("alice", "bob")

    assert coordinator.disconnect(bob) is True
    assert coordinator.disconnect(bob) is False

    assert events(hub, alice.connection_id) == ["userLeft", "updateUserList"]
    assert registry.get_room(room_id).member_ids() == [alice.connection_id]


def test_rapid_joins_each_see_both_members_once_in_order(coordinator, hub, room_of):
    room_id, (host,) = room_of("host")
    bob, carol = coordinator.connect(), coordinator.connect()

    coordinator.handle(bob, {"event": "joinRoom", "data": {"roomId": room_id, "username": "bob"}})
    coordinator.handle(carol, {"event": "joinRoom", "data": {"roomId": room_id, "username": "carol"}})

    expected = [host.connection_id, bob.connection_id, carol.connection_id]
    for session in (bob, carol):
        lists = [f["data"] for f in drain(hub, session.connection_id) if f["event"] == "updateUserList"]
        assert [m["connectionId"] for m in lists[-1]] == expected


def test_rejoining_same_room_publishes_nothing(coordinator, hub, room_of):
    room_id, (alice, bob) = room_of("alice", "bob")

    ack = coordinator.handle(bob, {"event": "joinRoom", "data": {"roomId": room_id, "username": "bob"}})

    assert ack["data"]["success"] is True
    assert len(ack["data"]["members"]) == 2
    assert drain(hub, alice.connection_id) == []


def test_joining_another_room_leaves_the_current_one(coordinator, registry, hub, room_of):
    first_id, (alice, bob) = room_of("alice", "bob")
    second_id, (carol,) = room_of("carol")

    coordinator.handle(bob, {"event": "joinRoom", "data": {"roomId": second_id, "username": "bob"}})

    assert registry.get_room(first_id).member_ids() == [alice.connection_id]
    assert registry.get_room(second_id).member_ids() == [carol.connection_id, bob.connection_id]
    assert events(hub, alice.connection_id) == ["userLeft", "updateUserList"]


def test_failed_join_keeps_current_room(coordinator, registry, hub, room_of):
    room_id, (alice, bob) = room_of("alice", "bob")

    ack = coordinator.handle(bob, {"event": "joinRoom", "data": {"roomId": "zzzzzz"}})

    assert ack["data"]["success"] is False
    assert bob.room_id == room_id
    assert drain(hub, alice.connection_id) == []


def test_rejoining_under_a_new_name_renames_the_member(coordinator, registry, hub, room_of):
    room_id, (alice, bob) = room_of("alice", "bob")

    ack = coordinator.handle(bob, {"event": "joinRoom", "data": {"roomId": room_id, "username": "robert"}})

    assert [m["username"] for m in ack["data"]["members"]] == ["alice", "robert"]
    assert [m.username for m in registry.get_room(room_id).members] == ["alice", "robert"]
    alice_frames = drain(hub, alice.connection_id)
    assert [f["event"] for f in alice_frames] == ["updateUserList"]
    assert [m["username"] for m in alice_frames[0]["data"]] == ["alice", "robert"]
    drain(hub, bob.connection_id)

    coordinator.handle(bob, {"event": "chatMessage", "data": {"text": "call me robert"}})
    assert drain(hub, alice.connection_id)[0]["data"]["username"] == "robert"
