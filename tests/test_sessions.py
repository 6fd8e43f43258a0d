from pairdraw.server.sessions import SessionRegistry


def test_open_is_unbound():
    reg = SessionRegistry()
    s = reg.open("c1")
    assert s.connection_id == "c1"
    assert not s.bound
    assert reg.get("c1") is s
    assert len(reg) == 1


def test_bind_and_unbind():
    reg = SessionRegistry()
    reg.open("c1")
    s = reg.bind("c1", "ROOM01", "Alice")
    assert s.bound
    assert (s.room_id, s.username) == ("ROOM01", "Alice")

    reg.unbind("c1")
    assert not reg.get("c1").bound
    assert reg.get("c1").username is None


def test_close_returns_last_binding():
    reg = SessionRegistry()
    reg.bind("c1", "ROOM01", "Alice")
    s = reg.close("c1")
    assert s is not None and s.room_id == "ROOM01"
    assert reg.get("c1") is None
    assert reg.close("c1") is None


def test_unbind_unknown_connection_is_noop():
    reg = SessionRegistry()
    reg.unbind("ghost")
    assert len(reg) == 0
