import pytest
from pydantic import ValidationError

from pairdraw.protocol.messages import (
    ClearCanvas,
    CreateRoom,
    Draw,
    JoinRoom,
    LoadDrawing,
    RoomCreated,
    StrokeEvent,
    dump,
    parse_inbound,
)


def test_parse_dispatches_on_t():
    assert isinstance(parse_inbound({"t": "create-room", "username": "A"}), CreateRoom)
    assert isinstance(parse_inbound({"t": "join-room", "roomId": "X", "username": "A"}), JoinRoom)
    assert isinstance(parse_inbound({"t": "clear-canvas"}), ClearCanvas)
    msg = parse_inbound({"t": "draw", "x0": 1, "y0": 2, "x1": 3, "y1": 4, "lineWidth": 6, "tool": "eraser"})
    assert isinstance(msg, Draw)
    assert msg.line_width == 6.0


def test_join_room_reads_camel_case_room_id():
    msg = parse_inbound({"t": "join-room", "roomId": "abc123", "username": "Bob"})
    assert msg.room_id == "abc123"


def test_unknown_event_rejected():
    with pytest.raises(ValidationError):
        parse_inbound({"t": "cursor", "x": 1})


def test_stroke_is_immutable():
    s = StrokeEvent(x0=0, y0=0, x1=1, y1=1)
    with pytest.raises(ValidationError):
        s.x0 = 5


def test_draw_stroke_drops_event_tag_and_extras():
    msg = parse_inbound(
        {"t": "draw", "x0": 0, "y0": 0, "x1": 1, "y1": 1, "color": "#ff0000", "pressure": 0.4}
    )
    stroke = msg.stroke()
    assert type(stroke) is StrokeEvent
    assert stroke.wire() == {
        "x0": 0.0,
        "y0": 0.0,
        "x1": 1.0,
        "y1": 1.0,
        "color": "#ff0000",
        "lineWidth": 3.0,
        "tool": "pencil",
    }


def test_outbound_dump_uses_wire_names():
    assert dump(RoomCreated(room_id="ABC123", username="Alice")) == {
        "t": "room-created",
        "roomId": "ABC123",
        "username": "Alice",
    }
    assert dump(LoadDrawing(strokes=[])) == {"t": "load-drawing", "strokes": []}
