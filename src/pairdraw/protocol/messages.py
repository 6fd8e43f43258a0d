from __future__ import annotations

from typing import Annotated, Any, Literal, TypeAlias, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter

# Stroke coordinates are canvas pixels as the client sees them; the server
# never interprets them, only stores and relays.
Tool: TypeAlias = Literal["pencil", "eraser"]


def _as_text(v: Any) -> Any:
    # Scalars become text so they reach the "required" / "not found" checks;
    # anything else reads as missing.
    if v is None or isinstance(v, bool):
        return ""
    if isinstance(v, (int, float)):
        return str(v)
    return v if isinstance(v, str) else ""


Text: TypeAlias = Annotated[str, BeforeValidator(_as_text)]


class StrokeEvent(BaseModel):
    """One line segment. Replay order matters for the eraser (destination-out)."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, extra="ignore", allow_inf_nan=False
    )

    x0: float
    y0: float
    x1: float
    y1: float
    color: str = "#000000"
    line_width: Annotated[float, Field(alias="lineWidth", gt=0)] = 3.0
    tool: Tool = "pencil"

    def wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class Member(BaseModel):
    id: str
    username: str


# client -> server


class CreateRoom(BaseModel):
    t: Literal["create-room"]
    username: Text = ""


class JoinRoom(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    t: Literal["join-room"]
    room_id: Annotated[Text, Field(alias="roomId")] = ""
    username: Text = ""


class Draw(StrokeEvent):
    t: Literal["draw"]

    def stroke(self) -> StrokeEvent:
        return StrokeEvent.model_validate(self.model_dump(exclude={"t"}))


class ClearCanvas(BaseModel):
    t: Literal["clear-canvas"]


# server -> client


class RoomCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    t: Literal["room-created"] = "room-created"
    room_id: Annotated[str, Field(alias="roomId")]
    username: str


class JoinError(BaseModel):
    t: Literal["join-error"] = "join-error"
    message: str


class LoadDrawing(BaseModel):
    t: Literal["load-drawing"] = "load-drawing"
    strokes: list[StrokeEvent]


class UserJoined(BaseModel):
    t: Literal["user-joined"] = "user-joined"
    members: list[Member]
    message: str


class UserLeft(BaseModel):
    t: Literal["user-left"] = "user-left"
    members: list[Member]
    message: str


InboundMsg: TypeAlias = Annotated[
    Union[CreateRoom, JoinRoom, Draw, ClearCanvas],
    Field(discriminator="t"),
]
OutboundMsg: TypeAlias = Union[
    RoomCreated,
    JoinError,
    LoadDrawing,
    Draw,
    ClearCanvas,
    UserJoined,
    UserLeft,
]

_inbound = TypeAdapter(InboundMsg)


def parse_inbound(raw: Any) -> CreateRoom | JoinRoom | Draw | ClearCanvas:
    """Validate a decoded JSON object; raises pydantic.ValidationError."""
    return _inbound.validate_python(raw)


def dump(msg: OutboundMsg) -> dict[str, Any]:
    return msg.model_dump(by_alias=True)
