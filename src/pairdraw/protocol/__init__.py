from .constants import (
    T_CLEAR_CANVAS,
    T_CREATE_ROOM,
    T_DRAW,
    T_JOIN_ERROR,
    T_JOIN_ROOM,
    T_LOAD_DRAWING,
    T_ROOM_CREATED,
    T_USER_JOINED,
    T_USER_LEFT,
)
from .messages import StrokeEvent, parse_inbound

__all__ = [
    "T_CREATE_ROOM",
    "T_JOIN_ROOM",
    "T_DRAW",
    "T_CLEAR_CANVAS",
    "T_ROOM_CREATED",
    "T_JOIN_ERROR",
    "T_LOAD_DRAWING",
    "T_USER_JOINED",
    "T_USER_LEFT",
    "StrokeEvent",
    "parse_inbound",
]
