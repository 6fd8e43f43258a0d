from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from pairdraw.protocol.constants import (
    ERR_ALREADY_IN_ROOM,
    ERR_JOIN_FIELDS_REQUIRED,
    ERR_USERNAME_REQUIRED,
    T_CLEAR_CANVAS,
    T_CREATE_ROOM,
    T_DRAW,
    T_JOIN_ROOM,
)
from pairdraw.protocol.messages import (
    ClearCanvas,
    CreateRoom,
    Draw,
    JoinError,
    JoinRoom,
    LoadDrawing,
    Member,
    OutboundMsg,
    RoomCreated,
    UserJoined,
    UserLeft,
    dump,
    parse_inbound,
)

from .rooms import Room, RoomError, RoomNotFound, RoomStore, RoomStoreError, normalize_room_id
from .sessions import SessionRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outbound:
    """A message addressed to a set of connection ids."""

    to: tuple[str, ...]
    message: dict[str, Any]


def _members(room: Room) -> list[Member]:
    return [Member(id=m.connection_id, username=m.username) for m in room.members]


class Relay:
    """
    Event handlers for the room protocol.

    Each handler takes the sender's connection id and a validated payload,
    mutates the store, and returns the messages to deliver. Nothing here does
    I/O, so a handler runs to completion before the next one starts.
    """

    def __init__(self, store: RoomStore, sessions: SessionRegistry) -> None:
        self.store = store
        self.sessions = sessions
        self._handlers: dict[str, Callable[[str, Any], list[Outbound]]] = {
            T_CREATE_ROOM: self.create_room,
            T_JOIN_ROOM: self.join_room,
            T_DRAW: self.draw,
            T_CLEAR_CANVAS: self.clear_canvas,
        }

    def connect(self, conn_id: str) -> None:
        self.sessions.open(conn_id)

    def handle(self, conn_id: str, raw: Any) -> list[Outbound]:
        """Validate and dispatch one decoded inbound message."""
        try:
            msg = parse_inbound(raw)
        except ValidationError as e:
            t = raw.get("t") if isinstance(raw, dict) else None
            logger.warning("dropping malformed %r from %s: %s", t, conn_id, e.errors(include_url=False))
            return []

        try:
            return self._handlers[msg.t](conn_id, msg)
        except RoomStoreError:
            logger.exception("store fault handling %s from %s; event dropped", msg.t, conn_id)
            return []

    # -- handlers ---------------------------------------------------------

    def create_room(self, conn_id: str, msg: CreateRoom) -> list[Outbound]:
        username = msg.username.strip()
        if not username:
            return [_to(conn_id, JoinError(message=ERR_USERNAME_REQUIRED))]

        rid, _room = self.store.create_room()
        out = self._leave_current(conn_id)
        self.store.add_member(rid, conn_id, username)
        self.sessions.bind(conn_id, rid, username)
        logger.info("room %s created by %s", rid, username)

        out.append(_to(conn_id, RoomCreated(room_id=rid, username=username)))
        return out

    def join_room(self, conn_id: str, msg: JoinRoom) -> list[Outbound]:
        rid = normalize_room_id(msg.room_id)
        username = msg.username.strip()
        if not rid or not username:
            return [_to(conn_id, JoinError(message=ERR_JOIN_FIELDS_REQUIRED))]

        session = self.sessions.get(conn_id)
        if session is not None and session.room_id == rid:
            return [_to(conn_id, JoinError(message=ERR_ALREADY_IN_ROOM))]

        # Validate before leaving any current room: a failed join mutates nothing.
        try:
            self.store.check_join(rid, username)
        except RoomError as e:
            logger.info("%s could not join %s: %s", username, rid, e.message)
            return [_to(conn_id, JoinError(message=e.message))]

        out = self._leave_current(conn_id)
        room = self.store.add_member(rid, conn_id, username)
        self.sessions.bind(conn_id, rid, username)
        logger.info("%s joined room %s", username, rid)

        out.append(_to(conn_id, LoadDrawing(strokes=self.store.get_strokes(rid))))
        out.append(
            _to(
                room.connection_ids(),
                UserJoined(members=_members(room), message=f"{username} joined the room"),
            )
        )
        return out

    def draw(self, conn_id: str, msg: Draw) -> list[Outbound]:
        room = self._bound_room(conn_id)
        if room is None:
            return []
        stroke = msg.stroke()
        self.store.append_stroke(room.id, stroke)
        peers = tuple(cid for cid in room.connection_ids() if cid != conn_id)
        if not peers:
            return []
        return [Outbound(to=peers, message={"t": T_DRAW, **stroke.wire()})]

    def clear_canvas(self, conn_id: str, msg: ClearCanvas) -> list[Outbound]:
        room = self._bound_room(conn_id)
        if room is None:
            return []
        self.store.clear_strokes(room.id)
        return [_to(room.connection_ids(), ClearCanvas(t=T_CLEAR_CANVAS))]

    def disconnect(self, conn_id: str) -> list[Outbound]:
        out = self._leave_current(conn_id)
        self.sessions.close(conn_id)
        return out

    # -- helpers ----------------------------------------------------------

    def _bound_room(self, conn_id: str) -> Room | None:
        session = self.sessions.get(conn_id)
        if session is None or session.room_id is None:
            logger.debug("ignoring event from unbound connection %s", conn_id)
            return None
        try:
            return self.store.get_room(session.room_id)
        except RoomNotFound:
            logger.debug("connection %s bound to vanished room %s", conn_id, session.room_id)
            return None

    def _leave_current(self, conn_id: str) -> list[Outbound]:
        session = self.sessions.get(conn_id)
        if session is None or session.room_id is None:
            return []
        rid, username = session.room_id, session.username
        self.sessions.unbind(conn_id)
        try:
            room = self.store.remove_member(rid, conn_id)
        except RoomNotFound:
            return []
        if room is None:
            logger.info("room %s deleted (empty)", rid)
            return []
        logger.info("%s left room %s", username, rid)
        return [
            _to(
                room.connection_ids(),
                UserLeft(members=_members(room), message=f"{username} left the room"),
            )
        ]


def _to(to: str | tuple[str, ...], msg: OutboundMsg) -> Outbound:
    if isinstance(to, str):
        to = (to,)
    return Outbound(to=to, message=dump(msg))
