from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from pairdraw.protocol.constants import (
    ERR_ROOM_FULL,
    ERR_ROOM_NOT_FOUND,
    ERR_USERNAME_TAKEN,
    MAX_MEMBERS,
    ROOM_ID_ALPHABET,
    ROOM_ID_LENGTH,
)
from pairdraw.protocol.messages import StrokeEvent

logger = logging.getLogger(__name__)

_MAX_ID_ATTEMPTS = 32


class RoomError(Exception):
    """Recoverable failure reported back to the client as `join-error`."""

    message = "Room error"

    def __init__(self, room_id: str, message: str | None = None):
        self.room_id = room_id
        if message is not None:
            self.message = message
        super().__init__(f"{self.message} ({room_id})")


class RoomNotFound(RoomError):
    message = ERR_ROOM_NOT_FOUND


class RoomFull(RoomError):
    message = ERR_ROOM_FULL


class UsernameTaken(RoomError):
    message = ERR_USERNAME_TAKEN


class RoomStoreError(Exception):
    """Internal fault; the triggering event is dropped."""


@dataclass
class Member:
    connection_id: str
    username: str


@dataclass
class Room:
    id: str
    created_at: float
    members: list[Member] = field(default_factory=list)  # join order
    strokes: list[StrokeEvent] = field(default_factory=list)  # draw order

    def is_full(self) -> bool:
        return len(self.members) >= MAX_MEMBERS

    def has_username(self, username: str) -> bool:
        return any(m.username == username for m in self.members)

    def member(self, connection_id: str) -> Member | None:
        for m in self.members:
            if m.connection_id == connection_id:
                return m
        return None

    def connection_ids(self) -> tuple[str, ...]:
        return tuple(m.connection_id for m in self.members)


def normalize_room_id(room_id: str) -> str:
    return room_id.strip().upper()


class RoomStore:
    """
    In-memory registry of rooms keyed by normalized room id.

    Every method is a plain synchronous map operation; callers running on a
    single event loop get per-call atomicity for free.
    """

    def __init__(
        self,
        *,
        id_length: int = ROOM_ID_LENGTH,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._rooms: dict[str, Room] = {}
        self._id_length = id_length
        self._clock = clock

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return isinstance(room_id, str) and normalize_room_id(room_id) in self._rooms

    def room_ids(self) -> list[str]:
        return list(self._rooms)

    def _new_id(self) -> str:
        for _ in range(_MAX_ID_ATTEMPTS):
            rid = "".join(secrets.choice(ROOM_ID_ALPHABET) for _ in range(self._id_length))
            if rid not in self._rooms:
                return rid
        raise RoomStoreError(f"could not allocate a free room id after {_MAX_ID_ATTEMPTS} attempts")

    def create_room(self) -> tuple[str, Room]:
        rid = self._new_id()
        room = Room(id=rid, created_at=self._clock())
        self._rooms[rid] = room
        return rid, room

    def get_room(self, room_id: str) -> Room:
        rid = normalize_room_id(room_id)
        room = self._rooms.get(rid)
        if room is None:
            raise RoomNotFound(rid)
        return room

    def check_join(self, room_id: str, username: str) -> Room:
        """Raise the error `add_member` would raise, without mutating anything."""
        room = self.get_room(room_id)
        if room.is_full():
            raise RoomFull(room.id)
        if room.has_username(username):
            raise UsernameTaken(room.id)
        return room

    def add_member(self, room_id: str, connection_id: str, username: str) -> Room:
        room = self.check_join(room_id, username)
        if room.member(connection_id) is not None:
            raise RoomStoreError(f"connection {connection_id} already in room {room.id}")
        room.members.append(Member(connection_id=connection_id, username=username))
        return room

    def remove_member(self, room_id: str, connection_id: str) -> Room | None:
        """Drop a member; returns None if that emptied (and deleted) the room."""
        room = self.get_room(room_id)
        room.members = [m for m in room.members if m.connection_id != connection_id]
        if not room.members:
            self.delete_room(room.id)
            return None
        return room

    def delete_room(self, room_id: str) -> bool:
        return self._rooms.pop(normalize_room_id(room_id), None) is not None

    def append_stroke(self, room_id: str, stroke: StrokeEvent) -> None:
        self.get_room(room_id).strokes.append(stroke)

    def clear_strokes(self, room_id: str) -> None:
        self.get_room(room_id).strokes.clear()

    def get_strokes(self, room_id: str) -> list[StrokeEvent]:
        return list(self.get_room(room_id).strokes)

    def reap(self, max_age_s: float, now: float | None = None) -> list[str]:
        """Delete empty rooms older than `max_age_s`; returns the evicted ids."""
        if now is None:
            now = self._clock()
        stale = [
            rid
            for rid, room in self._rooms.items()
            if not room.members and (now - room.created_at) > max_age_s
        ]
        for rid in stale:
            del self._rooms[rid]
        return stale

    def clear(self) -> None:
        if self._rooms:
            logger.info("dropping %d room(s)", len(self._rooms))
        self._rooms.clear()
