from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SessionBinding:
    connection_id: str
    room_id: str | None = None
    username: str | None = None

    @property
    def bound(self) -> bool:
        return self.room_id is not None


class SessionRegistry:
    """Per-connection room/username binding, trusted for the connection's lifetime."""

    def __init__(self) -> None:
        self._sessions: dict[str, SessionBinding] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def open(self, connection_id: str) -> SessionBinding:
        return self._sessions.setdefault(connection_id, SessionBinding(connection_id))

    def get(self, connection_id: str) -> SessionBinding | None:
        return self._sessions.get(connection_id)

    def bind(self, connection_id: str, room_id: str, username: str) -> SessionBinding:
        session = self.open(connection_id)
        session.room_id = room_id
        session.username = username
        return session

    def unbind(self, connection_id: str) -> None:
        session = self._sessions.get(connection_id)
        if session is not None:
            session.room_id = None
            session.username = None

    def close(self, connection_id: str) -> SessionBinding | None:
        return self._sessions.pop(connection_id, None)

    def clear(self) -> None:
        self._sessions.clear()
