from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from fastapi import WebSocket

from .relay import Outbound

logger = logging.getLogger(__name__)

# Messages queued for a client that is not reading before it is dropped.
OUTBOX_MAXSIZE = 1024


@dataclass
class Connection:
    id: str
    ws: WebSocket
    outbox: asyncio.Queue[str] = field(default_factory=lambda: asyncio.Queue(OUTBOX_MAXSIZE))
    writer: asyncio.Task[None] | None = None
    closer: asyncio.Task[None] | None = None
    dead: bool = False


class ConnectionHub:
    """
    Live websockets keyed by connection id.

    `deliver` only enqueues, so it can be called straight after a relay
    handler and each recipient sees messages in handler order. One writer task
    per connection drains its outbox onto the socket.
    """

    def __init__(self, outbox_size: int = OUTBOX_MAXSIZE) -> None:
        self._conns: dict[str, Connection] = {}
        self._outbox_size = outbox_size

    def __len__(self) -> int:
        return len(self._conns)

    def __contains__(self, conn_id: object) -> bool:
        return conn_id in self._conns

    def register(self, conn_id: str, ws: WebSocket) -> Connection:
        conn = Connection(id=conn_id, ws=ws, outbox=asyncio.Queue(self._outbox_size))
        conn.writer = asyncio.create_task(self._write(conn))
        self._conns[conn_id] = conn
        return conn

    def unregister(self, conn_id: str) -> None:
        """Forget a connection; anything still queued for it is discarded."""
        conn = self._conns.pop(conn_id, None)
        if conn is not None and conn.writer is not None:
            conn.writer.cancel()

    def deliver(self, outbound: Iterable[Outbound]) -> None:
        for ob in outbound:
            data = json.dumps(ob.message, separators=(",", ":"), ensure_ascii=False)
            for conn_id in ob.to:
                conn = self._conns.get(conn_id)
                if conn is None or conn.dead:
                    continue
                try:
                    conn.outbox.put_nowait(data)
                except asyncio.QueueFull:
                    logger.warning("outbox full for %s; dropping slow client", conn_id)
                    self._drop(conn)

    def close_all(self) -> None:
        for conn_id in list(self._conns):
            self.unregister(conn_id)

    def _drop(self, conn: Connection) -> None:
        conn.dead = True
        if conn.writer is not None:
            conn.writer.cancel()
        conn.closer = asyncio.create_task(self._close(conn))

    async def _close(self, conn: Connection) -> None:
        # Closing ends the receive loop, which then runs the normal disconnect.
        try:
            await conn.ws.close(code=1008)
        except Exception:
            logger.debug("close of %s failed", conn.id, exc_info=True)

    async def _write(self, conn: Connection) -> None:
        while True:
            data = await conn.outbox.get()
            try:
                await conn.ws.send_text(data)
            except Exception:
                # Receive loop notices the closed socket and runs the disconnect.
                logger.debug("send to %s failed; marking dead", conn.id, exc_info=True)
                conn.dead = True
                return
