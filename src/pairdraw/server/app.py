from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import uuid
from collections.abc import AsyncIterator

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from .config import Settings, get_settings
from .connections import ConnectionHub
from .reaper import reaper_loop
from .relay import Relay
from .rooms import RoomStore
from .sessions import SessionRegistry

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        store = RoomStore(id_length=settings.room_id_length)
        app.state.store = store
        app.state.relay = Relay(store, SessionRegistry())
        app.state.hub = ConnectionHub()
        reaper = asyncio.create_task(
            reaper_loop(
                store,
                interval_s=settings.reaper_interval_s,
                max_age_s=settings.reaper_max_age_s,
            )
        )
        try:
            yield
        finally:
            reaper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reaper
            app.state.hub.close_all()
            app.state.relay.sessions.clear()
            store.clear()

    app = FastAPI(lifespan=lifespan)

    @app.get("/healthz")
    def healthz():
        return {"ok": True, "rooms": len(app.state.store), "connections": len(app.state.hub)}

    @app.websocket("/ws")
    async def ws(ws: WebSocket):
        await ws.accept()
        relay: Relay = ws.app.state.relay
        hub: ConnectionHub = ws.app.state.hub

        conn_id = uuid.uuid4().hex
        hub.register(conn_id, ws)
        relay.connect(conn_id)
        logger.info("connected %s from %s", conn_id, getattr(ws.client, "host", None))

        try:
            while True:
                frame = await ws.receive()
                if frame["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(frame.get("code", 1000))
                raw = frame.get("text")
                if raw is None and frame.get("bytes") is not None:
                    raw = frame["bytes"].decode("utf-8", errors="replace")
                try:
                    msg = json.loads(raw)
                except (TypeError, json.JSONDecodeError):
                    logger.warning("dropping non-JSON frame from %s", conn_id)
                    continue
                if settings.debug_log_msgs:
                    t = msg.get("t") if isinstance(msg, dict) else None
                    logger.debug("[ws:%s] in t=%s", conn_id, t)
                try:
                    hub.deliver(relay.handle(conn_id, msg))
                except Exception:
                    logger.exception("unhandled error processing message from %s", conn_id)
        except WebSocketDisconnect:
            pass
        finally:
            logger.info("disconnected %s", conn_id)
            hub.deliver(relay.disconnect(conn_id))
            hub.unregister(conn_id)

    return app


app = create_app()
