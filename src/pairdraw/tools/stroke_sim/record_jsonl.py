from __future__ import annotations

import argparse
import asyncio
import json
import time
from pathlib import Path

import websockets

from pairdraw.protocol.constants import T_CREATE_ROOM, T_JOIN_ROOM, T_ROOM_CREATED


def _now_ms() -> int:
    return int(time.time() * 1000)


def join_message(room: str | None, username: str) -> dict:
    """First message to send: join `room`, or create a fresh one when None."""
    if room:
        return {"t": T_JOIN_ROOM, "roomId": room, "username": username}
    return {"t": T_CREATE_ROOM, "username": username}


async def record(
    ws_url: str,
    out_path: Path,
    *,
    room: str | None,
    username: str,
    echo: bool,
) -> None:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("a", encoding="utf-8") as f:
        async with websockets.connect(ws_url, max_size=2**22) as ws:
            await ws.send(json.dumps(join_message(room, username)))
            while True:
                raw = await ws.recv()
                if isinstance(raw, bytes):
                    raw = raw.decode("utf-8", errors="replace")
                msg = json.loads(raw)
                t = msg.get("t") if isinstance(msg, dict) else None
                if t == T_ROOM_CREATED:
                    print(f"[record] created room {msg.get('roomId')}")
                if echo:
                    print(f"[record] t={t} msg={msg}")
                f.write(json.dumps({"ts": _now_ms(), "msg": msg}, ensure_ascii=False) + "\n")
                f.flush()


def main() -> None:
    ap = argparse.ArgumentParser(description="Join a room and record its WS traffic to a JSONL file.")
    ap.add_argument("--ws", required=True, help="WebSocket URL, e.g. ws://127.0.0.1:3000/ws")
    ap.add_argument("--room", default=None, help="Room id to join; creates a new room if omitted")
    ap.add_argument("--username", default="recorder", help="Display name inside the room")
    ap.add_argument("--out", required=True, help="Output JSONL path")
    ap.add_argument("--print", action="store_true", help="Print received messages to stdout")
    args = ap.parse_args()

    asyncio.run(
        record(args.ws, Path(args.out), room=args.room, username=args.username, echo=args.print)
    )


if __name__ == "__main__":
    main()
