from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

import websockets

from pairdraw.protocol.constants import T_CLEAR_CANVAS, T_DRAW, T_JOIN_ERROR, T_LOAD_DRAWING

from .record_jsonl import join_message

REPLAYABLE = (T_DRAW, T_CLEAR_CANVAS)


def load_events(jsonl_path: Path) -> list[tuple[int | None, dict]]:
    """
    Read replayable events from JSONL.

    Expected JSONL format:
      - record_jsonl.py output: {"ts": <ms>, "msg": {...}}
      - or raw messages per line: {...}
    Only `draw` and `clear-canvas` messages are kept.
    """
    events: list[tuple[int | None, dict]] = []
    for line in jsonl_path.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        obj = json.loads(line)
        if isinstance(obj, dict) and isinstance(obj.get("msg"), dict):
            ts = obj.get("ts")
            ts_ms, msg = (int(ts) if isinstance(ts, (int, float)) else None), obj["msg"]
        elif isinstance(obj, dict):
            ts_ms, msg = None, obj
        else:
            continue
        if msg.get("t") in REPLAYABLE:
            events.append((ts_ms, msg))
    return events


def delays_ms(events: list[tuple[int | None, dict]], default_dt_ms: int = 0) -> list[int]:
    """Gap to wait before each event, from recorded timestamps where present."""
    out: list[int] = []
    prev_ts: int | None = None
    for ts, _msg in events:
        if ts is not None and prev_ts is not None:
            out.append(max(0, ts - prev_ts))
        else:
            out.append(default_dt_ms)
        prev_ts = ts if ts is not None else prev_ts
    return out


async def replay(
    ws_url: str,
    jsonl_path: Path,
    *,
    room: str,
    username: str,
    speed: float = 1.0,
    default_dt_ms: int = 0,
) -> None:
    """Join `room` as `username` and re-send recorded strokes into it."""
    events = load_events(jsonl_path)
    waits = delays_ms(events, default_dt_ms)

    async with websockets.connect(ws_url, max_size=2**22) as ws:
        await ws.send(json.dumps(join_message(room, username)))
        # Server answers a join with either join-error or load-drawing first.
        reply = json.loads(await ws.recv())
        if reply.get("t") == T_JOIN_ERROR:
            raise SystemExit(f"join failed: {reply.get('message')}")
        if reply.get("t") != T_LOAD_DRAWING:
            raise SystemExit(f"unexpected reply to join: {reply}")

        for dt_ms, (_ts, msg) in zip(waits, events):
            if dt_ms:
                await asyncio.sleep((dt_ms / 1000.0) / max(0.01, speed))
            await ws.send(json.dumps(msg, ensure_ascii=False, separators=(",", ":")))


def main() -> None:
    ap = argparse.ArgumentParser(description="Replay recorded strokes into a room.")
    ap.add_argument("--ws", required=True, help="WebSocket URL, e.g. ws://127.0.0.1:3000/ws")
    ap.add_argument("--room", required=True, help="Room id to join")
    ap.add_argument("--username", default="replay", help="Display name inside the room")
    ap.add_argument("--in", dest="inp", required=True, help="Input JSONL path")
    ap.add_argument("--speed", type=float, default=1.0, help="Speed multiplier (2.0 = 2x faster)")
    ap.add_argument("--default-dt-ms", type=int, default=0, help="Delay between messages if no timestamps")
    args = ap.parse_args()

    asyncio.run(
        replay(
            args.ws,
            Path(args.inp),
            room=args.room,
            username=args.username,
            speed=args.speed,
            default_dt_ms=args.default_dt_ms,
        )
    )


if __name__ == "__main__":
    main()
