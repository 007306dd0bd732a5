from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

import websockets

from dragon_relay.protocol.constants import ROUTED_TOPICS, T_JOIN_ROOM

# Identity fields are stamped by the server; recorded copies are stripped before resending.
_SERVER_FIELDS = ("senderId", "color", "colorIndex")


def load_events(jsonl_path: Path) -> list[tuple[int | None, dict]]:
    """
    Read JSONL into (timestamp ms or None, message) pairs.

    Expected JSONL format:
      - record_jsonl.py output: {"ts": <ms>, "msg": {...}}
      - or raw messages per line: {...}
    """
    events: list[tuple[int | None, dict]] = []
    for line in jsonl_path.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        obj = json.loads(line)
        if isinstance(obj, dict) and "msg" in obj and isinstance(obj["msg"], dict):
            ts = obj.get("ts")
            events.append((int(ts) if isinstance(ts, (int, float)) else None, obj["msg"]))
        elif isinstance(obj, dict):
            events.append((None, obj))
    return events


def as_input(msg: dict) -> dict | None:
    """Turn a recorded (routed) message back into what an input client would send."""
    if msg.get("t") not in ROUTED_TOPICS:
        return None
    return {k: v for k, v in msg.items() if k not in _SERVER_FIELDS}


async def replay(
    ws_url: str,
    jsonl_path: Path,
    *,
    room: str | None = None,
    speed: float = 1.0,
    default_dt_ms: int = 0,
) -> None:
    """Join an input room, then replay previously-recorded cursor/drawing events into it."""
    events = load_events(jsonl_path)

    async with websockets.connect(ws_url, max_size=2**22) as ws:
        join = {"t": T_JOIN_ROOM} if room is None else {"t": T_JOIN_ROOM, "room": room}
        await ws.send(json.dumps(join, separators=(",", ":")))
        identity = json.loads(await asyncio.wait_for(ws.recv(), timeout=5.0))
        print(f"[replay] assigned color={identity.get('color')} index={identity.get('colorIndex')}")

        prev_ts: int | None = None
        for ts, msg in events:
            out = as_input(msg)
            if out is None:
                continue

            if ts is not None and prev_ts is not None:
                dt_ms = max(0, ts - prev_ts)
            else:
                dt_ms = default_dt_ms

            prev_ts = ts if ts is not None else prev_ts
            if dt_ms:
                await asyncio.sleep((dt_ms / 1000.0) / max(0.01, speed))

            await ws.send(json.dumps(out, ensure_ascii=False, separators=(",", ":")))


def main() -> None:
    ap = argparse.ArgumentParser(description="Replay cursor/drawing JSONL into the server websocket.")
    ap.add_argument("--ws", required=True, help="WebSocket URL, e.g. ws://127.0.0.1:8000/ws")
    ap.add_argument("--in", dest="inp", required=True, help="Input JSONL path")
    ap.add_argument("--room", default=None, help="Input room to join (server default if omitted)")
    ap.add_argument("--speed", type=float, default=1.0, help="Speed multiplier (2.0 = 2x faster)")
    ap.add_argument("--default-dt-ms", type=int, default=16, help="Delay between messages if no timestamps")
    args = ap.parse_args()

    asyncio.run(
        replay(
            args.ws,
            Path(args.inp),
            room=args.room,
            speed=args.speed,
            default_dt_ms=args.default_dt_ms,
        )
    )


if __name__ == "__main__":
    main()
