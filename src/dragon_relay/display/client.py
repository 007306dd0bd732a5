from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
from pathlib import Path

import websockets

from dragon_relay.protocol.constants import T_JOIN_DISPLAY_ROOM
from dragon_relay.server.config import Settings, get_settings

from .loop import CreatureRoster, PresentationLoop
from .rendering import PillowRenderer
from .sprites import load_sheets

logger = logging.getLogger(__name__)


def build_loop(settings: Settings) -> PresentationLoop:
    canvas = settings.canvas
    renderer = PillowRenderer(canvas.display_width, canvas.display_height, canvas.background_color)
    sheets = load_sheets(settings.assets_dir, settings.sprite_cols, settings.sprite_rows)
    roster = CreatureRoster(settings.creature, sheets=sheets)
    return PresentationLoop(
        roster,
        renderer,
        show_client_ids=settings.ui.show_client_ids,
        client_id_length=settings.ui.client_id_length,
    )


async def _pump(ws, loop: PresentationLoop) -> None:
    async for raw in ws:
        loop.handle(raw)


async def _render(loop: PresentationLoop, fps: float, snapshot: Path | None, every: int) -> None:
    period = 1.0 / fps
    n = 0
    while True:
        loop.frame()
        if snapshot is not None and every > 0 and n % every == 0:
            loop.renderer.save(snapshot)
        n += 1
        await asyncio.sleep(period)


async def run_display(
    ws_url: str,
    room: str,
    loop: PresentationLoop,
    *,
    fps: float = 60.0,
    snapshot: Path | None = None,
    snapshot_every: int = 0,
) -> None:
    """Join `room` and render until the connection drops."""
    async with websockets.connect(ws_url, max_size=2**22) as ws:
        await ws.send(json.dumps({"t": T_JOIN_DISPLAY_ROOM, "room": room}, separators=(",", ":")))
        logger.info("connected to %s, joined display room %s", ws_url, room)
        render = asyncio.create_task(_render(loop, fps, snapshot, snapshot_every))
        try:
            await _pump(ws, loop)
        finally:
            render.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await render


async def run_forever(ws_url: str, room: str, loop: PresentationLoop, **kwargs) -> None:
    while True:
        try:
            await run_display(ws_url, room, loop, **kwargs)
        except (OSError, websockets.ConnectionClosed) as e:
            logger.warning("display connection lost: %s", e)
        # creatures belong to the old connection's view of the room
        loop.roster.clear()
        await asyncio.sleep(0.5)


def main() -> None:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Headless display client: renders creatures for a display room.")
    ap.add_argument("--ws", default=settings.server_ws_url, help="WebSocket URL, e.g. ws://127.0.0.1:8000/ws")
    ap.add_argument("--room", default=settings.default_display_room, help="Display room to join")
    ap.add_argument("--fps", type=float, default=settings.display_fps, help="Render loop frequency")
    ap.add_argument("--snapshot", default=None, help="Write the current frame to this PNG path")
    ap.add_argument("--snapshot-every", type=int, default=30, help="Frames between snapshots")
    args = ap.parse_args()

    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    loop = build_loop(settings)
    asyncio.run(
        run_forever(
            args.ws,
            args.room,
            loop,
            fps=args.fps,
            snapshot=Path(args.snapshot) if args.snapshot else None,
            snapshot_every=args.snapshot_every,
        )
    )


if __name__ == "__main__":
    main()
