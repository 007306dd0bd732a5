from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Iterable

from fastapi import WebSocket

from .router import Envelope, RoomRouter

logger = logging.getLogger(__name__)


@dataclass
class Hub:
    """Websocket plumbing: connection id -> socket, and envelope delivery."""

    router: RoomRouter
    sockets: dict[str, WebSocket] = field(default_factory=dict)

    def add(self, conn_id: str, ws: WebSocket) -> None:
        self.sockets[conn_id] = ws

    def discard(self, conn_id: str) -> None:
        self.sockets.pop(conn_id, None)

    async def deliver(self, envelopes: Iterable[Envelope]) -> None:
        for env in envelopes:
            if env.to_client is not None:
                await self._send(env.message, [env.to_client])
            if env.to_room is not None:
                await self._send(env.message, sorted(self.router.members(env.to_room)))

    async def _send(self, msg: dict, conn_ids: list[str]) -> None:
        dead: list[str] = []
        data = json.dumps(msg, separators=(",", ":"), ensure_ascii=False)
        for cid in conn_ids:
            ws = self.sockets.get(cid)
            if ws is None:
                continue
            try:
                await ws.send_text(data)
            except Exception:
                dead.append(cid)
        for cid in dead:
            logger.info("pruning dead socket %s", cid)
            self.sockets.pop(cid, None)
