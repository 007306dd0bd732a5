from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from .config import Settings, get_settings
from .hub import Hub
from .router import RoomRouter

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, *, router: RoomRouter | None = None) -> FastAPI:
    settings = settings or get_settings()
    router = router or RoomRouter(settings)
    hub = Hub(router)

    app = FastAPI()
    app.state.settings = settings
    app.state.router = router
    app.state.hub = hub

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    @app.get("/rooms")
    def rooms():
        return {
            "rooms": settings.rooms,
            "displays": {r: len(router.members(r)) for r in sorted(settings.display_rooms())},
        }

    @app.websocket("/ws")
    async def ws(ws: WebSocket):
        await ws.accept()
        conn_id = uuid.uuid4().hex
        router.connect(conn_id)
        hub.add(conn_id, ws)

        try:
            while True:
                raw = await ws.receive_text()
                # routing is synchronous; delivery happens after state is settled
                await hub.deliver(router.handle(conn_id, raw))
        except WebSocketDisconnect:
            pass
        except Exception:
            logger.exception("ws %s failed", conn_id)
        finally:
            hub.discard(conn_id)
            await hub.deliver(router.disconnect(conn_id))

    return app


app = create_app()


def main() -> None:
    import uvicorn

    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run("dragon_relay.server.app:app", host=settings.host, port=settings.port)
