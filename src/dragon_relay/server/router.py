from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass
from typing import Callable

from pydantic import ValidationError

from dragon_relay.protocol.messages import (
    INBOUND,
    AssignedIdentity,
    Clear,
    ClientDisconnected,
    CursorPosition,
    Drawing,
    JoinDisplayRoom,
    JoinRoom,
    RoutedCursorPosition,
    RoutedDrawing,
)

from .config import Settings
from .sessions import ClientRegistry, ClientSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Envelope:
    """One outgoing frame addressed to a single client or a whole display room."""

    message: dict
    to_client: str | None = None
    to_room: str | None = None


class RoomRouter:
    """
    Single-threaded event dispatcher: one synchronous handler per topic.

    Each handler reads and mutates the registry and returns the envelopes to
    send, with no suspension point in between. Callers deliver the envelopes
    afterwards.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        registry: ClientRegistry | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings
        self.registry = registry or ClientRegistry()
        self.rng = rng or random.Random()
        self._handlers: dict[type, Callable[[str, object], list[Envelope]]] = {
            JoinRoom: self._on_join_room,
            JoinDisplayRoom: self._on_join_display_room,
            CursorPosition: self._on_cursor_position,
            Drawing: self._on_drawing,
            Clear: self._on_clear,
        }

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    def connect(self, conn_id: str) -> None:
        self.registry.connect(conn_id)
        logger.info("connected: %s", conn_id)

    def disconnect(self, conn_id: str) -> list[Envelope]:
        """Delete the connection and, for input clients, notify the rooms it fed."""
        conn = self.registry.remove(conn_id)
        if conn is None:
            return []
        logger.info("disconnected: %s", conn_id)
        if conn.session is None:
            return []
        return self._removal(conn.session)

    # ------------------------------------------------------------------
    # dispatch
    # ------------------------------------------------------------------

    def handle(self, conn_id: str, raw: str | bytes | dict) -> list[Envelope]:
        if self.registry.get(conn_id) is None:
            logger.debug("drop: message from unknown connection %s", conn_id)
            return []
        try:
            obj = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
            msg = INBOUND.validate_python(obj)
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
            logger.debug("drop: malformed message from %s: %s", conn_id, e)
            return []
        if self.settings.debug_log_msgs:
            logger.info("[ws:%s] in t=%s", conn_id, msg.t)
        return self._handlers[type(msg)](conn_id, msg)

    def display_rooms_for(self, room: str) -> list[str]:
        return list(self.settings.rooms.get(room, ()))

    def members(self, display_room: str) -> set[str]:
        return self.registry.members(display_room)

    # ------------------------------------------------------------------
    # handlers
    # ------------------------------------------------------------------

    def _on_join_room(self, conn_id: str, msg: JoinRoom) -> list[Envelope]:
        room = msg.room or self.settings.default_room
        if room not in self.settings.rooms:
            logger.info("drop: %s asked for unknown room %r", conn_id, room)
            return []

        palette = self.settings.palette
        index = self.rng.randrange(len(palette))
        session = ClientSession(conn_id=conn_id, room=room, color=palette[index], color_index=index)

        out: list[Envelope] = []
        previous = self.registry.assign(conn_id, session)
        if previous is not None:
            out.extend(self._removal(previous))

        identity = AssignedIdentity(
            color=session.color,
            color_index=session.color_index,
            canvas_config=self.settings.canvas.model_dump(),
            drawing_config=self.settings.drawing.model_dump(),
            ui_config=self.settings.ui.model_dump(),
        )
        out.append(Envelope(identity.wire(), to_client=conn_id))
        logger.info("joined: %s room=%s color=%s index=%d", conn_id, room, session.color, index)
        return out

    def _on_join_display_room(self, conn_id: str, msg: JoinDisplayRoom) -> list[Envelope]:
        room = msg.room or self.settings.default_display_room
        if room not in self.settings.display_rooms():
            logger.info("drop: %s asked for unknown display room %r", conn_id, room)
            return []
        previous = self.registry.subscribe_display(conn_id, room)
        logger.info("display joined: %s room=%s", conn_id, room)
        return self._removal(previous) if previous is not None else []

    def _on_cursor_position(self, conn_id: str, msg: CursorPosition) -> list[Envelope]:
        session = self._sender(conn_id, msg.t)
        if session is None:
            return []
        routed = RoutedCursorPosition(
            sender_id=conn_id,
            color=session.color,
            color_index=session.color_index,
            x=msg.x,
            y=msg.y,
        )
        return self._fan_out(session, routed.wire())

    def _on_drawing(self, conn_id: str, msg: Drawing) -> list[Envelope]:
        session = self._sender(conn_id, msg.t)
        if session is None:
            return []
        routed = RoutedDrawing(
            sender_id=conn_id,
            color=session.color,
            color_index=session.color_index,
            x1=msg.x1,
            y1=msg.y1,
            x2=msg.x2,
            y2=msg.y2,
            stroke_weight=msg.stroke_weight or self.settings.drawing.stroke_weight,
        )
        return self._fan_out(session, routed.wire())

    def _on_clear(self, conn_id: str, msg: Clear) -> list[Envelope]:
        session = self._sender(conn_id, msg.t)
        if session is None:
            return []
        return self._fan_out(session, Clear(t="clear").wire())

    # ------------------------------------------------------------------

    def _sender(self, conn_id: str, topic: str) -> ClientSession | None:
        session = self.registry.session(conn_id)
        if session is None:
            logger.debug("drop: %s from %s before join-room", topic, conn_id)
        return session

    def _fan_out(self, session: ClientSession, message: dict) -> list[Envelope]:
        return [Envelope(message, to_room=r) for r in self.display_rooms_for(session.room)]

    def _removal(self, session: ClientSession) -> list[Envelope]:
        notice = ClientDisconnected(sender_id=session.conn_id).wire()
        return self._fan_out(session, notice)
