from __future__ import annotations

import json
import logging
import time
from typing import Callable, Iterator, Sequence

from pydantic import ValidationError

from dragon_relay.motion.creature import Creature, CreatureConfig
from dragon_relay.protocol.coords import denormalize
from dragon_relay.protocol.messages import (
    DISPLAY,
    Clear,
    ClientDisconnected,
    RoutedCursorPosition,
    RoutedDrawing,
)

from .rendering import Renderer
from .sprites import SpriteAnimation, SpriteSheet

logger = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.monotonic() * 1000.0


class CreatureRoster:
    """All creatures on one display, keyed by sender id. Created lazily, removed idempotently."""

    def __init__(
        self,
        config: CreatureConfig,
        *,
        sheets: Sequence[SpriteSheet] = (),
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.config = config
        self.sheets = list(sheets)
        self.clock = clock or _now_ms
        self.creatures: dict[str, Creature] = {}

    def __len__(self) -> int:
        return len(self.creatures)

    def __contains__(self, sender_id: object) -> bool:
        return sender_id in self.creatures

    def __iter__(self) -> Iterator[Creature]:
        return iter(list(self.creatures.values()))

    def get(self, sender_id: str) -> Creature | None:
        return self.creatures.get(sender_id)

    def get_or_create(self, sender_id: str, color: str, color_index: int) -> Creature:
        creature = self.creatures.get(sender_id)
        if creature is None:
            creature = Creature(
                sender_id,
                self.config,
                color=color,
                color_index=color_index,
                clock=self.clock,
            )
            creature.animation = self._pick_animation(color_index)
            self.creatures[sender_id] = creature
            logger.info("created creature for %s (color index %d)", sender_id, color_index)
        return creature

    def remove(self, sender_id: str) -> bool:
        creature = self.creatures.pop(sender_id, None)
        if creature is None:
            return False
        creature.deactivate()
        logger.info("removed creature for %s", sender_id)
        return True

    def prune(self, now: float | None = None) -> list[str]:
        now = self.clock() if now is None else now
        stale = [
            sid
            for sid, c in self.creatures.items()
            if c.is_inactive(self.config.inactive_timeout_ms, now=now)
        ]
        for sid in stale:
            self.remove(sid)
        return stale

    def clear(self) -> None:
        for sid in list(self.creatures):
            self.remove(sid)

    def _pick_animation(self, color_index: int) -> SpriteAnimation | None:
        if not self.sheets:
            return None
        if 0 <= color_index < len(self.sheets):
            return SpriteAnimation(self.sheets[color_index])
        logger.debug("color index %d out of range; using first sprite sheet", color_index)
        return SpriteAnimation(self.sheets[0])


class PresentationLoop:
    """Feeds routed events into the roster and renders one frame per `frame` call."""

    def __init__(
        self,
        roster: CreatureRoster,
        renderer: Renderer,
        *,
        show_client_ids: bool = False,
        client_id_length: int = 6,
    ) -> None:
        self.roster = roster
        self.renderer = renderer
        self.show_client_ids = show_client_ids
        self.client_id_length = client_id_length
        self._handlers = {
            RoutedCursorPosition: self._on_cursor_position,
            RoutedDrawing: self._on_drawing,
            ClientDisconnected: self._on_client_disconnected,
            Clear: self._on_clear,
        }

    def handle(self, raw: str | bytes | dict) -> bool:
        """Apply one inbound event. Malformed events are dropped (returns False)."""
        try:
            obj = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
            msg = DISPLAY.validate_python(obj)
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
            logger.debug("drop: malformed display event: %s", e)
            return False
        self._handlers[type(msg)](msg)
        return True

    def frame(self, now: float | None = None) -> int:
        """Prune, advance and draw every creature. Returns how many were drawn."""
        now = self.roster.clock() if now is None else now
        self.roster.prune(now)
        self.renderer.begin_frame()
        drawn = 0
        for creature in self.roster:
            creature.tick(now)
            if not creature.active:
                continue
            label = creature.sender_id[: self.client_id_length] if self.show_client_ids else None
            self.renderer.draw_creature(creature, label=label)
            drawn += 1
        return drawn

    def _target(self, msg, nx: float, ny: float) -> None:
        x, y = denormalize(nx, ny, self.renderer.width, self.renderer.height)
        creature = self.roster.get_or_create(msg.sender_id, msg.color, msg.color_index)
        creature.set_target(x, y)

    def _on_cursor_position(self, msg: RoutedCursorPosition) -> None:
        self._target(msg, msg.x, msg.y)

    def _on_drawing(self, msg: RoutedDrawing) -> None:
        self._target(msg, msg.x1, msg.y1)

    def _on_client_disconnected(self, msg: ClientDisconnected) -> None:
        self.roster.remove(msg.sender_id)

    def _on_clear(self, msg: Clear) -> None:
        self.renderer.clear()
        logger.info("canvas cleared by drawing client")
