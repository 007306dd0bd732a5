from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Protocol

from PIL import Image, ImageColor, ImageDraw

from dragon_relay.motion.creature import Creature

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    width: int
    height: int

    def begin_frame(self) -> None: ...

    def clear(self) -> None: ...

    def draw_creature(self, creature: Creature, *, label: str | None = None) -> None: ...


def _rgba(color: str, alpha: int) -> tuple[int, int, int, int]:
    try:
        rgb = ImageColor.getrgb(color)
    except ValueError:
        rgb = (255, 255, 255)
    return (rgb[0], rgb[1], rgb[2], alpha)


class PillowRenderer:
    """
    Draw creatures onto an RGBA Pillow image, one frame at a time.

    - **body**: polyline from head through every segment, `stroke_weight` wide,
      in the creature color at `opacity`
    - **head**: filled dot plus the sprite frame when the animation is ready
    - **label**: optional short sender id next to the head
    """

    def __init__(self, width: int, height: int, background: str = "#FFFFFF") -> None:
        self.width = width
        self.height = height
        self.background = _rgba(background, 255)
        self.image = Image.new("RGBA", (width, height), self.background)
        self._draw = ImageDraw.Draw(self.image, "RGBA")

    def begin_frame(self) -> None:
        self._draw.rectangle((0, 0, self.width, self.height), fill=self.background)

    def clear(self) -> None:
        self.begin_frame()

    def draw_creature(self, creature: Creature, *, label: str | None = None) -> None:
        cfg = creature.config
        head = creature.head_position()
        pts = [head, *creature.segments]
        if not all(math.isfinite(v) for p in pts for v in p):
            logger.debug("skip draw for %s: non-finite geometry", creature.sender_id)
            return

        width = max(1, int(round(cfg.stroke_weight)))
        body = _rgba(creature.color, cfg.opacity)
        self._draw.line(pts, fill=body, width=width, joint="curve")

        r = cfg.stroke_weight * 0.75
        self._draw.ellipse((head[0] - r, head[1] - r, head[0] + r, head[1] + r), fill=_rgba(creature.color, 255))

        anim = creature.animation
        if anim is not None and anim.ready:
            s = cfg.head_size
            anim.draw(self.image, head[0] - s / 2, head[1] - s / 2, s, s, mirror=not creature.facing_left)

        if label:
            self._draw.text((head[0] + 15, head[1] - 17), label, fill=_rgba(creature.color, 255))

    def save(self, path: str | Path) -> None:
        self.image.convert("RGB").save(path, format="PNG", optimize=True)
