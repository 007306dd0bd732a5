from __future__ import annotations

import logging
import math
import random
import time
import zlib
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, Field, field_validator

from .kernel import (
    EASINGS,
    Vec,
    ease_point,
    follow,
    limit,
    magnitude,
    noise_offset,
    set_magnitude,
    step_toward,
)

logger = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.monotonic() * 1000.0


class MotionPolicy(str, Enum):
    CHAIN = "chain"  # head steps straight at the target, body drags behind
    EASED = "eased"  # head tweens to each new target, body chases the tween
    NOISE = "noise"  # chain chase toward a per-creature wandering target
    ARRIVAL = "arrival"  # steered physical head that slows inside a radius


class CreatureConfig(BaseModel):
    """Shape and motion knobs shared by every creature on a display."""

    policy: MotionPolicy = MotionPolicy.CHAIN
    segment_count: int = Field(default=20, ge=1)
    segment_length: float = Field(default=18.0, gt=0.0)
    # chain/noise: head travel per tick; None means one segment length
    head_step: Optional[float] = Field(default=None, gt=0.0)

    stroke_weight: float = Field(default=9.0, gt=0.0)
    opacity: int = Field(default=100, ge=0, le=255)
    head_size: float = Field(default=100.0, gt=0.0)
    inactive_timeout_ms: float = Field(default=3000.0, gt=0.0)

    # eased
    ease_duration_ms: float = Field(default=250.0, ge=0.0)
    ease_curve: str = "ease_out_cubic"

    # noise
    noise_scale: float = Field(default=0.005, ge=0.0)
    noise_strength: float = Field(default=60.0, ge=0.0)

    # arrival
    max_speed: float = Field(default=20.0, gt=0.0)
    max_force: float = Field(default=0.2, gt=0.0)
    slowing_radius: float = Field(default=200.0, gt=0.0)

    @field_validator("ease_curve")
    @classmethod
    def _known_curve(cls, v: str) -> str:
        if v not in EASINGS:
            raise ValueError(f"unknown easing curve {v!r}; expected one of {sorted(EASINGS)}")
        return v


class Creature:
    """
    One animated follower per sender.

    The body is a fixed-length chain of points that starts collapsed at the
    origin. `set_target` feeds it denormalized cursor positions; `tick`
    advances it one frame under `config.policy`.
    """

    def __init__(
        self,
        sender_id: str,
        config: CreatureConfig | None = None,
        *,
        color: str = "#FFFFFF",
        color_index: int = 0,
        seed: int | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.sender_id = sender_id
        self.config = config or CreatureConfig()
        self.color = color
        self.color_index = color_index
        self.animation = None  # sprite collaborator, attached by the roster

        self._clock = clock or _now_ms
        self.seed = seed if seed is not None else zlib.crc32(sender_id.encode("utf-8"))

        n = self.config.segment_count
        self.segments: list[Vec] = [(0.0, 0.0)] * n
        self.target: Vec = (0.0, 0.0)
        self.active = False
        self.last_update = self._clock()

        self._head: Vec = (0.0, 0.0)
        self._prev_head_x = 0.0

        # eased
        self._ease_from: Vec = (0.0, 0.0)
        self._ease_start = self.last_update

        # noise
        self.noise_time = 0.0

        # arrival
        rng = random.Random(self.seed)
        self.velocity: Vec = (rng.uniform(-1.0, 1.0), rng.uniform(-1.0, 1.0))
        self.acceleration: Vec = (0.0, 0.0)

    # ------------------------------------------------------------------
    # public contract
    # ------------------------------------------------------------------

    def set_target(self, x: float, y: float, now: float | None = None) -> bool:
        """Record a new target. Non-finite coordinates are ignored (returns False)."""
        if not (math.isfinite(x) and math.isfinite(y)):
            logger.debug("creature %s: ignoring non-finite target (%r, %r)", self.sender_id, x, y)
            return False
        now = self._clock() if now is None else now
        if self.config.policy is MotionPolicy.EASED:
            # restart the tween from wherever the head is right now
            self._ease_from = self._eased_head(now)
            self._head = self._ease_from
            self._ease_start = now
        self.target = (float(x), float(y))
        self.active = True
        self.last_update = now
        return True

    def tick(self, now: float | None = None) -> None:
        if not self.active:
            return
        now = self._clock() if now is None else now
        if self.is_inactive(now=now):
            self.active = False
            return
        self._prev_head_x = self._head[0]
        _ADVANCE[self.config.policy](self, now)
        if self.animation is not None:
            self.animation.update()

    def is_inactive(self, timeout_ms: float | None = None, now: float | None = None) -> bool:
        timeout = self.config.inactive_timeout_ms if timeout_ms is None else timeout_ms
        now = self._clock() if now is None else now
        return now - self.last_update > timeout

    def head_position(self) -> Vec:
        return self._head

    def deactivate(self) -> None:
        self.active = False
        self.velocity = (0.0, 0.0)
        self.acceleration = (0.0, 0.0)

    @property
    def facing_left(self) -> bool:
        return self._head[0] - self._prev_head_x < 0

    # ------------------------------------------------------------------
    # motion policies
    # ------------------------------------------------------------------

    def _drag_body(self, start: int = 1) -> None:
        length = self.config.segment_length
        segs = self.segments
        for i in range(start, len(segs)):
            segs[i] = follow(segs[i - 1], segs[i], length)

    def _chase(self, goal: Vec) -> None:
        step = self.config.head_step or self.config.segment_length
        self.segments[0] = step_toward(self.segments[0], goal, step)
        self._head = self.segments[0]
        self._drag_body()

    def _trail(self, head: Vec) -> None:
        self._head = head
        self.segments[0] = follow(head, self.segments[0], self.config.segment_length)
        self._drag_body()

    def _eased_head(self, now: float) -> Vec:
        return ease_point(
            self._ease_from,
            self.target,
            now - self._ease_start,
            self.config.ease_duration_ms,
            self.config.ease_curve,
        )

    def _advance_chain(self, now: float) -> None:
        self._chase(self.target)

    def _advance_eased(self, now: float) -> None:
        self._trail(self._eased_head(now))

    def _advance_noise(self, now: float) -> None:
        cfg = self.config
        self.noise_time += cfg.noise_scale
        goal = (
            self.target[0] + noise_offset(self.seed, self.noise_time, cfg.noise_strength),
            self.target[1] + noise_offset(self.seed + 1, self.noise_time, cfg.noise_strength),
        )
        self._chase(goal)

    def _advance_arrival(self, now: float) -> None:
        cfg = self.config
        pos = self._head
        desired = (self.target[0] - pos[0], self.target[1] - pos[1])
        d = magnitude(desired)
        speed = cfg.max_speed * d / cfg.slowing_radius if d < cfg.slowing_radius else cfg.max_speed
        desired = set_magnitude(desired, speed)
        steer = limit((desired[0] - self.velocity[0], desired[1] - self.velocity[1]), cfg.max_force)

        acc = (self.acceleration[0] + steer[0], self.acceleration[1] + steer[1])
        self.acceleration = limit(acc, cfg.max_force)
        vel = (self.velocity[0] + self.acceleration[0], self.velocity[1] + self.acceleration[1])
        self.velocity = limit(vel, cfg.max_speed)
        self.acceleration = (0.0, 0.0)

        self._trail((pos[0] + self.velocity[0], pos[1] + self.velocity[1]))


_ADVANCE: dict[MotionPolicy, Callable[[Creature, float], None]] = {
    MotionPolicy.CHAIN: Creature._advance_chain,
    MotionPolicy.EASED: Creature._advance_eased,
    MotionPolicy.NOISE: Creature._advance_noise,
    MotionPolicy.ARRIVAL: Creature._advance_arrival,
}
