

from .creature import Creature, CreatureConfig, MotionPolicy
from .kernel import (
    EASINGS,
    direction_angle,
    ease_to,
    lerp,
    noise_offset,
    step_toward,
)

__all__ = [
    "Creature",
    "CreatureConfig",
    "EASINGS",
    "MotionPolicy",
    "direction_angle",
    "ease_to",
    "lerp",
    "noise_offset",
    "step_toward",
]
