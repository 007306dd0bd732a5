from __future__ import annotations

import math
from typing import Callable, TypeAlias

Vec: TypeAlias = tuple[float, float]


def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def distance(a: Vec, b: Vec) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def direction_angle(frm: Vec, to: Vec) -> float:
    """Angle (radians) of the vector frm -> to. Coincident or non-finite points give 0."""
    dx = to[0] - frm[0]
    dy = to[1] - frm[1]
    if dx == 0.0 and dy == 0.0:
        return 0.0
    if not (math.isfinite(dx) and math.isfinite(dy)):
        return 0.0
    return math.atan2(dy, dx)


def step_toward(current: Vec, target: Vec, step: float) -> Vec:
    """Move `current` toward `target` by `step`, landing on `target` rather than overshooting."""
    d = distance(current, target)
    if d <= max(0.0, step):
        return (target[0], target[1])
    k = step / d
    return (current[0] + (target[0] - current[0]) * k, current[1] + (target[1] - current[1]) * k)


def follow(leader: Vec, current: Vec, length: float) -> Vec:
    """
    Drag a chain point after its leader: the result sits exactly `length`
    behind `leader` on the line from `current` to `leader`.
    """
    a = direction_angle(current, leader)
    return (leader[0] - math.cos(a) * length, leader[1] - math.sin(a) * length)


def magnitude(v: Vec) -> float:
    return math.hypot(v[0], v[1])


def set_magnitude(v: Vec, mag: float) -> Vec:
    m = magnitude(v)
    if m == 0.0:
        return (0.0, 0.0)
    return (v[0] / m * mag, v[1] / m * mag)


def limit(v: Vec, max_mag: float) -> Vec:
    if magnitude(v) > max_mag:
        return set_magnitude(v, max_mag)
    return v


# ---------------------------------------------------------------------------
# Noise
# ---------------------------------------------------------------------------


def _gradient(seed: int, i: int) -> float:
    # integer hash -> [-1, 1]
    h = (i * 374761393 + seed * 668265263) & 0xFFFFFFFF
    h = ((h ^ (h >> 13)) * 1274126177) & 0xFFFFFFFF
    h ^= h >> 16
    return (h / 0xFFFFFFFF) * 2.0 - 1.0


def noise1(seed: int, t: float) -> float:
    """Smooth 1D gradient noise in [-1, 1]; deterministic for a given (seed, t)."""
    i0 = math.floor(t)
    f = t - i0
    v0 = _gradient(seed, i0) * f
    v1 = _gradient(seed, i0 + 1) * (f - 1.0)
    u = f * f * f * (f * (f * 6.0 - 15.0) + 10.0)
    return clamp(2.0 * lerp(v0, v1, u), -1.0, 1.0)


def noise_offset(seed: int, time: float, strength: float = 1.0) -> float:
    return noise1(seed, time) * strength


# ---------------------------------------------------------------------------
# Easing (t in [0,1] -> [0,1], none of these overshoot)
# ---------------------------------------------------------------------------


def linear(t: float) -> float:
    return clamp(t, 0.0, 1.0)


def ease_in_quad(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    return t * t


def ease_out_quad(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    return 1.0 - (1.0 - t) * (1.0 - t)


def ease_in_out_cubic(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    return 4 * t * t * t if t < 0.5 else 1 - (-2 * t + 2) ** 3 / 2


def ease_out_cubic(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    return 1.0 - (1.0 - t) ** 3


def ease_out_quint(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    return 1.0 - (1.0 - t) ** 5


def ease_in_out_sine(t: float) -> float:
    t = clamp(t, 0.0, 1.0)
    return 0.5 - 0.5 * math.cos(math.pi * t)


EASINGS: dict[str, Callable[[float], float]] = {
    "linear": linear,
    "ease_in_quad": ease_in_quad,
    "ease_out_quad": ease_out_quad,
    "ease_in_out_cubic": ease_in_out_cubic,
    "ease_out_cubic": ease_out_cubic,
    "ease_out_quint": ease_out_quint,
    "ease_in_out_sine": ease_in_out_sine,
}


def easing(name: str) -> Callable[[float], float]:
    try:
        return EASINGS[name]
    except KeyError:
        raise ValueError(f"unknown easing curve: {name!r}") from None


def ease_to(
    start: float,
    end: float,
    elapsed_ms: float,
    duration_ms: float,
    curve: str = "ease_out_cubic",
) -> float:
    if duration_ms <= 0 or elapsed_ms >= duration_ms:
        return end
    t = max(0.0, elapsed_ms) / duration_ms
    return lerp(start, end, easing(curve)(t))


def ease_point(
    start: Vec,
    end: Vec,
    elapsed_ms: float,
    duration_ms: float,
    curve: str = "ease_out_cubic",
) -> Vec:
    return (
        ease_to(start[0], end[0], elapsed_ms, duration_ms, curve),
        ease_to(start[1], end[1], elapsed_ms, duration_ms, curve),
    )
