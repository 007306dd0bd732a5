from __future__ import annotations

import math


def _clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else 1.0 if x > 1.0 else x


def normalize(x: float, y: float, width: float, height: float) -> tuple[float, float]:
    """
    Input-side helper: map canvas pixels to [0,1] x [0,1] before emitting.

    Points off the canvas are clamped onto its edge so the payload always
    validates. Zero-sized or non-finite input maps to 0.
    """
    nx = x / width if width > 0 else 0.0
    ny = y / height if height > 0 else 0.0
    if not math.isfinite(nx):
        nx = 0.0
    if not math.isfinite(ny):
        ny = 0.0
    return (_clamp01(nx), _clamp01(ny))


def denormalize(
    nx: float,
    ny: float,
    width: float,
    height: float,
    *,
    clamp: bool = True,
) -> tuple[float, float]:
    """
    Map normalized coordinates onto a canvas of the given size.

    Sender and receiver canvases may differ in aspect ratio, so each axis is
    scaled independently. With `clamp` set, out-of-range input is pulled back
    into [0,1] first; non-finite input maps to 0.
    """
    if not math.isfinite(nx):
        nx = 0.0
    if not math.isfinite(ny):
        ny = 0.0
    if clamp:
        nx = _clamp01(nx)
        ny = _clamp01(ny)
    return (nx * width, ny * height)
