from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)


def asset_manifest(assets_dir: str | Path) -> list[str]:
    """Sorted PNG file names in `assets_dir`; a missing directory gives an empty manifest."""
    root = Path(assets_dir)
    if not root.is_dir():
        logger.info("assets directory %s not found; empty manifest", root)
        return []
    return sorted(p.name for p in root.iterdir() if p.is_file() and p.suffix.lower() == ".png")


class SpriteSheet:
    """A horizontal/vertical grid of equally sized frames cut from one image."""

    def __init__(self, path: str | Path, cols: int, rows: int = 1) -> None:
        self.path = Path(path)
        self.cols = cols
        self.rows = rows
        self.frames: list[Image.Image] = []

    @property
    def ready(self) -> bool:
        return bool(self.frames)

    def load(self) -> "SpriteSheet":
        try:
            with Image.open(self.path) as im:
                sheet = im.convert("RGBA")
        except OSError as e:
            logger.warning("could not load sprite sheet %s: %s", self.path, e)
            self.frames = []
            return self
        fw = sheet.width // self.cols
        fh = sheet.height // self.rows
        if fw == 0 or fh == 0:
            logger.warning("sprite sheet %s too small for %dx%d grid", self.path, self.cols, self.rows)
            return self
        self.frames = [
            sheet.crop((c * fw, r * fh, (c + 1) * fw, (r + 1) * fh))
            for r in range(self.rows)
            for c in range(self.cols)
        ]
        return self


class SpriteAnimation:
    """Cycles through a sheet's frames; `update` once per tick, `draw` onto a canvas."""

    def __init__(self, sheet: SpriteSheet, *, ticks_per_frame: int = 4) -> None:
        self.sheet = sheet
        self.ticks_per_frame = max(1, ticks_per_frame)
        self._ticks = 0

    @property
    def ready(self) -> bool:
        return self.sheet.ready

    @property
    def frame_index(self) -> int:
        if not self.sheet.frames:
            return 0
        return (self._ticks // self.ticks_per_frame) % len(self.sheet.frames)

    def update(self) -> None:
        self._ticks += 1

    def draw(
        self,
        canvas: Image.Image,
        x: float,
        y: float,
        w: float,
        h: float,
        *,
        mirror: bool = False,
    ) -> bool:
        """Paste the current frame with its top-left at (x, y). Returns False if nothing was drawn."""
        if not self.ready or w < 1 or h < 1:
            return False
        frame = self.sheet.frames[self.frame_index].resize((int(w), int(h)))
        if mirror:
            frame = ImageOps.mirror(frame)
        canvas.paste(frame, (int(round(x)), int(round(y))), frame)
        return True


def load_sheets(assets_dir: str | Path, cols: int, rows: int = 1) -> list[SpriteSheet]:
    root = Path(assets_dir)
    sheets = [SpriteSheet(root / name, cols, rows).load() for name in asset_manifest(root)]
    logger.info("loaded %d sprite sheets from %s", sum(s.ready for s in sheets), root)
    return sheets
