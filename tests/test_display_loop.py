from __future__ import annotations

from PIL import Image

from dragon_relay.display.loop import CreatureRoster, PresentationLoop
from dragon_relay.display.rendering import PillowRenderer
from dragon_relay.display.sprites import SpriteSheet, asset_manifest, load_sheets
from dragon_relay.motion.creature import CreatureConfig


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class RecordingRenderer:
    width = 1000
    height = 500

    def __init__(self) -> None:
        self.frames = 0
        self.clears = 0
        self.drawn: list[tuple[str, str | None]] = []

    def begin_frame(self) -> None:
        self.frames += 1

    def clear(self) -> None:
        self.clears += 1

    def draw_creature(self, creature, *, label=None) -> None:
        self.drawn.append((creature.sender_id, label))


def _cursor(sender: str, x: float, y: float, index: int = 0) -> dict:
    return {"t": "cursor-position", "senderId": sender, "color": "#00FF00", "colorIndex": index, "x": x, "y": y}


def _loop(**kwargs):
    clock = FakeClock()
    roster = CreatureRoster(CreatureConfig(inactive_timeout_ms=3000.0), clock=clock, **kwargs)
    renderer = RecordingRenderer()
    return clock, roster, renderer, PresentationLoop(roster, renderer, show_client_ids=True, client_id_length=3)


def test_first_event_creates_creature_with_denormalized_target() -> None:
    _, roster, _, loop = _loop()
    assert loop.handle(_cursor("abcdef", 0.5, 0.25))
    creature = roster.get("abcdef")
    assert creature is not None
    assert creature.target == (500.0, 125.0)
    assert creature.color == "#00FF00"

    assert loop.handle(_cursor("abcdef", 1.0, 1.0))
    assert len(roster) == 1
    assert creature.target == (1000.0, 500.0)


def test_drawing_event_targets_its_start_point() -> None:
    _, roster, _, loop = _loop()
    loop.handle(
        {
            "t": "drawing",
            "senderId": "s",
            "color": "#0000FF",
            "colorIndex": 0,
            "x1": 0.1,
            "y1": 0.2,
            "x2": 0.9,
            "y2": 0.9,
            "strokeWeight": 3,
        }
    )
    assert roster.get("s").target == (100.0, 100.0)


def test_malformed_event_never_reaches_roster() -> None:
    _, roster, renderer, loop = _loop()
    assert not loop.handle(_cursor("a", 2.0, 0.5))
    assert not loop.handle({"t": "cursor-position", "x": 0.5, "y": 0.5})
    assert not loop.handle("not json")
    assert len(roster) == 0
    assert loop.frame() == 0
    assert renderer.frames == 1


def test_frame_ticks_and_labels_active_creatures() -> None:
    _, roster, renderer, loop = _loop()
    loop.handle(_cursor("abcdef", 0.5, 0.5))
    assert loop.frame() == 1
    assert renderer.drawn == [("abcdef", "abc")]
    assert roster.get("abcdef").head_position() != (0.0, 0.0)


def test_inactive_creatures_are_pruned() -> None:
    clock, roster, renderer, loop = _loop()
    loop.handle(_cursor("a", 0.1, 0.1))
    clock.now = 2000.0
    loop.handle(_cursor("b", 0.2, 0.2))
    clock.now = 3500.0
    assert loop.frame() == 1
    assert "a" not in roster and "b" in roster
    clock.now = 10_000.0
    assert loop.frame() == 0
    assert len(roster) == 0


def test_disconnect_removal_is_idempotent() -> None:
    _, roster, _, loop = _loop()
    loop.handle(_cursor("a", 0.1, 0.1))
    loop.handle(_cursor("b", 0.1, 0.1))
    gone = {"t": "client-disconnected", "senderId": "a"}
    assert loop.handle(gone)
    assert loop.handle(gone)
    assert loop.handle({"t": "client-disconnected", "senderId": "never-seen"})
    assert "a" not in roster and "b" in roster


def test_clear_resets_canvas_but_keeps_creatures() -> None:
    _, roster, renderer, loop = _loop()
    loop.handle(_cursor("a", 0.1, 0.1))
    assert loop.handle({"t": "clear"})
    assert renderer.clears == 1
    assert len(roster) == 1


def _sheet_png(path, color, frames: int = 3) -> None:
    Image.new("RGBA", (8 * frames, 8), color).save(path)


def test_asset_manifest_lists_sorted_pngs(tmp_path) -> None:
    _sheet_png(tmp_path / "b.png", "blue")
    _sheet_png(tmp_path / "a.PNG", "red")
    (tmp_path / "notes.txt").write_text("x")
    assert asset_manifest(tmp_path) == ["a.PNG", "b.png"]
    assert asset_manifest(tmp_path / "missing") == []


def test_color_index_selects_sprite_variant(tmp_path) -> None:
    _sheet_png(tmp_path / "0_red.png", "red")
    _sheet_png(tmp_path / "1_blue.png", "blue")
    sheets = load_sheets(tmp_path, cols=3)
    assert [len(s.frames) for s in sheets] == [3, 3]

    _, roster, _, loop = _loop(sheets=sheets)
    loop.handle(_cursor("a", 0.1, 0.1, index=1))
    loop.handle(_cursor("b", 0.1, 0.1, index=9))
    assert roster.get("a").animation.sheet is sheets[1]
    assert roster.get("b").animation.sheet is sheets[0]

    loop.frame()
    loop.frame()
    assert roster.get("a").animation._ticks == 2


def test_pillow_renderer_skips_unready_sprites(tmp_path) -> None:
    broken = SpriteSheet(tmp_path / "missing.png", cols=9).load()
    assert not broken.ready

    clock = FakeClock()
    roster = CreatureRoster(CreatureConfig(segment_count=5), sheets=[broken], clock=clock)
    renderer = PillowRenderer(200, 100, "#000000")
    loop = PresentationLoop(roster, renderer, show_client_ids=True)
    loop.handle(_cursor("abc", 0.5, 0.5))
    for _ in range(10):
        assert loop.frame() == 1

    assert renderer.image.getpixel((100, 50))[:3] != (0, 0, 0)
    out = tmp_path / "frame.png"
    renderer.save(out)
    assert Image.open(out).size == (200, 100)


def test_pillow_renderer_draws_ready_sprite(tmp_path) -> None:
    _sheet_png(tmp_path / "0.png", (255, 0, 0, 255))
    sheets = load_sheets(tmp_path, cols=3)
    clock = FakeClock()
    roster = CreatureRoster(CreatureConfig(head_size=20.0), sheets=sheets, clock=clock)
    renderer = PillowRenderer(200, 100, "#000000")
    loop = PresentationLoop(roster, renderer)
    loop.handle({**_cursor("abc", 0.5, 0.5), "color": "#0000FF"})
    for _ in range(20):
        loop.frame()
    assert renderer.image.getpixel((96, 46))[:3] == (255, 0, 0)
