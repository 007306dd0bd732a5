from __future__ import annotations

import pytest
from pydantic import ValidationError

from dragon_relay.protocol import denormalize, normalize
from dragon_relay.protocol.messages import DISPLAY, INBOUND, Drawing, RoutedCursorPosition


def test_normalize_round_trip_same_canvas() -> None:
    nx, ny = normalize(123.0, 456.0, 800, 600)
    assert 0.0 <= nx <= 1.0 and 0.0 <= ny <= 1.0
    assert denormalize(nx, ny, 800, 600) == pytest.approx((123.0, 456.0))


def test_denormalize_scales_to_other_canvas() -> None:
    nx, ny = normalize(200.0, 150.0, 800, 600)
    x, y = denormalize(nx, ny, 1920, 1080)
    assert (x, y) == pytest.approx((480.0, 270.0))
    assert (x, y) != (200.0, 150.0)


def test_denormalize_clamps_out_of_range() -> None:
    assert denormalize(1.4, -0.2, 100, 50) == (100.0, 0.0)
    assert denormalize(float("nan"), 0.5, 100, 50) == (0.0, 25.0)
    assert denormalize(1.4, 0.5, 100, 50, clamp=False) == pytest.approx((140.0, 25.0))


def test_inbound_parsing_by_topic() -> None:
    msg = INBOUND.validate_python({"t": "drawing", "x1": 0, "y1": 0, "x2": 1, "y2": 1, "weight": 4})
    assert isinstance(msg, Drawing)
    assert msg.stroke_weight == 4
    with pytest.raises(ValidationError):
        INBOUND.validate_python({"t": "drawing", "x1": 0, "y1": 0, "x2": 1})
    with pytest.raises(ValidationError):
        INBOUND.validate_python({"t": "drawing", "x1": 0, "y1": 0, "x2": 1, "y2": 1, "weight": -1})


def test_routed_messages_use_camel_case_on_the_wire() -> None:
    wire = RoutedCursorPosition(sender_id="abc", color="#FF0000", color_index=1, x=0.1, y=0.2).wire()
    assert wire == {"t": "cursor-position", "senderId": "abc", "color": "#FF0000", "colorIndex": 1, "x": 0.1, "y": 0.2}
    assert DISPLAY.validate_python(wire) == RoutedCursorPosition.model_validate(wire)


def test_normalize_clamps_off_canvas_points() -> None:
    nx, ny = normalize(900.0, -10.0, 800, 600)
    assert (nx, ny) == (1.0, 0.0)
    msg = INBOUND.validate_python({"t": "cursor-position", "x": nx, "y": ny})
    assert (msg.x, msg.y) == (1.0, 0.0)
    assert normalize(10.0, 10.0, 0, 0) == (0.0, 0.0)
    assert normalize(float("inf"), float("nan"), 800, 600) == (0.0, 0.0)
