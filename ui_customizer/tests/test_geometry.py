import math

import pytest

from ui_customizer.geometry import (
    Rect,
    clamp_grid_size,
    clamp_into,
    clamp_size,
    format_px,
    format_translate,
    parse_px,
    parse_translate,
    snap_to_grid,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("12px", 12.0),
        (" 7.5px ", 7.5),
        ("-4px", -4.0),
        ("30", 30.0),
        (16, 16.0),
        ("", None),
        (None, None),
        ("auto", None),
        ("nanpx", None),
    ],
)
def test_parse_px(raw, expected):
    assert parse_px(raw) == expected


def test_parse_px_rejects_infinity():
    assert parse_px(math.inf) is None


def test_format_px_drops_trailing_zero():
    assert format_px(16.0) == "16px"
    assert format_px(-8) == "-8px"
    assert format_px(12.5) == "12.5px"


@pytest.mark.parametrize(
    "raw,expected",
    [(8, 8), ("16", 16), (2, 4), (100, 64), (0, 8), (-3, 4), ("12.6", 13), (12.4, 12), ("abc", 8), (None, 8)],
)
def test_clamp_grid_size(raw, expected):
    assert clamp_grid_size(raw) == expected


def test_clamp_grid_size_uses_fallback():
    assert clamp_grid_size("bad", fallback=24) == 24


def test_snap_to_grid_threshold_boundary():
    assert snap_to_grid(23, 32, 10) == 32  # 9 away
    assert snap_to_grid(21, 32, 10) == 21  # 11 away
    assert snap_to_grid(42, 32, 10) == 32  # 10 away, inclusive


def test_snap_to_grid_default_cell_always_lands_on_a_line():
    for value in range(-40, 200):
        assert snap_to_grid(value, 8, 10) % 8 == 0


def test_snap_to_grid_ignores_non_positive_grid():
    assert snap_to_grid(13, 0, 10) == 13


def test_clamp_size_minimum_wins_over_maximum():
    assert clamp_size(10, 10, min_width=80, min_height=40, max_width=1000, max_height=800) == (80, 40)
    assert clamp_size(500, 500, min_width=80, min_height=40, max_width=60, max_height=30) == (80, 40)
    assert clamp_size(2000, 50, min_width=80, min_height=40, max_width=1000, max_height=None) == (1000, 50)


def test_clamp_into_keeps_rect_inside_bounds():
    assert clamp_into(Rect(-20, 900, 100, 50), 400, 300) == Rect(0, 250, 100, 50)
    assert clamp_into(Rect(350, 10, 100, 50), 400, 300) == Rect(300, 10, 100, 50)


def test_clamp_into_pins_oversized_rect_to_origin():
    assert clamp_into(Rect(40, 40, 500, 400), 400, 300) == Rect(0, 0, 500, 400)


def test_rect_relative_and_edges():
    rect = Rect(110, 60, 40, 20).relative_to(Rect(100, 50, 500, 500))
    assert rect.as_tuple() == (10, 10, 40, 20)
    assert rect.right == 50
    assert rect.bottom == 30
    assert rect.center_x == 30
    assert Rect(0, 0, 0, 10).is_empty


def test_translate_helpers():
    assert format_translate(0, 0) == ""
    assert format_translate(16, -8) == "translate(16px, -8px)"
    assert parse_translate("translate(16px, -8px)") == (16.0, -8.0)
    assert parse_translate("") == (0.0, 0.0)
    assert parse_translate("rotate(10deg)") == (0.0, 0.0)
