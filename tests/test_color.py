"""
Tests color parsing, formatting and interpolation
"""

import pytest

from animforge.animation.color import (
    BLACK,
    from_normalized,
    is_none_color,
    lerp_color,
    normalize_hex,
    parse_color,
    to_normalized,
    try_parse_color,
)


def test_parse_hex_forms():
    """
    Tests short, long and alpha hex colors
    """
    assert parse_color('#ff0000') == (255, 0, 0)
    assert parse_color('#F80') == (255, 136, 0)
    assert parse_color('00ff00') == (0, 255, 0)
    assert parse_color('#0000ff80') == (0, 0, 255)


def test_parse_rgb_and_names():
    """
    Tests rgb() notation and named colors
    """
    assert parse_color('rgb(10, 20, 30)') == (10, 20, 30)
    assert parse_color('rgba(10,20,30,0.5)') == (10, 20, 30)
    assert parse_color('rgb(300, -5, 0)') == (255, 0, 0)
    assert parse_color('Orange') == (255, 165, 0)


def test_unresolvable_colors_are_black():
    """
    Tests the black fallback for anything unparseable
    """
    assert parse_color('not-a-color') == BLACK
    assert parse_color('#12345') == BLACK
    assert parse_color(None) == BLACK
    assert parse_color(42) == BLACK
    assert try_parse_color('nope') is None


def test_none_colors():
    assert is_none_color(None)
    assert is_none_color('none')
    assert is_none_color(' None ')
    assert is_none_color('transparent')
    assert not is_none_color('#000000')


def test_normalized_channels():
    """
    Tests hex <-> normalized 0-1 channels
    """
    assert to_normalized('#ff0000') == [1.0, 0.0, 0.0]
    assert to_normalized('#808080') == pytest.approx([128 / 255] * 3)
    assert from_normalized([1, 0, 0, 1]) == '#ff0000'
    assert from_normalized([0.5, 0.5, 0.5]) == '#808080'
    assert from_normalized([2.0, -1.0, 0.0]) == '#ff0000'
    assert from_normalized([]) == '#000000'


def test_normalize_hex():
    assert normalize_hex('#ABC') == '#aabbcc'
    assert normalize_hex('red') == '#ff0000'
    assert normalize_hex('garbage') == '#000000'


def test_lerp_color():
    """
    Tests per-channel color interpolation
    """
    assert lerp_color('#000000', '#ffffff', 0.0) == '#000000'
    assert lerp_color('#000000', '#ffffff', 1.0) == '#ffffff'
    mid = parse_color(lerp_color('#000000', '#ffffff', 0.5))
    for channel in mid:
        assert abs(channel - 127) <= 1
    assert lerp_color('#ff0000', '#0000ff', 0.5) == '#800080'


def test_lerp_color_overshoot_is_clipped():
    assert lerp_color('#000000', '#ffffff', 1.5) == '#ffffff'
    assert lerp_color('#000000', '#ffffff', -0.5) == '#000000'
