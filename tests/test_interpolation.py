"""Tests for keyframe interpolation."""

import numpy as np
import pytest

from animforge.animation.easing import CubicBezierEasing
from animforge.animation.interpolation import (
    color_at,
    numeric_at,
    sample_track,
    value_at,
)
from animforge.animation.keyframes import Keyframe


def kf(time, value, prop='positionX', easing='linear'):
    return Keyframe(time=time, property=prop, value=value, easing=easing, layerId='layer')


class TestClamping:
    """Values outside the keyed range are clamped, never extrapolated."""

    def test_before_first_keyframe(self):
        track = [kf(1.0, 10), kf(2.0, 20)]
        assert value_at(track, 0.0) == 10
        assert value_at(track, 1.0) == 10

    def test_after_last_keyframe(self):
        track = [kf(1.0, 10), kf(2.0, 20)]
        assert value_at(track, 2.0) == 20
        assert value_at(track, 99.0) == 20

    def test_single_keyframe(self):
        track = [kf(0.5, 42)]
        for t in (0.0, 0.5, 3.0):
            assert value_at(track, t) == 42

    def test_empty_track_is_an_error(self):
        with pytest.raises(ValueError):
            value_at([], 1.0)


class TestNumericInterpolation:
    """Linear and eased numeric segments."""

    def test_linear_midpoint(self):
        track = [kf(0, 0), kf(2, 200)]
        assert value_at(track, 1) == pytest.approx(100)

    def test_multiple_segments(self):
        track = [kf(0, 0), kf(1, 100), kf(3, 0)]
        assert value_at(track, 0.5) == pytest.approx(50)
        assert value_at(track, 2.0) == pytest.approx(50)

    def test_exact_middle_keyframe_time(self):
        track = [kf(0, 0), kf(1, 100), kf(2, 0)]
        assert value_at(track, 1.0) == pytest.approx(100)

    def test_easing_of_first_keyframe_applies(self):
        track = [kf(0, 0, easing='easeIn'), kf(2, 100)]
        assert value_at(track, 1) == pytest.approx(25)

    def test_hold_keeps_start_value(self):
        track = [kf(0, 10, easing='hold'), kf(2, 50)]
        assert value_at(track, 1) == 10
        assert value_at(track, 1.999) == 10
        assert value_at(track, 2) == 50

    def test_custom_bezier(self):
        easing = CubicBezierEasing(x1=0.25, y1=0.1, x2=0.25, y2=1.0)
        track = [kf(0, 0, easing=easing), kf(1, 100)]
        assert value_at(track, 0.5) == pytest.approx(80.24, abs=0.1)

    def test_numeric_at_returns_float(self):
        track = [kf(0, 1), kf(1, 3)]
        result = numeric_at(track, 0.5)
        assert isinstance(result, float)
        assert result == pytest.approx(2.0)


class TestColorInterpolation:
    """Channel-wise color interpolation."""

    def test_black_to_white(self):
        track = [kf(0, '#000000', prop='fill'), kf(2, '#FFFFFF', prop='fill')]
        result = value_at(track, 1)
        assert result.startswith('#') and len(result) == 7
        channels = [int(result[i:i + 2], 16) for i in (1, 3, 5)]
        for channel in channels:
            assert abs(channel - 127) <= 1

    def test_invalid_color_falls_back_to_black(self):
        track = [kf(0, 'nonsense', prop='stroke'), kf(1, '#ffffff', prop='stroke')]
        assert color_at(track, 0.0) == '#000000'
        assert color_at(track, 1.0) == '#ffffff'

    def test_clamped_colors_are_canonical(self):
        track = [kf(1, 'red', prop='fill'), kf(2, '#F80', prop='fill')]
        assert value_at(track, 0) == '#ff0000'
        assert value_at(track, 1) == '#ff0000'
        assert value_at(track, 2) == '#ff8800'
        assert value_at(track, 5) == '#ff8800'

    def test_color_at_normalizes(self):
        track = [kf(0, '#ABC', prop='fill')]
        assert color_at(track, 0) == '#aabbcc'


class TestSampleTrack:
    """Vectorized evaluation matches value_at."""

    def test_matches_scalar_evaluation(self):
        track = [kf(0, 0, easing='easeInOut'), kf(1, 100, easing='easeOut'), kf(2, 50)]
        times = np.linspace(-0.5, 2.5, 31)
        samples = sample_track(track, times)
        expected = [value_at(track, t) for t in times]
        np.testing.assert_allclose(samples, expected)

    def test_rejects_color_tracks(self):
        with pytest.raises(ValueError):
            sample_track([kf(0, '#000000', prop='fill')], [0.0])
