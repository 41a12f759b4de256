"""Tests for the Keyframe model and keyframe list operations."""

import pytest
from pydantic import ValidationError

from animforge.animation.easing import CubicBezierEasing, EasingType
from animforge.animation.keyframes import (
    AnimatableProperty,
    Keyframe,
    group_tracks,
    keyframes_for,
    patch_keyframe,
    remove_keyframe,
    upsert_keyframe,
)


def kf(time, value, prop='positionX', layer='a', **kwargs):
    return Keyframe(time=time, property=prop, value=value, layerId=layer, **kwargs)


class TestKeyframeModel:
    """Validation and serialization of single keyframes."""

    def test_serializes_with_camel_case(self):
        keyframe = kf(1.5, 300, easing='easeInOut', id='kf-1')
        assert keyframe.to_api_dict() == {
            'id': 'kf-1',
            'time': 1.5,
            'property': 'positionX',
            'value': 300.0,
            'easing': 'easeInOut',
            'layerId': 'a',
        }

    def test_round_trip_custom_easing(self):
        keyframe = kf(0, 1, easing=CubicBezierEasing(x1=0.1, y1=0.2, x2=0.3, y2=0.4))
        restored = Keyframe.from_api_dict(keyframe.to_api_dict())
        assert restored.easing == keyframe.easing

    def test_default_easing_is_linear(self):
        assert kf(0, 1).easing == EasingType.LINEAR

    def test_negative_time_rejected(self):
        with pytest.raises(ValidationError):
            kf(-1, 0)

    def test_unknown_property_rejected(self):
        with pytest.raises(ValidationError):
            kf(0, 0, prop='skew')

    def test_color_property_needs_string(self):
        with pytest.raises(ValidationError):
            kf(0, 5, prop='fill')
        assert kf(0, '#ff0000', prop='fill').is_color

    def test_numeric_string_is_converted(self):
        assert kf(0, '12.5').value == 12.5

    def test_non_numeric_string_rejected(self):
        with pytest.raises(ValidationError):
            kf(0, 'abc', prop='opacity')

    def test_non_finite_value_rejected(self):
        with pytest.raises(ValidationError):
            kf(0, float('nan'))

    def test_track_key(self):
        assert kf(0, 1, prop='rotation', layer='x').track_key() == ('x', 'rotation')


class TestUpsert:
    """At most one keyframe per (layer, property, time)."""

    def test_append_new_slot(self):
        keyframes = upsert_keyframe([kf(0, 1)], kf(1, 2))
        assert [k.time for k in keyframes] == [0, 1]

    def test_replace_same_slot(self):
        first = kf(1, 10)
        second = kf(1, 20)
        keyframes = upsert_keyframe([kf(0, 0), first], second)
        assert len(keyframes) == 2
        assert keyframes[1].value == 20
        assert keyframes[1].id == second.id
        assert keyframes[1].id != first.id

    def test_other_property_same_time_kept(self):
        keyframes = upsert_keyframe([kf(1, 10)], kf(1, 20, prop='positionY'))
        assert len(keyframes) == 2

    def test_input_not_mutated(self):
        original = [kf(1, 10)]
        upsert_keyframe(original, kf(1, 20))
        assert original[0].value == 10


class TestRemoveAndPatch:
    """Delete and partial update by id."""

    def test_remove(self):
        keep = kf(0, 0)
        target = kf(1, 1)
        assert remove_keyframe([keep, target], target.id) == [keep]

    def test_remove_unknown_is_noop(self):
        keyframes = [kf(0, 0)]
        assert remove_keyframe(keyframes, 'missing') == keyframes

    def test_patch_easing(self):
        target = kf(0, 0)
        keyframes = patch_keyframe([target], target.id, {'easing': 'hold'})
        assert keyframes[0].easing == EasingType.HOLD
        assert keyframes[0].id == target.id

    def test_patch_accepts_aliases(self):
        target = kf(0, 0)
        keyframes = patch_keyframe([target], target.id, {'layerId': 'b', 'property': 'rotation'})
        assert keyframes[0].layer_id == 'b'
        assert keyframes[0].prop == AnimatableProperty.ROTATION

    def test_patch_cannot_change_id(self):
        target = kf(0, 0)
        keyframes = patch_keyframe([target], target.id, {'id': 'other', 'value': 5})
        assert keyframes[0].id == target.id
        assert keyframes[0].value == 5

    def test_patch_unknown_is_noop(self):
        keyframes = [kf(0, 0)]
        assert patch_keyframe(keyframes, 'missing', {'value': 1}) == keyframes

    def test_patch_onto_occupied_slot_drops_other(self):
        moving = kf(0, 0)
        occupant = kf(1, 100)
        keyframes = patch_keyframe([moving, occupant], moving.id, {'time': 1})
        assert len(keyframes) == 1
        assert keyframes[0].id == moving.id


class TestQueries:
    """Sorted per-layer queries."""

    def test_keyframes_for_sorted_by_time(self):
        keyframes = [kf(2, 0), kf(0, 0), kf(1, 0, prop='rotation'), kf(1, 0, layer='b')]
        result = keyframes_for(keyframes, 'a')
        assert [k.time for k in result] == [0, 1, 2]

    def test_keyframes_for_one_property(self):
        keyframes = [kf(2, 0), kf(0, 0), kf(1, 0, prop='rotation')]
        result = keyframes_for(keyframes, 'a', 'positionX')
        assert [k.time for k in result] == [0, 2]

    def test_group_tracks(self):
        keyframes = [kf(2, 0), kf(0, 0), kf(1, 0, prop='rotation')]
        tracks = group_tracks(keyframes)
        assert set(tracks) == {('a', 'positionX'), ('a', 'rotation')}
        assert [k.time for k in tracks[('a', 'positionX')]] == [0, 2]
