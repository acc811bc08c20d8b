from __future__ import annotations

import copy
import math

import pytest

from midiviz.effects import (
    ECHO_TOLERANCE,
    ColorEffect,
    DelayEffect,
    GlobalRotateEffect,
    GravityEffect,
    HorizontalDuplicateEffect,
    PanEffect,
    PositionOffsetEffect,
    RadialDuplicateEffect,
    RescalePositionEffect,
    Rotate3DEffect,
    ScaleEffect,
)
from midiviz.factory import build_effect_factory
from midiviz.models import VisualObject, VisualProperties

ALL_TYPES = build_effect_factory().type_names()


def obj(
    position: tuple[float, float, float] | None = (0.0, 0.0, 0.0),
    *,
    opacity: float | None = 1.0,
    **extra: object,
) -> VisualObject:
    return VisualObject(
        type="cube",
        properties=VisualProperties(position=position, opacity=opacity, **extra),
    )


def configured(effect_type: str) -> object:
    """An effect of ``effect_type`` set up so that it changes something."""
    effect = build_effect_factory().create(effect_type)
    tweaks = {
        "PositionOffsetEffect": {"offsetX": 1.0},
        "ScaleEffect": {"scale": 2.0},
        "RescalePositionEffect": {"scaleY": 3.0},
        "ColorEffect": {"color": "#123456"},
        "Rotate3DEffect": {"rotationZ": 45.0},
    }
    effect.apply_serialized_properties(tweaks.get(effect_type, {}))
    return effect


@pytest.mark.parametrize("type_name", ALL_TYPES)
class TestEveryEffect:
    def test_input_is_not_mutated(self, type_name: str) -> None:
        effect = configured(type_name)
        objects = [
            obj((1.0, 2.0, 3.0), scale=(1.0, 1.0, 1.0), rotation=(0.0, 10.0, 0.0)),
            obj((-1.0, 0.5, 0.0), velocity=(0.0, 1.0, 0.0)),
        ]
        snapshot = copy.deepcopy(objects)
        identities = [id(item) for item in objects]
        vectors = [id(item.properties.position) for item in objects]

        for time in (0.0, 1.0, 2.0):
            result = effect.apply_effect(objects, time, 120)
            assert result is not objects

        assert objects == snapshot
        assert [id(item) for item in objects] == identities
        assert [id(item.properties.position) for item in objects] == vectors

    def test_clone_is_isolated(self, type_name: str) -> None:
        effect = build_effect_factory().create(type_name)
        name = next(iter(effect.properties))
        before = effect.get_property(name)
        cloned = effect.clone()
        cloned.set_property(name, 7)
        assert effect.get_property(name) == before
        assert cloned.get_property(name) == 7

    def test_empty_input(self, type_name: str) -> None:
        assert build_effect_factory().create(type_name).apply_effect([], 1.0, 120) == []


class TestTransforms:
    def test_position_offset(self) -> None:
        effect = PositionOffsetEffect().with_property("offsetX", 1.0).with_property("offsetZ", -2.0)
        (moved,) = effect.apply_effect([obj((1.0, 1.0, 1.0))], 0.0, 120)
        assert moved.properties.position == (2.0, 1.0, -1.0)

    def test_offset_places_objects_without_position(self) -> None:
        effect = PositionOffsetEffect().with_property("offsetY", 3.0)
        (moved,) = effect.apply_effect([obj(None)], 0.0, 120)
        assert moved.properties.position == (0.0, 3.0, 0.0)

    def test_scale_multiplies_position_and_size(self) -> None:
        effect = ScaleEffect().with_property("scale", 2.0)
        (scaled,) = effect.apply_effect([obj((1.0, -1.0, 0.5), scale=(1.0, 2.0, 3.0))], 0.0, 120)
        assert scaled.properties.position == (2.0, -2.0, 1.0)
        assert scaled.properties.scale == (2.0, 4.0, 6.0)

    def test_scale_treats_missing_scale_as_one(self) -> None:
        (scaled,) = ScaleEffect().with_property("scale", 3.0).apply_effect([obj()], 0.0, 120)
        assert scaled.properties.scale == (3.0, 3.0, 3.0)

    def test_scale_keeps_uniform_scale_uniform(self) -> None:
        (scaled,) = ScaleEffect().with_property("scale", 2.0).apply_effect([obj(scale=0.5)], 0.0, 120)
        assert scaled.properties.scale == 1.0

    def test_rescale_position_per_axis(self) -> None:
        effect = RescalePositionEffect().with_property("scaleX", 2.0).with_property("scaleZ", 0.0)
        (moved,) = effect.apply_effect([obj((1.0, 2.0, 3.0))], 0.0, 120)
        assert moved.properties.position == (2.0, 2.0, 0.0)

    def test_color_override(self) -> None:
        (tinted,) = ColorEffect().with_property("color", "#00ff00").apply_effect([obj()], 0.0, 120)
        assert tinted.properties.color == "#00ff00"

    def test_pan_peaks_one_beat_into_cycle(self) -> None:
        (panned,) = PanEffect().apply_effect([obj()], 1.0, 120)
        assert panned.properties.position == pytest.approx((2.0, 0.0, 0.0))
        (centred,) = PanEffect().apply_effect([obj()], 4.0, 120)
        assert centred.properties.position == pytest.approx((0.0, 0.0, 0.0), abs=1e-9)

    def test_pan_normalises_direction(self) -> None:
        effect = PanEffect().with_property("directionX", 0.0).with_property("directionY", 0.5)
        (panned,) = effect.apply_effect([obj()], 1.0, 120)
        assert panned.properties.position == pytest.approx((0.0, 2.0, 0.0))

    def test_pan_zero_direction_falls_back_to_x(self) -> None:
        effect = PanEffect().with_property("directionX", 0.0)
        (panned,) = effect.apply_effect([obj()], 1.0, 120)
        assert panned.properties.position == pytest.approx((2.0, 0.0, 0.0))

    def test_gravity_accumulates_velocity(self) -> None:
        (fallen,) = GravityEffect().apply_effect([obj((0.0, 1.0, 0.0), velocity=(0.0, -0.1, 0.0))], 0.0, 120)
        assert fallen.properties.velocity == pytest.approx((0.0, -0.15, 0.0))
        assert fallen.properties.position == pytest.approx((0.0, 0.85, 0.0))

    def test_gravity_without_strength_is_identity(self) -> None:
        objects = [obj((0.0, 1.0, 0.0))]
        result = GravityEffect().with_property("gravityStrength", 0.0).apply_effect(objects, 0.0, 120)
        assert result == objects


class TestRotation:
    def test_rotate_about_z(self) -> None:
        effect = Rotate3DEffect().with_property("rotationZ", 90.0)
        (turned,) = effect.apply_effect([obj((1.0, 0.0, 0.0))], 0.0, 120)
        assert turned.properties.position == pytest.approx((0.0, 1.0, 0.0), abs=1e-9)

    def test_rotate_about_y(self) -> None:
        effect = Rotate3DEffect().with_property("rotationY", 90.0)
        (turned,) = effect.apply_effect([obj((1.0, 0.0, 0.0))], 0.0, 120)
        assert turned.properties.position == pytest.approx((0.0, 0.0, -1.0), abs=1e-9)

    def test_zero_rotation_is_identity(self) -> None:
        (same,) = Rotate3DEffect().apply_effect([obj((1.0, 2.0, 3.0))], 0.0, 120)
        assert same.properties.position == pytest.approx((1.0, 2.0, 3.0))

    def test_global_rotate_follows_time(self) -> None:
        effect = GlobalRotateEffect().with_property("speedFactor", 0.25)
        (at_zero,) = effect.apply_effect([obj((1.0, 0.0, 0.0))], 0.0, 120)
        (quarter,) = effect.apply_effect([obj((1.0, 0.0, 0.0))], 1.0, 120)
        assert at_zero.properties.position == pytest.approx((1.0, 0.0, 0.0))
        assert quarter.properties.position == pytest.approx((0.0, 0.0, -1.0), abs=1e-9)

    def test_global_rotate_skips_unplaced_objects(self) -> None:
        unplaced = obj(None)
        (result,) = GlobalRotateEffect().apply_effect([unplaced], 1.0, 120)
        assert result is unplaced

    def test_global_rotate_zero_axis_is_identity(self) -> None:
        effect = GlobalRotateEffect().with_property("axisY", 0.0)
        objects = [obj((1.0, 0.0, 0.0))]
        assert effect.apply_effect(objects, 1.0, 120) == objects


class TestDuplication:
    def test_radial_duplicate_places_copies_on_circle(self) -> None:
        effect = RadialDuplicateEffect().with_property("numCopies", 3).with_property("radius", 1.0)
        original = obj()
        result = effect.apply_effect([original], 0.0, 120)
        assert len(result) == 4
        assert result[0] is original
        for index, copy_ in enumerate(result[1:]):
            x, y, z = copy_.properties.position
            assert math.hypot(x, y) == pytest.approx(1.0)
            assert z == 0.0
            angle = math.degrees(math.atan2(y, x)) % 360
            assert angle == pytest.approx(index * 120.0, abs=1e-6)

    def test_radial_duplicate_disabled_by_zero_radius(self) -> None:
        objects = [obj()]
        assert RadialDuplicateEffect().with_property("radius", 0.0).apply_effect(objects, 0.0, 120) == objects

    def test_horizontal_duplicate_centres_row(self) -> None:
        result = HorizontalDuplicateEffect().apply_effect([obj((1.0, 2.0, 3.0))], 0.0, 120)
        assert [item.properties.position for item in result] == [
            (-1.0, 2.0, 3.0),
            (1.0, 2.0, 3.0),
            (3.0, 2.0, 3.0),
        ]

    def test_horizontal_duplicate_single_copy_without_spread(self) -> None:
        effect = HorizontalDuplicateEffect().with_property("numCopies", 1).with_property("xSpread", 0.0)
        objects = [obj((1.0, 2.0, 3.0))]
        assert effect.apply_effect(objects, 0.0, 120) == objects


class TestDelay:
    def delay(self) -> DelayEffect:
        return (
            DelayEffect()
            .with_property("delayTime", 1.0)
            .with_property("feedback", 0.5)
            .with_property("maxCopies", 2)
        )

    def test_echoes_fade_by_feedback(self) -> None:
        effect = self.delay()
        source = obj(opacity=0.8)
        assert effect.apply_effect([source], 0.0, 120) == [source]
        assert effect.apply_effect([], 0.5, 120) == []

        (first,) = effect.apply_effect([], 1.0, 120)
        assert first.properties.opacity == pytest.approx(0.4)
        (second,) = effect.apply_effect([], 2.0, 120)
        assert second.properties.opacity == pytest.approx(0.2)
        assert effect.apply_effect([], 3.0, 120) == []

    def test_echo_uses_tolerance(self) -> None:
        effect = self.delay()
        effect.apply_effect([obj()], 0.0, 120)
        assert effect.apply_effect([], 1.0 + ECHO_TOLERANCE / 2, 120)
        assert effect.apply_effect([], 1.0 + ECHO_TOLERANCE * 2, 120) == []

    def test_missing_opacity_counts_as_full(self) -> None:
        effect = self.delay()
        effect.apply_effect([obj(opacity=None)], 0.0, 120)
        (echo,) = effect.apply_effect([], 1.0, 120)
        assert echo.properties.opacity == pytest.approx(0.5)

    def test_expired_entries_are_pruned(self) -> None:
        effect = self.delay()
        effect.apply_effect([obj()], 0.0, 120)
        assert len(effect.buffered) == 1
        effect.apply_effect([], 2.5, 120)
        assert effect.buffered == ()

    def test_every_call_buffers_its_input(self) -> None:
        effect = self.delay()
        effect.apply_effect([obj(), obj()], 0.0, 120)
        effect.apply_effect([obj()], 0.5, 120)
        assert [entry.emission_time for entry in effect.buffered] == [0.0, 0.0, 0.5]

    def test_clone_starts_with_empty_buffer(self) -> None:
        effect = self.delay()
        effect.apply_effect([obj()], 0.0, 120)
        cloned = effect.clone()
        assert cloned.buffered == ()
        assert len(effect.buffered) == 1
        assert cloned.get_property("maxCopies") == 2

    def test_backward_seek_replays_buffered_echoes(self) -> None:
        effect = self.delay()
        effect.apply_effect([obj()], 0.0, 120)
        assert effect.apply_effect([], 1.0, 120)
        # Seeking back to the same beat finds the entry still buffered.
        assert effect.apply_effect([], 1.0, 120)
