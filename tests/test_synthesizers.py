from __future__ import annotations

import math

import pytest

from midiviz.factory import build_synthesizer_factory
from midiviz.models import MidiBlock, MidiNote
from midiviz.synthesizer import iter_active_notes
from midiviz.synthesizers import (
    ApproachingCubeSynth,
    BasicSynthesizer,
    GlowSynth,
    HiHatSynth,
    KickDrumSynth,
    MelodicOrbitSynth,
    PitchSphereSynth,
    RadialDrumSynth,
    SnareDrumSynth,
    SpiralSynth,
)

ALL_TYPES = build_synthesizer_factory().type_names()


def note(
    note_id: str = "n1",
    pitch: int = 60,
    velocity: int = 127,
    start: float = 0.0,
    duration: float = 4.0,
) -> MidiNote:
    return MidiNote(id=note_id, pitch=pitch, velocity=velocity, start_beat=start, duration=duration)


def block(*notes: MidiNote, start: float = 0.0, end: float = 4.0) -> MidiBlock:
    return MidiBlock(id="b1", start_beat=start, end_beat=end, notes=notes)


class TestWindowing:
    def test_note_offsets_are_relative_to_block(self) -> None:
        blocks = [block(note(start=1.0, duration=1.0), start=8.0, end=12.0)]
        assert list(iter_active_notes(8.5, blocks, 60)) == []
        assert [ctx.note.id for ctx in iter_active_notes(9.5, blocks, 60)] == ["n1"]

    def test_context_timing_in_seconds(self) -> None:
        blocks = [block(note(duration=2.0))]
        (ctx,) = iter_active_notes(1.0, blocks, 120)
        assert ctx.time_since_start == pytest.approx(0.5)
        assert ctx.duration_seconds == pytest.approx(1.0)
        assert ctx.progress == pytest.approx(0.5)

    def test_velocity_fraction(self) -> None:
        (ctx,) = iter_active_notes(1.0, [block(note(velocity=64))], 60)
        assert ctx.velocity_fraction == pytest.approx(64 / 127)

    def test_pitch_span_covers_all_blocks(self) -> None:
        blocks = [block(note("a", pitch=40), note("b", pitch=70, start=8.0))]
        (ctx,) = iter_active_notes(1.0, blocks, 60)
        assert ctx.pitch_span == (40, 70)

    def test_release_tail_extends_block_span(self) -> None:
        synth = BasicSynthesizer()
        blocks = [block(note(duration=4.0))]
        # release 0.4 s at 60 bpm is 0.4 beats past the block end
        objects = synth.synthesize(4.2, blocks, 60)
        assert len(objects) == 1
        assert objects[0].properties.opacity == pytest.approx(0.25)
        assert synth.synthesize(4.5, blocks, 60) == []


class TestBasicSynthesizer:
    def test_sustained_note(self) -> None:
        (obj,) = BasicSynthesizer().synthesize(2.0, [block(note(pitch=60))], 60)
        assert obj.type == "cube"
        assert obj.source_note_id == "n1"
        assert obj.properties.opacity == pytest.approx(0.5)
        assert obj.properties.position == pytest.approx((0.0, -5.0 + 60 / 127 * 10, 0.0))
        assert obj.properties.scale == pytest.approx((1.0, 1.0 * (0.5 + 0 / 11), 1.0))
        assert obj.properties.color.startswith("hsl(0, 80%")

    def test_object_type_dropdown(self) -> None:
        synth = BasicSynthesizer().with_property("objectType", "sphere")
        assert synth.properties["objectType"].ui_type == "dropdown"
        (obj,) = synth.synthesize(2.0, [block(note())], 60)
        assert obj.type == "sphere"

    def test_velocity_scales_size(self) -> None:
        synth = BasicSynthesizer()
        (loud,) = synth.synthesize(2.0, [block(note(velocity=127))], 60)
        (soft,) = synth.synthesize(2.0, [block(note(velocity=32))], 60)
        assert soft.properties.scale[0] < loud.properties.scale[0]

    def test_property_changes_flow_into_output(self) -> None:
        synth = BasicSynthesizer().with_property("yMin", 0.0).with_property("yRange", 127.0)
        (obj,) = synth.synthesize(2.0, [block(note(pitch=64))], 60)
        assert obj.properties.position[1] == pytest.approx(64.0)


class TestPitchSphereSynth:
    def test_pitch_spans_y_range(self) -> None:
        blocks = [block(note("low", pitch=48), note("high", pitch=72))]
        objects = PitchSphereSynth().synthesize(2.0, blocks, 60)
        heights = {obj.source_note_id: obj.properties.position[1] for obj in objects}
        assert heights["low"] == pytest.approx(0.0)
        assert heights["high"] == pytest.approx(5.0)

    def test_single_pitch_sits_at_min(self) -> None:
        (obj,) = PitchSphereSynth().synthesize(2.0, [block(note(pitch=60))], 60)
        assert obj.properties.position == (0.0, 0.0, 0.0)
        assert obj.properties.scale == 0.5
        assert obj.properties.color == "#ffffff"


class TestSpiralSynth:
    def test_starts_on_axis_and_moves_out(self) -> None:
        synth = SpiralSynth()
        (start,) = synth.synthesize(0.05, [block(note())], 60)
        (later,) = synth.synthesize(2.0, [block(note())], 60)
        start_radius = math.hypot(start.properties.position[0], start.properties.position[2])
        later_radius = math.hypot(later.properties.position[0], later.properties.position[2])
        assert later_radius == pytest.approx(1.0)
        assert start_radius < later_radius
        assert later.properties.rotation is not None


class TestMelodicOrbitSynth:
    def test_orbit_radius(self) -> None:
        (obj,) = MelodicOrbitSynth().synthesize(0.1, [block(note())], 60)
        x, y, _ = obj.properties.position
        assert math.hypot(x, y) == pytest.approx(4.0)

    def test_zero_sustain_fades_out_while_held(self) -> None:
        assert MelodicOrbitSynth().synthesize(2.0, [block(note())], 60) == []


class TestGlowSynth:
    def test_emissive_matches_color(self) -> None:
        (obj,) = GlowSynth().synthesize(0.01, [block(note())], 60)
        assert obj.properties.emissive == obj.properties.color
        assert obj.properties.emissive_intensity == pytest.approx(obj.properties.opacity)

    def test_expands_over_time(self) -> None:
        synth = GlowSynth()
        (early,) = synth.synthesize(0.1, [block(note())], 60)
        (late,) = synth.synthesize(1.0, [block(note())], 60)
        assert late.scale_vector()[0] > early.scale_vector()[0]

    def test_hue_range_wraps(self) -> None:
        synth = GlowSynth().with_property("hueRange", {"startHue": 300.0, "endHue": 60.0})
        (obj,) = synth.synthesize(1.0, [block(note(pitch=71))], 60)
        # pitch class 11 walks the whole wrapped range: 300 + 120 = 420 -> 60
        assert obj.properties.color.startswith("hsl(60,")

    def test_partial_hue_range_keeps_default_end(self) -> None:
        synth = GlowSynth().with_property("hueRange", {"startHue": 0.0})
        (obj,) = synth.synthesize(1.0, [block(note(pitch=71))], 60)
        # end hue falls back to 300
        assert obj.properties.color.startswith("hsl(300,")

    def test_pitch_span_sets_height(self) -> None:
        blocks = [block(note("low", pitch=50), note("high", pitch=62))]
        objects = GlowSynth().synthesize(0.5, blocks, 60)
        heights = {obj.source_note_id: obj.properties.position[1] for obj in objects}
        assert heights == {"low": pytest.approx(-3.0), "high": pytest.approx(3.0)}


class TestApproachingCubeSynth:
    def test_travels_toward_camera(self) -> None:
        (obj,) = ApproachingCubeSynth().synthesize(1.0, [block(note(pitch=60))], 60)
        x, y, z = obj.properties.position
        assert z == pytest.approx(4.0)
        assert x == pytest.approx(1.5)
        assert y == pytest.approx(0.0, abs=1e-9)

    def test_spin_is_quantized(self) -> None:
        (obj,) = ApproachingCubeSynth().synthesize(0.3, [block(note())], 60)
        # 0.3 s * 180 deg/s = 54 deg, floored to a 45 degree step
        assert obj.properties.rotation[1] == pytest.approx(45.0)


class TestDrums:
    def test_kick_compresses_then_rings_out(self) -> None:
        synth = KickDrumSynth()
        blocks = [block(note(duration=1.0))]
        (hit,) = synth.synthesize(0.05, blocks, 60)
        assert hit.properties.scale < 3.0
        assert synth.synthesize(1.25, blocks, 60)
        assert synth.synthesize(1.6, blocks, 60) == []

    def test_snare_pulses_hsl_lightness(self) -> None:
        synth = SnareDrumSynth().with_property("baseColor", "hsl(200, 50%, 10%)")
        (obj,) = synth.synthesize(0.01, [block(note())], 60)
        assert obj.properties.color == "hsl(200, 50%, 85%)"
        (plain,) = SnareDrumSynth().synthesize(0.01, [block(note())], 60)
        assert plain.properties.color == "#cccccc"

    def test_hihat_static_rotation(self) -> None:
        (obj,) = HiHatSynth().synthesize(0.005, [block(note())], 60)
        assert obj.properties.rotation == (45.0, 45.0, 0.0)
        assert obj.properties.position == (0.0, 4.0, 0.0)

    def test_radial_drum_four_cubes(self) -> None:
        objects = RadialDrumSynth().synthesize(0.5, [block(note(duration=1.0))], 60)
        assert [obj.properties.position for obj in objects] == [
            (2.5, 0.0, 0.0),
            (-2.5, 0.0, 0.0),
            (0.0, 2.5, 0.0),
            (0.0, -2.5, 0.0),
        ]

    def test_radial_drum_ends_with_note(self) -> None:
        assert RadialDrumSynth().synthesize(1.5, [block(note(duration=1.0))], 60) == []


def test_overlapping_identical_notes_are_independent() -> None:
    blocks = [block(note("a"), note("b"))]
    objects = BasicSynthesizer().synthesize(1.0, blocks, 60)
    assert [obj.source_note_id for obj in objects] == ["a", "b"]
    assert objects[0].properties == objects[1].properties


@pytest.mark.parametrize("type_name", ALL_TYPES)
class TestEverySynthesizer:
    def test_is_pure(self, type_name: str) -> None:
        synth = build_synthesizer_factory().create(type_name)
        blocks = [block(note("a", pitch=48), note("b", pitch=67, start=0.5, duration=1.0))]
        for time in (0.0, 0.25, 0.75, 1.4, 3.9):
            assert synth.synthesize(time, blocks, 120) == synth.synthesize(time, blocks, 120)

    @pytest.mark.parametrize(
        "blocks",
        [
            [MidiBlock(id="bad", start_beat=4, end_beat=2, notes=(note(),))],
            [block(note(duration=0.0))],
            [block(note(duration=-2.0))],
            [],
        ],
    )
    def test_malformed_data_never_renders(self, type_name: str, blocks: list[MidiBlock]) -> None:
        synth = build_synthesizer_factory().create(type_name)
        for step in range(-4, 40):
            assert synth.synthesize(step * 0.25, blocks, 120) == []

    def test_silent_before_note(self, type_name: str) -> None:
        synth = build_synthesizer_factory().create(type_name)
        assert synth.synthesize(-0.5, [block(note())], 120) == []

    def test_clone_is_isolated(self, type_name: str) -> None:
        synth = build_synthesizer_factory().create(type_name)
        name = next(iter(synth.properties))
        before = synth.get_property(name)
        cloned = synth.clone()
        cloned.set_property(name, "changed")
        assert synth.get_property(name) == before
        assert type(cloned) is type(synth)
