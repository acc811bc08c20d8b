"""
Pitched synthesizers: one object per note whose placement and color follow
the note's pitch.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from ..mapping import hsl, map_pitch_to_range, map_value
from ..models import VisualObject, VisualProperties
from ..properties import Property, color, color_range, dropdown, number_input, slider
from ..synthesizer import AdsrSynthesizerMixin, NoteContext, NoteSynthesizer, adsr_properties


class BasicSynthesizer(AdsrSynthesizerMixin, NoteSynthesizer):
    """A cube (or sphere) per note, stacked by pitch and tinted by pitch class."""

    type_name = "BasicSynthesizer"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("baseSize", 2.0, label="Base Size", min=0.1, max=10.0, step=0.1),
            *adsr_properties(0.05, 0.3, 0.5, 0.4),
            slider("yRange", 10.0, label="Y Range", min=1.0, max=20.0, step=0.5),
            slider("yMin", -5.0, label="Y Min", min=-10.0, max=0.0, step=0.5),
            dropdown(
                "objectType",
                "cube",
                label="Object Type",
                options=[("cube", "Cube"), ("sphere", "Sphere")],
            ),
        ]

    def render_note(self, ctx: NoteContext) -> Sequence[VisualObject]:
        y_range = float(self.get_property("yRange"))
        y_min = float(self.get_property("yMin"))
        pitch = ctx.note.pitch

        y = y_min + (pitch / 127.0) * y_range
        size = float(self.get_property("baseSize")) * ctx.velocity_fraction * ctx.amplitude
        height_factor = 0.5 + ctx.pitch_class / 11.0

        octave = pitch // 12
        y_influence = map_value(y, y_min, y_min + y_range, -1.0, 1.0)
        lightness = max(40.0, min(95.0, 55.0 + min(octave * 4, 25) + y_influence * 20.0))

        return [
            VisualObject(
                type=str(self.get_property("objectType")),
                source_note_id=ctx.note.id,
                properties=VisualProperties(
                    position=(0.0, y, 0.0),
                    scale=(size, size * height_factor, size),
                    color=hsl(ctx.pitch_class * 30, 80, lightness),
                    opacity=ctx.amplitude,
                ),
            )
        ]


class PitchSphereSynth(AdsrSynthesizerMixin, NoteSynthesizer):
    """Fixed-size spheres whose height spans the lowest to the highest pitch played."""

    type_name = "PitchSphereSynth"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("minY", 0.0, label="Min Y Position", min=-10.0, max=10.0, step=0.1),
            slider("maxY", 5.0, label="Max Y Position", min=-10.0, max=10.0, step=0.1),
            slider("size", 0.5, label="Sphere Size", min=0.05, max=5.0, step=0.05),
            color("color", "#ffffff", label="Color"),
            *adsr_properties(0.1, 0.0, 1.0, 0.5),
        ]

    def render_note(self, ctx: NoteContext) -> Sequence[VisualObject]:
        low, high = ctx.pitch_span or (ctx.note.pitch, ctx.note.pitch)
        if low == high:
            high = low + 1
        y = map_pitch_to_range(
            ctx.note.pitch,
            float(self.get_property("minY")),
            float(self.get_property("maxY")),
            low,
            high,
        )
        return [
            VisualObject(
                type="sphere",
                source_note_id=ctx.note.id,
                properties=VisualProperties(
                    position=(0.0, y, 0.0),
                    scale=float(self.get_property("size")),
                    color=str(self.get_property("color")),
                    opacity=ctx.amplitude,
                ),
            )
        ]


class SpiralSynth(AdsrSynthesizerMixin, NoteSynthesizer):
    type_name = "SpiralSynth"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("radiusGrowth", 0.5, label="Radius Growth", min=0.0, max=5.0, step=0.05),
            slider("angleSpeed", 90.0, label="Angle Speed (deg/s)", min=0.0, max=720.0, step=5.0),
            slider("baseSize", 0.5, label="Base Size", min=0.05, max=5.0, step=0.05),
            slider("hueShiftScale", 5.0, label="Hue Shift per Semitone", min=0.0, max=30.0, step=1.0),
            *adsr_properties(0.1, 0.2, 0.8, 1.0),
        ]

    def render_note(self, ctx: NoteContext) -> Sequence[VisualObject]:
        elapsed = ctx.time_since_start
        radius = elapsed * float(self.get_property("radiusGrowth"))
        angle = math.radians(elapsed * float(self.get_property("angleSpeed")))

        size = float(self.get_property("baseSize")) * ctx.amplitude * ctx.velocity_fraction
        pulse = 1.0 + math.sin(ctx.progress * math.pi * 4.0) * 0.1
        spin = elapsed * 180.0 * map_value(ctx.pitch_class, 0, 11, 0.5, 2.0)

        hue = 200.0 + ctx.pitch_class * float(self.get_property("hueShiftScale"))
        saturation = map_value(ctx.note.velocity, 0, 127, 60, 95)
        lightness = map_value(ctx.amplitude, 0, 1, 30, 75)

        return [
            VisualObject(
                type="sphere",
                source_note_id=ctx.note.id,
                properties=VisualProperties(
                    position=(
                        radius * math.cos(angle),
                        map_pitch_to_range(ctx.note.pitch, -4.0, 4.0),
                        radius * math.sin(angle),
                    ),
                    rotation=(0.0, spin, 0.0),
                    scale=(size * pulse, size, size * pulse),
                    color=hsl(hue, saturation, lightness),
                    opacity=ctx.amplitude,
                ),
            )
        ]


class MelodicOrbitSynth(AdsrSynthesizerMixin, NoteSynthesizer):
    type_name = "MelodicOrbitSynth"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("orbitRadius", 4.0, label="Orbit Radius", min=0.5, max=15.0, step=0.1),
            slider("orbitSpeed", 90.0, label="Orbit Speed (deg/s)", min=-720.0, max=720.0, step=5.0),
            slider("startSize", 0.5, label="Start Size", min=0.05, max=5.0, step=0.05),
            slider("baseHue", 120.0, label="Base Hue", min=0.0, max=360.0, step=1.0),
            slider("huePitchScale", 10.0, label="Hue per Semitone", min=0.0, max=30.0, step=1.0),
            *adsr_properties(0.05, 0.4, 0.0, 0.8),
        ]

    def render_note(self, ctx: NoteContext) -> Sequence[VisualObject]:
        radius = float(self.get_property("orbitRadius"))
        angle = math.radians(ctx.time_since_start * float(self.get_property("orbitSpeed")))
        hue = float(self.get_property("baseHue")) + ctx.pitch_class * float(
            self.get_property("huePitchScale")
        )
        return [
            VisualObject(
                type="sphere",
                source_note_id=ctx.note.id,
                properties=VisualProperties(
                    position=(
                        radius * math.cos(angle),
                        radius * math.sin(angle),
                        map_pitch_to_range(ctx.note.pitch, -3.0, 3.0),
                    ),
                    scale=float(self.get_property("startSize")) * ctx.amplitude,
                    color=hsl(hue, 80, map_value(ctx.amplitude, 0, 1, 40, 75)),
                    opacity=ctx.amplitude,
                ),
            )
        ]


class GlowSynth(AdsrSynthesizerMixin, NoteSynthesizer):
    """Expanding emissive spheres.

    Height is normalised over the pitch span of the blocks being drawn, and
    the hue walks ``hueRange`` by pitch class. An end hue below the start hue
    wraps through 360.
    """

    type_name = "GlowSynth"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("ySpread", 3.0, label="Y Spread", min=0.0, max=10.0, step=0.1),
            slider("glowIntensity", 1.0, label="Glow Intensity", min=0.0, max=5.0, step=0.1),
            slider("baseSize", 1.5, label="Base Size", min=0.1, max=5.0, step=0.05),
            slider("expansionRate", 2.0, label="Expansion Rate", min=0.0, max=10.0, step=0.1),
            color_range("hueRange", 180.0, 300.0, label="Hue Range (Note)"),
            *adsr_properties(0.01, 0.5, 0.2, 1.0, max_attack=1.0),
        ]

    def _hue(self, pitch_class: int) -> float:
        default = self.properties["hueRange"].default
        hue_range = self.get_property("hueRange")
        if not isinstance(hue_range, dict):
            hue_range = default
        start = float(hue_range.get("startHue", default["startHue"]))
        span = float(hue_range.get("endHue", default["endHue"])) - start
        if span < 0:
            span += 360.0
        return start + (pitch_class / 11.0) * span

    def render_note(self, ctx: NoteContext) -> Sequence[VisualObject]:
        spread = float(self.get_property("ySpread"))
        y = 0.0
        if ctx.pitch_span is not None and ctx.pitch_span[0] != ctx.pitch_span[1]:
            low, high = ctx.pitch_span
            y = map_value(ctx.note.pitch, low, high, -spread, spread)

        size = float(self.get_property("baseSize")) + float(
            self.get_property("expansionRate")
        ) * ctx.time_since_start
        size = max(0.01, size)

        tint = hsl(self._hue(ctx.pitch_class), 100, 50)
        intensity = float(self.get_property("glowIntensity")) * ctx.amplitude
        return [
            VisualObject(
                type="sphere",
                source_note_id=ctx.note.id,
                properties=VisualProperties(
                    position=(0.0, y, 0.0),
                    scale=(size, size, size),
                    color=tint,
                    opacity=ctx.amplitude,
                    emissive=tint,
                    emissive_intensity=intensity if intensity > 0.01 else 0.0,
                ),
            )
        ]


class ApproachingCubeSynth(AdsrSynthesizerMixin, NoteSynthesizer):
    """Cubes flying toward the camera, fanned out by pitch class, spinning in steps."""

    type_name = "ApproachingCubeSynth"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("baseSize", 0.8, label="Base Size", min=0.1, max=5.0, step=0.05),
            slider("travelSpeed", 4.0, label="Travel Speed", min=0.0, max=20.0, step=0.1),
            slider("spreadSpeed", 1.5, label="Spread Speed", min=0.0, max=10.0, step=0.1),
            slider("spinSpeed", 180.0, label="Spin Speed (deg/s)", min=0.0, max=1080.0, step=5.0),
            number_input("quantizeSteps", 8, label="Spin Steps", min=2, max=32, step=1),
            *adsr_properties(0.1, 0.0, 1.0, 2.0),
        ]

    def render_note(self, ctx: NoteContext) -> Sequence[VisualObject]:
        elapsed = ctx.time_since_start
        heading = map_value(ctx.pitch_class, 0, 11, 0.0, 2.0 * math.pi)
        spread = float(self.get_property("spreadSpeed")) * elapsed

        steps = max(2.0, float(self.get_property("quantizeSteps")))
        step_angle = 360.0 / steps
        spin = math.floor(elapsed * float(self.get_property("spinSpeed")) / step_angle) * step_angle

        return [
            VisualObject(
                type="cube",
                source_note_id=ctx.note.id,
                properties=VisualProperties(
                    position=(
                        math.cos(heading) * spread,
                        math.sin(heading) * spread,
                        float(self.get_property("travelSpeed")) * elapsed,
                    ),
                    rotation=(spin * 0.7, spin, spin * 0.5),
                    scale=float(self.get_property("baseSize")),
                    color=hsl(map_value(ctx.pitch_class, 0, 11, 0, 360), 80, 65),
                    opacity=ctx.amplitude,
                ),
            )
        ]
