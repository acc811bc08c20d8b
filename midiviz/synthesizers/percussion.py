"""
Drum synthesizers. Pitch is ignored; each hit draws the same shape at a
configurable spot.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

from ..envelope import Envelope, damped_oscillator
from ..mapping import map_value
from ..models import Vec3, VisualObject, VisualProperties
from ..properties import Property, color, slider
from ..synthesizer import AdsrSynthesizerMixin, NoteContext, NoteSynthesizer, adsr_properties

_HSL_PATTERN = re.compile(r"hsl\((\d+),\s*(\d+)%,\s*(\d+)%\)")


def _position_properties(x: float, y: float, z: float) -> list[Property[float]]:
    return [
        slider("positionX", x, label="Position X", min=-10.0, max=10.0, step=0.1),
        slider("positionY", y, label="Position Y", min=-10.0, max=10.0, step=0.1),
        slider("positionZ", z, label="Position Z", min=-10.0, max=10.0, step=0.1),
    ]


class _PlacedDrum(NoteSynthesizer):
    def _position(self) -> Vec3:
        return (
            float(self.get_property("positionX")),
            float(self.get_property("positionY")),
            float(self.get_property("positionZ")),
        )


class KickDrumSynth(_PlacedDrum):
    """A sphere squashed by a spring that is struck on every hit.

    The object lives for the note plus ``ringTime`` seconds so the spring can
    settle after short hits.
    """

    type_name = "KickDrumSynth"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("baseSize", 3.0, label="Base Size", min=0.1, max=10.0, step=0.1),
            slider("compressionFactor", 0.5, label="Compression", min=0.0, max=2.0, step=0.05),
            slider("minScaleFactor", 0.1, label="Min Scale Factor", min=0.0, max=1.0, step=0.05),
            *_position_properties(0.0, 0.0, 0.0),
            color("baseColor", "#ff4400", label="Color"),
            slider("tension", 250.0, label="Spring Tension", min=10.0, max=1000.0, step=10.0),
            slider("friction", 15.0, label="Spring Friction", min=0.0, max=100.0, step=1.0),
            slider("initialVelocity", 5.0, label="Kick Strength", min=0.0, max=20.0, step=0.5),
            slider("ringTime", 0.5, label="Ring Time (s)", min=0.0, max=3.0, step=0.05),
        ]

    def envelope(self) -> Envelope:
        return Envelope(sustain=1.0, release=float(self.get_property("ringTime")))

    def render_note(self, ctx: NoteContext) -> Sequence[VisualObject]:
        kick = float(self.get_property("initialVelocity")) * map_value(
            ctx.note.velocity, 0, 127, 0.5, 1.5
        )
        displacement = damped_oscillator(
            ctx.time_since_start,
            float(self.get_property("tension")),
            float(self.get_property("friction")),
            kick,
        )
        base = float(self.get_property("baseSize"))
        target = base - displacement * float(self.get_property("compressionFactor"))
        scale = max(base * float(self.get_property("minScaleFactor")), target)
        return [
            VisualObject(
                type="sphere",
                source_note_id=ctx.note.id,
                properties=VisualProperties(
                    position=self._position(),
                    scale=scale,
                    color=str(self.get_property("baseColor")),
                    opacity=1.0,
                ),
            )
        ]


class SnareDrumSynth(AdsrSynthesizerMixin, _PlacedDrum):
    type_name = "SnareDrumSynth"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("maxSize", 1.8, label="Max Size", min=0.1, max=10.0, step=0.1),
            *_position_properties(0.0, -1.0, 0.0),
            color("baseColor", "#cccccc", label="Color"),
            *adsr_properties(0.01, 0.1, 0.0, 0.01, max_attack=0.5, max_decay=1.0, max_release=1.0),
        ]

    def _color(self, amplitude: float) -> str:
        base = str(self.get_property("baseColor"))
        match = _HSL_PATTERN.fullmatch(base.strip())
        if match is None:
            return base
        hue, saturation, _ = match.groups()
        lightness = map_value(amplitude, 0, 1, 50, 85)
        return f"hsl({hue}, {saturation}%, {lightness:.0f}%)"

    def render_note(self, ctx: NoteContext) -> Sequence[VisualObject]:
        return [
            VisualObject(
                type="sphere",
                source_note_id=ctx.note.id,
                properties=VisualProperties(
                    position=self._position(),
                    scale=max(0.001, float(self.get_property("maxSize")) * ctx.amplitude),
                    color=self._color(ctx.amplitude),
                    opacity=ctx.amplitude,
                ),
            )
        ]


class HiHatSynth(AdsrSynthesizerMixin, _PlacedDrum):
    type_name = "HiHatSynth"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("size", 0.4, label="Size", min=0.05, max=5.0, step=0.05),
            *_position_properties(0.0, 4.0, 0.0),
            slider("rotationX", 45.0, label="Rotation X", min=-180.0, max=180.0, step=1.0),
            slider("rotationY", 45.0, label="Rotation Y", min=-180.0, max=180.0, step=1.0),
            color("color", "#ffffaa", label="Color"),
            *adsr_properties(0.005, 0.03, 0.0, 0.01, max_attack=0.5, max_decay=1.0, max_release=1.0),
        ]

    def render_note(self, ctx: NoteContext) -> Sequence[VisualObject]:
        return [
            VisualObject(
                type="cube",
                source_note_id=ctx.note.id,
                properties=VisualProperties(
                    position=self._position(),
                    rotation=(
                        float(self.get_property("rotationX")),
                        float(self.get_property("rotationY")),
                        0.0,
                    ),
                    scale=float(self.get_property("size")) * ctx.amplitude,
                    color=str(self.get_property("color")),
                    opacity=ctx.amplitude,
                ),
            )
        ]


class RadialDrumSynth(NoteSynthesizer):
    """Four cubes bursting out along +X, -X, +Y and -Y while the note is held."""

    type_name = "RadialDrumSynth"

    DIRECTIONS: tuple[Vec3, ...] = (
        (1.0, 0.0, 0.0),
        (-1.0, 0.0, 0.0),
        (0.0, 1.0, 0.0),
        (0.0, -1.0, 0.0),
    )

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("movementSpeed", 5.0, label="Movement Speed", min=0.0, max=50.0, step=0.5),
            color("color", "#ffffff", label="Color"),
        ]

    def render_note(self, ctx: NoteContext) -> Sequence[VisualObject]:
        distance = float(self.get_property("movementSpeed")) * ctx.time_since_start
        tint = str(self.get_property("color"))
        return [
            VisualObject(
                type="cube",
                source_note_id=ctx.note.id,
                properties=VisualProperties(
                    position=(dx * distance, dy * distance, dz * distance),
                    color=tint,
                ),
            )
            for dx, dy, dz in self.DIRECTIONS
        ]
