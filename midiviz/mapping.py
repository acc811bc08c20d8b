from __future__ import annotations

from collections.abc import Iterable

from .models import MidiBlock

PITCH_MIN = 0
PITCH_MAX = 127
VELOCITY_MAX = 127


def map_value(
    value: float,
    in_min: float,
    in_max: float,
    out_min: float,
    out_max: float,
    clamp: bool = True,
) -> float:
    """Linearly map ``value`` from one range to another.

    A degenerate input range maps everything to ``out_min``.
    """
    if in_max == in_min:
        return out_min
    result = out_min + ((value - in_min) / (in_max - in_min)) * (out_max - out_min)
    if clamp:
        low, high = min(out_min, out_max), max(out_min, out_max)
        result = max(low, min(high, result))
    return result


def map_pitch_to_range(
    pitch: float,
    out_min: float,
    out_max: float,
    pitch_min: float = PITCH_MIN,
    pitch_max: float = PITCH_MAX,
) -> float:
    return map_value(pitch, pitch_min, pitch_max, out_min, out_max)


def velocity_fraction(velocity: float) -> float:
    return velocity / VELOCITY_MAX


def hsl(hue: float, saturation: float, lightness: float) -> str:
    """CSS ``hsl()`` string, hue wrapped into ``[0, 360)``."""
    wrapped = hue % 360.0
    return f"hsl({wrapped:.0f}, {saturation:.0f}%, {lightness:.0f}%)"


def pitch_span(blocks: Iterable[MidiBlock]) -> tuple[int, int] | None:
    """Lowest and highest pitch across all notes, or ``None`` without notes."""
    pitches = [note.pitch for block in blocks for note in block.notes]
    if not pitches:
        return None
    return min(pitches), max(pitches)
