"""
Envelope math shared by every note-driven synthesizer.

All envelope times are in seconds. Callers convert beats with
:func:`seconds_per_beat`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

from .errors import InvalidTempoError

EnvelopePhase = Literal["attack", "decay", "sustain", "release", "idle"]


def seconds_per_beat(bpm: float) -> float:
    if not bpm > 0 or math.isinf(bpm):
        raise InvalidTempoError(f"bpm must be a positive finite number, got {bpm!r}")
    return 60.0 / bpm


def envelope_state(
    t: float,
    note_start: float,
    note_end: float,
    attack: float,
    decay: float,
    sustain: float,
    release: float,
) -> tuple[float, EnvelopePhase]:
    """Return ``(amplitude, phase)`` of an ADSR envelope at time ``t``.

    Release starts at ``note_end`` whatever phase the note was in, so a note
    shorter than ``attack + decay`` has its decay cut off and no sustain.
    Zero-length phases are branched on explicitly and never divide by zero.
    """
    if t < note_start:
        return 0.0, "idle"

    if t > note_end:
        elapsed = t - note_end
        if release <= 0 or elapsed >= release:
            return 0.0, "idle"
        return max(0.0, sustain * (1.0 - elapsed / release)), "release"

    since_start = t - note_start
    if since_start < attack:
        return min(1.0, since_start / attack), "attack"

    since_decay = since_start - attack
    if since_decay < decay:
        return max(0.0, 1.0 - (1.0 - sustain) * (since_decay / decay)), "decay"

    return sustain, "sustain"


def amplitude(
    t: float,
    note_start: float,
    note_end: float,
    attack: float,
    decay: float,
    sustain: float,
    release: float,
) -> float:
    """ADSR amplitude in ``[0, 1]`` at time ``t``."""
    value, _ = envelope_state(t, note_start, note_end, attack, decay, sustain, release)
    return value


@dataclass(frozen=True, slots=True)
class Envelope:
    attack: float = 0.0
    decay: float = 0.0
    sustain: float = 1.0
    release: float = 0.0

    def state(self, t: float, note_start: float, note_end: float) -> tuple[float, EnvelopePhase]:
        return envelope_state(
            t, note_start, note_end, self.attack, self.decay, self.sustain, self.release
        )

    def amplitude(self, t: float, note_start: float, note_end: float) -> float:
        return self.state(t, note_start, note_end)[0]

    def release_beats(self, bpm: float) -> float:
        return max(0.0, self.release) / seconds_per_beat(bpm)


# Full level for exactly the note's duration.
GATE = Envelope(attack=0.0, decay=0.0, sustain=1.0, release=0.0)


def damped_oscillator(t: float, tension: float, friction: float, initial_velocity: float) -> float:
    """Displacement of a unit-mass spring kicked with ``initial_velocity`` at ``t = 0``."""
    if t < 0 or initial_velocity == 0:
        return 0.0
    tension = tension if tension > 0 else 0.1
    friction = max(0.0, friction)

    omega_n = math.sqrt(tension)
    zeta = friction / (2.0 * omega_n)

    if zeta < 1.0:
        omega_d = omega_n * math.sqrt(1.0 - zeta * zeta)
        if omega_d > 0:
            return (initial_velocity / omega_d) * math.exp(-zeta * omega_n * t) * math.sin(omega_d * t)
    elif zeta > 1.0:
        alpha = omega_n * math.sqrt(zeta * zeta - 1.0)
        if alpha > 0:
            return (initial_velocity / alpha) * math.exp(-zeta * omega_n * t) * math.sinh(alpha * t)
    # Critically damped, or a degenerate frequency from rounding.
    return initial_velocity * t * math.exp(-omega_n * t)
