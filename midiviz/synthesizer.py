from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from .envelope import GATE, Envelope, EnvelopePhase, seconds_per_beat
from .mapping import pitch_span, velocity_fraction
from .models import MidiBlock, MidiNote, VisualObject
from .properties import Property, PropertyOwner, slider

# Notes quieter than this are not emitted at all.
AMPLITUDE_EPSILON = 1e-3


@dataclass(frozen=True, slots=True)
class NoteContext:
    """Everything a synthesizer needs to draw one active note."""

    note: MidiNote
    block: MidiBlock
    time: float
    bpm: float
    time_since_start: float
    progress: float
    duration_seconds: float
    amplitude: float
    phase: EnvelopePhase
    pitch_span: tuple[int, int] | None = None

    @property
    def velocity_fraction(self) -> float:
        return velocity_fraction(self.note.velocity)

    @property
    def pitch_class(self) -> int:
        return self.note.pitch % 12


def iter_active_notes(
    time: float,
    blocks: Sequence[MidiBlock],
    bpm: float,
    envelope: Envelope = GATE,
    *,
    epsilon: float = AMPLITUDE_EPSILON,
) -> Iterator[NoteContext]:
    """Yield a context for every note audible at ``time`` (beats).

    A block is considered while ``time`` lies in its span extended by the
    release tail; a note while ``time`` lies in ``[start, end + release]``.
    Malformed blocks (``end_beat < start_beat``) and notes (``duration <= 0``)
    never yield.
    """
    spb = seconds_per_beat(bpm)
    release_beats = envelope.release_beats(bpm)
    now = time * spb
    span = pitch_span(blocks)

    for block in blocks:
        if not block.is_well_formed():
            continue
        if not block.start_beat <= time <= block.end_beat + release_beats:
            continue
        for note in block.notes:
            if not note.is_well_formed():
                continue
            start_beat = block.start_beat + note.start_beat
            end_beat = start_beat + note.duration
            if not start_beat <= time <= end_beat + release_beats:
                continue

            start = start_beat * spb
            end = end_beat * spb
            level, phase = envelope.state(now, start, end)
            if level < epsilon:
                continue

            duration_seconds = note.duration * spb
            since_start = max(0.0, now - start)
            yield NoteContext(
                note=note,
                block=block,
                time=time,
                bpm=bpm,
                time_since_start=since_start,
                progress=min(1.0, since_start / duration_seconds),
                duration_seconds=duration_seconds,
                amplitude=level,
                phase=phase,
                pitch_span=span,
            )


class Synthesizer(PropertyOwner):
    """Per-track unit turning the notes of a track into visual objects."""

    @abstractmethod
    def synthesize(self, time: float, blocks: Sequence[MidiBlock], bpm: float) -> list[VisualObject]:
        """Objects for ``time`` (beats). Must not depend on previous calls."""


class NoteSynthesizer(Synthesizer):
    """Synthesizer that draws each active note independently.

    Subclasses describe their envelope and how one note looks; the windowing,
    envelope evaluation and silence culling live here.
    """

    def envelope(self) -> Envelope:
        return GATE

    @abstractmethod
    def render_note(self, ctx: NoteContext) -> Sequence[VisualObject]:
        """Objects for one active note."""

    def synthesize(self, time: float, blocks: Sequence[MidiBlock], bpm: float) -> list[VisualObject]:
        objects: list[VisualObject] = []
        for ctx in iter_active_notes(time, blocks, bpm, self.envelope()):
            objects.extend(self.render_note(ctx))
        return objects


class AdsrSynthesizerMixin:
    """Reads the envelope from ``attack``/``decay``/``sustain``/``release`` properties."""

    def envelope(self) -> Envelope:
        get = self.get_property  # type: ignore[attr-defined]
        return Envelope(
            attack=float(get("attack")),
            decay=float(get("decay")),
            sustain=float(get("sustain")),
            release=float(get("release")),
        )


def adsr_properties(
    attack: float,
    decay: float,
    sustain: float,
    release: float,
    *,
    max_attack: float = 2.0,
    max_decay: float = 2.0,
    max_release: float = 5.0,
) -> list[Property[float]]:
    return [
        slider("attack", attack, label="Attack (s)", min=0.0, max=max_attack, step=0.005),
        slider("decay", decay, label="Decay (s)", min=0.0, max=max_decay, step=0.01),
        slider("sustain", sustain, label="Sustain Level", min=0.0, max=1.0, step=0.01),
        slider("release", release, label="Release (s)", min=0.0, max=max_release, step=0.01),
    ]
