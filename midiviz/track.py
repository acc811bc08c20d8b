from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict

from .effect import EffectChain
from .errors import TrackRenderError
from .models import ORIGIN, MidiBlock, Vec3, VisualObject
from .synthesizer import Synthesizer

_LOGGER = logging.getLogger("midiviz.track")


@dataclass
class Track:
    id: str
    name: str
    synthesizer: Synthesizer
    effects: EffectChain = field(default_factory=EffectChain)
    blocks: list[MidiBlock] = field(default_factory=list)
    is_muted: bool = False
    is_soloed: bool = False

    def render(self, time: float, bpm: float) -> list[VisualObject]:
        return self.effects.evaluate(self.synthesizer.synthesize(time, self.blocks, bpm), time, bpm)


@dataclass(frozen=True, slots=True)
class TrackFrame:
    track_id: str
    objects: tuple[VisualObject, ...] = ()
    error: TrackRenderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RenderObject(BaseModel):
    """Flattened record handed to the renderer; every field is filled in."""

    id: str
    type: str
    position: Vec3
    rotation: Vec3
    scale: Vec3
    color: str
    opacity: float

    model_config = ConfigDict(frozen=True, extra="forbid")


def evaluate_track(track: Track, time: float, bpm: float) -> TrackFrame:
    """Run one track, turning any failure into a frame carrying the error."""
    try:
        objects = track.render(time, bpm)
    except Exception as exc:
        _LOGGER.warning("Track %s failed at t=%.3f: %s", track.id, time, exc, exc_info=True)
        return TrackFrame(track_id=track.id, error=TrackRenderError(track.id, exc))
    return TrackFrame(track_id=track.id, objects=tuple(objects))


def audible_tracks(tracks: Iterable[Track]) -> list[Track]:
    """Soloed tracks if any track is soloed, otherwise every unmuted track."""
    tracks = list(tracks)
    soloed = [track for track in tracks if track.is_soloed]
    if soloed:
        return soloed
    return [track for track in tracks if not track.is_muted]


def evaluate_tracks(tracks: Iterable[Track], time: float, bpm: float) -> list[TrackFrame]:
    return [evaluate_track(track, time, bpm) for track in audible_tracks(tracks)]


def to_render_objects(frames: Sequence[TrackFrame]) -> list[RenderObject]:
    records: list[RenderObject] = []
    for frame in frames:
        for index, obj in enumerate(frame.objects):
            props = obj.properties
            opacity = 1.0 if props.opacity is None else max(0.0, min(1.0, props.opacity))
            if opacity <= 0:
                continue
            records.append(
                RenderObject(
                    id=f"obj-{frame.track_id}-{obj.type}-{index}",
                    type=obj.type,
                    position=props.position or ORIGIN,
                    rotation=props.rotation or ORIGIN,
                    scale=obj.scale_vector(),
                    color=props.color,
                    opacity=opacity,
                )
            )
    return records
